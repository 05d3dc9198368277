"""
Core Layer - Resolution, merging and extraction logic.

This module contains the data models, the error taxonomy, configuration
handling and the pure components (cipher, manifest parser, title resolver,
episode merger) composed by the extraction pipeline and the service.
"""

from aniverse.core.cipher import CipherCodec
from aniverse.core.config_manager import ConfigManager
from aniverse.core.config_schemas import AppSettings
from aniverse.core.exceptions import (
    AniverseError,
    ConfigurationError,
    CryptoFailure,
    DecodeFailure,
    ExtractionError,
    InvalidArgument,
    NetworkError,
    NoMatchFound,
    ParseFailure,
    PluginError,
    RequestFailure,
)
from aniverse.core.manifest import ManifestParser, TimingConfig
from aniverse.core.merger import EpisodeMerger
from aniverse.core.models import (
    AnimeInfo,
    CatalogEntry,
    EpisodeRecord,
    ProviderMapping,
    QualityVariant,
    StreamDescriptor,
    Title,
)
from aniverse.core.pipeline import ExtractionPipeline, ExtractionSecrets
from aniverse.core.resolver import TitleResolver

__all__ = [
    # Data Models
    "AnimeInfo",
    "CatalogEntry",
    "EpisodeRecord",
    "ProviderMapping",
    "QualityVariant",
    "StreamDescriptor",
    "Title",
    # Configuration Management
    "ConfigManager",
    "AppSettings",
    # Core Components
    "CipherCodec",
    "ManifestParser",
    "TimingConfig",
    "TitleResolver",
    "EpisodeMerger",
    "ExtractionPipeline",
    "ExtractionSecrets",
    # Exceptions
    "AniverseError",
    "ConfigurationError",
    "CryptoFailure",
    "DecodeFailure",
    "ExtractionError",
    "InvalidArgument",
    "NetworkError",
    "NoMatchFound",
    "ParseFailure",
    "PluginError",
    "RequestFailure",
]
