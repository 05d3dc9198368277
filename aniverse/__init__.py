"""
Aniverse - Cross-provider anime metadata and stream resolution.

Maps works from a metadata source onto a scraping provider's catalog,
merges their subbed and dubbed episode lists and extracts playable HLS
streams, with a command-line front end built on Typer and Rich.
"""

__version__ = "0.1.0"
__author__ = "Aniverse Team"

# Package metadata
__title__ = "aniverse"
__description__ = "Cross-provider anime metadata and stream resolution"
__license__ = "MIT"

# Version info tuple for programmatic access
VERSION_INFO = tuple(map(int, __version__.split(".")))

# Export main components for easy importing
from aniverse.core.models import CatalogEntry, EpisodeRecord, StreamDescriptor, QualityVariant
from aniverse.cli.main import cli_main

__all__ = [
    "__version__",
    "__author__",
    "CatalogEntry",
    "EpisodeRecord",
    "StreamDescriptor",
    "QualityVariant",
    "cli_main",
]
