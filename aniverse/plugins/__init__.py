"""
Plugin Layer - Provider client implementations.

This package contains the shared HTTP transport and the clients for the
metadata source, the scraping provider and the episode title source.
"""

from aniverse.plugins.base import BasePlugin, PluginMetadata
from aniverse.plugins.common import (
    HTMLParser,
    URLHelper,
    TextCleaner,
)

__all__ = [
    # Base Plugin Architecture
    "BasePlugin",
    "PluginMetadata",
    # Plugin Development Utilities
    "HTMLParser",
    "URLHelper",
    "TextCleaner",
]
