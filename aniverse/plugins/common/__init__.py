"""
Common utilities for plugin development.

This package contains shared utilities and helper functions
used across multiple plugins.
"""

from .utils import (
    HTMLParser,
    URLHelper,
    TextCleaner,
)

__all__ = [
    "HTMLParser",
    "URLHelper",
    "TextCleaner",
]
