"""
AniList Plugin - Metadata source backed by graphql.anilist.co
"""

from .plugin import AniListPlugin, plugin_metadata
from .parser import AniListParser

__all__ = [
    "AniListPlugin",
    "plugin_metadata",
    "AniListParser",
]
