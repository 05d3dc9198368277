"""
MyAnimeList Plugin - Episode titles from myanimelist.net
"""

from .plugin import MyAnimeListPlugin, plugin_metadata
from .parser import MyAnimeListParser

__all__ = [
    "MyAnimeListPlugin",
    "plugin_metadata",
    "MyAnimeListParser",
]
