"""
GogoAnime Plugin - Scraping provider for gogoanime3.co

This plugin provides catalog search, episode listing and player page
lookup for the subbed and dubbed catalogs of GogoAnime.
"""

from .plugin import GogoAnimePlugin, plugin_metadata
from .parser import GogoAnimeParser, EpisodeRange

__all__ = [
    "GogoAnimePlugin",
    "plugin_metadata",
    "GogoAnimeParser",
    "EpisodeRange",
]
