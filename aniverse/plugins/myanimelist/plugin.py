"""
MyAnimeList Plugin - Episode title source.

The scraping provider publishes episode numbers only; MyAnimeList
supplies the titles that override them in merged episode lists.
"""

import logging
from typing import Any, Dict, Optional

from aniverse.core.exceptions import InvalidArgument, NoMatchFound
from aniverse.core.utils import title_slug
from aniverse.plugins.base import BasePlugin, PluginMetadata

from .parser import MyAnimeListParser


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://myanimelist.net"

plugin_metadata = PluginMetadata(
    name="MyAnimeList",
    version="1.0.0",
    description="Episode titles from MyAnimeList episode pages",
    website=DEFAULT_BASE_URL,
)


class MyAnimeListPlugin(BasePlugin):
    """MyAnimeList episode page client."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize MyAnimeList plugin.

        Args:
            config: Transport settings plus an optional ``base_url`` override
        """
        super().__init__(config)
        self._base_url = self.config.get('base_url', DEFAULT_BASE_URL).rstrip("/")
        self.parser = MyAnimeListParser()

    @property
    def metadata(self) -> PluginMetadata:
        return plugin_metadata

    @property
    def base_url(self) -> str:
        return self._base_url

    async def get_episode_titles(self, mal_id: int, title: str, episode_number: int = 0) -> Dict[int, str]:
        """
        Fetch episode titles of a work.

        Args:
            mal_id: MyAnimeList id of the work
            title: Title used to build the page slug
            episode_number: When this episode is listed, only its title is
                returned; 0 returns all titles

        Returns:
            Episode titles keyed by episode number

        Raises:
            InvalidArgument: If no title is given for the slug
            NoMatchFound: If the page lists no episodes
        """
        if not title or not title.strip():
            raise InvalidArgument("A title is required to address MyAnimeList pages", field_name="title")

        url = f"{self.base_url}/anime/{mal_id}/{title_slug(title)}/episode"
        html = await self._get_text(url)

        titles = self.parser.parse_episode_titles(html)
        if not titles:
            raise NoMatchFound(f"No episode titles found on MyAnimeList page {url}", query=str(mal_id))

        if episode_number in titles:
            return {episode_number: titles[episode_number]}

        self.logger.debug(f"Fetched {len(titles)} episode titles for MAL id {mal_id}")
        return titles


# Export plugin
__all__ = ["MyAnimeListPlugin", "plugin_metadata"]
