"""
GogoAnime Plugin - Scraping provider client for GogoAnime.

This module implements the catalog search, episode listing and player
page lookup of the scraping provider. Stream extraction itself lives in
the core extraction pipeline, which uses this plugin as its fetcher.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote_plus, urlencode

from pydantic import ValidationError

from aniverse.core.exceptions import AniverseError, PluginError
from aniverse.core.interfaces import ProviderPlugin
from aniverse.core.models import CatalogEntry, EpisodeRecord
from aniverse.plugins.base import BasePlugin, PluginMetadata

from .parser import CATEGORY_PREFIX, GogoAnimeParser


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://gogoanime3.co"
DEFAULT_AJAX_URL = "https://ajax.gogocdn.net"

plugin_metadata = PluginMetadata(
    name="GogoAnime",
    version="1.0.0",
    description="Scraping provider with subbed and dubbed catalogs",
    website=DEFAULT_BASE_URL,
)


class GogoAnimePlugin(BasePlugin, ProviderPlugin):
    """
    GogoAnime client.

    Subbed and dubbed versions of a work are separate catalog entries;
    dubbed entries carry ``(Dub)`` in their title and ``-dub`` in their id.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize GogoAnime plugin.

        Args:
            config: Transport settings plus optional ``base_url`` and
                ``ajax_url`` overrides
        """
        super().__init__(config)

        self._base_url = self.config.get('base_url', DEFAULT_BASE_URL).rstrip("/")
        self.ajax_url = self.config.get('ajax_url', DEFAULT_AJAX_URL).rstrip("/")
        self.parser = GogoAnimeParser(base_url=self._base_url)

    @property
    def metadata(self) -> PluginMetadata:
        return plugin_metadata

    @property
    def base_url(self) -> str:
        return self._base_url

    async def fetch_catalog(self, query: str) -> List[CatalogEntry]:
        """
        Search GogoAnime.

        Raises:
            PluginError: If the query is empty or the results cannot be parsed
            NetworkError: If the search page cannot be fetched
        """
        if not query or not query.strip():
            raise PluginError("Search query cannot be empty", plugin_name=self.metadata.name)

        search_url = f"{self.base_url}/search.html?keyword={quote_plus(query.strip())}"
        self.logger.debug(f"Searching GogoAnime with URL: {search_url}")

        html = await self._get_text(search_url)
        try:
            results = self.parser.parse_search_results(html)
        except AniverseError:
            raise
        except Exception as e:
            raise PluginError(f"Search failed for query '{query}': {e}", plugin_name=self.metadata.name) from e

        self.logger.info(f"Found {len(results)} results for '{query}'")
        return results

    async def fetch_episode_list(self, entry_id: str) -> List[EpisodeRecord]:
        """
        Fetch the episodes of a catalog entry.

        Episodes whose number cannot be read are logged and dropped.

        Raises:
            NetworkError: If a page cannot be fetched
            ExtractionError: If the category page lacks its identifiers
        """
        path = entry_id if entry_id.startswith("/") else CATEGORY_PREFIX + entry_id
        category_html = await self._get_text(path)
        episode_range = self.parser.parse_category_page(category_html)

        query = urlencode({
            "ep_start": episode_range.ep_start,
            "ep_end": episode_range.ep_end,
            "id": episode_range.movie_id,
            "default_ep": 0,
            "alias": episode_range.alias,
        })
        ajax_url = f"{self.ajax_url}/ajax/load-list-episode?{query}"
        self.logger.debug(f"Constructed AJAX URL: {ajax_url}")

        list_html = await self._get_text(ajax_url)

        episodes = []
        for raw in self.parser.parse_episode_list(list_html, entry_id):
            try:
                episodes.append(EpisodeRecord.model_validate(raw))
            except ValidationError as e:
                self.logger.warning(f"Skipping episode {raw.get('id')}: {e.error_count()} validation error(s)")

        self.logger.info(f"Fetched {len(episodes)} episodes for {entry_id}")
        return episodes

    async def fetch_embed_url(self, episode: EpisodeRecord) -> str:
        """Resolve the player page URL of an episode."""
        html = await self._get_text(episode.id.strip())
        return self.parser.parse_embed_url(html)


# Export plugin
__all__ = ["GogoAnimePlugin", "plugin_metadata"]
