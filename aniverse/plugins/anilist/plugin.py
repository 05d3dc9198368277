"""
AniList Plugin - Metadata client for the AniList GraphQL API.

AniList is the metadata source of record: its ids address works in the
CLI and its three-way titles drive the cross-provider resolution.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from aniverse.core.exceptions import InvalidArgument, NetworkError, NoMatchFound
from aniverse.core.models import CatalogEntry
from aniverse.plugins.base import BasePlugin, PluginMetadata

from .parser import MEDIA_QUERY, SEARCH_QUERY, AniListParser


logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://graphql.anilist.co"
ORIGIN = "https://anilist.co"

DEFAULT_FORMATS = ("TV", "TV_SHORT", "MOVIE", "SPECIAL", "OVA", "ONA")

plugin_metadata = PluginMetadata(
    name="AniList",
    version="1.0.0",
    description="Anime metadata from the AniList GraphQL API",
    website=ORIGIN,
)


class AniListPlugin(BasePlugin):
    """AniList GraphQL client."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize AniList plugin.

        Args:
            config: Transport settings plus an optional ``api_url`` override
        """
        super().__init__(config)
        self.api_url = self.config.get('api_url', DEFAULT_API_URL).rstrip("/")
        self.parser = AniListParser()

    @property
    def metadata(self) -> PluginMetadata:
        return plugin_metadata

    @property
    def base_url(self) -> str:
        return self.api_url

    async def _query(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        headers = {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'Origin': ORIGIN,
        }
        return await self._post_json(self.api_url, {"query": query, "variables": variables}, headers=headers)

    async def search(
        self,
        query: str,
        page: int = 1,
        per_page: int = 10,
        formats: Sequence[str] = DEFAULT_FORMATS,
    ) -> List[CatalogEntry]:
        """
        Search anime by title.

        Args:
            query: Search query string
            page: 1-based result page
            per_page: Results per page
            formats: Media formats to include

        Returns:
            Matching entries, adult media excluded

        Raises:
            InvalidArgument: If the query or paging is invalid
        """
        if not query or not query.strip():
            raise InvalidArgument("Search query cannot be empty", field_name="query")
        if page < 1 or per_page < 1:
            raise InvalidArgument("page and per_page must be positive", field_name="page")

        variables = {
            "search": query.strip(),
            "type": "ANIME",
            "format": list(formats),
            "page": page,
            "perPage": per_page,
        }
        response = await self._query(SEARCH_QUERY, variables)
        results = self.parser.parse_search(response)

        self.logger.info(f"Found {len(results)} AniList results for '{query}'")
        return results

    async def get_media(self, anilist_id: int) -> CatalogEntry:
        """
        Fetch one work by AniList id.

        Raises:
            NoMatchFound: If the id is unknown or refers to adult media
        """
        try:
            media_id = int(anilist_id)
        except (TypeError, ValueError) as e:
            raise InvalidArgument(f"Invalid AniList id: {anilist_id!r}", field_name="id") from e

        try:
            response = await self._query(MEDIA_QUERY, {"id": media_id})
        except NetworkError as e:
            if e.http_status == 404:
                raise NoMatchFound(f"AniList has no media with id {anilist_id}", query=str(anilist_id)) from e
            raise

        media = self.parser.media_of(response)
        if media is None:
            raise NoMatchFound(f"AniList has no media with id {anilist_id}", query=str(anilist_id))
        if media.get("isAdult"):
            raise NoMatchFound(f"Media {anilist_id} is adult content", query=str(anilist_id))

        return self.parser.parse_media(media)


# Export plugin
__all__ = ["AniListPlugin", "plugin_metadata"]
