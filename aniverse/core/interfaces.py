"""
Provider Capabilities - Interfaces the core depends on.

The extraction pipeline and the service only talk to providers through
these interfaces, so another provider can be plugged in without touching
the resolver, the merger or the pipeline.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from aniverse.core.models import CatalogEntry, EpisodeRecord


class PageFetcher(ABC):
    """Anything that can fetch the text of a URL."""

    @abstractmethod
    async def fetch_page_text(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        """
        Fetch a page and return its body as text.

        Args:
            url: Absolute URL to fetch
            headers: Extra request headers

        Raises:
            RequestFailure: If the page cannot be fetched
        """


class ProviderPlugin(PageFetcher):
    """A provider exposing a searchable catalog with episode lists."""

    @abstractmethod
    async def fetch_catalog(self, query: str) -> List[CatalogEntry]:
        """
        Search the provider's catalog.

        Args:
            query: Search query string

        Returns:
            Matching catalog entries, in provider order
        """

    @abstractmethod
    async def fetch_episode_list(self, entry_id: str) -> List[EpisodeRecord]:
        """
        Fetch the episodes of one catalog entry.

        Args:
            entry_id: Provider-scoped identifier of the entry

        Returns:
            Episode records, ascending by number
        """

    @abstractmethod
    async def fetch_embed_url(self, episode: EpisodeRecord) -> str:
        """
        Resolve the URL of the player page embedding an episode's stream.

        Args:
            episode: Episode record returned by :meth:`fetch_episode_list`

        Returns:
            Absolute URL of the player page
        """


# Export interfaces
__all__ = ["PageFetcher", "ProviderPlugin"]
