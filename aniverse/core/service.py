"""
Aniverse Service - Cross-provider orchestration.

The service ties the metadata source, the scraping provider and the
episode title source together: it maps a metadata entry onto the
provider's subbed and dubbed catalog entries, merges their episode
lists and runs the extraction pipeline for a single episode.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from aniverse.core.config_schemas import AppSettings
from aniverse.core.exceptions import AniverseError, InvalidArgument, NoMatchFound
from aniverse.core.manifest import ManifestParser
from aniverse.core.merger import EpisodeMerger, sort_episodes
from aniverse.core.models import (
    AnimeInfo,
    CatalogEntry,
    EpisodeRecord,
    ProviderMapping,
    SubType,
)
from aniverse.core.pipeline import ExtractionPipeline, ExtractionSecrets
from aniverse.core.resolver import TitleResolver
from aniverse.plugins.anilist import AniListPlugin
from aniverse.plugins.gogoanime import GogoAnimePlugin
from aniverse.plugins.myanimelist import MyAnimeListPlugin


logger = logging.getLogger(__name__)

VERSION_HEADER = "Version"


class AniverseService:
    """
    High-level operations over all providers.

    The service owns its plugins; close it with :meth:`close` or use it as
    an async context manager.
    """

    def __init__(
        self,
        metadata: AniListPlugin,
        provider: GogoAnimePlugin,
        titles: Optional[MyAnimeListPlugin] = None,
        resolver: Optional[TitleResolver] = None,
        merger: Optional[EpisodeMerger] = None,
        pipeline: Optional[ExtractionPipeline] = None,
        secrets: Optional[ExtractionSecrets] = None,
    ):
        """
        Initialize the service.

        Args:
            metadata: Metadata source (AniList)
            provider: Scraping provider (GogoAnime)
            titles: Episode title source (MyAnimeList); titles are not
                overridden when omitted
            resolver: Title resolver
            merger: Episode merger
            pipeline: Extraction pipeline; built over ``provider`` when omitted
            secrets: Key material for the default pipeline
        """
        self.metadata = metadata
        self.provider = provider
        self.titles = titles
        self.resolver = resolver or TitleResolver()
        self.merger = merger or EpisodeMerger()

        if pipeline is None:
            if secrets is None:
                defaults = AppSettings().extraction
                secrets = ExtractionSecrets(
                    page_key=defaults.page_key,
                    response_key=defaults.response_key,
                    iv=defaults.iv,
                )
            pipeline = ExtractionPipeline(provider, secrets)
        self.pipeline = pipeline

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "AniverseService":
        """Build a service and its plugins from application settings."""
        network = settings.network.model_dump()
        providers = settings.providers
        extraction = settings.extraction

        provider = GogoAnimePlugin({
            **network,
            "base_url": providers.gogoanime_url,
            "ajax_url": providers.gogoanime_ajax_url,
        })
        secrets = ExtractionSecrets(
            page_key=extraction.page_key,
            response_key=extraction.response_key,
            iv=extraction.iv,
        )

        return cls(
            metadata=AniListPlugin({**network, "api_url": providers.anilist_url}),
            provider=provider,
            titles=MyAnimeListPlugin({**network, "base_url": providers.myanimelist_url}),
            resolver=TitleResolver(
                stop_words=settings.resolver.stop_words,
                dub_suffix=settings.resolver.dub_suffix,
                dub_marker=settings.resolver.dub_marker,
            ),
            pipeline=ExtractionPipeline(provider, secrets, parser=ManifestParser(extraction.timing())),
        )

    async def close(self) -> None:
        """Close the HTTP sessions of all plugins."""
        plugins = [self.metadata, self.provider, self.titles]
        await asyncio.gather(*(plugin.cleanup() for plugin in plugins if plugin is not None))

    async def __aenter__(self) -> "AniverseService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def search(self, query: str, page: int = 1, per_page: int = 10) -> List[CatalogEntry]:
        """
        Search the metadata source.

        A purely numeric query is treated as an AniList id.
        """
        query = query.strip()
        if query.isdigit():
            return [await self.metadata.get_media(int(query))]
        return await self.metadata.search(query, page=page, per_page=per_page)

    async def _map_entry(self, entry: CatalogEntry) -> ProviderMapping:
        query = self.resolver.search_query(entry.title)
        if not query:
            raise NoMatchFound(f"Entry {entry.id} has no title to search for", query=entry.id)

        results = await self.provider.fetch_catalog(query)

        sub = self._resolve_side(entry, results, SubType.SUB)
        dub = self._resolve_side(entry, results, SubType.DUB)

        logger.info(
            f"Mapped {entry.id} to sub={sub.id if sub else None}, dub={dub.id if dub else None}"
        )
        return ProviderMapping(sub=sub, dub=dub)

    def _resolve_side(self, entry: CatalogEntry, results: List[CatalogEntry], side: SubType) -> Optional[CatalogEntry]:
        if side is SubType.DUB:
            title = self.resolver.dub_title(entry.title)
            candidates = self.resolver.dub_candidates(results)
        else:
            title = entry.title
            candidates = results

        try:
            return self.resolver.resolve_entry(title, candidates)
        except NoMatchFound:
            logger.info(f"No {side} match for '{entry.title}'")
            return None

    async def map_providers(self, anilist_id: int) -> ProviderMapping:
        """
        Map a metadata entry onto the provider's sub and dub entries.

        A side without a match is None.
        """
        entry = await self.metadata.get_media(anilist_id)
        return await self._map_entry(entry)

    async def _episode_list(self, entry: Optional[CatalogEntry]) -> List[EpisodeRecord]:
        if entry is None:
            return []
        return await self.provider.fetch_episode_list(entry.id)

    async def _episode_titles(self, entry: CatalogEntry, episode_number: int = 0) -> Dict[int, str]:
        """Episode titles from the title source; failures are logged, never raised."""
        if self.titles is None or entry.id_mal is None:
            return {}

        slug_title = entry.title.english or entry.title.romaji
        try:
            return await self.titles.get_episode_titles(entry.id_mal, slug_title, episode_number)
        except AniverseError as e:
            logger.warning(f"Could not fetch episode titles for MAL id {entry.id_mal}: {e}")
            return {}

    async def _merged_episodes(self, entry: CatalogEntry) -> List[EpisodeRecord]:
        mapping = await self._map_entry(entry)

        sub_episodes, dub_episodes, overrides = await asyncio.gather(
            self._episode_list(mapping.sub),
            self._episode_list(mapping.dub),
            self._episode_titles(entry),
        )

        merged = self.merger.merge_episode_lists(sub_episodes, dub_episodes, overrides)
        return sort_episodes(merged)

    async def get_episodes(self, anilist_id: int) -> List[EpisodeRecord]:
        """Canonical episode list of a work, ascending by number."""
        entry = await self.metadata.get_media(anilist_id)
        return await self._merged_episodes(entry)

    async def get_anime_info(self, anilist_id: int) -> AnimeInfo:
        """Metadata entry together with its canonical episode list."""
        entry = await self.metadata.get_media(anilist_id)
        episodes = await self._merged_episodes(entry)
        return AnimeInfo.model_validate({**entry.model_dump(), "episodes": episodes})

    def _pick_version(self, mapping: ProviderMapping) -> Tuple[CatalogEntry, SubType]:
        if mapping.sub is not None:
            return mapping.sub, SubType.SUB
        if mapping.dub is not None:
            return mapping.dub, SubType.DUB
        raise NoMatchFound("No provider entry found for this anime")

    async def watch(self, anilist_id: int, episode_number: int) -> EpisodeRecord:
        """
        Resolve the playable streams of one episode.

        The subbed version is preferred; the dubbed one is used when the
        provider has no subbed entry. The chosen version is reported in
        the descriptor's ``Version`` header.

        Raises:
            InvalidArgument: If the episode number is not positive
            NoMatchFound: If the work or the episode cannot be found
        """
        if episode_number < 1:
            raise InvalidArgument("Episode number must be a positive integer", field_name="ep")

        entry = await self.metadata.get_media(anilist_id)
        mapping = await self._map_entry(entry)
        chosen, version = self._pick_version(mapping)
        logger.info(f"Selected provider entry {chosen.id} ({version})")

        episodes = await self.provider.fetch_episode_list(chosen.id)
        episode = next((item for item in episodes if item.number == episode_number), None)
        if episode is None:
            raise NoMatchFound(f"Episode number {episode_number} not found", query=str(episode_number))

        embed_url = await self.provider.fetch_embed_url(episode)
        logger.debug(f"Player page for episode {episode_number}: {embed_url}")

        source = await self.pipeline.extract(embed_url, headers={VERSION_HEADER: str(version)})

        update = {"source": source, "series": entry.title}
        titles = await self._episode_titles(entry, episode_number)
        if titles.get(episode_number):
            update["title"] = titles[episode_number]

        return episode.model_copy(update=update)


# Export service
__all__ = ["AniverseService", "VERSION_HEADER"]
