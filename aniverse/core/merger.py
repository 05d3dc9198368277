"""
Episode Merger - Reconciles per-provider episode lists.

Subtitled and dubbed episode lists are combined by episode number, the
only key the providers share. Dubbed stream URLs are attached to the
matching subtitled quality, and episode titles from a third source can
override whatever the providers reported.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from aniverse.core.models import EpisodeRecord, QualityVariant


logger = logging.getLogger(__name__)

EpisodeInput = Union[EpisodeRecord, Mapping[str, Any]]


def sort_episodes(episodes: Iterable[EpisodeRecord]) -> List[EpisodeRecord]:
    """Order episodes by number for presentation."""
    return sorted(episodes, key=lambda episode: episode.number)


class EpisodeMerger:
    """Merges subtitled and dubbed episode records into canonical records."""

    @staticmethod
    def merge_stream_variants(
        sub_variants: Sequence[QualityVariant],
        dub_variants: Sequence[QualityVariant],
    ) -> List[QualityVariant]:
        """
        Attach dubbed URLs to subtitled variants of the same quality.

        The subtitled list is the base: a dubbed quality without a
        subtitled counterpart is not emitted.

        Args:
            sub_variants: Variants of the subtitled stream
            dub_variants: Variants of the dubbed stream

        Returns:
            Subtitled variants, with ``dub_url`` set where a dubbed variant
            carries the same name
        """
        merged = []
        for sub_variant in sub_variants:
            dub_url = sub_variant.dub_url
            for dub_variant in dub_variants:
                if dub_variant.name == sub_variant.name:
                    dub_url = dub_variant.url
            if dub_url != sub_variant.dub_url:
                sub_variant = sub_variant.model_copy(update={"dub_url": dub_url})
            merged.append(sub_variant)
        return merged

    @staticmethod
    def _coerce(item: EpisodeInput, side: str) -> Optional[EpisodeRecord]:
        """Validate one input record; malformed ones are logged and skipped."""
        if isinstance(item, EpisodeRecord):
            return item

        if not isinstance(item, Mapping):
            logger.warning(f"Dropping {side} episode of unexpected type {type(item).__name__}")
            return None

        try:
            return EpisodeRecord.model_validate(dict(item))
        except ValidationError as e:
            logger.warning(
                f"Dropping {side} episode with missing or invalid number "
                f"({item.get('number', item.get('episode'))!r}): {e.error_count()} validation error(s)"
            )
            return None

    def _merge_dub_into(self, existing: EpisodeRecord, dub_episode: EpisodeRecord) -> EpisodeRecord:
        update: Dict[str, Any] = {"has_dub": True}

        if existing.source is not None and dub_episode.source is not None:
            merged_sources = self.merge_stream_variants(existing.source.sources, dub_episode.source.sources)
            update["source"] = existing.source.model_copy(update={"sources": tuple(merged_sources)})

        return existing.model_copy(update=update)

    def merge_episode_lists(
        self,
        sub_episodes: Iterable[EpisodeInput],
        dub_episodes: Iterable[EpisodeInput],
        title_overrides: Optional[Mapping[int, str]] = None,
    ) -> List[EpisodeRecord]:
        """
        Combine subtitled and dubbed episode lists by episode number.

        Subtitled records come first with ``has_dub`` cleared. A dubbed
        record for an existing number marks it dubbed and contributes its
        stream URLs; a dubbed record for a new number is inserted as is.
        Finally every number found in ``title_overrides`` takes that title.
        Records without a usable number are dropped; episode 0 counts as one.

        The result is keyed by number and carries no ordering guarantee;
        use :func:`sort_episodes` when presentation order matters.

        Args:
            sub_episodes: Subtitled episode records or mappings
            dub_episodes: Dubbed episode records or mappings
            title_overrides: Episode titles from a third source, keyed by number

        Returns:
            Canonical episode records
        """
        episodes: Dict[int, EpisodeRecord] = {}

        for item in sub_episodes:
            episode = self._coerce(item, "sub")
            if episode is None:
                continue
            if episode.number in episodes:
                logger.warning(f"Duplicate sub episode number {episode.number}, keeping the later record")
            episodes[episode.number] = episode.model_copy(update={"has_dub": False})

        for item in dub_episodes:
            dub_episode = self._coerce(item, "dub")
            if dub_episode is None:
                continue

            existing = episodes.get(dub_episode.number)
            if existing is not None:
                episodes[dub_episode.number] = self._merge_dub_into(existing, dub_episode)
            else:
                episodes[dub_episode.number] = dub_episode.model_copy(update={"has_dub": True})

        if title_overrides:
            for number, episode in episodes.items():
                if number in title_overrides:
                    # Blank overrides clear the title, as the model does for blank titles
                    title = title_overrides[number] or None
                    episodes[number] = episode.model_copy(update={"title": title})

        logger.debug(f"Merged into {len(episodes)} episodes")
        return list(episodes.values())


# Export merger
__all__ = ["EpisodeMerger", "sort_episodes"]
