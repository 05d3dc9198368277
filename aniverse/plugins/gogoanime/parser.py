"""
GogoAnime HTML Parser

This module extracts catalog entries, episode lists and player URLs from
GogoAnime pages. It performs no I/O; the plugin fetches the pages.
"""

import logging
from typing import Any, Dict, List, NamedTuple, Optional

from aniverse.core.exceptions import ExtractionError, NoContent
from aniverse.core.models import CatalogEntry, Title
from aniverse.plugins.common import HTMLParser, TextCleaner, URLHelper


logger = logging.getLogger(__name__)

CATEGORY_PREFIX = "/category/"
DUB_ID_MARKER = "-dub"
EPISODE_PREFIX = "EP"


class EpisodeRange(NamedTuple):
    """Parameters of the AJAX episode list request, read from a category page."""

    ep_start: str
    ep_end: str
    movie_id: str
    alias: str


class GogoAnimeParser:
    """Parser for GogoAnime HTML pages."""

    def __init__(self, base_url: str = "https://gogoanime3.co"):
        """
        Initialize parser.

        Args:
            base_url: Base URL for resolving relative links
        """
        self.base_url = base_url

    def parse_search_results(self, html: str) -> List[CatalogEntry]:
        """
        Parse the search results page.

        The site publishes a single title per entry, so it fills all three
        title fields.

        Args:
            html: Search results page HTML

        Returns:
            Catalog entries in page order
        """
        page = HTMLParser(html, self.base_url)
        results = []

        for item in page.select("ul.items > li"):
            href = page.find_attr("div.img a", "href", scope=item)
            if not href:
                continue

            entry_id = URLHelper.strip_prefix(href, CATEGORY_PREFIX)
            if not entry_id:
                continue

            name = TextCleaner.clean_whitespace(page.find_text("p.name a", scope=item))
            cover = page.find_attr("div.img a img", "src", scope=item, resolve=True) or None

            results.append(
                CatalogEntry(
                    id=entry_id,
                    title=Title(english=name, romaji=name, native=name),
                    cover_image=cover,
                    year=TextCleaner.extract_year(page.find_text("p.released", scope=item)),
                    format="TV",
                    source="gogoanime",
                )
            )

        logger.debug(f"Parsed {len(results)} search results")
        return results

    def parse_category_page(self, html: str) -> EpisodeRange:
        """
        Read the episode range and identifiers from a category page.

        Raises:
            ExtractionError: If the page has no movie id
        """
        page = HTMLParser(html, self.base_url)

        ranges = page.select("#episode_page li a")
        ep_start = page.attr_of(ranges[0], "ep_start", "0") if ranges else "0"
        ep_end = page.attr_of(ranges[-1], "ep_end", "0") if ranges else "0"

        movie_id = page.find_attr("#movie_id", "value")
        if not movie_id:
            raise ExtractionError("Category page does not contain a movie id")

        alias = page.find_attr("#alias_anime", "value")
        return EpisodeRange(ep_start=ep_start, ep_end=ep_end, movie_id=movie_id, alias=alias)

    def parse_episode_list(self, html: str, entry_id: str) -> List[Dict[str, Any]]:
        """
        Parse the AJAX episode list.

        The list is served newest first; the result is ascending. An
        episode whose number cannot be read gets ``None`` as its number.

        Args:
            html: AJAX response HTML
            entry_id: Catalog entry the list belongs to

        Returns:
            Raw episode data
        """
        page = HTMLParser(html, self.base_url)
        has_dub = DUB_ID_MARKER in entry_id
        episodes = []

        for item in page.select("#episode_related li"):
            href = page.find_attr("a", "href", scope=item)
            if not href:
                continue

            label = page.find_text("div.name", scope=item)
            number = self._episode_number(label)
            if number is None:
                logger.warning(f"Unreadable episode number '{label}' for {href}")

            episodes.append({
                "id": href,
                "number": number,
                "has_dub": has_dub,
                "is_filler": False,
            })

        episodes.reverse()
        logger.debug(f"Parsed {len(episodes)} episodes for {entry_id}")
        return episodes

    @staticmethod
    def _episode_number(label: str) -> Optional[int]:
        text = label.strip()
        if text.upper().startswith(EPISODE_PREFIX):
            text = text[len(EPISODE_PREFIX):].strip()
        if not text.isdigit():
            return None
        return int(text)

    def parse_embed_url(self, html: str) -> str:
        """
        Find the player page URL on an episode page.

        Raises:
            NoContent: If the page has no player iframe
        """
        page = HTMLParser(html, self.base_url)
        src = page.find_attr("iframe", "src")
        if not src:
            raise NoContent("No player iframe found on episode page")
        return URLHelper.make_absolute(src, self.base_url)


# Export parser
__all__ = ["GogoAnimeParser", "EpisodeRange"]
