"""
MyAnimeList HTML Parser

Reads episode numbers and titles from a MyAnimeList episode list page.
"""

import logging
from typing import Dict

from aniverse.plugins.common import HTMLParser, TextCleaner


logger = logging.getLogger(__name__)


class MyAnimeListParser:
    """Parser for MyAnimeList episode list pages."""

    def parse_episode_titles(self, html: str) -> Dict[int, str]:
        """
        Parse episode titles keyed by episode number.

        Rows without a readable number are skipped.
        """
        page = HTMLParser(html)
        titles: Dict[int, str] = {}

        for row in page.select("tr.episode-list-data"):
            number_text = page.find_text("td.episode-number", scope=row)
            number = TextCleaner.extract_number(number_text)
            if number is None:
                logger.debug(f"Skipping episode row with number '{number_text}'")
                continue

            titles[number] = TextCleaner.clean_whitespace(page.find_text("td.episode-title a", scope=row))

        return titles


# Export parser
__all__ = ["MyAnimeListParser"]
