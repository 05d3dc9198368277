"""
Scraping helpers shared by the provider plugins.

``HTMLParser`` wraps BeautifulSoup with CSS-selector lookups that return
plain strings, ``URLHelper`` normalizes the links scraped pages contain
and ``TextCleaner`` tidies labels and descriptions.
"""

import re
from typing import List, Optional, Union
from urllib.parse import parse_qs, urljoin, urlparse

from bs4 import BeautifulSoup, Tag


URL_ATTRIBUTES = ("href", "src")

_WHITESPACE = re.compile(r"\s+")
_LINE_BREAK = re.compile(r"<br\s*/?>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")


class HTMLParser:
    """A parsed page with string-returning selector helpers."""

    def __init__(self, html_content: str, base_url: str = ""):
        """
        Args:
            html_content: Page markup
            base_url: Page address, used when ``resolve=True`` asks for
                absolute links
        """
        self.soup = BeautifulSoup(html_content, "html.parser")
        self.base_url = base_url

    def select(self, selector: str) -> List[Tag]:
        return self.soup.select(selector)

    def _first(self, selector: str, scope: Optional[Tag]) -> Optional[Tag]:
        return (scope or self.soup).select_one(selector)

    def find_text(self, selector: str, default: str = "", scope: Optional[Tag] = None) -> str:
        """Stripped text of the first match, or ``default``."""
        element = self._first(selector, scope)
        return element.get_text(strip=True) if element is not None else default

    def find_attr(
        self,
        selector: str,
        attr: str,
        default: str = "",
        scope: Optional[Tag] = None,
        resolve: bool = False,
    ) -> str:
        """
        Attribute ``attr`` of the first match.

        ``scope`` narrows the search to one element, e.g. a result row.
        With ``resolve`` set, ``href`` and ``src`` values come back absolute.
        """
        element = self._first(selector, scope)
        if element is None:
            return default
        return self.attr_of(element, attr, default, resolve=resolve)

    def attr_of(self, element: Tag, attr: str, default: str = "", resolve: bool = False) -> str:
        raw = element.get(attr)
        if raw is None:
            return default

        # Multi-valued attributes such as class come back as lists
        if isinstance(raw, list):
            raw = raw[0] if raw else ""
        value = raw.strip()

        if value and resolve and self.base_url and attr in URL_ATTRIBUTES:
            value = URLHelper.make_absolute(value, self.base_url)
        return value

    def find_all_text(self, selector: str) -> List[str]:
        return [node.get_text(strip=True) for node in self.select(selector)]


class URLHelper:
    """Link normalization for scraped pages."""

    @staticmethod
    def make_absolute(url: str, base_url: str) -> str:
        """
        Resolve ``url`` against ``base_url``.

        Protocol-relative links (``//cdn/...``) borrow the scheme of
        ``base_url``, falling back to https.
        """
        url = url.strip()
        if url.startswith("//"):
            return f"{urlparse(base_url).scheme or 'https'}:{url}"
        if urlparse(url).netloc:
            return url
        return urljoin(base_url, url)

    @staticmethod
    def get_query_param(url: str, param: str, default: str = "") -> str:
        values = parse_qs(urlparse(url).query).get(param)
        return values[0] if values else default

    @staticmethod
    def strip_prefix(path: str, prefix: str) -> str:
        """Drop a leading ``prefix`` such as ``/category/``."""
        path = path.strip()
        return path[len(prefix):] if path.startswith(prefix) else path


class TextCleaner:
    """Normalization of scraped labels and API descriptions."""

    @staticmethod
    def clean_whitespace(text: str) -> str:
        return _WHITESPACE.sub(" ", text or "").strip()

    @staticmethod
    def extract_number(text: str) -> Optional[int]:
        """First run of digits in ``text`` (``EP 12`` gives 12), else None."""
        match = re.search(r"\d+", text or "")
        return int(match.group()) if match else None

    @staticmethod
    def extract_year(text: str) -> Optional[int]:
        match = re.search(r"\b(\d{4})\b", text or "")
        return int(match.group(1)) if match else None

    @staticmethod
    def clean_description(description: Optional[str]) -> Optional[str]:
        """
        Plain-text version of an HTML description.

        ``<br>`` becomes a newline, other tags are removed and blank lines
        dropped. Returns None when no text remains.
        """
        if not description:
            return None

        text = _TAG.sub("", _LINE_BREAK.sub("\n", description))
        lines = (TextCleaner.clean_whitespace(line) for line in text.splitlines())
        return "\n".join(line for line in lines if line) or None


def as_int(value: Union[str, int, float, None]) -> Optional[int]:
    """Coerce a loosely typed API number, mapping anything unusable to None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


__all__ = [
    "HTMLParser",
    "URLHelper",
    "TextCleaner",
    "as_int",
]
