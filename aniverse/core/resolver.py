"""
Title Resolver - Fuzzy cross-provider title matching.

Providers share no identifiers, so a metadata entry is mapped onto a
scraping provider's catalog by comparing titles. Titles are sanitized
identically on both sides and scored with Jaro-Winkler similarity; a
match is always the best score, never an equality test.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from aniverse.core.exceptions import NoMatchFound
from aniverse.core.models import CatalogEntry, Title


logger = logging.getLogger(__name__)

DEFAULT_STOP_WORDS = ("season", "part", "cour")
DEFAULT_DUB_SUFFIX = "dub"
DEFAULT_DUB_MARKER = "(dub)"

PREFIX_LIMIT = 4
PREFIX_SCALE = 0.1

# Evaluation order doubles as the tie-break priority
FIELD_PRIORITY = ("romaji", "english", "native")


def jaro_winkler(s1: str, s2: str) -> float:
    """
    Jaro-Winkler similarity of two strings, in [0.0, 1.0].

    Strings are compared as given; callers normalize case beforehand.
    """
    len1, len2 = len(s1), len(s2)

    if len1 == 0 and len2 == 0:
        return 1.0
    if len1 == 0 or len2 == 0:
        return 0.0

    match_distance = max(0, max(len1, len2) // 2 - 1)

    s1_matches = [False] * len1
    s2_matches = [False] * len2
    matches = 0

    for i in range(len1):
        start = max(0, i - match_distance)
        end = min(len2 - 1, i + match_distance)
        for j in range(start, end + 1):
            if s2_matches[j] or s1[i] != s2[j]:
                continue
            s1_matches[i] = True
            s2_matches[j] = True
            matches += 1
            break

    if matches == 0:
        return 0.0

    transpositions = 0
    k = 0
    for i in range(len1):
        if not s1_matches[i]:
            continue
        while not s2_matches[k]:
            k += 1
        if s1[i] != s2[k]:
            transpositions += 1
        k += 1
    transpositions //= 2

    jaro = (
        matches / len1
        + matches / len2
        + (matches - transpositions) / matches
    ) / 3

    prefix = 0
    for a, b in zip(s1[:PREFIX_LIMIT], s2[:PREFIX_LIMIT]):
        if a != b:
            break
        prefix += 1

    return jaro + prefix * PREFIX_SCALE * (1 - jaro)


class TitleResolver:
    """
    Maps titles from one provider onto another provider's catalog.

    All scoring goes through :meth:`sanitize` on both sides, so stop words
    and case never influence a match.
    """

    def __init__(
        self,
        stop_words: Iterable[str] = DEFAULT_STOP_WORDS,
        dub_suffix: str = DEFAULT_DUB_SUFFIX,
        dub_marker: str = DEFAULT_DUB_MARKER,
    ):
        """
        Initialize resolver.

        Args:
            stop_words: Words dropped from titles before comparison
            dub_suffix: Token appended to titles when looking for dubs
            dub_marker: Text identifying dubbed entries in a catalog
        """
        self.stop_words = frozenset(word.lower() for word in stop_words)
        self.dub_suffix = dub_suffix
        self.dub_marker = dub_marker.lower()

    def sanitize(self, title: Optional[str]) -> str:
        """Lowercase a title and drop stop words (whole words only)."""
        if not title:
            return ""
        words = title.lower().split()
        return " ".join(word for word in words if word not in self.stop_words)

    @staticmethod
    def similarity(a: str, b: str) -> float:
        """Jaro-Winkler similarity of two already-sanitized strings."""
        return jaro_winkler(a, b)

    def score(self, a: Optional[str], b: Optional[str]) -> float:
        """Similarity of two raw titles after sanitizing both."""
        return self.similarity(self.sanitize(a), self.sanitize(b))

    def _best(self, query: Optional[str], candidates: Sequence[str]) -> Tuple[str, float]:
        clean_query = self.sanitize(query)
        best_candidate = candidates[0]
        best_score = self.similarity(clean_query, self.sanitize(best_candidate))

        for candidate in candidates[1:]:
            score = self.similarity(clean_query, self.sanitize(candidate))
            # Strict comparison keeps the first-seen candidate on ties
            if score > best_score:
                best_candidate, best_score = candidate, score

        return best_candidate, best_score

    def best_match(self, query: Optional[str], candidates: Sequence[str]) -> str:
        """
        Pick the candidate most similar to the query.

        Raises:
            NoMatchFound: If there are no candidates
        """
        if not candidates:
            raise NoMatchFound("No candidates to match against", query=query)
        return self._best(query, candidates)[0]

    def resolve(self, title: Title, candidates: Sequence[str]) -> str:
        """
        Resolve a three-way title against a pool of candidate titles.

        The best candidate is chosen independently for the romaji, english
        and native fields; the field with the highest score wins, ties going
        to romaji, then english, then native.

        Raises:
            NoMatchFound: If the pool is empty or nothing scored above zero
        """
        if not candidates:
            raise NoMatchFound("No candidates to resolve against", query=str(title))

        fields = title.by_field()
        winner: Optional[Tuple[str, float]] = None
        winning_field = FIELD_PRIORITY[0]

        for field in FIELD_PRIORITY:
            candidate, score = self._best(fields[field], candidates)
            logger.debug(f"Best {field} match for '{fields[field]}': '{candidate}' ({score:.3f})")
            if winner is None or score > winner[1]:
                winner = (candidate, score)
                winning_field = field

        if winner[1] <= 0.0:
            raise NoMatchFound(f"No candidate resembles '{title}'", query=str(title))

        logger.debug(f"Resolved '{title}' to '{winner[0]}' via {winning_field} ({winner[1]:.3f})")
        return winner[0]

    def resolve_entry(self, title: Title, entries: Sequence[CatalogEntry]) -> CatalogEntry:
        """
        Resolve a title to one of the given catalog entries.

        Returns the first entry whose display title is the resolved title.
        """
        titles = [entry.display_title for entry in entries]
        resolved = self.resolve(title, titles)
        return entries[titles.index(resolved)]

    def dub_title(self, title: Title) -> Title:
        """
        Build the synthetic title used to look up a dubbed counterpart.

        Empty fields stay empty: a bare ``"dub"`` would score against every
        dubbed candidate and could outvote the fields that carry a title.
        """
        def with_suffix(value: str) -> str:
            return f"{value} {self.dub_suffix}" if value else value

        return Title(
            english=with_suffix(title.english),
            romaji=with_suffix(title.romaji),
            native=with_suffix(title.native),
        )

    def is_dub(self, entry: CatalogEntry) -> bool:
        """Check whether an entry's display title carries the dub marker."""
        return self.dub_marker in entry.display_title.lower()

    def dub_candidates(self, entries: Iterable[CatalogEntry]) -> List[CatalogEntry]:
        """Keep only the entries marked as dubbed."""
        return [entry for entry in entries if self.is_dub(entry)]

    def search_query(self, title: Title) -> str:
        """Sanitized query used to search a provider for a title."""
        return self.sanitize(title.english) or self.sanitize(title.romaji) or self.sanitize(title.native)


# Export resolver
__all__ = [
    "TitleResolver",
    "jaro_winkler",
    "DEFAULT_STOP_WORDS",
    "DEFAULT_DUB_SUFFIX",
    "DEFAULT_DUB_MARKER",
]
