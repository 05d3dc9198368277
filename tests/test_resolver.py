import pytest

from aniverse.core.exceptions import NoMatchFound
from aniverse.core.models import CatalogEntry, Title
from aniverse.core.resolver import TitleResolver, jaro_winkler


def entry(entry_id, title):
    return CatalogEntry(id=entry_id, title=Title(english=title, romaji=title, native=title), source="gogoanime")


class TestJaroWinkler:
    @pytest.mark.parametrize(
        "a, b, expected",
        [
            ("martha", "marhta", 0.961),
            ("dwayne", "duane", 0.840),
        ],
    )
    def test_known_values(self, a, b, expected):
        assert jaro_winkler(a, b) == pytest.approx(expected, abs=1e-3)

    def test_identical_strings(self):
        assert jaro_winkler("naruto", "naruto") == 1.0
        assert jaro_winkler("a", "a") == 1.0

    def test_empty_strings(self):
        assert jaro_winkler("", "") == 1.0
        assert jaro_winkler("", "naruto") == 0.0
        assert jaro_winkler("naruto", "") == 0.0

    def test_nothing_in_common(self):
        assert jaro_winkler("abc", "xyz") == 0.0

    @pytest.mark.parametrize(
        "a, b",
        [
            ("one piece", "one punch man"),
            ("bleach", "black clover"),
            ("shingeki no kyojin", "attack on titan"),
        ],
    )
    def test_score_is_bounded(self, a, b):
        assert 0.0 <= jaro_winkler(a, b) <= 1.0


class TestSanitize:
    def test_lowercases_and_drops_stop_words(self):
        resolver = TitleResolver()

        assert resolver.sanitize("Attack on Titan Season 3 Part 2") == "attack on titan 3 2"

    def test_stop_words_match_whole_words_only(self):
        resolver = TitleResolver()

        assert resolver.sanitize("Seasonal Partners") == "seasonal partners"

    def test_missing_title(self):
        resolver = TitleResolver()

        assert resolver.sanitize(None) == ""
        assert resolver.sanitize("") == ""

    def test_custom_stop_words(self):
        resolver = TitleResolver(stop_words=["The"])

        assert resolver.sanitize("The Promised Neverland Season 2") == "promised neverland season 2"


class TestBestMatch:
    def test_picks_most_similar_candidate(self):
        resolver = TitleResolver()

        assert resolver.best_match("naruto", ["Bleach", "Naruto Shippuden", "Naruto"]) == "Naruto"

    def test_ties_keep_first_candidate(self):
        resolver = TitleResolver()

        assert resolver.best_match("bleach", ["BLEACH", "Bleach"]) == "BLEACH"

    def test_stop_words_do_not_affect_score(self):
        resolver = TitleResolver()

        assert resolver.score("Mob Psycho 100 Season 2", "mob psycho 100 2") == 1.0

    def test_empty_candidates_raise(self):
        with pytest.raises(NoMatchFound):
            TitleResolver().best_match("naruto", [])


class TestResolve:
    def test_romaji_wins_ties(self):
        # Arrange: romaji and english both find an exact match
        resolver = TitleResolver()
        title = Title(romaji="Shingeki no Kyojin", english="Attack on Titan", native="進撃の巨人")

        # Act
        resolved = resolver.resolve(title, ["Attack on Titan", "Shingeki no Kyojin"])

        # Assert
        assert resolved == "Shingeki no Kyojin"

    def test_highest_scoring_field_wins(self):
        # Arrange
        resolver = TitleResolver()
        title = Title(romaji="Boku no Hero Academia", english="My Hero Academia")

        # Act
        resolved = resolver.resolve(title, ["My Hero Academia", "One Punch Man"])

        # Assert
        assert resolved == "My Hero Academia"

    def test_empty_pool_raises(self):
        with pytest.raises(NoMatchFound):
            TitleResolver().resolve(Title(romaji="Naruto"), [])

    def test_zero_score_raises(self):
        with pytest.raises(NoMatchFound):
            TitleResolver().resolve(Title(), ["Naruto"])

    def test_resolve_entry_returns_catalog_entry(self):
        # Arrange
        resolver = TitleResolver()
        entries = [entry("naruto-shippuden", "Naruto Shippuden"), entry("naruto", "Naruto")]

        # Act
        resolved = resolver.resolve_entry(Title(romaji="Naruto", english="Naruto"), entries)

        # Assert
        assert resolved.id == "naruto"


class TestDubHelpers:
    def test_dub_title_appends_suffix_to_present_fields(self):
        resolver = TitleResolver()

        dub = resolver.dub_title(Title(english="Naruto", romaji="Naruto"))

        assert dub.english == "Naruto dub"
        assert dub.romaji == "Naruto dub"
        assert dub.native == ""

    def test_dub_candidates_filter_on_marker(self):
        # Arrange
        resolver = TitleResolver()
        entries = [entry("naruto", "Naruto"), entry("naruto-dub", "Naruto (Dub)")]

        # Act
        candidates = resolver.dub_candidates(entries)

        # Assert
        assert [candidate.id for candidate in candidates] == ["naruto-dub"]

    def test_dub_title_resolves_to_dub_entry(self):
        resolver = TitleResolver()
        entries = [entry("naruto-dub", "Naruto (Dub)"), entry("naruto-shippuden-dub", "Naruto Shippuden (Dub)")]

        resolved = resolver.resolve_entry(resolver.dub_title(Title(romaji="Naruto")), entries)

        assert resolved.id == "naruto-dub"

    def test_dub_title_leaves_empty_fields_unsuffixed(self):
        resolver = TitleResolver()

        dub = resolver.dub_title(Title(english="", romaji="Naruto", native=""))

        assert dub.by_field() == {"romaji": "Naruto dub", "english": "", "native": ""}


class TestSearchQuery:
    def test_prefers_english_title(self):
        resolver = TitleResolver()

        query = resolver.search_query(Title(english="Attack on Titan Season 3", romaji="Shingeki no Kyojin 3"))

        assert query == "attack on titan 3"

    def test_falls_back_to_romaji(self):
        assert TitleResolver().search_query(Title(romaji="Shingeki no Kyojin")) == "shingeki no kyojin"

    def test_empty_title(self):
        assert TitleResolver().search_query(Title()) == ""
