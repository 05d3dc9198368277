import pytest

from aniverse.core.exceptions import InvalidAttribute, NoVariantsFound
from aniverse.core.manifest import ManifestParser, TimingConfig, parse_attributes, resolve_url


BASE_URL = "https://cdn.example.com/videos/ep1/master.m3u8"

MASTER_PLAYLIST = """#EXTM3U
#EXT-X-VERSION:3
#EXT-X-STREAM-INF:BANDWIDTH=800000,RESOLUTION=640x360,NAME="360p"
360/index.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=2800000,RESOLUTION=1280x720,CODECS="avc1.4d401f,mp4a.40.2"
https://cdn2.example.com/720/index.m3u8?token=abc
"""


def media_playlist(*durations):
    lines = ["#EXTM3U", "#EXT-X-TARGETDURATION:25"]
    for index, duration in enumerate(durations):
        lines.append(f"#EXTINF:{duration},")
        lines.append(f"segment-{index}.ts")
    lines.append("#EXT-X-ENDLIST")
    return "\n".join(lines)


class TestParseAttributes:
    def test_quoted_values_keep_commas(self):
        # Act
        attributes = parse_attributes('#EXT-X-STREAM-INF:BANDWIDTH=1,CODECS="avc1,mp4a",NAME="720p"')

        # Assert
        assert attributes == {"BANDWIDTH": "1", "CODECS": "avc1,mp4a", "NAME": "720p"}

    def test_line_without_attribute_list(self):
        assert parse_attributes("#EXTM3U") == {}


class TestResolveUrl:
    @pytest.mark.parametrize(
        "target, expected",
        [
            ("360/index.m3u8", "https://cdn.example.com/videos/ep1/360/index.m3u8"),
            ("../ep2/index.m3u8", "https://cdn.example.com/videos/ep2/index.m3u8"),
            ("/hls/720.m3u8", "https://cdn.example.com/hls/720.m3u8"),
            ("//mirror.example.com/a.m3u8", "https://mirror.example.com/a.m3u8"),
            ("https://other.example.com/b.m3u8", "https://other.example.com/b.m3u8"),
            ("low.m3u8?token=1", "https://cdn.example.com/videos/ep1/low.m3u8?token=1"),
        ],
    )
    def test_resolves_against_playlist_location(self, target, expected):
        assert resolve_url(BASE_URL, target) == expected

    def test_unusable_base_returns_target(self):
        assert resolve_url("not a url", "index.m3u8") == "index.m3u8"


class TestParseMaster:
    def test_parses_variants_in_order(self):
        # Arrange
        parser = ManifestParser()

        # Act
        variants = parser.parse_master(MASTER_PLAYLIST, BASE_URL)

        # Assert
        assert [variant.name for variant in variants] == ["360p", "720p"]
        assert variants[0].bandwidth == 800000
        assert variants[0].resolution == "640x360"
        assert variants[0].url == "https://cdn.example.com/videos/ep1/360/index.m3u8"
        assert variants[1].url == "https://cdn2.example.com/720/index.m3u8?token=abc"
        assert variants[1].dub_url is None

    def test_single_variant(self):
        text = '#EXTM3U\n#EXT-X-STREAM-INF:BANDWIDTH=800000,NAME="480p",RESOLUTION=854x480\n480p/index.m3u8\n'

        variants = ManifestParser().parse_master(text, BASE_URL)

        assert len(variants) == 1
        assert (variants[0].name, variants[0].bandwidth, variants[0].resolution) == ("480p", 800000, "854x480")
        assert variants[0].url == "https://cdn.example.com/videos/ep1/480p/index.m3u8"

    def test_name_falls_back_to_bandwidth(self):
        text = "#EXTM3U\n#EXT-X-STREAM-INF:BANDWIDTH=1500000\nhigh.m3u8\n"

        variants = ManifestParser().parse_master(text, BASE_URL)

        assert variants[0].name == "1500k"

    def test_entry_without_url_is_discarded(self):
        # Arrange: the first entry is immediately followed by another tag
        text = """#EXTM3U
#EXT-X-STREAM-INF:BANDWIDTH=100000,NAME="lost"
#EXT-X-STREAM-INF:BANDWIDTH=200000,NAME="kept"
kept.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=300000,NAME="trailing"
"""

        # Act
        variants = ManifestParser().parse_master(text, BASE_URL)

        # Assert
        assert [variant.name for variant in variants] == ["kept"]

    def test_non_playlist_lines_are_skipped(self):
        text = """#EXTM3U
#EXT-X-STREAM-INF:BANDWIDTH=100000,NAME="audio-first"
audio.aac
low.m3u8
"""

        variants = ManifestParser().parse_master(text, BASE_URL)

        assert len(variants) == 1
        assert variants[0].url.endswith("/low.m3u8")

    @pytest.mark.parametrize(
        "stream_inf",
        [
            "#EXT-X-STREAM-INF:BANDWIDTH=abc",
            "#EXT-X-STREAM-INF:BANDWIDTH=-5",
            "#EXT-X-STREAM-INF:BANDWIDTH=²",
            "#EXT-X-STREAM-INF:BANDWIDTH=１２０",
            "#EXT-X-STREAM-INF:RESOLUTION=640x360",
        ],
    )
    def test_invalid_bandwidth_raises(self, stream_inf):
        text = f"#EXTM3U\n{stream_inf}\nlow.m3u8\n"

        with pytest.raises(InvalidAttribute) as exc_info:
            ManifestParser().parse_master(text, BASE_URL)

        assert exc_info.value.attribute == "BANDWIDTH"

    def test_playlist_without_variants_raises(self):
        with pytest.raises(NoVariantsFound):
            ManifestParser().parse_master(media_playlist(10, 10), BASE_URL)

    def test_is_master(self):
        assert ManifestParser.is_master(MASTER_PLAYLIST)
        assert not ManifestParser.is_master(media_playlist(10))


class TestTiming:
    def test_total_duration_sums_segments(self):
        assert ManifestParser().total_duration(media_playlist(10.5, 9.5, 4)) == pytest.approx(24.0)

    def test_estimate_uses_runtime_ratio(self):
        # Arrange
        parser = ManifestParser()

        # Act
        intro, outro = parser.estimate_timing(media_playlist(25, 25, 25, 25))

        # Assert
        assert intro.start == 0.0
        assert intro.end == 90.0
        assert outro.start == pytest.approx(85.0)
        assert outro.end == pytest.approx(145.0)

    def test_thousand_second_runtime(self):
        intro, outro = ManifestParser().estimate_timing(media_playlist(*[10] * 100))

        assert (intro.start, intro.end) == (0.0, 90.0)
        assert outro.start == pytest.approx(850.0)
        assert outro.end == pytest.approx(910.0)

    def test_custom_timing_constants(self):
        parser = ManifestParser(TimingConfig(intro_seconds=30, outro_ratio=0.5, outro_seconds=10))

        intro, outro = parser.estimate_timing(media_playlist(100))

        assert intro.end == 30.0
        assert outro.start == pytest.approx(50.0)
        assert outro.end == pytest.approx(60.0)

    def test_empty_playlist_has_zero_runtime(self):
        intro, outro = ManifestParser().estimate_timing("#EXTM3U\n")

        assert outro.start == 0.0
        assert outro.end == 60.0

    def test_invalid_segment_duration_raises(self):
        with pytest.raises(InvalidAttribute):
            ManifestParser().total_duration("#EXTM3U\n#EXTINF:abc,\nseg.ts\n")
