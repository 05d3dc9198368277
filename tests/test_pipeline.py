"""
Extraction pipeline tests.

The player, the callback endpoint and the CDN are simulated by a fetcher
serving canned text; the encrypted parts are produced with the same keys
the pipeline is configured with.
"""

import asyncio
import base64
import json

import pytest

from aniverse.core.exceptions import (
    DecodeFailure,
    InvalidArgument,
    InvalidAttribute,
    InvalidPadding,
    NoContent,
    NoVariantsFound,
    RequestFailure,
)
from aniverse.core.interfaces import PageFetcher
from aniverse.core.models import TrackAbsent, TrackList, TrackWrapper, decode_track
from aniverse.core.pipeline import CALLBACK_PATH, ExtractionPipeline, extract_content_id


PAGE_URL = "https://embed.example.com/streaming.php?id=MTIz&title=Naruto"
CALLBACK_PREFIX = f"https://embed.example.com{CALLBACK_PATH}?"
MASTER_URL = "https://cdn.example.com/ep1/master.m3u8"

MASTER_PLAYLIST = """#EXTM3U
#EXT-X-STREAM-INF:BANDWIDTH=800000,RESOLUTION=640x360
360/index.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=2800000,RESOLUTION=1280x720
720/index.m3u8
"""

MEDIA_PLAYLIST = """#EXTM3U
#EXTINF:25.0,
seg0.ts
#EXTINF:25.0,
seg1.ts
#EXTINF:25.0,
seg2.ts
#EXTINF:25.0,
seg3.ts
#EXT-X-ENDLIST
"""


class FakeFetcher(PageFetcher):
    """Serves canned responses by URL and records every request."""

    def __init__(self, pages, callback_body=None):
        self.pages = dict(pages)
        self.callback_body = callback_body
        self.requests = []

    async def fetch_page_text(self, url, headers=None):
        self.requests.append((url, headers))
        if url.startswith(CALLBACK_PREFIX) and self.callback_body is not None:
            return self.callback_body
        if url not in self.pages:
            raise RequestFailure(f"404 for {url}", url=url, http_status=404)
        return self.pages[url]


class BrokenFetcher(PageFetcher):
    async def fetch_page_text(self, url, headers=None):
        raise RuntimeError("connection reset")


def player_page(codec, secrets, params="token=abc&expires=1700000000"):
    blob = codec.encrypt(params, secrets.page_key, secrets.iv)
    return f'<html><script type="text/javascript" data-name="episode" data-value="{blob}"></script></html>'


def callback_body(codec, secrets, payload):
    plaintext = payload if isinstance(payload, str) else json.dumps(payload)
    return json.dumps({"data": codec.encrypt(plaintext, secrets.response_key, secrets.iv)})


def default_payload():
    return {
        "source": [{"file": MASTER_URL, "label": "hls P", "type": "hls"}],
        "source_bk": [
            {"file": "https://cdn.example.com/subs/en.vtt", "type": "subtitle"},
            {"file": "https://cdn.example.com/audio/ja.m3u8", "type": "Audio"},
            {"file": "https://backup.example.com/ep1.m3u8", "type": "hls"},
        ],
        "track": {"tracks": [
            {"file": "https://cdn.example.com/en.vtt", "kind": "captions"},
            {"file": "https://cdn.example.com/thumbs.vtt", "kind": "thumbnails"},
        ]},
    }


def make_fetcher(codec, secrets, payload=None, **pages):
    served = {
        PAGE_URL: player_page(codec, secrets),
        MASTER_URL: MASTER_PLAYLIST,
        "https://cdn.example.com/ep1/360/index.m3u8": MEDIA_PLAYLIST,
    }
    served.update(pages)
    return FakeFetcher(served, callback_body(codec, secrets, payload or default_payload()))


class TestExtractContentId:
    def test_reads_id_parameter(self):
        assert extract_content_id(PAGE_URL) == "MTIz"

    @pytest.mark.parametrize(
        "url",
        [
            "https://embed.example.com/streaming.php?title=Naruto",
            "https://embed.example.com/streaming.php?id=",
        ],
    )
    def test_rejects_urls_without_id(self, url):
        with pytest.raises(InvalidArgument) as exc_info:
            extract_content_id(url)

        assert exc_info.value.field_name == "id"

    @pytest.mark.parametrize("url", ["streaming.php?id=MTIz", "//embed.example.com/streaming.php?id=MTIz"])
    def test_rejects_relative_urls(self, url):
        with pytest.raises(InvalidArgument) as exc_info:
            extract_content_id(url)

        assert exc_info.value.field_name == "url"


class TestExtract:
    def test_builds_descriptor(self, codec, secrets):
        # Arrange
        fetcher = make_fetcher(codec, secrets)
        pipeline = ExtractionPipeline(fetcher, secrets)

        # Act
        descriptor = asyncio.run(pipeline.extract(PAGE_URL, headers={"Version": "sub"}))

        # Assert
        assert [source.name for source in descriptor.sources] == ["360p", "720p"]
        assert descriptor.sources[1].url == "https://cdn.example.com/ep1/720/index.m3u8"
        assert descriptor.is_m3u8 is True
        assert descriptor.subtitles == ("https://cdn.example.com/subs/en.vtt",)
        assert descriptor.audio == ("https://cdn.example.com/audio/ja.m3u8",)
        assert descriptor.thumbnail == "https://cdn.example.com/thumbs.vtt"
        assert descriptor.thumbnail_type == "Sprite"
        assert descriptor.headers == {"Version": "sub"}
        assert descriptor.intro.start == 0.0
        assert descriptor.intro.end == 90.0
        assert descriptor.outro.start == pytest.approx(85.0)
        assert descriptor.outro.end == pytest.approx(145.0)

    def test_callback_request(self, codec, secrets):
        # Arrange
        fetcher = make_fetcher(codec, secrets)
        pipeline = ExtractionPipeline(fetcher, secrets)
        encrypted_id = codec.encrypt("MTIz", secrets.page_key, secrets.iv)

        # Act
        asyncio.run(pipeline.extract(PAGE_URL))

        # Assert
        callback_url, callback_headers = fetcher.requests[1]
        assert callback_url == f"{CALLBACK_PREFIX}id={encrypted_id}&alias=MTIz&token=abc&expires=1700000000"
        assert callback_headers == {"X-Requested-With": "XMLHttpRequest"}

    def test_serializes_with_client_field_names(self, codec, secrets):
        pipeline = ExtractionPipeline(make_fetcher(codec, secrets), secrets)

        data = asyncio.run(pipeline.extract(PAGE_URL)).model_dump(mode="json", by_alias=True)

        assert data["available_qualities"][0]["quality"] == "360p"
        assert data["available_qualities"][0]["sub"] == "https://cdn.example.com/ep1/360/index.m3u8"
        assert data["thumbnailType"] == "Sprite"

    def test_media_playlist_source_becomes_default_variant(self, codec, secrets):
        # Arrange
        payload = {"source": [{"file": "https://cdn.example.com/ep1/index.m3u8", "type": "hls"}], "source_bk": []}
        fetcher = make_fetcher(codec, secrets, payload, **{"https://cdn.example.com/ep1/index.m3u8": MEDIA_PLAYLIST})

        # Act
        descriptor = asyncio.run(ExtractionPipeline(fetcher, secrets).extract(PAGE_URL))

        # Assert
        assert len(descriptor.sources) == 1
        assert descriptor.sources[0].name == "default"
        assert descriptor.sources[0].url == "https://cdn.example.com/ep1/index.m3u8"
        assert descriptor.outro.start == pytest.approx(85.0)

    def test_timing_comes_from_first_source_only(self, codec, secrets):
        # Arrange
        second_master = "https://cdn2.example.com/master.m3u8"
        payload = {"source": [{"file": MASTER_URL}, {"file": second_master}]}
        fetcher = make_fetcher(codec, secrets, payload, **{second_master: MASTER_PLAYLIST})

        # Act
        descriptor = asyncio.run(ExtractionPipeline(fetcher, secrets).extract(PAGE_URL))

        # Assert
        assert len(descriptor.sources) == 4
        requested = [url for url, _ in fetcher.requests]
        assert "https://cdn2.example.com/360/index.m3u8" not in requested

    def test_empty_source_list(self, codec, secrets):
        payload = {"source": [], "source_bk": None, "track": None}
        fetcher = make_fetcher(codec, secrets, payload)

        descriptor = asyncio.run(ExtractionPipeline(fetcher, secrets).extract(PAGE_URL))

        assert descriptor.sources == ()
        assert descriptor.is_m3u8 is False
        assert descriptor.thumbnail is None
        assert descriptor.thumbnail_type is None
        assert descriptor.outro.end == 0.0


class TestExtractFailures:
    def test_missing_id_fails_before_fetching(self, codec, secrets):
        fetcher = make_fetcher(codec, secrets)

        with pytest.raises(InvalidArgument):
            asyncio.run(ExtractionPipeline(fetcher, secrets).extract("https://embed.example.com/streaming.php"))

        assert fetcher.requests == []

    def test_page_without_parameters(self, codec, secrets):
        fetcher = make_fetcher(codec, secrets, **{PAGE_URL: "<html><body>Video removed</body></html>"})

        with pytest.raises(NoContent):
            asyncio.run(ExtractionPipeline(fetcher, secrets).extract(PAGE_URL))

    def test_transport_errors_are_wrapped(self, secrets):
        with pytest.raises(RequestFailure) as exc_info:
            asyncio.run(ExtractionPipeline(BrokenFetcher(), secrets).extract(PAGE_URL))

        assert "fetch page" in str(exc_info.value)
        assert exc_info.value.url == PAGE_URL
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_callback_without_envelope(self, codec, secrets):
        fetcher = make_fetcher(codec, secrets)
        fetcher.callback_body = "<html>Access denied</html>"

        with pytest.raises(DecodeFailure):
            asyncio.run(ExtractionPipeline(fetcher, secrets).extract(PAGE_URL))

    def test_payload_that_is_not_json(self, codec, secrets):
        fetcher = make_fetcher(codec, secrets, payload="not json at all")

        with pytest.raises(DecodeFailure):
            asyncio.run(ExtractionPipeline(fetcher, secrets).extract(PAGE_URL))

    def test_payload_with_bad_padding(self, codec, secrets):
        # Arrange: a single block decrypting to zero bytes
        first_block = base64.b64decode(codec.encrypt(b"\x00" * 16, secrets.response_key, secrets.iv))[:16]
        fetcher = make_fetcher(codec, secrets)
        fetcher.callback_body = json.dumps({"data": base64.b64encode(first_block).decode()})

        # Act / Assert
        with pytest.raises(InvalidPadding):
            asyncio.run(ExtractionPipeline(fetcher, secrets).extract(PAGE_URL))

    def test_unparseable_master(self, codec, secrets):
        fetcher = make_fetcher(codec, secrets, **{MASTER_URL: "#EXTM3U\n#EXT-X-STREAM-INF:BANDWIDTH=1\n"})

        with pytest.raises(NoVariantsFound) as exc_info:
            asyncio.run(ExtractionPipeline(fetcher, secrets).extract(PAGE_URL))

        assert str(exc_info.value).startswith("parse master playlist: ")

    def test_invalid_segment_duration_names_media_stage(self, codec, secrets):
        # Arrange
        broken = "#EXTM3U\n#EXTINF:soon,\nseg0.ts\n"
        fetcher = make_fetcher(codec, secrets, **{"https://cdn.example.com/ep1/360/index.m3u8": broken})

        # Act
        with pytest.raises(InvalidAttribute) as exc_info:
            asyncio.run(ExtractionPipeline(fetcher, secrets).extract(PAGE_URL))

        # Assert
        assert exc_info.value.attribute == "EXTINF"
        assert str(exc_info.value).startswith("parse media playlist: ")

    def test_missing_playlist(self, codec, secrets):
        fetcher = make_fetcher(codec, secrets)
        del fetcher.pages[MASTER_URL]

        with pytest.raises(RequestFailure) as exc_info:
            asyncio.run(ExtractionPipeline(fetcher, secrets).extract(PAGE_URL))

        assert exc_info.value.http_status == 404


class TestTrackShapes:
    def test_plain_list(self):
        track = decode_track([{"file": "a.vtt", "kind": "thumbnails"}, "junk"])

        assert isinstance(track, TrackList)
        assert track.tracks == [{"file": "a.vtt", "kind": "thumbnails"}]

    def test_wrapper_object(self):
        track = decode_track({"tracks": [{"file": "a.vtt"}]})

        assert isinstance(track, TrackWrapper)
        assert track.tracks == [{"file": "a.vtt"}]

    @pytest.mark.parametrize("raw", [None, "", {"file": "a.vtt"}, 42])
    def test_anything_else_is_absent(self, raw):
        track = decode_track(raw)

        assert isinstance(track, TrackAbsent)
        assert track.tracks == []
