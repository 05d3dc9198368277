"""
Extraction Pipeline - Recovers playable streams from a player page.

The player page embeds an AES-encrypted parameter blob. The pipeline
decrypts it, re-encrypts the content id to call the provider back,
decrypts the callback's source payload and parses the HLS playlists it
points to into a :class:`StreamDescriptor`.

Two independent secrets are involved: the page secret protects the
embedded parameters and the content id sent back; the response secret
protects the callback's payload. Both are fixed values supplied by
configuration.
"""

import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar
from urllib.parse import parse_qs, urlparse

from pydantic import BaseModel, ConfigDict, ValidationError

from aniverse.core.cipher import CipherCodec
from aniverse.core.exceptions import (
    AniverseError,
    DecodeFailure,
    InvalidArgument,
    NoContent,
    ParseFailure,
    RequestFailure,
)
from aniverse.core.interfaces import PageFetcher
from aniverse.core.manifest import ManifestParser
from aniverse.core.models import (
    EpisodeTiming,
    QualityVariant,
    SourcePayload,
    StreamDescriptor,
    Track,
)
from aniverse.core.utils import validate_url


logger = logging.getLogger(__name__)

T = TypeVar("T")

ENCRYPTED_PARAMS_PATTERN = re.compile(r'data-value="(.+?)"')
CALLBACK_PATH = "/encrypt-ajax.php"
CALLBACK_HEADERS = {"X-Requested-With": "XMLHttpRequest"}
THUMBNAIL_KIND = "thumbnails"
THUMBNAIL_TYPE = "Sprite"


class ExtractionSecrets(BaseModel):
    """Fixed key material of the provider's player."""

    model_config = ConfigDict(frozen=True)

    page_key: str
    response_key: str
    iv: str


class CallbackEnvelope(BaseModel):
    """JSON wrapper around the encrypted source payload."""

    data: str


def extract_content_id(page_url: str) -> str:
    """
    Read the content id from a player page URL.

    Raises:
        InvalidArgument: If the URL is not absolute or has no ``id`` query
            parameter
    """
    if not validate_url(page_url):
        raise InvalidArgument(f"Not an absolute URL: {page_url}", field_name="url")

    values = parse_qs(urlparse(page_url).query).get("id", [])
    if not values or not values[0]:
        raise InvalidArgument(f"URL does not have an 'id' query parameter: {page_url}", field_name="id")
    return values[0]


def find_thumbnail(track: Track) -> Optional[str]:
    """Return the file of the first thumbnail track, if any."""
    for item in track.tracks:
        kind = item.get("kind")
        file = item.get("file")
        if isinstance(kind, str) and kind.lower() == THUMBNAIL_KIND and isinstance(file, str) and file:
            return file
    return None


class ExtractionPipeline:
    """Turns a player page URL into a stream descriptor."""

    def __init__(
        self,
        fetcher: PageFetcher,
        secrets: ExtractionSecrets,
        codec: Optional[CipherCodec] = None,
        parser: Optional[ManifestParser] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            fetcher: Transport used for every fetch
            secrets: Page and response key material
            codec: Cipher codec (a default one is created when omitted)
            parser: Manifest parser (a default one is created when omitted)
        """
        self.fetcher = fetcher
        self.secrets = secrets
        self.codec = codec or CipherCodec()
        self.parser = parser or ManifestParser()

    async def _fetch(self, url: str, stage: str, headers: Optional[Dict[str, str]] = None) -> str:
        try:
            return await self.fetcher.fetch_page_text(url, headers=headers)
        except AniverseError:
            raise
        except Exception as e:
            raise RequestFailure(f"{stage}: {e}", url=url) from e

    @staticmethod
    def _parse(stage: str, parse: Callable[..., T], *args: Any) -> T:
        """Run a playlist parse, naming ``stage`` in any failure while keeping its type."""
        try:
            return parse(*args)
        except ParseFailure as e:
            e.message = f"{stage}: {e.message}"
            e.args = (e.message,)
            raise

    async def extract(self, page_url: str, headers: Optional[Dict[str, str]] = None) -> StreamDescriptor:
        """
        Extract the stream descriptor of a player page.

        Args:
            page_url: Player page URL carrying an ``id`` query parameter
            headers: Header overrides to attach to the descriptor

        Returns:
            Stream descriptor with qualities, tracks and timing

        Raises:
            InvalidArgument: If the URL carries no content id
            RequestFailure: If any fetch fails
            NoContent: If the page has no encrypted parameters
            CryptoFailure: If a decryption fails
            DecodeFailure: If the callback response cannot be decoded
            ParseFailure: If a playlist cannot be parsed
        """
        content_id = extract_content_id(page_url)
        logger.debug(f"Extracting content id {content_id} from {page_url}")

        params = await self._page_params(page_url, content_id)

        parsed = urlparse(page_url)
        callback_url = f"{parsed.scheme}://{parsed.netloc}{CALLBACK_PATH}?{params}"
        payload = await self._fetch_payload(callback_url)

        return await self._build_descriptor(payload, headers or {})

    async def _page_params(self, page_url: str, content_id: str) -> str:
        """Build the callback query from the page's encrypted parameters."""
        page = await self._fetch(page_url, "fetch page")

        match = ENCRYPTED_PARAMS_PATTERN.search(page)
        if not match:
            raise NoContent(f"fetch page: no encrypted parameters found in {page_url}")

        decrypted = self.codec.decrypt(match.group(1), self.secrets.page_key, self.secrets.iv)
        try:
            page_params = decrypted.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeFailure(f"decrypt page params: not UTF-8 text: {e}") from e

        encrypted_id = self.codec.encrypt(content_id, self.secrets.page_key, self.secrets.iv)
        return f"id={encrypted_id}&alias={content_id}&{page_params}"

    async def _fetch_payload(self, callback_url: str) -> SourcePayload:
        """Call the provider back and decode its decrypted source payload."""
        body = await self._fetch(callback_url, "fetch callback", headers=dict(CALLBACK_HEADERS))

        try:
            envelope = CallbackEnvelope.model_validate_json(body)
        except ValidationError as e:
            raise DecodeFailure(f"decode callback: unexpected response: {e}") from e

        decrypted = self.codec.decrypt(envelope.data, self.secrets.response_key, self.secrets.iv)

        try:
            return SourcePayload.model_validate_json(decrypted)
        except ValidationError as e:
            raise DecodeFailure(f"decode payload: {e}") from e

    async def _primary_variants(self, file: str, with_timing: bool) -> Tuple[List[QualityVariant], Optional[Tuple[EpisodeTiming, EpisodeTiming]]]:
        text = await self._fetch(file, "fetch master playlist")

        if not self.parser.is_master(text):
            # The source is already a media playlist
            variant = QualityVariant(name="default", bandwidth=0, url=file)
            timing = self._parse("parse media playlist", self.parser.estimate_timing, text) if with_timing else None
            return [variant], timing

        variants = self._parse("parse master playlist", self.parser.parse_master, text, file)
        timing = None
        if with_timing:
            media_text = await self._fetch(variants[0].url, "fetch media playlist")
            timing = self._parse("parse media playlist", self.parser.estimate_timing, media_text)
        return variants, timing

    async def _build_descriptor(self, payload: SourcePayload, headers: Dict[str, str]) -> StreamDescriptor:
        sources: List[QualityVariant] = []
        intro = EpisodeTiming()
        outro = EpisodeTiming()
        is_m3u8 = False
        timing_taken = False

        for entry in payload.source:
            if not entry.file:
                continue

            variants, timing = await self._primary_variants(entry.file, with_timing=not timing_taken)
            if timing is not None:
                intro, outro = timing
                timing_taken = True

            sources.extend(variants)
            is_m3u8 = True

        subtitles: List[str] = []
        audio: List[str] = []
        for entry in payload.source_bk:
            if not entry.file:
                continue
            kind = entry.type.lower()
            if "subtitle" in kind:
                subtitles.append(entry.file)
            elif "audio" in kind:
                audio.append(entry.file)

        thumbnail = find_thumbnail(payload.track)

        logger.info(f"Extracted {len(sources)} qualities, {len(subtitles)} subtitles, {len(audio)} audio tracks")
        return StreamDescriptor(
            sources=tuple(sources),
            subtitles=tuple(subtitles),
            audio=tuple(audio),
            is_m3u8=is_m3u8,
            intro=intro,
            outro=outro,
            headers=dict(headers),
            thumbnail=thumbnail,
            thumbnail_type=THUMBNAIL_TYPE if thumbnail else None,
        )


# Export pipeline
__all__ = [
    "ExtractionPipeline",
    "ExtractionSecrets",
    "extract_content_id",
    "find_thumbnail",
]
