"""
Manifest Parser - HLS master and media playlist parsing.

This module turns already-fetched playlist text into quality variants
and a rough intro/outro estimate. It performs no I/O; the extraction
pipeline fetches the playlists and hands the text over.
"""

import logging
import posixpath
import re
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlparse, urlunparse

from pydantic import BaseModel, ConfigDict, Field

from aniverse.core.exceptions import InvalidAttribute, NoVariantsFound
from aniverse.core.models import EpisodeTiming, QualityVariant


logger = logging.getLogger(__name__)

STREAM_INF_TAG = "#EXT-X-STREAM-INF"
SEGMENT_TAG = "#EXTINF:"
MANIFEST_SUFFIX = ".m3u8"

# KEY=VALUE pairs; quoted values may contain commas (CODECS="avc1,mp4a")
ATTRIBUTE_PATTERN = re.compile(r'([A-Za-z0-9-]+)=("[^"]*"|[^,]*)')


class TimingConfig(BaseModel):
    """
    Constants of the intro/outro heuristic.

    The windows are not detected from content: the intro is assumed to
    occupy the first ``intro_seconds`` and the outro to start at
    ``outro_ratio`` of the total runtime and last ``outro_seconds``.
    """

    model_config = ConfigDict(frozen=True)

    intro_seconds: float = Field(90.0, ge=0.0)
    outro_ratio: float = Field(0.85, ge=0.0, le=1.0)
    outro_seconds: float = Field(60.0, ge=0.0)


def parse_attributes(line: str) -> Dict[str, str]:
    """
    Parse the attribute list of a tag line.

    Args:
        line: Tag line such as ``#EXT-X-STREAM-INF:BANDWIDTH=1,NAME="720p"``

    Returns:
        Attribute values keyed by attribute name, quotes stripped
    """
    _, sep, attribute_list = line.partition(":")
    if not sep:
        return {}

    return {
        key.strip(): value.strip().strip('"')
        for key, value in ATTRIBUTE_PATTERN.findall(attribute_list)
    }


def resolve_url(base_url: str, target: str) -> str:
    """
    Resolve a playlist line against the playlist it was read from.

    Absolute targets are returned unchanged. Relative targets are joined
    to the directory of the base path; root-relative targets to the host.
    Falls back to the target itself when the base cannot be used.
    """
    target = target.strip()
    parsed_target = urlparse(target)
    if parsed_target.scheme and parsed_target.netloc:
        return target

    base = urlparse(base_url)
    if not base.scheme or not base.netloc:
        return target

    if target.startswith("//"):
        return f"{base.scheme}:{target}"

    if parsed_target.path.startswith("/"):
        path = parsed_target.path
    else:
        directory = posixpath.dirname(base.path) or "/"
        path = posixpath.normpath(posixpath.join(directory, parsed_target.path))
        if not path.startswith("/"):
            path = "/" + path

    return urlunparse((base.scheme, base.netloc, path, "", parsed_target.query, ""))


def _is_manifest_line(line: str) -> bool:
    return urlparse(line).path.endswith(MANIFEST_SUFFIX)


def _parse_bandwidth(attributes: Dict[str, str], line: str) -> int:
    text = attributes.get("BANDWIDTH", "")
    # isdigit() alone accepts superscripts and other non-ASCII digits
    if not (text.isascii() and text.isdigit()):
        raise InvalidAttribute(f"Invalid BANDWIDTH value: '{text}'", attribute="BANDWIDTH", line=line)
    return int(text)


def _variant_name(attributes: Dict[str, str], bandwidth: int) -> str:
    name = attributes.get("NAME", "")
    if name:
        return name

    resolution = attributes.get("RESOLUTION", "")
    height = resolution.lower().partition("x")[2]
    if height.isdigit():
        return f"{height}p"

    return f"{bandwidth // 1000}k"


class ManifestParser:
    """Parser for HLS master playlists and media playlists."""

    def __init__(self, timing: Optional[TimingConfig] = None):
        """
        Initialize manifest parser.

        Args:
            timing: Intro/outro heuristic constants
        """
        self.timing = timing or TimingConfig()

    @staticmethod
    def is_master(text: str) -> bool:
        """Check whether playlist text declares variant streams."""
        return any(line.strip().startswith(STREAM_INF_TAG) for line in text.splitlines())

    def parse_master(self, text: str, base_url: str) -> List[QualityVariant]:
        """
        Parse a master playlist into quality variants.

        Each ``#EXT-X-STREAM-INF`` line opens a pending variant which the
        next playlist URL line closes. A pending variant never followed by
        a URL is dropped.

        Args:
            text: Master playlist text
            base_url: URL the playlist was fetched from

        Returns:
            Variants in playlist order

        Raises:
            InvalidAttribute: If a BANDWIDTH value is missing or not a
                non-negative integer
            NoVariantsFound: If no variant could be built
        """
        variants: List[QualityVariant] = []
        pending: Optional[Dict[str, str]] = None
        bandwidth = 0

        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line:
                continue

            if line.startswith(STREAM_INF_TAG):
                if pending is not None:
                    logger.debug(f"Discarding stream entry without URL: {pending}")
                pending = parse_attributes(line)
                bandwidth = _parse_bandwidth(pending, line)
                continue

            if line.startswith("#") or pending is None:
                continue

            if not _is_manifest_line(line):
                continue

            variants.append(
                QualityVariant(
                    name=_variant_name(pending, bandwidth),
                    bandwidth=bandwidth,
                    resolution=pending.get("RESOLUTION", ""),
                    url=resolve_url(base_url, line),
                )
            )
            pending = None

        if pending is not None:
            logger.debug(f"Discarding trailing stream entry without URL: {pending}")

        if not variants:
            raise NoVariantsFound(f"No quality variants found in master playlist {base_url}")

        logger.debug(f"Parsed {len(variants)} variants from {base_url}")
        return variants

    def total_duration(self, text: str) -> float:
        """
        Sum every segment duration declared in a media playlist.

        Raises:
            InvalidAttribute: If a segment duration is not a number
        """
        total = 0.0
        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line.startswith(SEGMENT_TAG):
                continue

            duration_text = line[len(SEGMENT_TAG):].split(",", 1)[0].strip()
            try:
                duration = float(duration_text)
            except ValueError as e:
                raise InvalidAttribute(
                    f"Invalid segment duration: '{duration_text}'",
                    attribute="EXTINF",
                    line=line,
                ) from e
            if duration < 0:
                raise InvalidAttribute(f"Negative segment duration: {duration}", attribute="EXTINF", line=line)
            total += duration

        return total

    def estimate_timing(self, text: str) -> Tuple[EpisodeTiming, EpisodeTiming]:
        """
        Estimate intro and outro windows from a media playlist.

        This is a heuristic based only on total runtime; callers must
        not treat the bounds as exact.

        Returns:
            Tuple of (intro, outro) windows in seconds
        """
        total = self.total_duration(text)
        outro_start = total * self.timing.outro_ratio

        intro = EpisodeTiming(start=0.0, end=self.timing.intro_seconds)
        outro = EpisodeTiming(start=outro_start, end=outro_start + self.timing.outro_seconds)
        return intro, outro


# Export parser and helpers
__all__ = [
    "ManifestParser",
    "TimingConfig",
    "parse_attributes",
    "resolve_url",
    "STREAM_INF_TAG",
    "MANIFEST_SUFFIX",
]
