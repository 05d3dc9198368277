"""
Core Data Models - Pydantic models for type safety and validation.

This module defines the data structures shared by the resolver, the
merger and the extraction pipeline: catalog entries, episode records,
quality variants and the stream descriptor handed to presentation layers.
Field aliases reproduce the JSON shape clients already consume.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SubType(str, Enum):
    """Audio variant of a provider catalog entry."""

    SUB = "sub"
    DUB = "dub"

    def __str__(self) -> str:
        return self.value


class Title(BaseModel):
    """Three-way title of a work as published by a metadata source."""

    model_config = ConfigDict(frozen=True)

    english: str = Field("", description="English title")
    romaji: str = Field("", description="Romanized title")
    native: str = Field("", description="Title in the original script")

    @field_validator("english", "romaji", "native", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> str:
        """Metadata APIs send null for missing titles."""
        if v is None:
            return ""
        return str(v).strip()

    def by_field(self) -> Dict[str, str]:
        """Return the title fields keyed by name."""
        return {"native": self.native, "romaji": self.romaji, "english": self.english}

    def __str__(self) -> str:
        return self.english or self.romaji or self.native


class EpisodeTiming(BaseModel):
    """Start and end offsets, in seconds, of an intro or outro window."""

    model_config = ConfigDict(frozen=True)

    start: float = Field(0.0, description="Window start in seconds")
    end: float = Field(0.0, description="Window end in seconds")


class QualityVariant(BaseModel):
    """
    One resolution/bitrate rendition of a stream.

    The name label is the identity used when subtitled and dubbed
    variants of the same episode are reconciled.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., alias="quality", description="Quality label, e.g. 720p")
    bandwidth: int = Field(..., ge=0, description="Bandwidth in bits per second")
    resolution: str = Field("", description="Provider-supplied resolution string")
    url: str = Field(..., alias="sub", description="Primary playlist URL")
    dub_url: Optional[str] = Field(None, alias="dub", description="Dubbed playlist URL for the same quality")

    def __str__(self) -> str:
        return f"{self.name} ({self.resolution or 'unknown'})"


class StreamDescriptor(BaseModel):
    """Everything needed to play one episode, built once per extraction."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sources: Tuple[QualityVariant, ...] = Field(default=(), alias="available_qualities")
    subtitles: Tuple[str, ...] = Field(default=())
    audio: Tuple[str, ...] = Field(default=())
    is_m3u8: bool = Field(False, description="Whether sources are segmented HLS")
    intro: EpisodeTiming = Field(default_factory=EpisodeTiming)
    outro: EpisodeTiming = Field(default_factory=EpisodeTiming)
    headers: Dict[str, str] = Field(default_factory=dict)
    thumbnail: Optional[str] = Field(None, description="Thumbnail sprite URL")
    thumbnail_type: Optional[str] = Field(None, alias="thumbnailType")


class SourceFile(BaseModel):
    """One entry of the decrypted source payload."""

    file: str = ""
    type: str = ""
    label: Optional[str] = None

    @field_validator("file", "type", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> str:
        return "" if v is None else str(v)


class TrackList(BaseModel):
    """Track field sent as a plain list of track objects."""

    shape: Literal["list"] = "list"
    tracks: List[Dict[str, Any]] = Field(default_factory=list)


class TrackWrapper(BaseModel):
    """Track field sent as an object wrapping a ``tracks`` list."""

    shape: Literal["wrapper"] = "wrapper"
    tracks: List[Dict[str, Any]] = Field(default_factory=list)


class TrackAbsent(BaseModel):
    """Track field missing or of an unrecognized shape."""

    shape: Literal["absent"] = "absent"

    @property
    def tracks(self) -> List[Dict[str, Any]]:
        return []


Track = Union[TrackList, TrackWrapper, TrackAbsent]


def decode_track(raw: Any) -> Track:
    """Resolve the loosely-typed track field into one explicit variant."""
    if isinstance(raw, (TrackList, TrackWrapper, TrackAbsent)):
        return raw
    if isinstance(raw, list):
        return TrackList(tracks=[item for item in raw if isinstance(item, dict)])
    if isinstance(raw, dict) and isinstance(raw.get("tracks"), list):
        return TrackWrapper(tracks=[item for item in raw["tracks"] if isinstance(item, dict)])
    return TrackAbsent()


class SourcePayload(BaseModel):
    """Decrypted payload returned by the provider's callback endpoint."""

    source: List[SourceFile] = Field(default_factory=list)
    source_bk: List[SourceFile] = Field(default_factory=list)
    track: Track = Field(default_factory=TrackAbsent)

    @field_validator("source", "source_bk", mode="before")
    @classmethod
    def null_to_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("track", mode="before")
    @classmethod
    def resolve_track(cls, v: Any) -> Track:
        return decode_track(v)


class CatalogEntry(BaseModel):
    """
    One provider's representation of a titled work.

    Entries are read-only once fetched; the resolver scores their titles
    but never modifies them.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, description="Provider-scoped identifier")
    title: Title = Field(default_factory=Title)
    id_mal: Optional[int] = Field(None, alias="idMal", description="MyAnimeList cross-reference")
    description: Optional[str] = None
    cover_image: Optional[str] = Field(None, alias="coverImage")
    banner_image: Optional[str] = Field(None, alias="bannerImage")
    color: Optional[str] = None
    genres: List[str] = Field(default_factory=list)
    synonyms: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    status: Optional[str] = None
    format: Optional[str] = None
    season: Optional[str] = None
    year: Optional[int] = None
    total_episodes: Optional[int] = Field(None, alias="totalEpisodes")
    duration: Optional[int] = None
    rating: Optional[float] = Field(None, ge=0.0, le=10.0)
    popularity: Optional[int] = None
    country_of_origin: Optional[str] = Field(None, alias="countryOfOrigin")
    is_adult: bool = Field(False, alias="isAdult")
    source: str = Field("", description="Provider that produced the entry")

    @field_validator("id_mal", mode="before")
    @classmethod
    def zero_to_none(cls, v: Any) -> Any:
        """AniList reports a missing MAL id as 0 or null."""
        if v in (None, "", 0, "0"):
            return None
        return v

    @property
    def display_title(self) -> str:
        """First non-empty title, preferring romaji."""
        return self.title.romaji or self.title.english or self.title.native

    def __str__(self) -> str:
        return f"{self.display_title} ({self.source or 'unknown'})"

    def __repr__(self) -> str:
        return f"CatalogEntry(id='{self.id}', title='{self.display_title}')"


class EpisodeRecord(BaseModel):
    """
    Represents one episode as contributed by a provider, or after merging.

    The episode number is the only key shared between providers; the
    stream descriptor stays empty until the episode is actually requested.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field("", description="Provider-scoped identifier or path")
    number: int = Field(..., ge=0, alias="episode", description="Episode number")
    title: Optional[str] = Field(None, description="Episode title")
    is_filler: bool = Field(False, alias="isFiller")
    has_dub: bool = Field(False, alias="hasDub")
    image: Optional[str] = Field(None, alias="img")
    description: Optional[str] = None
    rating: Optional[float] = None
    source: Optional[StreamDescriptor] = None
    series: Optional[Title] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        """Blank titles are treated as missing."""
        if v is None:
            return v
        v = v.strip()
        return v or None

    def __str__(self) -> str:
        return f"Episode {self.number}: {self.title or 'Untitled'}"

    def __repr__(self) -> str:
        return f"EpisodeRecord(number={self.number}, has_dub={self.has_dub})"


class AnimeInfo(CatalogEntry):
    """A catalog entry enriched with its canonical episode list."""

    episodes: List[EpisodeRecord] = Field(default_factory=list)


class ProviderMapping(BaseModel):
    """Sub and dub catalog entries of the scraping provider for one work."""

    sub: Optional[CatalogEntry] = None
    dub: Optional[CatalogEntry] = None

    @property
    def is_empty(self) -> bool:
        return self.sub is None and self.dub is None


# Type aliases for better code readability
CatalogList = List[CatalogEntry]
EpisodeList = List[EpisodeRecord]
QualityList = List[QualityVariant]

# Export all models and types
__all__ = [
    "SubType",
    "Title",
    "EpisodeTiming",
    "QualityVariant",
    "StreamDescriptor",
    "SourceFile",
    "TrackList",
    "TrackWrapper",
    "TrackAbsent",
    "Track",
    "decode_track",
    "SourcePayload",
    "CatalogEntry",
    "EpisodeRecord",
    "AnimeInfo",
    "ProviderMapping",
    "CatalogList",
    "EpisodeList",
    "QualityList",
]
