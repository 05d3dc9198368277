"""
Configuration Schemas - Pydantic models for configuration validation.

This module defines the data structures and validation rules for
application settings: network transport, provider endpoints, extraction
secrets, resolver tuning and logging.
"""

from typing import List, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from aniverse.core.manifest import TimingConfig


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

AES_KEY_LENGTHS = (16, 24, 32)
AES_IV_LENGTH = 16


class NetworkSettings(BaseModel):
    """HTTP transport configuration shared by all provider plugins."""

    timeout: int = Field(
        default=30,
        ge=5,
        le=300,
        description="Network timeout in seconds"
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Maximum number of retry attempts"
    )
    retry_delay: float = Field(
        default=1.0,
        ge=0.0,
        le=30.0,
        description="Base delay between retries in seconds"
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        min_length=1,
        description="User-Agent header sent to providers"
    )


class ProviderSettings(BaseModel):
    """Base URLs of the providers."""

    gogoanime_url: str = Field(
        default="https://gogoanime3.co",
        description="Scraping provider site"
    )
    gogoanime_ajax_url: str = Field(
        default="https://ajax.gogocdn.net",
        description="Scraping provider episode list endpoint"
    )
    anilist_url: str = Field(
        default="https://graphql.anilist.co",
        description="Metadata GraphQL endpoint"
    )
    myanimelist_url: str = Field(
        default="https://myanimelist.net",
        description="Episode title source"
    )

    @field_validator('gogoanime_url', 'gogoanime_ajax_url', 'anilist_url', 'myanimelist_url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Require absolute http(s) URLs without a trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v.rstrip("/")


class ExtractionSettings(BaseModel):
    """Key material and timing heuristic of the extraction pipeline."""

    page_key: str = Field(
        default="37911490979715163134003223491201",
        description="Key protecting the player page parameters"
    )
    response_key: str = Field(
        default="54674138327930866480207815084989",
        description="Key protecting the callback payload"
    )
    iv: str = Field(
        default="3134003223491201",
        description="Initialization vector shared by both keys"
    )
    intro_seconds: float = Field(
        default=90.0,
        ge=0.0,
        description="Assumed intro length in seconds"
    )
    outro_ratio: float = Field(
        default=0.85,
        ge=0.0,
        le=1.0,
        description="Fraction of the runtime at which the outro starts"
    )
    outro_seconds: float = Field(
        default=60.0,
        ge=0.0,
        description="Assumed outro length in seconds"
    )

    @field_validator('page_key', 'response_key')
    @classmethod
    def validate_key(cls, v: str) -> str:
        """Keys must be valid AES key lengths."""
        if len(v.encode("utf-8")) not in AES_KEY_LENGTHS:
            raise ValueError(f"Key must be {', '.join(map(str, AES_KEY_LENGTHS))} bytes long")
        return v

    @field_validator('iv')
    @classmethod
    def validate_iv(cls, v: str) -> str:
        """The IV must be exactly one block long."""
        if len(v.encode("utf-8")) != AES_IV_LENGTH:
            raise ValueError(f"IV must be {AES_IV_LENGTH} bytes long")
        return v

    def timing(self) -> TimingConfig:
        """Build the manifest parser's timing constants."""
        return TimingConfig(
            intro_seconds=self.intro_seconds,
            outro_ratio=self.outro_ratio,
            outro_seconds=self.outro_seconds,
        )


class ResolverSettings(BaseModel):
    """Title matching configuration."""

    stop_words: List[str] = Field(
        default_factory=lambda: ["season", "part", "cour"],
        description="Words ignored when comparing titles"
    )
    dub_suffix: str = Field(
        default="dub",
        min_length=1,
        description="Token appended to titles when looking for dubs"
    )
    dub_marker: str = Field(
        default="(dub)",
        min_length=1,
        description="Text identifying dubbed catalog entries"
    )

    @field_validator('stop_words')
    @classmethod
    def validate_stop_words(cls, v: List[str]) -> List[str]:
        """Normalize stop words to single lowercase words."""
        words = []
        for word in v:
            word = word.strip().lower()
            if not word:
                continue
            if " " in word:
                raise ValueError(f"Stop word must be a single word: '{word}'")
            if word not in words:
                words.append(word)
        return words


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator('level', mode='before')
    @classmethod
    def normalize_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v


class AppSettings(BaseModel):
    """Main application settings container."""

    network: NetworkSettings = Field(default_factory=NetworkSettings)
    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    resolver: ResolverSettings = Field(default_factory=ResolverSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @model_validator(mode='after')
    def validate_settings_consistency(self) -> 'AppSettings':
        """Validate that settings are internally consistent."""
        # The callback payload must not be protected by the page key
        if self.extraction.page_key == self.extraction.response_key:
            raise ValueError("extraction.page_key and extraction.response_key must differ")

        return self


# Export all configuration models
__all__ = [
    "NetworkSettings",
    "ProviderSettings",
    "ExtractionSettings",
    "ResolverSettings",
    "LoggingSettings",
    "AppSettings",
]
