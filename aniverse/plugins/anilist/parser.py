"""
AniList Data Parser

This module maps AniList GraphQL ``Media`` objects onto catalog entries.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from aniverse.core.exceptions import DecodeFailure
from aniverse.core.models import CatalogEntry, Title
from aniverse.plugins.common import TextCleaner
from aniverse.plugins.common.utils import as_int


logger = logging.getLogger(__name__)

# Fields requested for every Media object
MEDIA_FIELDS = """
id
idMal
title {
  romaji
  english
  native
}
coverImage {
  extraLarge
  color
}
bannerImage
description
season
seasonYear
format
status(version: 2)
episodes
duration
genres
synonyms
isAdult
meanScore
popularity
countryOfOrigin
tags {
  name
}
"""

SEARCH_QUERY = """
query ($page: Int, $perPage: Int, $search: String, $type: MediaType, $format: [MediaFormat]) {
  Page(page: $page, perPage: $perPage) {
    media(type: $type, format_in: $format, search: $search) {
%s
    }
  }
}
""" % MEDIA_FIELDS

MEDIA_QUERY = """
query ($id: Int) {
  Media(id: $id) {
%s
  }
}
""" % MEDIA_FIELDS


class AniListParser:
    """Parser for AniList GraphQL responses."""

    source_name = "anilist"

    def parse_media(self, media: Dict[str, Any]) -> CatalogEntry:
        """
        Convert one Media object into a catalog entry.

        ``meanScore`` (0-100) becomes a 0-10 rating; a score of 0 means
        unrated.

        Raises:
            DecodeFailure: If the object does not describe a valid entry
        """
        cover = media.get("coverImage") or {}
        mean_score = as_int(media.get("meanScore"))
        tags = [tag["name"] for tag in media.get("tags") or [] if isinstance(tag, dict) and tag.get("name")]

        try:
            return CatalogEntry(
                id=str(media.get("id") or ""),
                id_mal=as_int(media.get("idMal")),
                title=Title.model_validate(media.get("title") or {}),
                description=TextCleaner.clean_description(media.get("description")),
                cover_image=cover.get("extraLarge"),
                color=cover.get("color"),
                banner_image=media.get("bannerImage"),
                genres=media.get("genres") or [],
                synonyms=media.get("synonyms") or [],
                tags=tags,
                status=media.get("status"),
                format=media.get("format"),
                season=media.get("season"),
                year=as_int(media.get("seasonYear")),
                total_episodes=as_int(media.get("episodes")),
                duration=as_int(media.get("duration")),
                rating=mean_score / 10 if mean_score else None,
                popularity=as_int(media.get("popularity")),
                country_of_origin=media.get("countryOfOrigin"),
                is_adult=bool(media.get("isAdult")),
                source=self.source_name,
            )
        except ValidationError as e:
            raise DecodeFailure(f"Unexpected AniList media object: {e}") from e

    def parse_search(self, response: Dict[str, Any]) -> List[CatalogEntry]:
        """
        Convert a search response into catalog entries, dropping adult media.

        Raises:
            DecodeFailure: If the response has no media list
        """
        if not isinstance(response, dict):
            raise DecodeFailure("AniList response is not a JSON object")

        page = (response.get("data") or {}).get("Page") or {}
        media_list = page.get("media")
        if not isinstance(media_list, list):
            raise DecodeFailure("AniList search response has no media list", details=response.get("errors"))

        entries = []
        for media in media_list:
            if not isinstance(media, dict) or media.get("isAdult"):
                continue
            entries.append(self.parse_media(media))

        logger.debug(f"Parsed {len(entries)} AniList entries")
        return entries

    def media_of(self, response: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Return the Media object of a single-media response, if any."""
        if not isinstance(response, dict):
            raise DecodeFailure("AniList response is not a JSON object")
        media = (response.get("data") or {}).get("Media")
        return media if isinstance(media, dict) else None


# Export parser and queries
__all__ = ["AniListParser", "SEARCH_QUERY", "MEDIA_QUERY", "MEDIA_FIELDS"]
