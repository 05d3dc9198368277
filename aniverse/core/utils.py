"""
Core Utilities - Shared utility functions and helpers.

This module contains small helpers used across Aniverse: PKCE code
verifier generation for OAuth-style providers, the store that keeps
verifiers between the authorization request and its callback, and
formatting helpers for URLs and titles.
"""

import base64
import hashlib
import re
import secrets
import string
from threading import Lock
from typing import Dict, Iterator, Optional
from urllib.parse import urlparse

from aniverse.core.exceptions import InvalidArgument


VERIFIER_MIN_LENGTH = 43
VERIFIER_MAX_LENGTH = 128
VERIFIER_ALPHABET = string.ascii_lowercase


def generate_code_verifier(length: int = VERIFIER_MIN_LENGTH) -> str:
    """
    Create a random PKCE code verifier of lowercase letters.

    Args:
        length: Verifier length, between 43 and 128

    Returns:
        The code verifier

    Raises:
        InvalidArgument: If the length is out of range
    """
    if not VERIFIER_MIN_LENGTH <= length <= VERIFIER_MAX_LENGTH:
        raise InvalidArgument(
            f"code_verifier must be between {VERIFIER_MIN_LENGTH} and {VERIFIER_MAX_LENGTH} characters",
            field_name="length",
        )
    return "".join(secrets.choice(VERIFIER_ALPHABET) for _ in range(length))


def generate_code_challenge(verifier: str) -> str:
    """
    Derive the S256 code challenge of a verifier.

    Args:
        verifier: Code verifier, 43 to 128 characters long

    Returns:
        Base64url-encoded SHA-256 digest without padding

    Raises:
        InvalidArgument: If the verifier length is out of range
    """
    if not VERIFIER_MIN_LENGTH <= len(verifier) <= VERIFIER_MAX_LENGTH:
        raise InvalidArgument(
            f"code_verifier must be between {VERIFIER_MIN_LENGTH} and {VERIFIER_MAX_LENGTH} characters",
            field_name="code_verifier",
        )
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


class CodeVerifierStore:
    """
    Keeps code verifiers keyed by the OAuth ``state`` value.

    The store is owned by whoever runs the authorization flow; there is
    no module-level instance.
    """

    def __init__(self):
        self._verifiers: Dict[str, str] = {}
        self._lock = Lock()

    def store(self, state: str, verifier: str) -> None:
        """Remember the verifier issued for a state, replacing any previous one."""
        if not state:
            raise InvalidArgument("state must not be empty", field_name="state")
        with self._lock:
            self._verifiers[state] = verifier

    def get(self, state: str) -> Optional[str]:
        """Return the verifier stored for a state, if any."""
        with self._lock:
            return self._verifiers.get(state)

    def pop(self, state: str) -> Optional[str]:
        """Remove and return the verifier stored for a state, if any."""
        with self._lock:
            return self._verifiers.pop(state, None)

    def __contains__(self, state: object) -> bool:
        with self._lock:
            return state in self._verifiers

    def __len__(self) -> int:
        with self._lock:
            return len(self._verifiers)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._verifiers))


def validate_url(url: str) -> bool:
    """
    Validate if a string is a properly formatted URL.

    Args:
        url: The URL string to validate

    Returns:
        True if URL is valid, False otherwise
    """
    try:
        result = urlparse(url)
        return all([result.scheme, result.netloc])
    except ValueError:
        return False


def title_slug(title: str) -> str:
    """
    Build the path slug MyAnimeList uses for a title.

    Lowercases the title and replaces whitespace runs with underscores.
    """
    return re.sub(r"\s+", "_", title.strip().lower())


def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate text to a maximum length with optional suffix.

    Args:
        text: The text to truncate
        max_length: Maximum allowed length
        suffix: Suffix to add when truncating

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text

    return text[:max_length - len(suffix)] + suffix


# Export utility functions
__all__ = [
    "generate_code_verifier",
    "generate_code_challenge",
    "CodeVerifierStore",
    "validate_url",
    "title_slug",
    "truncate_text",
]
