"""
Core Exceptions - Error taxonomy for Aniverse.

This module defines the exception classes raised by the extraction
pipeline, the resolver and the provider plugins. Every class carries
a ``status_code`` describing the user-visible response class it maps to.
"""

from typing import Optional, Any


class AniverseError(Exception):
    """Base exception class for all Aniverse-specific errors."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        """
        Initialize Aniverse error.

        Args:
            message: Human-readable error message
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return self.message


class InvalidArgument(AniverseError):
    """Raised when caller-supplied input is structurally wrong."""

    status_code = 400

    def __init__(self, message: str, field_name: Optional[str] = None, details: Optional[Any] = None):
        """
        Initialize invalid argument error.

        Args:
            message: Error description
            field_name: Name of the offending argument or query parameter
            details: Additional error context
        """
        super().__init__(message, details)
        self.field_name = field_name


class RequestFailure(AniverseError):
    """Raised when an external fetch fails."""

    status_code = 502

    def __init__(self, message: str, url: Optional[str] = None, http_status: Optional[int] = None, details: Optional[Any] = None):
        """
        Initialize request failure.

        Args:
            message: Error description
            url: URL that caused the error
            http_status: HTTP status code of the response if one was received
            details: Additional error context
        """
        super().__init__(message, details)
        self.url = url
        self.http_status = http_status


# Transport errors are reported under the name the plugins have always used.
NetworkError = RequestFailure


class DecodeFailure(AniverseError):
    """Raised when a structured payload cannot be decoded."""

    status_code = 502


class CryptoFailure(AniverseError):
    """Base class for cipher errors."""

    status_code = 500


class MalformedCiphertext(CryptoFailure):
    """Raised when ciphertext is not valid base64 or not block-aligned."""


class InvalidPadding(CryptoFailure):
    """Raised when decrypted data carries invalid padding."""


class CipherInitFailure(CryptoFailure):
    """Raised when the cipher cannot be initialized (bad key or IV length)."""


class ParseFailure(AniverseError):
    """Base class for manifest parsing errors."""

    status_code = 502

    def __init__(self, message: str, line: Optional[str] = None, details: Optional[Any] = None):
        """
        Initialize parse failure.

        Args:
            message: Error description
            line: Manifest line that failed to parse
            details: Additional error context
        """
        super().__init__(message, details)
        self.line = line


class NoVariantsFound(ParseFailure):
    """Raised when a master manifest yields no quality variants."""


class InvalidAttribute(ParseFailure):
    """Raised when a manifest attribute does not parse as its expected type."""

    def __init__(self, message: str, attribute: Optional[str] = None, line: Optional[str] = None, details: Optional[Any] = None):
        super().__init__(message, line=line, details=details)
        self.attribute = attribute


class ExtractionError(AniverseError):
    """Raised when a provider page does not contain the expected content."""

    status_code = 502


class NoContent(ExtractionError):
    """Raised when the obfuscated parameter blob is missing from a page."""


InvalidRegex = NoContent


class NoMatchFound(AniverseError):
    """Raised when a lookup or title resolution finds nothing usable."""

    status_code = 404

    def __init__(self, message: str, query: Optional[str] = None, details: Optional[Any] = None):
        """
        Initialize no-match error.

        Args:
            message: Error description
            query: Title, identifier or number that was looked up
            details: Additional error context
        """
        super().__init__(message, details)
        self.query = query


class ConfigurationError(AniverseError):
    """Raised when configuration-related errors occur."""

    def __init__(self, message: str, config_path: Optional[str] = None, details: Optional[Any] = None):
        """
        Initialize configuration error.

        Args:
            message: Error description
            config_path: Path to the problematic configuration file
            details: Additional error context
        """
        super().__init__(message, details)
        self.config_path = config_path


class PluginError(AniverseError):
    """Raised when a provider plugin returns something it cannot handle."""

    status_code = 502

    def __init__(self, message: str, plugin_name: Optional[str] = None, details: Optional[Any] = None):
        """
        Initialize plugin error.

        Args:
            message: Error description
            plugin_name: Name of the problematic plugin
            details: Additional error context
        """
        super().__init__(message, details)
        self.plugin_name = plugin_name


def http_status_for(error: BaseException) -> int:
    """Map any exception onto the user-visible HTTP status class."""
    if isinstance(error, AniverseError):
        return error.status_code
    return 500


# Export all exception classes
__all__ = [
    "AniverseError",
    "InvalidArgument",
    "RequestFailure",
    "NetworkError",
    "DecodeFailure",
    "CryptoFailure",
    "MalformedCiphertext",
    "InvalidPadding",
    "CipherInitFailure",
    "ParseFailure",
    "NoVariantsFound",
    "InvalidAttribute",
    "ExtractionError",
    "NoContent",
    "InvalidRegex",
    "NoMatchFound",
    "ConfigurationError",
    "PluginError",
    "http_status_for",
]
