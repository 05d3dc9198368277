"""
Base Plugin - HTTP plumbing shared by the provider clients.

Every client owns one lazily created aiohttp session. Requests resolve
relative URLs against the client's site, turn HTTP errors into
:class:`NetworkError` and retry connection problems with a growing pause.
Plugins also act as the :class:`PageFetcher` handed to the extraction
pipeline.
"""

import asyncio
import json
import logging
from abc import abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar
from urllib.parse import urljoin, urlparse

import aiohttp
from pydantic import BaseModel, ConfigDict, Field

from aniverse.core.exceptions import DecodeFailure, NetworkError
from aniverse.core.interfaces import PageFetcher


logger = logging.getLogger(__name__)

T = TypeVar("T")
Reader = Callable[[aiohttp.ClientResponse], Awaitable[T]]

DEFAULT_USER_AGENT = "Aniverse/0.1.0"

BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


class PluginMetadata(BaseModel):
    """Descriptive information shown for a plugin."""

    name: str = Field(..., description="Plugin display name")
    version: str = Field(default="1.0.0")
    author: str = Field(default="Aniverse Team")
    description: str = Field(default="")
    website: Optional[str] = Field(None, description="Site the plugin talks to")


class TransportOptions(BaseModel):
    """Connection knobs read from a plugin's configuration mapping."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    timeout: float = 30
    max_retries: int = Field(default=3, ge=0)
    retry_delay: float = Field(default=1.0, ge=0)
    user_agent: str = DEFAULT_USER_AGENT


async def _read_text(response: aiohttp.ClientResponse) -> str:
    return await response.text()


async def _read_json(response: aiohttp.ClientResponse) -> Any:
    body = await response.text()
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise DecodeFailure(f"Invalid JSON from {response.url}: {e}", details=body[:200]) from e


class BasePlugin(PageFetcher):
    """
    Common ancestor of the provider clients.

    Subclasses define :attr:`metadata` and :attr:`base_url`. The ``config``
    mapping carries the transport options (``timeout``, ``max_retries``,
    ``retry_delay``, ``user_agent``) next to plugin-specific keys.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config: Dict[str, Any] = dict(config or {})
        self.transport = TransportOptions.model_validate(self.config)
        self.logger = logging.getLogger(f"{__name__}.{type(self).__name__}")
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    @abstractmethod
    def metadata(self) -> PluginMetadata:
        """Name and version of the plugin."""

    @property
    @abstractmethod
    def base_url(self) -> str:
        """Root URL that relative request paths are joined to."""

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(limit=10, limit_per_host=5, ttl_dns_cache=300),
                timeout=aiohttp.ClientTimeout(total=self.transport.timeout),
                headers={"User-Agent": self.transport.user_agent, **BROWSER_HEADERS},
            )
        return self._session

    def _absolute(self, url: str) -> str:
        return url if urlparse(url).netloc else urljoin(self.base_url, url)

    async def _attempt(self, method: str, url: str, reader: Reader, **kwargs) -> T:
        async with self.session.request(method, url, **kwargs) as response:
            if response.status >= 400:
                raise NetworkError(
                    f"HTTP {response.status} error for {url}",
                    url=url,
                    http_status=response.status,
                    details=await response.text(),
                )
            return await reader(response)

    async def _request(self, method: str, url: str, reader: Reader, **kwargs) -> T:
        """
        Send a request and hand the response to ``reader``.

        HTTP error statuses fail at once. Connection errors and timeouts
        are retried ``max_retries`` times, sleeping ``retry_delay`` times
        the attempt number in between.

        Raises:
            NetworkError: Error status, or every attempt failed
        """
        url = self._absolute(url)
        attempts = self.transport.max_retries + 1
        failure: Optional[BaseException] = None

        for attempt in range(1, attempts + 1):
            self.logger.debug(f"{method} {url} (attempt {attempt}/{attempts})")
            try:
                return await self._attempt(method, url, reader, **kwargs)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                failure = e
                self.logger.warning(f"{method} {url} failed on attempt {attempt}: {e}")
            if attempt < attempts:
                await asyncio.sleep(self.transport.retry_delay * attempt)

        raise NetworkError(
            f"Request failed after {attempts} attempts: {failure}",
            url=url,
            details=str(failure),
        )

    async def _get_text(self, url: str, **kwargs) -> str:
        return await self._request("GET", url, _read_text, **kwargs)

    async def _get_json(self, url: str, **kwargs) -> Any:
        return await self._request("GET", url, _read_json, **kwargs)

    async def _post_json(self, url: str, payload: Dict[str, Any], **kwargs) -> Any:
        """POST ``payload`` as JSON and decode the JSON reply."""
        return await self._request("POST", url, _read_json, json=payload, **kwargs)

    async def fetch_page_text(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        return await self._get_text(url, headers=headers)

    async def cleanup(self) -> None:
        """Close the HTTP session if one was opened."""
        session, self._session = self._session, None
        if session is None or session.closed:
            return
        try:
            await session.close()
        except aiohttp.ClientError as e:
            self.logger.debug(f"Closing session raised {e}")
        else:
            self.logger.debug("HTTP session closed")

    async def __aenter__(self) -> "BasePlugin":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.cleanup()

    def __str__(self) -> str:
        return f"{self.metadata.name} v{self.metadata.version}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name='{self.metadata.name}')"


__all__ = ["BasePlugin", "PluginMetadata", "TransportOptions"]
