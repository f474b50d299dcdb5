"""ShapeYourCity map HTTP client.

Uses httpx for async HTTP requests.  Fetches the marker listing and each
marker's responses; no caching and no retries.
"""

import json
from types import TracebackType
from typing import Any, Self
from urllib.parse import urljoin, urlsplit, urlunsplit

import httpx
from loguru import logger

from shapeyourcity.core.config import ConfigError
from shapeyourcity.lib.map_client.normalizer import normalize_responses
from shapeyourcity.lib.map_client.parser import DecodeError, parse_marker_listing, parse_marker_responses
from shapeyourcity.schemas.marker import Marker

_MARKERS_PATH = "markers?filter=other_users"


class FetchError(Exception):
    """Raised when an HTTP request to the map fails or returns a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def normalize_base_url(base_url: str) -> str:
    """Validate a map URL and make its path end with ``/``.

    The trailing slash makes relative references such as ``markers``
    resolve inside the map rather than beside it.

    Raises:
        ConfigError: If the URL is not an absolute http(s) URL.
    """
    parts = urlsplit(base_url.strip())
    if parts.scheme not in ("http", "https"):
        msg = f"Unsupported base URL scheme '{parts.scheme}' in {base_url!r}"
        raise ConfigError(msg)
    if not parts.netloc:
        msg = f"Base URL {base_url!r} must include a hostname"
        raise ConfigError(msg)

    path = parts.path
    if not path.endswith("/"):
        path += "/"
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, ""))


class MapClient:
    """Fetches markers and marker responses from one map.

    Args:
        base_url: The URL visited when viewing the map, eg
            https://www.shapeyourcityhalifax.ca/mobilityresponse/maps/halifax-mobility-response-streets
        timeout: HTTP request timeout in seconds.
        user_agent: Optional User-Agent header.
        http_client: Optional preconfigured client.  It is used as-is and
            is not closed by ``close()``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        user_agent: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = normalize_base_url(base_url)
        self._owns_client = http_client is None
        if http_client is None:
            headers = {"User-Agent": user_agent} if user_agent else None
            http_client = httpx.AsyncClient(timeout=timeout, headers=headers, follow_redirects=True)
        self._client = http_client

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    def marker_url(self, marker_id: int) -> str:
        """Deep link to a marker on the map page."""
        return urljoin(self.base_url, f"#marker-{marker_id}")

    async def list_markers(self) -> list[Marker]:
        """Fetch all markers from the map.

        The returned markers have empty ``responses``; see ``fill_responses``.

        Raises:
            FetchError: If the HTTP request fails.
            DecodeError: If the body is not a valid marker listing.
        """
        url = urljoin(self.base_url, _MARKERS_PATH)
        listing = parse_marker_listing(await self._get_json(url))

        markers = [
            Marker(
                id=m.id,
                user=m.user.login,
                created_at=m.created_at,
                address=m.address,
                category=m.category.name,
                latitude=m.lat,
                longitude=m.lng,
                url=self.marker_url(m.id),
                response_url=urljoin(self.base_url, m.response_url),
                editable=m.editable,
            )
            for m in listing.markers
        ]
        logger.debug("Listed {} markers from {}", len(markers), url)
        return markers

    async def fill_responses(self, marker: Marker) -> None:
        """Fetch the responses for ``marker`` and replace ``marker.responses``.

        Raises:
            FetchError: If the HTTP request fails.
            DecodeError: If the body or any answer has an unexpected shape.
        """
        marker.responses = []
        response = await self._get(marker.response_url)
        try:
            listing = parse_marker_responses(response.content)
            marker.responses = normalize_responses(listing.marker_response)
        except DecodeError as exc:
            logger.error("Could not decode marker {} responses: {}", marker.id, exc)
            raise
        logger.debug("Marker {} has {} responses", marker.id, len(marker.responses))

    async def _get(self, url: str) -> httpx.Response:
        """GET ``url`` and require a 2xx status."""
        try:
            logger.debug("Fetching {}", url)
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            msg = f"Timeout requesting {url}"
            logger.error(msg)
            raise FetchError(msg) from exc
        except httpx.HTTPStatusError as exc:
            msg = f"HTTP {exc.response.status_code} requesting {url}"
            logger.error(msg)
            raise FetchError(msg, status_code=exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            msg = f"HTTP error requesting {url}: {exc}"
            logger.error(msg)
            raise FetchError(msg) from exc
        return response

    async def _get_json(self, url: str) -> Any:
        """GET ``url`` and decode its JSON body."""
        response = await self._get(url)
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            msg = f"Invalid JSON response from {url}"
            logger.error(msg)
            raise DecodeError(msg) from exc
