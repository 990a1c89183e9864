"""
ApiClient - HTTP transport for the AdStudio backend.

Responsibilities:
- One shared httpx.AsyncClient with explicit timeouts
- Decoding the {code, message, data} envelope into typed models
- Routing reads through the RequestCache and invalidating it on every write
- The primary/fallback base URL strategy used by the warmup endpoints

Resource services (CreativeService, ExperimentService, ...) sit on top of
this class and never talk to httpx directly.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from ..core.config import Config
from ..core.exceptions import ApiError, TransportError
from ..core.models import ApiResponse
from ..core.observability import span
from .request_cache import RequestCache

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

HTML_MARKERS = ("<!doctype", "<html")


def path_segment(value: Any) -> str:
    """Quote an id for use inside a URL path."""
    return quote(str(value), safe="")


def clean_params(params: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """Drop None values so they are neither sent nor part of the cache key."""
    if not params:
        return None
    cleaned = {key: value for key, value in params.items() if value is not None}
    return cleaned or None


def looks_like_html(response: httpx.Response) -> bool:
    """True when the server answered with a web page instead of API JSON."""
    content_type = response.headers.get("content-type", "").lower()
    if "text/html" in content_type:
        return True
    head = response.text.lstrip()[:64].lower()
    return head.startswith(HTML_MARKERS)


class ApiClient:
    """
    Async client for the AdStudio REST API.

    Example usage:
        async with ApiClient() as client:
            tasks = await client.get("/creative/tasks", TaskList, params={"page": 1})
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        fallback_base_url: Optional[str] = None,
        cache: Optional[RequestCache] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        health_url: Optional[str] = None,
    ):
        """
        Initialize ApiClient.

        Args:
            base_url: API base, e.g. "https://host/api/v1" (default: Config.API_BASE)
            fallback_base_url: Secondary base tried when the primary serves HTML
            cache: Read cache (a private RequestCache is created when omitted)
            http_client: Preconfigured httpx.AsyncClient (tests inject one)
            health_url: Absolute URL of the health endpoint
        """
        self.base_url = (base_url or Config.API_BASE).rstrip("/")
        self.fallback_base_url = (fallback_base_url or Config.API_BASE_FALLBACK).rstrip("/")
        self.health_url = health_url or Config.HEALTH_URL
        self.cache = cache if cache is not None else RequestCache(ttl_seconds=Config.CACHE_TTL_SECONDS)
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(
                Config.REQUEST_TIMEOUT_SECONDS,
                connect=Config.CONNECT_TIMEOUT_SECONDS,
            ),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # =========================================================================
    # Transport
    # =========================================================================

    async def _send(
        self,
        method: str,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> httpx.Response:
        try:
            response = await self._http.request(method, url, params=clean_params(params), json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"{method} {url} returned HTTP {status}")
            raise TransportError(f"HTTP {status} from {method} {url}", status_code=status, url=url) from e
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise TransportError(f"{method} {url} failed: {e}", url=url) from e
        return response

    async def fetch_json(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        json: Optional[Any] = None,
        base_url: Optional[str] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body."""
        url = f"{base_url or self.base_url}{path}"
        with span("adstudio {method} {path}", method=method, path=path):
            response = await self._send(method, url, params=params, json=json)
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON from {method} {url}", status_code=response.status_code, url=url
            ) from e

    # =========================================================================
    # Envelope
    # =========================================================================

    @staticmethod
    def unwrap(payload: Any, model: Optional[Type[M]], endpoint: str) -> Any:
        """
        Validate an envelope and return its data.

        Args:
            payload: Decoded JSON body
            model: Pydantic model for data (None returns data untouched and
                allows it to be absent)
            endpoint: Path, for error messages

        Raises:
            ApiError: code != 0, or code == 0 without the required data
            TransportError: body is not an envelope or data does not match model
        """
        try:
            envelope = ApiResponse[Any].model_validate(payload)
        except ValidationError as e:
            raise TransportError(f"Malformed response from {endpoint}: {e.error_count()} errors") from e

        if not envelope.ok:
            logger.warning(f"{endpoint} returned code={envelope.code}: {envelope.message}")
            raise ApiError(envelope.code, envelope.message, endpoint=endpoint)

        if model is None:
            return envelope.data
        if envelope.data is None:
            raise ApiError(envelope.code, f"{endpoint} returned no data", endpoint=endpoint)

        try:
            return model.model_validate(envelope.data)
        except ValidationError as e:
            raise TransportError(f"Unexpected data shape from {endpoint}: {e.error_count()} errors") from e

    # =========================================================================
    # Reads and writes
    # =========================================================================

    async def get(
        self,
        path: str,
        model: Optional[Type[M]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Cached GET. Only successfully unwrapped data is stored."""
        params = clean_params(params)

        async def fetch() -> Any:
            payload = await self.fetch_json("GET", path, params=params)
            return self.unwrap(payload, model, path)

        return await self.cache.get(path, params, fetch)

    async def get_fresh(
        self,
        path: str,
        model: Optional[Type[M]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """GET that skips the cached value and stores the new one."""
        self.cache.invalidate(path, clean_params(params))
        return await self.get(path, model, params)

    async def write(
        self,
        method: str,
        path: str,
        body: Optional[Any] = None,
        model: Optional[Type[M]] = None,
    ) -> Any:
        """
        Mutating request. The whole cache is dropped before the caller sees
        the outcome, whether the write succeeded or not.
        """
        try:
            payload = await self.fetch_json(method, path, json=body)
        finally:
            self.cache.invalidate_all()
        logger.info(f"{method} {path} completed")
        return self.unwrap(payload, model, path)

    # =========================================================================
    # Primary/fallback strategy
    # =========================================================================

    async def request_with_fallback(self, method: str, path: str) -> Any:
        """
        Two-step resolution against the primary and fallback base URLs.

        1. Ask the primary base. Any non-HTML answer is final.
        2. If the primary served an HTML page (typically the dashboard's own
           index.html behind a misrouted proxy), ask the fallback base once
           and use its answer.

        Returns:
            Decoded JSON, or the raw text when the body is not JSON.
        """
        primary_url = f"{self.base_url}{path}"
        with span("adstudio {method} {path}", method=method, path=path):
            response = await self._send(method, primary_url)

            if looks_like_html(response) and self.fallback_base_url != self.base_url:
                logger.warning(
                    f"{method} {path} got HTML from {self.base_url}, "
                    f"retrying with fallback base {self.fallback_base_url}"
                )
                response = await self._send(method, f"{self.fallback_base_url}{path}")

        try:
            return response.json()
        except ValueError:
            return response.text

    # =========================================================================
    # Health
    # =========================================================================

    async def health(self) -> Any:
        """Server health document (outside the API prefix, not cached)."""
        response = await self._send("GET", self.health_url)
        try:
            return response.json()
        except ValueError:
            return response.text

    async def ping(self) -> Optional[Any]:
        """GET /ping through the envelope, not cached."""
        payload = await self.fetch_json("GET", "/ping")
        return self.unwrap(payload, None, "/ping")
