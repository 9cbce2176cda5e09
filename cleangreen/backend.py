"""
Gateway to the backend REST API.

Every backend interaction goes through BackendClient: it forwards the caller's
credentials, turns non-2xx and transport failures into BackendRequestError and
reads through the query cache for GET requests.
"""

import hashlib
import logging
from typing import Any, Optional

import httpx

from .config import BACKEND_API_URL, BACKEND_TIMEOUT_SECONDS
from .errors import BackendRequestError
from .query_cache import QueryCache, QueryKey, make_key

logger = logging.getLogger(__name__)

FORWARDED_HEADERS = ("authorization", "cookie")
PUBLIC_SCOPE = "public"


def create_http_client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Create the shared AsyncClient pointed at the backend"""
    return httpx.AsyncClient(
        base_url=BACKEND_API_URL,
        timeout=BACKEND_TIMEOUT_SECONDS,
        headers={"Accept": "application/json"},
        transport=transport,
    )


def _error_message(response: httpx.Response) -> Optional[str]:
    """Pull a server-provided message out of an error body"""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        for field in ("error", "message", "detail"):
            value = body.get(field)
            if isinstance(value, str) and value:
                return value
    return None


class BackendClient:
    """Typed access to the backend API with credential forwarding and a query cache"""

    def __init__(
        self,
        http: httpx.AsyncClient,
        cache: QueryCache,
        forward_headers: Optional[dict[str, str]] = None,
    ):
        self.http = http
        self.cache = cache
        self.forward_headers = forward_headers or {}

    def with_credentials(self, headers: Any) -> "BackendClient":
        """Return a view of this client that forwards the caller's auth headers"""
        forwarded = {}
        for name in FORWARDED_HEADERS:
            value = headers.get(name)
            if value:
                forwarded[name] = value
        return BackendClient(self.http, self.cache, forwarded)

    @property
    def cache_scope(self) -> str:
        """Cache partition for this caller so authenticated reads are never shared"""
        if not self.forward_headers:
            return PUBLIC_SCOPE
        raw = "|".join(f"{k}={v}" for k, v in sorted(self.forward_headers.items()))
        return hashlib.sha256(raw.encode()).hexdigest()[:16]

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[dict] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (None for empty bodies)"""
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        try:
            response = await self.http.request(
                method, path, json=json, params=params, headers=self.forward_headers
            )
        except httpx.TimeoutException as e:
            logger.error(f"⏰ Backend timeout on {method} {path}: {e}")
            raise BackendRequestError("The server took too long to respond. Please try again.", status=503) from e
        except httpx.HTTPError as e:
            logger.error(f"❌ Backend unreachable on {method} {path}: {e}")
            raise BackendRequestError("Unable to reach the server. Please try again.", status=503) from e

        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning(f"⚠️ Backend {method} {path} returned {response.status_code}: {message}")
            raise BackendRequestError(
                message or "Something went wrong. Please try again.",
                status=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"❌ Backend {method} {path} returned a non-JSON body")
            raise BackendRequestError("Unexpected response from the server.") from e

    async def get(self, path: str, params: Optional[dict] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def patch(self, path: str, json: Any = None, params: Optional[dict] = None) -> Any:
        return await self.request("PATCH", path, json=json, params=params)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    def key(self, path: str, *parts: Any) -> QueryKey:
        """Query key for a read; the caller's scope goes last so path prefixes still invalidate"""
        return make_key(path, *parts, self.cache_scope)

    async def query(
        self,
        path: str,
        *parts: Any,
        params: Optional[dict] = None,
        ttl: Optional[int] = None,
    ) -> Any:
        """Cached GET. parts identify the query beyond its path (e.g. a date or an email)"""
        return await self.cache.fetch(
            self.key(path, *parts),
            lambda: self.get(path, params=params),
            ttl=ttl,
        )

    def invalidate(self, path: str, *parts: Any) -> int:
        return self.cache.invalidate(path, *parts)
