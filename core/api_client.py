"""API client for XENOPETS - handles network communication with the backend"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import httpx

from core.api_config import APIConfig
from core.errors import BackendError, IntegrityError, TransportError
from core.models import PendingMutation

# Setup logging
logger = logging.getLogger(__name__)


class ResilientTransport:
    """
    Sends HTTP requests with a per-attempt timeout, bounded retries and
    exponential backoff.

    - 2xx and 4xx responses are returned as-is (a malformed or forbidden
      request cannot succeed by retrying)
    - 5xx responses, timeouts and connection failures are retried
    - Backoff is retry_delay * 2**attempt (1s, then 2s with the defaults)
    - After the last attempt a single TransportError is raised

    Timeouts apply to each attempt, not to the whole call. A retry sequence
    runs to completion or exhaustion; it is not cancellable.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        retry_count: Optional[int] = None,
        retry_delay: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None
    ):
        self.timeout = APIConfig.get_timeout() if timeout is None else timeout
        self.retry_count = APIConfig.get_retry_count() if retry_count is None else retry_count
        self.retry_delay = APIConfig.get_retry_delay() if retry_delay is None else retry_delay
        self.headers = dict(headers or {})
        self._transport = transport
        self._sleep = sleep or asyncio.sleep

    @property
    def max_attempts(self) -> int:
        return self.retry_count + 1

    def _build_client(self) -> httpx.AsyncClient:
        # One client per call; asyncio.run() in the sync wrapper closes its loop afterwards
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            headers=self.headers,
            transport=self._transport,
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10)
        )

    async def async_send(self, method: str, url: str, **options) -> httpx.Response:
        """
        Send a request, retrying transient failures.

        Args:
            method: HTTP method (GET, POST, ...)
            url: Absolute URL
            **options: Passed through to httpx (json, params, headers, ...)

        Returns:
            The first 2xx/4xx response

        Raises:
            TransportError: When every attempt failed with a retryable error
        """
        last_error: Optional[str] = None

        async with self._build_client() as client:
            for attempt in range(self.max_attempts):
                try:
                    response = await asyncio.wait_for(
                        client.request(method, url, **options),
                        timeout=self.timeout
                    )
                except asyncio.TimeoutError:
                    last_error = f"Request timed out after {self.timeout:g}s"
                    logger.warning(f"Fetch attempt {attempt + 1}/{self.max_attempts} failed: {last_error}")
                except httpx.TransportError as e:
                    last_error = str(e) or type(e).__name__
                    logger.warning(f"Fetch attempt {attempt + 1}/{self.max_attempts} failed: {last_error}")
                else:
                    if response.status_code < 500:
                        return response
                    last_error = f"HTTP {response.status_code} {response.reason_phrase}"
                    logger.warning(f"Fetch attempt {attempt + 1}/{self.max_attempts} failed: {last_error}")

                if attempt < self.max_attempts - 1:
                    delay = self.retry_delay * (2 ** attempt)
                    await self._sleep(delay)

        raise TransportError(self.max_attempts, last_error)

    def send(self, method: str, url: str, **options) -> httpx.Response:
        """Synchronous wrapper around async_send for callers without an event loop"""
        return asyncio.run(self.async_send(method, url, **options))


def _error_from_response(response: httpx.Response) -> BackendError:
    """Build a BackendError from a PostgREST-style error body"""
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    return BackendError(
        body.get("message") or body.get("msg") or f"HTTP {response.status_code} {response.reason_phrase}",
        status=response.status_code,
        code=body.get("code") or body.get("error_code"),
        details=body.get("details"),
        hint=body.get("hint")
    )


class BackendClient:
    """
    CRUD client for the PostgREST-style backend (profiles, pets, RPC mutations).

    Authentication and session handling happen elsewhere; this client only
    forwards the configured API key.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        transport: Optional[ResilientTransport] = None
    ):
        self.base_url = (base_url or APIConfig.get_base_url()).rstrip("/")
        self.api_key = APIConfig.get_api_key() if api_key is None else api_key
        self.enabled = APIConfig.is_enabled()
        self.transport = transport or ResilientTransport()

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {"apikey": self.api_key, "Authorization": f"Bearer {self.api_key}"}
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _make_request(
        self,
        method: str,
        path: str,
        data: Optional[Any] = None,
        params: Optional[Dict[str, str]] = None,
        prefer: Optional[str] = None
    ) -> httpx.Response:
        if not self.enabled:
            raise BackendError("API client disabled", code="client_disabled")

        options: Dict[str, Any] = {"headers": self._headers(prefer)}
        if data is not None:
            options["json"] = data
        if params:
            options["params"] = params

        response = await self.transport.async_send(method, f"{self.base_url}{path}", **options)
        if response.status_code >= 400:
            error = _error_from_response(response)
            logger.error(f"{method} {path} rejected: {error!r}")
            raise error
        return response

    @staticmethod
    def _decode(response: httpx.Response, empty: Any = None) -> Any:
        """Parse a successful response body; a non-JSON body is a backend failure"""
        if not response.content:
            return empty
        try:
            return response.json()
        except ValueError:
            content_type = response.headers.get("content-type", "unknown")
            logger.error(
                f"{response.request.method} {response.request.url.path} returned "
                f"{response.status_code} with a non-JSON body ({content_type})"
            )
            raise BackendError(
                f"Unexpected response body from server (HTTP {response.status_code})",
                status=response.status_code,
                code="invalid_response"
            )

    @classmethod
    def _first_row(cls, response: httpx.Response) -> Dict[str, Any]:
        rows = cls._decode(response, empty=[])
        if isinstance(rows, list):
            return rows[0] if rows else {}
        return rows

    async def async_create_pet(self, attributes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a pet row and return the stored representation.

        When the attributes carry an id, the insert is an upsert on that id,
        so a retry after a timed-out but committed request stores one row.
        """
        prefer = "return=representation"
        params = None
        if attributes.get("id"):
            prefer += ",resolution=merge-duplicates"
            params = {"on_conflict": "id"}
        response = await self._make_request("POST", "/rest/v1/pets", data=attributes, params=params, prefer=prefer)
        row = self._first_row(response)
        logger.info(f"Created pet {row.get('id', '?')} for owner {attributes.get('owner_id')}")
        return row

    async def async_fetch_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a profile by id, or None when it does not exist"""
        response = await self._make_request("GET", "/rest/v1/profiles", params={"id": f"eq.{user_id}", "select": "*"})
        rows: List[Dict[str, Any]] = self._decode(response, empty=[])
        if not isinstance(rows, list):
            rows = [rows]
        return rows[0] if rows else None

    async def async_apply_mutation(self, mutation: PendingMutation) -> Any:
        """Persist a validated mutation through its RPC endpoint"""
        response = await self._make_request("POST", f"/rest/v1/rpc/{mutation.kind}", data=mutation.payload)
        return self._decode(response)

    async def async_test_connection(self) -> Tuple[bool, Optional[str]]:
        """Check that the backend answers a lightweight count query"""
        try:
            await self._make_request(
                "HEAD", "/rest/v1/profiles",
                params={"select": "count"},
                prefer="count=exact"
            )
        except IntegrityError as e:
            logger.warning(f"Connection test failed: {e}")
            return False, str(e)
        return True, None

    def test_connection(self) -> Tuple[bool, Optional[str]]:
        """
        Check backend reachability (synchronous wrapper for code without a loop).

        Returns:
            (True, None) when reachable, otherwise (False, error message)
        """
        return asyncio.run(self.async_test_connection())


# Global API client instance
_api_client: Optional[BackendClient] = None


def get_api_client() -> BackendClient:
    """Get global API client instance"""
    global _api_client
    if _api_client is None:
        _api_client = BackendClient()
    return _api_client
