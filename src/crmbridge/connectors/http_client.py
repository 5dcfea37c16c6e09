"""HTTP adapter used by Connection and TokenAuthority.

HTTPClient owns one pooled httpx.Client, built on first use from a
RequestPolicy. Callers may mutate ``headers`` and ``event_hooks`` before
(or after) the first request; the Connection's initialize hook relies on
that to customize the adapter.

Status codes are never turned into exceptions here; callers read
``HTTPResponse.status_code`` and decide. httpx exceptions are mapped to
the crmbridge error hierarchy.
"""

import json as json_module
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import httpx

from crmbridge.connectors.base import DEFAULT_POLICY, RequestPolicy
from crmbridge.errors import ConnectionError, CRMError, TimeoutError

logger = logging.getLogger(__name__)

Hook = Callable[..., Any]


@dataclass
class HTTPResponse:
    """Status, headers and raw body of one exchange."""

    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decode the body as JSON. Raises ValueError when it is not JSON."""
        return json_module.loads(self.body)

    def parsed(self) -> Any:
        """Parsed JSON body, ``None`` for an empty body, raw text if not JSON."""
        if not self.body.strip():
            return None
        try:
            return self.json()
        except ValueError:
            return self.text


class HTTPClient:
    """Synchronous adapter over a single lazily created httpx.Client."""

    def __init__(
        self,
        base_url: str = "",
        policy: Optional[RequestPolicy] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the adapter.

        Args:
            base_url: Prefix for relative request paths
            policy: Timeouts and default headers
            transport: httpx transport override (e.g. DummyTransport)
        """
        self.policy = policy or DEFAULT_POLICY
        self.base_url = base_url.rstrip("/")
        self.transport = transport

        self.headers: Dict[str, str] = {"User-Agent": self.policy.user_agent}
        self.headers.update(self.policy.default_headers)
        self.event_hooks: Dict[str, List[Hook]] = {"request": [], "response": []}

        self._client: Optional[httpx.Client] = None

    @property
    def client(self) -> httpx.Client:
        """The pooled httpx.Client, created on first use."""
        if self._client is None:
            connect, read = self.policy.get_timeout_tuple()
            self._client = httpx.Client(
                timeout=httpx.Timeout(connect=connect, read=read, write=read, pool=self.policy.total_timeout),
                transport=self.transport,
                event_hooks=self.event_hooks,
            )
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def add_hook(self, event: str, hook: Hook) -> None:
        """Register an httpx event hook ("request" or "response")."""
        self.event_hooks.setdefault(event, []).append(hook)
        if self._client is not None:
            self._client.event_hooks = self.event_hooks

    def url_for(self, path: str) -> str:
        """Absolute URLs pass through; anything else is joined to ``base_url``."""
        if path.startswith(("http://", "https://")) or not self.base_url:
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    # =========================================================================
    # Requests
    # =========================================================================

    def _translate(self, error: httpx.HTTPError, url: str) -> CRMError:
        if isinstance(error, httpx.TimeoutException):
            seconds = self.policy.read_timeout
            return TimeoutError(f"{url} did not answer within {seconds}s", timeout_seconds=seconds)
        if isinstance(error, httpx.ConnectError):
            return ConnectionError(f"Could not reach {url}: {error}")
        return CRMError(f"Transport failure for {url}: {error}")

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> HTTPResponse:
        """Send one request. Transport failures are never retried.

        Args:
            method: HTTP verb
            path: Path relative to ``base_url``, or an absolute URL
            json: JSON-serializable body
            params: Query parameters
            headers: Extra headers for this request; they override ``self.headers``

        Raises:
            TimeoutError: The server did not answer in time
            ConnectionError: The server could not be reached
            CRMError: Any other transport failure
        """
        url = self.url_for(path)
        merged_headers = {**self.headers, **(headers or {})}
        try:
            raw = self.client.request(
                method.upper(), url, json=json, params=params, headers=merged_headers
            )
        except httpx.HTTPError as e:
            logger.debug(f"{method.upper()} {url} failed: {e}")
            raise self._translate(e, url) from e

        return HTTPResponse(status_code=raw.status_code, headers=dict(raw.headers), body=raw.content)

    def send(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> HTTPResponse:
        """Positional form of :meth:`request`."""
        return self.request(method, path, json=json, params=params, headers=headers)

    def get(self, path: str, **kwargs: Any) -> HTTPResponse:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> HTTPResponse:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> HTTPResponse:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> HTTPResponse:
        return self.request("DELETE", path, **kwargs)


def debug_hooks(log: logging.Logger = logger) -> Dict[str, Hook]:
    """Request/response hooks that log each exchange at DEBUG."""

    def log_request(request: httpx.Request) -> None:
        log.debug(f"--> {request.method} {request.url}")

    def log_response(response: httpx.Response) -> None:
        request = response.request
        log.debug(f"<-- {response.status_code} {request.method} {request.url}")

    return {"request": log_request, "response": log_response}
