"""Offline transport for tests and local development.

DummyTransport is an httpx transport that answers from canned responses
instead of the network. It can be configured to:
- Return a specific status/body per method and path
- Serve a sequence of responses for the same route (one per call)
- Track every request for assertions
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlsplit

import httpx


@dataclass
class DummyResponse:
    """Canned response for DummyTransport."""

    status_code: int = 200
    body: Any = None
    headers: Dict[str, str] = field(default_factory=dict)

    def to_httpx(self, request: httpx.Request) -> httpx.Response:
        if self.body is None:
            content = b""
        elif isinstance(self.body, (bytes, str)):
            content = self.body.encode("utf-8") if isinstance(self.body, str) else self.body
        else:
            content = json.dumps(self.body).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        headers.update(self.headers)
        return httpx.Response(self.status_code, content=content, headers=headers, request=request)


@dataclass
class RecordedRequest:
    """A request seen by DummyTransport."""

    method: str
    path: str
    params: Dict[str, str]
    headers: Dict[str, str]
    body: Any = None

    @property
    def authorization(self) -> Optional[str]:
        return self.headers.get("authorization")


class DummyTransport(httpx.MockTransport):
    """httpx transport serving canned responses keyed by (method, path).

    Paths are matched on the URL path alone; an unconfigured route answers
    404 with an empty body.
    """

    def __init__(self, base_path: str = ""):
        super().__init__(self._handle)
        self.base_path = base_path.rstrip("/")
        self._routes: Dict[Tuple[str, str], List[DummyResponse]] = {}
        self._call_log: List[RecordedRequest] = []

    def _key(self, method: str, path: str) -> Tuple[str, str]:
        if self.base_path and not path.startswith(self.base_path):
            path = f"{self.base_path}/{path.lstrip('/')}"
        return (method.upper(), path)

    def set_response(self, method: str, path: str, *responses: DummyResponse) -> None:
        """Configure the response(s) for a route.

        With several responses each call consumes one; the last one repeats.
        """
        self._routes[self._key(method, path)] = list(responses)

    def add_json(self, method: str, path: str, body: Any, status_code: int = 200) -> None:
        """Shortcut for a single JSON response."""
        self.set_response(method, path, DummyResponse(status_code=status_code, body=body))

    def clear_responses(self) -> None:
        self._routes.clear()

    def _handle(self, request: httpx.Request) -> httpx.Response:
        path = urlsplit(str(request.url)).path
        body = None
        if request.content:
            try:
                body = json.loads(request.content)
            except ValueError:
                body = request.content.decode("utf-8", errors="replace")
        self._call_log.append(
            RecordedRequest(
                method=request.method,
                path=path,
                params=dict(request.url.params),
                headers={k.lower(): v for k, v in request.headers.items()},
                body=body,
            )
        )

        queue = self._routes.get((request.method, path))
        if not queue:
            return DummyResponse(status_code=404).to_httpx(request)
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        return response.to_httpx(request)

    # =========================================================================
    # Assertion helpers
    # =========================================================================

    def get_call_log(self) -> List[RecordedRequest]:
        return list(self._call_log)

    def clear_call_log(self) -> None:
        self._call_log.clear()

    def calls(self, method: Optional[str] = None, path: Optional[str] = None) -> List[RecordedRequest]:
        """Recorded requests, optionally filtered by method and path."""
        full_path = self._key("", path)[1] if path is not None else None
        return [
            call
            for call in self._call_log
            if (method is None or call.method == method.upper())
            and (full_path is None or call.path == full_path)
        ]

    def was_called(self, method: str, path: str) -> bool:
        return bool(self.calls(method, path))

    def call_count(self, method: Optional[str] = None, path: Optional[str] = None) -> int:
        return len(self.calls(method, path))
