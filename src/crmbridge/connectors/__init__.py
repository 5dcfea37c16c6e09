"""Transport layer for talking to the CRM API.

Key components:
- RequestPolicy: timeouts, default headers
- TokenSource: StaticToken / DynamicToken access-token variants
- HTTPClient: httpx wrapper with header injection and event hooks
- DummyTransport: offline httpx transport with canned responses
"""

from .base import (
    DEFAULT_POLICY,
    DynamicToken,
    RequestPolicy,
    StaticToken,
    TokenKind,
    TokenSource,
    token_source,
)
from .dummy import DummyResponse, DummyTransport, RecordedRequest
from .http_client import HTTPClient, HTTPResponse, debug_hooks

__all__ = [
    # Policy
    "RequestPolicy",
    "DEFAULT_POLICY",
    # Tokens
    "TokenKind",
    "TokenSource",
    "StaticToken",
    "DynamicToken",
    "token_source",
    # HTTP
    "HTTPClient",
    "HTTPResponse",
    "debug_hooks",
    # Offline transport
    "DummyTransport",
    "DummyResponse",
    "RecordedRequest",
]
