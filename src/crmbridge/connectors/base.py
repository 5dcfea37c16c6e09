"""Transport policy and access-token sources.

- RequestPolicy: timeouts, default headers
- TokenSource: where the access token comes from
    - StaticToken: a fixed string, overwritten in place on refresh
    - DynamicToken: a callback evaluated on every request; refreshes
      never write to it, the owner rotates it through on_refresh
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional, Union

AUTHORIZATION_HEADER = "Authorization"
AUTHORIZATION_PREFIX = "Zoho-oauthtoken"


# =============================================================================
# Request Policy
# =============================================================================


@dataclass
class RequestPolicy:
    """Policy for HTTP requests: timeouts and headers.

    Every request is sent once; the connection layer owns the single
    retry that follows a token refresh.
    """

    # Timeouts
    connect_timeout: float = 10.0  # seconds
    read_timeout: float = 30.0  # seconds
    total_timeout: float = 60.0  # seconds

    # Headers
    user_agent: str = "crmbridge/0.1"
    default_headers: Dict[str, str] = field(default_factory=dict)

    def get_timeout_tuple(self) -> tuple:
        """Get timeout as (connect, read) tuple."""
        return (self.connect_timeout, self.read_timeout)

    @classmethod
    def with_timeout(cls, seconds: float) -> "RequestPolicy":
        """Policy whose read timeout is ``seconds``."""
        return cls(read_timeout=seconds, total_timeout=max(seconds * 2, 60.0))


DEFAULT_POLICY = RequestPolicy()


# =============================================================================
# Token Sources
# =============================================================================


class TokenKind(str, Enum):
    """Variant of a token source."""

    STATIC = "static"
    DYNAMIC = "dynamic"


@dataclass
class TokenSource:
    """Base access-token source (data holder)."""

    kind: TokenKind = TokenKind.STATIC

    def current(self) -> Optional[str]:
        """Return the token to send right now."""
        return None

    def is_configured(self) -> bool:
        """Whether requests should carry an Authorization header."""
        return False

    def update(self, access_token: str) -> None:
        """Adopt a freshly exchanged access token."""

    def get_headers(self) -> Dict[str, str]:
        """Authorization header for a request; none when no token is available.

        The token is evaluated once, so a dynamic source returning ``None``
        or ``""`` sends no header.
        """
        if not self.is_configured():
            return {}
        token = self.current()
        if not token:
            return {}
        return {AUTHORIZATION_HEADER: f"{AUTHORIZATION_PREFIX} {token}"}


@dataclass
class StaticToken(TokenSource):
    """A fixed access token, replaced when the connection refreshes."""

    kind: TokenKind = field(default=TokenKind.STATIC, init=False)
    value: Optional[str] = None

    def current(self) -> Optional[str]:
        return self.value

    def is_configured(self) -> bool:
        return bool(self.value)

    def update(self, access_token: str) -> None:
        self.value = access_token


@dataclass
class DynamicToken(TokenSource):
    """An access token read from a callback on every request.

    The callback stays authoritative after a refresh.
    """

    kind: TokenKind = field(default=TokenKind.DYNAMIC, init=False)
    callback: Optional[Callable[[], str]] = None

    def current(self) -> Optional[str]:
        return self.callback() if self.callback else None

    def is_configured(self) -> bool:
        return self.callback is not None


def token_source(access_token: Union[None, str, Callable[[], str], TokenSource]) -> TokenSource:
    """Wrap a string, callable or existing TokenSource."""
    if isinstance(access_token, TokenSource):
        return access_token
    if callable(access_token):
        return DynamicToken(callback=access_token)
    return StaticToken(value=access_token)
