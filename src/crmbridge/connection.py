"""Authorized access to the CRM API with transparent token refresh.

A Connection owns one credential and moves between three states:

    Unauthenticated -> Authenticated -> Refreshing -> Authenticated

Every call goes through ``with_refresh``: when the API answers
INVALID_TOKEN and a refresh token is configured, the access token is
exchanged once and the call is re-issued exactly once more.

Refreshes are serialized by a per-connection lock taken with a
non-blocking acquire. A thread that finds a refresh already in flight
does not wait for it; it retries straight away with whatever token is
current, so in a narrow window that retry may fail authorization again.
"""

import logging
import threading
from typing import Any, Callable, Dict, Optional, Union

from crmbridge.auth import TokenAuthority, TokenGrant
from crmbridge.config import Config
from crmbridge.connectors.base import RequestPolicy, TokenSource, token_source
from crmbridge.connectors.http_client import HTTPClient, HTTPResponse, debug_hooks
from crmbridge.errors import AuthenticationError, InternalError
from crmbridge.response import ResponseEnvelope

logger = logging.getLogger(__name__)

BASE_PATH = "/crm/"
SUPPORTED_HTTP_METHODS = ("GET", "POST", "PUT", "DELETE")
SERVER_ERRORS = frozenset({500, 502, 503, 504})


class Connection:
    """One credential plus the HTTP adapter that uses it."""

    def __init__(
        self,
        access_token: Union[None, str, Callable[[], str], TokenSource] = None,
        refresh_token: Optional[str] = None,
        api_domain: Optional[str] = None,
        api_version: Optional[str] = None,
        expires_in: int = 3600,
        config: Optional[Config] = None,
        authority: Optional[TokenAuthority] = None,
        policy: Optional[RequestPolicy] = None,
        on_refresh: Optional[Callable[[TokenGrant], None]] = None,
        on_initialize_connection: Optional[Callable[[HTTPClient], None]] = None,
        transport: Optional[Any] = None,
    ):
        """Initialize the connection.

        Args:
            access_token: Token string, zero-argument callable, or TokenSource
            refresh_token: Refresh token used when the API reports INVALID_TOKEN
            api_domain: API server; inferred from the accounts domain when omitted
            api_version: API version path segment (e.g. "v2")
            expires_in: Lifetime of the current access token in seconds
            config: Client credentials and defaults
            authority: Token exchanger; built from ``config`` when omitted
            policy: Transport policy for the adapter
            on_refresh: Called with the new TokenGrant after every refresh
            on_initialize_connection: Called once with the adapter when it is built
            transport: httpx transport override for the adapter
        """
        self.config = config or Config()
        self.token_source = token_source(access_token)
        self.refresh_token = refresh_token
        self.expires_in = expires_in
        self.api_domain = api_domain or self.config.resolved_api_domain()
        self.api_version = api_version or self.config.api_version
        self.authority = authority or TokenAuthority(self.config)
        self.policy = policy or RequestPolicy.with_timeout(self.config.timeout_s)
        self.on_refresh = on_refresh
        self.on_initialize_connection = on_initialize_connection
        self.transport = transport

        self._refresh_lock = threading.Lock()
        self._adapter: Optional[HTTPClient] = None

    # =========================================================================
    # Credential
    # =========================================================================

    @property
    def access_token(self) -> Optional[str]:
        """Current access token (evaluates a dynamic source)."""
        return self.token_source.current()

    @property
    def has_access_token(self) -> bool:
        return self.token_source.is_configured()

    @property
    def has_refresh_token(self) -> bool:
        return bool(self.refresh_token)

    @property
    def authorization(self) -> str:
        """Value of the Authorization header for the current token."""
        return f"Zoho-oauthtoken {self.access_token}"

    @property
    def base_url(self) -> str:
        return f"{self.api_domain.rstrip('/')}{BASE_PATH}{self.api_version}"

    def refresh_access_token(self) -> None:
        """Exchange the refresh token for a new access token.

        Returns without doing anything when another refresh is in flight.
        A static token is overwritten; a dynamic token source is left alone
        and the owner learns about the new token through ``on_refresh``.
        """
        if not self._refresh_lock.acquire(blocking=False):
            logger.debug("Token refresh already in progress, not refreshing again")
            return

        try:
            grant = self.authority.refresh(self.refresh_token)
            if self.on_refresh is not None:
                self.on_refresh(grant)
            self.token_source.update(grant.access_token)
            self.expires_in = grant.expires_in
            if grant.refresh_token:
                self.refresh_token = grant.refresh_token
        finally:
            self._refresh_lock.release()

    # =========================================================================
    # Transport
    # =========================================================================

    @property
    def adapter(self) -> HTTPClient:
        """The HTTP adapter, built on first use and kept for the connection's life."""
        if self._adapter is None:
            adapter = HTTPClient(base_url=self.base_url, policy=self.policy, transport=self.transport)
            adapter.headers["Accept"] = "application/json"
            if self.config.debug:
                for event, hook in debug_hooks(logger).items():
                    adapter.add_hook(event, hook)
            if self.on_initialize_connection is not None:
                self.on_initialize_connection(adapter)
            self._adapter = adapter
        return self._adapter

    def close(self) -> None:
        if self._adapter is not None:
            self._adapter.close()

    def execute(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> HTTPResponse:
        """Perform one authorized call; the token is read at call time."""
        return self.adapter.send(
            method.upper(), path, params=params, json=json, headers=self.token_source.get_headers()
        )

    def with_refresh(self, call: Callable[[], HTTPResponse]) -> HTTPResponse:
        """Run ``call``, refreshing the token and re-running it once on INVALID_TOKEN.

        Raises:
            AuthenticationError: The API reported AUTHENTICATION_FAILURE.
        """
        http_response = call()
        response = ResponseEnvelope(http_response.parsed())

        if response.is_invalid_token and self.has_refresh_token:
            logger.info("Access token rejected, refreshing")
            self.refresh_access_token()
            return call()

        if response.is_authentication_failure:
            raise AuthenticationError(response.message, code=response.code, details=response.details)

        return http_response

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> Any:
        """Authorized call returning the parsed body.

        Raises:
            InternalError: The API answered 500, 502, 503 or 504.
        """
        method = method.upper()
        if method not in SUPPORTED_HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        logger.debug(f"{method} {path} with {params or {}}")

        response = self.with_refresh(lambda: self.execute(method, path, params, json))
        if response.status_code in SERVER_ERRORS:
            raise InternalError(response.parsed(), status_code=response.status_code)

        return response.parsed()

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(
        self, path: str, json: Optional[Any] = None, params: Optional[Dict[str, Any]] = None
    ) -> Any:
        return self.request("POST", path, params=params, json=json)

    def put(
        self, path: str, json: Optional[Any] = None, params: Optional[Dict[str, Any]] = None
    ) -> Any:
        return self.request("PUT", path, params=params, json=json)

    def delete(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("DELETE", path, params=params)
