"""Refresh-token exchange against the accounts server.

Only the ``refresh_token`` grant is supported:

    POST {accounts_domain}/oauth/v2/token
        ?client_id=...&client_secret=...&grant_type=refresh_token&refresh_token=...
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from crmbridge.config import Config
from crmbridge.connectors.http_client import HTTPClient
from crmbridge.errors import AuthError, CRMError

logger = logging.getLogger(__name__)

TOKEN_PATH = "/oauth/v2/token"


class TokenGrant(BaseModel):
    """New credential material returned by a token exchange."""

    access_token: str = Field(..., min_length=1)
    refresh_token: Optional[str] = None
    expires_in: int = 3600
    api_domain: Optional[str] = None
    token_type: str = "Bearer"

    model_config = ConfigDict(extra="ignore")


class TokenAuthority:
    """Performs refresh-token -> access-token exchanges."""

    def __init__(self, config: Config, http_client: Optional[HTTPClient] = None):
        self.config = config
        self.http_client = http_client or HTTPClient(base_url=config.accounts_domain)

    def refresh(self, refresh_token: str) -> TokenGrant:
        """Exchange ``refresh_token`` for a new access token.

        The presented refresh token is kept when the server does not rotate it.

        Raises:
            AuthError: On a non-2xx status, a non-JSON body, an ``error``
                field, or a body without an access token. Never retried.
        """
        params = {
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }

        try:
            response = self.http_client.post(TOKEN_PATH, params=params)
        except CRMError as e:
            raise AuthError(f"Token exchange failed: {e}") from e

        if not response.ok:
            raise AuthError(
                f"Token exchange failed with status {response.status_code}: {response.text}",
                details={"status_code": response.status_code},
            )

        body = response.parsed()
        if not isinstance(body, dict):
            raise AuthError(f"Malformed token response: {response.text}")
        if "error" in body:
            raise AuthError(f"Token exchange rejected: {body['error']}", code=str(body["error"]))

        try:
            grant = TokenGrant.model_validate(body)
        except ValidationError as e:
            raise AuthError(f"Malformed token response: {e}") from e

        if grant.refresh_token is None:
            grant = grant.model_copy(update={"refresh_token": refresh_token})

        logger.debug(f"Token exchange succeeded, expires in {grant.expires_in}s")
        return grant
