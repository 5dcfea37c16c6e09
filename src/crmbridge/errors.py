"""Exception hierarchy for crmbridge.

Every failure surfaced by the library derives from CRMError and carries
the server's code/message where one exists:

- Transport: ConnectionError, TimeoutError (raised by HTTPClient)
- Token exchange: AuthError
- Authorization: AuthenticationError (not an expiry, never retried)
- Server: InternalError (5xx, carries the raw body)
- Structured API errors: APIError and its subclasses
"""

from typing import Any, Dict, Optional


class CRMError(Exception):
    """Base exception for crmbridge errors."""

    def __init__(
        self,
        message: str = "",
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


# =============================================================================
# Transport Errors
# =============================================================================


class ConnectionError(CRMError):
    """Failed to connect to the service."""

    pass


class TimeoutError(CRMError):
    """Request timed out."""

    def __init__(self, message: str = "Request timed out", timeout_seconds: Optional[float] = None):
        super().__init__(message, details={"timeout_seconds": timeout_seconds})
        self.timeout_seconds = timeout_seconds


# =============================================================================
# Authorization Errors
# =============================================================================


class AuthError(CRMError):
    """The refresh-token exchange with the accounts server failed."""

    pass


class AuthenticationError(CRMError):
    """The API rejected the credentials for a reason other than token expiry."""

    pass


class InternalError(CRMError):
    """The API answered with a server error (500, 502, 503, 504)."""

    def __init__(self, body: Any, status_code: Optional[int] = None):
        super().__init__(str(body), details={"status_code": status_code})
        self.body = body
        self.status_code = status_code


# =============================================================================
# Structured API Errors
# =============================================================================


class APIError(CRMError):
    """The API returned a structured error code."""

    pass


class RecordNotFound(APIError):
    """Requested record does not exist."""

    pass


class UnknownError(APIError):
    """Error code not otherwise recognized, or an unmatched blueprint transition."""

    pass


class InvalidTokenError(APIError):
    """Access token rejected and no refresh token available."""

    pass


class RecordInvalid(APIError):
    """Submitted data failed server-side validation."""

    pass


class InvalidModule(APIError):
    """The resource path does not name a module of the CRM."""

    pass


class NoPermission(APIError):
    """Authorized but not permitted to perform the operation."""

    pass


class MandatoryNotFound(APIError):
    """A mandatory field was missing from the submitted data."""

    pass


class RecordInBlueprint(APIError):
    """The record is locked by a blueprint and cannot be edited directly."""

    pass
