"""crmbridge: client library for a record-oriented CRM REST API.

Key components:
- Config: credentials and defaults from keyword arguments / environment
- Connection: authorized calls with single-retry token refresh
- TokenAuthority: refresh-token exchange
- ResponseEnvelope: classification of API response bodies
- RecordEngine + BaseRecord: generic record operations with ID batching
- CRMClient: wires the above together
"""

from crmbridge.auth import TokenAuthority, TokenGrant
from crmbridge.client import CRMClient
from crmbridge.config import Config
from crmbridge.connection import Connection
from crmbridge.errors import (
    APIError,
    AuthenticationError,
    AuthError,
    CRMError,
    InternalError,
    InvalidModule,
    InvalidTokenError,
    MandatoryNotFound,
    NoPermission,
    RecordInBlueprint,
    RecordInvalid,
    RecordNotFound,
    UnknownError,
)
from crmbridge.records import (
    Account,
    AttributeMapper,
    BaseRecord,
    Contact,
    Deal,
    Lead,
    Note,
    RecordEngine,
    Task,
)
from crmbridge.response import ResponseEnvelope

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Config",
    "Connection",
    "CRMClient",
    "TokenAuthority",
    "TokenGrant",
    "ResponseEnvelope",
    "AttributeMapper",
    "BaseRecord",
    "RecordEngine",
    "Lead",
    "Contact",
    "Account",
    "Deal",
    "Task",
    "Note",
    # Errors
    "CRMError",
    "AuthError",
    "AuthenticationError",
    "InternalError",
    "APIError",
    "RecordNotFound",
    "UnknownError",
    "InvalidTokenError",
    "RecordInvalid",
    "InvalidModule",
    "NoPermission",
    "MandatoryNotFound",
    "RecordInBlueprint",
]
