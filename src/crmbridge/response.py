"""Classification of parsed API response bodies.

The CRM API reports outcomes in the body rather than the status line:

    {"code": "INVALID_TOKEN", "message": "invalid oauth token", "status": "error"}
    {"data": [{"code": "SUCCESS", "details": {"id": "1"}, "status": "success"}]}
    {"data": [{"id": "1", "Last_Name": "Burns"}]}

ResponseEnvelope is an immutable view over such a body.
"""

from typing import Any, Dict, List, Optional, Type

from crmbridge.errors import (
    APIError,
    InvalidModule,
    InvalidTokenError,
    MandatoryNotFound,
    NoPermission,
    RecordInBlueprint,
    RecordInvalid,
    RecordNotFound,
)

INVALID_TOKEN = "INVALID_TOKEN"
AUTHENTICATION_FAILURE = "AUTHENTICATION_FAILURE"
RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
INVALID_DATA = "INVALID_DATA"
INVALID_MODULE = "INVALID_MODULE"
NO_PERMISSION = "NO_PERMISSION"
MANDATORY_NOT_FOUND = "MANDATORY_NOT_FOUND"
RECORD_IN_BLUEPRINT = "RECORD_IN_BLUEPRINT"
SUCCESS = "SUCCESS"

# Codes whose meaning is known; anything else is passed through as UnknownError
ERROR_CLASSES: Dict[str, Type[APIError]] = {
    RESOURCE_NOT_FOUND: RecordNotFound,
    INVALID_TOKEN: InvalidTokenError,
    INVALID_DATA: RecordInvalid,
    INVALID_MODULE: InvalidModule,
    NO_PERMISSION: NoPermission,
    MANDATORY_NOT_FOUND: MandatoryNotFound,
    RECORD_IN_BLUEPRINT: RecordInBlueprint,
}


class ResponseEnvelope:
    """Immutable view over a parsed response body."""

    __slots__ = ("_body",)

    def __init__(self, body: Any = None):
        # Empty strings and other falsy non-mappings are treated as no body
        if body is None or body == "" or body == b"":
            body = {}
        object.__setattr__(self, "_body", body)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("ResponseEnvelope is immutable")

    def __repr__(self) -> str:
        return f"ResponseEnvelope(code={self.code!r}, data={len(self.data)} entries)"

    @property
    def body(self) -> Any:
        """The raw parsed body."""
        return self._body

    @property
    def data(self) -> List[Dict[str, Any]]:
        """Entries under ``data``; empty when the key is missing or not a list."""
        if isinstance(self._body, dict):
            data = self._body.get("data")
            if isinstance(data, list):
                return data
        if isinstance(self._body, list):
            return self._body
        return []

    def _status_entry(self) -> Dict[str, Any]:
        """The mapping that carries code/message/details.

        A top-level code wins; otherwise a single ``data`` entry is used.
        Multi-entry bulk results have no single status.
        """
        if isinstance(self._body, dict):
            if "code" in self._body:
                return self._body
            data = self.data
            if len(data) == 1 and isinstance(data[0], dict):
                return data[0]
        return {}

    @property
    def code(self) -> Optional[str]:
        return self._status_entry().get("code")

    @property
    def has_top_level_code(self) -> bool:
        """Whether the body itself carries a code, rather than a ``data`` entry."""
        return isinstance(self._body, dict) and "code" in self._body

    @property
    def status(self) -> Optional[str]:
        return self._status_entry().get("status")

    @property
    def details(self) -> Dict[str, Any]:
        details = self._status_entry().get("details")
        return details if isinstance(details, dict) else {}

    @property
    def message(self) -> str:
        entry = self._status_entry()
        message = str(entry.get("message") or entry.get("code") or "")
        if entry.get("code") == INVALID_DATA:
            api_name = self.details.get("api_name")
            if api_name:
                message = f"{message}, error in: {api_name}"
        return message

    # =========================================================================
    # Classification
    # =========================================================================

    def _has_code(self, code: str) -> bool:
        return self.code == code

    @property
    def is_empty(self) -> bool:
        return not self._body

    @property
    def is_invalid_token(self) -> bool:
        return self._has_code(INVALID_TOKEN)

    @property
    def is_authentication_failure(self) -> bool:
        return self._has_code(AUTHENTICATION_FAILURE)

    @property
    def is_not_found(self) -> bool:
        return self._has_code(RESOURCE_NOT_FOUND)

    @property
    def is_invalid_data(self) -> bool:
        return self._has_code(INVALID_DATA)

    @property
    def is_invalid_module(self) -> bool:
        return self._has_code(INVALID_MODULE)

    @property
    def is_no_permission(self) -> bool:
        return self._has_code(NO_PERMISSION)

    @property
    def is_mandatory_not_found(self) -> bool:
        return self._has_code(MANDATORY_NOT_FOUND)

    @property
    def is_record_in_blueprint(self) -> bool:
        return self._has_code(RECORD_IN_BLUEPRINT)

    @property
    def is_error(self) -> bool:
        """A non-SUCCESS code, or an explicit error status."""
        code = self.code
        if code is not None and code != SUCCESS:
            return True
        return self.status == "error"

    def error_class(self) -> Optional[Type[APIError]]:
        """Exception type for a recognized error code, else ``None``."""
        if not self.is_error:
            return None
        return ERROR_CLASSES.get(self.code or "")

    # =========================================================================
    # Bulk results
    # =========================================================================

    @property
    def successes(self) -> List[Dict[str, Any]]:
        """Per-entry results reported as successful."""
        return [e for e in self.data if isinstance(e, dict) and e.get("status") == "success"]

    @property
    def failures(self) -> List[Dict[str, Any]]:
        """Per-entry results reported as errors (validation failures etc.)."""
        return [e for e in self.data if isinstance(e, dict) and e.get("status") == "error"]
