"""Generic record operations over a Connection.

RecordEngine binds a record type to a Connection and implements every
operation the API offers on a module: lookups, search, writes, bulk
deletes and tagging (both batched by ID), notes and blueprint
transitions. All HTTP traffic goes through Connection, so token refresh
applies to every call.

    leads = RecordEngine(Lead, connection)
    lead = leads.find("1234")
    leads.where(email="jane@example.com")
    leads.delete_all(ids)
"""

import logging
from typing import Any, Dict, Generic, Iterable, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import ValidationError

from crmbridge.connection import Connection
from crmbridge.errors import RecordInvalid, RecordNotFound, UnknownError
from crmbridge.records.attributes import AttributeMapper
from crmbridge.records.base import BaseRecord
from crmbridge.records.batching import BATCH_SIZE, batched, join_ids
from crmbridge.records.modules import Note
from crmbridge.response import ResponseEnvelope

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseRecord)

# Search keys the API accepts as their own query parameters
BUILT_IN_SEARCH_KEYS = ("criteria", "email", "phone", "word")

RecordRef = Union[BaseRecord, str, int]


def escape_criteria_value(value: Any) -> str:
    """Render a value for a criteria expression, escaping ``\\ ( ) ,``."""
    if isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value)
    for char in ("\\", "(", ")", ","):
        text = text.replace(char, f"\\{char}")
    return text


class RecordEngine(Generic[R]):
    """CRUD, search and batch operations for one record type."""

    def __init__(self, record_cls: Type[R], connection: Connection, batch_size: int = BATCH_SIZE):
        self.record_cls = record_cls
        self.connection = connection
        self.batch_size = batch_size
        self.mapper: AttributeMapper = record_cls.mapper()

    def __repr__(self) -> str:
        return f"RecordEngine({self.record_cls.__name__}, {self.resource_path!r})"

    @property
    def resource_path(self) -> str:
        return self.record_cls.resource_path

    def _path(self, *parts: Any) -> str:
        return "/".join([self.resource_path, *(str(p) for p in parts)])

    @staticmethod
    def _record_id(ref: RecordRef) -> str:
        record_id = ref.id if isinstance(ref, BaseRecord) else ref
        if record_id is None or record_id == "":
            raise ValueError("Record has no id")
        return str(record_id)

    def new(self, **attributes: Any) -> R:
        """Build an unsaved record bound to this engine."""
        return self.record_cls(**attributes).bind(self)  # type: ignore[return-value]

    def materialize(self, data: Mapping[str, Any]) -> R:
        """Build a bound record from a remote field map."""
        return self.record_cls.from_remote(data).bind(self)  # type: ignore[return-value]

    # =========================================================================
    # Response handling
    # =========================================================================

    def build_response(self, body: Any) -> ResponseEnvelope:
        """Wrap a parsed body, raising the typed error for a recognized error code."""
        response = ResponseEnvelope(body)
        error_cls = response.error_class()
        if error_cls is not None:
            raise error_cls(response.message, code=response.code, details=response.details)
        return response

    def _checked(self, body: Any) -> ResponseEnvelope:
        """build_response plus UnknownError for any other error code."""
        response = self.build_response(body)
        if response.is_error:
            raise UnknownError(response.message, code=response.code, details=response.details)
        return response

    def _bulk_results(self, body: Any) -> List[Dict[str, Any]]:
        """Per-entry results of a bulk call.

        Only a top-level code fails the call; entry-level errors, even in a
        single-entry window, are returned for the caller to inspect.
        """
        response = ResponseEnvelope(body)
        if response.has_top_level_code:
            self._checked(body)
        return response.data

    # =========================================================================
    # Reads
    # =========================================================================

    def find(self, record_id: Union[str, int]) -> R:
        """Fetch one record by id.

        Raises:
            RecordNotFound: RESOURCE_NOT_FOUND, or no data in the response
            UnknownError: Any unrecognized error code
        """
        body = self.connection.get(self._path(record_id))
        response = self._checked(body)
        if not response.data:
            raise RecordNotFound(
                f"Couldn't find {self.record_cls.__name__} with id={record_id}",
                details={"resource_path": self.resource_path, "id": str(record_id)},
            )
        return self.materialize(response.data[0])

    def exists(self, record_id: Union[str, int]) -> bool:
        try:
            self.find(record_id)
        except RecordNotFound:
            return False
        return True

    def find_all(self, ids: Iterable[Union[str, int]]) -> List[R]:
        """Fetch many records by id, one request per window of ``batch_size`` ids."""
        records: List[R] = []
        for batch in batched(ids, self.batch_size):
            body = self.connection.get(self.resource_path, params={"ids": join_ids(batch)})
            response = self._checked(body)
            records.extend(self.materialize(data) for data in response.data)
        return records

    def search_params(self, criteria: Mapping[str, Any]) -> Dict[str, Any]:
        """Query parameters for a search.

        Built-in keys are passed as-is; every other key becomes an
        ``Remote_Field:equals:value`` term, and several terms are joined
        with ``and``.
        """
        if not criteria:
            raise ValueError("At least one search criterion is required")

        params: Dict[str, Any] = {}
        terms: List[str] = []
        for key, value in criteria.items():
            if key in BUILT_IN_SEARCH_KEYS:
                params[key] = value
            else:
                remote = self.mapper.local_to_remote(key)
                terms.append(f"{remote}:equals:{escape_criteria_value(value)}")

        if not terms:
            return params

        raw = params.pop("criteria", None)
        if raw is None and len(terms) == 1:
            params["criteria"] = terms[0]
            return params

        parts = [f"({term})" for term in terms]
        if raw is not None:
            raw = str(raw)
            parts.insert(0, raw if raw.startswith("(") else f"({raw})")
        params["criteria"] = "(" + "and".join(parts) + ")"
        return params

    def where(self, **criteria: Any) -> List[R]:
        """Search records; no matches gives an empty list."""
        body = self.connection.get(self._path("search"), params=self.search_params(criteria))
        response = self._checked(body)
        return [self.materialize(data) for data in response.data]

    def find_by(self, **criteria: Any) -> Optional[R]:
        records = self.where(**criteria)
        return records[0] if records else None

    # =========================================================================
    # Writes
    # =========================================================================

    def _remote_params(self, values: Union[BaseRecord, Mapping[str, Any]]) -> Dict[str, Any]:
        if isinstance(values, BaseRecord):
            params = values.to_params()
            params.pop(self.mapper.local_to_remote("id"), None)
            return params
        return self.mapper.to_remote(values)

    def create(self, values: Union[BaseRecord, Mapping[str, Any]]) -> Optional[str]:
        """Create a record; returns the new id and assigns it to a record argument."""
        body = self.connection.post(self.resource_path, json={"data": [self._remote_params(values)]})
        response = self._checked(body)
        new_id = response.details.get("id")
        if isinstance(values, BaseRecord):
            values.id = new_id
            values.bind(self)
        logger.debug(f"Created {self.record_cls.__name__} {new_id}")
        return new_id

    def _validated_changes(self, ref: RecordRef, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Check declared attributes against the record type before anything is sent.

        Raises:
            RecordInvalid: A change does not fit its attribute's type
        """
        if not isinstance(ref, BaseRecord):
            return changes

        declared = {attr: value for attr, value in changes.items() if attr in ref.attributes()}
        try:
            candidate = type(ref).model_validate({**ref.model_dump(), **declared})
        except ValidationError as e:
            raise RecordInvalid(
                f"Invalid changes for {type(ref).__name__} {ref.id}: {e}",
                details={"errors": e.errors(include_url=False)},
            ) from e
        return {
            attr: getattr(candidate, attr) if attr in declared else value
            for attr, value in changes.items()
        }

    def update(self, ref: RecordRef, **changes: Any) -> ResponseEnvelope:
        """Send ``changes`` (local attribute names) for one record.

        Changes to a record instance are validated first and only written
        back to it once the server has accepted them.
        """
        record_id = self._record_id(ref)
        changes = self._validated_changes(ref, changes)
        body = self.connection.put(
            self._path(record_id), json={"data": [self.mapper.to_remote(changes)]}
        )
        response = self._checked(body)
        if isinstance(ref, BaseRecord):
            for attr, value in changes.items():
                if attr in ref.attributes():
                    setattr(ref, attr, value)
        return response

    def save(self, record: R) -> Optional[str]:
        """Create the record when it has no id yet, otherwise update all set attributes."""
        if record.is_new_record:
            return self.create(record)
        changes = record.model_dump(exclude={"id"}, exclude_none=True)
        self.update(record, **changes)
        return record.id

    def delete(self, ref: RecordRef) -> ResponseEnvelope:
        return self._checked(self.connection.delete(self._path(self._record_id(ref))))

    def delete_all(self, ids: Iterable[Union[str, int]]) -> List[Dict[str, Any]]:
        """Delete many records, one request per window of ``batch_size`` ids."""
        results: List[Dict[str, Any]] = []
        for batch in batched(ids, self.batch_size):
            body = self.connection.delete(self.resource_path, params={"ids": join_ids(batch)})
            results.extend(self._bulk_results(body))
        return results

    # =========================================================================
    # Tags
    # =========================================================================

    def associate_tags(
        self, ids: Iterable[Union[str, int]], tag_names: Iterable[str]
    ) -> List[Dict[str, Any]]:
        """Add tags to many records, batching the ids."""
        tags = join_ids(list(tag_names))
        results: List[Dict[str, Any]] = []
        for batch in batched(ids, self.batch_size):
            body = self.connection.post(
                self._path("actions", "add_tags"),
                params={"ids": join_ids(batch), "tag_names": tags},
            )
            results.extend(self._bulk_results(body))
        return results

    def add_tags(self, ref: RecordRef, tag_names: Iterable[str]) -> ResponseEnvelope:
        """Add tags to one record."""
        body = self.connection.post(
            self._path(self._record_id(ref), "actions", "add_tags"),
            params={"tag_names": join_ids(list(tag_names))},
        )
        return self._checked(body)

    # =========================================================================
    # Notes
    # =========================================================================

    def notes(self, ref: RecordRef) -> List[Note]:
        """Notes attached to a record; none gives an empty list."""
        body = self.connection.get(self._path(self._record_id(ref), "Notes"))
        response = self._checked(body)
        note_engine = RecordEngine(Note, self.connection)
        return [note_engine.materialize(data) for data in response.data]

    def add_note(self, ref: RecordRef, title: str = "", content: str = "") -> ResponseEnvelope:
        note = Note(note_title=title, note_content=content)
        body = self.connection.post(
            self._path(self._record_id(ref), "Notes"), json={"data": [note.to_params()]}
        )
        return self._checked(body)

    # =========================================================================
    # Blueprint
    # =========================================================================

    def blueprint_transition(
        self, ref: RecordRef, name: str, data: Optional[Dict[str, Any]] = None
    ) -> ResponseEnvelope:
        """Move a record through the blueprint transition leading to ``name``.

        Looks the transition up by its ``next_field_value``, then submits it.

        Raises:
            UnknownError: No transition leads to ``name``
        """
        path = self._path(self._record_id(ref), "actions", "blueprint")
        body = self._checked(self.connection.get(path)).body

        blueprint = body.get("blueprint") if isinstance(body, dict) else None
        transitions = blueprint.get("transitions", []) if isinstance(blueprint, dict) else []
        transition_id = next(
            (t.get("id") for t in transitions if t.get("next_field_value") == name), None
        )
        if transition_id is None:
            raise UnknownError(
                f"No blueprint transition to {name!r} for {self.record_cls.__name__} "
                f"{self._record_id(ref)}",
                details={"available": [t.get("next_field_value") for t in transitions]},
            )

        payload = {"blueprint": [{"transition_id": transition_id, "data": data or {}}]}
        return self._checked(self.connection.put(path, json=payload))
