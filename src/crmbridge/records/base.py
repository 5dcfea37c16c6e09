"""Declarative base for CRM record types.

A record type is a pydantic model: its fields are the declared
attributes, ``resource_path`` names the remote collection, and
``attribute_translation`` overrides the default field-name convention.

    class Lead(BaseRecord):
        resource_path: ClassVar[str] = "Leads"

        first_name: Optional[str] = None
        last_name: Optional[str] = None
        email: Optional[str] = None

    Lead.attributes()  # ["id", "first_name", "last_name", "email"]

Records materialized by a RecordEngine keep a reference to it, so
instance operations (notes, tags, blueprint transitions, updates) can be
called directly on the record.
"""

from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, PrivateAttr, field_validator

from crmbridge.errors import CRMError
from crmbridge.records.attributes import AttributeMapper

if TYPE_CHECKING:
    from crmbridge.records.engine import RecordEngine
    from crmbridge.records.modules import Note
    from crmbridge.response import ResponseEnvelope


class BaseRecord(BaseModel):
    """Base class for all record types."""

    resource_path: ClassVar[str] = ""
    attribute_translation: ClassVar[Dict[str, str]] = {"id": "id"}

    id: Optional[str] = None

    _engine: Any = PrivateAttr(default=None)

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        """Remote ids may arrive as numbers."""
        return str(v) if v is not None else None

    # =========================================================================
    # Schema
    # =========================================================================

    @classmethod
    def attributes(cls) -> List[str]:
        """Declared attribute names, in declaration order."""
        return list(cls.model_fields)

    @classmethod
    def mapper(cls) -> AttributeMapper:
        return AttributeMapper(cls.attribute_translation)

    @classmethod
    def from_remote(cls, data: Mapping[str, Any]) -> "BaseRecord":
        """Build a record from a remote field map.

        Each declared attribute takes the value under its remote name, or
        under its local name when the remote one is absent. Present values
        are kept as they are, including ``""`` and ``False``.
        """
        mapper = cls.mapper()
        values: Dict[str, Any] = {}
        for attr in cls.attributes():
            remote = mapper.local_to_remote(attr)
            if remote in data:
                values[attr] = data[remote]
            elif attr in data:
                values[attr] = data[attr]
        return cls.model_validate(values)

    def to_params(self, exclude_none: bool = True) -> Dict[str, Any]:
        """Remote field map of this record's attributes."""
        mapper = self.mapper()
        return {
            mapper.local_to_remote(attr): value
            for attr, value in self.model_dump(exclude_none=exclude_none).items()
        }

    @property
    def is_new_record(self) -> bool:
        return self.id is None

    # =========================================================================
    # Engine-backed operations
    # =========================================================================

    def bind(self, engine: "RecordEngine") -> "BaseRecord":
        self._engine = engine
        return self

    @property
    def engine(self) -> "RecordEngine":
        if self._engine is None:
            raise CRMError(f"{type(self).__name__} is not bound to a RecordEngine")
        return self._engine

    def save(self) -> Optional[str]:
        """Create or update this record; returns its id."""
        return self.engine.save(self)

    def update(self, **changes: Any) -> "ResponseEnvelope":
        return self.engine.update(self, **changes)

    def delete(self) -> "ResponseEnvelope":
        return self.engine.delete(self)

    def notes(self) -> List["Note"]:
        return self.engine.notes(self)

    def add_note(self, title: str = "", content: str = "") -> "ResponseEnvelope":
        return self.engine.add_note(self, title=title, content=content)

    def add_tags(self, tag_names: List[str]) -> "ResponseEnvelope":
        return self.engine.add_tags(self, tag_names)

    def blueprint_transition(
        self, name: str, data: Optional[Dict[str, Any]] = None
    ) -> "ResponseEnvelope":
        return self.engine.blueprint_transition(self, name, data=data)
