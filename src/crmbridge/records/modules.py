"""Record types for the standard CRM modules.

Each type only declares its resource path and field list; all
behaviour lives in BaseRecord and RecordEngine. Lookup and owner
fields arrive as nested objects (``{"name": ..., "id": ...}``) and are
typed loosely.
"""

from typing import Any, ClassVar, Dict, List, Optional, Type

from crmbridge.records.base import BaseRecord


class Lead(BaseRecord):
    """A prospect not yet qualified into a contact/account."""

    resource_path: ClassVar[str] = "Leads"

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    mobile: Optional[str] = None
    company: Optional[str] = None
    designation: Optional[str] = None
    lead_source: Optional[str] = None
    lead_status: Optional[str] = None
    industry: Optional[str] = None
    description: Optional[str] = None
    owner: Optional[Any] = None
    tag: Optional[List[Any]] = None


class Contact(BaseRecord):
    """A person, usually attached to an account."""

    resource_path: ClassVar[str] = "Contacts"

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    mobile: Optional[str] = None
    title: Optional[str] = None
    department: Optional[str] = None
    account_name: Optional[Any] = None
    lead_source: Optional[str] = None
    description: Optional[str] = None
    owner: Optional[Any] = None
    email_opt_out: Optional[bool] = None


class Account(BaseRecord):
    """A company/organization."""

    resource_path: ClassVar[str] = "Accounts"

    account_name: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    industry: Optional[str] = None
    employees: Optional[int] = None
    billing_city: Optional[str] = None
    billing_country: Optional[str] = None
    description: Optional[str] = None
    owner: Optional[Any] = None


class Deal(BaseRecord):
    """A sales opportunity (the API module is called "Deals")."""

    resource_path: ClassVar[str] = "Deals"

    deal_name: Optional[str] = None
    stage: Optional[str] = None
    amount: Optional[float] = None
    closing_date: Optional[str] = None
    probability: Optional[int] = None
    account_name: Optional[Any] = None
    contact_name: Optional[Any] = None
    lead_source: Optional[str] = None
    description: Optional[str] = None
    owner: Optional[Any] = None


class Task(BaseRecord):
    """A to-do item attached to a record through ``what_id``."""

    resource_path: ClassVar[str] = "Tasks"
    attribute_translation: ClassVar[Dict[str, str]] = {"id": "id", "related_to": "What_Id"}

    subject: Optional[str] = None
    due_date: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    related_to: Optional[Any] = None
    description: Optional[str] = None
    owner: Optional[Any] = None


class Note(BaseRecord):
    """A note attached to a parent record."""

    resource_path: ClassVar[str] = "Notes"

    created_by: Optional[Any] = None
    modified_by: Optional[Any] = None
    owner: Optional[Any] = None
    parent_id: Optional[Any] = None
    created_time: Optional[str] = None
    voice_note: Optional[bool] = None
    note_title: Optional[str] = None
    note_content: Optional[str] = None

    @property
    def title(self) -> Optional[str]:
        return self.note_title

    @property
    def content(self) -> Optional[str]:
        return self.note_content


RECORD_TYPES: Dict[str, Type[BaseRecord]] = {
    cls.resource_path: cls for cls in (Lead, Contact, Account, Deal, Task, Note)
}


def record_type(resource_path: str) -> Type[BaseRecord]:
    """Look up a record type by resource path (case-insensitive)."""
    for path, cls in RECORD_TYPES.items():
        if path.lower() == resource_path.lower():
            return cls
    raise ValueError(
        f"Unknown module: {resource_path}. Available: {', '.join(sorted(RECORD_TYPES))}"
    )
