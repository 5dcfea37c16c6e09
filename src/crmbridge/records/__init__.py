"""Record types and the generic engine that operates on them.

This package provides:
- BaseRecord: pydantic base with declared attributes and name translation
- AttributeMapper: local <-> remote field names
- RecordEngine: find/find_all/where/create/update/delete_all/tags/notes/blueprint
- Standard module record types (Lead, Contact, Account, Deal, Task, Note)
"""

from crmbridge.records.attributes import AttributeMapper, default_remote_name
from crmbridge.records.base import BaseRecord
from crmbridge.records.batching import BATCH_SIZE, batched, join_ids
from crmbridge.records.engine import BUILT_IN_SEARCH_KEYS, RecordEngine, escape_criteria_value
from crmbridge.records.modules import (
    RECORD_TYPES,
    Account,
    Contact,
    Deal,
    Lead,
    Note,
    Task,
    record_type,
)

__all__ = [
    "AttributeMapper",
    "default_remote_name",
    "BaseRecord",
    "BATCH_SIZE",
    "batched",
    "join_ids",
    "RecordEngine",
    "BUILT_IN_SEARCH_KEYS",
    "escape_criteria_value",
    "RECORD_TYPES",
    "record_type",
    "Lead",
    "Contact",
    "Account",
    "Deal",
    "Task",
    "Note",
]
