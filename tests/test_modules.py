"""Tests for record type declarations and attribute translation."""

import pytest

from crmbridge.records.modules import RECORD_TYPES, Account, Lead, Note, Task, record_type


class TestRecordType:
    @pytest.mark.parametrize("path, cls", [("Leads", Lead), ("leads", Lead), ("ACCOUNTS", Account)])
    def test_lookup(self, path, cls):
        assert record_type(path) is cls

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown module"):
            record_type("Widgets")

    def test_registry_covers_standard_modules(self):
        assert set(RECORD_TYPES) == {"Leads", "Contacts", "Accounts", "Deals", "Tasks", "Notes"}


class TestBaseRecord:
    def test_attributes_in_declaration_order(self):
        assert Lead.attributes()[:3] == ["id", "first_name", "last_name"]

    def test_from_remote(self):
        lead = Lead.from_remote({"id": 5, "First_Name": "Jane", "Email": "jane@example.com", "X": 1})
        assert lead.id == "5"
        assert lead.first_name == "Jane"
        assert lead.email == "jane@example.com"

    def test_from_remote_accepts_local_names(self):
        assert Lead.from_remote({"last_name": "Doe"}).last_name == "Doe"

    def test_to_params(self):
        params = Lead(id="1", first_name="Jane").to_params()
        assert params == {"id": "1", "First_Name": "Jane"}

    def test_translation_override(self):
        task = Task.from_remote({"What_Id": {"id": "42"}, "Subject": "Call"})
        assert task.related_to == {"id": "42"}
        assert task.to_params() == {"What_Id": {"id": "42"}, "Subject": "Call"}

    def test_is_new_record(self):
        assert Lead().is_new_record
        assert not Lead(id="1").is_new_record

    def test_note_accessors(self):
        note = Note.from_remote({"Note_Title": "T", "Note_Content": "C"})
        assert (note.title, note.content) == ("T", "C")
