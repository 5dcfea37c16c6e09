"""Tests for local <-> remote attribute name translation."""

import pytest

from crmbridge.records.attributes import AttributeMapper, default_remote_name


class TestDefaultConvention:
    """Tests for the capitalized-segment convention."""

    @pytest.mark.parametrize(
        "local, remote",
        [
            ("note_title", "Note_Title"),
            ("my_string", "My_String"),
            ("email", "Email"),
            ("lead_source_detail", "Lead_Source_Detail"),
        ],
    )
    def test_default_remote_name(self, local, remote):
        """Each underscore-separated segment is capitalized."""
        assert default_remote_name(local) == remote


class TestAttributeMapper:
    """Tests for AttributeMapper."""

    def test_local_to_remote_uses_convention(self):
        mapper = AttributeMapper()
        assert mapper.local_to_remote("note_title") == "Note_Title"

    def test_explicit_translation_wins(self):
        """An override takes precedence over the convention."""
        mapper = AttributeMapper({"id": "id", "related_to": "What_Id"})
        assert mapper.local_to_remote("id") == "id"
        assert mapper.local_to_remote("related_to") == "What_Id"

    def test_remote_to_local_reverses_translation(self):
        mapper = AttributeMapper({"related_to": "What_Id"})
        assert mapper.remote_to_local("What_Id") == "related_to"

    def test_remote_to_local_passes_untranslated_through(self):
        mapper = AttributeMapper({"id": "id"})
        assert mapper.remote_to_local("Last_Name") == "Last_Name"

    @pytest.mark.parametrize("field", ["Last_Name", "Email", "Note_Content", "Lead_Source"])
    def test_round_trip_without_override(self, field):
        """local_to_remote undoes remote_to_local for canonical remote fields."""
        mapper = AttributeMapper({"id": "id"})
        assert mapper.local_to_remote(mapper.remote_to_local(field)) == field

    def test_round_trip_with_override(self):
        mapper = AttributeMapper({"related_to": "What_Id"})
        assert mapper.local_to_remote(mapper.remote_to_local("What_Id")) == "What_Id"

    def test_to_remote_translates_keys(self):
        mapper = AttributeMapper({"id": "id"})
        assert mapper.to_remote({"id": "1", "last_name": "Burns", "email_opt_out": False}) == {
            "id": "1",
            "Last_Name": "Burns",
            "Email_Opt_Out": False,
        }

    def test_mapper_is_pure(self):
        """Translation never mutates the table it was built from."""
        table = {"id": "id"}
        mapper = AttributeMapper(table)
        mapper.local_to_remote("first_name")
        mapper.remote_to_local("First_Name")
        assert table == {"id": "id"}
