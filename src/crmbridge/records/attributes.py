"""Translation between local attribute names and remote field names.

Remote fields use capitalized snake case (``note_title`` -> ``Note_Title``).
A record type may override individual names with an explicit table,
e.g. ``{"id": "id"}``.
"""

from typing import Any, Dict, Mapping, Optional


def default_remote_name(name: str) -> str:
    """Capitalize every underscore-separated segment of ``name``."""
    return "_".join(segment.capitalize() for segment in name.split("_"))


class AttributeMapper:
    """Bidirectional name translation for one record type."""

    def __init__(self, translation: Optional[Mapping[str, str]] = None):
        self.translation: Dict[str, str] = dict(translation or {})
        self.reverse_translation: Dict[str, str] = {
            remote: local for local, remote in self.translation.items()
        }

    def local_to_remote(self, name: str) -> str:
        """Remote field for a local attribute; explicit entries win over the convention."""
        if name in self.translation:
            return self.translation[name]
        return default_remote_name(name)

    def remote_to_local(self, field: str) -> str:
        """Local attribute for a remote field; untranslated fields pass through."""
        return self.reverse_translation.get(field, field)

    def to_remote(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Translate every key of a local mapping."""
        return {self.local_to_remote(key): value for key, value in values.items()}
