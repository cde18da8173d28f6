"""Validation of JSON request bodies with wtforms."""

from typing import Any, Dict, List, Mapping, Optional

from werkzeug.datastructures import MultiDict
from wtforms import Form


def strip(value: Optional[str]) -> Optional[str]:
    """Filter that trims whitespace."""
    return value.strip() if isinstance(value, str) else value


def lower(value: Optional[str]) -> Optional[str]:
    """Filter that lowercases."""
    return value.lower() if isinstance(value, str) else value


def empty_to_none(value: Optional[str]) -> Optional[str]:
    """Filter that treats an empty value as absent."""
    return value if value else None


class JSONForm(Form):
    """
    A form populated from a decoded JSON object.

    Only string values are used; a key with any other type of value is
    treated as absent. Payload keys that differ from the Python field names
    are declared in :attr:`wire_names`.
    """

    wire_names: Dict[str, str] = {}
    """Maps field names to the keys used in the JSON payload."""

    @classmethod
    def from_json(cls, payload: Any) -> 'JSONForm':
        """Build the form from a decoded JSON body."""
        if not isinstance(payload, Mapping):
            payload = {}
        field_names = {wire: name for name, wire in cls.wire_names.items()}
        formdata = MultiDict()
        for key, value in payload.items():
            if key in cls.wire_names or not isinstance(value, str):
                continue
            formdata[field_names.get(key, key)] = value
        return cls(formdata)

    def wire_errors(self) -> Dict[str, List[str]]:
        """Validation errors keyed by JSON payload key."""
        return {self.wire_names.get(name, name): list(errors)
                for name, errors in self.errors.items()}
