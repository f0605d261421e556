"""Typed access to server-defined custom fields.

Custom fields arrive as ``customfield_NNNNN`` keys next to the fixed issue
fields. Their type is not carried on the wire, so :class:`CustomFields` keeps
the raw value and infers the shape on each typed read::

    fields = CustomFields()
    fields.set_string("customfield_10001", "Sprint 1").set_number("customfield_10002", 42.5)
    fields.get_number("customfield_10002")  # (42.5, True)
    fields.get_string("customfield_10002")  # ("", False) - wrong shape, not an error

Values built in-process and values decoded from JSON can differ in shape
(tuples vs lists, ints vs floats); every getter accepts both.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from .datetimes import format_date, format_rfc3339, try_parse_datetime
from .errors import CustomFieldError

CUSTOM_FIELD_PREFIX = "customfield_"


class CustomFieldType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    DATETIME = "datetime"
    USER = "user"
    SELECT = "select"
    MULTI_SELECT = "multiselect"
    LABELS = "labels"


@dataclass
class CustomField:
    id: str
    value: Any
    # In-memory hint from the setter; never serialized.
    field_type: CustomFieldType | None = None


def is_custom_field_id(key: str) -> bool:
    return key.startswith(CUSTOM_FIELD_PREFIX)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


class CustomFields(dict[str, CustomField]):
    """Mapping of field id -> :class:`CustomField` with typed setters/getters."""

    def _put(self, field_id: str, value: Any, field_type: CustomFieldType | None) -> CustomFields:
        self[field_id] = CustomField(id=field_id, value=value, field_type=field_type)
        return self

    def _value(self, field_id: str) -> tuple[Any, bool]:
        entry = self.get(field_id)
        if entry is None:
            return None, False
        return entry.value, True

    # ---- strings & numbers -------------------------------------------
    def set_string(self, field_id: str, value: str) -> CustomFields:
        return self._put(field_id, value, CustomFieldType.STRING)

    def get_string(self, field_id: str) -> tuple[str, bool]:
        value, ok = self._value(field_id)
        if ok and isinstance(value, str):
            return value, True
        return "", False

    def set_number(self, field_id: str, value: float) -> CustomFields:
        return self._put(field_id, float(value), CustomFieldType.NUMBER)

    def get_number(self, field_id: str) -> tuple[float, bool]:
        value, ok = self._value(field_id)
        if ok and isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value), True
        return 0.0, False

    # ---- dates -------------------------------------------------------
    def set_date(self, field_id: str, value: date) -> CustomFields:
        return self._put(field_id, format_date(value), CustomFieldType.DATE)

    def get_date(self, field_id: str) -> tuple[datetime | None, bool]:
        return self._get_timestamp(field_id)

    def set_datetime(self, field_id: str, value: datetime) -> CustomFields:
        return self._put(field_id, format_rfc3339(value), CustomFieldType.DATETIME)

    def get_datetime(self, field_id: str) -> tuple[datetime | None, bool]:
        return self._get_timestamp(field_id)

    def _get_timestamp(self, field_id: str) -> tuple[datetime | None, bool]:
        value, ok = self._value(field_id)
        if ok and isinstance(value, str):
            return try_parse_datetime(value)
        return None, False

    # ---- object-shaped values ----------------------------------------
    def set_user(self, field_id: str, account_id: str) -> CustomFields:
        return self._put(field_id, {"accountId": account_id}, CustomFieldType.USER)

    def get_user(self, field_id: str) -> tuple[str, bool]:
        return self._get_member(field_id, "accountId")

    def set_select(self, field_id: str, value: str) -> CustomFields:
        return self._put(field_id, {"value": value}, CustomFieldType.SELECT)

    def get_select(self, field_id: str) -> tuple[str, bool]:
        return self._get_member(field_id, "value")

    def _get_member(self, field_id: str, member: str) -> tuple[str, bool]:
        value, ok = self._value(field_id)
        if ok and isinstance(value, Mapping):
            inner = value.get(member)
            if isinstance(inner, str):
                return inner, True
        return "", False

    # ---- list-shaped values ------------------------------------------
    def set_multi_select(self, field_id: str, values: Iterable[str]) -> CustomFields:
        options = [{"value": v} for v in values]
        return self._put(field_id, options, CustomFieldType.MULTI_SELECT)

    def get_multi_select(self, field_id: str) -> tuple[list[str], bool]:
        value, ok = self._value(field_id)
        if not ok or not _is_sequence(value):
            return [], False
        values = [
            opt["value"]
            for opt in value
            if isinstance(opt, Mapping) and isinstance(opt.get("value"), str)
        ]
        return values, bool(values)

    def set_labels(self, field_id: str, labels: Iterable[str]) -> CustomFields:
        return self._put(field_id, list(labels), CustomFieldType.LABELS)

    def get_labels(self, field_id: str) -> tuple[list[str], bool]:
        value, ok = self._value(field_id)
        if not ok or not _is_sequence(value):
            return [], False
        if all(isinstance(item, str) for item in value):
            return list(value), True
        labels = [item for item in value if isinstance(item, str)]
        return labels, bool(labels)

    # ---- raw ---------------------------------------------------------
    def set_raw(self, field_id: str, value: Any) -> CustomFields:
        return self._put(field_id, value, None)

    def get_raw(self, field_id: str) -> tuple[Any, bool]:
        return self._value(field_id)

    def remove(self, field_id: str) -> CustomFields:
        self.pop(field_id, None)
        return self

    # ---- bulk --------------------------------------------------------
    def merge(self, other: Mapping[str, CustomField]) -> CustomFields:
        """Copy every entry of ``other`` into this store; ``other`` wins on conflicts."""
        for field_id, entry in other.items():
            self[field_id] = entry
        return self

    def to_map(self) -> dict[str, Any]:
        return {field_id: entry.value for field_id, entry in self.items()}

    @classmethod
    def from_map(cls, values: Mapping[str, Any]) -> CustomFields:
        if not isinstance(values, Mapping):
            raise CustomFieldError("*", "custom fields must be a mapping of id -> value")
        store = cls()
        for field_id, value in values.items():
            store[str(field_id)] = CustomField(id=str(field_id), value=value)
        return store

    def to_json(self) -> str:
        return json.dumps(self.to_map())

    @classmethod
    def from_json(cls, payload: str | bytes) -> CustomFields:
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise CustomFieldError("*", f"invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise CustomFieldError("*", "payload must be a JSON object")
        return cls.from_map(data)


__all__ = [
    "CUSTOM_FIELD_PREFIX",
    "CustomField",
    "CustomFieldType",
    "CustomFields",
    "is_custom_field_id",
]
