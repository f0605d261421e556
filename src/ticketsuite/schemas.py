"""JSON Schemas for the issue wire format.

The ``issue_fields`` schema drives strict decoding of the fixed fields: a
value whose JSON type does not match the declared field type (a quoted
number, a string where an object is expected) fails the whole decode. Nested
reference objects stay open (``additionalProperties`` allowed) so additive
server changes do not break clients.

Every fixed property also accepts ``null``; the server sends explicit nulls
for unset fields.

Integer fields accept JSON integers only; ``1.0`` is a type mismatch.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jsonschema import Draft7Validator, validators
from jsonschema.exceptions import best_match
from jsonschema.protocols import Validator

from .errors import FieldDecodeError

SCHEMA_KEY = "$schema"
SCHEMA_URL = "http://json-schema.org/draft-07/schema#"

_STRING: dict[str, Any] = {"type": "string"}
_BOOLEAN: dict[str, Any] = {"type": "boolean"}
_INTEGER: dict[str, Any] = {"type": "integer"}

_VALIDATORS: dict[str, Validator] = {}


def _is_strict_integer(checker: Any, instance: Any) -> bool:
    # bool is an int subclass; floats such as 1.0 are not integers.
    return isinstance(instance, int) and not isinstance(instance, bool)


StrictDraft7Validator = validators.extend(
    Draft7Validator,
    type_checker=Draft7Validator.TYPE_CHECKER.redefine("integer", _is_strict_integer),
)


def _nullable(schema: dict[str, Any]) -> dict[str, Any]:
    return {"anyOf": [{"type": "null"}, schema]}


def _object(properties: dict[str, Any]) -> dict[str, Any]:
    return {"type": "object", "properties": properties}


def _array(items: dict[str, Any]) -> dict[str, Any]:
    return {"type": "array", "items": items}


_USER = _object(
    {
        "accountId": _STRING,
        "emailAddress": _STRING,
        "displayName": _STRING,
        "active": _BOOLEAN,
        "timeZone": _STRING,
        "self": _STRING,
    }
)
_STATUS = _object(
    {
        "id": _STRING,
        "name": _STRING,
        "description": _STRING,
        "statusCategory": _nullable(
            _object({"id": _INTEGER, "key": _STRING, "name": _STRING, "colorName": _STRING})
        ),
    }
)
_NAMED = _object({"id": _STRING, "name": _STRING, "description": _STRING, "self": _STRING})
_PRIORITY = _object({"id": _STRING, "name": _STRING, "iconUrl": _STRING})
_ISSUE_TYPE = _object(
    {
        "id": _STRING,
        "name": _STRING,
        "description": _STRING,
        "subtask": _BOOLEAN,
        "iconUrl": _STRING,
    }
)
_PROJECT = _object({"id": _STRING, "key": _STRING, "name": _STRING, "self": _STRING})
_VERSION = _object(
    {
        "id": _STRING,
        "name": _STRING,
        "description": _STRING,
        "archived": _BOOLEAN,
        "released": _BOOLEAN,
        "releaseDate": _STRING,
        "self": _STRING,
    }
)
_ISSUE_REF = _object({"id": _STRING, "key": _STRING})
_DATETIME = {"type": "string", "minLength": 1}

DOCUMENT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["type"],
    "properties": {
        "type": {"const": "doc"},
        "version": {"const": 1},
        "content": _array({"type": "object", "required": ["type"]}),
    },
}


def get_schemas() -> dict[str, Any]:
    """Return a mapping of schema name -> JSON Schema dictionary.

    Keys:
        issue_fields:  Fixed issue fields (custom fields pass through).
        document:      Rich-text document root (nodes checked shallowly).
        custom_fields: Flat object of ``customfield_*`` keys.
    """
    issue_fields: dict[str, Any] = {
        SCHEMA_KEY: SCHEMA_URL,
        "title": "IssueFields",
        "type": "object",
        "properties": {
            "summary": _nullable(_STRING),
            "description": _nullable(DOCUMENT_SCHEMA),
            "environment": _nullable(DOCUMENT_SCHEMA),
            "issuetype": _nullable(_ISSUE_TYPE),
            "project": _nullable(_PROJECT),
            "status": _nullable(_STATUS),
            "resolution": _nullable(_NAMED),
            "priority": _nullable(_PRIORITY),
            "assignee": _nullable(_USER),
            "reporter": _nullable(_USER),
            "parent": _nullable(_ISSUE_REF),
            "fixVersions": _nullable(_array(_VERSION)),
            "versions": _nullable(_array(_VERSION)),
            "created": _nullable(_DATETIME),
            "updated": _nullable(_DATETIME),
            "duedate": _nullable(_DATETIME),
            "labels": _nullable(_array(_STRING)),
            "components": _nullable(_array(_NAMED)),
        },
    }
    document = {SCHEMA_KEY: SCHEMA_URL, "title": "Document", **DOCUMENT_SCHEMA}
    custom_fields = {
        SCHEMA_KEY: SCHEMA_URL,
        "title": "CustomFields",
        "type": "object",
        "propertyNames": {"pattern": "^customfield_"},
    }
    return {
        "issue_fields": issue_fields,
        "document": document,
        "custom_fields": custom_fields,
    }


def _validator(name: str) -> Validator:
    validator = _VALIDATORS.get(name)
    if validator is None:
        validator = StrictDraft7Validator(get_schemas()[name])
        _VALIDATORS[name] = validator
    return validator


def validate_issue_fields(data: Mapping[str, Any]) -> None:
    """Raise :class:`FieldDecodeError` if ``data`` violates the fixed schema."""
    error = best_match(_validator("issue_fields").iter_errors(data))
    if error is None:
        return
    path = ".".join(str(p) for p in error.absolute_path) or "<root>"
    raise FieldDecodeError(f"{path}: {error.message}", path=path)


__all__ = ["DOCUMENT_SCHEMA", "SCHEMA_KEY", "SCHEMA_URL", "get_schemas", "validate_issue_fields"]
