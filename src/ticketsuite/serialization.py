"""Wire codec for issue fields: fixed schema + custom fields in one object.

On the wire the fixed fields (``summary``, ``status``, ``duedate``...) and the
server-defined ``customfield_*`` keys share a single flat JSON object.

Encoding writes the fixed fields (omitting empty ones) and then lays the
custom field values over the result; a custom value wins on key collision.

Decoding runs in passes over one flat dict:

1. parse the payload (malformed JSON or a non-object fails the decode);
2. rewrite every string value that looks like a date/time to canonical
   RFC 3339, so fixed date fields accept any recognised layout. This touches
   *all* string values, including ``summary``;
3. validate against the fixed-field schema and build the typed dataclasses;
4. copy every ``customfield_*`` entry of the normalised dict into the store.

A decode either fully succeeds or raises :class:`FieldDecodeError`.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime
from typing import Any, TypeVar

from .custom_fields import CustomFields, is_custom_field_id
from .datetimes import format_rfc3339, normalize_field_value, try_parse_datetime
from .document import Document
from .errors import DocumentDecodeError, FieldDecodeError
from .logging import get_logger
from .models import (
    Component,
    Issue,
    IssueFields,
    IssueRef,
    IssueType,
    Priority,
    Project,
    Resolution,
    Status,
    User,
    Version,
    WireModel,
)
from .schemas import validate_issue_fields

W = TypeVar("W", bound=WireModel)

# (attribute, wire key, model) in wire order
_REFERENCE_FIELDS: tuple[tuple[str, str, type[WireModel]], ...] = (
    ("issue_type", "issuetype", IssueType),
    ("project", "project", Project),
    ("status", "status", Status),
    ("resolution", "resolution", Resolution),
    ("priority", "priority", Priority),
    ("assignee", "assignee", User),
    ("reporter", "reporter", User),
    ("parent", "parent", IssueRef),
)
_VERSION_LISTS = (("fix_versions", "fixVersions"), ("affects_versions", "versions"))
_TIMESTAMPS = (("created", "created"), ("updated", "updated"), ("due_date", "duedate"))
_DOCUMENTS = (("description", "description"), ("environment", "environment"))


# ---- encoding ---------------------------------------------------------


def encode_field_value(value: Any) -> Any:
    """Encode one field value for the wire (documents, timestamps, models)."""
    if isinstance(value, Document):
        return value.to_dict()
    if isinstance(value, datetime):
        return format_rfc3339(value)
    if isinstance(value, WireModel):
        return value.to_dict()
    if isinstance(value, CustomFields):
        return encode_field_value(value.to_map())
    if isinstance(value, Mapping):
        return {key: encode_field_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_field_value(v) for v in value]
    return value


def _encode_fixed(fields: IssueFields) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if fields.summary:
        out["summary"] = fields.summary
    for attr, key in _DOCUMENTS:
        doc = getattr(fields, attr)
        if doc is not None:
            out[key] = doc.to_dict()
    for attr, key, _model in _REFERENCE_FIELDS:
        ref = getattr(fields, attr)
        if ref is not None:
            out[key] = ref.to_dict()
    for attr, key in _VERSION_LISTS:
        versions = getattr(fields, attr)
        if versions:
            out[key] = [v.to_dict() for v in versions]
    for attr, key in _TIMESTAMPS:
        stamp = getattr(fields, attr)
        if stamp is not None:
            out[key] = format_rfc3339(stamp)
    if fields.labels:
        out["labels"] = list(fields.labels)
    if fields.components:
        out["components"] = [c.to_dict() for c in fields.components]
    return out


def encode_issue_fields(fields: IssueFields) -> dict[str, Any]:
    """Fixed fields and custom fields merged into one flat wire object."""
    out = _encode_fixed(fields)
    if not fields.custom:
        return out
    for field_id, entry in fields.custom.items():
        out[field_id] = encode_field_value(entry.value)
    return out


def encode_issue_fields_json(fields: IssueFields) -> str:
    return json.dumps(encode_issue_fields(fields))


# ---- decoding ---------------------------------------------------------


def _load_object(payload: str | bytes | Mapping[str, Any], what: str) -> dict[str, Any]:
    if isinstance(payload, Mapping):
        return dict(payload)
    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise FieldDecodeError(f"malformed {what} JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise FieldDecodeError(f"{what} payload must be a JSON object")
    return data


def _decode_timestamp(raw: Mapping[str, Any], key: str) -> datetime | None:
    value = raw.get(key)
    if value is None:
        return None
    parsed, ok = try_parse_datetime(value)
    if not ok:
        raise FieldDecodeError(f"{key}: cannot parse {value!r} as a date/time", path=key)
    return parsed


def _decode_document(raw: Mapping[str, Any], key: str) -> Document | None:
    value = raw.get(key)
    if value is None:
        return None
    try:
        return Document.from_dict(value)
    except DocumentDecodeError as exc:
        raise FieldDecodeError(f"{key}: {exc}", path=key) from exc


def _decode_reference(raw: Mapping[str, Any], key: str, model: type[W]) -> W | None:
    value = raw.get(key)
    if value is None:
        return None
    return model.from_dict(value)


def _build_fields(raw: dict[str, Any]) -> IssueFields:
    fields = IssueFields(summary=raw.get("summary") or "")
    for attr, key in _DOCUMENTS:
        setattr(fields, attr, _decode_document(raw, key))
    for attr, key, model in _REFERENCE_FIELDS:
        setattr(fields, attr, _decode_reference(raw, key, model))
    for attr, key in _VERSION_LISTS:
        setattr(fields, attr, [Version.from_dict(v) for v in raw.get(key) or []])
    for attr, key in _TIMESTAMPS:
        setattr(fields, attr, _decode_timestamp(raw, key))
    fields.labels = list(raw.get("labels") or [])
    fields.components = [Component.from_dict(c) for c in raw.get("components") or []]
    fields.custom = CustomFields.from_map(
        {key: value for key, value in raw.items() if is_custom_field_id(key)}
    )
    return fields


def decode_issue_fields(payload: str | bytes | Mapping[str, Any]) -> IssueFields:
    """Split a flat wire object into fixed fields and the custom field store."""
    try:
        raw = _load_object(payload, "issue fields")
        for key, value in raw.items():
            raw[key] = normalize_field_value(value)
        validate_issue_fields(raw)
        return _build_fields(raw)
    except FieldDecodeError as exc:
        get_logger().debug("issue fields decode failed", error=str(exc), field_path=exc.path)
        raise


def decode_issue(payload: str | bytes | Mapping[str, Any]) -> Issue:
    """Decode a full issue envelope (``id``, ``key``, ``self``, ``fields``)."""
    raw = _load_object(payload, "issue")
    for key in ("id", "key", "self", "expand"):
        value = raw.get(key)
        if value is not None and not isinstance(value, str):
            raise FieldDecodeError(f"{key}: expected a string, got {type(value).__name__}", path=key)
    fields_raw = raw.get("fields")
    if fields_raw is not None and not isinstance(fields_raw, Mapping):
        raise FieldDecodeError("fields: expected an object", path="fields")
    return Issue(
        id=raw.get("id") or "",
        key=raw.get("key") or "",
        self_url=raw.get("self") or "",
        expand=raw.get("expand") or "",
        fields=decode_issue_fields(fields_raw) if fields_raw is not None else None,
    )


__all__ = [
    "decode_issue",
    "decode_issue_fields",
    "encode_field_value",
    "encode_issue_fields",
    "encode_issue_fields_json",
]
