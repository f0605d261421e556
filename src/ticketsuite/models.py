from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, ClassVar, TypeVar

from .custom_fields import CustomFields
from .document import Document

M = TypeVar("M", bound="WireModel")


def _wire_key(f: Any) -> str:
    return str(f.metadata.get("wire", f.name))


class WireModel:
    """Mixin for small reference objects (user, status, project...).

    Field names map to wire keys via ``metadata={"wire": ...}``; encoding
    omits empty values the same way the server omits them.
    """

    _NESTED: ClassVar[dict[str, type[WireModel]]] = {}

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if isinstance(value, WireModel):
                value = value.to_dict()
            if not value:
                continue
            out[_wire_key(f)] = value
        return out

    @classmethod
    def from_dict(cls: type[M], data: dict[str, Any]) -> M:
        kwargs: dict[str, Any] = {}
        for f in fields(cls):  # type: ignore[arg-type]
            key = _wire_key(f)
            if key not in data or data[key] is None:
                continue
            value = data[key]
            nested = cls._NESTED.get(f.name)
            if nested is not None:
                value = nested.from_dict(value)
            kwargs[f.name] = value
        return cls(**kwargs)


@dataclass
class User(WireModel):
    account_id: str = field(default="", metadata={"wire": "accountId"})
    email_address: str = field(default="", metadata={"wire": "emailAddress"})
    display_name: str = field(default="", metadata={"wire": "displayName"})
    active: bool = False
    time_zone: str = field(default="", metadata={"wire": "timeZone"})
    self_url: str = field(default="", metadata={"wire": "self"})


@dataclass
class StatusCategory(WireModel):
    id: int = 0
    key: str = ""
    name: str = ""
    color_name: str = field(default="", metadata={"wire": "colorName"})


@dataclass
class Status(WireModel):
    _NESTED: ClassVar[dict[str, type[WireModel]]] = {"category": StatusCategory}

    id: str = ""
    name: str = ""
    description: str = ""
    category: StatusCategory | None = field(default=None, metadata={"wire": "statusCategory"})


@dataclass
class Priority(WireModel):
    id: str = ""
    name: str = ""
    icon_url: str = field(default="", metadata={"wire": "iconUrl"})


@dataclass
class Resolution(WireModel):
    id: str = ""
    name: str = ""
    description: str = ""
    self_url: str = field(default="", metadata={"wire": "self"})


@dataclass
class IssueType(WireModel):
    id: str = ""
    name: str = ""
    description: str = ""
    subtask: bool = False
    icon_url: str = field(default="", metadata={"wire": "iconUrl"})


@dataclass
class Project(WireModel):
    id: str = ""
    key: str = ""
    name: str = ""
    self_url: str = field(default="", metadata={"wire": "self"})


@dataclass
class Component(WireModel):
    id: str = ""
    name: str = ""
    description: str = ""
    self_url: str = field(default="", metadata={"wire": "self"})


@dataclass
class Version(WireModel):
    id: str = ""
    name: str = ""
    description: str = ""
    archived: bool = False
    released: bool = False
    release_date: str = field(default="", metadata={"wire": "releaseDate"})
    self_url: str = field(default="", metadata={"wire": "self"})


@dataclass
class IssueRef(WireModel):
    id: str = ""
    key: str = ""


@dataclass
class IssueFields:
    """Fixed issue fields plus the open-ended custom field store.

    ``description``/``environment`` are rich-text documents; use
    :meth:`set_description_text` for plain text. ``status``, ``reporter``,
    ``created`` and ``updated`` are server-managed and only meaningful on
    fetched issues.
    """

    summary: str = ""
    description: Document | None = None
    environment: Document | None = None
    issue_type: IssueType | None = None
    project: Project | None = None
    status: Status | None = None
    resolution: Resolution | None = None
    priority: Priority | None = None
    assignee: User | None = None
    reporter: User | None = None
    parent: IssueRef | None = None
    fix_versions: list[Version] = field(default_factory=list)
    affects_versions: list[Version] = field(default_factory=list)
    created: datetime | None = None
    updated: datetime | None = None
    due_date: datetime | None = None
    labels: list[str] = field(default_factory=list)
    components: list[Component] = field(default_factory=list)
    custom: CustomFields = field(default_factory=CustomFields)

    def set_description_text(self, text: str) -> None:
        self.description = Document.from_plain_text(text)

    def set_description(self, doc: Document | None) -> None:
        self.description = doc

    def set_environment_text(self, text: str) -> None:
        self.environment = Document.from_plain_text(text)

    def set_environment(self, doc: Document | None) -> None:
        self.environment = doc


@dataclass
class Issue:
    """Issue envelope. Accessors below never raise on missing ``fields``."""

    id: str = ""
    key: str = ""
    self_url: str = ""
    expand: str = ""
    fields: IssueFields | None = None

    def safe_fields(self) -> IssueFields:
        return self.fields if self.fields is not None else IssueFields()

    def get_summary(self) -> str:
        return self.fields.summary if self.fields else ""

    def get_description(self) -> Document | None:
        return self.fields.description if self.fields else None

    def get_description_text(self) -> str:
        doc = self.get_description()
        return doc.to_plain_text() if doc is not None else ""

    def get_environment(self) -> Document | None:
        return self.fields.environment if self.fields else None

    def get_environment_text(self) -> str:
        doc = self.get_environment()
        return doc.to_plain_text() if doc is not None else ""

    def get_status_name(self) -> str:
        status = self.fields.status if self.fields else None
        return status.name if status else ""

    def get_priority_name(self) -> str:
        priority = self.fields.priority if self.fields else None
        return priority.name if priority else ""

    def get_assignee_name(self) -> str:
        assignee = self.fields.assignee if self.fields else None
        return assignee.display_name if assignee else ""

    def get_reporter_name(self) -> str:
        reporter = self.fields.reporter if self.fields else None
        return reporter.display_name if reporter else ""

    def get_parent_key(self) -> str:
        parent = self.fields.parent if self.fields else None
        return parent.key if parent else ""

    def get_resolution_name(self) -> str:
        resolution = self.fields.resolution if self.fields else None
        return resolution.name if resolution else ""

    def get_project_key(self) -> str:
        project = self.fields.project if self.fields else None
        return project.key if project else ""

    def get_issue_type_name(self) -> str:
        issue_type = self.fields.issue_type if self.fields else None
        return issue_type.name if issue_type else ""

    def get_labels(self) -> list[str]:
        return list(self.fields.labels) if self.fields else []

    def get_components(self) -> list[Component]:
        return list(self.fields.components) if self.fields else []

    def get_fix_versions(self) -> list[Version]:
        return list(self.fields.fix_versions) if self.fields else []

    def get_affects_versions(self) -> list[Version]:
        return list(self.fields.affects_versions) if self.fields else []

    def get_created(self) -> datetime | None:
        return self.fields.created if self.fields else None

    def get_updated(self) -> datetime | None:
        return self.fields.updated if self.fields else None

    def get_due_date(self) -> datetime | None:
        return self.fields.due_date if self.fields else None

    def get_custom_fields(self) -> CustomFields:
        return self.fields.custom if self.fields else CustomFields()


__all__ = [
    "Component",
    "Issue",
    "IssueFields",
    "IssueRef",
    "IssueType",
    "Priority",
    "Project",
    "Resolution",
    "Status",
    "StatusCategory",
    "User",
    "Version",
    "WireModel",
]
