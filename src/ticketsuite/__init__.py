"""ticketsuite - rich-text documents and custom fields for a ticket tracker.

High-level public API (stable):

from ticketsuite import Document, IssueFields, decode_issue_fields, encode_issue_fields

fields = IssueFields(summary="Crash on login")
fields.set_description_text("Steps:\\n\\nOpen the app.")
fields.custom.set_string("customfield_10001", "Sprint 1")
payload = encode_issue_fields(fields)  # flat wire object, custom keys included

The REST surface (``TrackerRestClient``, ``IssueService``) and configuration
helpers (``load_config``, ``config_from_env``) are exported as well.
"""

from __future__ import annotations

from .config import ClientConfig, config_from_env, load_config
from .custom_fields import CustomField, CustomFields, CustomFieldType, is_custom_field_id
from .datetimes import format_rfc3339, normalize_field_value, try_parse_datetime
from .document import (
    BulletList,
    CodeBlock,
    Document,
    GenericNode,
    Heading,
    ListItem,
    Mark,
    Node,
    NodeType,
    OrderedList,
    Paragraph,
    Text,
)
from .errors import (
    ConfigError,
    CustomFieldError,
    DecodeError,
    DocumentDecodeError,
    FieldDecodeError,
    TicketSuiteError,
    TrackerAPIError,
)
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
    StatusCategory,
    User,
    Version,
)
from .rest import IssueService, TrackerRestClient
from .serialization import (
    decode_issue,
    decode_issue_fields,
    encode_issue_fields,
    encode_issue_fields_json,
)

# Version constant (sync manually with pyproject)
__version__ = "0.1.0"

__all__ = [
    "BulletList",
    "ClientConfig",
    "CodeBlock",
    "Component",
    "ConfigError",
    "CustomField",
    "CustomFieldError",
    "CustomFieldType",
    "CustomFields",
    "DecodeError",
    "Document",
    "DocumentDecodeError",
    "FieldDecodeError",
    "GenericNode",
    "Heading",
    "Issue",
    "IssueFields",
    "IssueRef",
    "IssueService",
    "IssueType",
    "ListItem",
    "Mark",
    "Node",
    "NodeType",
    "OrderedList",
    "Paragraph",
    "Priority",
    "Project",
    "Resolution",
    "Status",
    "StatusCategory",
    "Text",
    "TicketSuiteError",
    "TrackerAPIError",
    "TrackerRestClient",
    "User",
    "Version",
    "__version__",
    "config_from_env",
    "decode_issue",
    "decode_issue_fields",
    "encode_issue_fields",
    "encode_issue_fields_json",
    "format_rfc3339",
    "is_custom_field_id",
    "load_config",
    "normalize_field_value",
    "try_parse_datetime",
]
