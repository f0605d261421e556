"""Rich-text document tree used for long-text issue fields.

The tracker stores ``description``, ``environment`` and comment bodies as a
recursive node tree (Atlassian Document Format)::

    {"type": "doc", "version": 1, "content": [
        {"type": "paragraph", "content": [{"type": "text", "text": "Hello"}]}
    ]}

Each recognised node kind is its own dataclass owning only the attributes it
uses. Kinds the builders never produce (``mention``, ``table``, ``hardBreak``,
...) decode into :class:`GenericNode` so server documents round-trip intact.

Builders mutate the document in place and return it for chaining::

    doc = Document.new().add_heading("Problem", 2).add_bullet_list(["a", "b"])
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from .errors import DocumentDecodeError

DOCUMENT_TYPE = "doc"
DOCUMENT_VERSION = 1
MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 6


class NodeType(str, Enum):
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BULLET_LIST = "bulletList"
    ORDERED_LIST = "orderedList"
    LIST_ITEM = "listItem"
    CODE_BLOCK = "codeBlock"
    TEXT = "text"


@dataclass
class Mark:
    """Formatting mark (``strong``, ``em``, ``link``...). Not interpreted."""

    type: str
    attrs: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type}
        if self.attrs:
            out["attrs"] = dict(self.attrs)
        return out

    @classmethod
    def from_dict(cls, data: Any, path: str = "marks") -> Mark:
        if not isinstance(data, Mapping):
            raise DocumentDecodeError(f"{path}: mark must be an object")
        kind = data.get("type")
        if not isinstance(kind, str) or not kind:
            raise DocumentDecodeError(f"{path}: mark is missing 'type'")
        attrs = data.get("attrs")
        if attrs is not None and not isinstance(attrs, Mapping):
            raise DocumentDecodeError(f"{path}.attrs: must be an object")
        return cls(type=kind, attrs=dict(attrs) if attrs else None)


class Node:
    """Behaviour shared by every node variant.

    Subclasses are dataclasses declaring their own fields; ``TYPE`` is the
    wire discriminator.
    """

    TYPE: ClassVar[str] = ""
    _ATTRS: ClassVar[frozenset[str]] = frozenset()
    _LEAF: ClassVar[bool] = False

    @property
    def node_type(self) -> str:
        return self.TYPE

    def child_nodes(self) -> list[Node]:
        return list(getattr(self, "content", None) or [])

    def leaf_text(self) -> str:
        return ""

    def attrs_dict(self) -> dict[str, Any]:
        return {}

    def node_marks(self) -> list[Mark]:
        return list(getattr(self, "marks", None) or [])

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.node_type}
        children = self.child_nodes()
        if children:
            out["content"] = [child.to_dict() for child in children]
        text = self.leaf_text()
        if text:
            out["text"] = text
        attrs = self.attrs_dict()
        if attrs:
            out["attrs"] = attrs
        marks = self.node_marks()
        if marks:
            out["marks"] = [mark.to_dict() for mark in marks]
        return out

    @classmethod
    def _fits(
        cls, content: list[Node], text: str, attrs: dict[str, Any], marks: list[Mark]
    ) -> bool:
        if not set(attrs) <= cls._ATTRS:
            return False
        if cls._LEAF:
            return not content
        return not text and not marks

    @classmethod
    def _from_parts(
        cls, content: list[Node], text: str, attrs: dict[str, Any], marks: list[Mark]
    ) -> Node | None:
        raise NotImplementedError


@dataclass
class Text(Node):
    TYPE: ClassVar[str] = NodeType.TEXT.value
    _LEAF: ClassVar[bool] = True

    text: str = ""
    marks: list[Mark] = field(default_factory=list)

    def leaf_text(self) -> str:
        return self.text

    @classmethod
    def _from_parts(
        cls, content: list[Node], text: str, attrs: dict[str, Any], marks: list[Mark]
    ) -> Node | None:
        return cls(text=text, marks=marks)


@dataclass
class Paragraph(Node):
    TYPE: ClassVar[str] = NodeType.PARAGRAPH.value

    content: list[Node] = field(default_factory=list)

    @classmethod
    def _from_parts(
        cls, content: list[Node], text: str, attrs: dict[str, Any], marks: list[Mark]
    ) -> Node | None:
        return cls(content=content)


@dataclass
class Heading(Node):
    """Heading node; ``level`` is clamped to 1..6 on construction.

    The clamp also applies when decoding, so a server heading with a missing
    level reads back as level 1 and an out-of-range one is clamped. Such
    documents do not re-encode byte for byte.
    """

    TYPE: ClassVar[str] = NodeType.HEADING.value
    _ATTRS: ClassVar[frozenset[str]] = frozenset({"level"})

    level: int = MIN_HEADING_LEVEL
    content: list[Node] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.level = max(MIN_HEADING_LEVEL, min(MAX_HEADING_LEVEL, int(self.level)))

    def attrs_dict(self) -> dict[str, Any]:
        return {"level": self.level}

    @classmethod
    def _from_parts(
        cls, content: list[Node], text: str, attrs: dict[str, Any], marks: list[Mark]
    ) -> Node | None:
        level = attrs.get("level", MIN_HEADING_LEVEL)
        if isinstance(level, bool) or not isinstance(level, int):
            return None
        return cls(level=level, content=content)


@dataclass
class ListItem(Node):
    TYPE: ClassVar[str] = NodeType.LIST_ITEM.value

    content: list[Node] = field(default_factory=list)

    @classmethod
    def _from_parts(
        cls, content: list[Node], text: str, attrs: dict[str, Any], marks: list[Mark]
    ) -> Node | None:
        return cls(content=content)


@dataclass
class BulletList(Node):
    TYPE: ClassVar[str] = NodeType.BULLET_LIST.value

    content: list[Node] = field(default_factory=list)

    @classmethod
    def _from_parts(
        cls, content: list[Node], text: str, attrs: dict[str, Any], marks: list[Mark]
    ) -> Node | None:
        return cls(content=content)


@dataclass
class OrderedList(Node):
    TYPE: ClassVar[str] = NodeType.ORDERED_LIST.value
    _ATTRS: ClassVar[frozenset[str]] = frozenset({"order"})

    content: list[Node] = field(default_factory=list)
    order: int | None = None

    def attrs_dict(self) -> dict[str, Any]:
        return {"order": self.order} if self.order is not None else {}

    @classmethod
    def _from_parts(
        cls, content: list[Node], text: str, attrs: dict[str, Any], marks: list[Mark]
    ) -> Node | None:
        order = attrs.get("order")
        if order is not None and (isinstance(order, bool) or not isinstance(order, int)):
            return None
        return cls(content=content, order=order)


@dataclass
class CodeBlock(Node):
    TYPE: ClassVar[str] = NodeType.CODE_BLOCK.value
    _ATTRS: ClassVar[frozenset[str]] = frozenset({"language"})

    content: list[Node] = field(default_factory=list)
    language: str | None = None

    def attrs_dict(self) -> dict[str, Any]:
        return {"language": self.language} if self.language else {}

    @classmethod
    def _from_parts(
        cls, content: list[Node], text: str, attrs: dict[str, Any], marks: list[Mark]
    ) -> Node | None:
        language = attrs.get("language")
        if language is not None and not isinstance(language, str):
            return None
        return cls(content=content, language=language)


@dataclass
class GenericNode(Node):
    """Any node kind not modelled above, or a known kind with foreign attributes."""

    kind: str = ""
    content: list[Node] = field(default_factory=list)
    text: str = ""
    attrs: dict[str, Any] = field(default_factory=dict)
    marks: list[Mark] = field(default_factory=list)

    @property
    def node_type(self) -> str:
        return self.kind

    def leaf_text(self) -> str:
        return self.text

    def attrs_dict(self) -> dict[str, Any]:
        return dict(self.attrs)


_NODE_TYPES: dict[str, type[Node]] = {
    cls.TYPE: cls
    for cls in (Text, Paragraph, Heading, ListItem, BulletList, OrderedList, CodeBlock)
}


def node_from_dict(data: Any, path: str = "content") -> Node:
    """Decode one wire node (recursively)."""
    if not isinstance(data, Mapping):
        raise DocumentDecodeError(f"{path}: node must be an object")
    kind = data.get("type")
    if not isinstance(kind, str) or not kind:
        raise DocumentDecodeError(f"{path}: node is missing 'type'")
    raw_content = data.get("content")
    if raw_content is None:
        raw_content = []
    if not isinstance(raw_content, list):
        raise DocumentDecodeError(f"{path}.content: must be a list")
    content = [
        node_from_dict(child, f"{path}.content[{i}]") for i, child in enumerate(raw_content)
    ]
    text = data.get("text", "")
    if text is None:
        text = ""
    if not isinstance(text, str):
        raise DocumentDecodeError(f"{path}.text: must be a string")
    raw_attrs = data.get("attrs") or {}
    if not isinstance(raw_attrs, Mapping):
        raise DocumentDecodeError(f"{path}.attrs: must be an object")
    attrs = dict(raw_attrs)
    raw_marks = data.get("marks") or []
    if not isinstance(raw_marks, list):
        raise DocumentDecodeError(f"{path}.marks: must be a list")
    marks = [Mark.from_dict(m, f"{path}.marks[{i}]") for i, m in enumerate(raw_marks)]

    cls = _NODE_TYPES.get(kind)
    if cls is not None and cls._fits(content, text, attrs, marks):
        node = cls._from_parts(content, text, attrs, marks)
        if node is not None:
            return node
    return GenericNode(kind=kind, content=content, text=text, attrs=attrs, marks=marks)


def _text_paragraph(text: str) -> Paragraph:
    return Paragraph(content=[Text(text=text)])


def _list_items(items: Iterable[str]) -> list[Node]:
    return [ListItem(content=[_text_paragraph(item)]) for item in items]


def split_paragraphs(text: str) -> list[str]:
    """Split plain text into paragraph strings.

    Two consecutive newlines close a paragraph (the second one is consumed);
    a lone newline folds into a single space once the paragraph has content.
    """
    paragraphs: list[str] = []
    current: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\n":
            if i + 1 < len(text) and text[i + 1] == "\n":
                if current:
                    paragraphs.append("".join(current))
                    current = []
                i += 1
            elif current:
                current.append(" ")
        else:
            current.append(ch)
        i += 1
    if current:
        paragraphs.append("".join(current))
    return paragraphs


def node_to_text(node: Node) -> str:
    """Plain text of a subtree: leaf text as-is, otherwise children joined by a space."""
    text = node.leaf_text()
    if text:
        return text
    parts = [part for part in (node_to_text(child) for child in node.child_nodes()) if part]
    return " ".join(parts)


@dataclass
class Document:
    """Root of a rich-text tree. ``version`` is always 1."""

    content: list[Node] = field(default_factory=list)
    version: int = DOCUMENT_VERSION

    TYPE: ClassVar[str] = DOCUMENT_TYPE

    @classmethod
    def new(cls) -> Document:
        return cls()

    @classmethod
    def from_plain_text(cls, text: str) -> Document:
        doc = cls()
        if not text:
            return doc
        for para in split_paragraphs(text):
            if para:
                doc.add_paragraph(para)
        return doc

    # ---- builders ---------------------------------------------------
    def add_paragraph(self, text: str) -> Document:
        self.content.append(_text_paragraph(text))
        return self

    def add_heading(self, text: str, level: int) -> Document:
        self.content.append(Heading(level=level, content=[Text(text=text)]))
        return self

    def add_bullet_list(self, items: Iterable[str]) -> Document:
        self.content.append(BulletList(content=_list_items(items)))
        return self

    def add_ordered_list(self, items: Iterable[str]) -> Document:
        self.content.append(OrderedList(content=_list_items(items)))
        return self

    def add_code_block(self, code: str, language: str | None = None) -> Document:
        self.content.append(CodeBlock(content=[Text(text=code)], language=language or None))
        return self

    # ---- queries ----------------------------------------------------
    def is_empty(self) -> bool:
        return not self.content

    def to_plain_text(self) -> str:
        return "\n".join(node_to_text(node) for node in self.content)

    # ---- wire format ------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.TYPE,
            "version": self.version,
            "content": [node.to_dict() for node in self.content],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Any) -> Document:
        if not isinstance(data, Mapping):
            raise DocumentDecodeError("document must be an object")
        kind = data.get("type", DOCUMENT_TYPE)
        if kind != DOCUMENT_TYPE:
            raise DocumentDecodeError(f"expected document type 'doc', got {kind!r}")
        version = data.get("version", DOCUMENT_VERSION)
        if version != DOCUMENT_VERSION or isinstance(version, bool):
            raise DocumentDecodeError(f"unsupported document version: {version!r}")
        raw_content = data.get("content")
        if raw_content is None:
            raw_content = []
        if not isinstance(raw_content, list):
            raise DocumentDecodeError("content: must be a list")
        return cls(
            content=[node_from_dict(node, f"content[{i}]") for i, node in enumerate(raw_content)]
        )

    @classmethod
    def from_json(cls, payload: str | bytes) -> Document:
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise DocumentDecodeError(f"invalid document JSON: {exc}") from exc
        return cls.from_dict(data)

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


def new_document() -> Document:
    return Document.new()


def from_plain_text(text: str) -> Document:
    return Document.from_plain_text(text)


def is_empty(doc: Document | None) -> bool:
    return doc is None or doc.is_empty()


def to_plain_text(doc: Document | None) -> str:
    if doc is None:
        return ""
    return doc.to_plain_text()


__all__ = [
    "BulletList",
    "CodeBlock",
    "Document",
    "GenericNode",
    "Heading",
    "ListItem",
    "Mark",
    "Node",
    "NodeType",
    "OrderedList",
    "Paragraph",
    "Text",
    "from_plain_text",
    "is_empty",
    "new_document",
    "node_from_dict",
    "node_to_text",
    "split_paragraphs",
    "to_plain_text",
]
