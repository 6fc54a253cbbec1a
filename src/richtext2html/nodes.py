"""Rich-text document model and CMS JSON decoding.

The CMS delivers documents as nested JSON objects of the form::

    {"nodeType": "paragraph", "data": {}, "content": [...]}

with text leaves carrying ``value`` and ``marks`` and link targets already
resolved into ``{"sys": {...}, "fields": {...}}`` objects.  This module turns
that shape into :class:`RichTextNode` trees with :class:`Asset` and
:class:`Entry` targets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class NodeType(Enum):
    DOCUMENT = "document"
    PARAGRAPH = "paragraph"
    HEADING_1 = "heading-1"
    HEADING_2 = "heading-2"
    HEADING_3 = "heading-3"
    HEADING_4 = "heading-4"
    HEADING_5 = "heading-5"
    HEADING_6 = "heading-6"
    ORDERED_LIST = "ordered-list"
    UNORDERED_LIST = "unordered-list"
    LIST_ITEM = "list-item"
    HR = "hr"
    QUOTE = "blockquote"
    EMBEDDED_ENTRY_BLOCK = "embedded-entry-block"
    EMBEDDED_ASSET_BLOCK = "embedded-asset-block"
    EMBEDDED_RESOURCE_BLOCK = "embedded-resource-block"
    TABLE = "table"
    TABLE_ROW = "table-row"
    TABLE_CELL = "table-cell"
    TABLE_HEADER_CELL = "table-header-cell"
    HYPERLINK = "hyperlink"
    ENTRY_HYPERLINK = "entry-hyperlink"
    ASSET_HYPERLINK = "asset-hyperlink"
    RESOURCE_HYPERLINK = "resource-hyperlink"
    EMBEDDED_ENTRY_INLINE = "embedded-entry-inline"
    EMBEDDED_RESOURCE_INLINE = "embedded-resource-inline"
    TEXT = "text"

    @property
    def heading_level(self) -> int:
        """Heading level 1-6, or 0 for non-heading node types."""
        if self.value.startswith("heading-"):
            return int(self.value[-1])
        return 0


class MarkType(Enum):
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    CODE = "code"
    SUPERSCRIPT = "superscript"
    SUBSCRIPT = "subscript"
    STRIKETHROUGH = "strikethrough"


class ContentType(Enum):
    """Entry content types with dedicated rendering."""

    BLOG = "blog"
    IMAGE_GRID = "imageGrid"
    ECOMMERCE = "eCommerce"
    SPREADSHEET_TO_LIST = "spreadSheetToList"
    EMBEDDED_VIDEOS = "embeddedVideos"
    IMAGE_SLIDESHOW = "imageSlideshow"


# ---------------------------------------------------------------------------
# Linked resources
# ---------------------------------------------------------------------------

@dataclass
class Asset:
    """A CMS-managed file, usually an image."""

    id: str = ""
    url: str = ""
    title: str = ""
    description: str = ""
    width: Optional[int] = None
    height: Optional[int] = None
    content_type: str = ""
    file_name: str = ""

    @property
    def https_url(self) -> str:
        """Absolute URL for the protocol-relative file URL."""
        if not self.url:
            return ""
        if self.url.startswith("//"):
            return "https:" + self.url
        return self.url


@dataclass
class Entry:
    """A structured CMS record."""

    id: str = ""
    content_type: Union[ContentType, str] = ""
    fields: dict[str, Any] = field(default_factory=dict)

    def is_a(self, content_type: ContentType) -> bool:
        return self.content_type == content_type


Target = Union[Asset, Entry]


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------

@dataclass
class RichTextNode:
    type: NodeType
    content: list[RichTextNode] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)
    # Text leaves
    value: str = ""
    marks: list[MarkType] = field(default_factory=list)

    @property
    def target(self) -> Optional[Target]:
        target = self.data.get("target")
        if isinstance(target, (Asset, Entry)):
            return target
        return None

    @property
    def uri(self) -> str:
        uri = self.data.get("uri")
        return uri if isinstance(uri, str) else ""


def plain_text(node: RichTextNode) -> str:
    """Concatenate the text values of every leaf under *node*."""
    parts: list[str] = [node.value] if node.value else []
    for child in node.content:
        parts.append(plain_text(child))
    return "".join(parts)


# ---------------------------------------------------------------------------
# JSON decoding
# ---------------------------------------------------------------------------

def load_document(raw: Any) -> RichTextNode:
    """Decode a CMS rich-text JSON object into a ``document`` node.

    Malformed subtrees (unknown node types, non-list ``content``, missing
    ``data``) are dropped or left empty rather than rejected.

    Raises:
        ValueError: if *raw* is not a mapping.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"Expected a JSON object, got {type(raw).__name__}")
    node = _load_node(raw)
    if node is None or node.type is not NodeType.DOCUMENT:
        # Accept a bare block by wrapping it in a document.
        children = [node] if node is not None else []
        return RichTextNode(type=NodeType.DOCUMENT, content=children)
    return node


def _load_node(raw: Any) -> Optional[RichTextNode]:
    if not isinstance(raw, dict):
        return None
    try:
        ntype = NodeType(raw.get("nodeType"))
    except ValueError:
        return None

    children: list[RichTextNode] = []
    content = raw.get("content")
    if isinstance(content, list):
        for child_raw in content:
            child = _load_node(child_raw)
            if child is not None:
                children.append(child)

    data_raw = raw.get("data")
    data: dict[str, Any] = dict(data_raw) if isinstance(data_raw, dict) else {}
    if "target" in data:
        data["target"] = load_target(data["target"])

    if ntype is NodeType.TEXT:
        value = raw.get("value")
        return RichTextNode(
            type=ntype,
            data=data,
            value=value if isinstance(value, str) else "",
            marks=_load_marks(raw.get("marks")),
        )
    return RichTextNode(type=ntype, content=children, data=data)


def _load_marks(raw: Any) -> list[MarkType]:
    marks: list[MarkType] = []
    if not isinstance(raw, list):
        return marks
    for mark in raw:
        mtype = mark.get("type") if isinstance(mark, dict) else mark
        try:
            marks.append(MarkType(mtype))
        except ValueError:
            continue
    return marks


def load_target(raw: Any) -> Optional[Target]:
    """Decode a resolved link target; unresolved links yield ``None``."""
    if isinstance(raw, (Asset, Entry)):
        return raw
    if not isinstance(raw, dict):
        return None
    meta = raw.get("sys") if isinstance(raw.get("sys"), dict) else {}
    fields = raw.get("fields")
    if not isinstance(fields, dict):
        return None

    if meta.get("type") == "Asset" or ("file" in fields and not meta.get("contentType")):
        return _load_asset(meta, fields)

    ct_id = ""
    content_type = meta.get("contentType")
    if isinstance(content_type, dict):
        ct_sys = content_type.get("sys")
        if isinstance(ct_sys, dict):
            ct_id = str(ct_sys.get("id", ""))
    try:
        ctype: Union[ContentType, str] = ContentType(ct_id)
    except ValueError:
        ctype = ct_id

    return Entry(
        id=str(meta.get("id", "")),
        content_type=ctype,
        fields={name: _load_field(value) for name, value in fields.items()},
    )


def _load_asset(meta: dict, fields: dict) -> Asset:
    file_raw = fields.get("file") if isinstance(fields.get("file"), dict) else {}
    details = file_raw.get("details") if isinstance(file_raw.get("details"), dict) else {}
    image = details.get("image") if isinstance(details.get("image"), dict) else {}
    return Asset(
        id=str(meta.get("id", "")),
        url=str(file_raw.get("url") or ""),
        title=str(fields.get("title") or ""),
        description=str(fields.get("description") or ""),
        width=_positive_int(image.get("width")),
        height=_positive_int(image.get("height")),
        content_type=str(file_raw.get("contentType") or ""),
        file_name=str(file_raw.get("fileName") or ""),
    )


def _load_field(value: Any) -> Any:
    if isinstance(value, list):
        return [_load_field(v) for v in value]
    if isinstance(value, dict) and "sys" in value:
        return load_target(value)
    if isinstance(value, dict) and value.get("nodeType") == NodeType.DOCUMENT.value:
        return load_document(value)
    return value


def _positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)) and value > 0:
        return int(value)
    return None
