"""Read-only passes over a document collecting embeds in document order."""

from __future__ import annotations

from collections.abc import Iterator

from richtext2html.nodes import ContentType, Entry, NodeType, RichTextNode


def walk(node: RichTextNode) -> Iterator[RichTextNode]:
    """Yield *node* and its descendants depth-first, pre-order, left to right."""
    yield node
    for child in node.content or ():
        yield from walk(child)


def find_embedded_assets(doc: RichTextNode) -> list[RichTextNode]:
    """Return every ``embedded-asset-block`` node in visitation order."""
    return [n for n in walk(doc) if n.type is NodeType.EMBEDDED_ASSET_BLOCK]


def find_embedded_entries(
    doc: RichTextNode, content_type: ContentType
) -> list[Entry]:
    """Return the entries of inline embeds whose content type matches.

    Repeated references to the same entry are kept; callers that need
    distinct entries deduplicate by id.
    """
    entries: list[Entry] = []
    for node in walk(doc):
        if node.type is not NodeType.EMBEDDED_ENTRY_INLINE:
            continue
        target = node.target
        if isinstance(target, Entry) and target.is_a(content_type):
            entries.append(target)
    return entries
