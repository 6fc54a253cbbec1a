"""Markdown to rich-text document conversion.

Uses mistune v3 to parse Markdown and converts the token stream into the
same :class:`~richtext2html.nodes.RichTextNode` tree the CMS delivers, so
authored Markdown renders through the regular renderers.  Inline formatting
becomes text marks; fenced code becomes ``code``-marked text.
"""

from __future__ import annotations

from typing import Any, Optional

import mistune

from richtext2html.nodes import MarkType, NodeType, RichTextNode

_HEADING_TYPES = {
    1: NodeType.HEADING_1,
    2: NodeType.HEADING_2,
    3: NodeType.HEADING_3,
    4: NodeType.HEADING_4,
    5: NodeType.HEADING_5,
    6: NodeType.HEADING_6,
}

_INLINE_MARKS = {
    "strong": MarkType.BOLD,
    "emphasis": MarkType.ITALIC,
    "strikethrough": MarkType.STRIKETHROUGH,
}


def _text(value: str, marks: tuple[MarkType, ...] = ()) -> RichTextNode:
    return RichTextNode(type=NodeType.TEXT, value=value, marks=list(marks))


class MarkdownParser:
    """Parse Markdown text into a ``document`` :class:`RichTextNode`."""

    def __init__(self) -> None:
        self._md = mistune.create_markdown(
            renderer=None,  # AST mode
            plugins=["table", "strikethrough"],
        )

    # -- public API ---------------------------------------------------------

    def parse(self, markdown_text: str) -> RichTextNode:
        tokens: list[dict[str, Any]] = self._md(markdown_text)  # type: ignore[assignment]
        return RichTextNode(type=NodeType.DOCUMENT, content=self._convert_blocks(tokens))

    # -- block conversion ---------------------------------------------------

    def _convert_blocks(self, tokens: list[dict[str, Any]]) -> list[RichTextNode]:
        nodes: list[RichTextNode] = []
        for tok in tokens:
            handler = getattr(self, f"_handle_{tok.get('type', '')}", None)
            if handler is None:
                continue
            node = handler(tok)
            if node is not None:
                nodes.append(node)
        return nodes

    def _handle_heading(self, tok: dict) -> RichTextNode:
        level = max(1, min(6, tok.get("attrs", {}).get("level", 1)))
        return RichTextNode(
            type=_HEADING_TYPES[level],
            content=self._convert_inline(tok.get("children", [])),
        )

    def _handle_paragraph(self, tok: dict) -> RichTextNode:
        return RichTextNode(
            type=NodeType.PARAGRAPH,
            content=self._convert_inline(tok.get("children", [])),
        )

    def _handle_block_text(self, tok: dict) -> RichTextNode:
        """Tight list items carry block_text instead of paragraphs."""
        return self._handle_paragraph(tok)

    def _handle_block_quote(self, tok: dict) -> RichTextNode:
        return RichTextNode(
            type=NodeType.QUOTE,
            content=self._convert_blocks(tok.get("children", [])),
        )

    def _handle_thematic_break(self, _tok: dict) -> RichTextNode:
        return RichTextNode(type=NodeType.HR)

    def _handle_block_code(self, tok: dict) -> RichTextNode:
        raw = tok.get("raw", "")
        code = raw[:-1] if raw.endswith("\n") else raw
        return RichTextNode(
            type=NodeType.PARAGRAPH,
            content=[_text(code, (MarkType.CODE,))],
        )

    def _handle_list(self, tok: dict) -> RichTextNode:
        ordered = tok.get("attrs", {}).get("ordered", False)
        items = [
            RichTextNode(
                type=NodeType.LIST_ITEM,
                content=self._convert_blocks(child.get("children", [])),
            )
            for child in tok.get("children", [])
            if child.get("type") in ("list_item", "task_list_item")
        ]
        return RichTextNode(
            type=NodeType.ORDERED_LIST if ordered else NodeType.UNORDERED_LIST,
            content=items,
        )

    # -- tables -------------------------------------------------------------

    def _handle_table(self, tok: dict) -> Optional[RichTextNode]:
        rows: list[RichTextNode] = []
        for child in tok.get("children", []):
            ctype = child.get("type")
            if ctype == "table_head":
                rows.append(self._make_row(child.get("children", []), header=True))
            elif ctype == "table_body":
                for row in child.get("children", []):
                    rows.append(self._make_row(row.get("children", []), header=False))
        if not rows:
            return None
        return RichTextNode(type=NodeType.TABLE, content=rows)

    def _make_row(self, cells: list[dict], *, header: bool) -> RichTextNode:
        cell_type = NodeType.TABLE_HEADER_CELL if header else NodeType.TABLE_CELL
        return RichTextNode(
            type=NodeType.TABLE_ROW,
            content=[
                RichTextNode(
                    type=cell_type,
                    content=[RichTextNode(
                        type=NodeType.PARAGRAPH,
                        content=self._convert_inline(cell.get("children", [])),
                    )],
                )
                for cell in cells
            ],
        )

    # -- inline conversion --------------------------------------------------

    def _convert_inline(
        self, tokens: Any, marks: tuple[MarkType, ...] = ()
    ) -> list[RichTextNode]:
        if isinstance(tokens, str):
            return [_text(tokens, marks)]
        nodes: list[RichTextNode] = []
        for tok in tokens or []:
            ttype = tok.get("type", "")
            if ttype in _INLINE_MARKS:
                nodes.extend(self._convert_inline(
                    tok.get("children", []), marks + (_INLINE_MARKS[ttype],)
                ))
            elif ttype == "codespan":
                nodes.append(_text(tok.get("raw", ""), marks + (MarkType.CODE,)))
            elif ttype == "link":
                nodes.append(RichTextNode(
                    type=NodeType.HYPERLINK,
                    data={"uri": tok.get("attrs", {}).get("url", "")},
                    content=self._convert_inline(tok.get("children", []), marks),
                ))
            elif ttype == "image":
                alt = "".join(
                    c.get("raw", "") for c in tok.get("children", []) if isinstance(c, dict)
                )
                nodes.append(RichTextNode(
                    type=NodeType.HYPERLINK,
                    data={"uri": tok.get("attrs", {}).get("url", "")},
                    content=[_text(alt or tok.get("attrs", {}).get("url", ""), marks)],
                ))
            elif ttype in ("linebreak", "softbreak"):
                nodes.append(_text("\n" if ttype == "linebreak" else " ", marks))
            else:
                raw = tok.get("raw", "")
                if raw:
                    nodes.append(_text(raw, marks))
        return _merge_text(nodes)


def _merge_text(nodes: list[RichTextNode]) -> list[RichTextNode]:
    """Join adjacent text leaves that carry the same marks."""
    merged: list[RichTextNode] = []
    for node in nodes:
        prev = merged[-1] if merged else None
        if (
            prev is not None
            and prev.type is NodeType.TEXT
            and node.type is NodeType.TEXT
            and prev.marks == node.marks
        ):
            prev.value += node.value
        else:
            merged.append(node)
    return merged
