"""HTML table rendering for rich-text ``table`` nodes.

Rows whose cells are all ``table-header-cell`` nodes are placed in
``<thead>``; the remaining rows go to ``<tbody>``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from richtext2html.nodes import NodeType

if TYPE_CHECKING:
    from richtext2html.nodes import RichTextNode

CellRenderer = Callable[["RichTextNode"], str]


class TableHandler:
    """Converts TABLE nodes to ``<table>`` markup."""

    def __init__(self) -> None:
        self.table_style = "border-collapse:collapse;width:100%;margin:1rem 0;"
        self.cell_style = "border:1px solid #e2e8f0;padding:0.5rem;text-align:left;"
        self.header_bg_color = "#f8fafc"

    def render_table(self, table_node: RichTextNode, render_cell: CellRenderer) -> str:
        """Convert a TABLE node to a ``<table>`` string.

        Args:
            table_node: TABLE node containing TABLE_ROW children.
            render_cell: Renders the content of a single cell.

        Raises:
            ValueError: If table_node is not a TABLE type.
        """
        if table_node.type is not NodeType.TABLE:
            raise ValueError(f"Expected TABLE node, got {table_node.type}")

        rows = [r for r in table_node.content if r.type is NodeType.TABLE_ROW]
        if not rows:
            return ""

        head: list[str] = []
        body: list[str] = []
        for row in rows:
            markup = self._render_row(row, render_cell)
            if not body and self._is_header_row(row):
                head.append(markup)
            else:
                body.append(markup)

        parts = [f'<table style="{self.table_style}">']
        if head:
            parts.append(f"<thead>{''.join(head)}</thead>")
        if body:
            parts.append(f"<tbody>{''.join(body)}</tbody>")
        parts.append("</table>")
        return "".join(parts)

    def _is_header_row(self, row: RichTextNode) -> bool:
        return bool(row.content) and all(
            c.type is NodeType.TABLE_HEADER_CELL for c in row.content
        )

    def _render_row(self, row: RichTextNode, render_cell: CellRenderer) -> str:
        cells: list[str] = []
        for cell in row.content:
            if cell.type is NodeType.TABLE_HEADER_CELL:
                style = f"{self.cell_style}background:{self.header_bg_color};"
                cells.append(f'<th style="{style}">{render_cell(cell)}</th>')
            elif cell.type is NodeType.TABLE_CELL:
                cells.append(f'<td style="{self.cell_style}">{render_cell(cell)}</td>')
        return f"<tr>{''.join(cells)}</tr>"
