"""Tests for the Markdown to rich-text parser."""

from __future__ import annotations

import pytest

from richtext2html.markdown import MarkdownParser
from richtext2html.nodes import MarkType, NodeType, RichTextNode, plain_text


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def find_nodes(root: RichTextNode, ntype: NodeType) -> list[RichTextNode]:
    """Recursively collect all nodes of *ntype* under *root*."""
    found: list[RichTextNode] = []
    if root.type == ntype:
        found.append(root)
    for child in root.content:
        found.extend(find_nodes(child, ntype))
    return found


def first_node(root: RichTextNode, ntype: NodeType) -> RichTextNode:
    nodes = find_nodes(root, ntype)
    assert nodes, f"No {ntype.value} node found"
    return nodes[0]


@pytest.fixture
def parser() -> MarkdownParser:
    return MarkdownParser()


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

class TestHeadings:
    @pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 6])
    def test_heading_levels(self, parser: MarkdownParser, level: int) -> None:
        doc = parser.parse(f"{'#' * level} Heading Level {level}")
        assert doc.content[0].type.heading_level == level
        assert plain_text(doc.content[0]) == f"Heading Level {level}"


class TestParagraphs:
    def test_single_paragraph(self, parser: MarkdownParser) -> None:
        doc = parser.parse("Hello world.")
        assert [c.type for c in doc.content] == [NodeType.PARAGRAPH]
        assert plain_text(doc) == "Hello world."

    def test_multiple_paragraphs(self, parser: MarkdownParser) -> None:
        doc = parser.parse("One.\n\nTwo.\n")
        assert len(find_nodes(doc, NodeType.PARAGRAPH)) == 2

    def test_hard_line_break(self, parser: MarkdownParser) -> None:
        doc = parser.parse("line one  \nline two")
        assert plain_text(doc) == "line one\nline two"


class TestInlineMarks:
    def test_bold(self, parser: MarkdownParser) -> None:
        leaf = first_node(parser.parse("**bold**"), NodeType.TEXT)
        assert leaf.value == "bold"
        assert leaf.marks == [MarkType.BOLD]

    def test_nested_marks(self, parser: MarkdownParser) -> None:
        leaf = first_node(parser.parse("***both***"), NodeType.TEXT)
        assert set(leaf.marks) == {MarkType.BOLD, MarkType.ITALIC}

    def test_strikethrough(self, parser: MarkdownParser) -> None:
        leaf = first_node(parser.parse("~~gone~~"), NodeType.TEXT)
        assert leaf.marks == [MarkType.STRIKETHROUGH]

    def test_inline_code(self, parser: MarkdownParser) -> None:
        doc = parser.parse("use `pip install`")
        leaves = find_nodes(doc, NodeType.TEXT)
        assert leaves[-1].value == "pip install"
        assert leaves[-1].marks == [MarkType.CODE]

    def test_adjacent_plain_text_merged(self, parser: MarkdownParser) -> None:
        doc = parser.parse("a & b")
        assert len(find_nodes(doc, NodeType.TEXT)) == 1


class TestLinks:
    def test_link(self, parser: MarkdownParser) -> None:
        link = first_node(parser.parse("[site](https://example.com)"), NodeType.HYPERLINK)
        assert link.uri == "https://example.com"
        assert plain_text(link) == "site"

    def test_image_becomes_link(self, parser: MarkdownParser) -> None:
        link = first_node(parser.parse("![diagram](https://example.com/d.png)"), NodeType.HYPERLINK)
        assert link.uri == "https://example.com/d.png"
        assert plain_text(link) == "diagram"


class TestLists:
    def test_unordered(self, parser: MarkdownParser) -> None:
        doc = parser.parse("- a\n- b\n")
        lst = first_node(doc, NodeType.UNORDERED_LIST)
        assert [plain_text(item) for item in lst.content] == ["a", "b"]
        assert lst.content[0].content[0].type is NodeType.PARAGRAPH

    def test_ordered(self, parser: MarkdownParser) -> None:
        doc = parser.parse("1. one\n2. two\n")
        assert len(first_node(doc, NodeType.ORDERED_LIST).content) == 2

    def test_nested(self, parser: MarkdownParser) -> None:
        doc = parser.parse("- outer\n  - inner\n")
        outer = first_node(doc, NodeType.UNORDERED_LIST)
        assert find_nodes(outer.content[0], NodeType.UNORDERED_LIST)


class TestOtherBlocks:
    def test_blockquote(self, parser: MarkdownParser) -> None:
        quote = first_node(parser.parse("> quoted"), NodeType.QUOTE)
        assert plain_text(quote) == "quoted"

    def test_rule(self, parser: MarkdownParser) -> None:
        assert find_nodes(parser.parse("a\n\n---\n\nb"), NodeType.HR)

    def test_fenced_code(self, parser: MarkdownParser) -> None:
        doc = parser.parse("```\nprint(1)\n```\n")
        leaf = first_node(doc, NodeType.TEXT)
        assert leaf.value == "print(1)"
        assert leaf.marks == [MarkType.CODE]

    def test_table(self, parser: MarkdownParser) -> None:
        doc = parser.parse("| Name | Age |\n|---|---|\n| Amy | 31 |\n")
        table = first_node(doc, NodeType.TABLE)
        header, row = table.content
        assert [c.type for c in header.content] == [NodeType.TABLE_HEADER_CELL] * 2
        assert [plain_text(c) for c in row.content] == ["Amy", "31"]

    def test_empty_input(self, parser: MarkdownParser) -> None:
        doc = parser.parse("")
        assert doc.type is NodeType.DOCUMENT
        assert doc.content == []
