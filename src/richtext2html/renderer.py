"""Rich-text to HTML renderers.

:class:`BaseRenderer` walks a :class:`~richtext2html.nodes.RichTextNode` tree
and emits plain HTML for every node type.  :class:`SimpleRenderer` and
:class:`CardRenderer` add fixed image layouts; :class:`HtmlRenderer` adds
position-aware images, heading spacing and embedded-entry widgets, and is
built per document by :func:`create_renderer`.
"""

from __future__ import annotations

import html
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Optional

import httpx
from loguru import logger

from richtext2html import embeds
from richtext2html.dimensions import scaled_dimensions
from richtext2html.nodes import (
    Asset,
    ContentType,
    Entry,
    MarkType,
    NodeType,
    RichTextNode,
)
from richtext2html.scanner import find_embedded_assets, find_embedded_entries
from richtext2html.settings import Settings
from richtext2html.sheets import read_rows
from richtext2html.spreadsheet import SheetReader, materialize_spreadsheet_lists
from richtext2html.style_manager import (
    CENTER_WRAPPER_STYLE,
    CODE_STYLE,
    HEADING_SPACING_STYLE,
    QUOTE_STYLE,
    ImageLayout,
    StyleManager,
)
from richtext2html.table_handler import TableHandler

PDF_DESCRIPTION = "PDF"

_MARK_TAGS = {
    MarkType.BOLD: "strong",
    MarkType.ITALIC: "em",
    MarkType.UNDERLINE: "u",
    MarkType.SUPERSCRIPT: "sup",
    MarkType.SUBSCRIPT: "sub",
    MarkType.STRIKETHROUGH: "s",
}

_EMBED_CHILD_TYPES = frozenset({
    NodeType.EMBEDDED_ASSET_BLOCK,
    NodeType.EMBEDDED_ENTRY_BLOCK,
    NodeType.EMBEDDED_ENTRY_INLINE,
    NodeType.EMBEDDED_RESOURCE_INLINE,
})


def _esc(value: str) -> str:
    return html.escape(value or "", quote=True)


def _is_external(url: str) -> bool:
    return url.startswith("http://") or url.startswith("https://")


# ---------------------------------------------------------------------------
# BaseRenderer
# ---------------------------------------------------------------------------

class BaseRenderer:
    """Render every node type to plain HTML.

    Embedded assets and entries produce no output here; subclasses decide
    how to present them.
    """

    PRESET = "simple"

    def __init__(self, style_manager: Optional[StyleManager] = None) -> None:
        self.style: StyleManager = style_manager or StyleManager(self.PRESET)
        self.tables = TableHandler()

    # ======================================================================
    # Public API
    # ======================================================================

    def render(self, doc: RichTextNode) -> str:
        """Return the HTML fragment for *doc*."""
        return self.render_node(doc)

    def render_node(self, node: RichTextNode) -> str:
        handler = getattr(self, f"_render_{node.type.name.lower()}", None)
        if handler is not None:
            return handler(node)
        return ""

    def render_children(self, node: RichTextNode) -> str:
        return "".join(self.render_node(child) for child in node.content)

    def render_mark(self, mark: MarkType, text: str) -> str:
        if mark is MarkType.CODE:
            return f'<code style="{CODE_STYLE}">{text}</code>'
        tag = _MARK_TAGS.get(mark)
        return f"<{tag}>{text}</{tag}>" if tag else text

    def render_text(self, value: str) -> str:
        """Escape a text value and turn newlines into line breaks."""
        return _esc(value).replace("\n", "<br/>")

    # ======================================================================
    # Per-NodeType renderers
    # ======================================================================

    def _render_document(self, node: RichTextNode) -> str:
        return self.render_children(node)

    def _render_text(self, node: RichTextNode) -> str:
        text = self.render_text(node.value)
        for mark in node.marks:
            text = self.render_mark(mark, text)
        return text

    def _render_paragraph(self, node: RichTextNode) -> str:
        return f"<p>{self.render_children(node)}</p>"

    def _render_heading(self, node: RichTextNode) -> str:
        level = node.type.heading_level
        return f"<h{level}>{self.render_children(node)}</h{level}>"

    _render_heading_1 = _render_heading
    _render_heading_2 = _render_heading
    _render_heading_3 = _render_heading
    _render_heading_4 = _render_heading
    _render_heading_5 = _render_heading
    _render_heading_6 = _render_heading

    def _render_quote(self, node: RichTextNode) -> str:
        return f"<blockquote>{self.render_children(node)}</blockquote>"

    def _render_hr(self, _node: RichTextNode) -> str:
        return "<hr/>"

    def _render_unordered_list(self, node: RichTextNode) -> str:
        return f"<ul>{self.render_children(node)}</ul>"

    def _render_ordered_list(self, node: RichTextNode) -> str:
        return f"<ol>{self.render_children(node)}</ol>"

    def _render_list_item(self, node: RichTextNode) -> str:
        return f"<li>{self.render_children(node)}</li>"

    def _render_table(self, node: RichTextNode) -> str:
        return self.tables.render_table(node, self.render_children)

    def _render_hyperlink(self, node: RichTextNode) -> str:
        url = node.uri
        target = ' target="_blank" rel="noopener noreferrer"' if _is_external(url) else ""
        return f'<a href="{_esc(url or "#")}"{target}>{self.render_children(node)}</a>'

    def _render_entry_hyperlink(self, node: RichTextNode) -> str:
        entry = node.target
        url = "#"
        if isinstance(entry, Entry) and entry.is_a(ContentType.BLOG):
            slug = entry.fields.get("slug")
            if slug:
                url = f"/blog/{slug}"
        return f'<a href="{_esc(url)}">{self.render_children(node)}</a>'

    def _render_asset_hyperlink(self, node: RichTextNode) -> str:
        asset = node.target
        if not isinstance(asset, Asset) or not asset.url:
            return f'<a href="#">{self.render_children(node)}</a>'
        target = (
            ' target="_blank" rel="noopener noreferrer"'
            if asset.description == PDF_DESCRIPTION else ""
        )
        return (
            f'<a href="{_esc(asset.https_url)}"{target}>'
            f"{self.render_children(node)}</a>"
        )

    def _render_resource_hyperlink(self, node: RichTextNode) -> str:
        return self.render_children(node)

    def _render_embedded_asset_block(self, node: RichTextNode) -> str:
        return ""

    def _render_embedded_entry_block(self, _node: RichTextNode) -> str:
        return ""

    def _render_embedded_entry_inline(self, _node: RichTextNode) -> str:
        return ""

    def _render_embedded_resource_block(self, _node: RichTextNode) -> str:
        return ""

    def _render_embedded_resource_inline(self, _node: RichTextNode) -> str:
        return ""

    # ======================================================================
    # Image helpers
    # ======================================================================

    def _image_markup(
        self, asset: Asset, layout: ImageLayout, width: int, height: int
    ) -> str:
        w, h = scaled_dimensions(width, height, layout.max_side)
        img = (
            f'<img src="{_esc(asset.https_url)}" alt="{_esc(asset.title)}" '
            f'title="{_esc(asset.description)}" width="{w}" height="{h}" '
            f'style="{layout.style}" />'
        )
        if layout.centered:
            return f'<p style="{CENTER_WRAPPER_STYLE}">{img}</p>'
        return img

    def _fixed_layout_asset(self, node: RichTextNode) -> str:
        asset = node.target
        if not isinstance(asset, Asset) or not asset.url:
            return ""
        layout = self.style.get_layout("image")
        width = asset.width or layout.default_side
        height = asset.height or layout.default_side
        return self._image_markup(asset, layout, width, height)


# ---------------------------------------------------------------------------
# Stateless variants
# ---------------------------------------------------------------------------

class SimpleRenderer(BaseRenderer):
    """Every embedded image floats right, capped at 400px."""

    PRESET = "simple"

    def _render_embedded_asset_block(self, node: RichTextNode) -> str:
        return self._fixed_layout_asset(node)


class CardRenderer(BaseRenderer):
    """Centered, non-floating images capped at 300px for card layouts."""

    PRESET = "card"

    def _render_embedded_asset_block(self, node: RichTextNode) -> str:
        return self._fixed_layout_asset(node)


# ---------------------------------------------------------------------------
# Position-aware renderer
# ---------------------------------------------------------------------------

@dataclass
class RenderState:
    """Mutable bookkeeping for a single document traversal."""

    total_assets: int = 0
    asset_index: int = 0
    heading_count: int = 0
    slideshow_rendered: bool = False
    lightbox_emitted: bool = False
    grid_embeds: dict[str, int] = field(default_factory=dict)

    def next_asset_index(self) -> int:
        index = self.asset_index
        self.asset_index += 1
        return index

    def next_heading_index(self) -> int:
        index = self.heading_count
        self.heading_count += 1
        return index

    def next_grid_id(self, entry_id: str) -> str:
        """Element id for an image grid, suffixed when the entry repeats."""
        count = self.grid_embeds.get(entry_id, 0) + 1
        self.grid_embeds[entry_id] = count
        grid_id = embeds.scoped_id("image-grid", entry_id)
        return grid_id if count == 1 else f"{grid_id}-{count}"


class HtmlRenderer(BaseRenderer):
    """Render one document with positional image layout and entry widgets.

    Instances hold per-document state; build a new one with
    :func:`create_renderer` for every document.
    """

    PRESET = "smart"

    def __init__(
        self,
        settings: Settings,
        *,
        state: Optional[RenderState] = None,
        sheet_fragments: Optional[dict[str, str]] = None,
        slideshow_markup: str = "",
        style_manager: Optional[StyleManager] = None,
    ) -> None:
        super().__init__(style_manager)
        self.settings = settings
        self.state = state or RenderState()
        self.sheet_fragments: dict[str, str] = dict(sheet_fragments or {})
        self.slideshow_markup = slideshow_markup
        self._rendered = False

        self._block_entry_handlers: dict[ContentType, Callable[[Entry], str]] = {
            ContentType.IMAGE_GRID: self._block_image_grid,
            ContentType.ECOMMERCE: self._payment_form,
        }
        self._inline_entry_handlers: dict[ContentType, Callable[[Entry], str]] = {
            ContentType.IMAGE_GRID: self._inline_image_grid,
            ContentType.ECOMMERCE: self._payment_form,
            ContentType.SPREADSHEET_TO_LIST: self._spreadsheet_list,
            ContentType.EMBEDDED_VIDEOS: embeds.video_embed,
            ContentType.IMAGE_SLIDESHOW: self._slideshow,
        }

    def render(self, doc: RichTextNode) -> str:
        """Render *doc*; a renderer may only be used for one traversal."""
        if self._rendered:
            raise RuntimeError("HtmlRenderer instances render a single document")
        self._rendered = True
        return super().render(doc)

    # -- blocks -------------------------------------------------------------

    def _render_heading_3(self, node: RichTextNode) -> str:
        return self._heading_3(self.render_children(node))

    def _heading_3(self, inner: str) -> str:
        if self.state.next_heading_index() == 0:
            return f"<h3>{inner}</h3>"
        return f'<h3 style="{HEADING_SPACING_STYLE}">{inner}</h3>'

    def _render_paragraph(self, node: RichTextNode) -> str:
        content = self.render_children(node)
        if any(child.type in _EMBED_CHILD_TYPES for child in node.content):
            return content
        content = content.replace("\n", "<br/>")
        return f"<p>{content}</p>"

    def _render_quote(self, node: RichTextNode) -> str:
        return f'<blockquote style="{QUOTE_STYLE}">{self.render_children(node)}</blockquote>'

    def _render_embedded_asset_block(self, node: RichTextNode) -> str:
        asset = node.target
        if not isinstance(asset, Asset) or not asset.url:
            return ""

        width = asset.width or 400
        height = asset.height or 400
        landscape = width > height

        total = self.state.total_assets
        index = self.state.next_asset_index()
        is_first = index == 0
        is_last = index == total - 1 and total > 1

        if is_first:
            name = "first_landscape" if landscape else "first_portrait"
        elif is_last:
            name = "last"
        else:
            name = "middle"
        return self._image_markup(asset, self.style.get_layout(name), width, height)

    # -- embedded entries ---------------------------------------------------

    def _render_embedded_entry_block(self, node: RichTextNode) -> str:
        return self._dispatch_entry(node, self._block_entry_handlers)

    def _render_embedded_entry_inline(self, node: RichTextNode) -> str:
        return self._dispatch_entry(node, self._inline_entry_handlers)

    def _dispatch_entry(
        self,
        node: RichTextNode,
        handlers: dict[ContentType, Callable[[Entry], str]],
    ) -> str:
        entry = node.target
        if not isinstance(entry, Entry) or not entry.fields:
            return ""
        handler = handlers.get(entry.content_type)
        if handler is None:
            return ""
        return handler(entry)

    def _block_image_grid(self, entry: Entry) -> str:
        if not embeds.grid_images(entry):
            return ""
        title = embeds.text_field(entry, "title")
        title_markup = f"<h4>{_esc(title)}</h4>" if title else ""
        return self._image_grid(entry, title_markup)

    def _inline_image_grid(self, entry: Entry) -> str:
        if not embeds.grid_images(entry):
            return ""
        title = embeds.text_field(entry, "title")
        title_markup = self._heading_3(_esc(title)) if title else ""
        return self._image_grid(entry, title_markup)

    def _image_grid(self, entry: Entry, title_markup: str) -> str:
        grid = embeds.image_grid(entry, title_markup, self.state.next_grid_id(entry.id))
        if grid and not self.state.lightbox_emitted:
            self.state.lightbox_emitted = True
            grid += embeds.lightbox_script_tag(self.settings.lightbox_script_url)
        return grid

    def _payment_form(self, entry: Entry) -> str:
        return embeds.payment_form(
            entry,
            recipient=self.settings.payment_recipient,
            endpoint=self.settings.payment_endpoint,
            currency=self.settings.currency_code,
        )

    def _spreadsheet_list(self, entry: Entry) -> str:
        return self.sheet_fragments.get(entry.id, "")

    def _slideshow(self, _entry: Entry) -> str:
        if self.state.slideshow_rendered:
            return ""
        self.state.slideshow_rendered = True
        return self.slideshow_markup


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

async def create_renderer(
    doc: RichTextNode,
    *,
    settings: Settings,
    client: Optional[httpx.AsyncClient] = None,
    reader: SheetReader = read_rows,
) -> HtmlRenderer:
    """Scan *doc*, materialize its spreadsheet lists and return a renderer.

    The returned renderer carries fresh state and must only be used for
    *doc*.
    """
    assets = find_embedded_assets(doc)
    sheet_entries = find_embedded_entries(doc, ContentType.SPREADSHEET_TO_LIST)
    slideshow_entries = find_embedded_entries(doc, ContentType.IMAGE_SLIDESHOW)
    logger.debug(
        f"Scanned document: {len(assets)} assets, {len(sheet_entries)} spreadsheet "
        f"lists, {len(slideshow_entries)} slideshow embeds"
    )

    fragments = await materialize_spreadsheet_lists(
        sheet_entries,
        client=client,
        reader=reader,
        timeout=settings.fetch_timeout_seconds,
    )
    return HtmlRenderer(
        settings,
        state=RenderState(total_assets=len(assets)),
        sheet_fragments=fragments,
        slideshow_markup=embeds.slideshow_grid(slideshow_entries),
    )
