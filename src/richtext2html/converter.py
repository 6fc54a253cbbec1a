"""High-level rich-text-to-HTML conversion orchestrator.

Ties together JSON decoding, the Markdown parser, the scanner/materializer
factory and the renderer variants into a single public API.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import httpx

from richtext2html.markdown import MarkdownParser
from richtext2html.nodes import RichTextNode, load_document
from richtext2html.renderer import (
    BaseRenderer,
    CardRenderer,
    SimpleRenderer,
    create_renderer,
)
from richtext2html.settings import Settings
from richtext2html.sheets import read_rows
from richtext2html.spreadsheet import SheetReader
from richtext2html.style_manager import StyleManager


class Converter:
    """Convert rich-text documents to HTML fragments.

    Usage::

        converter = Converter(settings, style_preset="smart")
        html = await converter.convert_json(document_dict)

        # or from Markdown
        html = await converter.convert_markdown("# Hello")
    """

    STYLE_PRESETS = StyleManager.PRESETS

    _STATELESS_RENDERERS: dict[str, type[BaseRenderer]] = {
        "simple": SimpleRenderer,
        "card": CardRenderer,
    }

    def __init__(
        self,
        settings: Settings,
        style_preset: str = "smart",
        *,
        client: Optional[httpx.AsyncClient] = None,
        reader: SheetReader = read_rows,
    ) -> None:
        if style_preset not in StyleManager.PRESETS:
            raise ValueError(
                f"Unknown preset {style_preset!r}. "
                f"Choose from: {', '.join(StyleManager.PRESETS)}"
            )
        self.settings = settings
        self.style_preset = style_preset
        self.parser = MarkdownParser()
        self._client = client
        self._reader = reader

    async def convert_document(self, doc: RichTextNode) -> str:
        """Render a decoded document.

        The ``smart`` preset builds a fresh renderer for every call.
        """
        stateless = self._STATELESS_RENDERERS.get(self.style_preset)
        if stateless is not None:
            return stateless().render(doc)
        renderer = await create_renderer(
            doc,
            settings=self.settings,
            client=self._client,
            reader=self._reader,
        )
        return renderer.render(doc)

    async def convert_json(self, raw: Any) -> str:
        """Render a CMS rich-text JSON object (already parsed).

        Raises:
            ValueError: If *raw* is not a JSON object.
        """
        return await self.convert_document(load_document(raw))

    async def convert_markdown(self, markdown_text: str) -> str:
        return await self.convert_document(self.parser.parse(markdown_text))

    async def convert_file(
        self,
        input_path: str | Path,
        output_path: str | Path,
        *,
        markdown: bool = False,
        encoding: str = "utf-8",
    ) -> None:
        """Read a JSON (or Markdown) document and write the HTML fragment.

        Args:
            input_path: Path to the input ``.json`` or ``.md`` file.
            output_path: Path for the output ``.html`` file.
            markdown: Treat the input as Markdown instead of CMS JSON.
            encoding: Text encoding of the source file.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)

        text = input_path.read_text(encoding=encoding)
        if markdown:
            html = await self.convert_markdown(text)
        else:
            html = await self.convert_json(json.loads(text))

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(html, encoding="utf-8")
