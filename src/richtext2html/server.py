"""FastAPI service rendering rich-text documents to HTML.

Endpoints::

    GET  /                 Service description.
    GET  /health           Health check.
    GET  /styles           List available layout presets.
    POST /render           CMS rich-text JSON body, returns an HTML fragment.
    POST /render/markdown  Form field ``markdown``, returns an HTML fragment.
    GET  /lightbox.js      Shared client-side lightbox module.

Run::

    uvicorn richtext2html.server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from typing import Any

from fastapi import Body, Depends, FastAPI, Form, HTTPException, Query
from fastapi.responses import HTMLResponse, Response

from richtext2html import __version__
from richtext2html.converter import Converter
from richtext2html.embeds import lightbox_script_source
from richtext2html.settings import Settings, get_settings
from richtext2html.style_manager import StyleManager

app = FastAPI(
    title="richtext2html",
    description="CMS rich-text to HTML rendering service",
    version=__version__,
)

_INDEX_HTML = (
    "<html><body><h1>richtext2html</h1>"
    "<p>POST a rich-text document to <code>/render</code>.</p></body></html>"
)


def _converter(style: str, settings: Settings) -> Converter:
    try:
        return Converter(settings, style_preset=style)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    return HTMLResponse(content=_INDEX_HTML)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


@app.get("/styles")
async def list_styles() -> dict[str, list[str]]:
    """List available layout presets."""
    return {"presets": StyleManager.PRESETS}


@app.post("/render", response_class=HTMLResponse)
async def render_document(
    document: Any = Body(...),
    style: str = Query("smart"),
    settings: Settings = Depends(get_settings),
) -> HTMLResponse:
    """Render a CMS rich-text JSON document.

    - **document**: rich-text JSON object (``nodeType: document``)
    - **style**: Layout preset (smart, simple, card)
    """
    converter = _converter(style, settings)
    try:
        html = await converter.convert_json(document)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return HTMLResponse(content=html)


@app.post("/render/markdown", response_class=HTMLResponse)
async def render_markdown(
    markdown: str = Form(...),
    style: str = Form("smart"),
    settings: Settings = Depends(get_settings),
) -> HTMLResponse:
    """Render Markdown text through the rich-text pipeline."""
    converter = _converter(style, settings)
    return HTMLResponse(content=await converter.convert_markdown(markdown))


@app.get("/lightbox.js")
async def lightbox_js() -> Response:
    return Response(
        content=lightbox_script_source(),
        media_type="application/javascript",
        headers={"Cache-Control": "public, max-age=86400"},
    )
