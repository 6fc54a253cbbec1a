"""Tests for the FastAPI web service."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from richtext2html.server import app
from richtext2html.settings import Settings, get_settings

FIXTURE_DIR = Path(__file__).parent / "fixtures"
SAMPLE_JSON = FIXTURE_DIR / "document.json"


@pytest.fixture
def client():
    """Create an async test client with fixed settings."""
    app.dependency_overrides[get_settings] = lambda: Settings(
        payment_recipient="shop@example.com"
    )
    transport = ASGITransport(app=app)
    yield AsyncClient(transport=transport, base_url="http://test")
    app.dependency_overrides.clear()


@pytest.mark.asyncio
class TestHealthEndpoint:

    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert "version" in data


@pytest.mark.asyncio
class TestStylesEndpoint:

    async def test_list_styles(self, client):
        resp = await client.get("/styles")
        assert resp.status_code == 200
        assert resp.json()["presets"] == ["smart", "simple", "card"]


@pytest.mark.asyncio
class TestRenderEndpoint:

    async def test_render_document(self, client):
        resp = await client.post("/render", json=json.loads(SAMPLE_JSON.read_text()))
        assert resp.status_code == 200
        assert "text/html" in resp.headers["content-type"]
        assert resp.text.startswith("<h3>Spring Exhibition</h3>")

    async def test_render_with_style(self, client):
        resp = await client.post(
            "/render",
            params={"style": "card"},
            json=json.loads(SAMPLE_JSON.read_text()),
        )
        assert resp.status_code == 200
        assert "text-align:center" not in resp.text

    async def test_unknown_style(self, client):
        resp = await client.post(
            "/render",
            params={"style": "fancy"},
            json={"nodeType": "document", "content": []},
        )
        assert resp.status_code == 400

    async def test_non_object_body(self, client):
        resp = await client.post("/render", json=[1, 2, 3])
        assert resp.status_code == 400

    async def test_escapes_text(self, client):
        doc = {
            "nodeType": "document",
            "content": [{
                "nodeType": "paragraph",
                "content": [{"nodeType": "text", "value": "<b>&</b>", "marks": []}],
            }],
        }
        resp = await client.post("/render", json=doc)
        assert resp.text == "<p>&lt;b&gt;&amp;&lt;/b&gt;</p>"


@pytest.mark.asyncio
class TestRenderMarkdownEndpoint:

    async def test_render_markdown(self, client):
        resp = await client.post(
            "/render/markdown",
            data={"markdown": "### Hello\n\nParagraph."},
        )
        assert resp.status_code == 200
        assert resp.text == "<h3>Hello</h3><p>Paragraph.</p>"

    async def test_table_conversion(self, client):
        md = "| A | B |\n|---|---|\n| 1 | 2 |"
        resp = await client.post("/render/markdown", data={"markdown": md})
        assert resp.status_code == 200
        assert "<table" in resp.text

    async def test_unknown_style(self, client):
        resp = await client.post(
            "/render/markdown",
            data={"markdown": "# Hi", "style": "fancy"},
        )
        assert resp.status_code == 400


@pytest.mark.asyncio
class TestStaticEndpoints:

    async def test_index_returns_html(self, client):
        resp = await client.get("/")
        assert resp.status_code == 200
        assert "text/html" in resp.headers.get("content-type", "")

    async def test_lightbox_script(self, client):
        resp = await client.get("/lightbox.js")
        assert resp.status_code == 200
        assert "javascript" in resp.headers["content-type"]
        assert "max-age" in resp.headers["cache-control"]
        assert "window.__richtextLightbox" in resp.text
        assert "version: 1" in resp.text
