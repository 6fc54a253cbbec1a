"""Markup for entries embedded in rich text.

Each builder takes a resolved :class:`~richtext2html.nodes.Entry` and returns
an HTML fragment, or ``""`` when required fields are missing.
"""

from __future__ import annotations

import html
import json
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import lru_cache
from importlib import resources
from typing import Any, Optional

from richtext2html.nodes import Asset, Entry, RichTextNode, plain_text

THUMBNAIL_HINT = "w=300&h=300&fit=fill"
FULL_SIZE_HINT = "w=1600&fm=webp&q=80"
CARD_IMAGE_HINT = "w=600&h=400&fit=fill"
LIGHTBOX_SCRIPT_VERSION = "1"

_CLASS_SAFE_RE = re.compile(r"[^A-Za-z0-9_-]")
_NEWLINE_RE = re.compile(r"\\r\\n|\\n|\r?\n")


def _esc(value: Any) -> str:
    return html.escape("" if value is None else str(value), quote=True)


def _with_hint(url: str, hint: str) -> str:
    joiner = "&" if "?" in url else "?"
    return f"{url}{joiner}{hint}"


def text_field(entry: Entry, name: str) -> str:
    value = entry.fields.get(name)
    if isinstance(value, RichTextNode):
        return plain_text(value).strip()
    if value is None:
        return ""
    return str(value).strip()


def scoped_id(prefix: str, entry_id: str) -> str:
    return f"{prefix}-{_CLASS_SAFE_RE.sub('-', entry_id) or 'entry'}"


# ---------------------------------------------------------------------------
# Image grid
# ---------------------------------------------------------------------------

def grid_images(entry: Entry) -> list[Asset]:
    images = entry.fields.get("images")
    if not isinstance(images, list):
        return []
    return [img for img in images if isinstance(img, Asset) and img.url]


def image_grid(
    entry: Entry, title_markup: str = "", grid_id: Optional[str] = None
) -> str:
    """Thumbnail grid wired to the shared lightbox.

    The full-size image list is emitted as a JSON payload next to the grid;
    the client module reads it when a thumbnail is activated.
    """
    images = grid_images(entry)
    if not images:
        return ""

    grid_id = grid_id or scoped_id("image-grid", entry.id)
    thumbs: list[str] = []
    payload: list[dict[str, str]] = []
    for idx, img in enumerate(images):
        alt = img.title or img.description
        thumbs.append(
            f'<button type="button" class="image-grid__item" '
            f'data-lightbox-gallery="{grid_id}" data-lightbox-index="{idx}" '
            f'aria-label="Open image {idx + 1} of {len(images)}">'
            f'<img src="{_esc(_with_hint(img.https_url, THUMBNAIL_HINT))}" '
            f'alt="{_esc(alt)}" width="300" height="300" loading="lazy" />'
            f"</button>"
        )
        payload.append({
            "src": _with_hint(img.https_url, FULL_SIZE_HINT),
            "alt": alt,
            "caption": img.description,
        })

    style = (
        f"#{grid_id} .image-grid__items{{display:grid;"
        f"grid-template-columns:repeat(auto-fill,minmax(150px,1fr));"
        f"gap:0.75rem;margin:1rem 0;}}"
        f"#{grid_id} .image-grid__item{{padding:0;border:0;background:none;"
        f"cursor:zoom-in;}}"
        f"#{grid_id} .image-grid__item img{{display:block;width:100%;height:auto;"
        f"aspect-ratio:1/1;object-fit:cover;border-radius:0.25rem;}}"
    )
    data = json.dumps(payload, ensure_ascii=False).replace("</", "<\\/")
    return (
        f'<div id="{grid_id}" class="image-grid"><style>{style}</style>'
        f"{title_markup}"
        f'<div class="image-grid__items">{"".join(thumbs)}</div>'
        f'<script type="application/json" data-lightbox-gallery="{grid_id}">'
        f"{data}</script></div>"
    )


@lru_cache(maxsize=1)
def lightbox_script_source() -> str:
    """Return the packaged client-side lightbox module."""
    return (
        resources.files("richtext2html")
        .joinpath("static/lightbox.js")
        .read_text(encoding="utf-8")
    )


def lightbox_script_tag(script_url: Optional[str] = None) -> str:
    """Reference the shared lightbox module, inline when no URL is configured."""
    if script_url:
        return f'<script src="{_esc(script_url)}" defer></script>'
    return (
        f'<script data-lightbox-version="{LIGHTBOX_SCRIPT_VERSION}">'
        f"{lightbox_script_source()}</script>"
    )


# ---------------------------------------------------------------------------
# Payment form
# ---------------------------------------------------------------------------

def _money(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    try:
        amount = Decimal(str(value).strip().lstrip("$"))
        if not amount.is_finite():
            return None
        return str(amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return None


def description_html(text: str) -> str:
    """Escape *text* and turn real or backslash-escaped newlines into breaks."""
    return _NEWLINE_RE.sub("<br/>", _esc(text))


def payment_form(
    entry: Entry,
    *,
    recipient: str,
    endpoint: str,
    currency: str = "USD",
) -> str:
    title = text_field(entry, "title")
    amount = _money(entry.fields.get("price"))
    if not title or amount is None:
        return ""
    slug = text_field(entry, "slug")
    tax = _money(entry.fields.get("tax")) or "0.00"
    handling = _money(entry.fields.get("shipping")) or "0.00"
    description = text_field(entry, "description")

    hidden = [
        ("cmd", "_xclick"),
        ("business", recipient),
        ("item_name", title),
        ("item_number", slug),
        ("amount", amount),
        ("tax", tax),
        ("handling", handling),
        ("quantity", "1"),
        ("currency_code", currency),
    ]
    inputs = "".join(
        f'<input type="hidden" name="{name}" value="{_esc(value)}" />'
        for name, value in hidden
    )
    desc = (
        f'<p class="ecommerce__description">{description_html(description)}</p>'
        if description else ""
    )
    return (
        f'<form class="ecommerce" action="{_esc(endpoint)}" method="post" '
        f'target="_blank" style="margin:1.5rem 0;padding:1rem;'
        f'border:1px solid #e2e8f0;border-radius:0.5rem;">'
        f"{inputs}"
        f'<h4 class="ecommerce__title">{_esc(title)}</h4>'
        f"{desc}"
        f'<p class="ecommerce__price"><strong>${amount}</strong> {_esc(currency)}</p>'
        f'<button type="submit" style="padding:0.5rem 1.25rem;border:0;'
        f'border-radius:0.25rem;background:#0070ba;color:#fff;cursor:pointer;">'
        f"Buy Now</button></form>"
    )


# ---------------------------------------------------------------------------
# Video
# ---------------------------------------------------------------------------

def youtube_video_id(url: str) -> str:
    """Extract the video id from watch, short-link or embed URLs."""
    if "youtube.com/watch?v=" in url:
        return url.split("v=", 1)[1].split("&", 1)[0]
    if "youtu.be/" in url:
        return url.split("youtu.be/", 1)[1].split("?", 1)[0]
    if "youtube.com/embed/" in url:
        return url.split("embed/", 1)[1].split("?", 1)[0]
    return ""


def video_embed(entry: Entry) -> str:
    video_url = entry.fields.get("videoUrl")
    if not isinstance(video_url, str) or not video_url:
        return ""
    video_id = youtube_video_id(video_url)
    if not video_id:
        return ""
    title = text_field(entry, "title") or "YouTube video"
    return (
        '<div style="position:relative;padding-bottom:56.25%;height:0;'
        'overflow:hidden;max-width:100%;margin:1rem 0;">'
        '<iframe style="position:absolute;top:0;left:0;width:100%;height:100%;" '
        f'src="https://www.youtube.com/embed/{_esc(video_id)}" '
        f'title="{_esc(title)}" frameborder="0" '
        'allow="accelerometer; autoplay; clipboard-write; encrypted-media; '
        'gyroscope; picture-in-picture" allowfullscreen></iframe></div>'
    )


# ---------------------------------------------------------------------------
# Slideshow cards
# ---------------------------------------------------------------------------

def slideshow_card(entry: Entry) -> str:
    title = text_field(entry, "title")
    if not title:
        return ""
    slug = text_field(entry, "slug")
    href = f"/slideshow/{slug}" if slug else "#"
    brief = text_field(entry, "briefDescription")
    hero = entry.fields.get("heroImage")
    image = ""
    if isinstance(hero, Asset) and hero.url:
        image = (
            f'<img src="{_esc(_with_hint(hero.https_url, CARD_IMAGE_HINT))}" '
            f'alt="{_esc(hero.title or title)}" width="600" height="400" '
            f'loading="lazy" />'
        )
    brief_html = f"<p>{_esc(brief)}</p>" if brief else ""
    return (
        f'<a class="slideshow-grid__card" href="{_esc(href)}">{image}'
        f'<div class="slideshow-grid__body"><h4>{_esc(title)}</h4>'
        f"{brief_html}</div></a>"
    )


def slideshow_grid(entries: list[Entry]) -> str:
    """Card grid for every distinct slideshow entry, in first-seen order."""
    seen: set[str] = set()
    cards: list[str] = []
    for entry in entries:
        if entry.id in seen:
            continue
        seen.add(entry.id)
        card = slideshow_card(entry)
        if card:
            cards.append(card)
    if not cards:
        return ""
    style = (
        ".slideshow-grid{display:grid;grid-template-columns:1fr;gap:1.5rem;"
        "margin:1.5rem 0;}"
        "@media (min-width:768px){.slideshow-grid{grid-template-columns:repeat(2,1fr);}}"
        "@media (min-width:1024px){.slideshow-grid{grid-template-columns:repeat(3,1fr);}}"
        ".slideshow-grid__card{display:block;border:1px solid #e2e8f0;"
        "border-radius:0.5rem;overflow:hidden;color:inherit;text-decoration:none;}"
        ".slideshow-grid__card img{display:block;width:100%;height:auto;}"
        ".slideshow-grid__body{padding:0.75rem 1rem;}"
    )
    return (
        f'<div class="slideshow-grid"><style>{style}</style>'
        f"{''.join(cards)}</div>"
    )
