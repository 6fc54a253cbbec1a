"""Spreadsheet-backed name lists.

A ``spreadSheetToList`` entry points at an uploaded spreadsheet of people.
Before a document is rendered, every distinct such entry is fetched, parsed,
sorted by last name and turned into a responsive ``<ul>`` grid.  The
resulting fragments are cached by entry id; any failure caches ``""``.
"""

from __future__ import annotations

import asyncio
import html
import re
import unicodedata
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from loguru import logger

from richtext2html.nodes import Asset, Entry
from richtext2html.sheets import Row, SheetSelector, read_rows

SheetReader = Callable[[bytes, SheetSelector], list[Row]]

LIST_TYPE = "nameList"

_FIRST_NAME_HEADERS = frozenset({"firstname", "first", "givenname", "fname"})
_LAST_NAME_HEADERS = frozenset({"lastname", "last", "surname", "familyname", "lname"})
_URL_HEADERS = frozenset({"url", "link", "website", "profileurl", "profile"})

_HEADER_STRIP_RE = re.compile(r"[\s_\-]+")
_CLASS_SAFE_RE = re.compile(r"[^A-Za-z0-9_-]")


@dataclass
class Person:
    first_name: str
    last_name: str
    url: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


# ---------------------------------------------------------------------------
# Row extraction
# ---------------------------------------------------------------------------

def normalize_header(header: str) -> str:
    """Lower-case *header* and drop spaces, underscores and hyphens."""
    return _HEADER_STRIP_RE.sub("", header.lower())


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def person_from_row(row: Row) -> Person:
    first = last = url = ""
    for header, value in row.items():
        key = normalize_header(str(header))
        if not first and key in _FIRST_NAME_HEADERS:
            first = _cell_text(value)
        elif not last and key in _LAST_NAME_HEADERS:
            last = _cell_text(value)
        elif not url and key in _URL_HEADERS:
            url = _cell_text(value)
    return Person(first_name=first, last_name=last, url=url)


def collation_key(text: str) -> str:
    """Comparison key ignoring case and diacritics."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return stripped.casefold()


def people_from_rows(rows: Iterable[Row]) -> list[Person]:
    people = [p for p in (person_from_row(r) for r in rows) if p.full_name]
    people.sort(key=lambda p: (collation_key(p.last_name), collation_key(p.first_name)))
    return people


# ---------------------------------------------------------------------------
# Markup
# ---------------------------------------------------------------------------

def scoped_class(entry_id: str) -> str:
    return "sheet-list-" + (_CLASS_SAFE_RE.sub("-", entry_id) or "entry")


def render_people(people: list[Person], entry_id: str) -> str:
    """Render *people* as a responsive grid list scoped to *entry_id*."""
    cls = scoped_class(entry_id)
    items: list[str] = []
    for person in people:
        name = html.escape(person.full_name, quote=True)
        if person.url:
            href = html.escape(person.url, quote=True)
            items.append(
                f'<li><a href="{href}" target="_blank" '
                f'rel="noopener noreferrer">{name}</a></li>'
            )
        else:
            items.append(f"<li>{name}</li>")

    style = (
        f".{cls} ul{{display:grid;grid-template-columns:1fr;gap:0.5rem 1.5rem;"
        f"list-style:none;padding:0;margin:1rem 0;}}"
        f"@media (min-width:768px){{.{cls} ul{{grid-template-columns:repeat(2,1fr);}}}}"
        f"@media (min-width:1024px){{.{cls} ul{{grid-template-columns:repeat(3,1fr);}}}}"
    )
    return (
        f'<div class="{cls}"><style>{style}</style>'
        f"<ul>{''.join(items)}</ul></div>"
    )


# ---------------------------------------------------------------------------
# Materialization
# ---------------------------------------------------------------------------

def _source_asset(entry: Entry) -> Optional[Asset]:
    asset = entry.fields.get("file")
    if isinstance(asset, Asset) and asset.url:
        return asset
    return None


async def materialize_entry(
    entry: Entry,
    client: httpx.AsyncClient,
    reader: SheetReader = read_rows,
) -> str:
    """Build the list fragment for one entry, or ``""`` on any failure."""
    try:
        return await _build_fragment(entry, client, reader)
    except Exception:
        logger.exception(f"Spreadsheet list {entry.id}: unexpected failure")
        return ""


async def _build_fragment(
    entry: Entry,
    client: httpx.AsyncClient,
    reader: SheetReader,
) -> str:
    list_type = entry.fields.get("type")
    if list_type != LIST_TYPE:
        logger.warning(f"Spreadsheet list {entry.id}: unsupported type {list_type!r}")
        return ""

    asset = _source_asset(entry)
    if asset is None:
        logger.warning(f"Spreadsheet list {entry.id}: no attached file")
        return ""

    url = "https:" + asset.url
    try:
        response = await client.get(url)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.warning(f"Spreadsheet list {entry.id}: fetch of {url} failed: {exc}")
        return ""

    try:
        rows = reader(response.content, None)
    except Exception:
        logger.exception(f"Spreadsheet list {entry.id}: could not parse {url}")
        return ""
    if not rows:
        logger.warning(f"Spreadsheet list {entry.id}: {url} has no rows")
        return ""

    people = people_from_rows(rows)
    if not people:
        logger.warning(f"Spreadsheet list {entry.id}: no rows with a name")
        return ""

    logger.debug(f"Spreadsheet list {entry.id}: {len(people)} people")
    return render_people(people, entry.id)


async def materialize_spreadsheet_lists(
    entries: Iterable[Entry],
    *,
    client: Optional[httpx.AsyncClient] = None,
    reader: SheetReader = read_rows,
    timeout: Optional[float] = None,
) -> dict[str, str]:
    """Return ``{entry id: fragment}`` for every distinct entry in *entries*.

    Entries are processed concurrently; the first occurrence of an id wins.
    When *client* is omitted a client is created for the duration of the call.
    """
    distinct: dict[str, Entry] = {}
    for entry in entries:
        distinct.setdefault(entry.id, entry)
    if not distinct:
        return {}

    if client is None:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as own_client:
            return await _materialize_all(distinct, own_client, reader)
    return await _materialize_all(distinct, client, reader)


async def _materialize_all(
    distinct: dict[str, Entry],
    client: httpx.AsyncClient,
    reader: SheetReader,
) -> dict[str, str]:
    fragments = await asyncio.gather(
        *(materialize_entry(entry, client, reader) for entry in distinct.values())
    )
    return dict(zip(distinct, fragments))
