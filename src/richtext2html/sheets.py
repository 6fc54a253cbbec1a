"""Tabular file parsing for spreadsheet-backed lists.

Workbooks (``.xlsx``) are read with openpyxl; anything that is not a zip
archive is treated as UTF-8 CSV.  Either way the first row holds the column
headers and each following row becomes a ``{header: value}`` mapping.
"""

from __future__ import annotations

import csv
import io
import zipfile
from typing import Any, Optional, Union

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

Row = dict[str, Any]
SheetSelector = Optional[Union[str, int]]


class SheetReadError(Exception):
    """Raised when a spreadsheet payload cannot be parsed."""


def read_rows(data: bytes, sheet: SheetSelector = None) -> list[Row]:
    """Parse *data* into a list of rows keyed by column header.

    Args:
        data: Raw file bytes.
        sheet: Sheet name or 0-based index; ``None`` selects the first sheet.
            Ignored for CSV payloads.

    Returns:
        One mapping per non-blank data row.  An empty list means the sheet
        has no header or no data rows.

    Raises:
        SheetReadError: If the payload is not a readable workbook or CSV.
    """
    if zipfile.is_zipfile(io.BytesIO(data)):
        return _read_workbook(data, sheet)
    return _read_csv(data)


def _read_workbook(data: bytes, sheet: SheetSelector) -> list[Row]:
    try:
        wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
        raise SheetReadError(f"unreadable workbook: {exc}") from exc

    try:
        if not wb.sheetnames:
            return []
        if isinstance(sheet, str):
            if sheet not in wb.sheetnames:
                raise SheetReadError(f"no sheet named {sheet!r}")
            ws = wb[sheet]
        else:
            index = sheet or 0
            if index >= len(wb.sheetnames):
                raise SheetReadError(f"sheet index {index} out of range")
            ws = wb[wb.sheetnames[index]]
        return _rows_from_values(ws.iter_rows(values_only=True))
    finally:
        wb.close()


def _read_csv(data: bytes) -> list[Row]:
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise SheetReadError(f"CSV is not valid UTF-8: {exc}") from exc
    try:
        return _rows_from_values(csv.reader(io.StringIO(text)))
    except csv.Error as exc:
        raise SheetReadError(f"malformed CSV: {exc}") from exc


def _rows_from_values(values) -> list[Row]:
    rows_iter = iter(values)
    header: Optional[list[str]] = None
    for candidate in rows_iter:
        if _is_blank(candidate):
            continue
        header = ["" if cell is None else str(cell).strip() for cell in candidate]
        break
    if header is None:
        return []

    rows: list[Row] = []
    for values_row in rows_iter:
        if _is_blank(values_row):
            continue
        row: Row = {}
        for idx, name in enumerate(header):
            if not name:
                continue
            row[name] = values_row[idx] if idx < len(values_row) else None
        rows.append(row)
    return rows


def _is_blank(values) -> bool:
    return all(cell is None or str(cell).strip() == "" for cell in values)
