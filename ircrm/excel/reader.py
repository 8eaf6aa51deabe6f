from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pandas as pd

from ircrm.errors import (
    EmptyFileError,
    NoDataSheetsError,
    ProcessingError,
    SheetSelectionError,
    UnsupportedFileError,
)
from ircrm.models.preview_contact import PreviewContact
from ircrm.models.sheet_info import SheetInfo

from .normalizers import DEFAULT_SERIAL_RANGE, is_blank
from .row_mapper import map_rows

"""Spreadsheet reading and sheet selection.

- The first row of every sheet is the header; each following non-blank row
  becomes a dict keyed by the original header text.
- Cells are kept as native objects (numbers stay numbers, dates stay dates);
  strings are kept verbatim, pandas' default NA string conversion is off.
- A sheet named "Definitions" (any case) is documentation and never imported.
- A CSV file is a workbook with one sheet named "Sheet1".
"""

__all__ = [
    "SPREADSHEET_EXTENSIONS",
    "SPREADSHEET_MIME_TYPES",
    "RESERVED_SHEET_NAME",
    "Workbook",
    "validate_spreadsheet_file",
    "read_workbook",
    "discover_sheets",
    "list_sheets",
    "select_sheet_rows",
    "load_preview",
]

SPREADSHEET_EXTENSIONS = (".xlsx", ".xls", ".csv")
SPREADSHEET_MIME_TYPES = frozenset({
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
    "text/csv",
})
RESERVED_SHEET_NAME = "definitions"
CSV_SHEET_NAME = "Sheet1"

# sheet name -> rows (header text -> raw cell value), in workbook order
Workbook = dict[str, list[dict[str, Any]]]


def validate_spreadsheet_file(path: Path, content_type: str | None = None) -> None:
    """Reject files that are not spreadsheets before any parsing happens.

    A file is accepted when either its extension or the declared MIME type
    matches.
    """
    if not (path.name.lower().endswith(SPREADSHEET_EXTENSIONS) or content_type in SPREADSHEET_MIME_TYPES):
        raise UnsupportedFileError(
            f"unsupported file '{path.name}': upload an Excel file (.xlsx, .xls) or CSV file"
        )
    if not path.is_file():
        raise ProcessingError(f"file not found: {path}")
    if path.stat().st_size == 0:
        raise EmptyFileError(f"file is empty: {path.name}")


def _is_csv(path: Path, content_type: str | None) -> bool:
    suffix = path.suffix.lower()
    if suffix in (".xlsx", ".xls"):
        return False
    return suffix == ".csv" or content_type == "text/csv"


def _frame_to_rows(df: pd.DataFrame) -> list[dict[str, Any]]:
    columns = [str(c).strip() if isinstance(c, str) else str(c) for c in df.columns]
    rows: list[dict[str, Any]] = []
    for raw in df.itertuples(index=False, name=None):
        if all(is_blank(v) for v in raw):
            continue
        rows.append({
            col: (None if (not isinstance(val, str) and is_blank(val)) else val)
            for col, val in zip(columns, raw, strict=False)
        })
    return rows


def read_workbook(path: Path, content_type: str | None = None) -> Workbook:
    """Read every sheet of an .xlsx/.xls/.csv file into raw rows."""
    try:
        if _is_csv(path, content_type):
            frames = {
                CSV_SHEET_NAME: pd.read_csv(
                    path, dtype=object, keep_default_na=False, na_values=[""], skip_blank_lines=True
                )
            }
        else:
            frames = pd.read_excel(
                path, sheet_name=None, dtype=object, keep_default_na=False, na_values=[""]
            )
    except pd.errors.EmptyDataError as e:
        raise EmptyFileError(f"file is empty: {path.name}") from e
    except Exception as e:
        raise ProcessingError(f"Failed to parse spreadsheet '{path.name}': {e}") from e

    return {str(name): _frame_to_rows(df) for name, df in frames.items()}


def discover_sheets(workbook: Workbook) -> list[SheetInfo]:
    """Selectable sheets: not reserved, at least one data row."""
    return [
        SheetInfo(name=name, row_count=len(rows))
        for name, rows in workbook.items()
        if name.strip().lower() != RESERVED_SHEET_NAME and rows
    ]


def list_sheets(path: Path, content_type: str | None = None) -> list[SheetInfo]:
    """Validate and read `path`, returning its selectable sheets.

    Raises:
        UnsupportedFileError: not a spreadsheet by extension or MIME type
        EmptyFileError: zero-byte file
        ProcessingError: missing or unparseable file
    """
    validate_spreadsheet_file(path, content_type)
    return discover_sheets(read_workbook(path, content_type))


def select_sheet_rows(
    workbook: Workbook, selected: Iterable[str] | None = None
) -> list[tuple[str, list[dict[str, Any]]]]:
    """Rows of the confirmed sheets, in workbook order.

    `selected=None` means every qualifying sheet (the default selection).

    Raises:
        NoDataSheetsError: no qualifying sheet in the workbook
        SheetSelectionError: empty selection or unknown sheet name
    """
    available = discover_sheets(workbook)
    if not available:
        raise NoDataSheetsError("No data sheets found in the file")
    names = [s.name for s in available]
    if selected is None:
        chosen = set(names)
    else:
        chosen = set(selected)
        if not chosen:
            raise SheetSelectionError("no sheets selected")
        unknown = chosen - set(names)
        if unknown:
            raise SheetSelectionError(
                f"unknown or empty sheets: {sorted(unknown)} (available: {names})"
            )
    return [(name, workbook[name]) for name in names if name in chosen]


def load_preview(
    path: Path,
    selected: Iterable[str] | None = None,
    *,
    content_type: str | None = None,
    serial_range: tuple[float, float] = DEFAULT_SERIAL_RANGE,
) -> list[PreviewContact]:
    """Validate, read and map an uploaded spreadsheet to preview contacts.

    With a single qualifying sheet, the sheet is mapped directly and no sheet
    marker is added to the notes. With several, only the selected sheets are
    mapped and concatenated, each row tagged with its sheet name.
    """
    validate_spreadsheet_file(path, content_type)
    workbook = read_workbook(path, content_type)
    sheets = select_sheet_rows(workbook, selected)

    if len(discover_sheets(workbook)) == 1:
        _, rows = sheets[0]
        return map_rows(rows, serial_range=serial_range)

    preview: list[PreviewContact] = []
    for name, rows in sheets:
        preview.extend(map_rows(rows, name, serial_range=serial_range))
    return preview
