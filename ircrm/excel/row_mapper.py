from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ircrm.models.preview_contact import PreviewContact

from .columns import ColumnTarget, map_column
from .normalizers import DEFAULT_SERIAL_RANGE, is_falsy, parse_date, parse_priority, to_text

"""Raw spreadsheet row -> PreviewContact.

Rows are dicts keyed by the original header text (column order preserved).
Several note-like columns accumulate into `details` instead of overwriting
each other: fragments are collected in order and joined once at the end, with
the `[<Sheet>]` marker first when the row came from a multi-sheet import.
"""

__all__ = [
    "map_row",
    "map_rows",
]

_TEXT_FIELDS = {
    ColumnTarget.EMAIL,
    ColumnTarget.PHONE,
    ColumnTarget.LOCATION,
    ColumnTarget.INSTITUTION,
}


def map_row(
    row: Mapping[str, Any],
    source_sheet: str | None = None,
    *,
    serial_range: tuple[float, float] = DEFAULT_SERIAL_RANGE,
) -> PreviewContact:
    """Map one raw row. Always returns a PreviewContact, possibly nameless."""
    values: dict[str, Any] = {}
    notes: list[str] = []

    for header, value in row.items():
        if is_falsy(value):
            continue
        target = map_column(header)

        if target is ColumnTarget.NAME:
            values["name"] = to_text(value)
        elif target is ColumnTarget.LAST_INTERACTION_DATE:
            values["last_interaction_date"] = parse_date(value, serial_range)
        elif target is ColumnTarget.PRIORITY:
            values["priority"] = parse_priority(value)
        elif target is ColumnTarget.DETAILS:
            text = to_text(value)
            if text:
                notes.append(text)
        elif target in _TEXT_FIELDS:
            values[target.value] = to_text(value) or None
        elif target is ColumnTarget.EXTRA_NOTE:
            text = to_text(value)
            if text:
                notes.append(f"{str(header).strip()}: {text}")
        # ColumnTarget.UNMAPPED: dropped

    if source_sheet:
        notes.insert(0, f"[{source_sheet}]")

    return PreviewContact(
        details="\n".join(notes) if notes else None,
        source_sheet=source_sheet or None,
        **values,
    )


def map_rows(
    rows: Iterable[Mapping[str, Any]],
    source_sheet: str | None = None,
    *,
    serial_range: tuple[float, float] = DEFAULT_SERIAL_RANGE,
) -> list[PreviewContact]:
    """Map every row of one sheet.

    Args:
        rows: header-keyed raw rows
        source_sheet: sheet name for the `[Sheet]` notes marker, or None
        serial_range: exclusive bounds for numeric strings read as serials

    Returns:
        One PreviewContact per row, nameless rows included.
    """
    return [map_row(r, source_sheet, serial_range=serial_range) for r in rows]
