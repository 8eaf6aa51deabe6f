from __future__ import annotations

import io
from collections.abc import Sequence
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

import pandas as pd
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from ircrm.models.contact import ContactBundle

"""Contacts table encoding for the export archive.

One row per contact, columns in a fixed order. `Files Count` / `File Names`
describe attachment metadata, not which binaries were downloaded.
"""

__all__ = [
    "EXPORT_COLUMNS",
    "EXPORT_SHEET_NAME",
    "format_interaction_date",
    "format_timestamp",
    "encode_contacts_table",
    "write_contacts_workbook",
]

EXPORT_SHEET_NAME = "Contacts"

# column -> width (characters)
EXPORT_COLUMNS: dict[str, int] = {
    "#": 5,
    "Name": 25,
    "Institution": 25,
    "Email": 30,
    "Phone": 18,
    "Location": 20,
    "Priority": 10,
    "Last Interaction": 18,
    "Notes": 50,
    "Files Count": 12,
    "File Names": 40,
    "Created": 20,
    "Updated": 20,
}


def format_interaction_date(value: date | str | None) -> str:
    """`2024-03-15` -> `Mar 15, 2024`."""
    if not value:
        return ""
    if isinstance(value, datetime):
        value = value.date()
    elif isinstance(value, str):
        try:
            value = date.fromisoformat(value[:10])
        except ValueError:
            return value
    return f"{value:%b} {value.day}, {value.year}"


def format_timestamp(value: datetime | None, tz: str = "UTC") -> str:
    """`Mar 15, 2024, 02:30 PM` in the given timezone (naive values are UTC)."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    local = value.astimezone(ZoneInfo(tz))
    return f"{local:%b} {local.day}, {local.year}, {local:%I:%M %p}"


def encode_contacts_table(bundles: Sequence[ContactBundle], tz: str = "UTC") -> pd.DataFrame:
    """Build the export table, one row per contact in the given order.

    Args:
        bundles: contacts paired with their attachments
        tz: timezone for the Created/Updated columns

    Returns:
        DataFrame with exactly the EXPORT_COLUMNS, absent values as "".
    """
    records = []
    for index, bundle in enumerate(bundles, start=1):
        c = bundle.contact
        records.append({
            "#": index,
            "Name": c.name,
            "Institution": c.institution or "",
            "Email": c.email or "",
            "Phone": c.phone or "",
            "Location": c.location or "",
            "Priority": c.priority if c.priority else "",
            "Last Interaction": format_interaction_date(c.last_interaction_date),
            "Notes": c.details or "",
            "Files Count": len(bundle.attachments),
            "File Names": ", ".join(a.file_name for a in bundle.attachments),
            "Created": format_timestamp(c.created_at, tz),
            "Updated": format_timestamp(c.updated_at, tz),
        })
    return pd.DataFrame.from_records(records, columns=list(EXPORT_COLUMNS))


def write_contacts_workbook(frame: pd.DataFrame) -> bytes:
    """Serialize the contacts table as an .xlsx workbook with one sheet."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=EXPORT_SHEET_NAME, index=False)
        ws = writer.sheets[EXPORT_SHEET_NAME]
        for col_idx, (name, width) in enumerate(EXPORT_COLUMNS.items(), start=1):
            ws.column_dimensions[get_column_letter(col_idx)].width = width
            ws.cell(row=1, column=col_idx).font = Font(bold=True)
        notes_col = get_column_letter(list(EXPORT_COLUMNS).index("Notes") + 1)
        for cell in ws[notes_col][1:]:
            cell.alignment = Alignment(wrap_text=True, vertical="top")
        ws.freeze_panes = "A2"
    return buffer.getvalue()
