from __future__ import annotations

import re
from enum import Enum
from types import MappingProxyType

"""Header → contact field mapping.

Spreadsheet headers are written by people, so they are matched loosely: the
header is lower-cased, trimmed and stripped of underscores/whitespace, then
looked up *exactly* in a synonym table. Headers found in neither table are
ignored and their cells dropped.
"""

__all__ = [
    "ColumnTarget",
    "COLUMN_SYNONYMS",
    "EXTRA_NOTE_COLUMNS",
    "normalize_column_name",
    "map_column",
]


class ColumnTarget(str, Enum):
    """Where a column's cells end up."""
    NAME = "name"
    EMAIL = "email"
    PHONE = "phone"
    LOCATION = "location"
    INSTITUTION = "institution"
    DETAILS = "details"
    LAST_INTERACTION_DATE = "last_interaction_date"
    PRIORITY = "priority"
    EXTRA_NOTE = "extra_note"  # folded into details as "<Header>: <value>"
    UNMAPPED = "unmapped"


_SEPARATORS = re.compile(r"[_\s]+")

COLUMN_SYNONYMS: MappingProxyType[str, ColumnTarget] = MappingProxyType({
    "name": ColumnTarget.NAME,
    "fullname": ColumnTarget.NAME,
    "contactname": ColumnTarget.NAME,
    "email": ColumnTarget.EMAIL,
    "emailaddress": ColumnTarget.EMAIL,
    "mail": ColumnTarget.EMAIL,
    "phone": ColumnTarget.PHONE,
    "phonenumber": ColumnTarget.PHONE,
    "telephone": ColumnTarget.PHONE,
    "tel": ColumnTarget.PHONE,
    "mobile": ColumnTarget.PHONE,
    "location": ColumnTarget.LOCATION,
    "city": ColumnTarget.LOCATION,
    "address": ColumnTarget.LOCATION,
    "country": ColumnTarget.LOCATION,
    "notes": ColumnTarget.DETAILS,
    "details": ColumnTarget.DETAILS,
    "note": ColumnTarget.DETAILS,
    "description": ColumnTarget.DETAILS,
    "comments": ColumnTarget.DETAILS,
    "institution": ColumnTarget.INSTITUTION,
    "company": ColumnTarget.INSTITUTION,
    "organization": ColumnTarget.INSTITUTION,
    "org": ColumnTarget.INSTITUTION,
    "firm": ColumnTarget.INSTITUTION,
    "fund": ColumnTarget.INSTITUTION,
    # only headers that actually hold dates; "Last interaction" is free text
    "dateoflastinteraction": ColumnTarget.LAST_INTERACTION_DATE,
    "date": ColumnTarget.LAST_INTERACTION_DATE,
    "lastinteractiondate": ColumnTarget.LAST_INTERACTION_DATE,
    "lastcontactdate": ColumnTarget.LAST_INTERACTION_DATE,
    "interactiondate": ColumnTarget.LAST_INTERACTION_DATE,
    "priority": ColumnTarget.PRIORITY,
    "priorty": ColumnTarget.PRIORITY,  # misspelling found in real sheets
    "rank": ColumnTarget.PRIORITY,
    "importance": ColumnTarget.PRIORITY,
})

EXTRA_NOTE_COLUMNS: frozenset[str] = frozenset({
    "lastinteraction",
    "documentsprovided",
    "documents",
})


def normalize_column_name(header: object) -> str:
    """`"  Full_Name "` -> `"fullname"`."""
    return _SEPARATORS.sub("", str(header).lower().strip())


def map_column(header: object) -> ColumnTarget:
    """Resolve a spreadsheet header to its destination.

    Args:
        header: raw header cell (any type; compared after normalization)

    Returns:
        The contact field for a known synonym, EXTRA_NOTE for columns that
        are kept as labelled notes, UNMAPPED otherwise.
    """
    key = normalize_column_name(header)
    target = COLUMN_SYNONYMS.get(key)
    if target is not None:
        return target
    if key in EXTRA_NOTE_COLUMNS:
        return ColumnTarget.EXTRA_NOTE
    return ColumnTarget.UNMAPPED
