from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""PreviewContact model for the spreadsheet import pipeline.

A PreviewContact is the Contact-shaped value produced from one spreadsheet row
before anything is written. Rows with an empty name still produce a preview;
they are filtered out (and counted as skipped) by the import orchestrator.
"""

__all__ = [
    "PreviewContact",
    "INSERT_COLUMNS",
]

# Column order used for INSERT statements (user_id is prepended by the store)
INSERT_COLUMNS = (
    "name",
    "email",
    "phone",
    "location",
    "details",
    "institution",
    "last_interaction_date",
    "priority",
)


@dataclass(frozen=True)
class PreviewContact:
    """Parsed-but-not-persisted contact.

    `last_interaction_date` is kept as a `YYYY-MM-DD` string, exactly as it will
    be sent to the storage backend. `source_sheet` is only set for multi-sheet
    imports.
    """
    name: str = ""
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    institution: str | None = None
    details: str | None = None
    last_interaction_date: str | None = None
    priority: int | None = None
    source_sheet: str | None = None

    @property
    def has_name(self) -> bool:
        return bool(self.name.strip())

    def insert_values(self) -> tuple[Any, ...]:
        """Values in INSERT_COLUMNS order."""
        return tuple(getattr(self, col) for col in INSERT_COLUMNS)
