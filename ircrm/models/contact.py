from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

"""Contact / Attachment records as returned by the storage backend.

These mirror the `contacts` and `attachments` tables. Values are read-only
snapshots; the pipeline never mutates stored records.
"""

__all__ = [
    "Contact",
    "Attachment",
    "ContactBundle",
    "PRIORITY_RANGE",
]

# 1 = highest urgency
PRIORITY_RANGE = range(1, 6)


@dataclass(frozen=True)
class Contact:
    """Canonical investor-relations record owned by one user account."""
    id: str
    user_id: str
    name: str
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    institution: str | None = None
    details: str | None = None  # free text, may hold several newline-joined notes
    last_interaction_date: date | None = None
    priority: int | None = None  # 1..5 or None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Attachment:
    """Metadata row of a binary file stored in object storage.

    `file_path` is the opaque object-storage locator; it is unique per upload.
    """
    id: str
    contact_id: str
    user_id: str
    file_name: str
    file_path: str
    file_type: str | None = None  # MIME type
    file_size: int | None = None  # bytes
    created_at: datetime | None = None


@dataclass(frozen=True)
class ContactBundle:
    """One contact paired with its attachment metadata (export only)."""
    contact: Contact
    attachments: list[Attachment] = field(default_factory=list)
