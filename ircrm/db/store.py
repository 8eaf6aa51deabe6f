from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import psycopg2

from ircrm.models.contact import Attachment, Contact
from ircrm.models.preview_contact import INSERT_COLUMNS, PreviewContact

from .batch_insert import StorageError, batch_insert

"""Record store backed by the platform's Postgres database.

Only the calls the pipelines need are exposed:

- current_user_id()            acting user, None when not authenticated
- insert_contacts(user, rows)  one atomic batch
- fetch_contacts()             ordered by name
- fetch_attachments()          newest first

Row-level access rules live in the database; this class does not filter.
"""

__all__ = [
    "PostgresStore",
    "StorageError",
]

logger = logging.getLogger(__name__)

CONTACTS_TABLE = "contacts"
ATTACHMENTS_TABLE = "attachments"

_CONTACT_SELECT = (
    "SELECT id, user_id, name, email, phone, location, institution, details, "
    "last_interaction_date, priority, created_at, updated_at "
    f"FROM {CONTACTS_TABLE} ORDER BY name ASC"
)
_ATTACHMENT_SELECT = (
    "SELECT id, contact_id, user_id, file_name, file_path, file_type, file_size, created_at "
    f"FROM {ATTACHMENTS_TABLE} ORDER BY created_at DESC"
)


class PostgresStore:
    def __init__(self, conn: Any, user_id: str | None = None) -> None:
        self._conn = conn
        self._user_id = user_id or None

    @classmethod
    def connect(cls, dsn: str, user_id: str | None = None) -> PostgresStore:
        """Open a connection (autocommit off) acting as `user_id`.

        Raises:
            StorageError: the connection could not be established
        """
        try:
            conn = psycopg2.connect(dsn)
        except psycopg2.Error as e:
            raise StorageError(f"database connection failed: {e}") from e
        conn.autocommit = False
        return cls(conn, user_id)

    def close(self) -> None:
        if not self._conn.closed:
            self._conn.close()

    def __enter__(self) -> PostgresStore:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def current_user_id(self) -> str | None:
        return self._user_id

    def insert_contacts(self, user_id: str, contacts: Sequence[PreviewContact]) -> int:
        """Insert one batch in its own transaction (all rows or none)."""
        rows = [(user_id, *c.insert_values()) for c in contacts]
        try:
            with self._conn.cursor() as cur:
                inserted = batch_insert(
                    cur,
                    CONTACTS_TABLE,
                    ("user_id", *INSERT_COLUMNS),
                    rows,
                    page_size=max(len(rows), 1),
                )
            self._conn.commit()
        except StorageError:
            self._rollback()
            raise
        except psycopg2.Error as e:
            self._rollback()
            raise StorageError(str(e).strip()) from e
        logger.debug("inserted %d contacts", inserted)
        return inserted

    def fetch_contacts(self) -> list[Contact]:
        """All contacts of the acting user, ordered by name."""
        rows = self._fetch_all(_CONTACT_SELECT, "contacts")
        return [
            Contact(
                id=str(r[0]),
                user_id=str(r[1]),
                name=r[2],
                email=r[3],
                phone=r[4],
                location=r[5],
                institution=r[6],
                details=r[7],
                last_interaction_date=r[8],
                priority=r[9],
                created_at=r[10],
                updated_at=r[11],
            )
            for r in rows
        ]

    def fetch_attachments(self) -> list[Attachment]:
        """All attachment metadata, newest first."""
        rows = self._fetch_all(_ATTACHMENT_SELECT, "attachments")
        return [
            Attachment(
                id=str(r[0]),
                contact_id=str(r[1]),
                user_id=str(r[2]),
                file_name=r[3],
                file_path=r[4],
                file_type=r[5],
                file_size=r[6],
                created_at=r[7],
            )
            for r in rows
        ]

    def _fetch_all(self, sql: str, what: str) -> list[tuple[Any, ...]]:
        try:
            with self._conn.cursor() as cur:
                cur.execute(sql)
                rows = cur.fetchall()
            self._conn.commit()
        except psycopg2.Error as e:
            self._rollback()
            raise StorageError(f"Failed to fetch {what}: {str(e).strip()}") from e
        return rows

    def _rollback(self) -> None:
        try:
            self._conn.rollback()
        except psycopg2.Error:  # pragma: no cover - connection already broken
            logger.debug("rollback failed", exc_info=True)
