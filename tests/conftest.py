# Shared pytest fixtures
from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, date, datetime
from pathlib import Path

import pandas as pd
import pytest

from ircrm.db.batch_insert import StorageError
from ircrm.db.object_store import ObjectStoreError
from ircrm.logging.init import reset_logging
from ircrm.models.contact import Attachment, Contact
from ircrm.models.preview_contact import PreviewContact


class FakeStore:
    """In-memory record store.

    `fail_batches` holds 1-based insert call numbers that raise StorageError.
    """

    def __init__(self, user_id: str | None = "user-1") -> None:
        self.user_id = user_id
        self.fail_batches: set[int] = set()
        self.insert_calls: list[list[PreviewContact]] = []
        self.inserted: list[PreviewContact] = []
        self.contacts: list[Contact] = []
        self.attachments: list[Attachment] = []
        self.closed = False

    def current_user_id(self) -> str | None:
        return self.user_id

    def insert_contacts(self, user_id: str, contacts: Sequence[PreviewContact]) -> int:
        self.insert_calls.append(list(contacts))
        if len(self.insert_calls) in self.fail_batches:
            raise StorageError("new row violates check constraint \"contacts_priority_check\"")
        self.inserted.extend(contacts)
        return len(contacts)

    def fetch_contacts(self) -> list[Contact]:
        return sorted(self.contacts, key=lambda c: c.name)

    def fetch_attachments(self) -> list[Attachment]:
        return list(self.attachments)

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> FakeStore:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class FakeObjectStore:
    def __init__(self, objects: dict[str, bytes] | None = None) -> None:
        self.objects = dict(objects or {})
        self.downloads: list[str] = []

    def download(self, path: str) -> bytes:
        self.downloads.append(path)
        if path not in self.objects:
            raise ObjectStoreError(f"object not found: {path}")
        return self.objects[path]


def make_contact(contact_id: str, name: str, **kwargs) -> Contact:
    defaults = dict(
        user_id="user-1",
        created_at=datetime(2024, 3, 15, 14, 30, tzinfo=UTC),
        updated_at=datetime(2024, 3, 16, 9, 5, tzinfo=UTC),
    )
    defaults.update(kwargs)
    return Contact(id=contact_id, name=name, **defaults)


def make_attachment(attachment_id: str, contact_id: str, file_name: str, **kwargs) -> Attachment:
    defaults = dict(
        user_id="user-1",
        file_path=f"{contact_id}/{attachment_id}-{file_name}",
        file_type="application/pdf",
        file_size=3,
        created_at=datetime(2024, 3, 15, 12, 0, tzinfo=UTC),
    )
    defaults.update(kwargs)
    return Attachment(id=attachment_id, contact_id=contact_id, file_name=file_name, **defaults)


@pytest.fixture()
def temp_workdir(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "data").mkdir()
    (tmp_path / "logs").mkdir()
    (tmp_path / "storage").mkdir()
    monkeypatch.chdir(tmp_path)
    for var in ("DATABASE_URL", "PGDSN", "IRCRM_USER_ID"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture()
def sample_config_yaml() -> str:
    return """user_id: user-1
timezone: UTC
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
storage:
  root: ./storage
import:
  batch_size: 50
export:
  output_directory: ./exports
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "ircrm.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def make_workbook(tmp_path: Path):
    """Write an .xlsx file; each sheet is [header, *rows]."""
    def _make(name: str, sheets: dict[str, list[list[object]]]) -> Path:
        path = tmp_path / name
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            for sheet_name, rows in sheets.items():
                df = pd.DataFrame(rows[1:], columns=rows[0]) if rows else pd.DataFrame()
                df.to_excel(writer, sheet_name=sheet_name, index=False)
        return path
    return _make


@pytest.fixture()
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture()
def objects() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture()
def export_store() -> FakeStore:
    """Two contacts with attachments, one without."""
    s = FakeStore()
    s.contacts = [
        make_contact("c1", "Jane Doe", institution="Acme Capital", priority=2,
                     last_interaction_date=date(2024, 3, 15), details="Met at conference"),
        make_contact("c2", "Bob: Smith/Jr", email="bob@example.com"),
        make_contact("c3", "Alice Zhang"),
    ]
    s.attachments = [
        make_attachment("a1", "c1", "deck.pdf"),
        make_attachment("a2", "c1", "notes?.txt"),
        make_attachment("a3", "c2", "term sheet.docx"),
    ]
    return s


@pytest.fixture()
def export_objects(export_store: FakeStore) -> FakeObjectStore:
    return FakeObjectStore({a.file_path: f"payload-{a.id}".encode() for a in export_store.attachments})


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def contact_factory():
    return make_contact


@pytest.fixture()
def attachment_factory():
    return make_attachment
