from __future__ import annotations

import logging
import posixpath
import re
import zipfile
from collections.abc import Sequence
from datetime import date
from pathlib import Path
from typing import Any

from ircrm.db.object_store import ObjectStoreError
from ircrm.errors import NothingToExportError
from ircrm.excel.writer import encode_contacts_table, write_contacts_workbook
from ircrm.logging.error_log import ErrorLogBuffer, ErrorRecord
from ircrm.models.contact import Attachment, Contact, ContactBundle
from ircrm.models.processing_result import ExportResult

from .progress import ProgressCallback, ProgressEmitter

"""Export orchestration: every contact and attachment into one zip archive.

Archive layout:
    Contacts.xlsx
    Attachments/<Contact Name>/<File Name>

Only contacts with at least one attachment get a folder. Binaries are
downloaded one at a time; a failed download skips that file only.

Progress milestones: 5 contacts, 15 attachment metadata, 25 spreadsheet,
30..90 downloads, 95 compression, 100 done.
"""

__all__ = [
    "ARCHIVE_PREFIX",
    "ATTACHMENTS_DIR",
    "WORKBOOK_NAME",
    "DEFAULT_COMPRESSION_LEVEL",
    "sanitize_name",
    "archive_filename",
    "group_attachments",
    "export_contacts",
]

logger = logging.getLogger(__name__)

ARCHIVE_PREFIX = "IR_CRM_Backup_"
ATTACHMENTS_DIR = "Attachments"
WORKBOOK_NAME = "Contacts.xlsx"
DEFAULT_COMPRESSION_LEVEL = 6
UNNAMED_FOLDER = "Unnamed"

_DOWNLOAD_START = 30
_DOWNLOAD_SPAN = 60

_ILLEGAL_PATH_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_DOTS_ONLY = re.compile(r"\.+")


def sanitize_name(name: str) -> str:
    """Replace characters that are illegal in file names with `_`.

    Names made only of dots (`.`, `..`) come back empty so that callers
    fall back to a placeholder instead of writing a relative path segment.
    """
    cleaned = _ILLEGAL_PATH_CHARS.sub("_", name).strip()
    if _DOTS_ONLY.fullmatch(cleaned):
        return ""
    return cleaned


def archive_filename(day: date) -> str:
    """Return the archive name for an export made on `day`.

    Args:
        day: export date

    Returns:
        `IR_CRM_Backup_YYYY-MM-DD.zip`
    """
    return f"{ARCHIVE_PREFIX}{day.isoformat()}.zip"


def group_attachments(
    contacts: Sequence[Contact], attachments: Sequence[Attachment]
) -> list[ContactBundle]:
    """Pair each contact with its attachments (contact order kept, orphans dropped)."""
    by_contact: dict[str, list[Attachment]] = {}
    for attachment in attachments:
        by_contact.setdefault(attachment.contact_id, []).append(attachment)
    return [ContactBundle(contact=c, attachments=by_contact.get(c.id, [])) for c in contacts]


class _EntryNames:
    """Hands out unique names; repeats get ` (2)`, ` (3)`... before the extension."""

    def __init__(self) -> None:
        self._used: set[str] = set()

    def claim(self, name: str) -> str:
        candidate = name
        stem, ext = posixpath.splitext(name)
        n = 2
        while candidate.lower() in self._used:
            candidate = f"{stem} ({n}){ext}"
            n += 1
        self._used.add(candidate.lower())
        return candidate


def export_contacts(
    store: Any,
    objects: Any,
    output_dir: Path,
    *,
    on_progress: ProgressCallback | None = None,
    today: date | None = None,
    tz: str = "UTC",
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
    error_log: ErrorLogBuffer | None = None,
) -> ExportResult:
    """Build the backup archive in `output_dir`.

    Args:
        store: record store exposing fetch_contacts() / fetch_attachments()
        objects: object store exposing download(path) -> bytes
        output_dir: directory receiving IR_CRM_Backup_<date>.zip
        on_progress: callback(message, percent)
        today: export date embedded in the archive name (default: today)
        tz: timezone used for Created/Updated columns
        compression_level: deflate level
        error_log: optional JSON Lines buffer for failed downloads

    Raises:
        NothingToExportError: the store holds no contacts
        StorageError: contacts or attachment metadata could not be fetched
    """
    progress = ProgressEmitter(on_progress)

    progress("Fetching contacts...", 5)
    contacts = store.fetch_contacts()
    if not contacts:
        raise NothingToExportError("No contacts to export")

    progress("Fetching attachments info...", 15)
    attachments = store.fetch_attachments()
    bundles = group_attachments(contacts, attachments)
    total_files = sum(len(b.attachments) for b in bundles)
    logger.info("exporting %d contacts with %d attachments", len(bundles), total_files)

    progress("Generating Excel file...", 25)
    workbook = write_contacts_workbook(encode_contacts_table(bundles, tz))

    output_dir.mkdir(parents=True, exist_ok=True)
    archive_path = output_dir / archive_filename(today or date.today())
    partial_path = archive_path.with_name(archive_path.name + ".part")
    result = ExportResult(
        archive_path=archive_path,
        contact_count=len(bundles),
        attachment_count=total_files,
    )

    try:
        with zipfile.ZipFile(
            partial_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=compression_level
        ) as archive:
            archive.writestr(WORKBOOK_NAME, workbook)
            _write_attachments(archive, bundles, objects, total_files, progress, result, error_log)
            progress("Creating zip file...", 95)
        partial_path.replace(archive_path)
    except Exception:
        partial_path.unlink(missing_ok=True)
        raise

    progress(f"Export complete: {archive_path.name}", 100)
    return result


def _write_attachments(
    archive: zipfile.ZipFile,
    bundles: Sequence[ContactBundle],
    objects: Any,
    total_files: int,
    progress: ProgressEmitter,
    result: ExportResult,
    error_log: ErrorLogBuffer | None,
) -> None:
    folders = _EntryNames()
    done = 0
    for bundle in bundles:
        if not bundle.attachments:
            continue
        contact = bundle.contact
        folder = folders.claim(sanitize_name(contact.name) or UNNAMED_FOLDER)
        files = _EntryNames()

        for attachment in bundle.attachments:
            percent = _DOWNLOAD_START + done * _DOWNLOAD_SPAN / total_files
            progress(f"Downloading: {attachment.file_name} ({contact.name})", round(percent))
            done += 1
            try:
                payload = objects.download(attachment.file_path)
            except ObjectStoreError as e:
                logger.warning("failed to download %s (%s): %s", attachment.file_name, contact.name, e)
                result.errors.append(f"Failed to download {attachment.file_name} ({contact.name}): {e}")
                if error_log is not None:
                    error_log.append(ErrorRecord.create(
                        operation="export",
                        source=contact.name,
                        unit=attachment.file_path,
                        error_type="ATTACHMENT_DOWNLOAD_ERROR",
                        message=str(e),
                    ))
                continue

            file_name = files.claim(sanitize_name(attachment.file_name) or attachment.id)
            archive.writestr(f"{ATTACHMENTS_DIR}/{folder}/{file_name}", payload)
            result.files_written += 1

    if total_files:
        progress("Attachments downloaded", _DOWNLOAD_START + _DOWNLOAD_SPAN)
