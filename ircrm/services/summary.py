from __future__ import annotations

from ..models.processing_result import ExportResult, ImportResult

"""SUMMARY line rendering for the CLI.

Formats:
    SUMMARY import rows={total} imported={n} skipped={n} batches={n} errors={n} elapsed_sec={s}
    SUMMARY export contacts={n} attachments={n} files={n} errors={n} archive={name}
"""

__all__ = [
    "render_import_summary",
    "render_export_summary",
]


def _format_seconds(value: float) -> str:
    # avoid scientific notation for very small values
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_import_summary(result: ImportResult) -> str:
    """Render the import SUMMARY line.

    Examples:
        >>> r = ImportResult(imported=70, skipped=50, errors=["Batch 2 failed: x"], batches=3)
        >>> render_import_summary(r)
        'SUMMARY import rows=120 imported=70 skipped=50 batches=3 errors=1 elapsed_sec=0'
    """
    return (
        f"SUMMARY import rows={result.imported + result.skipped} "
        f"imported={result.imported} "
        f"skipped={result.skipped} "
        f"batches={result.batches} "
        f"errors={len(result.errors)} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )


def render_export_summary(result: ExportResult) -> str:
    """Render the export SUMMARY line.

    Format:
        SUMMARY export contacts=.. attachments=.. files=.. errors=.. archive=<file name>
    """
    return (
        f"SUMMARY export contacts={result.contact_count} "
        f"attachments={result.attachment_count} "
        f"files={result.files_written} "
        f"errors={len(result.errors)} "
        f"archive={result.archive_path.name}"
    )
