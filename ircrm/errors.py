from __future__ import annotations

"""Terminal (whole-operation) errors.

Each of these is raised before any write or fetch side effect and is surfaced
verbatim to the caller. Isolated failures (one import batch, one attachment
download) are not exceptions at the orchestrator level; see ImportResult /
ExportResult.
"""

__all__ = [
    "ProcessingError",
    "UnsupportedFileError",
    "EmptyFileError",
    "NoDataSheetsError",
    "SheetSelectionError",
    "NotAuthenticatedError",
    "NoValidContactsError",
    "NothingToExportError",
]


class ProcessingError(Exception):
    """Base exception for terminal pipeline errors."""


class UnsupportedFileError(ProcessingError):
    pass


class EmptyFileError(ProcessingError):
    pass


class NoDataSheetsError(ProcessingError):
    pass


class SheetSelectionError(ProcessingError):
    pass


class NotAuthenticatedError(ProcessingError):
    pass


class NoValidContactsError(ProcessingError):
    pass


class NothingToExportError(ProcessingError):
    pass
