"""Domain models for the IR CRM import/export pipeline.

This package contains the record types read from storage, the transient
pipeline entities (preview contacts, sheet listings) and the result
accumulators returned by the orchestrators.
"""

from .contact import PRIORITY_RANGE, Attachment, Contact, ContactBundle
from .preview_contact import INSERT_COLUMNS, PreviewContact
from .processing_result import BatchStatsAccumulator, ExportResult, ImportResult
from .sheet_info import SheetInfo

__all__ = [
    # Stored records
    "Attachment",
    "Contact",
    "ContactBundle",
    "PRIORITY_RANGE",
    # Pipeline entities
    "INSERT_COLUMNS",
    "PreviewContact",
    "SheetInfo",
    # Results
    "BatchStatsAccumulator",
    "ExportResult",
    "ImportResult",
]
