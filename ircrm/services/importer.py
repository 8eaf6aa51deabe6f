from __future__ import annotations

import logging
import math
import time
from collections.abc import Sequence
from typing import Any

from ircrm.db.batch_insert import StorageError
from ircrm.errors import NoValidContactsError, NotAuthenticatedError
from ircrm.logging.error_log import ErrorLogBuffer, ErrorRecord
from ircrm.models.preview_contact import PreviewContact
from ircrm.models.processing_result import BatchStatsAccumulator, ImportResult

from .progress import ProgressCallback, ProgressEmitter

"""Import orchestration: preview contacts -> storage, in fixed-size batches.

Flow:
1. resolve the acting user (terminal failure when not authenticated)
2. drop nameless rows (counted as skipped); terminal failure if none remain
3. write batches of `batch_size` one at a time, each as a single atomic insert
4. a failed batch is recorded and its rows counted as skipped; the loop goes on

Nothing is retried. Batches are strictly sequential so progress is monotonic
and the backend only ever sees one write in flight.
"""

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "import_contacts",
]

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50


def _percent(done: int, total: int) -> int:
    # round half up
    return math.floor(100 * done / total + 0.5)


def import_contacts(
    contacts: Sequence[PreviewContact],
    store: Any,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    on_progress: ProgressCallback | None = None,
    error_log: ErrorLogBuffer | None = None,
    source: str = "<upload>",
    batch_stats: BatchStatsAccumulator | None = None,
) -> ImportResult:
    """Write preview contacts to the store.

    Args:
        contacts: output of the row normalizer (nameless rows allowed)
        store: record store exposing current_user_id() / insert_contacts()
        batch_size: rows per insert request
        on_progress: callback(message, percent), called before each batch
        error_log: optional JSON Lines buffer for failed batches
        source: file name recorded in the error log
        batch_stats: optional accumulator for per-batch write timings

    Returns:
        ImportResult with imported / skipped counts and batch error messages

    Raises:
        NotAuthenticatedError: no acting user
        NoValidContactsError: no contact has a name
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    user_id = store.current_user_id()
    if not user_id:
        raise NotAuthenticatedError("Not authenticated")

    valid = [c for c in contacts if c.has_name]
    total = len(valid)
    if total == 0:
        raise NoValidContactsError("No valid contacts found (name is required)")

    result = ImportResult()
    result.record_skipped(len(contacts) - total)
    if result.skipped:
        logger.info("skipping %d rows without a name", result.skipped)

    progress = ProgressEmitter(on_progress)
    stats = batch_stats if batch_stats is not None else BatchStatsAccumulator()
    start = time.perf_counter()

    for batch_number, offset in enumerate(range(0, total, batch_size), start=1):
        batch = valid[offset:offset + batch_size]
        last_row = offset + len(batch)
        progress(f"Importing contacts {offset + 1} - {last_row} of {total}...", _percent(last_row, total))

        batch_start = time.perf_counter()
        try:
            store.insert_contacts(user_id, batch)
        except StorageError as e:
            logger.warning("batch %d (rows %d-%d) failed: %s", batch_number, offset + 1, last_row, e)
            result.record_batch_failure(batch_number, len(batch), str(e))
            if error_log is not None:
                error_log.append(ErrorRecord.create(
                    operation="import",
                    source=source,
                    unit=f"batch {batch_number}",
                    error_type="BATCH_INSERT_ERROR",
                    message=str(e),
                ))
        else:
            result.record_batch_success(len(batch))
            logger.debug("batch %d inserted rows %d-%d", batch_number, offset + 1, last_row)
        finally:
            stats.add_batch_time(time.perf_counter() - batch_start)

    result.elapsed_seconds = time.perf_counter() - start
    return result
