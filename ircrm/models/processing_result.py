from __future__ import annotations

import statistics
from dataclasses import dataclass, field
from pathlib import Path

"""Result models for the import and export pipelines.

ImportResult is the accumulator threaded through the batch loop: a failed batch
is an expected outcome and is recorded here instead of being raised.
"""

__all__ = [
    "ImportResult",
    "ExportResult",
    "BatchStatsAccumulator",
]


@dataclass
class ImportResult:
    """Aggregate outcome of one import run.

    Attributes:
        imported: rows written successfully
        skipped: rows without a name plus every row of a failed batch
        errors: one message per failed batch ("Batch 2 failed: ...")
        batches: number of batches submitted
        elapsed_seconds: wall time of the batch loop
    """
    imported: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)
    batches: int = 0
    elapsed_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return not self.errors

    def record_batch_success(self, rows: int) -> None:
        self.batches += 1
        self.imported += rows

    def record_batch_failure(self, batch_number: int, rows: int, message: str) -> None:
        self.batches += 1
        self.skipped += rows
        self.errors.append(f"Batch {batch_number} failed: {message}")

    def record_skipped(self, rows: int) -> None:
        self.skipped += rows


@dataclass
class ExportResult:
    """Aggregate outcome of one export run.

    `attachment_count` counts metadata rows; `files_written` counts binaries that
    actually made it into the archive.
    """
    archive_path: Path
    contact_count: int = 0
    attachment_count: int = 0
    files_written: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


class BatchStatsAccumulator:
    """Collects per-batch write timings for the SUMMARY line."""

    def __init__(self) -> None:
        self.batch_times: list[float] = []

    def add_batch_time(self, elapsed_seconds: float) -> None:
        self.batch_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Calculate batch statistics.

        Returns:
            tuple: (total_batches, avg_batch_seconds, p95_batch_seconds)
        """
        if not self.batch_times:
            return (0, 0.0, 0.0)

        total_batches = len(self.batch_times)
        avg_batch_seconds = statistics.mean(self.batch_times)

        if total_batches == 1:
            p95_batch_seconds = self.batch_times[0]
        else:
            p95_batch_seconds = statistics.quantiles(
                self.batch_times, n=20, method='inclusive'
            )[18]  # 95th percentile (19th out of 20 quantiles, 0-indexed)

        return (total_batches, avg_batch_seconds, p95_batch_seconds)
