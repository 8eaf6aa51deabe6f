from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

One record per isolated failure (a rejected import batch, an attachment that
could not be downloaded). The key set is fixed; `to_json_line` never emits
extra keys.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        operation: "import" or "export"
        source: spreadsheet file name (import) or contact name (export)
        unit: failing unit, e.g. "batch 2" or an attachment storage path
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: backend error message
    """
    timestamp: str  # ISO8601 UTC
    operation: str
    source: str
    unit: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(operation: str, source: str, unit: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            operation=operation,
            source=source,
            unit=unit,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
