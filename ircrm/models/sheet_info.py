from __future__ import annotations

from dataclasses import dataclass

"""SheetInfo model: one selectable sheet of an uploaded workbook."""

__all__ = [
    "SheetInfo",
]


@dataclass(frozen=True)
class SheetInfo:
    name: str  # sheet name as written in the workbook
    row_count: int  # data rows (header excluded, blank rows dropped)
