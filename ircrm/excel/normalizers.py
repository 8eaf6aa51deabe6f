from __future__ import annotations

import math
import numbers
import re
from datetime import date, datetime, timedelta
from typing import Any

import numpy as np
import pandas as pd
from dateutil import parser as date_parser

from ircrm.models.contact import PRIORITY_RANGE

"""Cell value normalizers.

All functions here are total: any input shape that cannot be understood
degrades to None ("field absent") instead of raising. Spreadsheet input is
user data and a bad cell must never abort an import.

Serial dates follow the spreadsheet 1900 date system: serial 1 is 1900-01-01
and serial 60 is the fictitious 1900-02-29 kept for compatibility, so every
serial above 60 is one day ahead of a plain day count.
"""

__all__ = [
    "DEFAULT_SERIAL_RANGE",
    "MAX_SERIAL",
    "PRIORITY_SENTINELS",
    "is_blank",
    "is_falsy",
    "to_text",
    "serial_to_iso_date",
    "parse_date",
    "parse_priority",
]

# Numeric strings strictly inside this range are read as serial dates
# (roughly 2009-06 .. 2064-04). Configurable via import.serial_date_range.
DEFAULT_SERIAL_RANGE: tuple[float, float] = (40000, 60000)

MAX_SERIAL = 2958465  # 9999-12-31
_SERIAL_EPOCH = date(1899, 12, 31)
_LEAP_BUG_SERIAL = 60
_SECONDS_PER_DAY = 86400

PRIORITY_SENTINELS = frozenset({"N/A", "n/a", "-"})

_NUMERIC = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)")
_LEADING_INT = re.compile(r"[+-]?\d+")


def is_blank(value: Any) -> bool:
    """None, NaN/NaT or a whitespace-only string."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _is_bool(value: Any) -> bool:
    return isinstance(value, (bool, np.bool_))


def is_falsy(value: Any) -> bool:
    """Cells skipped by the row normalizer: blanks, zero and False."""
    if is_blank(value):
        return True
    if _is_bool(value):
        return not value
    if isinstance(value, numbers.Number):
        return value == 0
    return False


def to_text(value: Any) -> str:
    """Render a cell as trimmed text (`5551234.0` -> `"5551234"`)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def serial_to_iso_date(serial: float) -> str | None:
    """Decode a spreadsheet serial (1900 date system) to `YYYY-MM-DD`."""
    if not math.isfinite(serial) or serial < 0 or serial > MAX_SERIAL:
        return None
    days = int(serial)
    # time part is rounded to the second; 23:59:59.6 rolls into the next day
    seconds = math.floor((serial - days) * _SECONDS_PER_DAY + 0.5)
    if seconds >= _SECONDS_PER_DAY:
        days += 1
    if days < 1 or days > MAX_SERIAL:
        return None
    if days == _LEAP_BUG_SERIAL:
        return "1900-02-29"
    if days > _LEAP_BUG_SERIAL:
        days -= 1
    return (_SERIAL_EPOCH + timedelta(days=days)).isoformat()


def parse_date(
    value: Any, serial_range: tuple[float, float] = DEFAULT_SERIAL_RANGE
) -> str | None:
    """Normalize a date cell to `YYYY-MM-DD`.

    Accepts a serial number, a date-like string or a native date/datetime
    (including pandas Timestamp). Returns None for anything else.
    """
    if is_blank(value) or _is_bool(value):
        return None

    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    if isinstance(value, numbers.Real):
        try:
            serial = float(value)
        except (OverflowError, ValueError):
            return None
        return serial_to_iso_date(serial)

    if not isinstance(value, str):
        return None

    text = value.strip()
    if _NUMERIC.fullmatch(text):
        number = float(text)
        low, high = serial_range
        if low < number < high:
            return serial_to_iso_date(number)
        # bare numbers outside the serial window are not calendar dates
        return None

    try:
        parsed = date_parser.parse(text, default=datetime(date.today().year, 1, 1))
    except (ValueError, OverflowError):
        return None
    return parsed.date().isoformat()


def parse_priority(value: Any) -> int | None:
    """Coerce a priority cell to 1..5, anything else to None (never clamped)."""
    if is_blank(value) or _is_bool(value):
        return None

    if isinstance(value, numbers.Integral):
        priority = int(value)
    elif isinstance(value, numbers.Real):
        try:
            number = float(value)
        except (OverflowError, ValueError):
            return None
        if not number.is_integer():
            return None
        priority = int(number)
    else:
        text = str(value).strip()
        if text in PRIORITY_SENTINELS:
            return None
        match = _LEADING_INT.match(text)
        if match is None:
            return None
        try:
            priority = int(match.group())
        except ValueError:
            # digit strings past the int conversion limit
            return None

    return priority if priority in PRIORITY_RANGE else None
