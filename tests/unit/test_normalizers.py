from __future__ import annotations

import math
from datetime import date, datetime

import numpy as np
import pandas as pd
import pytest

from ircrm.excel.normalizers import (
    is_falsy,
    parse_date,
    parse_priority,
    serial_to_iso_date,
    to_text,
)


class TestSerialDates:
    def test_known_serials(self):
        assert serial_to_iso_date(1) == "1900-01-01"
        assert serial_to_iso_date(59) == "1900-02-28"
        assert serial_to_iso_date(61) == "1900-03-01"
        assert serial_to_iso_date(45000) == "2023-03-15"
        assert serial_to_iso_date(45366) == "2024-03-15"

    def test_fictitious_leap_day(self):
        assert serial_to_iso_date(60) == "1900-02-29"

    def test_time_fraction_is_ignored_unless_it_rounds_to_midnight(self):
        assert serial_to_iso_date(45366.75) == "2024-03-15"
        assert serial_to_iso_date(45366.999999) == "2024-03-16"

    @pytest.mark.parametrize("serial", [-1, 0, 2958466, math.inf, math.nan])
    def test_out_of_range(self, serial):
        assert serial_to_iso_date(serial) is None


class TestParseDate:
    def test_numeric_serial(self):
        assert parse_date(45000) == "2023-03-15"
        assert parse_date(45000.0) == "2023-03-15"
        assert parse_date(np.int64(45000)) == "2023-03-15"

    def test_numeric_string_inside_serial_window(self):
        assert parse_date("45000") == "2023-03-15"
        assert parse_date(" 45366 ") == "2024-03-15"

    def test_numeric_string_outside_serial_window(self):
        assert parse_date("12") is None
        assert parse_date("40000") is None  # bounds are exclusive
        assert parse_date("60000") is None

    def test_custom_serial_window(self):
        assert parse_date("30000", serial_range=(20000, 70000)) == "1982-02-18"

    def test_iso_literal(self):
        assert parse_date("2024-03-15") == "2024-03-15"

    @pytest.mark.parametrize(
        "text",
        ["March 15, 2024", "15 Mar 2024", "2024/03/15", "03/15/2024", "2024-03-15T18:45:00"],
    )
    def test_other_literals(self, text):
        assert parse_date(text) == "2024-03-15"

    def test_native_values(self):
        assert parse_date(date(2024, 3, 15)) == "2024-03-15"
        assert parse_date(datetime(2024, 3, 15, 23, 59)) == "2024-03-15"
        assert parse_date(pd.Timestamp("2024-03-15 08:00")) == "2024-03-15"

    @pytest.mark.parametrize(
        "value", ["not a date", "", "   ", None, math.nan, pd.NaT, True, False, [2024], object()]
    )
    def test_unparseable_yields_none(self, value):
        assert parse_date(value) is None

    def test_huge_integer_cell_yields_none(self):
        assert parse_date(10**400) is None
        assert parse_date(-(10**400)) is None


class TestParsePriority:
    @pytest.mark.parametrize("value", ["N/A", "n/a", "-", "", "   ", 0, 6, "abc", None, math.nan, -1, "7", 2.5, True])
    def test_absent(self, value):
        assert parse_priority(value) is None

    @pytest.mark.parametrize("value", ["3", 3, 3.0, " 3 ", "3 - medium", np.int64(3), np.float64(3.0)])
    def test_three(self, value):
        assert parse_priority(value) == 3

    def test_full_range(self):
        assert [parse_priority(v) for v in range(0, 7)] == [None, 1, 2, 3, 4, 5, None]

    def test_huge_integer_cell_yields_none(self):
        assert parse_priority(10**400) is None
        assert parse_priority(-(10**400)) is None

    def test_overlong_digit_string_yields_none(self):
        assert parse_priority("9" * 5000) is None


def test_is_falsy_mirrors_spreadsheet_blank_cells():
    assert is_falsy(None)
    assert is_falsy("")
    assert is_falsy(math.nan)
    assert is_falsy(0)
    assert is_falsy(False)
    assert not is_falsy("0")
    assert not is_falsy(" x ")
    assert not is_falsy(1)


def test_to_text():
    assert to_text(5551234.0) == "5551234"
    assert to_text(12.5) == "12.5"
    assert to_text("  Acme  ") == "Acme"
    assert to_text(datetime(2024, 3, 15)) == "2024-03-15"
    assert to_text(42) == "42"
