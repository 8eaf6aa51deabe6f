from __future__ import annotations

from datetime import datetime

from ircrm.excel.row_mapper import map_row, map_rows
from ircrm.models.preview_contact import INSERT_COLUMNS, PreviewContact


def test_basic_row_with_synonym_headers():
    row = {"Full Name": "Jane Doe", "Company": "Acme", "Priorty": "2"}
    c = map_row(row)
    assert c.name == "Jane Doe"
    assert c.institution == "Acme"
    assert c.priority == 2
    assert c.email is None
    assert c.details is None
    assert c.source_sheet is None


def test_unmapped_columns_are_dropped():
    c = map_row({"Name": "Jane", "Website": "acme.example", "Unnamed: 4": "x"})
    assert c == PreviewContact(name="Jane")


def test_serial_date_cell():
    c = map_row({"Name": "Jane", "Date": 45000})
    assert c.last_interaction_date == "2023-03-15"


def test_native_date_cell():
    c = map_row({"Name": "Jane", "Date of last interaction": datetime(2024, 3, 15)})
    assert c.last_interaction_date == "2024-03-15"


def test_unparseable_date_and_priority_are_absent_not_errors():
    c = map_row({"Name": "Jane", "Date": "sometime soon", "Priority": "N/A"})
    assert c.name == "Jane"
    assert c.last_interaction_date is None
    assert c.priority is None


def test_falsy_cells_are_skipped():
    c = map_row({"Name": "Jane", "Phone": 0, "Email": "", "Location": None, "Priority": 0})
    assert c.phone is None
    assert c.email is None
    assert c.location is None
    assert c.priority is None


def test_numeric_phone_is_rendered_without_decimal():
    c = map_row({"Name": "Jane", "Phone": 5551234.0})
    assert c.phone == "5551234"


def test_notes_accumulate_in_column_order():
    row = {
        "Name": "Jane",
        "Notes": "Met at conference",
        "Last interaction": "Call in March",
        "Comments": "Follow up",
        "Documents provided": "NDA",
    }
    c = map_row(row)
    assert c.details == (
        "Met at conference\n"
        "Last interaction: Call in March\n"
        "Follow up\n"
        "Documents provided: NDA"
    )


def test_sheet_marker_leads_the_notes():
    c = map_row({"Name": "Jane", "Notes": "Met at conference"}, source_sheet="Q1 Meetings")
    assert c.details == "[Q1 Meetings]\nMet at conference"
    assert c.source_sheet == "Q1 Meetings"


def test_sheet_marker_alone():
    c = map_row({"Name": "Jane"}, source_sheet="Funds")
    assert c.details == "[Funds]"


def test_nameless_row_still_maps():
    c = map_row({"Email": "x@example.com"})
    assert c.name == ""
    assert not c.has_name
    assert c.email == "x@example.com"


def test_whitespace_name_is_not_a_name():
    c = map_row({"Name": "   "})
    assert not c.has_name


def test_numeric_string_date_respects_serial_range():
    row = {"Name": "Jane", "Date": "30000"}
    assert map_row(row).last_interaction_date is None
    assert map_row(row, serial_range=(20000, 70000)).last_interaction_date == "1982-02-18"


def test_map_rows_preserves_order():
    rows = [{"Name": "A"}, {"Email": "b@example.com"}, {"Name": "C"}]
    out = map_rows(rows, "S")
    assert [c.name for c in out] == ["A", "", "C"]
    assert all(c.source_sheet == "S" for c in out)


def test_insert_values_follow_insert_columns():
    c = PreviewContact(name="Jane", email="j@example.com", priority=3, details="d")
    values = dict(zip(INSERT_COLUMNS, c.insert_values(), strict=True))
    assert values["name"] == "Jane"
    assert values["email"] == "j@example.com"
    assert values["priority"] == 3
    assert values["details"] == "d"
    assert values["last_interaction_date"] is None
