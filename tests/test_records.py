# -*- coding: utf-8 -*-
from roster.config import FIELDS
from roster.records import emp_id_of, normalize_record, record_to_row, row_to_record


def test_row_to_record_fills_missing_cells():
    rec = row_to_record(["E1", "Jo"])
    assert rec["empId"] == "E1"
    assert rec["firstName"] == "Jo"
    assert all(rec[f] == "" for f in FIELDS[2:])


def test_row_to_record_ignores_extra_cells_and_none():
    rec = row_to_record(["E1", None] + [""] * 7 + ["extra"])
    assert list(rec) == FIELDS
    assert rec["firstName"] == ""


def test_record_to_row_uses_schema_order():
    row = record_to_row({"photoUrl": "u", "empId": "E9", "status": "active", "bogus": "x"})
    assert len(row) == len(FIELDS)
    assert row[0] == "E9"
    assert row[FIELDS.index("status")] == "active"
    assert row[-1] == "u"


def test_non_string_values_are_stringified():
    assert record_to_row({"empId": 7, "phone": None})[:4] == ["7", "", "", ""]


def test_normalize_and_emp_id():
    assert normalize_record(None) == {f: "" for f in FIELDS}
    assert emp_id_of({"empId": "  E2 "}) == "E2"
    assert emp_id_of({}) == ""
