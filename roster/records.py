# roster/records.py
# -*- coding: utf-8 -*-

from typing import Any, Dict, List, Sequence

from roster.config import FIELDS

Record = Dict[str, str]


def _cell(v: Any) -> str:
    return "" if v is None else str(v)


def row_to_record(row: Sequence[Any]) -> Record:
    """시트 한 행 → 레코드. 모자란 칸은 ''."""
    row = row or []
    return {f: (_cell(row[i]) if i < len(row) else "") for i, f in enumerate(FIELDS)}


def record_to_row(rec: Dict[str, Any]) -> List[str]:
    """레코드 → 시트 한 행 (FIELDS 순서). 없는 필드는 ''."""
    rec = rec or {}
    return [_cell(rec.get(f)) for f in FIELDS]


def normalize_record(rec: Dict[str, Any]) -> Record:
    return row_to_record(record_to_row(rec))


def emp_id_of(rec: Dict[str, Any]) -> str:
    return _cell((rec or {}).get("empId")).strip()
