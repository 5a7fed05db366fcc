# roster/store.py
# -*- coding: utf-8 -*-
"""
직원 시트 CRUD.

시트 구조: 1행 헤더(HEADERS), 2행부터 직원 1명당 1행. A열(사번)이 키.
사번이 빈 행은 레코드로 보지 않는다.
"""

import logging
from collections import Counter
from typing import Any, Dict, Iterable, List

from roster.config import HEADER_FORMAT, HEADERS, STATUS_HEADER
from roster.errors import DuplicateKeyError, InvalidRecordError, NotFoundError
from roster.gsheet import _ensure_capacity, _retry, a1_row, col_letter, table_lock
from roster.records import Record, emp_id_of, record_to_row, row_to_record

logger = logging.getLogger(__name__)

NCOLS = len(HEADERS)
LAST_COL = col_letter(NCOLS)
HEADER_RANGE = a1_row(1, NCOLS)

CREATED = "created"
MIGRATED = "migrated"
ALREADY = "already initialized"


class EmployeeStore:
    def __init__(self, ws):
        self.ws = ws
        self._lock = table_lock(ws)

    # ----------------------------
    # 조회
    # ----------------------------
    def _key_column(self) -> List[str]:
        """A열(헤더 제외). 인덱스 i → 시트 i+2행."""
        return [str(v).strip() for v in (_retry(self.ws.col_values, 1) or [])[1:]]

    def _find_row(self, emp_id: str) -> int:
        key = str(emp_id or "").strip()
        if not key:
            return 0
        for i, v in enumerate(self._key_column(), start=2):
            if v == key:
                return i
        return 0

    def list_all(self) -> List[Record]:
        vals = _retry(self.ws.get_all_values) or []
        out = []
        for row in vals[1:]:
            if not row or not str(row[0]).strip():
                continue
            out.append(row_to_record(row))
        return out

    # ----------------------------
    # 변경
    # ----------------------------
    def add(self, rec: Dict[str, Any]) -> None:
        emp_id = emp_id_of(rec)
        if not emp_id:
            raise InvalidRecordError("사번(empId)은 필수입니다.")
        with self._lock:
            if emp_id in self._key_column():
                raise DuplicateKeyError(emp_id)
            row = record_to_row({**rec, "empId": emp_id})
            _retry(self.ws.append_row, row, value_input_option="RAW", table_range="A1")
        logger.info("employee %s added", emp_id)

    def update(self, rec: Dict[str, Any], original_emp_id: str) -> None:
        new_id = emp_id_of(rec)
        if not new_id:
            raise InvalidRecordError("사번(empId)은 필수입니다.")
        old_id = str(original_emp_id or "").strip()
        if not old_id:
            raise NotFoundError(old_id)
        with self._lock:
            keys = self._key_column()
            try:
                row_idx = keys.index(old_id) + 2
            except ValueError:
                raise NotFoundError(old_id) from None
            if new_id != old_id and new_id in keys:
                raise DuplicateKeyError(new_id)
            row = record_to_row({**rec, "empId": new_id})
            _retry(self.ws.update, range_name=a1_row(row_idx, NCOLS), values=[row], value_input_option="RAW")
        if new_id != old_id:
            logger.info("employee %s updated (renamed to %s)", old_id, new_id)
        else:
            logger.info("employee %s updated", old_id)

    def delete(self, emp_id: str) -> None:
        key = str(emp_id or "").strip()
        with self._lock:
            row_idx = self._find_row(key)
            if row_idx == 0:
                raise NotFoundError(key)
            _retry(self.ws.delete_rows, row_idx)
        logger.info("employee %s deleted (row %d)", key, row_idx)

    def save_all(self, records: Iterable[Dict[str, Any]]) -> int:
        """헤더 재작성 → 데이터 영역 비우기 → 전체 다시 쓰기. 중복 사번도 그대로 쓴다."""
        rows = [record_to_row(r) for r in (records or [])]
        dups = [k for k, n in Counter(r[0] for r in rows if r[0].strip()).items() if n > 1]
        if dups:
            logger.warning("save_all: duplicate empId written as-is: %s", ", ".join(dups))
        with self._lock:
            _ensure_capacity(self.ws, len(rows) + 1, NCOLS)
            _retry(self.ws.update, range_name=HEADER_RANGE, values=[HEADERS], value_input_option="RAW")
            # 표준 열 밖(J열 이후)에 남은 값까지 비운다
            last_col = col_letter(max(int(getattr(self.ws, "col_count", NCOLS) or NCOLS), NCOLS))
            _retry(self.ws.batch_clear, [f"A2:{last_col}"])
            if rows:
                _retry(self.ws.update, range_name=f"A2:{LAST_COL}{len(rows) + 1}", values=rows, value_input_option="RAW")
        logger.info("save_all: %d rows written", len(rows))
        return len(rows)

    # ----------------------------
    # 헤더 초기화 / 마이그레이션
    # ----------------------------
    def initialize(self) -> str:
        with self._lock:
            header = [str(h).strip() for h in (_retry(self.ws.row_values, 1) or [])]
            if not any(header):
                _ensure_capacity(self.ws, 1, NCOLS)
                _retry(self.ws.update, range_name=HEADER_RANGE, values=[HEADERS], value_input_option="RAW")
                _retry(self.ws.format, HEADER_RANGE, HEADER_FORMAT)
                _retry(self.ws.freeze, rows=1)
                logger.info("header row created")
                return CREATED

            target = HEADERS.index(STATUS_HEADER)
            if STATUS_HEADER in header:
                current = header.index(STATUS_HEADER)
                if current == target:
                    return ALREADY
                self._move_column(current, target)
                logger.info("Status column moved %d -> %d", current, target)
                return MIGRATED

            self._insert_blank_column(target)
            logger.info("Status column inserted at %d", target)
            return MIGRATED

    def _rewrite_grid(self, vals: List[List[str]]) -> None:
        width = max(len(r) for r in vals)
        grid = [list(r) + [""] * (width - len(r)) for r in vals]
        _ensure_capacity(self.ws, len(grid), width)
        _retry(self.ws.update, range_name=f"A1:{col_letter(width)}{len(grid)}", values=grid, value_input_option="RAW")

    def _move_column(self, src: int, dst: int) -> None:
        """src 열(헤더+데이터)을 dst 위치로 옮긴다. 0-based."""
        vals = _retry(self.ws.get_all_values) or []
        width = max(len(r) for r in vals)
        moved = []
        for r in vals:
            r = list(r) + [""] * (width - len(r))
            v = r.pop(src)
            r.insert(dst, v)
            moved.append(r)
        self._rewrite_grid(moved)

    def _insert_blank_column(self, dst: int) -> None:
        vals = _retry(self.ws.get_all_values) or []
        out = []
        for i, r in enumerate(vals):
            r = list(r) + [""] * max(0, dst - len(r))
            r.insert(dst, STATUS_HEADER if i == 0 else "")
            out.append(r)
        self._rewrite_grid(out)
