# roster/settings.py
# -*- coding: utf-8 -*-
"""
키-값 설정 저장소.

SettingsStore는 get/set/delete만 있는 저장소를 주입받는다. 운영에서는
META 탭(key, value 2열)을 쓰는 SheetKeyValue, 테스트에서는 dict 기반 가짜를 쓴다.
"""

import json
import logging
from typing import List, Optional, Protocol

from roster.config import ME_EMP_ID_KEY, META_HEADERS, POSITIONS_KEY
from roster.gsheet import _retry, table_lock

logger = logging.getLogger(__name__)


class KeyValueRepo(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...


class SheetKeyValue:
    """META 탭 기반 저장소. 1행은 META_HEADERS."""

    def __init__(self, ws):
        self.ws = ws
        self._lock = table_lock(ws)

    def _rows(self) -> list:
        return _retry(self.ws.get_all_values) or []

    def _ensure_header(self, rows: list) -> None:
        if not rows or not any(str(x).strip() for x in rows[0]):
            _retry(self.ws.update, range_name="A1:B1", values=[META_HEADERS], value_input_option="RAW")

    def get(self, key: str) -> Optional[str]:
        for r in self._rows()[1:]:
            if len(r) >= 1 and r[0] == key:
                return r[1] if len(r) >= 2 else ""
        return None

    def set(self, key: str, value: str) -> None:
        with self._lock:
            rows = self._rows()
            self._ensure_header(rows)
            for i, r in enumerate(rows[1:], start=2):
                if len(r) >= 1 and r[0] == key:
                    _retry(self.ws.update, range_name=f"B{i}", values=[[value]], value_input_option="RAW")
                    return
            _retry(self.ws.append_row, [key, value], value_input_option="RAW", table_range="A1")

    def delete(self, key: str) -> None:
        with self._lock:
            for i, r in enumerate(self._rows()[1:], start=2):
                if len(r) >= 1 and r[0] == key:
                    _retry(self.ws.delete_rows, i)
                    return


class SettingsStore:
    def __init__(self, repo: KeyValueRepo):
        self.repo = repo

    # 직책 목록 (JSON 배열)
    def get_positions(self) -> List[str]:
        raw = self.repo.get(POSITIONS_KEY)
        if not raw:
            return []
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError(f"{POSITIONS_KEY} is not a JSON list")
        return [str(x) for x in data]

    def save_positions(self, positions) -> List[str]:
        clean = [str(p).strip() for p in (positions or []) if p is not None]
        clean = [p for p in clean if p]
        self.repo.set(POSITIONS_KEY, json.dumps(clean, ensure_ascii=False))
        logger.info("positions list saved (%d)", len(clean))
        return clean

    # 내 사번
    def get_me(self) -> str:
        return self.repo.get(ME_EMP_ID_KEY) or ""

    def set_me(self, emp_id: str) -> None:
        emp_id = str(emp_id or "").strip()
        if not emp_id:
            self.clear_me()
            return
        self.repo.set(ME_EMP_ID_KEY, emp_id)

    def clear_me(self) -> None:
        self.repo.delete(ME_EMP_ID_KEY)
