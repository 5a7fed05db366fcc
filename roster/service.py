# roster/service.py
# -*- coding: utf-8 -*-
"""
화면에서 호출하는 작업 모음. 모든 메서드는 예외를 던지지 않고 Result를 돌려준다.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from roster.errors import RosterError
from roster.photos import PhotoUploader
from roster.result import ErrorKind, Failure, Ok, Result
from roster.settings import SettingsStore
from roster.store import ALREADY, CREATED, EmployeeStore

logger = logging.getLogger(__name__)

INIT_MESSAGES = {
    CREATED: "직원 시트 헤더를 만들었습니다.",
    ALREADY: "이미 초기화된 시트입니다.",
}


def _guard(name: str, fn, *args, **kwargs) -> Result:
    """fn 실행 → Ok / Failure 변환."""
    try:
        return Ok(fn(*args, **kwargs) or {})
    except RosterError as e:
        logger.info("%s rejected: %s", name, e)
        return Failure(e.kind, str(e))
    except Exception as e:
        logger.exception("%s failed", name)
        return Failure(ErrorKind.STORE_FAILURE, str(e) or e.__class__.__name__)


class RosterService:
    def __init__(self, store: EmployeeStore, settings: SettingsStore,
                 uploader: Optional[PhotoUploader] = None):
        self.store = store
        self.settings = settings
        self.uploader = uploader

    # ----------------------------
    # 직원
    # ----------------------------
    def list_employees(self) -> Result:
        return _guard("list_employees", lambda: {"employees": self.store.list_all()})

    def add_employee(self, rec: Dict[str, Any]) -> Result:
        def _do():
            self.store.add(rec)
            return {"message": "직원이 추가되었습니다."}
        return _guard("add_employee", _do)

    def update_employee(self, rec: Dict[str, Any], original_emp_id: str) -> Result:
        def _do():
            self.store.update(rec, original_emp_id)
            return {"message": "직원 정보가 수정되었습니다."}
        return _guard("update_employee", _do)

    def delete_employee(self, emp_id: str) -> Result:
        def _do():
            self.store.delete(emp_id)
            return {"message": "직원이 삭제되었습니다."}
        return _guard("delete_employee", _do)

    def save_all_employees(self, records: Iterable[Dict[str, Any]]) -> Result:
        def _do():
            n = self.store.save_all(records)
            return {"message": f"{n}명 저장되었습니다."}
        return _guard("save_all_employees", _do)

    def initialize_sheet(self) -> Result:
        def _do():
            outcome = self.store.initialize()
            msg = INIT_MESSAGES.get(outcome, "Status 열 위치를 표준 순서로 옮겼습니다.")
            return {"message": msg, "outcome": outcome}
        return _guard("initialize_sheet", _do)

    # ----------------------------
    # 설정
    # ----------------------------
    def get_positions_list(self) -> Result:
        return _guard("get_positions_list", lambda: {"positions": self.settings.get_positions()})

    def save_positions_list(self, positions) -> Result:
        def _do():
            self.settings.save_positions(positions)
        return _guard("save_positions_list", _do)

    def get_me_employee_id(self) -> Result:
        return _guard("get_me_employee_id", lambda: {"empId": self.settings.get_me()})

    def set_me_employee_id(self, emp_id: str) -> Result:
        return _guard("set_me_employee_id", self.settings.set_me, emp_id)

    def clear_me_employee_id(self) -> Result:
        return _guard("clear_me_employee_id", self.settings.clear_me)

    # ----------------------------
    # 사진
    # ----------------------------
    def upload_employee_photo(self, payload: str, file_name: Optional[str], emp_id: str) -> Result:
        if self.uploader is None:
            return Failure(ErrorKind.STORE_FAILURE, "사진 저장소가 설정되지 않았습니다.")
        return _guard("upload_employee_photo", self.uploader.upload, payload, file_name, emp_id)
