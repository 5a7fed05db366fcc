# roster/errors.py
# -*- coding: utf-8 -*-

from roster.result import ErrorKind


class RosterError(Exception):
    """도메인 오류 공통 부모. kind는 Failure 봉투로 그대로 전달된다."""
    kind = ErrorKind.STORE_FAILURE


class DuplicateKeyError(RosterError):
    kind = ErrorKind.DUPLICATE_KEY

    def __init__(self, emp_id: str):
        super().__init__(f"이미 존재하는 사번입니다: {emp_id}")
        self.emp_id = emp_id


class NotFoundError(RosterError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, emp_id: str):
        super().__init__(f"사번을 찾지 못했습니다: {emp_id}")
        self.emp_id = emp_id


class InvalidRecordError(RosterError):
    kind = ErrorKind.INVALID_RECORD


class InvalidPayloadError(RosterError):
    kind = ErrorKind.INVALID_PAYLOAD
