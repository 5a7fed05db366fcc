# roster/result.py
# -*- coding: utf-8 -*-
"""
UI로 돌려주는 결과 타입.

성공은 Ok(payload), 실패는 Failure(kind, error). 화면 쪽은 isinstance로
분기하거나, 기존 dict 형태가 필요하면 to_envelope()를 쓴다:

    Ok({"employees": [...]}).to_envelope()
    -> {"success": True, "employees": [...]}

    Failure(ErrorKind.NOT_FOUND, "...").to_envelope()
    -> {"success": False, "kind": "NotFound", "error": "..."}
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Union


class ErrorKind(str, Enum):
    DUPLICATE_KEY = "DuplicateKey"
    NOT_FOUND = "NotFound"
    INVALID_PAYLOAD = "InvalidPayload"
    INVALID_RECORD = "InvalidRecord"
    STORE_FAILURE = "StoreFailure"


@dataclass(frozen=True)
class Ok:
    payload: Dict[str, Any] = field(default_factory=dict)
    success = True

    def get(self, key: str, default: Any = None) -> Any:
        return self.payload.get(key, default)

    def to_envelope(self) -> Dict[str, Any]:
        return {"success": True, **self.payload}


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    error: str
    success = False

    def get(self, key: str, default: Any = None) -> Any:
        return default

    def to_envelope(self) -> Dict[str, Any]:
        return {"success": False, "kind": self.kind.value, "error": self.error}


Result = Union[Ok, Failure]
