# roster/gsheet.py
# -*- coding: utf-8 -*-

import json
import logging
import os
import random
import threading
import time
from typing import Dict, Optional, Tuple

import gspread
from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build
from gspread.exceptions import APIError, WorksheetNotFound
from gspread.utils import rowcol_to_a1
import streamlit as st

from roster.config import API_BACKOFF_SEC, SCOPES

logger = logging.getLogger(__name__)


# ----------------------------
# 인증
# ----------------------------
def _normalize_private_key(info: dict) -> dict:
    """Normalize PEM so cryptography can parse it reliably."""
    info = dict(info)
    pk = info.get("private_key", "")
    if isinstance(pk, str) and pk:
        pk = pk.replace("\\n", "\n").replace("\r\n", "\n").replace("\r", "\n")
        lines = [ln.strip() for ln in pk.split("\n") if ln.strip() != ""]
        info["private_key"] = "\n".join(lines) + "\n"
    return info


def load_service_account_info() -> dict:
    # 1) Streamlit secrets 우선
    try:
        if "gcp_service_account" in st.secrets:
            return _normalize_private_key(dict(st.secrets["gcp_service_account"]))
    except Exception:
        pass

    # 2) env var fallback (JSON 문자열)
    sa_json = os.getenv("GOOGLE_SERVICE_ACCOUNT_JSON", "").strip()
    if not sa_json:
        raise RuntimeError("Missing [gcp_service_account] in secrets and GOOGLE_SERVICE_ACCOUNT_JSON env var.")
    return _normalize_private_key(json.loads(sa_json))


def get_credentials(info: Optional[dict] = None) -> Credentials:
    return Credentials.from_service_account_info(info or load_service_account_info(), scopes=SCOPES)


def get_client(creds: Credentials) -> gspread.Client:
    return gspread.authorize(creds)


def get_drive(creds: Credentials):
    """Drive v3 서비스 (사진 업로드용)."""
    return build("drive", "v3", credentials=creds, cache_discovery=False)


def open_sheet(gc: gspread.Client, sheet_id: str):
    if not sheet_id:
        raise RuntimeError("Missing GSHEET_ID")
    return _retry(gc.open_by_key, sheet_id)


def ensure_tab(sh, title: str, rows: int = 1000, cols: int = 12):
    """탭이 없으면 만든다. 헤더는 호출하는 쪽에서 채운다."""
    try:
        return _retry(sh.worksheet, title)
    except WorksheetNotFound:
        logger.info("worksheet %r not found, creating", title)
        return _retry(sh.add_worksheet, title=title, rows=rows, cols=cols)


# ----------------------------
# 재시도 (쿼터 초과만)
# ----------------------------
def _status_of(err: APIError) -> Optional[int]:
    try:
        return getattr(err, "response", None).status_code
    except Exception:
        return None


def _retry(fn, *args, **kwargs):
    """Retry helper: handle 429/503 and 403(rate/quota) with jittered backoff.

    그 외 APIError 및 일반 예외는 즉시 재발생시킨다.
    """
    last = None
    for b in API_BACKOFF_SEC:
        try:
            return fn(*args, **kwargs)
        except APIError as e:
            status = _status_of(e)
            msg = str(e).lower()
            retryable = (status in (429, 503)) or (
                status == 403 and ("rate" in msg or "quota" in msg or "too many" in msg)
            )
            if not retryable:
                raise
            retry_after = None
            try:
                retry_after = (e.response.headers or {}).get("Retry-After")
            except Exception:
                pass
            wait = float(retry_after) if retry_after else (b + random.uniform(0, 0.6))
            logger.warning("Sheets API %s, retrying in %.2fs", status, wait)
            time.sleep(max(0.25, wait))
            last = e
    raise last


def _ensure_capacity(ws, min_row: int, min_col: int):
    """워크시트 최소 (min_row x min_col) 크기 보장. 필요한 경우에만 행/열 확장."""
    r_needed = int(min_row or 0)
    c_needed = int(min_col or 0)
    if hasattr(ws, "row_count") and ws.row_count < r_needed:
        _retry(ws.add_rows, r_needed - int(ws.row_count))
    if hasattr(ws, "col_count") and ws.col_count < c_needed:
        _retry(ws.add_cols, c_needed - int(ws.col_count))


# ----------------------------
# 탭 단위 잠금
# ----------------------------
_LOCKS: Dict[Tuple[str, str], threading.RLock] = {}
_LOCKS_GUARD = threading.Lock()


def table_lock(ws) -> threading.RLock:
    """같은 스프레드시트/탭에 대한 읽기-수정-쓰기 구간을 직렬화한다 (프로세스 내)."""
    book = getattr(ws, "spreadsheet_id", None) or getattr(getattr(ws, "spreadsheet", None), "id", "")
    key: Tuple[str, str] = (str(book), str(getattr(ws, "title", "") or id(ws)))
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = _LOCKS[key] = threading.RLock()
        return lock


def a1_row(row: int, ncols: int) -> str:
    """row행의 A..ncols 범위 (예: 'A5:I5')."""
    return f"{rowcol_to_a1(row, 1)}:{rowcol_to_a1(row, ncols)}"


def col_letter(col: int) -> str:
    """1 → 'A', 9 → 'I', 27 → 'AA'."""
    return rowcol_to_a1(1, col)[:-1]
