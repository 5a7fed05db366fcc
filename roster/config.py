# roster/config.py
# -*- coding: utf-8 -*-

import os
from dataclasses import dataclass

import streamlit as st


# ----------------------------
# 시트 스키마
# ----------------------------
FIELDS = [
    "empId", "firstName", "lastName", "phone", "email",
    "position", "status", "note", "photoUrl",
]

HEADERS = [
    "Employee ID", "First Name", "Last Name", "Phone", "Email",
    "Position", "Status", "Note", "Photo URL",
]

STATUS_HEADER = "Status"

META_HEADERS = ["key", "value"]

# 헤더 서식 (회색 배경 + 굵게 + 테두리)
HEADER_FORMAT = {
    "backgroundColor": {"red": 0.85, "green": 0.85, "blue": 0.85},
    "textFormat": {"bold": True},
    "borders": {
        "top": {"style": "SOLID"},
        "bottom": {"style": "SOLID"},
        "left": {"style": "SOLID"},
        "right": {"style": "SOLID"},
    },
}


# ----------------------------
# 설정 키 (META 탭)
# ----------------------------
POSITIONS_KEY = "POSITIONS_LIST"
ME_EMP_ID_KEY = "ME_EMP_ID"


# ----------------------------
# 기본값
# ----------------------------
SHEET_TITLE = "Employees"
META_TITLE = "META"
PHOTO_FOLDER = "EmployeePhotos"
PHOTO_MAX_BYTES = 5 * 1024 * 1024
PHOTO_VIEW_URL = "https://drive.google.com/uc?export=view&id={id}"

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]

API_BACKOFF_SEC = [0.0, 0.8, 1.6, 3.2, 6.4]  # base + jitter


@dataclass(frozen=True)
class RosterConfig:
    sheet_id: str
    sheet_title: str = SHEET_TITLE
    meta_title: str = META_TITLE
    photo_folder: str = PHOTO_FOLDER


def secret(section: str, key: str) -> str:
    # secrets.toml이 없으면 streamlit이 예외를 던지므로 빈 값으로 취급
    try:
        return str(st.secrets.get(section, {}).get(key, "") or "").strip()
    except Exception:
        return ""


def load_config() -> RosterConfig:
    """Streamlit secrets 우선, 없으면 환경변수."""
    sheet_id = secret("sheets", "ROSTER_SHEET_ID") or os.getenv("GSHEET_ID", "").strip()
    if not sheet_id:
        raise RuntimeError("Missing sheets.ROSTER_SHEET_ID in secrets and GSHEET_ID env var.")
    return RosterConfig(
        sheet_id=sheet_id,
        sheet_title=secret("sheets", "ROSTER_SHEET") or os.getenv("ROSTER_SHEET", "").strip() or SHEET_TITLE,
        meta_title=secret("sheets", "META_SHEET") or os.getenv("ROSTER_META_SHEET", "").strip() or META_TITLE,
        photo_folder=secret("drive", "PHOTO_FOLDER") or os.getenv("ROSTER_PHOTO_FOLDER", "").strip() or PHOTO_FOLDER,
    )
