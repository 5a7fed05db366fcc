# roster/photos.py
# -*- coding: utf-8 -*-

import base64
import binascii
import io
import logging
import re
import time
from typing import Callable, Dict, Optional

from googleapiclient.http import MediaIoBaseUpload

from roster.config import PHOTO_FOLDER, PHOTO_MAX_BYTES, PHOTO_VIEW_URL
from roster.errors import InvalidPayloadError

logger = logging.getLogger(__name__)

FOLDER_MIME = "application/vnd.google-apps.folder"

_DATA_URL_RE = re.compile(r"^(?:data:)?([\w.+-]+/[\w.+-]+);base64,(.+)$", re.S)
_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_-]")


def parse_data_url(payload: str):
    """'data:image/png;base64,....' → (mime, bytes)."""
    m = _DATA_URL_RE.match((payload or "").strip())
    if not m:
        raise InvalidPayloadError("이미지 데이터 형식이 올바르지 않습니다.")
    mime, b64 = m.group(1), re.sub(r"\s+", "", m.group(2))
    try:
        data = base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidPayloadError("이미지 데이터를 디코딩할 수 없습니다.") from None
    if not data:
        raise InvalidPayloadError("이미지 데이터가 비어 있습니다.")
    if len(data) > PHOTO_MAX_BYTES:
        raise InvalidPayloadError(f"이미지가 너무 큽니다 ({len(data):,} bytes).")
    return mime, data


def photo_file_name(emp_id: str, ts_ms: int, file_name: Optional[str] = None) -> str:
    safe = _UNSAFE_RE.sub("_", str(emp_id or "").strip()) or "unknown"
    name = (file_name or "").strip()
    if name:
        return f"{safe}_{ts_ms}_{name}"
    return f"{safe}_{ts_ms}.png"


class PhotoUploader:
    def __init__(self, drive, folder_name: str = PHOTO_FOLDER,
                 clock: Callable[[], float] = time.time):
        self.drive = drive
        self.folder_name = folder_name
        self.clock = clock
        self._folder_id: Optional[str] = None

    def _folder(self) -> str:
        # 이름으로 찾고 없으면 생성. 동시에 두 곳에서 만들면 폴더가 2개 생길 수 있음(가장 먼저 만든 것을 사용)
        if self._folder_id:
            return self._folder_id
        name = self.folder_name.replace("\\", "\\\\").replace("'", "\\'")
        res = self.drive.files().list(
            q=f"name = '{name}' and mimeType = '{FOLDER_MIME}' and trashed = false",
            spaces="drive",
            fields="files(id, name)",
            orderBy="createdTime",
            pageSize=1,
        ).execute()
        files = res.get("files", [])
        if files:
            self._folder_id = files[0]["id"]
        else:
            created = self.drive.files().create(
                body={"name": self.folder_name, "mimeType": FOLDER_MIME},
                fields="id",
            ).execute()
            self._folder_id = created["id"]
            logger.info("photo folder %r created (%s)", self.folder_name, self._folder_id)
        return self._folder_id

    def _share(self, file_id: str) -> None:
        try:
            self.drive.permissions().create(
                fileId=file_id,
                body={"type": "anyone", "role": "reader"},
                fields="id",
            ).execute()
        except Exception as e:
            # 도메인 정책으로 외부 공유가 막혀 있어도 업로드 자체는 성공 처리
            logger.warning("could not share photo %s: %s", file_id, e)

    def upload(self, payload: str, file_name: Optional[str], emp_id: str) -> Dict[str, str]:
        mime, data = parse_data_url(payload)
        name = photo_file_name(emp_id, int(self.clock() * 1000), file_name)
        folder_id = self._folder()
        media = MediaIoBaseUpload(io.BytesIO(data), mimetype=mime, resumable=False)
        created = self.drive.files().create(
            body={"name": name, "parents": [folder_id], "mimeType": mime},
            media_body=media,
            fields="id",
        ).execute()
        file_id = created["id"]
        self._share(file_id)
        logger.info("photo %s uploaded for %s (%d bytes)", name, emp_id, len(data))
        return {"url": PHOTO_VIEW_URL.format(id=file_id), "id": file_id}
