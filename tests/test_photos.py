# -*- coding: utf-8 -*-
import base64

import httplib2
import pytest
from googleapiclient.errors import HttpError

from roster.errors import InvalidPayloadError
from roster.photos import FOLDER_MIME, PhotoUploader, parse_data_url, photo_file_name

PNG = b"\x89PNG\r\n\x1a\nfake"
PAYLOAD = "data:image/png;base64," + base64.b64encode(PNG).decode()


class _Req:
    def __init__(self, fn):
        self.fn = fn

    def execute(self):
        return self.fn()


class FakeDrive:
    """files().list/create, permissions().create 만 흉내낸다."""

    def __init__(self, folders=None, share_error=None):
        self.folders = list(folders or [])
        self.created = []
        self.shared = []
        self.share_error = share_error
        self._n = 0

    def files(self):
        return self

    def permissions(self):
        return _Perms(self)

    def list(self, **kw):
        return _Req(lambda: {"files": [{"id": f, "name": "EmployeePhotos"} for f in self.folders]})

    def create(self, body=None, media_body=None, fields=None, **kw):
        def _do():
            self._n += 1
            fid = f"id{self._n}"
            if body.get("mimeType") == FOLDER_MIME:
                self.folders.append(fid)
            self.created.append((fid, body, media_body))
            return {"id": fid}
        return _Req(_do)


class _Perms:
    def __init__(self, drive):
        self.drive = drive

    def create(self, fileId=None, body=None, **kw):
        def _do():
            if self.drive.share_error is not None:
                raise self.drive.share_error
            self.drive.shared.append((fileId, body))
            return {"id": "perm"}
        return _Req(_do)


def test_parse_data_url():
    mime, data = parse_data_url(PAYLOAD)
    assert mime == "image/png"
    assert data == PNG


@pytest.mark.parametrize("bad", ["not-a-data-url", "", "data:image/png;base64,", "data:image/png;base64,@@@"])
def test_parse_data_url_rejects(bad):
    with pytest.raises(InvalidPayloadError):
        parse_data_url(bad)


def test_file_name_sanitized():
    assert photo_file_name("E 1/가", 1700000000000, "me.jpg") == "E_1___1700000000000_me.jpg"
    assert photo_file_name("E-1_a", 5, None) == "E-1_a_5.png"
    assert photo_file_name("", 5, "") == "unknown_5.png"


def test_upload_creates_folder_once_and_shares():
    drive = FakeDrive()
    up = PhotoUploader(drive, clock=lambda: 1700000000.5)
    res = up.upload(PAYLOAD, "face.png", "E1")
    up.upload(PAYLOAD, None, "E2")

    folders = [c for c in drive.created if c[1]["mimeType"] == FOLDER_MIME]
    assert len(folders) == 1
    fid, body, media = drive.created[1]
    assert body["name"] == "E1_1700000000500_face.png"
    assert body["parents"] == [folders[0][0]]
    assert media.mimetype() == "image/png"
    assert res == {"url": f"https://drive.google.com/uc?export=view&id={fid}", "id": fid}
    assert drive.shared[0] == (fid, {"type": "anyone", "role": "reader"})


def test_upload_reuses_existing_folder():
    drive = FakeDrive(folders=["existing"])
    PhotoUploader(drive).upload(PAYLOAD, "a.png", "E1")
    assert len(drive.created) == 1
    assert drive.created[0][1]["parents"] == ["existing"]


DENIED = HttpError(httplib2.Response({"status": 403}), b'{"error": {"message": "denied"}}')


@pytest.mark.parametrize("err", [DENIED, TimeoutError("socket timed out")])
def test_upload_share_failure_is_swallowed(err):
    drive = FakeDrive(share_error=err)
    res = PhotoUploader(drive).upload(PAYLOAD, "a.png", "E1")
    assert res["id"]
    assert drive.shared == []


def test_upload_invalid_payload_touches_nothing():
    drive = FakeDrive()
    with pytest.raises(InvalidPayloadError):
        PhotoUploader(drive).upload("not-a-data-url", "x.png", "E1")
    assert drive.created == []
