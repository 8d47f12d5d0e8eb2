import asyncio
import os

import pytest

from backend.madrasha_module.routes.files import read_capped
from backend.madrasha_module.storage import (
    LocalStorageService,
    S3StorageService,
    StorageError,
    get_storage_service,
    guess_mime_type,
    resolve_upload_path,
    safe_filename,
    safe_folder,
)

from .conftest import auth_headers


PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


def _upload(client, headers, name="photo.png", content=PNG_BYTES, content_type="image/png", **data):
    return client.post("/api/upload", files={"file": (name, content, content_type)}, data=data, headers=headers)


def test_upload_then_serve(client, admin_headers, storage):
    res = _upload(client, admin_headers, name="my photo.png", folder="students")
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["filePath"].startswith("students/")
    assert data["filePath"].endswith("_my_photo.png")
    assert data["fileUrl"] == f"/api/files/{data['filePath']}"
    assert data["fileSize"] == len(PNG_BYTES)

    served = client.get(data["fileUrl"])
    assert served.status_code == 200
    assert served.content == PNG_BYTES
    assert served.headers["content-type"] == "image/png"
    assert served.headers["cache-control"] == "public, max-age=31536000"


def test_upload_defaults_to_documents(client, admin_headers):
    res = _upload(client, admin_headers, name="notice.pdf", content=b"%PDF-1.4", content_type="application/pdf")
    assert res.json()["data"]["filePath"].startswith("documents/")


def test_upload_rejects_type_size_and_missing_file(client, admin_headers):
    res = _upload(client, admin_headers, name="run.sh", content=b"echo", content_type="text/x-shellscript")
    assert res.status_code == 400

    big = b"0" * (5 * 1024 * 1024 + 1)
    res = _upload(client, admin_headers, content=big)
    assert res.status_code == 400
    assert res.json()["error"] == "File size too large. Maximum 5MB allowed."

    res = client.post("/api/upload", data={"folder": "documents"}, headers=admin_headers)
    assert res.status_code == 400
    assert res.json()["error"] == "No file provided"


def test_upload_requires_staff(client, school):
    assert _upload(client, auth_headers(school.student_user)).status_code == 403
    assert _upload(client, auth_headers(school.teacher_user)).status_code == 200
    assert _upload(client, {}).status_code == 401


def test_delete_upload(client, admin_headers, storage):
    path = _upload(client, admin_headers).json()["data"]["filePath"]
    assert client.delete("/api/upload", params={"path": path}, headers=admin_headers).status_code == 200
    assert not os.path.exists(os.path.join(storage.upload_dir, path))
    assert client.delete("/api/upload", params={"path": path}, headers=admin_headers).status_code == 404
    assert client.delete("/api/upload", headers=admin_headers).status_code == 400


def test_serving_missing_file_is_404(client):
    res = client.get("/api/files/documents/nothing.pdf")
    assert res.status_code == 404
    assert res.json()["error"] == "File not found"


def test_serving_outside_root_is_forbidden(client, storage, tmp_path):
    (tmp_path / "secret.txt").write_text("top secret")
    res = client.get("/api/files/..%2Fsecret.txt")
    assert res.status_code == 403
    assert res.json() == {"success": False, "error": "Access denied"}


def test_resolve_upload_path_containment(tmp_path):
    root = str(tmp_path / "uploads")
    os.makedirs(root)
    assert resolve_upload_path(root, "students/a.png") == os.path.join(os.path.realpath(root), "students", "a.png")
    assert resolve_upload_path(root, "students/../documents/a.pdf").endswith(os.path.join("documents", "a.pdf"))
    assert resolve_upload_path(root, "../secret.txt") is None
    assert resolve_upload_path(root, "/etc/passwd") is None
    assert resolve_upload_path(str(tmp_path / "up"), "../uploads/x") is None


@pytest.mark.parametrize(
    "path, expected",
    [
        ("a.jpg", "image/jpeg"),
        ("a.JPEG", "image/jpeg"),
        ("a.png", "image/png"),
        ("a.gif", "image/gif"),
        ("a.pdf", "application/pdf"),
        ("a.doc", "application/msword"),
        ("a.docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
        ("a.bin", "application/octet-stream"),
        ("noext", "application/octet-stream"),
    ],
)
def test_guess_mime_type(path, expected):
    assert guess_mime_type(path) == expected


def test_sanitisers():
    assert safe_filename("../../évil name.png") == "_vil_name.png"
    assert safe_folder("../students") == "students"
    assert safe_folder("") == "documents"


def test_local_storage_creates_default_folders(tmp_path):
    storage = LocalStorageService(str(tmp_path / "files"))
    for folder in ("students", "teachers", "documents"):
        assert (tmp_path / "files" / folder).is_dir()
    assert storage.get_file_url("") == ""


def test_s3_stub_fails_fast():
    storage = S3StorageService(bucket_name="madrasha", region="ap-south-1")
    with pytest.raises(StorageError):
        storage.upload_file("a.png", b"x", "documents")
    with pytest.raises(StorageError):
        storage.delete_file("documents/a.png")
    assert storage.get_file_url("documents/a.png") == "https://madrasha.s3.ap-south-1.amazonaws.com/documents/a.png"
    assert storage.local_root is None


def test_storage_factory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert isinstance(get_storage_service("s3"), S3StorageService)
    assert isinstance(get_storage_service("local"), LocalStorageService)
    assert isinstance(get_storage_service("ftp"), LocalStorageService)


class _Upload:
    """Stands in for ``UploadFile`` and records how much was requested."""

    def __init__(self, size, body=b""):
        self.size = size
        self.body = body
        self.requested = []

    async def read(self, size=-1):
        self.requested.append(size)
        return self.body if size < 0 else self.body[:size]


def test_read_capped_rejects_declared_oversize_without_reading():
    upload = _Upload(size=50 * 1024 * 1024)
    assert asyncio.run(read_capped(upload, 1024)) is None
    assert upload.requested == []


def test_read_capped_reads_at_most_one_byte_past_limit():
    upload = _Upload(size=None, body=b"x" * 4096)
    assert asyncio.run(read_capped(upload, 1024)) is None
    assert upload.requested == [1025]

    small = _Upload(size=None, body=b"x" * 10)
    assert asyncio.run(read_capped(small, 1024)) == b"x" * 10
