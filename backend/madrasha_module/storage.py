"""File storage providers.

Callers depend only on :class:`StorageService`; the concrete provider is
picked from ``STORAGE_PROVIDER`` when the process starts.
"""

import logging
import os
import re
import time
from abc import ABC, abstractmethod
from functools import lru_cache

from .config import settings


logger = logging.getLogger(__name__)

DEFAULT_FOLDERS = ("students", "teachers", "documents")

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
DEFAULT_MIME_TYPE = "application/octet-stream"

ALLOWED_UPLOAD_TYPES = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")
_UNSAFE_FOLDER_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


class StorageError(Exception):
    pass


def guess_mime_type(path: str) -> str:
    return MIME_TYPES.get(os.path.splitext(path)[1].lower(), DEFAULT_MIME_TYPE)


def resolve_upload_path(upload_root: str, relative_path: str) -> str | None:
    """Absolute path of ``relative_path`` inside ``upload_root``.

    Returns None when the normalised path escapes the root.
    """
    root = os.path.realpath(upload_root)
    candidate = os.path.realpath(os.path.join(root, relative_path))
    if candidate != root and os.path.commonpath([root, candidate]) != root:
        return None
    return candidate


def safe_filename(filename: str) -> str:
    return _UNSAFE_CHARS.sub("_", os.path.basename(filename or "")) or "file"


def safe_folder(folder: str) -> str:
    parts = [
        _UNSAFE_FOLDER_CHARS.sub("_", part)
        for part in re.split(r"[\\/]+", folder or "")
        if part not in ("", ".", "..")
    ]
    return "/".join(parts) or "documents"


class StorageService(ABC):
    local_root: str | None = None

    @abstractmethod
    def upload_file(self, filename: str, content: bytes, folder: str) -> str:
        """Store ``content`` and return its path relative to the storage root."""

    @abstractmethod
    def delete_file(self, file_path: str) -> bool:
        ...

    @abstractmethod
    def get_file_url(self, file_path: str) -> str:
        ...


class LocalStorageService(StorageService):
    def __init__(self, upload_dir: str | None = None):
        self.upload_dir = os.path.abspath(upload_dir or settings.upload_dir)
        self.local_root = self.upload_dir
        self._ensure_upload_dirs()

    def _ensure_upload_dirs(self) -> None:
        for folder in DEFAULT_FOLDERS:
            os.makedirs(os.path.join(self.upload_dir, folder), exist_ok=True)

    def upload_file(self, filename: str, content: bytes, folder: str) -> str:
        folder = safe_folder(folder)
        stored_name = f"{int(time.time() * 1000)}_{safe_filename(filename)}"
        folder_path = os.path.join(self.upload_dir, folder)
        try:
            os.makedirs(folder_path, exist_ok=True)
            with open(os.path.join(folder_path, stored_name), "wb") as fh:
                fh.write(content)
        except OSError as exc:
            logger.error(f"Error uploading file {filename}: {exc}")
            raise StorageError("Failed to upload file") from exc
        return f"{folder}/{stored_name}"

    def delete_file(self, file_path: str) -> bool:
        full_path = resolve_upload_path(self.upload_dir, file_path)
        if full_path is None or not os.path.isfile(full_path):
            return False
        try:
            os.remove(full_path)
        except OSError as exc:
            logger.error(f"Error deleting file {file_path}: {exc}")
            return False
        return True

    def get_file_url(self, file_path: str) -> str:
        if not file_path:
            return ""
        return f"/api/files/{file_path.replace(os.sep, '/')}"


class S3StorageService(StorageService):
    def __init__(self, bucket_name: str | None = None, region: str | None = None):
        self.bucket_name = bucket_name if bucket_name is not None else settings.aws_bucket_name
        self.region = region if region is not None else settings.aws_region

    def upload_file(self, filename: str, content: bytes, folder: str) -> str:
        raise StorageError("S3 storage not implemented yet")

    def delete_file(self, file_path: str) -> bool:
        raise StorageError("S3 storage not implemented yet")

    def get_file_url(self, file_path: str) -> str:
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{file_path}"


def get_storage_service(provider: str | None = None) -> StorageService:
    provider = (provider or settings.storage_provider).lower()
    if provider == "s3":
        return S3StorageService()
    if provider != "local":
        logger.warning(f"Unknown STORAGE_PROVIDER '{provider}', using local storage")
    return LocalStorageService()


@lru_cache(maxsize=1)
def get_storage() -> StorageService:
    storage = get_storage_service()
    logger.info(f"Storage provider: {type(storage).__name__}")
    return storage
