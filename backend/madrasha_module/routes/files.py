import logging
import os

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile, status

from ..config import settings
from ..middleware import require_permission
from ..models import User
from ..responses import success
from ..storage import (
    ALLOWED_UPLOAD_TYPES,
    StorageError,
    StorageService,
    get_storage,
    guess_mime_type,
    resolve_upload_path,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Files"])

CACHE_CONTROL = "public, max-age=31536000"


async def read_capped(file: UploadFile, limit: int) -> bytes | None:
    """Read an upload, or return None once it is known to exceed ``limit`` bytes."""
    if file.size is not None and file.size > limit:
        return None
    content = await file.read(limit + 1)
    if len(content) > limit:
        return None
    return content


@router.post("/upload")
async def upload_file(
    file: UploadFile | None = File(default=None),
    folder: str = Form(default="documents"),
    storage: StorageService = Depends(get_storage),
    _: User = Depends(require_permission("UPLOAD_FILES")),
):
    if file is None or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")

    content = await read_capped(file, settings.max_upload_bytes)
    if content is None:
        max_mb = settings.max_upload_bytes // (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File size too large. Maximum {max_mb}MB allowed.",
        )
    if file.content_type not in ALLOWED_UPLOAD_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file type. Only images, PDFs, and Word documents are allowed.",
        )

    try:
        file_path = storage.upload_file(file.filename, content, folder)
    except StorageError as exc:
        logger.error(f"Upload of {file.filename} failed: {exc}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    logger.info(f"Stored upload {file_path} ({len(content)} bytes)")
    return success(
        {
            "filePath": file_path,
            "fileUrl": storage.get_file_url(file_path),
            "fileName": file.filename,
            "fileSize": len(content),
            "fileType": file.content_type,
        },
        "File uploaded successfully",
    )


@router.delete("/upload")
def delete_file(
    path: str | None = Query(default=None),
    storage: StorageService = Depends(get_storage),
    _: User = Depends(require_permission("UPLOAD_FILES")),
):
    if not path:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File path is required")
    try:
        deleted = storage.delete_file(path)
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return success(message="File deleted successfully")


@router.get("/files/{file_path:path}")
def serve_file(file_path: str, storage: StorageService = Depends(get_storage)):
    if storage.local_root is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    full_path = resolve_upload_path(storage.local_root, file_path)
    if full_path is None:
        logger.warning(f"Rejected file request outside upload root: {file_path}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    if not os.path.isfile(full_path):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    with open(full_path, "rb") as fh:
        content = fh.read()
    return Response(
        content=content,
        media_type=guess_mime_type(full_path),
        headers={"Cache-Control": CACHE_CONTROL},
    )
