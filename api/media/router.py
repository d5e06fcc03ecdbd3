"""
Serves objects kept by the local storage backend.

Signed URLs from `LocalStorage.presigned_url` land here. Without a token an
object is only served when the backend is public-read.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import FileResponse

from core.storage import LocalStorage, StorageBackend, StorageError, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/media")


@router.get("/{key:path}")
async def get_media(
    key: str,
    token: str | None = Query(default=None),
    storage: StorageBackend = Depends(get_storage),
) -> FileResponse:
    if not isinstance(storage, LocalStorage):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found.")

    if token is not None:
        if not storage.verify_media_token(key, token):
            logger.info("media_denied reason=bad_token key=%s", key)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Link is invalid or expired.")
    elif not storage.public_read:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="A signed link is required.")

    try:
        path = storage.path_for(key)
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found.") from exc

    if not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found.")
    return FileResponse(path)
