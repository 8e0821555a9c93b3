# cuaderno/routers/storage.py
"""Download endpoint behind the signed URLs issued for study materials."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import FileResponse

from cuaderno.clients.storage_client import ObjectStorage, StorageError
from cuaderno.deps import get_storage

router = APIRouter(prefix="/storage", tags=["storage"])


@router.get("/{bucket}/{path:path}", summary="Fetch an object with a signed token")
def download_object(
    bucket: str,
    path: str,
    token: str = Query(..., min_length=1),
    storage: ObjectStorage = Depends(get_storage),
):
    if bucket != storage.bucket or not storage.verify_token(token, path):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired signature")
    try:
        target = storage.open_path(path)
    except StorageError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Object not found")
    return FileResponse(target, filename=target.name)
