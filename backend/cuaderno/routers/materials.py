# cuaderno/routers/materials.py
"""
Topics and study materials (authored notes and uploaded files).
Uploaded files go to object storage; their keys are kept on the material row.
"""
from __future__ import annotations
from typing import List, Optional
from uuid import uuid4
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from cuaderno.clients.storage_client import ObjectStorage, StorageError, safe_filename
from cuaderno.config import settings
from cuaderno.database import get_db
from cuaderno.deps import get_current_user, get_storage
from cuaderno.models.user import User
from cuaderno.repositories.material import MaterialRepository, TopicRepository
from cuaderno.repositories.program import SubjectRepository
from cuaderno.schemas.material import (
    MaterialCreate, MaterialUpdate, MaterialResponse, MaterialType, SignedUrlResponse,
    TopicCreate, TopicUpdate, TopicResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["library"])

MAX_UPLOAD_BYTES = 50 * 1024 * 1024

# ----- DI providers -----
def get_topic_repo() -> TopicRepository:
    return TopicRepository()

def get_material_repo() -> MaterialRepository:
    return MaterialRepository()

def get_subject_repo() -> SubjectRepository:
    return SubjectRepository()

def _not_found(what: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")

def _require_subject(db: Session, subjects: SubjectRepository, user_id: int, subject_id: int) -> None:
    if not subjects.get_owned(db, user_id, subject_id):
        raise _not_found("Subject")

def _require_topic(db: Session, topics: TopicRepository, user_id: int, topic_id: Optional[int], subject_id: int) -> None:
    """A material's topic must be one of the caller's topics under the same subject."""
    if topic_id is None:
        return
    topic = topics.get_owned(db, user_id, topic_id)
    if not topic or topic.subject_id != subject_id:
        raise _not_found("Topic")

def material_type_for(mime_type: Optional[str], filename: str = "") -> str:
    """Best guess of the material type from the upload's content type / extension."""
    mime = (mime_type or "").lower()
    if mime == "application/pdf" or filename.lower().endswith(".pdf"):
        return "pdf"
    for prefix in ("image", "audio", "video"):
        if mime.startswith(prefix + "/"):
            return prefix
    return "document"

# ----- Topics -----
@router.get("/topics", response_model=List[TopicResponse], summary="List topics (by name)")
def list_topics(
    subject_id: Optional[int] = Query(None, ge=1),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: TopicRepository = Depends(get_topic_repo),
):
    return [TopicResponse.model_validate(t) for t in repo.list_for_user(db, user.id, subject_id=subject_id)]

@router.post("/topics", response_model=TopicResponse, status_code=status.HTTP_201_CREATED)
def create_topic(
    payload: TopicCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: TopicRepository = Depends(get_topic_repo),
    subjects: SubjectRepository = Depends(get_subject_repo),
):
    _require_subject(db, subjects, user.id, payload.subject_id)
    return TopicResponse.model_validate(repo.create_owned(db, user.id, payload))

@router.patch("/topics/{topic_id}", response_model=TopicResponse)
def update_topic(
    topic_id: int,
    payload: TopicUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: TopicRepository = Depends(get_topic_repo),
):
    topic = repo.update_owned(db, user.id, topic_id, payload)
    if not topic:
        raise _not_found("Topic")
    return TopicResponse.model_validate(topic)

@router.delete("/topics/{topic_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_topic(
    topic_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: TopicRepository = Depends(get_topic_repo),
):
    if not repo.delete_owned(db, user.id, topic_id):
        raise _not_found("Topic")
    return

# ----- Materials -----
@router.get("/materials", response_model=List[MaterialResponse], summary="List materials (newest first)")
def list_materials(
    subject_id: Optional[int] = Query(None, ge=1),
    topic_id: Optional[int] = Query(None, ge=1),
    limit: int = Query(100, ge=1, le=500),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: MaterialRepository = Depends(get_material_repo),
):
    rows = repo.list_for_user(db, user.id, subject_id=subject_id, topic_id=topic_id, limit=limit)
    return [MaterialResponse.model_validate(m) for m in rows]

@router.post("/materials", response_model=MaterialResponse, status_code=status.HTTP_201_CREATED)
def create_material(
    payload: MaterialCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: MaterialRepository = Depends(get_material_repo),
    subjects: SubjectRepository = Depends(get_subject_repo),
    topics: TopicRepository = Depends(get_topic_repo),
):
    _require_subject(db, subjects, user.id, payload.subject_id)
    _require_topic(db, topics, user.id, payload.topic_id, payload.subject_id)
    return MaterialResponse.model_validate(repo.create_owned(db, user.id, payload))

@router.post(
    "/materials/upload",
    response_model=MaterialResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a file to object storage and register it as a material",
)
def upload_material(
    subject_id: int = Form(..., ge=1),
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    topic_id: Optional[int] = Form(None, ge=1),
    type: Optional[MaterialType] = Form(None),
    content: Optional[str] = Form(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: MaterialRepository = Depends(get_material_repo),
    subjects: SubjectRepository = Depends(get_subject_repo),
    topics: TopicRepository = Depends(get_topic_repo),
    storage: ObjectStorage = Depends(get_storage),
):
    _require_subject(db, subjects, user.id, subject_id)
    _require_topic(db, topics, user.id, topic_id, subject_id)

    data = file.file.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="File too large")

    filename = file.filename or "file"
    key = f"{user.id}/{subject_id}/{uuid4().hex}_{safe_filename(filename)}"
    try:
        storage.upload(key, data)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Upload failed: {e}")

    try:
        material = repo.create_owned(db, user.id, {
            "subject_id": subject_id,
            "topic_id": topic_id,
            "title": (title or "").strip() or filename,
            "type": type or material_type_for(file.content_type, filename),
            "content": content,
            "file_path": key,
            "file_size": len(data),
            "mime_type": file.content_type,
        })
    except Exception:
        # keep storage and table consistent
        storage.remove(key)
        raise
    return MaterialResponse.model_validate(material)

@router.get("/materials/{material_id}", response_model=MaterialResponse)
def get_material(
    material_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: MaterialRepository = Depends(get_material_repo),
):
    material = repo.get_owned(db, user.id, material_id)
    if not material:
        raise _not_found("Material")
    return MaterialResponse.model_validate(material)

@router.get("/materials/{material_id}/url", response_model=SignedUrlResponse, summary="Time-limited download URL")
def material_url(
    material_id: int,
    expires_in: int = Query(settings.STORAGE_URL_TTL, ge=60, le=7 * 24 * 3600),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: MaterialRepository = Depends(get_material_repo),
    storage: ObjectStorage = Depends(get_storage),
):
    material = repo.get_owned(db, user.id, material_id)
    if not material or not material.file_path:
        raise _not_found("File")
    try:
        url = storage.create_signed_url(material.file_path, expires_in)
    except StorageError:
        raise _not_found("File")
    return SignedUrlResponse(signed_url=url, expires_in=expires_in)

@router.patch("/materials/{material_id}", response_model=MaterialResponse)
def update_material(
    material_id: int,
    payload: MaterialUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: MaterialRepository = Depends(get_material_repo),
    topics: TopicRepository = Depends(get_topic_repo),
):
    material = repo.get_owned(db, user.id, material_id)
    if not material:
        raise _not_found("Material")
    if "topic_id" in payload.model_fields_set:
        _require_topic(db, topics, user.id, payload.topic_id, material.subject_id)
    return MaterialResponse.model_validate(repo.update(db, material, payload))

@router.delete("/materials/{material_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_material(
    material_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: MaterialRepository = Depends(get_material_repo),
    storage: ObjectStorage = Depends(get_storage),
):
    material = repo.get_owned(db, user.id, material_id)
    if not material:
        raise _not_found("Material")
    file_path = material.file_path
    repo.delete(db, material_id)
    if file_path:
        try:
            storage.remove(file_path)
        except StorageError as e:
            logger.warning(f"Could not remove stored object {file_path}: {e}")
    return
