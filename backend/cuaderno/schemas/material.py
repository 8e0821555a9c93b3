"""
Pydantic schemas for Topic and StudyMaterial entities.
"""

from typing import Optional, Literal
from pydantic import Field

from .base import BaseSchema, OwnedResponseSchema, UpdateSchema

MaterialType = Literal["notes", "document", "audio", "video", "pdf", "image"]
AIStatus = Literal["pending", "processing", "completed", "failed"]


class TopicCreate(BaseSchema):
    subject_id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class TopicUpdate(UpdateSchema):
    not_null = ("name",)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None


class TopicResponse(OwnedResponseSchema):
    subject_id: int
    name: str
    description: Optional[str] = None


class MaterialCreate(BaseSchema):
    """
    Authored material (notes, pasted text). Uploaded files go through /materials/upload.
    """
    subject_id: int = Field(..., ge=1)
    topic_id: Optional[int] = Field(None, ge=1)
    title: str = Field(..., min_length=1, max_length=255)
    type: MaterialType = "notes"
    content: Optional[str] = None


class MaterialUpdate(UpdateSchema):
    not_null = ("title", "type", "ai_status")

    topic_id: Optional[int] = Field(None, ge=1)
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[MaterialType] = None
    content: Optional[str] = None
    ai_status: Optional[AIStatus] = None


class MaterialResponse(OwnedResponseSchema):
    subject_id: int
    topic_id: Optional[int] = None
    title: str
    type: MaterialType
    content: Optional[str] = None
    file_path: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    ai_status: AIStatus


class SignedUrlResponse(BaseSchema):
    signed_url: str
    expires_in: int
