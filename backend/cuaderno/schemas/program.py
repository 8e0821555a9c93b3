"""
Pydantic schemas for Program and Subject entities.
"""

from datetime import date
from typing import Optional
from pydantic import Field

from .base import BaseSchema, OwnedResponseSchema, UpdateSchema


class ProgramCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    institution: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    syllabus_file_path: Optional[str] = None
    syllabus_file_name: Optional[str] = None
    syllabus_file_size: Optional[int] = Field(None, ge=0)


class ProgramUpdate(UpdateSchema):
    not_null = ("name",)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    institution: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    syllabus_file_path: Optional[str] = None
    syllabus_file_name: Optional[str] = None
    syllabus_file_size: Optional[int] = Field(None, ge=0)


class ProgramResponse(OwnedResponseSchema):
    name: str
    institution: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    syllabus_file_path: Optional[str] = None
    syllabus_file_name: Optional[str] = None
    syllabus_file_size: Optional[int] = None


class SubjectCreate(BaseSchema):
    program_id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1, max_length=255)
    color: Optional[str] = None
    icon: Optional[str] = None
    instructor_name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    syllabus_file_path: Optional[str] = None
    syllabus_file_name: Optional[str] = None
    syllabus_file_size: Optional[int] = Field(None, ge=0)


class SubjectUpdate(UpdateSchema):
    """
    Schema for updating subjects. program_id is deliberately absent:
    moving a subject between programs is not supported.
    """
    not_null = ("name",)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    color: Optional[str] = None
    icon: Optional[str] = None
    instructor_name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    syllabus_file_path: Optional[str] = None
    syllabus_file_name: Optional[str] = None
    syllabus_file_size: Optional[int] = Field(None, ge=0)


class SubjectResponse(OwnedResponseSchema):
    program_id: int
    name: str
    color: Optional[str] = None
    icon: Optional[str] = None
    instructor_name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    syllabus_file_path: Optional[str] = None
    syllabus_file_name: Optional[str] = None
    syllabus_file_size: Optional[int] = None
