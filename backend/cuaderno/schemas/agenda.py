"""
Pydantic schemas for the agenda entities: events, weekly schedules,
weekly goals and study sessions.
"""

from datetime import date, datetime, time
from typing import Optional
from pydantic import Field, model_validator

from .base import BaseSchema, OwnedResponseSchema, UpdateSchema


# ---- Events ----
class EventCreate(BaseSchema):
    subject_id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1, max_length=255)
    event_type: str = Field(..., min_length=1, max_length=50)
    event_date: date
    description: Optional[str] = None


class EventUpdate(UpdateSchema):
    not_null = ("name", "event_type", "event_date")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    event_type: Optional[str] = Field(None, min_length=1, max_length=50)
    event_date: Optional[date] = None
    description: Optional[str] = None


class EventResponse(OwnedResponseSchema):
    subject_id: int
    name: str
    event_type: str
    event_date: date
    description: Optional[str] = None


# ---- Weekly schedules ----
class ScheduleCreate(BaseSchema):
    subject_id: int = Field(..., ge=1)
    day_of_week: int = Field(..., ge=0, le=6, description="0=Sunday .. 6=Saturday")
    start_time: time
    end_time: time
    location: Optional[str] = None
    description: Optional[str] = None

    @model_validator(mode="after")
    def _check_times(self):
        """A slot must end after it starts."""
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class ScheduleUpdate(UpdateSchema):
    not_null = ("day_of_week", "start_time", "end_time")

    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = None
    description: Optional[str] = None


class ScheduleResponse(OwnedResponseSchema):
    subject_id: int
    day_of_week: int
    start_time: time
    end_time: time
    location: Optional[str] = None
    description: Optional[str] = None


# ---- Weekly goals ----
class GoalCreate(BaseSchema):
    subject_id: int = Field(..., ge=1)
    target_hours: float = Field(..., gt=0)
    current_hours: float = Field(0.0, ge=0)
    week_start: date
    week_end: date

    @model_validator(mode="after")
    def _check_week(self):
        if self.week_end < self.week_start:
            raise ValueError("week_end must not be before week_start")
        return self


class GoalUpdate(UpdateSchema):
    not_null = ("target_hours", "current_hours", "week_start", "week_end")

    target_hours: Optional[float] = Field(None, gt=0)
    current_hours: Optional[float] = Field(None, ge=0)
    week_start: Optional[date] = None
    week_end: Optional[date] = None


class GoalResponse(OwnedResponseSchema):
    subject_id: int
    target_hours: float
    current_hours: float
    week_start: date
    week_end: date


# ---- Study sessions ----
class StudySessionCreate(BaseSchema):
    subject_id: int = Field(..., ge=1)
    duration: int = Field(..., gt=0, description="Minutes studied")
    start_time: Optional[datetime] = None
    notes: Optional[str] = None


class StudySessionUpdate(UpdateSchema):
    not_null = ("duration", "start_time")

    duration: Optional[int] = Field(None, gt=0)
    start_time: Optional[datetime] = None
    notes: Optional[str] = None


class StudySessionResponse(OwnedResponseSchema):
    subject_id: int
    duration: int
    start_time: datetime
    notes: Optional[str] = None
