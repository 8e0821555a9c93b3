"""
Agenda models: dated subject events, recurring weekly schedule slots,
weekly study-hour goals and logged study sessions.
"""
from datetime import datetime
from sqlalchemy import Column, String, Text, Integer, Float, Date, Time, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from .base import BaseModel, owner_column


def _subject_fk():
    return Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)


class SubjectEvent(BaseModel):
    """An exam, deadline or class on a specific date."""

    __tablename__ = "subject_events"

    user_id = owner_column()
    subject_id = _subject_fk()

    name = Column(String(255), nullable=False)
    event_type = Column(String(50), nullable=False)  # e.g. "exam", "assignment", "class"
    event_date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=True)

    subject = relationship("Subject", back_populates="events")


class SubjectSchedule(BaseModel):
    """A recurring weekly class slot. day_of_week: 0=Sunday .. 6=Saturday."""

    __tablename__ = "subject_schedules"

    user_id = owner_column()
    subject_id = _subject_fk()

    day_of_week = Column(Integer, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    location = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)

    subject = relationship("Subject", back_populates="schedules")


class WeeklyGoal(BaseModel):
    """Target vs. achieved study hours for one subject over one week."""

    __tablename__ = "weekly_goals"

    user_id = owner_column()
    subject_id = _subject_fk()

    target_hours = Column(Float, nullable=False)
    current_hours = Column(Float, default=0.0, nullable=False)
    week_start = Column(Date, nullable=False, index=True)
    week_end = Column(Date, nullable=False)

    subject = relationship("Subject", back_populates="goals")


class StudySession(BaseModel):
    """A logged block of study time. duration is in minutes."""

    __tablename__ = "study_sessions"

    user_id = owner_column()
    subject_id = _subject_fk()

    duration = Column(Integer, nullable=False)
    start_time = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    notes = Column(Text, nullable=True)

    subject = relationship("Subject", back_populates="study_sessions")
