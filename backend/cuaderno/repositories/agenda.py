"""
Repositories for agenda data: events, weekly schedules, weekly goals, study sessions.
"""

from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import desc
import logging

from .base import OwnedRepository
from ..models.agenda import SubjectEvent, SubjectSchedule, WeeklyGoal, StudySession
from ..models.subject import Subject
from ..schemas.agenda import (
    EventCreate, EventUpdate,
    ScheduleCreate, ScheduleUpdate,
    GoalCreate, GoalUpdate,
    StudySessionCreate, StudySessionUpdate,
)

logger = logging.getLogger(__name__)


def _subject_filter(subject_id: Optional[int]):
    return {"subject_id": subject_id} if subject_id is not None else None


class EventRepository(OwnedRepository[SubjectEvent, EventCreate, EventUpdate]):
    def __init__(self):
        super().__init__(SubjectEvent)

    def list_upcoming(
        self,
        db: Session,
        user_id: int,
        subject_id: Optional[int] = None,
        limit: int = 50,
    ) -> List[SubjectEvent]:
        """Events in calendar order (earliest date first)."""
        return self.list_owned(
            db, user_id, filters=_subject_filter(subject_id), order_by="event_date", limit=limit
        )


class ScheduleRepository(OwnedRepository[SubjectSchedule, ScheduleCreate, ScheduleUpdate]):
    def __init__(self):
        super().__init__(SubjectSchedule)

    def list_weekly(
        self,
        db: Session,
        user_id: int,
        subject_id: Optional[int] = None,
        limit: int = 50,
    ) -> List[SubjectSchedule]:
        """Weekly slots ordered by day of week."""
        return self.list_owned(
            db, user_id, filters=_subject_filter(subject_id), order_by="day_of_week", limit=limit
        )


class GoalRepository(OwnedRepository[WeeklyGoal, GoalCreate, GoalUpdate]):
    def __init__(self):
        super().__init__(WeeklyGoal)

    def list_for_user(self, db: Session, user_id: int, subject_id: Optional[int] = None, limit: int = 100) -> List[WeeklyGoal]:
        return self.list_owned(
            db, user_id, filters=_subject_filter(subject_id), order_by="week_start", descending=True, limit=limit
        )

    def list_recent_with_subject(
        self,
        db: Session,
        user_id: int,
        limit: int = 10,
    ) -> List[Tuple[WeeklyGoal, Optional[str]]]:
        """Most recent goals (by week_start desc), each paired with its subject's name."""
        try:
            return (
                db.query(WeeklyGoal, Subject.name)
                  .outerjoin(Subject, Subject.id == WeeklyGoal.subject_id)
                  .filter(WeeklyGoal.user_id == user_id)
                  .order_by(desc(WeeklyGoal.week_start), desc(WeeklyGoal.id))
                  .limit(limit)
                  .all()
            )
        except Exception as e:
            logger.error(f"Error getting recent goals for user {user_id}: {e}")
            raise


class StudySessionRepository(OwnedRepository[StudySession, StudySessionCreate, StudySessionUpdate]):
    def __init__(self):
        super().__init__(StudySession)

    def list_for_user(self, db: Session, user_id: int, subject_id: Optional[int] = None, limit: int = 100) -> List[StudySession]:
        """Newest study sessions first."""
        return self.list_owned(
            db, user_id, filters=_subject_filter(subject_id), order_by="start_time", descending=True, limit=limit
        )
