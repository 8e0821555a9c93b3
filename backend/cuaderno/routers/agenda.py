# cuaderno/routers/agenda.py
"""
Plan data: dated events, weekly schedule slots, weekly study goals and
logged study sessions. Each row hangs off one of the caller's subjects.
"""
from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from cuaderno.database import get_db
from cuaderno.deps import get_current_user
from cuaderno.models.user import User
from cuaderno.repositories.agenda import (
    EventRepository, GoalRepository, ScheduleRepository, StudySessionRepository,
)
from cuaderno.repositories.program import SubjectRepository
from cuaderno.schemas.agenda import (
    EventCreate, EventUpdate, EventResponse,
    ScheduleCreate, ScheduleUpdate, ScheduleResponse,
    GoalCreate, GoalUpdate, GoalResponse,
    StudySessionCreate, StudySessionUpdate, StudySessionResponse,
)

router = APIRouter(tags=["plan"])

# ----- DI providers -----
def get_subject_repo() -> SubjectRepository:
    return SubjectRepository()

def get_event_repo() -> EventRepository:
    return EventRepository()

def get_schedule_repo() -> ScheduleRepository:
    return ScheduleRepository()

def get_goal_repo() -> GoalRepository:
    return GoalRepository()

def get_study_session_repo() -> StudySessionRepository:
    return StudySessionRepository()

# ----- Helpers -----
def _not_found(what: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")

def _require_subject(db: Session, subjects: SubjectRepository, user_id: int, subject_id: int) -> None:
    if not subjects.get_owned(db, user_id, subject_id):
        raise _not_found("Subject")

def _invalid(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)

# ----- Events -----
@router.get("/events", response_model=List[EventResponse], summary="List events by date")
def list_events(
    subject_id: Optional[int] = Query(None, ge=1),
    limit: int = Query(50, ge=1, le=500),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: EventRepository = Depends(get_event_repo),
):
    return [EventResponse.model_validate(e) for e in repo.list_upcoming(db, user.id, subject_id=subject_id, limit=limit)]

@router.post("/events", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: EventRepository = Depends(get_event_repo),
    subjects: SubjectRepository = Depends(get_subject_repo),
):
    _require_subject(db, subjects, user.id, payload.subject_id)
    return EventResponse.model_validate(repo.create_owned(db, user.id, payload))

@router.patch("/events/{event_id}", response_model=EventResponse)
def update_event(
    event_id: int,
    payload: EventUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: EventRepository = Depends(get_event_repo),
):
    event = repo.update_owned(db, user.id, event_id, payload)
    if not event:
        raise _not_found("Event")
    return EventResponse.model_validate(event)

@router.delete("/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: EventRepository = Depends(get_event_repo),
):
    if not repo.delete_owned(db, user.id, event_id):
        raise _not_found("Event")
    return

# ----- Weekly schedules -----
@router.get("/schedules", response_model=List[ScheduleResponse], summary="List weekly slots by day")
def list_schedules(
    subject_id: Optional[int] = Query(None, ge=1),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: ScheduleRepository = Depends(get_schedule_repo),
):
    return [ScheduleResponse.model_validate(s) for s in repo.list_weekly(db, user.id, subject_id=subject_id, limit=500)]

@router.post("/schedules", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
def create_schedule(
    payload: ScheduleCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: ScheduleRepository = Depends(get_schedule_repo),
    subjects: SubjectRepository = Depends(get_subject_repo),
):
    _require_subject(db, subjects, user.id, payload.subject_id)
    return ScheduleResponse.model_validate(repo.create_owned(db, user.id, payload))

@router.patch("/schedules/{schedule_id}", response_model=ScheduleResponse)
def update_schedule(
    schedule_id: int,
    payload: ScheduleUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: ScheduleRepository = Depends(get_schedule_repo),
):
    slot = repo.get_owned(db, user.id, schedule_id)
    if not slot:
        raise _not_found("Schedule")
    start = payload.start_time or slot.start_time
    end = payload.end_time or slot.end_time
    if end <= start:
        raise _invalid("end_time must be after start_time")
    return ScheduleResponse.model_validate(repo.update(db, slot, payload))

@router.delete("/schedules/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule(
    schedule_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: ScheduleRepository = Depends(get_schedule_repo),
):
    if not repo.delete_owned(db, user.id, schedule_id):
        raise _not_found("Schedule")
    return

# ----- Weekly goals -----
@router.get("/goals", response_model=List[GoalResponse], summary="List weekly goals (latest week first)")
def list_goals(
    subject_id: Optional[int] = Query(None, ge=1),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: GoalRepository = Depends(get_goal_repo),
):
    return [GoalResponse.model_validate(g) for g in repo.list_for_user(db, user.id, subject_id=subject_id)]

@router.post("/goals", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
def create_goal(
    payload: GoalCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: GoalRepository = Depends(get_goal_repo),
    subjects: SubjectRepository = Depends(get_subject_repo),
):
    _require_subject(db, subjects, user.id, payload.subject_id)
    return GoalResponse.model_validate(repo.create_owned(db, user.id, payload))

@router.patch("/goals/{goal_id}", response_model=GoalResponse)
def update_goal(
    goal_id: int,
    payload: GoalUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: GoalRepository = Depends(get_goal_repo),
):
    goal = repo.get_owned(db, user.id, goal_id)
    if not goal:
        raise _not_found("Goal")
    if (payload.week_end or goal.week_end) < (payload.week_start or goal.week_start):
        raise _invalid("week_end must not be before week_start")
    return GoalResponse.model_validate(repo.update(db, goal, payload))

@router.delete("/goals/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_goal(
    goal_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: GoalRepository = Depends(get_goal_repo),
):
    if not repo.delete_owned(db, user.id, goal_id):
        raise _not_found("Goal")
    return

# ----- Study sessions -----
@router.get("/study-sessions", response_model=List[StudySessionResponse], summary="List study sessions (newest first)")
def list_study_sessions(
    subject_id: Optional[int] = Query(None, ge=1),
    limit: int = Query(100, ge=1, le=500),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: StudySessionRepository = Depends(get_study_session_repo),
):
    rows = repo.list_for_user(db, user.id, subject_id=subject_id, limit=limit)
    return [StudySessionResponse.model_validate(s) for s in rows]

@router.post("/study-sessions", response_model=StudySessionResponse, status_code=status.HTTP_201_CREATED)
def create_study_session(
    payload: StudySessionCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: StudySessionRepository = Depends(get_study_session_repo),
    subjects: SubjectRepository = Depends(get_subject_repo),
):
    _require_subject(db, subjects, user.id, payload.subject_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("start_time") is None:
        data.pop("start_time", None)  # column default: now
    return StudySessionResponse.model_validate(repo.create_owned(db, user.id, data))

@router.patch("/study-sessions/{session_id}", response_model=StudySessionResponse)
def update_study_session(
    session_id: int,
    payload: StudySessionUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: StudySessionRepository = Depends(get_study_session_repo),
):
    row = repo.update_owned(db, user.id, session_id, payload)
    if not row:
        raise _not_found("Study session")
    return StudySessionResponse.model_validate(row)

@router.delete("/study-sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_study_session(
    session_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: StudySessionRepository = Depends(get_study_session_repo),
):
    if not repo.delete_owned(db, user.id, session_id):
        raise _not_found("Study session")
    return
