# cuaderno/services/context_service.py
"""
Builds the text context sent to the assistant on the first turn of a chat:
either a subject's recent materials or the user's agenda (events, weekly
schedules, weekly goals). Data errors never propagate; they shrink the context.
"""
from __future__ import annotations
from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from cuaderno.clients.storage_client import ObjectStorage, StorageError
from cuaderno.repositories.agenda import EventRepository, GoalRepository, ScheduleRepository
from cuaderno.repositories.material import MaterialRepository

logger = logging.getLogger(__name__)

NO_MATERIALS = "No materials found for this subject yet."
NO_EVENTS = "No upcoming subject events."
NO_SCHEDULES = "No weekly schedules configured."
NO_GOALS = "No weekly goals set."


def _hours(value) -> str:
    """3.0 -> '3', 2.5 -> '2.5'"""
    value = float(value or 0)
    if value.is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0")


def _clock(value) -> str:
    return value.strftime("%H:%M") if hasattr(value, "strftime") else str(value)


def _suffix(description: Optional[str]) -> str:
    return f" — {description}" if description else ""


class ContextAssembler:
    MATERIAL_LIMIT = 25
    SNIPPET_CHARS = 400
    SIGNED_URL_TTL = 60 * 60
    EVENT_LIMIT = 50
    SCHEDULE_LIMIT = 50
    GOAL_LIMIT = 10

    def __init__(
        self,
        *,
        material_repo: Optional[MaterialRepository] = None,
        event_repo: Optional[EventRepository] = None,
        schedule_repo: Optional[ScheduleRepository] = None,
        goal_repo: Optional[GoalRepository] = None,
        storage: Optional[ObjectStorage] = None,
    ):
        self.material_repo = material_repo or MaterialRepository()
        self.event_repo = event_repo or EventRepository()
        self.schedule_repo = schedule_repo or ScheduleRepository()
        self.goal_repo = goal_repo or GoalRepository()
        self.storage = storage

    # ---- subject ----
    def _signed_url(self, file_path: str) -> Optional[str]:
        if self.storage is None:
            return None
        try:
            return self.storage.create_signed_url(file_path, self.SIGNED_URL_TTL)
        except (StorageError, OSError) as e:
            logger.warning(f"Signed URL error for {file_path}: {e}")
            return None

    def _snippet(self, content: Optional[str]) -> str:
        if not content:
            return ""
        cut = content[: self.SNIPPET_CHARS]
        ellipsis = "…" if len(content) > self.SNIPPET_CHARS else ""
        return f" snippet: {cut}{ellipsis}"

    def assemble_subject_context(
        self,
        db: Session,
        user_id: int,
        subject_id: Optional[int],
        topic: Optional[str] = None,
    ) -> str:
        if not subject_id:
            return ""

        try:
            materials = self.material_repo.list_recent_for_subject(
                db, user_id, subject_id, limit=self.MATERIAL_LIMIT
            )
        except Exception as e:
            logger.error(f"Error fetching materials for context (subject {subject_id}): {e}")
            return ""

        if not materials:
            return NO_MATERIALS

        needle = (topic or "").strip().lower()
        if needle:
            kept = [
                m for m in materials
                if needle in (m.title or "").lower() or needle in (m.content or "").lower()
            ]
        else:
            kept = list(materials)

        lines: List[str] = [f"Attached study materials ({len(kept)}/{len(materials)}):"]
        for m in kept:
            url = self._signed_url(m.file_path) if m.file_path else None
            url_note = f" [url: {url}]" if url else ""
            lines.append(f"- {m.title} ({m.type}){url_note}{self._snippet(m.content)}")
        return "\n".join(lines)

    # ---- agenda ----
    def _load(self, what: str, fetch):
        try:
            return fetch()
        except Exception as e:
            logger.error(f"Error fetching {what} for agenda context: {e}")
            return []

    def assemble_agenda_context(self, db: Session, user_id: int) -> str:
        events = self._load("events", lambda: self.event_repo.list_upcoming(db, user_id, limit=self.EVENT_LIMIT))
        schedules = self._load("schedules", lambda: self.schedule_repo.list_weekly(db, user_id, limit=self.SCHEDULE_LIMIT))
        goals = self._load("goals", lambda: self.goal_repo.list_recent_with_subject(db, user_id, limit=self.GOAL_LIMIT))

        lines: List[str] = ["Agenda data provided to assistant:"]

        if events:
            lines.append("Upcoming events:")
            for e in events:
                lines.append(f"- {e.name} [{e.event_type}] on {e.event_date}{_suffix(e.description)}")
        else:
            lines.append(NO_EVENTS)

        if schedules:
            lines.append("Weekly schedules:")
            for s in schedules:
                lines.append(
                    f"- Day {s.day_of_week}: {_clock(s.start_time)}-{_clock(s.end_time)} "
                    f"at {s.location or '(no location)'}{_suffix(s.description)}"
                )
        else:
            lines.append(NO_SCHEDULES)

        if goals:
            lines.append("Recent weekly goals:")
            for goal, subject_name in goals:
                lines.append(
                    f"- {subject_name or '(unknown subject)'}: "
                    f"{_hours(goal.current_hours)}/{_hours(goal.target_hours)}h "
                    f"for week {goal.week_start} → {goal.week_end}"
                )
        else:
            lines.append(NO_GOALS)

        return "\n".join(lines)
