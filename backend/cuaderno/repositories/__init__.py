# Repositories package for data access layer

# Base repositories
from .base import BaseRepository, OwnedRepository

# Domain-specific repositories
from .user import UserRepository
from .program import ProgramRepository, SubjectRepository
from .material import TopicRepository, MaterialRepository
from .agenda import EventRepository, ScheduleRepository, GoalRepository, StudySessionRepository
from .local_setting import LocalSettingRepository

__all__ = [
    "BaseRepository",
    "OwnedRepository",
    "UserRepository",
    "ProgramRepository",
    "SubjectRepository",
    "TopicRepository",
    "MaterialRepository",
    "EventRepository",
    "ScheduleRepository",
    "GoalRepository",
    "StudySessionRepository",
    "LocalSettingRepository",
]
