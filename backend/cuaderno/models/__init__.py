# Models package for database entities

from .base import Base, BaseModel
from .user import User
from .program import Program
from .subject import Subject
from .topic import Topic
from .material import StudyMaterial
from .agenda import SubjectEvent, SubjectSchedule, WeeklyGoal, StudySession
from .local_setting import LocalSetting

# Export all models for easy importing
__all__ = [
    "Base", "BaseModel", "User", "Program", "Subject", "Topic", "StudyMaterial",
    "SubjectEvent", "SubjectSchedule", "WeeklyGoal", "StudySession", "LocalSetting",
]
