"""
Subject model: a course within a program. Owns topics, materials, events,
schedules, goals and study sessions.
"""
from sqlalchemy import Column, String, Integer, Date, ForeignKey
from sqlalchemy.orm import relationship
from .base import BaseModel, owner_column

class Subject(BaseModel):
    __tablename__ = "subjects"

    user_id = owner_column()
    program_id = Column(Integer, ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    color = Column(String(32), nullable=True)
    icon = Column(String(64), nullable=True)
    instructor_name = Column(String(255), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    syllabus_file_path = Column(String(512), nullable=True)
    syllabus_file_name = Column(String(255), nullable=True)
    syllabus_file_size = Column(Integer, nullable=True)

    program = relationship("Program", back_populates="subjects")
    topics = relationship("Topic", back_populates="subject", cascade="all, delete-orphan")
    materials = relationship("StudyMaterial", back_populates="subject", cascade="all, delete-orphan")
    events = relationship("SubjectEvent", back_populates="subject", cascade="all, delete-orphan")
    schedules = relationship("SubjectSchedule", back_populates="subject", cascade="all, delete-orphan")
    goals = relationship("WeeklyGoal", back_populates="subject", cascade="all, delete-orphan")
    study_sessions = relationship("StudySession", back_populates="subject", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Subject(id={self.id}, name='{self.name}', program_id={self.program_id})>"
