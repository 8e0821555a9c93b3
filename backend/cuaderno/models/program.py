"""
Program model: a top-level course of study (e.g. a degree).
"""
from sqlalchemy import Column, String, Integer
from sqlalchemy.orm import relationship
from .base import BaseModel, owner_column

class Program(BaseModel):
    __tablename__ = "programs"

    user_id = owner_column()

    name = Column(String(255), nullable=False)
    institution = Column(String(255), nullable=True)
    color = Column(String(32), nullable=True)
    icon = Column(String(64), nullable=True)

    # Optional syllabus stored in object storage
    syllabus_file_path = Column(String(512), nullable=True)
    syllabus_file_name = Column(String(255), nullable=True)
    syllabus_file_size = Column(Integer, nullable=True)

    user = relationship("User", back_populates="programs")
    subjects = relationship("Subject", back_populates="program", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Program(id={self.id}, name='{self.name}', user_id={self.user_id})>"
