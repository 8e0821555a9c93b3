"""
StudyMaterial model for uploaded or authored study artifacts.
"""
from sqlalchemy import Column, String, Text, Integer, ForeignKey
from sqlalchemy.orm import relationship
from .base import BaseModel, owner_column

MATERIAL_TYPES = ("notes", "document", "audio", "video", "pdf", "image")
AI_STATUSES = ("pending", "processing", "completed", "failed")

class StudyMaterial(BaseModel):
    """
    A material attached to a subject (and optionally a topic).

    - content: authored text or extracted text; used as the context snippet
    - file_path: object storage key inside the materials bucket, if a file was uploaded
    """

    __tablename__ = "study_materials"

    user_id = owner_column()
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    topic_id = Column(Integer, ForeignKey("topics.id", ondelete="SET NULL"), nullable=True, index=True)

    title = Column(String(255), nullable=False)
    # 'notes' | 'document' | 'audio' | 'video' | 'pdf' | 'image'
    type = Column(String(20), nullable=False)
    content = Column(Text, nullable=True)

    file_path = Column(String(512), nullable=True)
    file_size = Column(Integer, nullable=True)
    mime_type = Column(String(128), nullable=True)

    # 'pending' | 'processing' | 'completed' | 'failed'
    ai_status = Column(String(20), default="pending", nullable=False)

    subject = relationship("Subject", back_populates="materials")
    topic = relationship("Topic", back_populates="materials")

    def __repr__(self):
        return f"<StudyMaterial(id={self.id}, title='{self.title}', type='{self.type}')>"
