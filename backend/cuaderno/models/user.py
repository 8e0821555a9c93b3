"""
User model for authenticated students.
"""
from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.orm import relationship
from .base import BaseModel

class User(BaseModel):
    """
    A signed-up student. Every program, subject and material row is owned by one user.

    token_version is embedded in issued JWTs; bumping it on sign-out invalidates
    every token issued before.
    """

    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    # Shown to the assistant as the student's name
    full_name = Column(String(255), nullable=True)
    avatar_url = Column(String(512), nullable=True)

    token_version = Column(Integer, default=0, nullable=False)
    last_login_at = Column(DateTime, nullable=True)

    programs = relationship("Program", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        """String representation for debugging."""
        return f"<User(id={self.id}, email='{self.email}')>"
