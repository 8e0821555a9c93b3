"""
User repository for user management operations.
"""

from __future__ import annotations
from typing import Optional
from datetime import datetime
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from .base import BaseRepository
from ..models.user import User
from ..schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User, UserCreate, UserUpdate]):
    def __init__(self) -> None:
        super().__init__(User)

    def create(self, db: Session, data: UserCreate) -> User:
        """Create and persist a User. ALWAYS commits and refreshes."""
        try:
            obj = User(**data.model_dump())
            obj.email = obj.email.strip().lower()
            db.add(obj)

            # Always commit immediately to avoid half-written rows in case of DB errors
            db.commit()
            db.refresh(obj)

            logger.debug({"repo": "user.create", "id": obj.id, "email": obj.email})
            return obj
        except Exception:
            db.rollback()
            logger.exception("Error in UserRepository.create")
            raise

    def update(self, db: Session, obj: User, data: UserUpdate) -> User:
        """Update and persist a User. ALWAYS commits and refreshes."""
        try:
            # Only update fields that are actually provided (exclude_unset=True)
            for k, v in data.model_dump(exclude_unset=True).items():
                setattr(obj, k, v)
            db.add(obj)
            db.commit()
            db.refresh(obj)

            logger.debug({"repo": "user.update", "id": obj.id, "email": obj.email})
            return obj
        except Exception:
            db.rollback()
            logger.exception("Error in UserRepository.update")
            raise

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        """Get user by email (normalized, case-insensitive)."""
        try:
            email_norm = email.strip().lower()
            return (
                db.query(User)
                .filter(func.lower(User.email) == email_norm)
                .first()
            )
        except Exception as e:
            logger.error(f"Error getting user by email {email}: {e}")
            raise

    def update_last_login(self, db: Session, user: User) -> User:
        """Touch last_login_at; persist with commit+refresh."""
        try:
            user.last_login_at = datetime.utcnow()
            db.add(user)
            db.commit()
            db.refresh(user)

            logger.info(f"Updated last login for user {user.id}")
            return user
        except Exception as e:
            db.rollback()
            logger.error(f"Error updating last login for user {getattr(user, 'id', None)}: {e}")
            raise

    def bump_token_version(self, db: Session, user: User) -> User:
        """Invalidate every token issued so far for this user (sign-out)."""
        try:
            user.token_version = (user.token_version or 0) + 1
            db.add(user)
            db.commit()
            db.refresh(user)
            logger.info(f"Revoked tokens for user {user.id} (token_version={user.token_version})")
            return user
        except Exception as e:
            db.rollback()
            logger.error(f"Error bumping token version for user {getattr(user, 'id', None)}: {e}")
            raise
