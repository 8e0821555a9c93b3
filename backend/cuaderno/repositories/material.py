"""
Topic and study material repositories.
"""

from typing import List, Optional
from sqlalchemy.orm import Session
import logging

from .base import OwnedRepository
from ..models.topic import Topic
from ..models.material import StudyMaterial
from ..schemas.material import TopicCreate, TopicUpdate, MaterialCreate, MaterialUpdate

logger = logging.getLogger(__name__)


class TopicRepository(OwnedRepository[Topic, TopicCreate, TopicUpdate]):
    def __init__(self):
        super().__init__(Topic)

    def list_for_user(self, db: Session, user_id: int, subject_id: Optional[int] = None) -> List[Topic]:
        """Topics ordered by name."""
        filters = {"subject_id": subject_id} if subject_id is not None else None
        return self.list_owned(db, user_id, filters=filters, order_by="name", limit=500)


class MaterialRepository(OwnedRepository[StudyMaterial, MaterialCreate, MaterialUpdate]):
    def __init__(self):
        super().__init__(StudyMaterial)

    def list_for_user(
        self,
        db: Session,
        user_id: int,
        subject_id: Optional[int] = None,
        topic_id: Optional[int] = None,
        limit: int = 100,
    ) -> List[StudyMaterial]:
        filters = {}
        if subject_id is not None:
            filters["subject_id"] = subject_id
        if topic_id is not None:
            filters["topic_id"] = topic_id
        return self.list_owned(db, user_id, filters=filters, order_by="created_at", descending=True, limit=limit)

    def list_recent_for_subject(
        self,
        db: Session,
        user_id: int,
        subject_id: int,
        limit: int = 25,
    ) -> List[StudyMaterial]:
        """Most recently created materials of one subject (newest first)."""
        try:
            return self.list_owned(
                db, user_id,
                filters={"subject_id": subject_id},
                order_by="created_at",
                descending=True,
                limit=limit,
            )
        except Exception as e:
            logger.error(f"Error getting recent materials for subject {subject_id}: {e}")
            raise
