"""
Program and subject repositories.
"""

from typing import List, Optional
from sqlalchemy.orm import Session
import logging

from .base import OwnedRepository
from ..models.program import Program
from ..models.subject import Subject
from ..schemas.program import ProgramCreate, ProgramUpdate, SubjectCreate, SubjectUpdate

logger = logging.getLogger(__name__)


class ProgramRepository(OwnedRepository[Program, ProgramCreate, ProgramUpdate]):
    def __init__(self):
        super().__init__(Program)

    def list_for_user(self, db: Session, user_id: int, limit: int = 100) -> List[Program]:
        """Newest programs first."""
        return self.list_owned(db, user_id, order_by="created_at", descending=True, limit=limit)


class SubjectRepository(OwnedRepository[Subject, SubjectCreate, SubjectUpdate]):
    def __init__(self):
        super().__init__(Subject)

    def list_for_user(
        self,
        db: Session,
        user_id: int,
        program_id: Optional[int] = None,
        limit: int = 100,
    ) -> List[Subject]:
        """Newest subjects first, optionally restricted to one program."""
        filters = {"program_id": program_id} if program_id is not None else None
        return self.list_owned(db, user_id, filters=filters, order_by="created_at", descending=True, limit=limit)
