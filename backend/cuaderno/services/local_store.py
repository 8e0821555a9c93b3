"""
Durable key/value store backed by the local_settings table.

Each call opens its own short-lived session and commits, so values survive
process restarts independently of any request transaction.
"""

from __future__ import annotations
from typing import Callable, Dict, Iterable, Optional
import logging

from sqlalchemy.orm import Session

from cuaderno.repositories.local_setting import LocalSettingRepository

logger = logging.getLogger(__name__)


class LocalStore:
    def __init__(
        self,
        session_factory: Optional[Callable[[], Session]] = None,
        repo: Optional[LocalSettingRepository] = None,
    ):
        if session_factory is None:
            from cuaderno.database import SessionLocal
            session_factory = SessionLocal
        self._session_factory = session_factory
        self.repo = repo or LocalSettingRepository()

    def get(self, key: str) -> Optional[str]:
        with self._session_factory() as db:
            return self.repo.get_value(db, key)

    def get_many(self, keys: Iterable[str]) -> Dict[str, Optional[str]]:
        with self._session_factory() as db:
            return self.repo.get_values(db, keys)

    def set_many(self, values: Dict[str, Optional[str]]) -> None:
        """All keys are written in one transaction."""
        with self._session_factory() as db:
            try:
                self.repo.set_values(db, values)
                db.commit()
            except Exception:
                db.rollback()
                raise

    def delete(self, keys: Iterable[str]) -> None:
        with self._session_factory() as db:
            try:
                self.repo.delete_keys(db, keys)
                db.commit()
            except Exception:
                db.rollback()
                raise
