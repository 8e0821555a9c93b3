"""
Key/value repository over local_settings.
"""

from typing import Dict, Iterable, Optional
from pydantic import BaseModel
from sqlalchemy.orm import Session
import logging

from .base import BaseRepository
from ..models.local_setting import LocalSetting

logger = logging.getLogger(__name__)


class LocalSettingRepository(BaseRepository[LocalSetting, BaseModel, BaseModel]):
    def __init__(self):
        super().__init__(LocalSetting)

    def get_value(self, db: Session, key: str) -> Optional[str]:
        row = db.query(LocalSetting).filter(LocalSetting.key == key).first()
        return row.value if row else None

    def get_values(self, db: Session, keys: Iterable[str]) -> Dict[str, Optional[str]]:
        keys = list(keys)
        rows = db.query(LocalSetting).filter(LocalSetting.key.in_(keys)).all()
        found = {r.key: r.value for r in rows}
        return {k: found.get(k) for k in keys}

    def set_values(self, db: Session, values: Dict[str, Optional[str]]) -> None:
        """Upsert several keys; caller owns the transaction so they land together."""
        try:
            existing = {
                r.key: r
                for r in db.query(LocalSetting).filter(LocalSetting.key.in_(list(values))).all()
            }
            for key, value in values.items():
                row = existing.get(key)
                if row is None:
                    db.add(LocalSetting(key=key, value=value))
                else:
                    row.value = value
                    db.add(row)
            db.flush()
        except Exception as e:
            logger.error(f"Error writing local settings {sorted(values)}: {e}")
            db.rollback()
            raise

    def delete_keys(self, db: Session, keys: Iterable[str]) -> int:
        try:
            n = (
                db.query(LocalSetting)
                  .filter(LocalSetting.key.in_(list(keys)))
                  .delete(synchronize_session=False)
            )
            db.flush()
            return n
        except Exception as e:
            logger.error(f"Error deleting local settings: {e}")
            db.rollback()
            raise
