"""
Base repository classes that provide a consistent interface for all data access operations.
"""

from typing import TypeVar, Generic, Type, Optional, List, Any, Dict, Union
from sqlalchemy.orm import Session, Query
from sqlalchemy import and_, desc
from pydantic import BaseModel
import logging

from ..models.base import BaseModel as DBBaseModel

# Type variables for generic repository
T = TypeVar('T', bound=DBBaseModel)
CreateSchemaType = TypeVar('CreateSchemaType', bound=BaseModel)
UpdateSchemaType = TypeVar('UpdateSchemaType', bound=BaseModel)

logger = logging.getLogger(__name__)

class BaseRepository(Generic[T, CreateSchemaType, UpdateSchemaType]):
    """
    Base repository with common CRUD operations.

    Generic types:
    - T: Database model type
    - CreateSchemaType: Pydantic schema for creation
    - UpdateSchemaType: Pydantic schema for updates
    """

    def __init__(self, model: Type[T]):
        """Initialize repository with a specific model."""
        self.model = model

    def get(self, db: Session, id: int) -> Optional[T]:
        """Get a single record by ID."""
        try:
            return db.query(self.model).filter(self.model.id == id).first()
        except Exception as e:
            logger.error(f"Error getting {self.model.__name__} with id {id}: {e}")
            raise

    def get_multi(
        self,
        db: Session,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[T]:
        """Get multiple records with equality filters, ordering and pagination."""
        try:
            query = self._apply_filters(db.query(self.model), filters)
            query = self._apply_order(query, order_by, descending)
            return query.offset(skip).limit(limit).all()
        except Exception as e:
            logger.error(f"Error getting multiple {self.model.__name__}: {e}")
            raise

    def create(self, db: Session, obj_in: Union[CreateSchemaType, dict]) -> T:
        """Create a new record in the database."""
        try:
            obj_data = self._to_dict(obj_in)
            obj_data = self._filter_model_fields(obj_data)
            db_obj = self.model(**obj_data)
            db.add(db_obj)
            db.flush()
            db.refresh(db_obj)
            logger.info(f"Created {self.model.__name__} with id {db_obj.id}")
            return db_obj
        except Exception as e:
            logger.error(f"Error creating {self.model.__name__}: {e}")
            db.rollback()
            raise

    def update(self, db: Session, db_obj: T, obj_in: Union[UpdateSchemaType, dict]) -> T:
        """Update an existing record in the database."""
        try:
            update_data = self._to_dict(obj_in)
            update_data = self._filter_model_fields(update_data)
            for field, value in update_data.items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)
            db.add(db_obj)
            db.flush()
            db.refresh(db_obj)
            logger.info(f"Updated {self.model.__name__} with id {db_obj.id}")
            return db_obj
        except Exception as e:
            logger.error(f"Error updating {self.model.__name__} with id {db_obj.id}: {e}")
            db.rollback()
            raise

    def delete(self, db: Session, id: int) -> bool:
        """Delete a record by ID."""
        try:
            db_obj = db.query(self.model).filter(self.model.id == id).first()
            if db_obj:
                db.delete(db_obj)
                db.flush()
                logger.info(f"Deleted {self.model.__name__} with id {id}")
                return True
            return False
        except Exception as e:
            logger.error(f"Error deleting {self.model.__name__} with id {id}: {e}")
            db.rollback()
            raise

    def count(self, db: Session, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count records with optional filtering."""
        try:
            return self._apply_filters(db.query(self.model), filters).count()
        except Exception as e:
            logger.error(f"Error counting {self.model.__name__}: {e}")
            raise

    def _apply_filters(self, query: Query, filters: Optional[Dict[str, Any]]) -> Query:
        """AND together equality conditions on known columns; unknown keys are ignored."""
        if not filters:
            return query
        conditions = [
            getattr(self.model, field) == value
            for field, value in filters.items()
            if hasattr(self.model, field)
        ]
        return query.filter(and_(*conditions)) if conditions else query

    def _apply_order(self, query: Query, order_by: Optional[str], descending: bool) -> Query:
        if not order_by or not hasattr(self.model, order_by):
            return query.order_by(self.model.id)
        column = getattr(self.model, order_by)
        # id as tie-breaker keeps ordering stable for equal timestamps
        if descending:
            return query.order_by(desc(column), desc(self.model.id))
        return query.order_by(column, self.model.id)

    def _filter_model_fields(self, data: dict) -> dict:
        """Filter data to only include valid model fields."""
        cols = {c.key for c in self.model.__table__.columns}
        return {k: v for k, v in data.items() if k in cols}

    def _to_dict(self, obj: Any) -> dict:
        """Convert Pydantic model or dict to dictionary."""
        if hasattr(obj, "model_dump"):
            return obj.model_dump(exclude_unset=True)
        if isinstance(obj, dict):
            return obj
        raise TypeError(f"Unsupported input type for {self.model.__name__}: {type(obj)}")


class OwnedRepository(BaseRepository[T, CreateSchemaType, UpdateSchemaType]):
    """
    Repository for user-owned rows. Every method takes the caller's user_id and
    never returns or touches rows owned by someone else.
    """

    def get_owned(self, db: Session, user_id: int, id: int) -> Optional[T]:
        try:
            return (
                db.query(self.model)
                  .filter(and_(self.model.id == id, self.model.user_id == user_id))
                  .first()
            )
        except Exception as e:
            logger.error(f"Error getting {self.model.__name__} {id} for user {user_id}: {e}")
            raise

    def list_owned(
        self,
        db: Session,
        user_id: int,
        *,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = "created_at",
        descending: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> List[T]:
        scoped = dict(filters or {})
        scoped["user_id"] = user_id
        return self.get_multi(db, skip=skip, limit=limit, filters=scoped, order_by=order_by, descending=descending)

    def create_owned(self, db: Session, user_id: int, obj_in: Union[CreateSchemaType, dict]) -> T:
        data = self._to_dict(obj_in)
        data["user_id"] = user_id
        return self.create(db, data)

    def update_owned(self, db: Session, user_id: int, id: int, obj_in: Union[UpdateSchemaType, dict]) -> Optional[T]:
        db_obj = self.get_owned(db, user_id, id)
        if not db_obj:
            return None
        data = self._to_dict(obj_in)
        # ownership is never reassigned through an update
        data.pop("user_id", None)
        return self.update(db, db_obj, data)

    def delete_owned(self, db: Session, user_id: int, id: int) -> bool:
        if not self.get_owned(db, user_id, id):
            return False
        return self.delete(db, id)
