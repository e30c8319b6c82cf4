"""Base repository with common CRUD operations."""
import math
from typing import TypeVar, Generic, Type, Optional, List, Dict, Any, Tuple
from sqlalchemy.orm import Session, Query
from sqlalchemy import desc, asc, func
from uuid import UUID

from src.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed to show ``total`` rows at ``limit`` per page."""
    return math.ceil(total / limit) if limit > 0 else 0


class BaseRepository(Generic[ModelType]):
    """Base repository with common database operations."""

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Create new record.

        Args:
            obj_in: Dictionary with object data

        Returns:
            Created model instance
        """
        db_obj = self.model(**obj_in)
        self.db.add(db_obj)
        self.db.commit()
        self.db.refresh(db_obj)
        return db_obj

    def get(self, id: UUID) -> Optional[ModelType]:
        """Get record by ID, or None."""
        return self.db.query(self.model).filter(self.model.id == id).first()

    def get_by_field(self, field_name: str, field_value: Any) -> Optional[ModelType]:
        """
        Get record by specific field value.

        Args:
            field_name: Name of the field to filter by
            field_value: Value to match

        Returns:
            Model instance or None if not found
        """
        if not hasattr(self.model, field_name):
            return None
        return self.db.query(self.model).filter(
            getattr(self.model, field_name) == field_value
        ).first()

    def paginate(
        self,
        query: Query,
        page: int = 1,
        limit: int = 20,
        order_by: Optional[str] = None,
        order_desc: bool = True,
    ) -> Tuple[List[ModelType], int]:
        """
        Apply ordering and page/limit pagination to a query.

        Args:
            query: Base query (filters already applied)
            page: 1-based page number
            limit: Page size
            order_by: Column name to order by (defaults to 'created_at')
            order_desc: Whether to order descending

        Returns:
            Tuple of (records on the page, total count)
        """
        total = query.count()

        if order_by and hasattr(self.model, order_by):
            order_column = getattr(self.model, order_by)
        elif hasattr(self.model, 'created_at'):
            order_column = self.model.created_at
        else:
            order_column = self.model.id

        direction = desc if order_desc else asc
        # id breaks ties so pages never overlap when timestamps collide
        query = query.order_by(direction(order_column), direction(self.model.id))

        records = query.offset((page - 1) * limit).limit(limit).all()
        return records, total

    def update(self, db_obj: ModelType, obj_in: Dict[str, Any]) -> ModelType:
        """
        Merge the given fields into a record.

        Args:
            db_obj: Loaded model instance
            obj_in: Dictionary with fields to update

        Returns:
            Updated model instance
        """
        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        self.db.commit()
        self.db.refresh(db_obj)
        return db_obj

    def delete(self, db_obj: ModelType) -> None:
        """Hard-delete a record."""
        self.db.delete(db_obj)
        self.db.commit()

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """
        Count records.

        Args:
            filters: Dictionary of column:value filters

        Returns:
            Count of records
        """
        query = self.db.query(func.count(self.model.id))

        if filters:
            for column, value in filters.items():
                if hasattr(self.model, column):
                    query = query.filter(getattr(self.model, column) == value)

        return query.scalar() or 0
