"""
Base repository with common CRUD operations and utilities.

Repositories never commit: they flush inside the session handed to them
by the inventory store, whose unit of work owns commit and rollback.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hotel_reservation.core.exceptions import RepositoryError, ValidationError
from hotel_reservation.models.base import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """
    Base repository providing common database operations.

    Features:
    - Create with flush so generated ids are available immediately
    - Lookup by primary key, optionally with a row lock
    - Criteria filtering and ordering
    - Counting
    """

    def __init__(self, model: Type[T], session: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Database session
        """
        self.model = model
        self.session = session

    # ============================================================================
    # CREATE OPERATIONS
    # ============================================================================

    def create(self, data: Dict[str, Any]) -> T:
        """
        Create a new entity and flush it.

        Raises:
            ValidationError: If a unique or check constraint is violated
            RepositoryError: If any other database error occurs
        """
        return self.add(self.model(**data))

    def add(self, entity: T) -> T:
        try:
            self.session.add(entity)
            self.session.flush()
            return entity
        except IntegrityError as e:
            raise ValidationError(f"Integrity constraint violated: {e.orig}") from e

    # ============================================================================
    # READ OPERATIONS
    # ============================================================================

    def get_by_id(self, entity_id: int, for_update: bool = False) -> Optional[T]:
        """
        Get entity by ID.

        Args:
            entity_id: Primary key
            for_update: Lock the row until the enclosing transaction ends

        Returns:
            Entity or None
        """
        query = select(self.model).where(self.model.id == entity_id)
        if for_update:
            query = query.with_for_update()
        return self.session.execute(query).unique().scalar_one_or_none()

    def get_all(self, order_by: Optional[str] = "id") -> List[T]:
        query = select(self.model)
        if order_by:
            query = query.order_by(getattr(self.model, order_by))
        return list(self.session.execute(query).unique().scalars().all())

    def find_by_criteria(
        self,
        criteria: Dict[str, Any],
        order_by: Optional[List[str]] = None,
        limit: Optional[int] = None,
    ) -> List[T]:
        """
        Find entities matching criteria.

        Args:
            criteria: Filter criteria as key-value pairs; list values use IN
            order_by: Fields to order by (prefix with - for desc)
            limit: Maximum number of records

        Returns:
            List of matching entities
        """
        query = select(self.model)

        for key, value in criteria.items():
            if not hasattr(self.model, key):
                raise RepositoryError(f"{self.model.__name__} has no attribute {key}")
            column = getattr(self.model, key)
            if isinstance(value, (list, tuple)):
                query = query.where(column.in_(value))
            else:
                query = query.where(column == value)

        for field in order_by or ["id"]:
            if field.startswith("-"):
                query = query.order_by(getattr(self.model, field[1:]).desc())
            else:
                query = query.order_by(getattr(self.model, field))

        if limit:
            query = query.limit(limit)

        try:
            return list(self.session.execute(query).unique().scalars().all())
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find by criteria failed: {e}") from e

    def count(self, criteria: Optional[Dict[str, Any]] = None) -> int:
        query = select(func.count(self.model.id))
        for key, value in (criteria or {}).items():
            query = query.where(getattr(self.model, key) == value)
        return self.session.execute(query).scalar_one()

    # ============================================================================
    # UPDATE OPERATIONS
    # ============================================================================

    def update(self, entity: T, data: Dict[str, Any]) -> T:
        for key, value in data.items():
            if not hasattr(entity, key):
                raise RepositoryError(f"{self.model.__name__} has no attribute {key}")
            setattr(entity, key, value)
        self.session.flush()
        return entity

    # ============================================================================
    # DELETE OPERATIONS
    # ============================================================================

    def delete(self, entity: T) -> None:
        self.session.delete(entity)
        self.session.flush()
