"""
Generic repository with the CRUD operations every resource shares.
"""

import uuid
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel
from sqlalchemy import asc, desc, func
from sqlalchemy.orm import Session

from blog_aggregator.models import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)


class BaseRepository(Generic[ModelType, CreateSchemaType]):
    """Repository base class.

    Repositories flush but never commit; the caller's session scope
    (``DatabaseManager.session()``) owns the transaction. SQLAlchemy errors
    propagate to the caller.
    """

    def __init__(self, session: Session, model: type[ModelType]) -> None:
        """Initialize repository with a database session.

        Args:
            session: SQLAlchemy Session instance
            model: ORM model class handled by this repository
        """
        self.session = session
        self.model = model

    def get_by_id(self, id: uuid.UUID) -> Optional[ModelType]:
        return self.session.get(self.model, id)

    def list(
        self,
        limit: Optional[int] = None,
        offset: int = 0,
        order_by: str = "created_at",
        order_desc: bool = False,
        **filters: Any,
    ) -> list[ModelType]:
        """List rows with optional equality filters.

        Args:
            limit: Maximum number of results (None for all)
            offset: Number of results to skip
            order_by: Column to order by
            order_desc: Sort in descending order
            **filters: column=value equality filters

        Returns:
            List of model instances
        """
        query = self.session.query(self.model).filter_by(**filters)

        column = getattr(self.model, order_by)
        query = query.order_by(desc(column) if order_desc else asc(column))

        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count(self, **filters: Any) -> int:
        return (
            self.session.query(func.count(self.model.id))
            .filter_by(**filters)
            .scalar()
        )

    def _add(self, instance: ModelType) -> ModelType:
        self.session.add(instance)
        self.session.flush()
        self.session.refresh(instance)
        return instance

    def create(self, obj_in: CreateSchemaType, **extra: Any) -> ModelType:
        """Create a row from a Pydantic schema.

        Args:
            obj_in: Validated input schema
            **extra: Additional column values not in the schema

        Returns:
            The created model instance
        """
        return self._add(self.model(**obj_in.model_dump(), **extra))

    def delete(self, instance: ModelType) -> None:
        self.session.delete(instance)
        self.session.flush()
