# backend/repositories/base.py
"""
Generic SQLAlchemy repository.

A repository wraps the caller's Session for a single model. It never commits:
the service that owns the unit of work decides when to flush and commit, so a
stock mutation and its transaction record always land in the same commit.
"""
from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy import func
from sqlalchemy.orm import Session

from database import Base

ModelType = TypeVar("ModelType", bound=Base)


class Repository(Generic[ModelType]):
    model: Type[ModelType]

    def __init__(self, db: Session):
        self.db = db

    def query(self):
        return self.db.query(self.model)

    def get(self, entity_id) -> Optional[ModelType]:
        return self.db.get(self.model, entity_id)

    def get_by(self, *criteria) -> Optional[ModelType]:
        return self.query().filter(*criteria).first()

    def list(self, *criteria, order_by=None) -> List[ModelType]:
        query = self.query().filter(*criteria)
        if order_by is not None:
            query = query.order_by(order_by)
        return query.all()

    def add(self, entity: ModelType) -> ModelType:
        self.db.add(entity)
        self.db.flush()
        return entity

    def update(self, entity: ModelType) -> ModelType:
        # Entities are tracked by the session; flushing pushes the pending changes
        self.db.flush()
        return entity

    def delete(self, entity: ModelType) -> None:
        self.db.delete(entity)
        self.db.flush()

    def exists(self, entity_id) -> bool:
        if entity_id is None:
            return False
        query = self.db.query(self.model).filter(self.model.id == entity_id)
        return self.db.query(query.exists()).scalar()

    def count(self, *criteria) -> int:
        return self.db.query(func.count(self.model.id)).filter(*criteria).scalar() or 0
