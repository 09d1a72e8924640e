"""Generic record store over an AsyncSession.

Mirrors the document-store operations the ledger is written against
(find, findById, findOne, save, findByIdAndUpdate, findByIdAndDelete).
Nothing here commits: writes are flushed into the request transaction and
committed by the session dependency.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """Storage operations for one mapped model"""

    def __init__(self, model: Type[ModelT]):
        self.model = model

    def _filtered(self, filters: Dict[str, Any]):
        stmt = select(self.model)
        for field, value in filters.items():
            stmt = stmt.where(getattr(self.model, field) == value)
        return stmt

    async def find(self, db: AsyncSession, order_by: Any = None, **filters: Any) -> List[ModelT]:
        stmt = self._filtered(filters)
        stmt = stmt.order_by(order_by if order_by is not None else self.model.created_at)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def find_by_id(self, db: AsyncSession, record_id: UUID) -> Optional[ModelT]:
        result = await db.execute(select(self.model).where(self.model.id == record_id))
        return result.scalar_one_or_none()

    async def find_one(self, db: AsyncSession, order_by: Any = None, **filters: Any) -> Optional[ModelT]:
        stmt = self._filtered(filters)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        result = await db.execute(stmt.limit(1))
        return result.scalars().first()

    async def save(self, db: AsyncSession, record: ModelT) -> ModelT:
        """Add (or re-add) a record and flush so its identifier is assigned"""
        db.add(record)
        await db.flush()
        await db.refresh(record)
        return record

    async def find_by_id_and_update(
        self, db: AsyncSession, record_id: UUID, patch: Dict[str, Any]
    ) -> Optional[ModelT]:
        record = await self.find_by_id(db, record_id)
        if record is None:
            return None
        for field, value in patch.items():
            setattr(record, field, value)
        return await self.save(db, record)

    async def find_by_id_and_delete(self, db: AsyncSession, record_id: UUID) -> None:
        await db.execute(delete(self.model).where(self.model.id == record_id))
        await db.flush()
