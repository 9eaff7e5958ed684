"""Persistence primitives shared by the service layer.

A ``Repository`` binds one ORM model to the request's ``AsyncSession`` and
exposes the handful of operations the services need: find by id, find many
with a filter, create, conditional update/delete by id, and count.
"""

from __future__ import annotations

import uuid
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import Base

ModelT = TypeVar("ModelT", bound=Base)


def parse_id(value: uuid.UUID | str | None) -> uuid.UUID | None:
    """Coerce a path/body identifier to a UUID; malformed ids resolve to None."""
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class Repository(Generic[ModelT]):
    def __init__(self, db: AsyncSession, model: type[ModelT]) -> None:
        self.db = db
        self.model = model

    async def find_by_id(
        self,
        record_id: uuid.UUID | str,
        *,
        options: tuple = (),
    ) -> ModelT | None:
        # populate_existing forces a round trip; bulk UPDATE/DELETE below bypass the identity map
        rid = parse_id(record_id)
        if rid is None:
            return None
        return await self.db.get(
            self.model, rid, options=list(options), populate_existing=True
        )

    async def find_many(
        self,
        *where: ColumnElement[bool],
        order_by: Any = None,
        limit: int | None = None,
        options: tuple = (),
    ) -> list[ModelT]:
        query = select(self.model).where(*where).execution_options(populate_existing=True)
        if options:
            query = query.options(*options)
        if order_by is not None:
            query = query.order_by(order_by)
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create(self, **values: Any) -> ModelT:
        record = self.model(**values)
        self.db.add(record)
        await self.db.flush()
        await self.db.refresh(record)
        return record

    async def update_by_id(
        self,
        record_id: uuid.UUID | str,
        values: dict[str, Any],
        *where: ColumnElement[bool],
    ) -> int:
        """``UPDATE ... WHERE id = ? AND <where>``; returns the affected row count."""
        rid = parse_id(record_id)
        if rid is None:
            return 0
        stmt = (
            update(self.model)
            .where(self.model.id == rid, *where)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount

    async def delete_by_id(self, record_id: uuid.UUID | str, *where: ColumnElement[bool]) -> int:
        """``DELETE ... WHERE id = ? AND <where>``; returns the affected row count."""
        rid = parse_id(record_id)
        if rid is None:
            return 0
        stmt = (
            delete(self.model)
            .where(self.model.id == rid, *where)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount

    async def count(self, *where: ColumnElement[bool]) -> int:
        query = select(func.count()).select_from(self.model).where(*where)
        return (await self.db.execute(query)).scalar() or 0
