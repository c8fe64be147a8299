from typing import Any, Generic, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_mfa.core.postgres import Base

T = TypeVar("T", bound=Base)


class PostgresRepository(Generic[T]):
    def __init__(self, model: type[T], session: AsyncSession):
        self.model = model
        self.session = session

    async def get(self, id: Any) -> T | None:
        query = select(self.model).where(self.model.id == id)  # type: ignore[attr-defined]
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def add(self, db_obj: T) -> T:
        self.session.add(db_obj)
        await self.session.flush()
        await self.session.refresh(db_obj)
        return db_obj

    async def update(self, db_obj: T, obj_in: dict[str, Any]) -> T:
        for field, value in obj_in.items():
            setattr(db_obj, field, value)
        await self.session.flush()
        await self.session.refresh(db_obj)
        return db_obj

    async def delete(self, id: Any) -> bool:
        query = delete(self.model).where(self.model.id == id)  # type: ignore[attr-defined]
        result = await self.session.execute(query)
        return result.rowcount > 0  # type: ignore[attr-defined]
