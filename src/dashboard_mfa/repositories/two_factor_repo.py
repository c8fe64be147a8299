import uuid
from collections.abc import Sequence

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_mfa.models.two_factor_method import TwoFactorMethodORM
from dashboard_mfa.repositories.postgres_repo import PostgresRepository


class TwoFactorMethodRepository(PostgresRepository[TwoFactorMethodORM]):
    def __init__(self, session: AsyncSession):
        super().__init__(TwoFactorMethodORM, session)

    def _for_user(self, user_id: uuid.UUID) -> Select[tuple[TwoFactorMethodORM]]:
        return (
            select(self.model)
            .where(self.model.user_id == user_id)
            .order_by(self.model.created_at, self.model.id)
        )

    async def list_for_user(self, user_id: uuid.UUID) -> Sequence[TwoFactorMethodORM]:
        """All methods of a user in enrollment order."""
        result = await self.session.execute(self._for_user(user_id))
        return result.scalars().all()

    async def find_enabled_methods(self, user_id: uuid.UUID) -> Sequence[TwoFactorMethodORM]:
        """Enabled methods of a user in enrollment order."""
        query = self._for_user(user_id).where(self.model.enabled.is_(True))
        result = await self.session.execute(query)
        return result.scalars().all()

    async def get_for_user(
        self, user_id: uuid.UUID, method_id: uuid.UUID
    ) -> TwoFactorMethodORM | None:
        query = select(self.model).where(
            self.model.id == method_id,
            self.model.user_id == user_id,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
