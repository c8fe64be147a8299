from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_mfa.models.user import UserORM
from dashboard_mfa.repositories.postgres_repo import PostgresRepository


class UserRepository(PostgresRepository[UserORM]):
    def __init__(self, session: AsyncSession):
        super().__init__(UserORM, session)
