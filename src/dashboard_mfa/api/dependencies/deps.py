from collections.abc import AsyncGenerator

from fastapi import Depends
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_mfa.core.config import settings
from dashboard_mfa.core.postgres import AsyncSessionLocal
from dashboard_mfa.core.redis import redis_client
from dashboard_mfa.external_services.yubico import TokenServiceFactory, TokenVerificationService
from dashboard_mfa.repositories.session_repo import RedisSessionStore
from dashboard_mfa.services.session_marker import SessionMarker
from dashboard_mfa.services.two_factor_service import TwoFactorService
from dashboard_mfa.services.verification_service import VerificationService


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


async def get_redis() -> Redis:
    if redis_client.client is None:
        raise RuntimeError("Redis client is not initialized")
    return redis_client.client


def get_token_service() -> TokenVerificationService:
    return TokenServiceFactory.from_settings()


async def get_session_marker(redis: Redis = Depends(get_redis)) -> SessionMarker:
    return SessionMarker(RedisSessionStore(redis, settings.SESSION_TIMEOUT_MINUTES * 60))


async def get_two_factor_service(
    db: AsyncSession = Depends(get_db),
    token_service: TokenVerificationService = Depends(get_token_service),
) -> TwoFactorService:
    return TwoFactorService.from_session(db, token_service)


async def get_verification_service(
    db: AsyncSession = Depends(get_db),
    token_service: TokenVerificationService = Depends(get_token_service),
) -> VerificationService:
    return VerificationService.from_session(db, token_service)
