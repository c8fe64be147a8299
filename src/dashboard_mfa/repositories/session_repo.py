from typing import Protocol

from redis.asyncio import Redis

from dashboard_mfa.auth_strategies.constants import SESSION_KEY_PREFIX


class SessionStore(Protocol):
    """Key/value state scoped to one login session."""

    async def get(self, session_id: str, key: str) -> str | None: ...

    async def put(self, session_id: str, key: str, value: str) -> None: ...

    async def forget(self, session_id: str, key: str) -> None: ...


class RedisSessionStore:
    def __init__(self, client: Redis, ttl_seconds: int):
        self.client = client
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _key(session_id: str, key: str) -> str:
        return f"{SESSION_KEY_PREFIX}{session_id}:{key}"

    async def get(self, session_id: str, key: str) -> str | None:
        return await self.client.get(self._key(session_id, key))

    async def put(self, session_id: str, key: str, value: str) -> None:
        await self.client.setex(self._key(session_id, key), self.ttl_seconds, value)

    async def forget(self, session_id: str, key: str) -> None:
        await self.client.delete(self._key(session_id, key))
