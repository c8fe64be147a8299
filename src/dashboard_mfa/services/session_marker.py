import logging
import uuid
from collections.abc import Iterable, Sequence

from dashboard_mfa.auth_strategies.constants import SESSION_2FA_METHOD_KEY
from dashboard_mfa.models import TwoFactorMethodORM
from dashboard_mfa.repositories.session_repo import SessionStore

logger = logging.getLogger(__name__)


class SessionMarker:
    """Remembers which method verified a session, so it is not prompted again."""

    def __init__(self, store: SessionStore):
        self.store = store

    async def mark(self, session_id: str, method_id: uuid.UUID) -> None:
        await self.store.put(session_id, SESSION_2FA_METHOD_KEY, str(method_id))

    async def get(self, session_id: str) -> uuid.UUID | None:
        raw = await self.store.get(session_id, SESSION_2FA_METHOD_KEY)
        if not raw:
            return None
        try:
            return uuid.UUID(raw)
        except ValueError:
            logger.warning(f"Discarding malformed 2FA marker in session {session_id}")
            await self.clear(session_id)
            return None

    async def clear(self, session_id: str) -> None:
        await self.store.forget(session_id, SESSION_2FA_METHOD_KEY)

    async def requires_challenge(
        self, session_id: str, enabled_methods: Iterable[TwoFactorMethodORM]
    ) -> bool:
        """
        True when the user has enabled methods and the session was not
        verified by one of them. A marker naming a method that has since been
        disabled or deleted no longer counts.
        """
        method_ids = {method.id for method in enabled_methods}
        if not method_ids:
            return False
        return await self.get(session_id) not in method_ids

    async def keep_verified(
        self, session_id: str, enabled_methods: Sequence[TwoFactorMethodORM]
    ) -> None:
        """
        Re-point the marker of an already verified session at the first
        enabled method once the method it named is disabled or removed.
        """
        if enabled_methods and await self.requires_challenge(session_id, enabled_methods):
            await self.mark(session_id, enabled_methods[0].id)
