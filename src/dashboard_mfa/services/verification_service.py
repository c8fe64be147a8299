import logging
import uuid
from collections.abc import Sequence
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_mfa.auth_strategies.base import SecondFactorStrategy
from dashboard_mfa.auth_strategies.credentials import Credential, ValidationOutcome
from dashboard_mfa.auth_strategies.totp import TOTPStrategy
from dashboard_mfa.auth_strategies.yubikey import YubikeyStrategy
from dashboard_mfa.core.config import settings
from dashboard_mfa.external_services.yubico import TokenServiceFactory, TokenVerificationService
from dashboard_mfa.models import TwoFactorMethodORM
from dashboard_mfa.repositories.two_factor_repo import TwoFactorMethodRepository

logger = logging.getLogger(__name__)


class MethodStore(Protocol):
    async def find_enabled_methods(self, user_id: uuid.UUID) -> Sequence[TwoFactorMethodORM]: ...


class VerificationService:
    """
    Decides whether a submitted code satisfies one of a user's enabled methods.

    The result is either the id of the matching method or None. None is the
    only failure value callers ever see; the per-method reason (mismatch,
    replay, transport error, ...) goes to the log and nowhere else.
    Writing the session marker is left to the caller.
    """

    def __init__(self, methods: MethodStore, strategies: Sequence[SecondFactorStrategy[Any]]):
        self.methods = methods
        self._strategies: dict[type, SecondFactorStrategy[Any]] = {
            strategy.credential_type: strategy for strategy in strategies
        }

    @classmethod
    def from_session(
        cls, db: AsyncSession, token_service: TokenVerificationService | None = None
    ) -> "VerificationService":
        return cls(
            TwoFactorMethodRepository(db),
            [
                TOTPStrategy(window=settings.TOTP_VERIFY_WINDOW),
                YubikeyStrategy(
                    token_service or TokenServiceFactory.from_settings(),
                    timeout=settings.YUBICO_TIMEOUT_SECONDS,
                ),
            ],
        )

    async def validate_credential(self, credential: Credential, code: str) -> ValidationOutcome:
        strategy = self._strategies.get(type(credential))
        if strategy is None:
            raise TypeError(f"No strategy registered for {type(credential).__name__}")
        return await strategy.validate(credential, code)

    async def verify(self, user_id: uuid.UUID, code: str) -> uuid.UUID | None:
        methods = await self.methods.find_enabled_methods(user_id)
        if not methods:
            logger.info(f"2FA verification for user {user_id}: no enabled methods")
            return None

        # Outcomes are shared between methods holding the same credential, so
        # one token prefix costs at most one remote call per attempt.
        outcomes: dict[Credential, ValidationOutcome] = {}
        reasons: dict[str, str] = {}
        matches: list[TwoFactorMethodORM] = []

        for method in methods:
            outcome = await self._evaluate(method, code, outcomes)
            reasons[str(method.id)] = outcome.value
            if outcome.ok:
                matches.append(method)

        if not matches:
            logger.info(f"2FA verification failed for user {user_id}: {reasons}")
            return None

        if len(matches) > 1:
            logger.warning(
                f"2FA code for user {user_id} matched {len(matches)} methods; "
                f"using first enrolled {matches[0].id}"
            )

        logger.info(f"2FA verification succeeded for user {user_id} with method {matches[0].id}")
        return matches[0].id

    async def _evaluate(
        self,
        method: TwoFactorMethodORM,
        code: str,
        outcomes: dict[Credential, ValidationOutcome],
    ) -> ValidationOutcome:
        try:
            credential = method.credential
            if credential not in outcomes:
                outcomes[credential] = await self.validate_credential(credential, code)
            return outcomes[credential]
        except Exception:
            logger.exception(f"Error while validating 2FA method {method.id}")
            return ValidationOutcome.ERROR
