import logging
import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_mfa.auth_strategies.credentials import (
    HardwareTokenCredential,
    TimeBasedCredential,
    ValidationOutcome,
)
from dashboard_mfa.auth_strategies.totp import TOTPStrategy, validate_totp
from dashboard_mfa.auth_strategies.yubikey import YubikeyStrategy
from dashboard_mfa.core.config import settings
from dashboard_mfa.core.exceptions import (
    EnrollmentError,
    ReplayDetectedError,
    TwoFactorMethodNotFoundError,
)
from dashboard_mfa.external_services.yubico import (
    TokenServiceFactory,
    TokenVerificationService,
    parse_otp,
)
from dashboard_mfa.models import TwoFactorMethodORM
from dashboard_mfa.repositories.two_factor_repo import TwoFactorMethodRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {"name", "enabled"}


class TwoFactorService:
    """Enrollment and management of a user's second-factor methods."""

    def __init__(
        self,
        repo: TwoFactorMethodRepository,
        yubikey: YubikeyStrategy,
        enroll_window: int = 8,
        secret_length: int = 32,
    ) -> None:
        self.repo = repo
        self.yubikey = yubikey
        self.enroll_window = enroll_window
        self.secret_length = secret_length

    @classmethod
    def from_session(
        cls, db: AsyncSession, token_service: TokenVerificationService | None = None
    ) -> "TwoFactorService":
        return cls(
            TwoFactorMethodRepository(db),
            YubikeyStrategy(
                token_service or TokenServiceFactory.from_settings(),
                timeout=settings.YUBICO_TIMEOUT_SECONDS,
            ),
            enroll_window=settings.TOTP_ENROLL_WINDOW,
            secret_length=settings.TOTP_SECRET_LENGTH,
        )

    def begin_time_based_enrollment(self, email: str) -> dict[str, str]:
        """Generate a fresh secret and the provisioning URI for authenticator apps."""
        secret = TOTPStrategy.generate_secret(self.secret_length)
        return {
            "secret": secret,
            "provisioning_uri": TOTPStrategy.get_provisioning_uri(
                secret, email, issuer=settings.APP_NAME
            ),
        }

    async def enroll_time_based(
        self, user_id: uuid.UUID, name: str, secret: str, proof_code: str
    ) -> TwoFactorMethodORM:
        """
        Persist a time-based method once ``proof_code`` shows the user's app
        produces codes for ``secret``.

        The wider enrollment window tolerates a slow setup. Nothing is stored
        when the proof fails.
        """
        secret = secret.replace(" ", "").upper()
        if not secret or not validate_totp(secret, proof_code, self.enroll_window):
            logger.info(f"Time-based enrollment rejected for user {user_id}: invalid proof code")
            raise EnrollmentError("Invalid 2FA code supplied. Please try again!")

        method = await self.repo.add(
            TwoFactorMethodORM.from_credential(user_id, name, TimeBasedCredential(secret))
        )
        logger.info(f"Enrolled time-based 2FA method {method.id} for user {user_id}")
        return method

    async def enroll_hardware_token(
        self, user_id: uuid.UUID, name: str, otp: str
    ) -> TwoFactorMethodORM:
        """
        Persist a hardware-token method from one OTP that the verification
        service accepts. Only the public prefix is stored.

        Raises:
            ReplayDetectedError: the OTP was already used
            EnrollmentError: any other failure, including an unreachable service
        """
        parsed = parse_otp(otp)
        if parsed is None or not parsed.prefix:
            logger.info(f"Hardware-token enrollment rejected for user {user_id}: unparsable OTP")
            raise EnrollmentError()

        outcome = await self.yubikey.check_remote(parsed)
        if outcome is ValidationOutcome.REPLAYED:
            logger.info(f"Hardware-token enrollment rejected for user {user_id}: replayed OTP")
            raise ReplayDetectedError()
        if not outcome.ok:
            logger.info(
                f"Hardware-token enrollment rejected for user {user_id}: {outcome.value}"
            )
            raise EnrollmentError()

        method = await self.repo.add(
            TwoFactorMethodORM.from_credential(
                user_id, name, HardwareTokenCredential(parsed.prefix)
            )
        )
        logger.info(f"Enrolled hardware-token 2FA method {method.id} for user {user_id}")
        return method

    async def list_methods(self, user_id: uuid.UUID) -> Sequence[TwoFactorMethodORM]:
        return await self.repo.list_for_user(user_id)

    async def enabled_methods(self, user_id: uuid.UUID) -> Sequence[TwoFactorMethodORM]:
        return await self.repo.find_enabled_methods(user_id)

    async def get_method(self, user_id: uuid.UUID, method_id: uuid.UUID) -> TwoFactorMethodORM:
        method = await self.repo.get_for_user(user_id, method_id)
        if method is None:
            raise TwoFactorMethodNotFoundError()
        return method

    async def update_method(
        self, user_id: uuid.UUID, method_id: uuid.UUID, patch: dict[str, Any]
    ) -> TwoFactorMethodORM:
        """Rename or toggle a method. Credentials cannot be changed."""
        unknown = set(patch) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        method = await self.get_method(user_id, method_id)
        method = await self.repo.update(method, patch)
        logger.info(f"Updated 2FA method {method.id} for user {user_id}: {sorted(patch)}")
        return method

    async def remove_method(self, user_id: uuid.UUID, method_id: uuid.UUID) -> None:
        method = await self.get_method(user_id, method_id)
        await self.repo.delete(method.id)
        logger.info(f"Removed 2FA method {method_id} for user {user_id}")
