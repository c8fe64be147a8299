import logging

from dashboard_mfa.auth_strategies.base import SecondFactorStrategy
from dashboard_mfa.auth_strategies.credentials import HardwareTokenCredential, ValidationOutcome
from dashboard_mfa.core.exceptions import TransportFailureError
from dashboard_mfa.external_services.yubico import (
    ParsedOTP,
    TokenStatus,
    TokenVerificationService,
    parse_otp,
)

logger = logging.getLogger(__name__)

_STATUS_OUTCOMES = {
    TokenStatus.VALID: ValidationOutcome.VALID,
    TokenStatus.INVALID: ValidationOutcome.MISMATCH,
    TokenStatus.REPLAYED: ValidationOutcome.REPLAYED,
}


class YubikeyStrategy(SecondFactorStrategy[HardwareTokenCredential]):
    """
    Validates Yubico OTPs.

    The public prefix is matched locally first; only an OTP carrying the
    enrolled prefix is sent to the verification service, with one request
    bounded by ``timeout`` seconds.
    """

    credential_type = HardwareTokenCredential

    def __init__(self, service: TokenVerificationService, timeout: float = 2.0) -> None:
        self.service = service
        self.timeout = timeout

    async def check_remote(
        self, parsed: ParsedOTP, timeout: float | None = None
    ) -> ValidationOutcome:
        """Ask the verification service about an already parsed OTP."""
        deadline = self.timeout if timeout is None else timeout
        try:
            status = await self.service.verify(parsed.otp, timeout=deadline)
        except TransportFailureError as exc:
            logger.warning(
                f"Hardware-token verification unavailable for {parsed.prefix}: {exc.message}"
            )
            return ValidationOutcome.TRANSPORT_ERROR
        return _STATUS_OUTCOMES[status]

    async def validate(
        self,
        credential: HardwareTokenCredential,
        code: str,
        timeout: float | None = None,
    ) -> ValidationOutcome:
        parsed = parse_otp(self.prepare_code(code))
        if parsed is None or parsed.prefix != credential.prefix:
            return ValidationOutcome.NOT_THIS_METHOD
        return await self.check_remote(parsed, timeout=timeout)
