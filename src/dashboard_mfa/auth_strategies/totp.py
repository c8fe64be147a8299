import hmac
import time
from datetime import datetime

import pyotp

from dashboard_mfa.auth_strategies.base import SecondFactorStrategy
from dashboard_mfa.auth_strategies.constants import TOTP_DIGITS, TOTP_INTERVAL_SECONDS
from dashboard_mfa.auth_strategies.credentials import TimeBasedCredential, ValidationOutcome


def validate_totp(
    secret: str,
    code: str,
    window: int,
    for_time: int | float | datetime | None = None,
) -> bool:
    """
    Check ``code`` against every time step in ``[-window, +window]`` around
    ``for_time``.

    All codes in the window are compared, with no early exit, so a near miss
    and a far miss go through the same work.
    """
    if window < 0:
        raise ValueError("window must be non-negative")

    if len(code) != TOTP_DIGITS or not (code.isascii() and code.isdigit()):
        return False

    if for_time is None:
        for_time = time.time()

    totp = pyotp.TOTP(secret, digits=TOTP_DIGITS, interval=TOTP_INTERVAL_SECONDS)
    try:
        candidates = [totp.at(for_time, offset) for offset in range(-window, window + 1)]
    except ValueError:
        # binascii.Error: secret is not valid base32
        return False

    matched = False
    for candidate in candidates:
        matched |= hmac.compare_digest(candidate, code)
    return matched


class TOTPStrategy(SecondFactorStrategy[TimeBasedCredential]):
    credential_type = TimeBasedCredential

    def __init__(self, window: int = 2) -> None:
        self.window = window

    @staticmethod
    def generate_secret(length: int = 32) -> str:
        return pyotp.random_base32(length)

    @staticmethod
    def get_provisioning_uri(secret: str, email: str, issuer: str = "Dashboard") -> str:
        totp = pyotp.TOTP(secret, digits=TOTP_DIGITS, interval=TOTP_INTERVAL_SECONDS)
        return totp.provisioning_uri(name=email, issuer_name=issuer)

    @staticmethod
    def current_code(secret: str, for_time: int | float | datetime | None = None) -> str:
        totp = pyotp.TOTP(secret, digits=TOTP_DIGITS, interval=TOTP_INTERVAL_SECONDS)
        return totp.at(time.time() if for_time is None else for_time)

    def verify_code(
        self, secret: str, code: str, for_time: int | float | datetime | None = None
    ) -> bool:
        return validate_totp(secret, code, self.window, for_time=for_time)

    async def validate(self, credential: TimeBasedCredential, code: str) -> ValidationOutcome:
        if self.verify_code(credential.secret, self.prepare_code(code)):
            return ValidationOutcome.VALID
        return ValidationOutcome.MISMATCH
