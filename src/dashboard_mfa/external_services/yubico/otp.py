import re
from dataclasses import dataclass

from dashboard_mfa.auth_strategies.constants import (
    DVORAK_MODHEX_ALPHABET,
    MODHEX_ALPHABET,
    YUBIKEY_MAX_PREFIX_LENGTH,
    YUBIKEY_TOKEN_LENGTH,
)

_FROM_DVORAK = str.maketrans(DVORAK_MODHEX_ALPHABET, MODHEX_ALPHABET)


def _otp_pattern(alphabet: str) -> re.Pattern[str]:
    chars = re.escape(alphabet)
    return re.compile(
        rf"^(?:(?P<password>.*):)?"
        rf"(?P<prefix>[{chars}]{{0,{YUBIKEY_MAX_PREFIX_LENGTH}}})"
        rf"(?P<token>[{chars}]{{{YUBIKEY_TOKEN_LENGTH}}})$",
        re.IGNORECASE,
    )


_OTP_PATTERN = _otp_pattern(MODHEX_ALPHABET)
_DVORAK_OTP_PATTERN = _otp_pattern(DVORAK_MODHEX_ALPHABET)


@dataclass(frozen=True)
class ParsedOTP:
    prefix: str
    token: str
    password: str | None = None

    @property
    def otp(self) -> str:
        return f"{self.prefix}{self.token}"


def parse_otp(value: str) -> ParsedOTP | None:
    """
    Split a Yubico OTP into its public prefix and encrypted token.

    Accepts an optional ``password:`` in front of the OTP. An OTP typed by a
    key on a Dvorak keyboard layout is mapped back to modhex. Returns None
    when the value is not shaped like a Yubico OTP. No network access.
    """
    value = value.strip()
    match = _OTP_PATTERN.match(value)
    translate = None
    if match is None:
        match = _DVORAK_OTP_PATTERN.match(value)
        if match is None:
            return None
        translate = _FROM_DVORAK

    prefix = match.group("prefix").lower()
    token = match.group("token").lower()
    if translate is not None:
        prefix = prefix.translate(translate)
        token = token.translate(translate)

    return ParsedOTP(prefix=prefix, token=token, password=match.group("password"))


def parse_prefix(value: str) -> str | None:
    parsed = parse_otp(value)
    if parsed is None or not parsed.prefix:
        return None
    return parsed.prefix
