from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TimeBasedCredential:
    """Shared base32 secret of an authenticator app."""

    secret: str

    def __post_init__(self) -> None:
        if not self.secret:
            raise ValueError("Time-based credential requires a secret")

    def __repr__(self) -> str:
        return "TimeBasedCredential(secret=***)"


@dataclass(frozen=True)
class HardwareTokenCredential:
    """Public prefix identifying one registered hardware token."""

    prefix: str

    def __post_init__(self) -> None:
        if not self.prefix:
            raise ValueError("Hardware-token credential requires a prefix")


Credential = TimeBasedCredential | HardwareTokenCredential


class ValidationOutcome(str, Enum):
    VALID = "valid"
    MISMATCH = "mismatch"
    NOT_THIS_METHOD = "not_this_method"
    REPLAYED = "replayed"
    TRANSPORT_ERROR = "transport_error"
    ERROR = "error"

    @property
    def ok(self) -> bool:
        return self is ValidationOutcome.VALID
