from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


@dataclass
class YubicoServiceConfig:
    client_id: str
    secret_key: str
    api_url: str


class TokenStatus(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    REPLAYED = "replayed"


class TokenVerificationService(ABC):
    """Abstract remote authority holding hardware-token keys and counters."""

    @abstractmethod
    async def verify(self, otp: str, timeout: float) -> TokenStatus:
        """
        Verify one OTP with a single request bounded by ``timeout`` seconds.

        Raises:
            TransportFailureError: service unreachable, too slow, or unable
                to give an answer
        """
        pass
