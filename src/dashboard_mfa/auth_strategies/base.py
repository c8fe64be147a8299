# auth_strategies/base.py

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from dashboard_mfa.auth_strategies.credentials import Credential, ValidationOutcome

C = TypeVar("C", bound=Credential)


class SecondFactorStrategy(ABC, Generic[C]):
    """
    Base class for all second-factor strategies
    Each strategy validates codes for exactly one credential kind
    """

    credential_type: type[C]

    @abstractmethod
    async def validate(self, credential: C, code: str) -> ValidationOutcome:
        """
        Check a submitted code against one enrolled credential

        Args:
            credential: Credential of the enrolled method
            code: Code exactly as submitted by the user

        Returns:
            ValidationOutcome; only VALID counts as a match
        """
        pass

    def prepare_code(self, raw_code: str) -> str:
        """
        Normalize the submitted code before validation
        Can be overridden by specific strategies
        """
        return raw_code.strip()
