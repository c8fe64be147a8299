from .credentials import (
    Credential,
    HardwareTokenCredential,
    TimeBasedCredential,
    ValidationOutcome,
)

__all__ = [
    "Credential",
    "HardwareTokenCredential",
    "TimeBasedCredential",
    "ValidationOutcome",
]
