from .session_marker import SessionMarker
from .two_factor_service import TwoFactorService
from .verification_service import VerificationService

__all__ = ["SessionMarker", "TwoFactorService", "VerificationService"]
