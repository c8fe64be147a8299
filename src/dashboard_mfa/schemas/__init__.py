from .two_factor import (
    ChallengeStatusResponse,
    MessageResponse,
    TOTPEnrollRequest,
    TOTPSetupResponse,
    TwoFactorMethodResponse,
    TwoFactorMethodUpdate,
    VerifyOtpRequest,
    VerifyOtpResponse,
    YubikeyEnrollRequest,
)

__all__ = [
    "ChallengeStatusResponse",
    "MessageResponse",
    "TOTPEnrollRequest",
    "TOTPSetupResponse",
    "TwoFactorMethodResponse",
    "TwoFactorMethodUpdate",
    "VerifyOtpRequest",
    "VerifyOtpResponse",
    "YubikeyEnrollRequest",
]
