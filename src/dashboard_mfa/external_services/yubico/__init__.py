from dashboard_mfa.external_services.yubico.base import (
    TokenStatus,
    TokenVerificationService,
    YubicoServiceConfig,
)
from dashboard_mfa.external_services.yubico.client import UnconfiguredTokenService, YubicoClient
from dashboard_mfa.external_services.yubico.factory import TokenServiceFactory
from dashboard_mfa.external_services.yubico.otp import ParsedOTP, parse_otp, parse_prefix

__all__ = [
    "ParsedOTP",
    "TokenServiceFactory",
    "TokenStatus",
    "TokenVerificationService",
    "UnconfiguredTokenService",
    "YubicoClient",
    "YubicoServiceConfig",
    "parse_otp",
    "parse_prefix",
]
