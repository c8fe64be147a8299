import logging

from dashboard_mfa.core.config import settings
from dashboard_mfa.external_services.yubico.base import (
    TokenVerificationService,
    YubicoServiceConfig,
)
from dashboard_mfa.external_services.yubico.client import UnconfiguredTokenService, YubicoClient

logger = logging.getLogger(__name__)


class TokenServiceFactory:
    @staticmethod
    def create(config: YubicoServiceConfig) -> TokenVerificationService:
        if config.client_id:
            return YubicoClient(config)

        logger.warning("YUBICO_CLIENT_ID is not set. Hardware-token verification will always fail.")
        return UnconfiguredTokenService()

    @staticmethod
    def from_settings() -> TokenVerificationService:
        return TokenServiceFactory.create(
            YubicoServiceConfig(
                client_id=settings.YUBICO_CLIENT_ID,
                secret_key=settings.YUBICO_SECRET_KEY,
                api_url=settings.YUBICO_API_URL,
            )
        )
