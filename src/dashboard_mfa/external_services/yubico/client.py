import asyncio
import base64
import binascii
import hashlib
import hmac
import logging
import secrets

import httpx

from dashboard_mfa.auth_strategies.constants import (
    YUBICO_STATUS_BAD_OTP,
    YUBICO_STATUS_OK,
    YUBICO_STATUS_REPLAYED_OTP,
    YUBICO_STATUS_REPLAYED_REQUEST,
)
from dashboard_mfa.core.exceptions import TransportFailureError
from dashboard_mfa.external_services.yubico.base import (
    TokenStatus,
    TokenVerificationService,
    YubicoServiceConfig,
)

logger = logging.getLogger(__name__)


def sign_params(params: dict[str, str], secret_key: str) -> str:
    """HMAC-SHA1 signature of the YubiCloud validation protocol 2.0."""
    message = "&".join(f"{key}={params[key]}" for key in sorted(params) if key != "h")
    digest = hmac.new(base64.b64decode(secret_key), message.encode(), hashlib.sha1).digest()
    return base64.b64encode(digest).decode()


def parse_response(body: str) -> dict[str, str]:
    fields: dict[str, str] = {}
    for line in body.strip().splitlines():
        key, sep, value = line.strip().partition("=")
        if sep:
            fields[key] = value
    return fields


class YubicoClient(TokenVerificationService):
    """
    Client for the YubiCloud OTP validation service.

    Exactly one request is sent per verification. There is no retry and no
    fallback server: a slow or failing service is reported as a transport
    failure so the caller can fail closed.
    """

    def __init__(
        self,
        config: YubicoServiceConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.client_id = config.client_id
        self.secret_key = config.secret_key
        self.api_url = config.api_url
        self.http_client = http_client

        if not self.secret_key:
            logger.warning("YubiCloud secret key is not set. Responses will not be authenticated.")

    async def verify(self, otp: str, timeout: float) -> TokenStatus:
        nonce = secrets.token_hex(16)
        params = {"id": self.client_id, "otp": otp, "nonce": nonce, "timestamp": "1"}

        try:
            if self.secret_key:
                params["h"] = sign_params(params, self.secret_key)
            response = await asyncio.wait_for(self._send(params, timeout), timeout=timeout)
            response.raise_for_status()
        except TimeoutError as exc:
            raise TransportFailureError(
                f"YubiCloud did not answer within {timeout} seconds"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportFailureError(f"YubiCloud request failed: {exc}") from exc
        except binascii.Error as exc:
            raise TransportFailureError("YUBICO_SECRET_KEY is not valid base64") from exc

        fields = parse_response(response.text)
        status = fields.get("status")

        if status in (YUBICO_STATUS_REPLAYED_OTP, YUBICO_STATUS_REPLAYED_REQUEST):
            return TokenStatus.REPLAYED
        if status == YUBICO_STATUS_BAD_OTP:
            return TokenStatus.INVALID
        if status != YUBICO_STATUS_OK:
            raise TransportFailureError(f"YubiCloud could not verify the OTP: {status}")

        if not self._is_authentic(fields, otp=otp, nonce=nonce):
            logger.warning("YubiCloud response failed authenticity checks")
            return TokenStatus.INVALID

        return TokenStatus.VALID

    async def _send(self, params: dict[str, str], timeout: float) -> httpx.Response:
        if self.http_client is not None:
            return await self.http_client.get(self.api_url, params=params, timeout=timeout)

        async with httpx.AsyncClient(timeout=timeout) as client:
            return await client.get(self.api_url, params=params)

    def _is_authentic(self, fields: dict[str, str], otp: str, nonce: str) -> bool:
        if fields.get("otp") != otp or fields.get("nonce") != nonce:
            return False
        if not self.secret_key:
            return True
        signature = fields.get("h", "")
        return hmac.compare_digest(signature, sign_params(fields, self.secret_key))


class UnconfiguredTokenService(TokenVerificationService):
    """Used when no YubiCloud credentials are configured; every check fails closed."""

    async def verify(self, otp: str, timeout: float) -> TokenStatus:
        raise TransportFailureError("Hardware-token verification is not configured")
