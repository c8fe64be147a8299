# core/security.py

import base64
import hashlib
from typing import Any

from cryptography.fernet import Fernet
from jose import JWTError, jwt

from dashboard_mfa.core.config import settings


class SecurityUtils:
    @staticmethod
    def _get_fernet_key() -> bytes:
        # Derive a 32-byte URL-safe base64-encoded key from the secret key
        digest = hashlib.sha256(settings.SECRET_KEY.encode()).digest()
        return base64.urlsafe_b64encode(digest)

    @staticmethod
    def encrypt_data(data: str) -> str:
        if not data:
            return ""

        f = Fernet(SecurityUtils._get_fernet_key())
        return f.encrypt(data.encode()).decode()

    @staticmethod
    def decrypt_data(encrypted_data: str) -> str:
        if not encrypted_data:
            return ""

        f = Fernet(SecurityUtils._get_fernet_key())
        return f.decrypt(encrypted_data.encode()).decode()


class TokenManager:
    """Reads access tokens issued by the account service."""

    @staticmethod
    def decode_token(token: str) -> dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM],
                audience=settings.JWT_AUDIENCE,
                issuer=settings.JWT_ISSUER,
            )
            return payload
        except JWTError as e:
            raise ValueError(f"Invalid token: {str(e)}") from e

    @staticmethod
    def verify_access_token(token: str) -> dict[str, Any]:
        payload = TokenManager.decode_token(token)

        if payload.get("type") != "access":
            raise ValueError("Invalid token type")

        return payload


token_manager = TokenManager()
