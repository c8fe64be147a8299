import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dashboard_mfa.auth_strategies.constants import TOTP, YUBIKEY
from dashboard_mfa.auth_strategies.credentials import (
    Credential,
    HardwareTokenCredential,
    TimeBasedCredential,
)
from dashboard_mfa.core.postgres import Base
from dashboard_mfa.core.security import SecurityUtils

if TYPE_CHECKING:
    from dashboard_mfa.models.user import UserORM


class TwoFactorMethodORM(Base):
    """
    One enrolled second factor of a user.

    Exactly one of ``totp_secret`` (Fernet-encrypted shared secret) or
    ``yubikey_prefix`` (public token identifier) is populated. The raw
    hardware OTP and any token key material are never stored.
    """

    __tablename__ = "two_factor_methods"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    totp_secret: Mapped[str | None] = mapped_column(Text, nullable=True)
    yubikey_prefix: Mapped[str | None] = mapped_column(String(16), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Relationships
    user: Mapped["UserORM"] = relationship(back_populates="two_factor_methods")

    __table_args__ = (
        CheckConstraint(
            "(totp_secret IS NULL) <> (yubikey_prefix IS NULL)",
            name="ck_two_factor_methods_one_credential",
        ),
    )

    @classmethod
    def from_credential(
        cls, user_id: uuid.UUID, name: str, credential: Credential, enabled: bool = True
    ) -> "TwoFactorMethodORM":
        if isinstance(credential, TimeBasedCredential):
            return cls(
                user_id=user_id,
                name=name,
                enabled=enabled,
                totp_secret=SecurityUtils.encrypt_data(credential.secret),
            )
        return cls(
            user_id=user_id,
            name=name,
            enabled=enabled,
            yubikey_prefix=credential.prefix,
        )

    @property
    def credential(self) -> Credential:
        if self.totp_secret is not None and self.yubikey_prefix is None:
            return TimeBasedCredential(SecurityUtils.decrypt_data(self.totp_secret))
        if self.yubikey_prefix is not None and self.totp_secret is None:
            return HardwareTokenCredential(self.yubikey_prefix)
        raise ValueError(f"Two-factor method {self.id} must hold exactly one credential")

    @property
    def kind(self) -> str:
        return TOTP if self.totp_secret is not None else YUBIKEY

    def __repr__(self) -> str:
        return f"<TwoFactorMethod id={self.id} kind={self.kind} enabled={self.enabled}>"
