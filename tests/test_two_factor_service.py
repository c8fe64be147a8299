"""Tests for enrollment and management of two-factor methods."""

import time
import uuid

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from conftest import OTHER_YUBIKEY_PREFIX, TOTP_SECRET, YUBIKEY_PREFIX, make_otp
from dashboard_mfa.auth_strategies.credentials import HardwareTokenCredential, TimeBasedCredential
from dashboard_mfa.auth_strategies.totp import TOTPStrategy, validate_totp
from dashboard_mfa.auth_strategies.yubikey import YubikeyStrategy
from dashboard_mfa.core.exceptions import (
    EnrollmentError,
    ReplayDetectedError,
    TransportFailureError,
    TwoFactorMethodNotFoundError,
)
from dashboard_mfa.models import TwoFactorMethodORM
from dashboard_mfa.repositories.two_factor_repo import TwoFactorMethodRepository
from dashboard_mfa.services.two_factor_service import TwoFactorService
from dashboard_mfa.services.verification_service import VerificationService


@pytest_asyncio.fixture
async def service(db_session, token_service) -> TwoFactorService:
    return TwoFactorService(
        TwoFactorMethodRepository(db_session),
        YubikeyStrategy(token_service, timeout=2),
        enroll_window=8,
    )


async def count_methods(db_session) -> int:
    result = await db_session.execute(select(func.count()).select_from(TwoFactorMethodORM))
    return result.scalar_one()


class TestBeginEnrollment:
    @pytest.mark.asyncio
    async def test_returns_fresh_secret_and_uri(self, service):
        first = service.begin_time_based_enrollment("wouter@example.com")
        second = service.begin_time_based_enrollment("wouter@example.com")

        assert len(first["secret"]) == 32
        assert first["secret"] != second["secret"]
        assert first["provisioning_uri"].startswith("otpauth://totp/")
        assert "wouter%40example.com" in first["provisioning_uri"]


class TestTimeBasedEnrollment:
    @pytest.mark.asyncio
    async def test_valid_proof_persists_encrypted_secret(self, service, db_session, db_user):
        code = TOTPStrategy.current_code(TOTP_SECRET)
        method = await service.enroll_time_based(db_user.id, "Phone", TOTP_SECRET, code)

        assert method.id is not None
        assert method.enabled is True
        assert method.name == "Phone"
        assert method.kind == "totp"
        assert method.yubikey_prefix is None
        assert method.totp_secret != TOTP_SECRET
        assert method.credential == TimeBasedCredential(TOTP_SECRET)

    @pytest.mark.asyncio
    async def test_slow_setup_is_tolerated(self, service, db_user):
        stale = TOTPStrategy.current_code(TOTP_SECRET, time.time() - 6 * 30)
        if validate_totp(TOTP_SECRET, stale, window=2):
            pytest.skip("stale code collides with a current one")

        method = await service.enroll_time_based(db_user.id, "Phone", TOTP_SECRET, stale)
        assert method.kind == "totp"

    @pytest.mark.asyncio
    async def test_secret_is_normalized(self, service, db_user):
        spaced = " ".join(TOTP_SECRET[i : i + 4] for i in range(0, 32, 4)).lower()
        code = TOTPStrategy.current_code(TOTP_SECRET)

        method = await service.enroll_time_based(db_user.id, "Phone", spaced, code)
        assert method.credential == TimeBasedCredential(TOTP_SECRET)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["abcdef", "12345", ""])
    async def test_bad_proof_persists_nothing(self, service, db_session, db_user, code):
        with pytest.raises(EnrollmentError):
            await service.enroll_time_based(db_user.id, "Phone", TOTP_SECRET, code)
        assert await count_methods(db_session) == 0

    @pytest.mark.asyncio
    async def test_invalid_secret_is_rejected(self, service, db_session, db_user):
        with pytest.raises(EnrollmentError):
            await service.enroll_time_based(db_user.id, "Phone", "not base32!", "123456")
        assert await count_methods(db_session) == 0


class TestHardwareTokenEnrollment:
    @pytest.mark.asyncio
    async def test_valid_otp_persists_prefix_only(self, service, db_user, token_service):
        otp = make_otp(YUBIKEY_PREFIX)
        token_service.valid_otps.add(otp)

        method = await service.enroll_hardware_token(db_user.id, "YubiKey", otp)

        assert method.kind == "yubikey"
        assert method.yubikey_prefix == YUBIKEY_PREFIX
        assert method.totp_secret is None
        assert method.credential == HardwareTokenCredential(YUBIKEY_PREFIX)

    @pytest.mark.asyncio
    async def test_replayed_otp_enrolls_exactly_once(
        self, service, db_session, db_user, token_service
    ):
        otp = make_otp(YUBIKEY_PREFIX)
        token_service.valid_otps.add(otp)

        await service.enroll_hardware_token(db_user.id, "YubiKey", otp)
        with pytest.raises(ReplayDetectedError) as exc_info:
            await service.enroll_hardware_token(db_user.id, "YubiKey again", otp)

        assert exc_info.value.error_code == "REPLAYED_OTP"
        assert await count_methods(db_session) == 1

    @pytest.mark.asyncio
    async def test_rejected_otp_is_uniform_error(
        self, service, db_session, db_user, token_service
    ):
        with pytest.raises(EnrollmentError) as exc_info:
            await service.enroll_hardware_token(db_user.id, "YubiKey", make_otp(YUBIKEY_PREFIX))

        assert not isinstance(exc_info.value, ReplayDetectedError)
        assert exc_info.value.error_code == "INVALID_OTP"
        assert len(token_service.calls) == 1
        assert await count_methods(db_session) == 0

    @pytest.mark.asyncio
    async def test_unparsable_otp_makes_no_remote_call(self, service, db_user, token_service):
        with pytest.raises(EnrollmentError):
            await service.enroll_hardware_token(db_user.id, "YubiKey", "123456")
        with pytest.raises(EnrollmentError):
            await service.enroll_hardware_token(db_user.id, "YubiKey", make_otp(""))
        assert token_service.calls == []

    @pytest.mark.asyncio
    async def test_unreachable_service_is_uniform_error(
        self, service, db_session, db_user, token_service
    ):
        token_service.error = TransportFailureError("down")

        with pytest.raises(EnrollmentError) as exc_info:
            await service.enroll_hardware_token(db_user.id, "YubiKey", make_otp(YUBIKEY_PREFIX))

        assert not isinstance(exc_info.value, ReplayDetectedError)
        assert await count_methods(db_session) == 0
        assert len(token_service.calls) == 1


class TestManagement:
    @pytest_asyncio.fixture
    async def methods(self, service, db_user, token_service):
        totp = await service.enroll_time_based(
            db_user.id, "Phone", TOTP_SECRET, TOTPStrategy.current_code(TOTP_SECRET)
        )
        otp = make_otp(OTHER_YUBIKEY_PREFIX)
        token_service.valid_otps.add(otp)
        yubikey = await service.enroll_hardware_token(db_user.id, "YubiKey", otp)
        return totp, yubikey

    @pytest.mark.asyncio
    async def test_list_in_enrollment_order(self, service, db_user, methods):
        listed = await service.list_methods(db_user.id)
        assert [m.id for m in listed] == [m.id for m in methods]

    @pytest.mark.asyncio
    async def test_rename(self, service, db_user, methods):
        totp, _ = methods
        updated = await service.update_method(db_user.id, totp.id, {"name": "Old phone"})
        assert updated.name == "Old phone"
        assert updated.enabled is True

    @pytest.mark.asyncio
    async def test_disable_hides_method_from_verification(
        self, service, db_session, db_user, methods, token_service
    ):
        totp, yubikey = methods
        await service.update_method(db_user.id, totp.id, {"enabled": False})

        enabled = await service.enabled_methods(db_user.id)
        assert [m.id for m in enabled] == [yubikey.id]

        verifier = VerificationService.from_session(db_session, token_service)
        assert await verifier.verify(db_user.id, TOTPStrategy.current_code(TOTP_SECRET)) is None

    @pytest.mark.asyncio
    async def test_verification_against_stored_methods(
        self, db_session, db_user, methods, token_service
    ):
        totp, _ = methods
        verifier = VerificationService.from_session(db_session, token_service)
        code = TOTPStrategy.current_code(TOTP_SECRET)

        assert await verifier.verify(db_user.id, code) == totp.id

    @pytest.mark.asyncio
    async def test_credentials_cannot_be_patched(self, service, db_user, methods):
        totp, _ = methods
        with pytest.raises(ValueError):
            await service.update_method(db_user.id, totp.id, {"totp_secret": "X"})

    @pytest.mark.asyncio
    async def test_remove(self, service, db_user, methods):
        totp, yubikey = methods
        await service.remove_method(db_user.id, totp.id)

        assert [m.id for m in await service.list_methods(db_user.id)] == [yubikey.id]

    @pytest.mark.asyncio
    async def test_unknown_method(self, service, db_user, methods):
        with pytest.raises(TwoFactorMethodNotFoundError):
            await service.update_method(db_user.id, uuid.uuid4(), {"name": "x"})
        with pytest.raises(TwoFactorMethodNotFoundError):
            await service.remove_method(db_user.id, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_methods_of_other_users_are_not_reachable(self, service, methods):
        totp, _ = methods
        with pytest.raises(TwoFactorMethodNotFoundError):
            await service.update_method(uuid.uuid4(), totp.id, {"enabled": False})
        with pytest.raises(TwoFactorMethodNotFoundError):
            await service.remove_method(uuid.uuid4(), totp.id)
