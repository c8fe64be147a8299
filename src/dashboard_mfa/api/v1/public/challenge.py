from fastapi import APIRouter, Depends, HTTPException, status

from dashboard_mfa.api.dependencies.auth_deps import CurrentSession, get_current_session
from dashboard_mfa.api.dependencies.deps import (
    get_session_marker,
    get_two_factor_service,
    get_verification_service,
)
from dashboard_mfa.core.exceptions import NoEnabledMethodsError, convert_to_http_exception
from dashboard_mfa.schemas.two_factor import (
    ChallengeStatusResponse,
    MessageResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from dashboard_mfa.services.session_marker import SessionMarker
from dashboard_mfa.services.two_factor_service import TwoFactorService
from dashboard_mfa.services.verification_service import VerificationService

router = APIRouter()

INVALID_OTP_MESSAGE = "This OTP is not valid."


@router.get("/status", response_model=ChallengeStatusResponse)
async def challenge_status(
    current: CurrentSession = Depends(get_current_session),
    svc: TwoFactorService = Depends(get_two_factor_service),
    marker: SessionMarker = Depends(get_session_marker),
) -> ChallengeStatusResponse:
    methods = await svc.enabled_methods(current.user.id)
    return ChallengeStatusResponse(
        required=await marker.requires_challenge(current.session_id, methods)
    )


@router.post("/verify", response_model=VerifyOtpResponse)
async def verify_otp(
    body: VerifyOtpRequest,
    current: CurrentSession = Depends(get_current_session),
    svc: TwoFactorService = Depends(get_two_factor_service),
    verifier: VerificationService = Depends(get_verification_service),
    marker: SessionMarker = Depends(get_session_marker),
) -> VerifyOtpResponse:
    if not await svc.enabled_methods(current.user.id):
        raise convert_to_http_exception(NoEnabledMethodsError())

    method_id = await verifier.verify(current.user.id, body.otp)
    if method_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_OTP_MESSAGE)

    await marker.mark(current.session_id, method_id)
    return VerifyOtpResponse(method_id=method_id)


@router.delete("/session", response_model=MessageResponse)
async def forget_verification(
    current: CurrentSession = Depends(get_current_session),
    marker: SessionMarker = Depends(get_session_marker),
) -> MessageResponse:
    """Called on logout so the next login is challenged again."""
    await marker.clear(current.session_id)
    return MessageResponse(message="Two-factor verification cleared for this session")
