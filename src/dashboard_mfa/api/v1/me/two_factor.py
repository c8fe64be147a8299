import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_mfa.api.dependencies.auth_deps import (
    CurrentSession,
    get_current_session,
    require_second_factor,
)
from dashboard_mfa.api.dependencies.deps import (
    get_db,
    get_session_marker,
    get_two_factor_service,
)
from dashboard_mfa.core.exceptions import (
    EnrollmentError,
    TwoFactorMethodNotFoundError,
    convert_to_http_exception,
)
from dashboard_mfa.schemas.two_factor import (
    MessageResponse,
    TOTPEnrollRequest,
    TOTPSetupResponse,
    TwoFactorMethodResponse,
    TwoFactorMethodUpdate,
    YubikeyEnrollRequest,
)
from dashboard_mfa.services.session_marker import SessionMarker
from dashboard_mfa.services.two_factor_service import TwoFactorService

router = APIRouter()


@router.get("/setup", response_model=TOTPSetupResponse)
async def begin_totp_setup(
    current: CurrentSession = Depends(get_current_session),
    svc: TwoFactorService = Depends(get_two_factor_service),
) -> TOTPSetupResponse:
    return TOTPSetupResponse(**svc.begin_time_based_enrollment(current.user.email))


@router.get("/methods", response_model=list[TwoFactorMethodResponse])
async def list_methods(
    current: CurrentSession = Depends(get_current_session),
    svc: TwoFactorService = Depends(get_two_factor_service),
) -> list[TwoFactorMethodResponse]:
    methods = await svc.list_methods(current.user.id)
    return [TwoFactorMethodResponse.model_validate(method) for method in methods]


@router.post(
    "/methods/totp", response_model=TwoFactorMethodResponse, status_code=status.HTTP_201_CREATED
)
async def enroll_totp(
    body: TOTPEnrollRequest,
    current: CurrentSession = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
    svc: TwoFactorService = Depends(get_two_factor_service),
    marker: SessionMarker = Depends(get_session_marker),
) -> TwoFactorMethodResponse:
    try:
        method = await svc.enroll_time_based(current.user.id, body.name, body.secret, body.code)
    except EnrollmentError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc

    await db.commit()
    # Enrolling proves possession, so the session counts as verified
    await marker.mark(current.session_id, method.id)
    return TwoFactorMethodResponse.model_validate(method)


@router.post(
    "/methods/yubikey",
    response_model=TwoFactorMethodResponse,
    status_code=status.HTTP_201_CREATED,
)
async def enroll_yubikey(
    body: YubikeyEnrollRequest,
    current: CurrentSession = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
    svc: TwoFactorService = Depends(get_two_factor_service),
    marker: SessionMarker = Depends(get_session_marker),
) -> TwoFactorMethodResponse:
    try:
        method = await svc.enroll_hardware_token(current.user.id, body.name, body.otp)
    except EnrollmentError as exc:
        # ReplayDetectedError keeps its own message
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc

    await db.commit()
    await marker.mark(current.session_id, method.id)
    return TwoFactorMethodResponse.model_validate(method)


@router.patch("/methods/{method_id}", response_model=TwoFactorMethodResponse)
async def update_method(
    method_id: uuid.UUID,
    body: TwoFactorMethodUpdate,
    current: CurrentSession = Depends(require_second_factor),
    db: AsyncSession = Depends(get_db),
    svc: TwoFactorService = Depends(get_two_factor_service),
    marker: SessionMarker = Depends(get_session_marker),
) -> TwoFactorMethodResponse:
    patch = body.model_dump(exclude_unset=True, exclude_none=True)
    try:
        method = await svc.update_method(current.user.id, method_id, patch)
    except TwoFactorMethodNotFoundError as exc:
        raise convert_to_http_exception(exc) from exc

    await db.commit()
    if method.enabled:
        await marker.mark(current.session_id, method.id)
    else:
        await marker.keep_verified(current.session_id, await svc.enabled_methods(current.user.id))
    return TwoFactorMethodResponse.model_validate(method)


@router.delete("/methods/{method_id}", response_model=MessageResponse)
async def remove_method(
    method_id: uuid.UUID,
    current: CurrentSession = Depends(require_second_factor),
    db: AsyncSession = Depends(get_db),
    svc: TwoFactorService = Depends(get_two_factor_service),
    marker: SessionMarker = Depends(get_session_marker),
) -> MessageResponse:
    try:
        await svc.remove_method(current.user.id, method_id)
    except TwoFactorMethodNotFoundError as exc:
        raise convert_to_http_exception(exc) from exc

    await db.commit()
    await marker.keep_verified(current.session_id, await svc.enabled_methods(current.user.id))
    return MessageResponse(message="Successfully deleted this 2FA method.")
