import uuid
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_mfa.api.dependencies.deps import (
    get_db,
    get_session_marker,
    get_two_factor_service,
)
from dashboard_mfa.core.exceptions import SecondFactorRequiredError, convert_to_http_exception
from dashboard_mfa.core.security import token_manager
from dashboard_mfa.models import UserORM
from dashboard_mfa.repositories.user_repo import UserRepository
from dashboard_mfa.services.session_marker import SessionMarker
from dashboard_mfa.services.two_factor_service import TwoFactorService

security = HTTPBearer()


@dataclass
class CurrentSession:
    user: UserORM
    session_id: str


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_session(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> CurrentSession:
    """
    Dependency resolving the logged-in user and login session from the
    access token issued by the account service.
    """
    try:
        payload = token_manager.verify_access_token(credentials.credentials)
    except ValueError as e:
        raise _unauthorized(str(e)) from e

    user_id = payload.get("sub")
    session_id = payload.get("sid")
    if not user_id or not session_id:
        raise _unauthorized("Invalid authentication credentials")

    try:
        user = await UserRepository(db).get(uuid.UUID(user_id))
    except ValueError as e:
        raise _unauthorized("Invalid authentication credentials") from e

    if user is None:
        raise _unauthorized("User not found")

    return CurrentSession(user=user, session_id=str(session_id))


async def require_second_factor(
    current: CurrentSession = Depends(get_current_session),
    svc: TwoFactorService = Depends(get_two_factor_service),
    marker: SessionMarker = Depends(get_session_marker),
) -> CurrentSession:
    """Dependency for routes that need a session already verified with 2FA."""
    methods = await svc.enabled_methods(current.user.id)
    if await marker.requires_challenge(current.session_id, methods):
        raise convert_to_http_exception(SecondFactorRequiredError())
    return current
