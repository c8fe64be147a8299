from fastapi import APIRouter

from dashboard_mfa.api.v1.me import two_factor
from dashboard_mfa.api.v1.public import challenge
from dashboard_mfa.core.health import check_postgres, check_redis

api_router = APIRouter()

# Enrollment and management of the current user's methods
api_router.include_router(two_factor.router, prefix="/me/2fa", tags=["2fa"])

# Login-time challenge
api_router.include_router(challenge.router, prefix="/2fa", tags=["2fa"])


@api_router.get("/health")
async def health_check() -> dict[str, str]:
    try:
        await check_postgres()
        await check_redis()
        return {"status": "healthy"}
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}
