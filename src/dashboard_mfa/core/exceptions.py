# core/exceptions.py

from typing import Any

from fastapi import HTTPException, status


class DashboardMFAException(Exception):
    def __init__(
        self, message: str, error_code: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(DashboardMFAException):
    pass


class EnrollmentError(AuthenticationError):
    def __init__(self, message: str = "Invalid OTP supplied. Please try again!"):
        super().__init__(message, error_code="INVALID_OTP")


class ReplayDetectedError(EnrollmentError):
    def __init__(self, message: str = "The supplied OTP has been used before."):
        super().__init__(message)
        self.error_code = "REPLAYED_OTP"


class TransportFailureError(DashboardMFAException):
    def __init__(self, message: str = "Token verification service unavailable"):
        super().__init__(message, error_code="TRANSPORT_FAILURE")


class NoEnabledMethodsError(DashboardMFAException):
    def __init__(self, message: str = "No two-factor method is enabled for this account"):
        super().__init__(message, error_code="NO_ENABLED_METHODS")


class SecondFactorRequiredError(AuthenticationError):
    def __init__(self, message: str = "Two-factor verification required"):
        super().__init__(message, error_code="SECOND_FACTOR_REQUIRED")


class TwoFactorMethodNotFoundError(DashboardMFAException):
    def __init__(self, message: str = "Two-factor method not found"):
        super().__init__(message, error_code="METHOD_NOT_FOUND")


# HTTP Exception converters
def convert_to_http_exception(exc: DashboardMFAException) -> HTTPException:
    status_map = {
        "INVALID_OTP": status.HTTP_400_BAD_REQUEST,
        "REPLAYED_OTP": status.HTTP_400_BAD_REQUEST,
        "TRANSPORT_FAILURE": status.HTTP_503_SERVICE_UNAVAILABLE,
        "NO_ENABLED_METHODS": status.HTTP_409_CONFLICT,
        "SECOND_FACTOR_REQUIRED": status.HTTP_403_FORBIDDEN,
        "METHOD_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    }

    status_code = status_map.get(exc.error_code or "", status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail={"message": exc.message, "error_code": exc.error_code, "details": exc.details},
    )
