import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TOTPSetupResponse(BaseModel):
    provisioning_uri: str
    secret: str
    message: str = "Scan the QR code with your authenticator app, then confirm with a code"


class TOTPEnrollRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    secret: str = Field(..., min_length=16, max_length=128)
    code: str = Field(..., min_length=6, max_length=6)


class YubikeyEnrollRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    otp: str = Field(..., min_length=32, max_length=512)


class TwoFactorMethodUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    enabled: bool | None = None


class TwoFactorMethodResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    kind: str
    enabled: bool
    created_at: datetime


class VerifyOtpRequest(BaseModel):
    otp: str = Field(..., min_length=6, max_length=512)


class VerifyOtpResponse(BaseModel):
    method_id: uuid.UUID
    message: str = "Two-factor verification successful"


class ChallengeStatusResponse(BaseModel):
    required: bool


class MessageResponse(BaseModel):
    message: str
