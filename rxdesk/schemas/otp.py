"""OTP request/response schemas."""
from typing import Optional

from pydantic import BaseModel, Field


class OTPGenerateRequest(BaseModel):
    phone_number: str = Field(min_length=1, max_length=20)


class OTPGenerateResponse(BaseModel):
    phone_number: str
    expires_in: int
    message: str = "Verification code sent"
    # only populated when OTP_RETURN_CODE is enabled
    code: Optional[str] = None


class OTPVerifyRequest(BaseModel):
    phone_number: str
    code: str


class OTPVerifyResponse(BaseModel):
    verified: bool
