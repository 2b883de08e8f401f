"""One-time verification code endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rxdesk.core.config import settings
from rxdesk.core.database import get_db
from rxdesk.dependencies.rate_limit import rate_limit
from rxdesk.schemas.otp import (
    OTPGenerateRequest,
    OTPGenerateResponse,
    OTPVerifyRequest,
    OTPVerifyResponse,
)
from rxdesk.services.otp_service import OTPService

router = APIRouter(prefix="/otp", tags=["otp"])


@router.post("/generate", response_model=OTPGenerateResponse)
async def generate_code(
    payload: OTPGenerateRequest,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    code = OTPService.generate_code(db, payload.phone_number)
    return OTPGenerateResponse(
        phone_number=payload.phone_number,
        expires_in=settings.OTP_EXPIRE_MINUTES * 60,
        code=code if settings.OTP_RETURN_CODE else None,
    )


@router.post("/verify", response_model=OTPVerifyResponse)
async def verify_code(
    payload: OTPVerifyRequest,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    return OTPVerifyResponse(verified=OTPService.verify_code(db, payload.phone_number, payload.code))
