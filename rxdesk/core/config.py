import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

class Settings:
    ENV: str = os.getenv("ENV", "local")
    APP_NAME: str = os.getenv("APP_NAME", "RxDesk")
    SMS_BACKEND: str = os.getenv("SMS_BACKEND", "console")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Database
    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL")
    DATABASE_ECHO: bool = os.getenv("DATABASE_ECHO", "False").lower() == "true"
    DATABASE_POOL_SIZE: int = int(os.getenv("DATABASE_POOL_SIZE", 20))
    DATABASE_MAX_OVERFLOW: int = int(os.getenv("DATABASE_MAX_OVERFLOW", 10))

    # OTP
    OTP_LENGTH: int = int(os.getenv("OTP_LENGTH", 6))
    OTP_EXPIRE_MINUTES: int = int(os.getenv("OTP_EXPIRE_MINUTES", 5))
    # Failed verifications before a code is locked; 0 disables the lockout
    OTP_MAX_ATTEMPTS: int = int(os.getenv("OTP_MAX_ATTEMPTS", 0))
    # Echo generated codes in API responses (never in production)
    OTP_RETURN_CODE: bool = os.getenv(
        "OTP_RETURN_CODE", "False" if os.getenv("ENV") == "production" else "True"
    ).lower() == "true"

    # CORS
    BACKEND_CORS_ORIGINS: Optional[str] = os.getenv("BACKEND_CORS_ORIGINS")

    # Rate Limiting (OTP endpoints)
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "True").lower() == "true"
    RATE_LIMIT_REQUESTS: int = int(os.getenv("RATE_LIMIT_REQUESTS", 20))
    RATE_LIMIT_PERIOD_SECONDS: int = int(os.getenv("RATE_LIMIT_PERIOD_SECONDS", 60))

    # SMS (Twilio)
    TWILIO_ACCOUNT_SID: Optional[str] = os.getenv("TWILIO_ACCOUNT_SID")
    TWILIO_AUTH_TOKEN: Optional[str] = os.getenv("TWILIO_AUTH_TOKEN")
    TWILIO_FROM_NUMBER: Optional[str] = os.getenv("TWILIO_FROM_NUMBER")



settings = Settings()
