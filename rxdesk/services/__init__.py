"""Service layer package."""

__all__ = [
    "directory_service",
    "prescription_service",
    "otp_service",
    "sms_service",
]
