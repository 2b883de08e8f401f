"""Helper utilities (OTP generation, phone normalisation)."""
import re

import pyotp

_PHONE_RE = re.compile(r"^\+?\d{7,15}$")


def generate_otp(length: int = 6) -> tuple[str, str]:
    """Generate a TOTP secret and current code.

    Returns a tuple of (otp_code, secret). The secret comes from the OS CSPRNG,
    so the code is not predictable from earlier codes.
    """
    secret = pyotp.random_base32()
    totp = pyotp.TOTP(secret, digits=length)
    return totp.now(), secret


def normalize_phone(value: str | None) -> str | None:
    """Strip spaces and dashes; return None if what remains is not a phone number."""
    if not value:
        return None
    cleaned = re.sub(r"[\s\-()]", "", value)
    if not _PHONE_RE.match(cleaned):
        return None
    return cleaned


def mask_phone(phone: str) -> str:
    """Keep the last three digits for log lines."""
    if not phone or len(phone) <= 3:
        return "***"
    return "*" * (len(phone) - 3) + phone[-3:]
