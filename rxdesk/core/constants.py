"""Application constants."""
from enum import Enum


class SMSBackend(str, Enum):
    CONSOLE = "console"
    TWILIO = "twilio"


class VerificationFailure(str, Enum):
    """Reasons a code fails verification. Logged only, never returned to callers."""
    NO_CODE = "no_code"
    EXPIRED = "expired"
    CONSUMED = "consumed"
    LOCKED = "attempts_exhausted"
    MISMATCH = "mismatch"
