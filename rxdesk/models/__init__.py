"""Models package placeholder."""

__all__ = [
    "base",
    "directory",
    "prescription",
    "otp",
]
