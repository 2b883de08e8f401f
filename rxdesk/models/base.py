"""Base SQLAlchemy model utilities."""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimestampMixin:
    created_at = Column(DateTime, default=utcnow, nullable=False)


class IDMixin:
    id = Column(Integer, primary_key=True, index=True)
