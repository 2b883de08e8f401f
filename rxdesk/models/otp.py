"""One-time verification codes, one current row per phone number."""
from sqlalchemy import Column, Integer, String, DateTime
from rxdesk.core.database import Base
from rxdesk.models.base import utcnow


class OTPCode(Base):
    __tablename__ = "otp_codes"

    phone_number = Column(String(20), primary_key=True)
    code = Column(String(10), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    consumed_at = Column(DateTime, nullable=True)
    attempts = Column(Integer, default=0, nullable=False)

    @property
    def is_consumed(self) -> bool:
        return self.consumed_at is not None

    def is_expired(self, now) -> bool:
        return self.expires_at <= now

    def __repr__(self):
        return f"<OTPCode {self.phone_number}>"
