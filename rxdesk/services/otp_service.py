from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rxdesk.core.config import settings
from rxdesk.core.constants import VerificationFailure
from rxdesk.core.database import storage_errors
from rxdesk.models.base import utcnow
from rxdesk.models.otp import OTPCode
from rxdesk.services import sms_service
from rxdesk.utils.errors import ValidationError
from rxdesk.utils.helpers import generate_otp, mask_phone, normalize_phone
from rxdesk.utils.locks import KeyedLock

import logging

logger = logging.getLogger(__name__)

_generation_locks = KeyedLock()


class OTPService:
    """
    Single-use, time-boxed verification codes keyed by phone number.

    Each phone number has one current row; generating replaces it. A code
    is consumed by a conditional UPDATE, so of several concurrent correct
    verifications exactly one succeeds.
    """

    @staticmethod
    def generate_code(db: Session, phone_number: str) -> str:
        phone = normalize_phone(phone_number)
        if not phone:
            raise ValidationError("Invalid phone number")

        otp_code, _ = generate_otp(settings.OTP_LENGTH)
        now = utcnow()
        fields = {
            OTPCode.code: otp_code,
            OTPCode.created_at: now,
            OTPCode.expires_at: now + timedelta(minutes=settings.OTP_EXPIRE_MINUTES),
            OTPCode.consumed_at: None,
            OTPCode.attempts: 0,
        }

        with _generation_locks.hold(phone), storage_errors(db, "store verification code"):
            replaced = (
                db.query(OTPCode)
                .filter(OTPCode.phone_number == phone)
                .update(fields, synchronize_session=False)
            )
            if not replaced:
                try:
                    db.add(OTPCode(phone_number=phone, **{col.key: val for col, val in fields.items()}))
                    db.commit()
                except IntegrityError:
                    # Another process inserted first; overwrite its row
                    db.rollback()
                    db.query(OTPCode).filter(OTPCode.phone_number == phone).update(fields, synchronize_session=False)
                    db.commit()
            else:
                db.commit()

        logger.info(
            "Verification code issued for %s, expires at %s",
            mask_phone(phone), fields[OTPCode.expires_at].isoformat(),
        )

        if not sms_service.send_otp_sms(phone, otp_code):
            logger.error("Failed to deliver verification code to %s", mask_phone(phone))

        return otp_code

    @staticmethod
    def verify_code(db: Session, phone_number: str, code: str) -> bool:
        """Consume the code if it is current; False for every failure."""
        phone = normalize_phone(phone_number)
        if not phone or not code:
            logger.info("Verification rejected: malformed input")
            return False

        now = utcnow()
        conditions = [
            OTPCode.phone_number == phone,
            OTPCode.code == code,
            OTPCode.consumed_at.is_(None),
            OTPCode.expires_at > now,
        ]
        if settings.OTP_MAX_ATTEMPTS > 0:
            conditions.append(OTPCode.attempts < settings.OTP_MAX_ATTEMPTS)

        with storage_errors(db, "verify code"):
            consumed = (
                db.query(OTPCode)
                .filter(*conditions)
                .update({OTPCode.consumed_at: now}, synchronize_session=False)
            )
            db.commit()

            if consumed == 1:
                logger.info("Verification code consumed for %s", mask_phone(phone))
                return True

            reason = OTPService._record_failure(db, phone, now)

        logger.info("Verification failed for %s: %s", mask_phone(phone), reason.value)
        return False

    @staticmethod
    def _record_failure(db: Session, phone: str, now: datetime) -> VerificationFailure:
        record = (
            db.query(OTPCode)
            .populate_existing()
            .filter(OTPCode.phone_number == phone)
            .first()
        )
        if record is None:
            return VerificationFailure.NO_CODE
        if record.is_consumed:
            return VerificationFailure.CONSUMED
        if record.is_expired(now):
            return VerificationFailure.EXPIRED
        if 0 < settings.OTP_MAX_ATTEMPTS <= record.attempts:
            return VerificationFailure.LOCKED

        db.query(OTPCode).filter(
            OTPCode.phone_number == phone,
            OTPCode.consumed_at.is_(None),
            # only charge the row that was read, not one issued since
            OTPCode.created_at == record.created_at,
            OTPCode.code == record.code,
        ).update({OTPCode.attempts: OTPCode.attempts + 1}, synchronize_session=False)
        db.commit()
        return VerificationFailure.MISMATCH
