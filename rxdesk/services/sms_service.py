# rxdesk/services/sms_service.py
from typing import Optional
import logging

from twilio.rest import Client
from twilio.base.exceptions import TwilioRestException

from rxdesk.core.config import settings
from rxdesk.core.constants import SMSBackend
from rxdesk.utils.helpers import mask_phone

logger = logging.getLogger(__name__)


def send_sms_message(
    to_number: str,
    body: str,
    from_number: Optional[str] = None,
) -> bool:
    """
    Send a transactional SMS through Twilio.
    Returns True if successful, False otherwise.
    """
    account_sid = settings.TWILIO_ACCOUNT_SID
    auth_token = settings.TWILIO_AUTH_TOKEN

    if not account_sid or not auth_token:
        logger.warning("Twilio credentials not configured. Skipping SMS.")
        return False

    from_number = from_number or settings.TWILIO_FROM_NUMBER
    if not to_number or not from_number:
        logger.warning(f"Missing phone numbers. To: {mask_phone(to_number)}, From: {from_number}")
        return False

    try:
        client = Client(account_sid, auth_token)
        message = client.messages.create(
            to=to_number,
            from_=from_number,
            body=body,
        )
        logger.info(f"SMS sent to {mask_phone(to_number)}. SID: {message.sid}")
        return True
    except TwilioRestException as e:
        logger.error(f"Twilio error sending SMS to {mask_phone(to_number)}: {e}")
        return False
    except Exception as e:
        logger.error(f"Unexpected error sending SMS to {mask_phone(to_number)}: {e}")
        return False


def build_otp_message(otp_code: str) -> str:
    return (
        f"Your {settings.APP_NAME} verification code is {otp_code}. "
        f"It expires in {settings.OTP_EXPIRE_MINUTES} minutes."
    )


def send_otp_sms(to_phone: str, otp_code: str) -> bool:
    """Deliver a verification code over the configured SMS backend."""
    if settings.SMS_BACKEND == SMSBackend.TWILIO.value:
        return send_sms_message(to_phone, build_otp_message(otp_code))

    # console backend: local development and the demo
    logger.debug(f"[sms:console] to {mask_phone(to_phone)}: {build_otp_message(otp_code)}")
    return True
