"""Send one-time code text messages via Twilio."""

import logging

from twilio.base.exceptions import TwilioException
from twilio.rest import Client

from auth_api.core.config import Settings
from auth_api.core.errors import NotificationError

logger = logging.getLogger(__name__)


def normalize_phone_number(phone_number: str) -> str:
    phone_number = "".join(c for c in phone_number if c.isdigit() or c == "+")
    if phone_number.startswith("+"):
        return phone_number
    if len(phone_number) == 10:
        return "+1" + phone_number
    return "+" + phone_number


def send_otp_sms(app_settings: Settings, phone_number: str, code: str, expires_in: str) -> bool:
    """
    Send a one-time code by SMS.
    Returns False if Twilio is not configured; raises NotificationError if a configured send fails.
    """
    if not all([
        app_settings.TWILIO_ACCOUNT_SID,
        app_settings.TWILIO_AUTH_TOKEN,
        app_settings.TWILIO_PHONE_NUMBER,
    ]):
        logger.warning("Twilio not configured (TWILIO_ACCOUNT_SID/TWILIO_AUTH_TOKEN/TWILIO_PHONE_NUMBER). Skipping send.")
        return False

    to_number = normalize_phone_number(phone_number)
    try:
        client = Client(app_settings.TWILIO_ACCOUNT_SID, app_settings.TWILIO_AUTH_TOKEN.strip())
        message = client.messages.create(
            body=f"Your verification code is {code}. It expires in {expires_in}.",
            from_=app_settings.TWILIO_PHONE_NUMBER,
            to=to_number,
        )
    except (TwilioException, OSError) as e:
        logger.exception("Failed to send SMS to %s", to_number)
        raise NotificationError() from e
    logger.info("SMS sent successfully: %s", message.sid)
    return True
