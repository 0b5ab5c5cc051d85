"""Delivery of one-time codes. Sends are awaited inside the request; a failing transport fails the request."""

import enum
import logging
from datetime import timedelta

from auth_api.core.config import Settings
from auth_api.services.email import send_otp_email
from auth_api.services.sms import send_otp_sms

logger = logging.getLogger(__name__)


class OtpPurpose(str, enum.Enum):
    activation = "activation"
    recovery = "recovery"


def describe_duration(delta: timedelta) -> str:
    seconds = int(delta.total_seconds())
    if seconds % 3600 == 0 and seconds >= 3600:
        n, unit = seconds // 3600, "hour"
    elif seconds % 60 == 0 and seconds >= 60:
        n, unit = seconds // 60, "minute"
    else:
        n, unit = seconds, "second"
    return f"{n} {unit}" + ("" if n == 1 else "s")


class Notifier:
    def __init__(self, app_settings: Settings):
        self.settings = app_settings

    def send_email_otp(self, to_email: str, otp: str, purpose: OtpPurpose, expires_in: timedelta) -> bool:
        logger.info("Sending %s code to %s (expires in %s)", purpose.value, to_email, describe_duration(expires_in))
        return send_otp_email(self.settings, to_email, otp, purpose.value, describe_duration(expires_in))

    def send_sms_otp(self, phone_number: str, otp: str, purpose: OtpPurpose, expires_in: timedelta) -> bool:
        logger.info("Sending %s code by SMS (expires in %s)", purpose.value, describe_duration(expires_in))
        return send_otp_sms(self.settings, phone_number, otp, describe_duration(expires_in))
