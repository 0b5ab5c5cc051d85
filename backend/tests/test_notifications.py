import smtplib
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
from twilio.base.exceptions import TwilioRestException

from auth_api.core.errors import NotificationError
from auth_api.services.notifications import Notifier, OtpPurpose


@pytest.fixture
def smtp_settings(settings):
    settings.SMTP_HOST = "smtp.example.com"
    settings.SMTP_USER = "mailer"
    settings.SMTP_PASSWORD = "secret"
    return settings


@pytest.fixture
def twilio_settings(settings):
    settings.TWILIO_ACCOUNT_SID = "AC123"
    settings.TWILIO_AUTH_TOKEN = " token "
    settings.TWILIO_PHONE_NUMBER = "+15550000"
    return settings


def test_email_skipped_when_smtp_unconfigured(settings):
    with patch("auth_api.services.email.smtplib.SMTP") as smtp:
        sent = Notifier(settings).send_email_otp("a@x.com", "123456", OtpPurpose.activation, timedelta(minutes=30))
    assert sent is False
    smtp.assert_not_called()


def test_email_sent_with_code(smtp_settings):
    with patch("auth_api.services.email.smtplib.SMTP") as smtp:
        server = smtp.return_value.__enter__.return_value
        sent = Notifier(smtp_settings).send_email_otp("a@x.com", "123456", OtpPurpose.recovery, timedelta(seconds=60))

    assert sent is True
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("mailer", "secret")
    from_addr, to_addrs, message = server.sendmail.call_args[0]
    assert to_addrs == ["a@x.com"]
    assert "Reset your password" in message
    assert "123456" in message


def test_email_failure_raises(smtp_settings):
    with patch("auth_api.services.email.smtplib.SMTP", side_effect=smtplib.SMTPConnectError(421, "down")):
        with pytest.raises(NotificationError):
            Notifier(smtp_settings).send_email_otp("a@x.com", "123456", OtpPurpose.activation, timedelta(minutes=30))


def test_sms_skipped_when_twilio_unconfigured(settings):
    with patch("auth_api.services.sms.Client") as client:
        sent = Notifier(settings).send_sms_otp("+15550100", "123456", OtpPurpose.activation, timedelta(seconds=60))
    assert sent is False
    client.assert_not_called()


def test_sms_sent_to_normalized_number(twilio_settings):
    with patch("auth_api.services.sms.Client") as client:
        client.return_value.messages.create.return_value = MagicMock(sid="SM1")
        sent = Notifier(twilio_settings).send_sms_otp("(206) 555-0100", "123456", OtpPurpose.activation, timedelta(seconds=60))

    assert sent is True
    client.assert_called_once_with("AC123", "token")
    kwargs = client.return_value.messages.create.call_args.kwargs
    assert kwargs["to"] == "+12065550100"
    assert kwargs["from_"] == "+15550000"
    assert "123456" in kwargs["body"]


def test_sms_failure_raises(twilio_settings):
    with patch("auth_api.services.sms.Client") as client:
        client.return_value.messages.create.side_effect = TwilioRestException(500, "https://api.twilio.com", "boom")
        with pytest.raises(NotificationError):
            Notifier(twilio_settings).send_sms_otp("+15550100", "123456", OtpPurpose.activation, timedelta(seconds=60))
