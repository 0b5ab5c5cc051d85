"""Send one-time code emails via SMTP."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from auth_api.core.config import Settings
from auth_api.core.errors import NotificationError

logger = logging.getLogger(__name__)

# Avoid blocking the request forever if SMTP is slow or unreachable
SMTP_TIMEOUT_SECONDS = 15

SUBJECTS = {
    "activation": "Verify your account",
    "recovery": "Reset your password",
}
INTROS = {
    "activation": "Use the code below to verify your email address.",
    "recovery": "Use the code below to reset your password.",
}


def send_otp_email(
    app_settings: Settings,
    to_email: str,
    code: str,
    purpose: str,
    expires_in: str,
) -> bool:
    """
    Send a one-time code email.
    Returns False if SMTP is not configured; raises NotificationError if a configured send fails.
    """
    if not app_settings.SMTP_HOST or not app_settings.SMTP_USER:
        logger.warning("SMTP not configured (SMTP_HOST/SMTP_USER). Skipping send.")
        return False

    subject = SUBJECTS.get(purpose, "Your one-time code")
    intro = INTROS.get(purpose, "Use the code below to continue.")
    html = f"""
<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family: sans-serif; max-width: 560px; margin: 0 auto; padding: 24px;">
  <p style="font-size: 16px; color: #1a1a1a; line-height: 1.5;">{intro}</p>
  <p style="margin: 24px 0; font-size: 28px; font-weight: 600; letter-spacing: 0.2em;">
    {code}
  </p>
  <p style="font-size: 14px; color: #737373;">It expires in {expires_in}.</p>
  <p style="font-size: 14px; color: #737373;">
    If you didn't request this, you can ignore this email.
  </p>
</body>
</html>
"""
    text = (
        f"{intro}\n\n"
        f"Your code is: {code}\n\n"
        f"It expires in {expires_in}.\n\n"
        "If you didn't request this, you can ignore this email."
    )

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{app_settings.SMTP_FROM_NAME} <{app_settings.SMTP_FROM_EMAIL}>"
    msg["To"] = to_email
    msg.attach(MIMEText(text, "plain"))
    msg.attach(MIMEText(html, "html"))

    try:
        with smtplib.SMTP(
            app_settings.SMTP_HOST, app_settings.SMTP_PORT, timeout=SMTP_TIMEOUT_SECONDS
        ) as server:
            server.starttls()
            server.login(app_settings.SMTP_USER, app_settings.SMTP_PASSWORD)
            server.sendmail(app_settings.SMTP_FROM_EMAIL, [to_email], msg.as_string())
    except smtplib.SMTPAuthenticationError as e:
        logger.exception("SMTP login failed for %s", to_email)
        raise NotificationError() from e
    except (smtplib.SMTPException, OSError) as e:
        logger.exception("Failed to send %s code email to %s", purpose, to_email)
        raise NotificationError() from e
    logger.info("%s code email sent to %s", purpose.capitalize(), to_email)
    return True
