"""Email utility: sends transactional emails via SMTP (TLS)."""
from __future__ import annotations

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.core.config import settings
from app.errors.exceptions import DeliveryError

logger = logging.getLogger(__name__)


def _build_smtp_connection() -> smtplib.SMTP:
    """Open an authenticated SMTP TLS connection."""
    conn = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=15)
    conn.ehlo()
    conn.starttls()
    conn.ehlo()
    conn.login(settings.SMTP_USER, settings.SMTP_PASS)
    return conn


def send_email(to: str, subject: str, html_body: str, plain_body: str = "") -> None:
    """
    Send a transactional email.

    Raises ``DeliveryError`` when the SMTP conversation fails; the caller
    decides whether that matters.
    """
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"Buzzpay <{settings.EMAIL_FROM}>"
    msg["To"] = to

    if plain_body:
        msg.attach(MIMEText(plain_body, "plain", "utf-8"))
    msg.attach(MIMEText(html_body, "html", "utf-8"))

    try:
        with _build_smtp_connection() as conn:
            conn.sendmail(settings.EMAIL_FROM, [to], msg.as_string())
    except (smtplib.SMTPException, OSError) as exc:
        raise DeliveryError(f"Failed to send '{subject}' to {to}: {exc}") from exc

    logger.info(f"[Email] Sent '{subject}' → {to}")


def send_otp_email(to: str, otp: str, phone: str) -> None:
    """Send the registration OTP for *phone* to *to*."""
    subject = "Buzzpay Registration - OTP Verification"
    html_body = f"""
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <style>
    body {{ font-family: Arial, sans-serif; background: #f4f4f4; margin: 0; padding: 0; }}
    .container {{ max-width: 600px; margin: 40px auto; background: #fff;
                  border-radius: 8px; padding: 32px; box-shadow: 0 2px 8px rgba(0,0,0,.1); }}
    .logo {{ font-size: 26px; font-weight: 700; color: #4169E1; margin-bottom: 24px; }}
    .otp {{ font-size: 36px; font-weight: 800; letter-spacing: 5px; color: #4169E1;
            padding: 16px 0; display: inline-block; }}
    .footer {{ margin-top: 24px; font-size: 12px; color: #999; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="logo">Buzzpay Registration</div>
    <p>Your OTP for phone number <strong>{phone}</strong> is:</p>
    <div class="otp">{otp}</div>
    <p>This OTP is valid for {settings.OTP_EXPIRE_MINUTES} minutes.</p>
    <div class="footer">If you didn't request this OTP, please ignore this email.</div>
  </div>
</body>
</html>
"""
    plain_body = (
        f"Your Buzzpay OTP for phone number {phone} is: {otp}\n\n"
        f"This OTP is valid for {settings.OTP_EXPIRE_MINUTES} minutes."
    )
    send_email(to, subject, html_body, plain_body)
