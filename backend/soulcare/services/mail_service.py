from __future__ import annotations

import html
import logging
from datetime import datetime, timezone
from email.message import EmailMessage
from urllib.parse import quote

import aiosmtplib

from ..config import settings
from ..metrics import mail_failed_total
from .otp_service import OtpPurpose

logger = logging.getLogger(__name__)


class MailDeliveryError(RuntimeError):
    """Raised when the SMTP relay rejects or cannot receive a message."""


def reset_link(email: str, code: str) -> str:
    base = settings.app_url.rstrip("/")
    return f"{base}/auth/reset-password?email={quote(email, safe='')}&code={code}"


def render_otp_email(email: str, code: str, purpose: OtpPurpose) -> tuple[str, str]:
    """Return ``(subject, html_body)`` for a one-time code message."""
    app_name = html.escape(settings.app_name)
    year = datetime.now(timezone.utc).year
    code_block = (
        '<div style="text-align:center;margin:30px 0;">'
        '<span style="font-size:32px;font-weight:bold;letter-spacing:5px;color:#0070f3;'
        'background:#f0f7ff;padding:10px 20px;border-radius:5px;border:1px dashed #0070f3;">'
        f"{html.escape(code)}</span></div>"
    )
    if purpose is OtpPurpose.password_reset:
        subject = f"Your Password Reset Code - {settings.app_name}"
        link = html.escape(reset_link(email, code), quote=True)
        intro = (
            f"<p>We received a request to reset your password for your {app_name} account. "
            "Use the code below to proceed:</p>"
        )
        action = (
            "<p>Alternatively, you can click the button below to reset your password directly:</p>"
            '<div style="text-align:center;margin:30px 0;">'
            f'<a href="{link}" style="background-color:#0070f3;color:white;padding:12px 24px;'
            'text-decoration:none;border-radius:5px;font-weight:bold;">Reset Password</a></div>'
        )
        heading = "Password Reset Request"
    else:
        subject = f"Your Sign-in Code - {settings.app_name}"
        intro = f"<p>Use the code below to finish signing in to {app_name}:</p>"
        action = ""
        heading = "Sign-in Verification"

    body = (
        '<div style="font-family:Arial,sans-serif;max-width:600px;margin:0 auto;padding:20px;'
        'border:1px solid #eee;border-radius:10px;">'
        f'<h2 style="color:#333;text-align:center;">{heading}</h2>'
        "<p>Hello,</p>"
        f"{intro}{code_block}{action}"
        f'<p style="font-size:14px;color:#666;">This code will expire in {settings.otp_ttl_minutes} '
        "minutes. If you did not request this, please ignore this email.</p>"
        '<hr style="border:0;border-top:1px solid #eee;margin:20px 0;">'
        f'<p style="font-size:12px;color:#999;text-align:center;">&copy; {year} {app_name}. '
        "All rights reserved.</p></div>"
    )
    return subject, body


async def send_html_email(to: str, subject: str, body: str) -> None:
    if not settings.smtp_host:
        raise MailDeliveryError("SMTP is not configured")

    message = EmailMessage()
    message["From"] = settings.mail_sender
    message["To"] = to
    message["Subject"] = subject
    message.set_content("This message requires an HTML capable email client.")
    message.add_alternative(body, subtype="html")

    try:
        await aiosmtplib.send(
            message,
            hostname=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_pass,
            use_tls=settings.smtp_secure,
            start_tls=False if settings.smtp_secure else None,
            timeout=settings.smtp_timeout_seconds,
        )
    except aiosmtplib.SMTPException as exc:
        raise MailDeliveryError(str(exc)) from exc


async def send_otp_email(email: str, code: str, purpose: OtpPurpose) -> bool:
    """Deliver a one-time code. Returns False instead of raising on failure."""
    subject, body = render_otp_email(email, code, purpose)
    try:
        await send_html_email(email, subject, body)
    except MailDeliveryError as exc:
        mail_failed_total.inc()
        logger.error("Sending one-time code email failed: %s", exc, extra={"purpose": purpose.value})
        return False
    logger.info("One-time code email sent", extra={"purpose": purpose.value})
    return True


__all__ = [
    "MailDeliveryError",
    "render_otp_email",
    "reset_link",
    "send_html_email",
    "send_otp_email",
]
