"""
Email Service
Outbound mail over the SMTP server configured in settings
"""
import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional, Dict, Any
from starlette.concurrency import run_in_threadpool
from app.core.config import settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when the SMTP server could not be reached or refused the message"""


def is_configured() -> bool:
    return bool(settings.SMTP_HOST)


def _build_message(to_email: str, subject: str, sender: str,
                   html_content: Optional[str], text_content: Optional[str]) -> MIMEMultipart:
    msg = MIMEMultipart('alternative')
    msg['Subject'] = subject
    msg['From'] = sender
    msg['To'] = to_email
    if text_content:
        msg.attach(MIMEText(text_content, 'plain'))
    if html_content:
        msg.attach(MIMEText(html_content, 'html'))
    return msg


def _connect() -> smtplib.SMTP:
    if settings.SMTP_USE_TLS:
        return smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT)
    return smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT)


def _deliver(msg: MIMEMultipart) -> None:
    # Blocking; callers on the event loop go through run_in_threadpool
    with _connect() as server:
        if settings.SMTP_USE_TLS:
            server.starttls()
        if settings.SMTP_USER:
            server.login(settings.SMTP_USER, settings.SMTP_PASSWORD or "")
        server.send_message(msg)


async def send_email_smtp(
    to_email: str,
    subject: str,
    html_content: Optional[str] = None,
    text_content: Optional[str] = None,
    from_email: Optional[str] = None,
    from_name: Optional[str] = None
) -> Dict[str, Any]:
    """
    Send an email through the configured SMTP server.

    Args:
        to_email: Recipient email address
        subject: Email subject
        html_content: HTML body (optional)
        text_content: Plain text body (optional)
        from_email: Sender address, defaults to SMTP_FROM_EMAIL then SMTP_USER
        from_name: Sender display name, defaults to SMTP_FROM_NAME

    Raises:
        EmailDeliveryError: SMTP is not configured or the server rejected the message
    """
    if not is_configured():
        raise EmailDeliveryError("SMTP is not configured. Please set SMTP_HOST in settings.")

    if not text_content and not html_content:
        raise ValueError("Either text_content or html_content must be provided")

    sender_email = from_email or settings.SMTP_FROM_EMAIL or settings.SMTP_USER
    sender_name = from_name or settings.SMTP_FROM_NAME
    msg = _build_message(to_email, subject, f"{sender_name} <{sender_email}>", html_content, text_content)

    try:
        await run_in_threadpool(_deliver, msg)
    except smtplib.SMTPAuthenticationError as e:
        raise EmailDeliveryError("SMTP authentication failed. Please check SMTP credentials.") from e
    except (smtplib.SMTPException, OSError) as e:
        raise EmailDeliveryError(f"Failed to send email: {e}") from e

    logger.info("Sent email '%s' to %s", subject, to_email)
    return {"status": "sent", "to": to_email, "subject": subject}
