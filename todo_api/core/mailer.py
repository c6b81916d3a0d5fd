"""
Outgoing mail for the account flows.

Registration sends an email-confirmation code and ForgotPassword sends a
password-reset code. ``code_email`` renders those bodies and ``send_email``
delivers them through the SMTP server configured in Settings. Without SMTP
settings the message is dropped with a warning and the flow carries on.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
import logging
import smtplib
import ssl

from .config import Settings, get_settings

logger = logging.getLogger(__name__)

CONFIRM_EMAIL_SUBJECT = "Confirm your email"
RESET_PASSWORD_SUBJECT = "Reset Password"


def code_email(prompt: str, code: str) -> tuple[str, str]:
    """Return ``(html, text)`` bodies asking the user to enter ``code``.

    The plain-text body always ends with ``": <code>"``.
    """
    text = f"{prompt}: {code}"
    html = f"<p>{escape(prompt)}:</p><p><strong><code>{escape(code)}</code></strong></p>"
    return html, text


def _smtp_ready(settings: Settings) -> bool:
    return bool(
        settings.smtp_host
        and settings.smtp_user
        and settings.smtp_password
        and settings.smtp_from
        and settings.smtp_port
    )


def _connect(settings: Settings) -> smtplib.SMTP:
    context = ssl.create_default_context()
    if settings.smtp_port == 465:
        return smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, context=context)
    server = smtplib.SMTP(settings.smtp_host, settings.smtp_port)
    try:
        server.ehlo()
        server.starttls(context=context)
    except (smtplib.SMTPException, OSError):
        server.close()
        raise
    return server


def send_email(subject: str, to_email: str, html_body: str, text_body: str | None = None) -> bool:
    """
    Deliver an account email to a single recipient.
    Returns False, without raising, when SMTP is not configured or delivery fails.
    """
    settings = get_settings()
    if not _smtp_ready(settings):
        logger.warning("SMTP not configured; dropping %r for %s", subject, to_email)
        return False
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.smtp_from
    msg["To"] = to_email
    msg.attach(MIMEText(text_body or html_body, "plain", "utf-8"))
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    try:
        with _connect(settings) as server:
            server.login(settings.smtp_user, settings.smtp_password)
            server.sendmail(settings.smtp_from, [to_email], msg.as_string())
    except (smtplib.SMTPException, OSError) as exc:
        logger.warning("Could not deliver %r to %s: %s", subject, to_email, exc)
        return False
    logger.info("Delivered %r to %s", subject, to_email)
    return True
