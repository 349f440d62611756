import logging
import smtplib
from email.message import EmailMessage
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from stockbook.config import settings

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)


def render_password_reset(user, reset_url: str) -> str:
    return templates.get_template("email/reset_password.txt").render(
        user=user,
        reset_url=reset_url,
        expire_minutes=settings.reset_token_expire_minutes,
    )


def send_email(to: str, subject: str, body: str) -> None:
    """Envía por SMTP si está configurado; en otro caso solo se registra en el log."""
    if not settings.smtp_host:
        logger.info("SMTP not configured; email to %s (%s):\n%s", to, subject, body)
        return

    message = EmailMessage()
    message["From"] = settings.mail_from
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body)

    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as smtp:
        smtp.starttls()
        if settings.smtp_user:
            smtp.login(settings.smtp_user, settings.smtp_password or "")
        smtp.send_message(message)
    logger.info("Sent '%s' to %s", subject, to)


def send_password_reset_email(user, raw_token: str) -> str:
    reset_url = f"{settings.frontend_url.rstrip('/')}/resetpassword/{raw_token}"
    send_email(user.email, "Password reset token", render_password_reset(user, reset_url))
    return reset_url
