import logging
import smtplib
from email.message import EmailMessage

from school_backend.core.config import Settings

logger = logging.getLogger(__name__)


class MailNotConfiguredError(RuntimeError):
    pass


def build_message(settings: Settings, to: str, subject: str, text: str) -> EmailMessage:
    message = EmailMessage()
    message['From'] = settings.email_username
    message['To'] = to
    message['Subject'] = subject
    message.set_content(text)
    return message


def send_email(settings: Settings, to: str, subject: str, text: str) -> None:
    if not settings.mail_enabled:
        raise MailNotConfiguredError('EMAIL_USERNAME and EMAIL_PASSWORD must be set to send mail.')

    message = build_message(settings, to, subject, text)
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as smtp:
        smtp.starttls()
        smtp.login(settings.email_username, settings.email_password)
        smtp.send_message(message)

    logger.info('Sent "%s" email to %s', subject, to)
