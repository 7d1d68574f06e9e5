"""Email delivery over SMTP"""

import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional
import aiosmtplib

from atelier.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """
    Async SMTP email service.

    Sending is best-effort: failures are logged and reported as False,
    never raised to the caller. When SMTP credentials are not configured
    the message is only logged, which is what development relies on to
    pick up verification links.
    """

    def __init__(self):
        self.smtp_host = settings.smtp_host
        self.smtp_port = settings.smtp_port
        self.smtp_user = settings.smtp_user
        self.smtp_password = settings.smtp_password
        self.from_email = settings.email_from
        self.from_name = settings.email_from_name
        self.frontend_url = settings.frontend_url.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp_user and self.smtp_password)

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """
        Send an email

        Returns:
            True if the SMTP server accepted the message
        """
        if not self.is_configured:
            logger.info(f"[Email] SMTP not configured, not sending '{subject}' to {to_email}")
            if text_content:
                logger.info(f"[Email] {text_content}")
            return False

        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = f"{self.from_name} <{self.from_email}>"
        message["To"] = to_email
        if text_content:
            message.attach(MIMEText(text_content, "plain", "utf-8"))
        message.attach(MIMEText(html_content, "html", "utf-8"))

        try:
            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_user,
                password=self.smtp_password,
                start_tls=True,
            )
        except aiosmtplib.SMTPException as e:
            logger.error(f"[Email] Failed to send '{subject}' to {to_email}: {e}")
            return False
        except OSError as e:
            logger.error(f"[Email] SMTP server {self.smtp_host}:{self.smtp_port} unreachable: {e}")
            return False

        logger.info(f"[Email] Sent '{subject}' to {to_email}")
        return True

    def verification_link(self, token: str) -> str:
        return f"{self.frontend_url}/verify-email?token={token}"

    async def send_verification_email(self, to_email: str, username: str, token: str) -> bool:
        """Send the confirmation link for a new or unverified account"""
        link = self.verification_link(token)
        subject = "Confirm your email address"
        text = (
            f"Hi {username},\n\n"
            f"Please confirm your email address by opening this link:\n{link}\n\n"
            f"The link expires in {settings.verification_token_hours} hours."
        )
        html = (
            f"<p>Hi {username},</p>"
            f"<p>Please confirm your email address by clicking "
            f"<a href=\"{link}\">this link</a>.</p>"
            f"<p>The link expires in {settings.verification_token_hours} hours.</p>"
        )
        return await self.send_email(to_email, subject, html, text)


def get_email_service() -> EmailService:
    """FastAPI dependency returning the email service"""
    return EmailService()
