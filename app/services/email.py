"""Outbound email for account notifications."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.config import Settings, get_settings
from app.errors import DeliveryError

logger = logging.getLogger("lms")


class EmailService:
    """Sends email via SMTP.

    When SMTP is not configured (local development) messages are logged
    instead of sent.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_username = settings.SMTP_USERNAME
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_email = settings.SMTP_FROM_EMAIL
        self.from_name = settings.SMTP_FROM_NAME
        self.enabled = settings.smtp_configured

    def send(self, to_address: str, subject: str, html_body: str) -> None:
        """Send an HTML email. Raises DeliveryError if the SMTP exchange fails."""
        if not self.enabled:
            logger.info("EMAIL (SMTP disabled) to=%s subject=%r body=%s", to_address, subject, html_body)
            return

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_address
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", to_address, e)
            raise DeliveryError("Failed to send email, please try again") from e

        logger.info("Sent email to=%s subject=%r", to_address, subject)

    def send_password_reset(self, to_address: str, reset_url: str) -> None:
        """Send the password reset link."""
        subject = "Reset Password"
        html_body = (
            f'<p>You can reset your password by clicking <a href="{reset_url}" target="_blank">'
            "Reset your password</a>.</p>"
            "<p>If the above link does not work, copy and paste this link into a new tab: "
            f"{reset_url}</p>"
            "<p>The link expires in 15 minutes. If you have not requested this, kindly ignore this email.</p>"
        )
        self.send(to_address, subject, html_body)


_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    """Get singleton email service instance."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
