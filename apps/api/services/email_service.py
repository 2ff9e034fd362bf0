"""
Email Service

Sends account and notification emails over SMTP.
With EMAIL_ENABLED off (the default) messages are only logged.
"""

import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
from core.config import settings
import logging

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending emails"""

    def __init__(self):
        self.smtp_server = settings.SMTP_SERVER
        self.smtp_port = settings.SMTP_PORT
        self.smtp_username = settings.SMTP_USERNAME
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_email = settings.FROM_EMAIL
        self.from_name = settings.FROM_NAME
        self.enabled = settings.EMAIL_ENABLED

    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """
        Send an email.

        Returns True if sent successfully, False otherwise.
        """
        if not self.enabled:
            logger.info(f"Email disabled, would send to {to_email}: {subject}")
            return False

        try:
            msg = MIMEMultipart('alternative')
            msg['Subject'] = subject
            msg['From'] = f"{self.from_name} <{self.from_email}>"
            msg['To'] = to_email

            if text_content:
                msg.attach(MIMEText(text_content, 'plain'))
            msg.attach(MIMEText(html_content, 'html'))

            with smtplib.SMTP(self.smtp_server, self.smtp_port) as server:
                if self.smtp_username and self.smtp_password:
                    server.starttls()
                    server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)

            return True

        except Exception as e:
            logger.error(f"Error sending email to {to_email}: {str(e)}")
            return False

    def send_confirmation(self, to_email: str, confirm_url: str) -> bool:
        """Send the sign-up confirmation link."""
        subject = f"Confirm your {self.from_name} account"
        html_content = f"""
        <html>
        <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <h2>Confirm your email</h2>
            <p>Thanks for signing up. Click below to confirm your address and finish setting up your profile.</p>
            <p><a href="{confirm_url}">Confirm email</a></p>
            <p style="color: #666; font-size: 14px;">
                This link expires in {settings.EMAIL_CONFIRM_TOKEN_TTL_HOURS} hours.
                If you didn't create an account, ignore this email.
            </p>
        </body>
        </html>
        """
        text_content = (
            "Confirm your email\n\n"
            f"Open this link to confirm your address: {confirm_url}\n\n"
            f"This link expires in {settings.EMAIL_CONFIRM_TOKEN_TTL_HOURS} hours."
        )
        return self.send_email(to_email, subject, html_content, text_content)

    def send_notification(self, to_email: str, title: str, body: Optional[str], link: Optional[str]) -> bool:
        """Mirror an in-app notification to email."""
        link_html = f'<p><a href="{link}">Open</a></p>' if link else ""
        html_content = f"""
        <html>
        <body style="font-family: Arial, sans-serif;">
            <h3>{title}</h3>
            <p>{body or ""}</p>
            {link_html}
        </body>
        </html>
        """
        text_content = "\n\n".join(p for p in (title, body, link) if p)
        return self.send_email(to_email, title, html_content, text_content)


email_service = EmailService()
