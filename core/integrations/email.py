"""Email integration utilities for sending emails."""

import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import List, Optional
import logging

from core.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """Email service for sending emails via SMTP."""

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: Optional[str] = None,
        use_tls: Optional[bool] = None,
    ):
        """
        Initialize email service. Unset arguments fall back to settings.

        Args:
            smtp_host: SMTP server host
            smtp_port: SMTP server port
            smtp_user: SMTP username
            smtp_password: SMTP password
            from_email: Default sender email
            from_name: Default sender name
            use_tls: Whether to upgrade the connection with STARTTLS
        """
        self.smtp_host = smtp_host or settings.smtp_host
        self.smtp_port = smtp_port or settings.smtp_port
        self.smtp_user = smtp_user or settings.smtp_user
        self.smtp_password = smtp_password or settings.smtp_password
        self.from_email = from_email or settings.from_email
        self.from_name = from_name or settings.from_name
        self.use_tls = settings.smtp_use_tls if use_tls is None else use_tls

    def send_email(
        self,
        to_email: str | List[str],
        subject: str,
        body: str,
        html: bool = False,
        cc: Optional[List[str]] = None,
        reply_to: Optional[str] = None,
    ) -> bool:
        """
        Send an email.

        Args:
            to_email: Recipient email address(es)
            subject: Email subject
            body: Email body
            html: Whether body is HTML
            cc: CC recipients
            reply_to: Reply-to email address

        Returns:
            True if email sent successfully
        """
        recipients = list(to_email) if isinstance(to_email, list) else [to_email]

        msg = MIMEMultipart()
        msg['From'] = f"{self.from_name} <{self.from_email}>"
        msg['To'] = ", ".join(recipients)
        msg['Subject'] = subject
        if cc:
            msg['Cc'] = ", ".join(cc)
            recipients.extend(cc)
        if reply_to:
            msg['Reply-To'] = reply_to
        msg.attach(MIMEText(body, 'html' if html else 'plain'))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                if self.use_tls:
                    server.starttls()
                if self.smtp_user and self.smtp_password:
                    server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg, from_addr=self.from_email, to_addrs=recipients)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email '{subject}': {e}")
            return False

        logger.info(f"Email sent: {subject}")
        return True


# Pre-configured email templates
class EmailTemplates:
    """Pre-configured email templates. Each returns subject/body/html."""

    @staticmethod
    def application_received(
        first_name: str,
        position: str,
        experience: str,
        applied_on: str,
        application_id: int,
    ) -> dict:
        """Confirmation sent to the applicant."""
        position = escape(position)
        return {
            'subject': f'Application Received - {position}',
            'body': f"""
                <html>
                <body>
                    <h2>Hello {escape(first_name)},</h2>
                    <p>We've received your application for the <strong>{position}</strong> position.</p>
                    <ul>
                        <li><strong>Position:</strong> {position}</li>
                        <li><strong>Experience Level:</strong> {escape(experience)}</li>
                        <li><strong>Applied:</strong> {applied_on}</li>
                        <li><strong>Application ID:</strong> {application_id}</li>
                    </ul>
                    <p>Our HR team will review your application and get back to you within 5-7 business days.</p>
                    <p>Best regards,<br>The Hiring Team</p>
                </body>
                </html>
            """,
            'html': True,
        }

    @staticmethod
    def new_application_for_hr(
        full_name: str,
        email: str,
        phone: str,
        position: str,
        experience: str,
        applied_on: str,
        application_id: int,
        cover_letter: Optional[str] = None,
    ) -> dict:
        """Notification sent to the HR inbox."""
        cover = (
            f"<h3>Cover Letter</h3><p>{escape(cover_letter)}</p>" if cover_letter else ''
        )
        return {
            'subject': f'New Career Application - {escape(position)}',
            'body': f"""
                <html>
                <body>
                    <h2>New application received</h2>
                    <ul>
                        <li><strong>Name:</strong> {escape(full_name)}</li>
                        <li><strong>Email:</strong> {escape(email)}</li>
                        <li><strong>Phone:</strong> {escape(phone)}</li>
                        <li><strong>Position:</strong> {escape(position)}</li>
                        <li><strong>Experience Level:</strong> {escape(experience)}</li>
                        <li><strong>Applied:</strong> {applied_on}</li>
                        <li><strong>Application ID:</strong> {application_id}</li>
                    </ul>
                    {cover}
                </body>
                </html>
            """,
            'html': True,
        }


# Global email service instance
_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    """Get or create global email service instance."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
