"""Email sending tasks."""

from typing import List, Optional
import logging

from celery import Task

from workers.celery_app import celery_app
from core.integrations.email import get_email_service

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """SMTP delivery failed; the task will be retried."""


@celery_app.task(
    name="workers.tasks.emails.send_email",
    bind=True,
    max_retries=5,
    default_retry_delay=120,
)
def send_email(
    self: Task,
    to: str | List[str],
    subject: str,
    body: str,
    html: bool = False,
    cc: Optional[List[str]] = None,
) -> dict:
    """Send email via the configured SMTP service.

    Args:
        to: Recipient email address(es)
        subject: Email subject
        body: Email body
        html: Whether body is HTML
        cc: CC recipients

    Returns:
        Dictionary with send status
    """
    sent = get_email_service().send_email(
        to_email=to,
        subject=subject,
        body=body,
        html=html,
        cc=cc,
    )
    if not sent:
        logger.warning(
            f"Email '{subject}' not delivered, retry {self.request.retries + 1}"
        )
        raise self.retry(exc=EmailDeliveryError(subject))

    return {"status": "sent", "subject": subject}
