"""
Outbound notifications.

Services publish events to a ``NotificationPublisher`` after their own write
has committed. Publishing never raises: delivery problems are logged and the
primary operation is unaffected.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import logging

from core.config import settings
from core.integrations.email import EmailTemplates
from database.models.applications import CareerApplication
from workers.tasks.emails import send_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApplicationSubmitted:
    """A career application was received."""

    application_id: int
    first_name: str
    last_name: str
    email: str
    phone: str
    position: str
    experience: str
    applied_at: datetime
    cover_letter: Optional[str] = None

    @classmethod
    def from_application(cls, application: CareerApplication) -> "ApplicationSubmitted":
        return cls(
            application_id=application.id,
            first_name=application.first_name,
            last_name=application.last_name,
            email=application.email,
            phone=application.phone,
            position=application.position,
            experience=application.experience.value,
            applied_at=application.applied_at,
            cover_letter=application.cover_letter,
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


NotificationEvent = ApplicationSubmitted


class NotificationPublisher(ABC):
    """Interface the service layer publishes events to."""

    @abstractmethod
    def publish(self, event: NotificationEvent) -> None:
        """Deliver ``event``. Implementations must not raise."""


class NullNotificationPublisher(NotificationPublisher):
    """Drops every event. Used when notifications are disabled."""

    def publish(self, event: NotificationEvent) -> None:
        logger.debug(f"Notifications disabled, dropping {type(event).__name__}")


class CeleryNotificationPublisher(NotificationPublisher):
    """Renders emails for an event and queues them on the Celery broker."""

    def __init__(self, hr_email: Optional[str] = None):
        self.hr_email = hr_email or settings.hr_notification_email

    def render(self, event: NotificationEvent) -> list[dict]:
        """Keyword arguments for ``send_email``, one dict per message."""
        applied_on = event.applied_at.strftime("%Y-%m-%d")
        confirmation = EmailTemplates.application_received(
            first_name=event.first_name,
            position=event.position,
            experience=event.experience,
            applied_on=applied_on,
            application_id=event.application_id,
        )
        messages = [{"to": event.email, **confirmation}]

        if self.hr_email:
            hr_notice = EmailTemplates.new_application_for_hr(
                full_name=event.full_name,
                email=event.email,
                phone=event.phone,
                position=event.position,
                experience=event.experience,
                applied_on=applied_on,
                application_id=event.application_id,
                cover_letter=event.cover_letter,
            )
            messages.append({"to": self.hr_email, **hr_notice})
        return messages

    def publish(self, event: NotificationEvent) -> None:
        for message in self.render(event):
            try:
                send_email.delay(**message)
            except Exception:
                logger.exception(
                    f"Failed to queue '{message['subject']}' for "
                    f"application {event.application_id}"
                )


_publisher: Optional[NotificationPublisher] = None


def get_notification_publisher() -> NotificationPublisher:
    """FastAPI dependency returning the process-wide publisher."""
    global _publisher
    if _publisher is None:
        if settings.notifications_enabled:
            _publisher = CeleryNotificationPublisher()
        else:
            _publisher = NullNotificationPublisher()
    return _publisher
