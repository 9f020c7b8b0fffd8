"""
Tests for outbound notifications.

Tests:
- Email rendering for applicant and HR
- Queueing on Celery
- Delivery problems never propagate
"""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from api.services.notifications import (
    ApplicationSubmitted,
    CeleryNotificationPublisher,
    NullNotificationPublisher,
)


@pytest.fixture
def event():
    return ApplicationSubmitted(
        application_id=12,
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        phone="+1 555 0100",
        position="Backend <Engineer>",
        experience="senior",
        applied_at=datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc),
        cover_letter="Hello",
    )


class TestCeleryNotificationPublisher:
    """Test the Celery-backed publisher."""

    def test_render_without_hr_address(self, event, monkeypatch):
        monkeypatch.setattr("api.services.notifications.settings.hr_notification_email", None)
        messages = CeleryNotificationPublisher().render(event)

        assert len(messages) == 1
        confirmation = messages[0]
        assert confirmation["to"] == "ada@example.com"
        assert confirmation["html"] is True
        assert "Ada" in confirmation["body"]

    def test_render_escapes_html(self, event):
        confirmation = CeleryNotificationPublisher().render(event)[0]

        assert "Backend &lt;Engineer&gt;" in confirmation["subject"]
        assert "<Engineer>" not in confirmation["body"]

    def test_render_with_hr_address(self, event):
        messages = CeleryNotificationPublisher(hr_email="hr@example.com").render(event)

        assert [m["to"] for m in messages] == ["ada@example.com", "hr@example.com"]
        assert "Ada Lovelace" in messages[1]["body"]
        assert "2026-03-02" in messages[1]["body"]

    def test_publish_queues_each_message(self, event):
        publisher = CeleryNotificationPublisher(hr_email="hr@example.com")

        with patch("api.services.notifications.send_email") as send_email:
            publisher.publish(event)

        assert send_email.delay.call_count == 2
        first = send_email.delay.call_args_list[0].kwargs
        assert first["to"] == "ada@example.com"
        assert set(first) == {"to", "subject", "body", "html"}

    def test_publish_swallows_broker_errors(self, event):
        publisher = CeleryNotificationPublisher(hr_email="hr@example.com")

        with patch("api.services.notifications.send_email") as send_email:
            send_email.delay.side_effect = ConnectionError("redis down")
            publisher.publish(event)

        assert send_email.delay.call_count == 2


class TestNullNotificationPublisher:
    def test_drops_events(self, event):
        with patch("api.services.notifications.send_email") as send_email:
            NullNotificationPublisher().publish(event)
        send_email.delay.assert_not_called()
