"""
Tests for the career application service.

Tests:
- Submission side effects (notifications, candidate auto-creation)
- Status updates and queries
"""

from unittest.mock import MagicMock, patch

import pytest

from api.services import applications as application_service
from api.services import interview_candidates as candidate_service
from api.services.notifications import ApplicationSubmitted, NotificationPublisher
from core.exceptions import NotFoundError, ValidationError
from database.models.applications import ApplicationStatus
from tests.factories import application_data


class TestSubmitApplication:
    """Test public submission."""

    async def test_publishes_event(self, db_session):
        publisher = MagicMock(spec=NotificationPublisher)

        application = await application_service.submit_application(
            db_session, application_data(), publisher=publisher
        )

        publisher.publish.assert_called_once()
        event = publisher.publish.call_args.args[0]
        assert isinstance(event, ApplicationSubmitted)
        assert event.application_id == application.id
        assert event.full_name == "Ada Lovelace"

    async def test_publisher_failure_does_not_fail_submission(self, db_session):
        publisher = MagicMock(spec=NotificationPublisher)
        publisher.publish.side_effect = RuntimeError("broker down")

        application = await application_service.submit_application(
            db_session, application_data(), publisher=publisher
        )

        stored = await application_service.get_application(db_session, application.id)
        assert stored.email == "ada@example.com"

    async def test_auto_creates_candidate(self, db_session):
        application = await application_service.submit_application(
            db_session, application_data(), auto_create_candidate=True
        )

        records, total = await candidate_service.list_candidates(db_session)
        assert total == 1
        assert records[0].career_application_id == application.id

    async def test_auto_create_disabled(self, db_session):
        await application_service.submit_application(
            db_session, application_data(), auto_create_candidate=False
        )
        _, total = await candidate_service.list_candidates(db_session)
        assert total == 0

    async def test_candidate_failure_does_not_fail_submission(self, db_session):
        with patch.object(
            candidate_service,
            "create_from_application",
            side_effect=NotFoundError("gone"),
        ):
            application = await application_service.submit_application(
                db_session, application_data(), auto_create_candidate=True
            )

        assert application.id is not None
        assert application.status == ApplicationStatus.PENDING
        _, total = await candidate_service.list_candidates(db_session)
        assert total == 0

    async def test_defaults(self, db_session):
        application = await application_service.submit_application(
            db_session, application_data(email=" ADA@Example.com "), auto_create_candidate=False
        )

        assert application.status == ApplicationStatus.PENDING
        assert application.email == "ada@example.com"
        assert application.applied_at is not None
        assert application.days_since_applied == 0


class TestApplicationQueries:
    """Test review operations."""

    @pytest.fixture
    async def applications(self, db_session):
        created = []
        for first_name, email, position in (
            ("Ada", "ada@example.com", "Backend Engineer"),
            ("Grace", "grace@example.com", "Frontend Engineer"),
            ("Alan", "alan@example.com", "Data Scientist"),
        ):
            created.append(
                await application_service.submit_application(
                    db_session,
                    application_data(first_name=first_name, email=email, position=position),
                    auto_create_candidate=False,
                )
            )
        return created

    async def test_update_status(self, db_session, applications):
        updated = await application_service.update_application_status(
            db_session, applications[0].id, "shortlisted", notes="Strong CV", actor_id=1
        )

        assert updated.status == ApplicationStatus.SHORTLISTED
        assert updated.notes == "Strong CV"

    async def test_update_status_invalid(self, db_session, applications):
        with pytest.raises(ValidationError, match="Invalid status"):
            await application_service.update_application_status(
                db_session, applications[0].id, "interviewing"
            )

    async def test_update_status_missing(self, db_session):
        with pytest.raises(NotFoundError):
            await application_service.update_application_status(db_session, 404, "reviewed")

    async def test_by_status(self, db_session, applications):
        await application_service.update_application_status(
            db_session, applications[1].id, "rejected"
        )
        rejected = await application_service.get_applications_by_status(db_session, "rejected")
        assert [a.id for a in rejected] == [applications[1].id]

    async def test_list_filters(self, db_session, applications):
        items, total = await application_service.list_applications(
            db_session, position="engineer", limit=1
        )
        assert total == 2
        assert len(items) == 1

    async def test_search(self, db_session, applications):
        found = await application_service.search_applications(db_session, "GRACE")
        assert [a.first_name for a in found] == ["Grace"]

        with pytest.raises(ValidationError, match="Search term is required"):
            await application_service.search_applications(db_session, "  ")

    async def test_recent(self, db_session, applications):
        assert len(await application_service.get_recent_applications(db_session, 7)) == 3
        with pytest.raises(ValidationError):
            await application_service.get_recent_applications(db_session, 0)

    async def test_statistics(self, db_session, applications):
        await application_service.update_application_status(
            db_session, applications[2].id, "hired"
        )
        stats = await application_service.get_application_statistics(db_session)

        assert stats["total"] == 3
        assert stats["recent"] == 3
        assert stats["by_status"] == {"pending": 2, "hired": 1}

    async def test_delete(self, db_session, applications):
        await application_service.delete_application(db_session, applications[0].id)

        with pytest.raises(NotFoundError):
            await application_service.get_application(db_session, applications[0].id)
        with pytest.raises(NotFoundError):
            await application_service.delete_application(db_session, applications[0].id)
