"""
API Services Layer.

Business rules and orchestration between the routes and the repositories.
Every function takes the request's ``AsyncSession`` as its first argument.
"""

from api.services.interview_candidates import (
    create_from_application,
    schedule_interview,
    update_interview_feedback,
    update_stage,
    make_decision,
    add_communication,
    update_overall_rating,
    update_skills_assessment,
    create_offer,
    update_offer_status,
)

from api.services.applications import (
    submit_application,
    get_application,
    update_application_status,
)

from api.services.jobs import (
    create_job,
    get_job,
    update_job,
    delete_job,
)

from api.services.users import (
    register_user,
    authenticate_user,
    get_user,
)

from api.services.notifications import (
    ApplicationSubmitted,
    NotificationPublisher,
    CeleryNotificationPublisher,
    get_notification_publisher,
)

__all__ = [
    # Interview candidates
    "create_from_application",
    "schedule_interview",
    "update_interview_feedback",
    "update_stage",
    "make_decision",
    "add_communication",
    "update_overall_rating",
    "update_skills_assessment",
    "create_offer",
    "update_offer_status",
    # Applications
    "submit_application",
    "get_application",
    "update_application_status",
    # Jobs
    "create_job",
    "get_job",
    "update_job",
    "delete_job",
    # Users
    "register_user",
    "authenticate_user",
    "get_user",
    # Notifications
    "ApplicationSubmitted",
    "NotificationPublisher",
    "CeleryNotificationPublisher",
    "get_notification_publisher",
]
