"""
Tests for the candidate lifecycle.

Tests:
- Candidate creation and timeline
- Interview scheduling and feedback
- Decisions, ratings and skills assessment
- Offers and the stage changes they imply
- Optional stage transition enforcement
- Derived status and next interview
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.exceptions import NotFoundError, PreconditionFailedError, ValidationError
from core.pipeline import (
    OFFER_VALIDITY,
    CandidateStage,
    CommunicationAdded,
    CommunicationStatus,
    DecisionStatus,
    DecisionUpdate,
    FeedbackUpdate,
    InterviewScheduled,
    InterviewStatus,
    OfferCreated,
    OfferStatus,
    OfferStatusUpdate,
    RatingUpdate,
    SkillsUpdate,
    StageUpdate,
    apply_update,
    candidate_status,
    check_rating,
    new_candidate,
    next_interview,
    parse_enum,
)

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
ACTOR = 7


@pytest.fixture
def candidate():
    record = new_candidate(11, ACTOR, NOW)
    record.id = 1
    return record


def at_stage(record, stage):
    return apply_update(record, StageUpdate(stage=stage), ACTOR, NOW)


def schedule(record, days=1, stage="screening", interviewers=(3,)):
    return apply_update(
        record,
        InterviewScheduled(
            stage=stage,
            scheduled_at=NOW + timedelta(days=days),
            interviewers=list(interviewers),
        ),
        ACTOR,
        NOW,
    )


def with_offer(record):
    record = at_stage(record, "final-interview")
    return apply_update(
        record,
        OfferCreated(salary=80000, start_date=NOW + timedelta(days=30)),
        ACTOR,
        NOW,
    )


class TestNewCandidate:
    """Test candidate creation."""

    def test_starts_in_screening(self, candidate):
        assert candidate.current_stage == CandidateStage.SCREENING
        assert candidate.career_application_id == 11
        assert candidate.decision.status == DecisionStatus.PENDING
        assert candidate.offer is None

    def test_single_timeline_entry(self, candidate):
        assert len(candidate.timeline) == 1
        entry = candidate.timeline[0]
        assert entry.action == "Candidate created from application"
        assert entry.details == "Automatically moved to interview process"
        assert entry.performed_by == ACTOR
        assert entry.date == NOW


class TestApplyUpdate:
    """Test the copy semantics shared by every update."""

    def test_input_record_untouched(self, candidate):
        updated = at_stage(candidate, "phone-interview")

        assert candidate.current_stage == CandidateStage.SCREENING
        assert len(candidate.timeline) == 1
        assert updated.current_stage == CandidateStage.PHONE_INTERVIEW

    def test_failed_update_leaves_record_untouched(self, candidate):
        with pytest.raises(ValidationError):
            apply_update(candidate, RatingUpdate(rating=9), ACTOR, NOW)
        assert candidate.overall_rating is None
        assert len(candidate.timeline) == 1

    def test_sets_updated_at(self, candidate):
        later = NOW + timedelta(hours=2)
        updated = apply_update(candidate, RatingUpdate(rating=3), ACTOR, later)
        assert updated.updated_at == later

    def test_unknown_update_type(self, candidate):
        with pytest.raises(TypeError):
            apply_update(candidate, object(), ACTOR, NOW)


class TestScheduleInterview:
    """Test interview scheduling."""

    def test_appends_interview_and_timeline_entry(self, candidate):
        updated = schedule(candidate)

        assert len(updated.interviews) == 1
        assert len(updated.timeline) == 2
        interview = updated.interviews[0]
        assert interview.status == InterviewStatus.SCHEDULED
        assert interview.duration == 60
        assert interview.location == "TBD"
        assert interview.interviewers == [3]
        assert updated.timeline[-1].action == "Interview scheduled for screening"
        assert updated.timeline[-1].details.startswith("Scheduled for ")

    def test_does_not_change_stage(self, candidate):
        updated = schedule(candidate, stage="technical-interview")
        assert updated.current_stage == CandidateStage.SCREENING

    def test_past_date_rejected(self, candidate):
        with pytest.raises(ValidationError, match="future date"):
            schedule(candidate, days=-1)

    def test_now_is_not_future(self, candidate):
        with pytest.raises(ValidationError):
            schedule(candidate, days=0)

    def test_duplicate_interviewers_collapsed(self, candidate):
        updated = schedule(candidate, interviewers=(4, 3, 4, 3))
        assert updated.interviews[0].interviewers == [4, 3]

    def test_interviewers_required(self, candidate):
        with pytest.raises(ValidationError, match="interviewers are required"):
            schedule(candidate, interviewers=())

    @pytest.mark.parametrize("stage", ["offer", "hired", "rejected", "lunch"])
    def test_non_interview_stage_rejected(self, candidate, stage):
        with pytest.raises(ValidationError, match="Invalid interview stage"):
            schedule(candidate, stage=stage)

    def test_optional_fields(self, candidate):
        updated = apply_update(
            candidate,
            InterviewScheduled(
                stage="phone-interview",
                scheduled_at=NOW + timedelta(days=2),
                interviewers=[3, 4],
                duration=30,
                location="Room 2",
                meeting_link="https://meet.example.com/abc",
            ),
            ACTOR,
            NOW,
        )
        interview = updated.interviews[0]
        assert interview.duration == 30
        assert interview.location == "Room 2"
        assert interview.meeting_link == "https://meet.example.com/abc"

    def test_naive_datetime_treated_as_utc(self, candidate):
        naive = (NOW + timedelta(days=1)).replace(tzinfo=None)
        updated = apply_update(
            candidate,
            InterviewScheduled(stage="screening", scheduled_at=naive, interviewers=[3]),
            ACTOR,
            NOW,
        )
        assert updated.interviews[0].scheduled_at == NOW + timedelta(days=1)


class TestInterviewFeedback:
    """Test interview feedback."""

    def test_marks_completed(self, candidate):
        record = schedule(candidate)
        updated = apply_update(
            record, FeedbackUpdate(interview_index=0, feedback="Good fit", rating=4), ACTOR, NOW
        )

        interview = updated.interviews[0]
        assert interview.status == InterviewStatus.COMPLETED
        assert interview.feedback == "Good fit"
        assert interview.rating == 4

    def test_no_timeline_entry(self, candidate):
        record = schedule(candidate)
        updated = apply_update(record, FeedbackUpdate(interview_index=0, rating=5), ACTOR, NOW)
        assert len(updated.timeline) == len(record.timeline)

    @pytest.mark.parametrize("index", [-1, 1, 5])
    def test_index_out_of_range(self, candidate, index):
        record = schedule(candidate)
        with pytest.raises(NotFoundError):
            apply_update(record, FeedbackUpdate(interview_index=index), ACTOR, NOW)

    def test_bad_rating(self, candidate):
        record = schedule(candidate)
        with pytest.raises(ValidationError):
            apply_update(record, FeedbackUpdate(interview_index=0, rating=0), ACTOR, NOW)

    @pytest.mark.parametrize("rating", [float("nan"), float("inf")])
    def test_non_finite_rating(self, candidate, rating):
        record = schedule(candidate)
        with pytest.raises(ValidationError):
            apply_update(record, FeedbackUpdate(interview_index=0, rating=rating), ACTOR, NOW)


class TestStageUpdate:
    """Test stage changes."""

    def test_any_stage_allowed_by_default(self, candidate):
        updated = at_stage(candidate, "hired")
        assert updated.current_stage == CandidateStage.HIRED
        assert updated.timeline[-1].action == "Stage updated to hired"

    def test_invalid_stage(self, candidate):
        with pytest.raises(ValidationError, match="Invalid stage"):
            at_stage(candidate, "interviewing")

    def test_enforced_transitions_reject_skips(self, candidate):
        with pytest.raises(ValidationError, match="Cannot move candidate"):
            apply_update(
                candidate, StageUpdate(stage="offer"), ACTOR, NOW, enforce_transitions=True
            )

    def test_enforced_transitions_allow_next_step(self, candidate):
        updated = apply_update(
            candidate,
            StageUpdate(stage="phone-interview"),
            ACTOR,
            NOW,
            enforce_transitions=True,
        )
        assert updated.current_stage == CandidateStage.PHONE_INTERVIEW

    def test_enforced_transitions_allow_same_stage(self, candidate):
        updated = apply_update(
            candidate, StageUpdate(stage="screening"), ACTOR, NOW, enforce_transitions=True
        )
        assert updated.current_stage == CandidateStage.SCREENING


class TestDecision:
    """Test decisions."""

    def test_overwrites_decision(self, candidate):
        first = apply_update(
            candidate, DecisionUpdate(decision="on-hold", notes="Wait"), ACTOR, NOW
        )
        second = apply_update(first, DecisionUpdate(decision="approved"), 8, NOW)

        assert second.decision.status == DecisionStatus.APPROVED
        assert second.decision.notes is None
        assert second.decision.made_by == 8
        assert second.decision.made_at == NOW
        assert second.timeline[-1].action == "Decision made: approved"

    def test_does_not_change_stage(self, candidate):
        updated = apply_update(candidate, DecisionUpdate(decision="rejected"), ACTOR, NOW)
        assert updated.current_stage == CandidateStage.SCREENING

    def test_invalid_decision(self, candidate):
        with pytest.raises(ValidationError):
            apply_update(candidate, DecisionUpdate(decision="maybe"), ACTOR, NOW)


class TestCommunication:
    """Test communication log."""

    def test_appends_without_timeline_entry(self, candidate):
        updated = apply_update(
            candidate,
            CommunicationAdded(type="email", subject="Hello", content="Next steps"),
            ACTOR,
            NOW,
        )

        assert len(updated.communications) == 1
        assert len(updated.timeline) == 1
        comm = updated.communications[0]
        assert comm.status == CommunicationStatus.SENT
        assert comm.initiated_by == ACTOR
        assert comm.date == NOW

    @pytest.mark.parametrize("kwargs", [
        {"type": None, "subject": "s", "content": "c"},
        {"type": "email", "subject": "", "content": "c"},
        {"type": "email", "subject": "s", "content": None},
    ])
    def test_required_fields(self, candidate, kwargs):
        with pytest.raises(ValidationError, match="Type, subject, and content are required"):
            apply_update(candidate, CommunicationAdded(**kwargs), ACTOR, NOW)

    def test_invalid_type(self, candidate):
        with pytest.raises(ValidationError):
            apply_update(
                candidate,
                CommunicationAdded(type="fax", subject="s", content="c"),
                ACTOR,
                NOW,
            )


class TestRatings:
    """Test ratings and the skills assessment."""

    @pytest.mark.parametrize("value", [1, 5, 3, 4.0])
    def test_accepted(self, value):
        assert check_rating(value) == int(value)

    @pytest.mark.parametrize("value", [
        0, 6, -1, 3.5, "4", True, None, float("nan"), float("inf"), float("-inf"),
    ])
    def test_rejected(self, value):
        with pytest.raises(ValidationError):
            check_rating(value)

    def test_overall_rating(self, candidate):
        updated = apply_update(candidate, RatingUpdate(rating=5), ACTOR, NOW)
        assert updated.overall_rating == 5
        assert updated.timeline[-1].action == "Overall rating updated to 5"

    def test_overall_rating_required(self, candidate):
        with pytest.raises(ValidationError):
            apply_update(candidate, RatingUpdate(rating=None), ACTOR, NOW)

    def test_skills_assessment_replaces(self, candidate):
        first = apply_update(
            candidate, SkillsUpdate(technical=4, communication=3), ACTOR, NOW
        )
        second = apply_update(first, SkillsUpdate(cultural_fit=5), ACTOR, NOW)

        assert second.skills_assessment.cultural_fit == 5
        assert second.skills_assessment.technical is None
        assert second.timeline[-1].action == "Skills assessment updated"

    def test_skills_out_of_range(self, candidate):
        with pytest.raises(ValidationError, match="Problem solving rating"):
            apply_update(candidate, SkillsUpdate(problem_solving=6), ACTOR, NOW)

    def test_skills_not_a_number(self, candidate):
        with pytest.raises(ValidationError, match="Technical rating"):
            apply_update(candidate, SkillsUpdate(technical=float("nan")), ACTOR, NOW)


class TestOffer:
    """Test offers."""

    def test_create_offer(self, candidate):
        updated = with_offer(candidate)

        assert updated.current_stage == CandidateStage.OFFER
        assert updated.offer.status == OfferStatus.PENDING
        assert updated.offer.currency == "USD"
        assert updated.offer.valid_until == NOW + OFFER_VALIDITY
        assert updated.timeline[-1].action == "Offer created"
        assert updated.timeline[-1].details == "Offer amount: 80000 USD"

    @pytest.mark.parametrize("stage", ["screening", "technical-interview", "offer", "hired"])
    def test_wrong_stage_fails_regardless_of_payload(self, candidate, stage):
        record = at_stage(candidate, stage)
        for update in (
            OfferCreated(salary=80000, start_date=NOW + timedelta(days=30)),
            OfferCreated(salary=-1, start_date=NOW - timedelta(days=30)),
            OfferCreated(salary=None, start_date=None),
        ):
            with pytest.raises(PreconditionFailedError):
                apply_update(record, update, ACTOR, NOW)

    def test_salary_must_be_positive(self, candidate):
        record = at_stage(candidate, "final-interview")
        with pytest.raises(ValidationError, match="greater than 0"):
            apply_update(
                record, OfferCreated(salary=0, start_date=NOW + timedelta(days=30)), ACTOR, NOW
            )

    @pytest.mark.parametrize("salary", [float("nan"), float("inf"), float("-inf")])
    def test_salary_must_be_finite(self, candidate, salary):
        record = at_stage(candidate, "final-interview")
        with pytest.raises(ValidationError):
            apply_update(
                record, OfferCreated(salary=salary, start_date=NOW + timedelta(days=30)), ACTOR, NOW
            )
        assert record.offer is None
        assert record.current_stage == CandidateStage.FINAL_INTERVIEW

    def test_start_date_must_be_future(self, candidate):
        record = at_stage(candidate, "final-interview")
        with pytest.raises(ValidationError, match="Start date"):
            apply_update(
                record, OfferCreated(salary=1000, start_date=NOW - timedelta(days=1)), ACTOR, NOW
            )

    def test_accepted_hires(self, candidate):
        record = apply_update(
            with_offer(candidate), DecisionUpdate(decision="pending", notes="Keep"), ACTOR, NOW
        )
        updated = apply_update(record, OfferStatusUpdate(status="accepted"), 9, NOW)

        assert updated.current_stage == CandidateStage.HIRED
        assert updated.decision.status == DecisionStatus.APPROVED
        assert updated.decision.made_by == 9
        assert updated.decision.notes == "Keep"
        assert updated.offer.status == OfferStatus.ACCEPTED
        assert updated.timeline[-1].action == "Offer accepted"

    def test_declined_rejects(self, candidate):
        updated = apply_update(
            with_offer(candidate), OfferStatusUpdate(status="declined"), ACTOR, NOW
        )
        assert updated.current_stage == CandidateStage.REJECTED
        assert updated.decision.status == DecisionStatus.REJECTED

    def test_expired_keeps_stage(self, candidate):
        updated = apply_update(
            with_offer(candidate), OfferStatusUpdate(status="expired"), ACTOR, NOW
        )
        assert updated.current_stage == CandidateStage.OFFER
        assert updated.offer.status == OfferStatus.EXPIRED

    def test_implied_transitions_ignore_enforcement(self, candidate):
        updated = apply_update(
            with_offer(candidate),
            OfferStatusUpdate(status="accepted"),
            ACTOR,
            NOW,
            enforce_transitions=True,
        )
        assert updated.current_stage == CandidateStage.HIRED

    def test_status_without_offer(self, candidate):
        with pytest.raises(PreconditionFailedError):
            apply_update(candidate, OfferStatusUpdate(status="accepted"), ACTOR, NOW)


class TestDerivedViews:
    """Test status summary and next interview."""

    def test_status_is_stage_by_default(self, candidate):
        assert candidate_status(candidate) == "screening"

    def test_offer_pending(self, candidate):
        assert candidate_status(with_offer(candidate)) == "offer-pending"

    def test_hired(self, candidate):
        record = apply_update(
            with_offer(candidate), OfferStatusUpdate(status="accepted"), ACTOR, NOW
        )
        assert candidate_status(record) == "hired"

    def test_rejected_decision(self, candidate):
        record = apply_update(candidate, DecisionUpdate(decision="rejected"), ACTOR, NOW)
        assert candidate_status(record) == "rejected"

    def test_next_interview_is_earliest_scheduled(self, candidate):
        record = schedule(schedule(candidate, days=5), days=2)
        assert next_interview(record, NOW).scheduled_at == NOW + timedelta(days=2)

    def test_next_interview_skips_completed(self, candidate):
        record = schedule(schedule(candidate, days=2), days=5)
        record = apply_update(record, FeedbackUpdate(interview_index=0), ACTOR, NOW)
        assert next_interview(record, NOW).scheduled_at == NOW + timedelta(days=5)

    def test_next_interview_none(self, candidate):
        record = schedule(candidate, days=1)
        assert next_interview(record, NOW + timedelta(days=2)) is None


class TestParseEnum:
    def test_lists_allowed_values(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_enum(OfferStatus, "maybe", "offer status")
        assert "Invalid offer status: maybe" in exc_info.value.message
        assert "pending, accepted, declined, expired" in exc_info.value.message
