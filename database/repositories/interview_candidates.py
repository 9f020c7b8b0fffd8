"""
Interview candidate persistence.

Rows are exchanged with the service layer as ``CandidateRecord`` objects.
Queries on scalar columns and on the decision and offer status run in SQL.
Queries that look inside the interviews list filter the loaded records in
Python.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func, select, update

from core.pipeline import (
    TERMINAL_STAGES,
    CandidateRecord,
    CandidateStage,
    DecisionStatus,
    InterviewStatus,
    OfferStatus,
)
from core.utils.datetime import days_ago, days_from_now, ensure_utc, now
from database.models.interview_candidates import InterviewCandidate
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class InterviewCandidateRepository(BaseRepository[InterviewCandidate]):
    model = InterviewCandidate

    async def get_record(self, candidate_id: int) -> Optional[CandidateRecord]:
        row = await self.get_by_id(candidate_id)
        return row.to_record() if row is not None else None

    async def find_by_career_application(
        self, career_application_id: int
    ) -> Optional[CandidateRecord]:
        row = await self.find_one(career_application_id=career_application_id)
        return row.to_record() if row is not None else None

    async def insert(self, record: CandidateRecord) -> CandidateRecord:
        row = InterviewCandidate()
        row.apply_record(record)
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        return row.to_record()

    async def save(self, record: CandidateRecord) -> CandidateRecord:
        """
        Replace the stored row with ``record`` in a single UPDATE.

        No version check is made: a concurrent writer's changes are
        overwritten.
        """
        data = record.model_dump(mode="json")
        await self.session.execute(
            update(InterviewCandidate)
            .where(InterviewCandidate.id == record.id)
            .values(
                career_application_id=record.career_application_id,
                current_stage=record.current_stage,
                overall_rating=record.overall_rating,
                interviews=data["interviews"],
                skills_assessment=data["skills_assessment"],
                decision=data["decision"],
                offer=data["offer"],
                communications=data["communications"],
                timeline=data["timeline"],
                notes=record.notes,
                updated_at=record.updated_at or now(),
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()

        # Drop any cached instance so the next read sees the new row
        row = await self.get_by_id(record.id)
        if row is not None:
            await self.session.refresh(row)
            return row.to_record()
        return record

    async def _records(self, *conditions: Any, order_by: Any = None) -> list[CandidateRecord]:
        rows = await self.list(*conditions, order_by=order_by)
        return [row.to_record() for row in rows]

    async def list_records(
        self,
        stage: Optional[CandidateStage] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> tuple[list[CandidateRecord], int]:
        conditions = []
        if stage is not None:
            conditions.append(InterviewCandidate.current_stage == stage)
        rows = await self.list(*conditions, limit=limit, offset=offset)
        total = await self.count(*conditions)
        return [row.to_record() for row in rows], total

    async def find_by_stage(self, stage: CandidateStage) -> list[CandidateRecord]:
        return await self._records(InterviewCandidate.current_stage == stage)

    async def find_needing_follow_up(self, days: int = 3) -> list[CandidateRecord]:
        """Non-terminal candidates untouched for at least ``days`` days."""
        return await self._records(
            InterviewCandidate.updated_at <= days_ago(days),
            InterviewCandidate.current_stage.not_in(list(TERMINAL_STAGES)),
            order_by=InterviewCandidate.updated_at.asc(),
        )

    async def find_with_upcoming_interviews(
        self, days: int = 7, reference: Optional[datetime] = None
    ) -> list[CandidateRecord]:
        """Candidates with a ``scheduled`` interview in the next ``days`` days."""
        start = reference or now()
        end = days_from_now(days, start)

        def upcoming(record: CandidateRecord) -> bool:
            return any(
                interview.status == InterviewStatus.SCHEDULED
                and start <= ensure_utc(interview.scheduled_at) <= end
                for interview in record.interviews
            )

        # TODO: push this into a JSONB query once SQLite support is dropped
        return [record for record in await self._records() if upcoming(record)]

    async def find_by_interviewer(self, interviewer_id: int) -> list[CandidateRecord]:
        return [
            record
            for record in await self._records()
            if any(interviewer_id in i.interviewers for i in record.interviews)
        ]

    async def find_by_decision_status(self, status: DecisionStatus) -> list[CandidateRecord]:
        return await self._records(
            InterviewCandidate.decision["status"].as_string() == status.value
        )

    async def find_by_offer_status(self, status: OfferStatus) -> list[CandidateRecord]:
        return await self._records(
            InterviewCandidate.offer["status"].as_string() == status.value
        )

    async def find_by_rating_range(
        self, min_rating: int, max_rating: int
    ) -> list[CandidateRecord]:
        return await self._records(
            InterviewCandidate.overall_rating >= min_rating,
            InterviewCandidate.overall_rating <= max_rating,
            order_by=InterviewCandidate.overall_rating.desc(),
        )

    async def get_statistics(self) -> dict[str, Any]:
        by_stage = await self.group_count(InterviewCandidate.current_stage)

        by_decision = await self.group_count(
            InterviewCandidate.decision["status"].as_string()
        )
        by_offer = await self.group_count(
            InterviewCandidate.offer["status"].as_string()
        )

        result = await self.session.execute(
            select(
                func.avg(InterviewCandidate.overall_rating),
                func.min(InterviewCandidate.overall_rating),
                func.max(InterviewCandidate.overall_rating),
            )
        )
        avg_rating, min_rating, max_rating = result.one()

        return {
            "total": sum(by_stage.values()),
            "by_stage": {stage.value: count for stage, count in by_stage.items()},
            "by_decision": {k: v for k, v in by_decision.items() if k is not None},
            "by_offer": {k: v for k, v in by_offer.items() if k is not None},
            "rating_stats": {
                "average": round(float(avg_rating), 2) if avg_rating is not None else None,
                "min": min_rating,
                "max": max_rating,
            },
        }
