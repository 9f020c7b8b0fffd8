"""
End-to-end hiring flow over HTTP.

Application submitted on the public form → candidate created automatically
→ interview scheduled and reviewed → offer made and accepted.
"""

from datetime import timedelta

import pytest

from core.utils.datetime import now
from tests.factories import application_payload, auth_headers

API = "/api/v1"


class TestHiringFlow:
    """Walk one applicant through the whole pipeline."""

    async def test_application_to_hire(self, client, publisher, manager_user):
        headers = auth_headers(manager_user)

        # 1. Public submission
        response = await client.post(f"{API}/applications", json=application_payload())
        assert response.status_code == 201
        body = response.json()
        application_id = body["id"]
        assert body["message"] == "Application submitted successfully"
        assert body["application"]["status"] == "pending"
        assert body["application"]["full_name"] == "Ada Lovelace"
        publisher.publish.assert_called_once()

        # 2. Candidate was created automatically; creating again is idempotent
        response = await client.post(
            f"{API}/interview-candidates",
            json={"career_application_id": application_id},
            headers=headers,
        )
        assert response.status_code == 201
        candidate = response.json()
        candidate_id = candidate["id"]
        assert candidate["current_stage"] == "screening"
        assert candidate["status"] == "screening"
        assert len(candidate["timeline"]) == 1

        response = await client.get(f"{API}/interview-candidates", headers=headers)
        assert response.json()["total"] == 1

        # 3. Schedule a screening interview
        tomorrow = (now() + timedelta(days=1)).isoformat()
        response = await client.post(
            f"{API}/interview-candidates/{candidate_id}/schedule-interview",
            json={"stage": "screening", "scheduled_at": tomorrow, "interviewers": [manager_user.id]},
            headers=headers,
        )
        assert response.status_code == 200
        candidate = response.json()
        assert len(candidate["interviews"]) == 1
        assert len(candidate["timeline"]) == 2
        assert candidate["next_interview"]["stage"] == "screening"

        # 4. Feedback completes the interview
        response = await client.patch(
            f"{API}/interview-candidates/{candidate_id}/interviews/0/feedback",
            json={"feedback": "Good fit", "rating": 4},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["interviews"][0]["status"] == "completed"
        assert response.json()["next_interview"] is None

        # 5. Move to the final interview
        response = await client.patch(
            f"{API}/interview-candidates/{candidate_id}/stage",
            json={"stage": "final-interview"},
            headers=headers,
        )
        assert response.json()["current_stage"] == "final-interview"

        # 6. Offer
        next_month = (now() + timedelta(days=30)).isoformat()
        response = await client.post(
            f"{API}/interview-candidates/{candidate_id}/offer",
            json={"salary": 80000, "start_date": next_month},
            headers=headers,
        )
        assert response.status_code == 200
        candidate = response.json()
        assert candidate["current_stage"] == "offer"
        assert candidate["status"] == "offer-pending"
        assert candidate["offer"]["status"] == "pending"

        # 7. Accepted
        response = await client.patch(
            f"{API}/interview-candidates/{candidate_id}/offer-status",
            json={"status": "accepted"},
            headers=headers,
        )
        candidate = response.json()
        assert candidate["current_stage"] == "hired"
        assert candidate["decision"]["status"] == "approved"
        assert candidate["status"] == "hired"

        response = await client.get(
            f"{API}/interview-candidates/statistics", headers=headers
        )
        assert response.json()["by_stage"] == {"hired": 1}

    async def test_notification_failure_still_accepts_application(self, client, publisher):
        publisher.publish.side_effect = RuntimeError("broker down")

        response = await client.post(f"{API}/applications", json=application_payload())

        assert response.status_code == 201


class TestCandidateErrors:
    """Domain errors come back in the error envelope."""

    async def _candidate_id(self, client, headers):
        response = await client.post(f"{API}/applications", json=application_payload())
        response = await client.post(
            f"{API}/interview-candidates",
            json={"career_application_id": response.json()["id"]},
            headers=headers,
        )
        return response.json()["id"]

    async def test_offer_in_wrong_stage(self, client, staff_user):
        headers = auth_headers(staff_user)
        candidate_id = await self._candidate_id(client, headers)

        response = await client.post(
            f"{API}/interview-candidates/{candidate_id}/offer",
            json={"salary": 80000, "start_date": (now() + timedelta(days=30)).isoformat()},
            headers=headers,
        )

        assert response.status_code == 412
        error = response.json()["error"]
        assert error["code"] == "PRECONDITION_FAILED"
        assert error["path"] == f"{API}/interview-candidates/{candidate_id}/offer"
        assert error["method"] == "POST"

    async def test_interview_in_past(self, client, staff_user):
        headers = auth_headers(staff_user)
        candidate_id = await self._candidate_id(client, headers)

        response = await client.post(
            f"{API}/interview-candidates/{candidate_id}/schedule-interview",
            json={
                "stage": "screening",
                "scheduled_at": (now() - timedelta(days=1)).isoformat(),
                "interviewers": [staff_user.id],
            },
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_rating_out_of_range(self, client, staff_user):
        headers = auth_headers(staff_user)
        candidate_id = await self._candidate_id(client, headers)

        response = await client.patch(
            f"{API}/interview-candidates/{candidate_id}/rating",
            json={"rating": 6},
            headers=headers,
        )
        assert response.status_code == 400

    @pytest.mark.parametrize("literal", ["NaN", "Infinity"])
    async def test_non_finite_rating(self, client, staff_user, literal):
        headers = {**auth_headers(staff_user), "content-type": "application/json"}
        candidate_id = await self._candidate_id(client, headers)

        response = await client.patch(
            f"{API}/interview-candidates/{candidate_id}/rating",
            content=f'{{"rating": {literal}}}',
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.parametrize("literal", ["NaN", "Infinity"])
    async def test_non_finite_offer_salary(self, client, staff_user, literal):
        headers = {**auth_headers(staff_user), "content-type": "application/json"}
        candidate_id = await self._candidate_id(client, headers)
        await client.patch(
            f"{API}/interview-candidates/{candidate_id}/stage",
            json={"stage": "final-interview"},
            headers=headers,
        )
        start_date = (now() + timedelta(days=30)).isoformat()

        response = await client.post(
            f"{API}/interview-candidates/{candidate_id}/offer",
            content=f'{{"salary": {literal}, "start_date": "{start_date}"}}',
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

        response = await client.get(
            f"{API}/interview-candidates/{candidate_id}", headers=headers
        )
        assert response.json()["current_stage"] == "final-interview"
        assert response.json()["offer"] is None

    async def test_unknown_candidate(self, client, staff_user):
        response = await client.get(
            f"{API}/interview-candidates/999", headers=auth_headers(staff_user)
        )
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    async def test_communication(self, client, staff_user):
        headers = auth_headers(staff_user)
        candidate_id = await self._candidate_id(client, headers)

        response = await client.post(
            f"{API}/interview-candidates/{candidate_id}/communication",
            json={"type": "phone", "subject": "Intro call", "content": "Went well"},
            headers=headers,
        )

        body = response.json()
        assert response.status_code == 200
        assert body["communications"][0]["status"] == "sent"
        assert body["communications"][0]["initiated_by"] == staff_user.id
        assert len(body["timeline"]) == 1
