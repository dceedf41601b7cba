"""Recruitment: job openings, applicants, AI scoring and parsing."""

from __future__ import annotations

import base64

import pytest

from optitalent.common.constants import UserRole

BASE = "/api/v1/recruitment"
RESUME_URI = "data:application/pdf;base64," + base64.b64encode(b"%PDF-1.4 resume").decode()

PARSED = {
    "name": "Dana Lee",
    "email": "dana@example.com",
    "skills": ["Python", "SQL"],
    "work_experience": [{"company": "Initech", "title": "Analyst", "dates": "2020-2024"}],
}


@pytest.fixture
async def recruiter(make_actor):
    return await make_actor(UserRole.recruiter, with_employee=False)


async def create_job(client, actor, **extra) -> dict:
    payload = {"title": "Data Analyst", "description": "SQL, dashboards, stakeholder comms", **extra}
    resp = await client.post(f"{BASE}/jobs", json=payload, headers=actor.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def create_applicant(client, actor, **extra) -> dict:
    payload = {"full_name": "Dana Lee", "email": "Dana@Example.com", **extra}
    resp = await client.post(f"{BASE}/applicants", json=payload, headers=actor.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


class TestJobs:
    async def test_create_and_close(self, client, recruiter):
        job = await create_job(client, recruiter)
        assert job["status"] == "open"

        resp = await client.patch(
            f"{BASE}/jobs/{job['id']}", json={"status": "closed"}, headers=recruiter.headers,
        )
        assert resp.json()["data"]["status"] == "closed"

        open_jobs = (await client.get(f"{BASE}/jobs", params={"status": "open"}, headers=recruiter.headers)).json()
        assert open_jobs["data"] == []

    async def test_foreign_department_rejected(self, client, recruiter):
        resp = await client.post(
            f"{BASE}/jobs",
            json={
                "title": "Agent",
                "description": "Voice process",
                "department_id": "00000000-0000-0000-0000-000000000001",
            },
            headers=recruiter.headers,
        )
        assert resp.status_code == 422

    async def test_employee_cannot_post_jobs(self, client, make_actor):
        actor = await make_actor(UserRole.employee)
        resp = await client.post(
            f"{BASE}/jobs", json={"title": "X", "description": "Y"}, headers=actor.headers,
        )
        assert resp.status_code == 403


class TestApplicants:
    async def test_create_normalises_email(self, client, recruiter):
        job = await create_job(client, recruiter)
        applicant = await create_applicant(client, recruiter, job_id=job["id"])
        assert applicant["email"] == "dana@example.com"
        assert applicant["status"] == "applied"
        assert applicant["ai_score"] is None

    async def test_status_pipeline_filter(self, client, recruiter):
        first = await create_applicant(client, recruiter)
        await create_applicant(client, recruiter, email="other@example.com")
        await client.patch(
            f"{BASE}/applicants/{first['id']}/status", json={"status": "interview"}, headers=recruiter.headers,
        )
        listing = (
            await client.get(f"{BASE}/applicants", params={"status": "interview"}, headers=recruiter.headers)
        ).json()
        assert [a["id"] for a in listing["data"]] == [first["id"]]


class TestScoring:
    async def test_score_persisted(self, client, recruiter, mock_ai):
        job = await create_job(client, recruiter)
        applicant = await create_applicant(
            client, recruiter, job_id=job["id"], resume_text="5 years of SQL and Tableau",
        )
        with mock_ai({"score": 82, "justification": "Strong SQL background"}) as generate:
            resp = await client.post(
                f"{BASE}/applicants/{applicant['id']}/score", headers=recruiter.headers,
            )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["ai_score"] == 82
        assert data["ai_justification"] == "Strong SQL background"
        assert "5 years of SQL" in generate.call_args.args[0]

        stored = (await client.get(f"{BASE}/applicants/{applicant['id']}", headers=recruiter.headers)).json()
        assert stored["data"]["ai_score"] == 82

    async def test_missing_resume_is_422(self, client, recruiter):
        job = await create_job(client, recruiter)
        applicant = await create_applicant(client, recruiter, job_id=job["id"])
        resp = await client.post(f"{BASE}/applicants/{applicant['id']}/score", headers=recruiter.headers)
        assert resp.status_code == 422
        assert "resume_text" in resp.json()["errors"]

    async def test_missing_job_is_422(self, client, recruiter):
        applicant = await create_applicant(client, recruiter, resume_text="anything")
        resp = await client.post(f"{BASE}/applicants/{applicant['id']}/score", headers=recruiter.headers)
        assert resp.status_code == 422

    async def test_out_of_range_score_is_502_and_not_stored(self, client, recruiter, mock_ai):
        job = await create_job(client, recruiter)
        applicant = await create_applicant(client, recruiter, job_id=job["id"], resume_text="text")
        with mock_ai({"score": 140, "justification": "wow"}):
            resp = await client.post(
                f"{BASE}/applicants/{applicant['id']}/score", headers=recruiter.headers,
            )
        assert resp.status_code == 502
        stored = (await client.get(f"{BASE}/applicants/{applicant['id']}", headers=recruiter.headers)).json()
        assert stored["data"]["ai_score"] is None

    async def test_score_and_parse_stores_on_applicant(self, client, recruiter, mock_ai):
        applicant = await create_applicant(client, recruiter)
        reply = {"score": 74.5, "justification": "Relevant analytics work", "parsed_data": PARSED}
        with mock_ai(reply) as generate:
            resp = await client.post(
                f"{BASE}/score-and-parse",
                json={
                    "job_description": "Data Analyst",
                    "resume_data_uri": RESUME_URI,
                    "applicant_id": applicant["id"],
                },
                headers=recruiter.headers,
            )
        assert resp.status_code == 200
        assert resp.json()["data"]["parsed_data"]["skills"] == ["Python", "SQL"]
        assert generate.call_args.kwargs["media"][0].mime_type == "application/pdf"

        stored = (await client.get(f"{BASE}/applicants/{applicant['id']}", headers=recruiter.headers)).json()["data"]
        assert stored["ai_score"] == 74.5
        assert stored["parsed_resume"]["name"] == "Dana Lee"

    async def test_score_and_parse_rejects_plain_url(self, client, recruiter):
        resp = await client.post(
            f"{BASE}/score-and-parse",
            json={"job_description": "Analyst", "resume_data_uri": "https://example.com/cv.pdf"},
            headers=recruiter.headers,
        )
        assert resp.status_code == 422

    async def test_interview_questions(self, client, recruiter, mock_ai):
        with mock_ai({"questions": ["Walk me through a dashboard you built."]}):
            resp = await client.post(
                f"{BASE}/interview-questions", json={"role": "Data Analyst"}, headers=recruiter.headers,
            )
        assert resp.json()["data"]["questions"] == ["Walk me through a dashboard you built."]
