"""Assessments: MCQ scoring, typing tests, attempt limits, answer-key visibility."""

from __future__ import annotations

import pytest

from optitalent.assessments.service import mcq_score, typing_task
from optitalent.common.constants import UserRole

BASE = "/api/v1/assessments"
PROMPT = "The quick brown fox jumps over the lazy dog"

MCQ_SECTION = {
    "id": "s1",
    "section_type": "mcq",
    "title": "Product knowledge",
    "time_limit": 10,
    "questions": [
        {"id": "q1", "type": "mcq", "question_text": "2 + 2?", "options": ["3", "4"], "correct_answer": "4"},
        {"id": "q2", "type": "mcq", "question_text": "Capital of France?", "options": ["Paris", "Rome"], "correct_answer": "Paris"},
        {"id": "q3", "type": "mcq", "question_text": "Blue + yellow?", "options": ["green", "red"], "correct_answer": "green"},
    ],
}
TYPING_SECTION = {
    "id": "s2",
    "section_type": "typing",
    "title": "Typing",
    "time_limit": 1,
    "questions": [{"id": "t1", "type": "typing", "typing_prompt": PROMPT}],
}


def assessment_payload(**overrides) -> dict:
    payload = {
        "title": "Voice Process Screening",
        "process_type": "voice",
        "role": "Associate",
        "passing_score": 60,
        "passing_score_type": "percent",
        "max_attempts": 2,
        "sections": [MCQ_SECTION],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
async def author(make_actor):
    return await make_actor(UserRole.qa_analyst, first_name="Quinn")


async def create(client, actor, **overrides) -> dict:
    resp = await client.post(BASE, json=assessment_payload(**overrides), headers=actor.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


# ── Pure helpers ────────────────────────────────────────────────────

class TestScoringHelpers:
    @pytest.mark.parametrize(
        "answers,expected",
        [
            ({"q1": "4", "q2": "Paris", "q3": "green"}, 100),
            ({"q1": "4", "q2": "Paris"}, 67),
            ({"q1": "4"}, 33),
            ({}, 0),
            ({"q1": "3", "q2": "Rome", "q3": "red"}, 0),
        ],
    )
    def test_mcq_score(self, answers, expected):
        assert mcq_score([MCQ_SECTION], answers) == expected

    def test_mcq_score_without_questions(self):
        assert mcq_score([TYPING_SECTION], {"t1": "x"}) == 0

    def test_typing_task_limit_in_seconds(self):
        assert typing_task([MCQ_SECTION, TYPING_SECTION]) == (PROMPT, 60)
        assert typing_task([MCQ_SECTION]) is None


# ── Definitions ─────────────────────────────────────────────────────

class TestDefinitions:
    async def test_mcq_requires_answer_key(self, client, author):
        bad = {**MCQ_SECTION, "questions": [{"id": "q1", "type": "mcq", "options": ["a"]}]}
        resp = await client.post(BASE, json=assessment_payload(sections=[bad]), headers=author.headers)
        assert resp.status_code == 422

    async def test_at_least_one_section(self, client, author):
        resp = await client.post(BASE, json=assessment_payload(sections=[]), headers=author.headers)
        assert resp.status_code == 422

    async def test_employee_cannot_author(self, client, make_actor):
        employee = await make_actor()
        resp = await client.post(BASE, json=assessment_payload(), headers=employee.headers)
        assert resp.status_code == 403

    async def test_answer_key_hidden_from_candidates(self, client, author, make_actor):
        assessment = await create(client, author)
        candidate = await make_actor()

        as_candidate = (await client.get(f"{BASE}/{assessment['id']}", headers=candidate.headers)).json()["data"]
        assert {q["correct_answer"] for q in as_candidate["sections"][0]["questions"]} == {None}

        as_author = (await client.get(f"{BASE}/{assessment['id']}", headers=author.headers)).json()["data"]
        assert as_author["sections"][0]["questions"][0]["correct_answer"] == "4"

    async def test_list_filtered_by_process(self, client, author):
        await create(client, author)
        await create(client, author, title="Chat Screening", process_type="chat")
        listing = (await client.get(BASE, params={"process_type": "chat"}, headers=author.headers)).json()
        assert [a["title"] for a in listing["data"]] == ["Chat Screening"]


# ── MCQ submissions ─────────────────────────────────────────────────

class TestMcqSubmission:
    async def test_pass_and_fail(self, client, author, make_actor):
        assessment = await create(client, author)
        candidate = await make_actor()

        first = await client.post(
            f"{BASE}/{assessment['id']}/mcq",
            json={"answers": {"q1": "4"}},
            headers=candidate.headers,
        )
        assert first.status_code == 201
        assert first.json()["data"]["score"] == 33
        assert first.json()["data"]["passed"] is False
        assert first.json()["data"]["attempt_number"] == 1

        second = await client.post(
            f"{BASE}/{assessment['id']}/mcq",
            json={"answers": {"q1": "4", "q2": "Paris"}},
            headers=candidate.headers,
        )
        assert second.json()["data"]["score"] == 67
        assert second.json()["data"]["passed"] is True
        assert second.json()["data"]["attempt_number"] == 2

    async def test_max_attempts_enforced(self, client, author, make_actor):
        assessment = await create(client, author, max_attempts=1)
        candidate = await make_actor()
        url = f"{BASE}/{assessment['id']}/mcq"
        await client.post(url, json={"answers": {}}, headers=candidate.headers)

        resp = await client.post(url, json={"answers": {}}, headers=candidate.headers)
        assert resp.status_code == 422
        assert resp.json()["errors"]["attempts"] == ["Maximum of 1 attempt(s) reached."]

    async def test_wpm_assessment_rejects_mcq(self, client, author, make_actor):
        assessment = await create(
            client, author, passing_score=30, passing_score_type="wpm", sections=[TYPING_SECTION],
        )
        candidate = await make_actor()
        resp = await client.post(
            f"{BASE}/{assessment['id']}/mcq", json={"answers": {}}, headers=candidate.headers,
        )
        assert resp.status_code == 422

    async def test_attempt_visibility(self, client, author, make_actor):
        assessment = await create(client, author)
        alice = await make_actor(first_name="Alice")
        bob = await make_actor(first_name="Bob")
        for actor in (alice, bob):
            await client.post(
                f"{BASE}/{assessment['id']}/mcq", json={"answers": {"q1": "4"}}, headers=actor.headers,
            )

        own = (await client.get(f"{BASE}/{assessment['id']}/attempts", headers=alice.headers)).json()["data"]
        assert [a["employee_id"] for a in own] == [str(alice.employee.id)]

        everyone = (await client.get(f"{BASE}/{assessment['id']}/attempts", headers=author.headers)).json()["data"]
        assert len(everyone) == 2


# ── Typing submissions ──────────────────────────────────────────────

class TestTypingSubmission:
    async def test_accuracy_based_pass(self, client, author, make_actor):
        assessment = await create(
            client, author, passing_score=90, sections=[MCQ_SECTION, TYPING_SECTION],
        )
        candidate = await make_actor()
        resp = await client.post(
            f"{BASE}/{assessment['id']}/typing",
            json={"typed_text": PROMPT, "elapsed_seconds": 60},
            headers=candidate.headers,
        )
        assert resp.status_code == 201
        assert resp.json()["data"] == {"wpm": 9, "accuracy": 100, "passed": True}

    async def test_wpm_based_fail_and_samples_stored(self, client, author, make_actor):
        assessment = await create(
            client, author, passing_score=30, passing_score_type="wpm", sections=[TYPING_SECTION],
        )
        candidate = await make_actor()
        samples = [{"label": "2s", "wpm": 60}, {"label": "4s", "wpm": 45}]
        resp = await client.post(
            f"{BASE}/{assessment['id']}/typing",
            json={"typed_text": PROMPT, "elapsed_seconds": 300, "wpm_samples": samples},
            headers=candidate.headers,
        )
        assert resp.json()["data"] == {"wpm": 9, "accuracy": 100, "passed": False}

        attempts = (await client.get(f"{BASE}/{assessment['id']}/attempts", headers=candidate.headers)).json()["data"]
        assert attempts[0]["score"] == 9
        assert attempts[0]["wpm_samples"] == samples

    async def test_no_typing_task_is_422(self, client, author, make_actor):
        assessment = await create(client, author)
        candidate = await make_actor()
        resp = await client.post(
            f"{BASE}/{assessment['id']}/typing",
            json={"typed_text": "hello", "elapsed_seconds": 5},
            headers=candidate.headers,
        )
        assert resp.status_code == 422

    async def test_negative_elapsed_rejected(self, client, author, make_actor):
        assessment = await create(client, author, sections=[TYPING_SECTION])
        candidate = await make_actor()
        resp = await client.post(
            f"{BASE}/{assessment['id']}/typing",
            json={"typed_text": "The", "elapsed_seconds": -1},
            headers=candidate.headers,
        )
        assert resp.status_code == 422
