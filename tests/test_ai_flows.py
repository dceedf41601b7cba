"""AI flows: reply parsing, schema validation, Gemini client, /ai endpoints."""

from __future__ import annotations

import json

import httpx
import pytest

from optitalent.ai import flows
from optitalent.ai.client import ChatTurn, GeminiClient, MediaPart
from optitalent.ai.flow import parse_json_reply
from optitalent.ai.flows.chatbot import ChatbotInput
from optitalent.ai.flows.people import BurnoutInput
from optitalent.common.constants import UserRole
from optitalent.common.exceptions import AIServiceError


def gemini_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


# ═════════════════════════════════════════════════════════════════════
# Reply parsing
# ═════════════════════════════════════════════════════════════════════


class TestParsing:
    def test_fenced_json_accepted(self):
        assert parse_json_reply('```json\n{"a": 1}\n```') == {"a": 1}
        assert parse_json_reply('  {"a": 2} ') == {"a": 2}

    def test_invalid_json_is_ai_error(self):
        with pytest.raises(AIServiceError) as exc:
            flows.predict_burnout.parse("not json at all")
        assert exc.value.status_code == 502
        assert exc.value.detail == "The AI service failed to produce a valid response."

    def test_schema_mismatch_is_ai_error(self):
        reply = json.dumps(
            {"burnout_risk_level": "Extreme", "risk_factors": [], "recommendations": []},
        )
        with pytest.raises(AIServiceError):
            flows.predict_burnout.parse(reply)

    def test_valid_reply_parsed(self):
        reply = json.dumps(
            {"burnout_risk_level": "High", "risk_factors": ["overtime"], "recommendations": ["rest"]},
        )
        result = flows.predict_burnout.parse(reply)
        assert result.burnout_risk_level == "High"
        assert result.risk_factors == ["overtime"]

    def test_registry_names_every_flow(self):
        assert set(flows.FLOWS) >= {
            "suggest_role", "welcome_email", "performance_review", "predict_burnout",
            "predict_career_path", "score_resume", "interview_questions",
            "categorize_ticket", "detect_payroll_errors", "verify_face", "hr_chatbot",
        }


# ═════════════════════════════════════════════════════════════════════
# GeminiClient
# ═════════════════════════════════════════════════════════════════════


class TestGeminiClient:
    async def test_missing_key_fails_without_network(self):
        client = GeminiClient(api_key="")
        with pytest.raises(AIServiceError) as exc:
            await client.generate("hi", flow="probe")
        assert exc.value.flow == "probe"

    async def test_payload_and_text_extraction(self):
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=gemini_reply('{"ok": true}'))

        client = GeminiClient(
            api_key="k", model="gemini-test", transport=httpx.MockTransport(handler),
        )
        text = await client.generate(
            "prompt",
            system_instruction="sys",
            history=[ChatTurn(role="user", text="earlier")],
            media=[MediaPart(mime_type="image/png", data="aGk=")],
        )
        assert text == '{"ok": true}'
        assert "models/gemini-test:generateContent" in seen["url"]
        body = seen["body"]
        assert body["systemInstruction"]["parts"][0]["text"] == "sys"
        assert body["contents"][0] == {"role": "user", "parts": [{"text": "earlier"}]}
        assert body["contents"][1]["parts"][1]["inlineData"]["mimeType"] == "image/png"
        assert body["generationConfig"]["responseMimeType"] == "application/json"

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(500, json={"error": "boom"}),
            httpx.Response(200, json={"candidates": []}),
            httpx.Response(200, json=gemini_reply("   ")),
            httpx.Response(200, content=b"<html>"),
            httpx.Response(200, json=[{"candidates": []}]),
            httpx.Response(200, json={"candidates": ["text"]}),
            httpx.Response(200, json={"candidates": [{"content": {"parts": "oops"}}]}),
        ],
    )
    async def test_bad_responses_raise(self, response):
        client = GeminiClient(
            api_key="k", transport=httpx.MockTransport(lambda request: response),
        )
        with pytest.raises(AIServiceError):
            await client.generate("prompt")

    def test_data_uri_parsing(self):
        part = MediaPart.from_data_uri("data:image/jpeg;base64,aGVsbG8=")
        assert part.mime_type == "image/jpeg"
        with pytest.raises(ValueError):
            MediaPart.from_data_uri("https://example.com/photo.jpg")


# ═════════════════════════════════════════════════════════════════════
# Flow.run with an injected client
# ═════════════════════════════════════════════════════════════════════


class TestFlowRun:
    async def test_run_appends_schema_hint(self):
        prompts: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            prompts.append(json.loads(request.content)["contents"][-1]["parts"][0]["text"])
            return httpx.Response(200, json=gemini_reply(json.dumps({
                "burnout_risk_level": "Low", "risk_factors": [], "recommendations": [],
            })))

        client = GeminiClient(api_key="k", transport=httpx.MockTransport(handler))
        result = await flows.predict_burnout.run(
            BurnoutInput(
                employee_feedback="fine", workload="normal",
                work_environment="calm", attendance_records="perfect",
            ),
            client=client,
        )
        assert result.burnout_risk_level == "Low"
        assert "JSON Schema" in prompts[0]

    async def test_chatbot_is_free_text(self):
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            assert "responseMimeType" not in body["generationConfig"]
            return httpx.Response(200, json=gemini_reply("  You have 12 days left.  "))

        client = GeminiClient(api_key="k", transport=httpx.MockTransport(handler))
        result = await flows.hr_chatbot.run(
            ChatbotInput(query="How much leave do I have?"), client=client,
        )
        assert result.response == "You have 12 days left."


# ═════════════════════════════════════════════════════════════════════
# /ai endpoints
# ═════════════════════════════════════════════════════════════════════


class TestAIEndpoints:
    async def test_chatbot_any_user(self, client, make_actor, mock_ai):
        actor = await make_actor(UserRole.employee)
        with mock_ai("Please contact HR.") as generate:
            resp = await client.post(
                "/api/v1/ai/chatbot",
                json={
                    "query": "Can I carry over leave?",
                    "history": [{"role": "user", "content": "hi"}, {"role": "model", "content": "hello"}],
                },
                headers=actor.headers,
            )
        assert resp.status_code == 200
        assert resp.json() == {"data": {"response": "Please contact HR."}}
        history = generate.call_args.kwargs["history"]
        assert [turn.role for turn in history] == ["user", "model"]

    async def test_invalid_reply_returns_502(self, client, make_actor, mock_ai):
        actor = await make_actor(UserRole.manager)
        with mock_ai("{broken"):
            resp = await client.post(
                "/api/v1/ai/burnout",
                json={
                    "employee_feedback": "tired",
                    "workload": "heavy",
                    "work_environment": "noisy",
                    "attendance_records": "late often",
                },
                headers=actor.headers,
            )
        assert resp.status_code == 502
        body = resp.json()
        assert body["detail"] == "The AI service failed to produce a valid response."
        assert "broken" not in json.dumps(body)

    async def test_burnout_forbidden_for_employee(self, client, make_actor):
        actor = await make_actor(UserRole.employee)
        resp = await client.post(
            "/api/v1/ai/burnout",
            json={
                "employee_feedback": "x", "workload": "x",
                "work_environment": "x", "attendance_records": "x",
            },
            headers=actor.headers,
        )
        assert resp.status_code == 403

    async def test_welcome_email_defaults_company_to_tenant(self, client, make_actor, mock_ai):
        hr = await make_actor(UserRole.hr)
        with mock_ai({"subject": "Welcome!", "body": "Glad you're here."}) as generate:
            resp = await client.post(
                "/api/v1/ai/welcome-email",
                json={
                    "first_name": "Nia",
                    "last_name": "Patel",
                    "job_title": "Trainer",
                    "department": "Learning",
                    "start_date": "2025-01-06",
                },
                headers=hr.headers,
            )
        assert resp.status_code == 200
        assert resp.json()["data"]["subject"] == "Welcome!"
        assert "Company Name: Acme Corp" in generate.call_args.args[0]

    async def test_career_path(self, client, make_actor, mock_ai):
        actor = await make_actor(UserRole.employee)
        reply = {"path": [{
            "timespan": "1-2 years", "role": "Team Leader",
            "rationale": "strong metrics", "skills_to_develop": ["coaching"],
        }]}
        with mock_ai(reply):
            resp = await client.post(
                "/api/v1/ai/career-path",
                json={
                    "current_role": "Associate",
                    "skills": ["Excel", "Communication"],
                    "performance_summary": "Top decile",
                },
                headers=actor.headers,
            )
        assert resp.status_code == 200
        assert resp.json()["data"]["path"][0]["role"] == "Team Leader"

    async def test_unconfigured_key_is_502(self, client, make_actor, monkeypatch):
        from optitalent.config import settings

        monkeypatch.setattr(settings, "GEMINI_API_KEY", "")
        actor = await make_actor(UserRole.team_leader)
        resp = await client.post(
            "/api/v1/ai/performance-review",
            json={
                "employee_name": "Ravi",
                "job_title": "Associate",
                "goals": "AHT under 5m",
                "achievements": "hit target",
                "areas_for_improvement": "documentation",
            },
            headers=actor.headers,
        )
        assert resp.status_code == 502
