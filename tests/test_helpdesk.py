"""Helpdesk: ticket numbering, AI categorisation with fallback, access, summary."""

from __future__ import annotations

import pytest

from optitalent.common.constants import UserRole
from optitalent.config import settings

BASE = "/api/v1/helpdesk"


def ticket_payload(**extra) -> dict:
    return {"subject": "Laptop will not boot", "description": "Black screen since this morning.", **extra}


@pytest.fixture
def no_ai_key(monkeypatch):
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "")


class TestCreateTicket:
    async def test_ai_failure_falls_back_to_defaults(self, client, make_actor, no_ai_key):
        actor = await make_actor()
        resp = await client.post(f"{BASE}/tickets", json=ticket_payload(), headers=actor.headers)
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["category"] == "General Inquiry"
        assert data["priority"] == "Medium"
        assert data["status"] == "open"
        assert data["ticket_number"] == "HD-00001"

    async def test_ai_categorisation_applied(self, client, make_actor, mock_ai):
        actor = await make_actor()
        with mock_ai({"category": "IT Support", "priority": "High"}):
            resp = await client.post(f"{BASE}/tickets", json=ticket_payload(), headers=actor.headers)
        data = resp.json()["data"]
        assert (data["category"], data["priority"]) == ("IT Support", "High")

    async def test_explicit_values_skip_ai(self, client, make_actor, mock_ai):
        actor = await make_actor()
        with mock_ai({"category": "IT Support", "priority": "High"}) as generate:
            resp = await client.post(
                f"{BASE}/tickets",
                json=ticket_payload(category="Facilities", priority="Low"),
                headers=actor.headers,
            )
        assert generate.await_count == 0
        data = resp.json()["data"]
        assert (data["category"], data["priority"]) == ("Facilities", "Low")

    async def test_ticket_numbers_increment(self, client, make_actor):
        actor = await make_actor()
        numbers = []
        for _ in range(3):
            resp = await client.post(
                f"{BASE}/tickets",
                json=ticket_payload(category="HR Query", priority="Low"),
                headers=actor.headers,
            )
            numbers.append(resp.json()["data"]["ticket_number"])
        assert numbers == ["HD-00001", "HD-00002", "HD-00003"]

    async def test_numbering_continues_after_delete(self, client, make_actor):
        admin = await make_actor(UserRole.admin)
        payload = ticket_payload(category="HR Query", priority="Low")
        first = (await client.post(f"{BASE}/tickets", json=payload, headers=admin.headers)).json()["data"]
        await client.post(f"{BASE}/tickets", json=payload, headers=admin.headers)

        resp = await client.delete(f"{BASE}/tickets/{first['id']}", headers=admin.headers)
        assert resp.status_code == 204

        resp = await client.post(f"{BASE}/tickets", json=payload, headers=admin.headers)
        assert resp.status_code == 201
        assert resp.json()["data"]["ticket_number"] == "HD-00003"

    async def test_categorize_endpoint_surfaces_ai_error(self, client, make_actor, mock_ai):
        actor = await make_actor()
        with mock_ai({"category": "Gardening", "priority": "High"}):
            resp = await client.post(
                f"{BASE}/categorize",
                json={"subject": "x", "description": "y"},
                headers=actor.headers,
            )
        assert resp.status_code == 502


class TestAccess:
    async def test_employee_sees_only_own_tickets(self, client, make_actor):
        alice = await make_actor(first_name="Alice")
        bob = await make_actor(first_name="Bob")
        mine = (await client.post(
            f"{BASE}/tickets", json=ticket_payload(category="HR Query", priority="Low"), headers=alice.headers,
        )).json()["data"]
        await client.post(
            f"{BASE}/tickets", json=ticket_payload(category="HR Query", priority="Low"), headers=bob.headers,
        )

        listing = (await client.get(f"{BASE}/tickets", headers=alice.headers)).json()
        assert [t["id"] for t in listing["data"]] == [mine["id"]]

        resp = await client.get(f"{BASE}/tickets/{mine['id']}", headers=bob.headers)
        assert resp.status_code == 403

    async def test_staff_assign_notifies_assignee(self, client, make_actor):
        raiser = await make_actor()
        it = await make_actor(UserRole.it_manager, with_employee=False)
        ticket = (await client.post(
            f"{BASE}/tickets", json=ticket_payload(category="IT Support", priority="High"), headers=raiser.headers,
        )).json()["data"]

        resp = await client.patch(
            f"{BASE}/tickets/{ticket['id']}",
            json={"assigned_to": str(it.user.id), "status": "in_progress"},
            headers=it.headers,
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["assigned_to"] == str(it.user.id)

        notes = (await client.get("/api/v1/notifications", headers=it.headers)).json()
        assert notes["data"][0]["title"] == "Ticket Assigned"

    async def test_resolve_sets_resolved_at(self, client, make_actor):
        raiser = await make_actor()
        hr = await make_actor(UserRole.hr)
        ticket = (await client.post(
            f"{BASE}/tickets", json=ticket_payload(category="HR Query", priority="Low"), headers=raiser.headers,
        )).json()["data"]

        resolved = await client.patch(
            f"{BASE}/tickets/{ticket['id']}", json={"status": "resolved"}, headers=hr.headers,
        )
        assert resolved.json()["data"]["resolved_at"] is not None

        reopened = await client.patch(
            f"{BASE}/tickets/{ticket['id']}", json={"status": "open"}, headers=hr.headers,
        )
        assert reopened.json()["data"]["resolved_at"] is None

    async def test_employee_cannot_update(self, client, make_actor):
        raiser = await make_actor()
        ticket = (await client.post(
            f"{BASE}/tickets", json=ticket_payload(category="HR Query", priority="Low"), headers=raiser.headers,
        )).json()["data"]
        resp = await client.patch(
            f"{BASE}/tickets/{ticket['id']}", json={"status": "closed"}, headers=raiser.headers,
        )
        assert resp.status_code == 403

    async def test_messages_thread(self, client, make_actor):
        raiser = await make_actor()
        hr = await make_actor(UserRole.hr)
        ticket = (await client.post(
            f"{BASE}/tickets", json=ticket_payload(category="HR Query", priority="Low"), headers=raiser.headers,
        )).json()["data"]

        resp = await client.post(
            f"{BASE}/tickets/{ticket['id']}/messages", json={"body": "Any update?"}, headers=raiser.headers,
        )
        assert resp.status_code == 201

        await client.patch(f"{BASE}/tickets/{ticket['id']}", json={"status": "closed"}, headers=hr.headers)
        resp = await client.post(
            f"{BASE}/tickets/{ticket['id']}/messages", json={"body": "Hello?"}, headers=raiser.headers,
        )
        assert resp.status_code == 422

        detail = (await client.get(f"{BASE}/tickets/{ticket['id']}", headers=raiser.headers)).json()["data"]
        assert [m["body"] for m in detail["messages"]] == ["Any update?"]


class TestSummary:
    async def test_counts_per_category_zero_filled(self, client, make_actor):
        raiser = await make_actor()
        hr = await make_actor(UserRole.hr)
        created = []
        for category in ("IT Support", "IT Support", "Facilities"):
            resp = await client.post(
                f"{BASE}/tickets", json=ticket_payload(category=category, priority="Low"), headers=raiser.headers,
            )
            created.append(resp.json()["data"])
        await client.patch(
            f"{BASE}/tickets/{created[0]['id']}", json={"status": "resolved"}, headers=hr.headers,
        )

        resp = await client.get(f"{BASE}/summary", headers=hr.headers)
        assert resp.status_code == 200
        summary = {row["category"]: row for row in resp.json()["data"]}
        assert summary["IT Support"] == {"category": "IT Support", "total": 2, "open": 1}
        assert summary["Facilities"]["total"] == 1
        assert summary["Payroll Issue"] == {"category": "Payroll Issue", "total": 0, "open": 0}
        assert len(summary) == 5

    async def test_summary_staff_only(self, client, make_actor):
        actor = await make_actor()
        resp = await client.get(f"{BASE}/summary", headers=actor.headers)
        assert resp.status_code == 403
