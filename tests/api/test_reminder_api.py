"""Tests for reminder API endpoints."""

import pytest
from httpx import AsyncClient

from conftest import auth_headers


async def create(client: AsyncClient, user_id: str = "alice", **fields):
    body = {"title": "Renew car insurance", "dueDate": "2025-04-01T09:00:00Z", **fields}
    return await client.post("/api/reminders", json=body, headers=auth_headers(user_id))


@pytest.mark.asyncio
async def test_create_reminder(client: AsyncClient):
    response = await create(client, description="Compare quotes first")

    assert response.status_code == 201
    data = response.json()
    assert data["ownerId"] == "alice"
    assert data["title"] == "Renew car insurance"
    assert data["description"] == "Compare quotes first"
    assert data["priority"] == "medium"
    assert data["completed"] is False
    assert data["documentId"] is None


@pytest.mark.asyncio
async def test_create_reminder_ignores_user_id_in_body(client: AsyncClient):
    response = await create(client, userId="mallory")

    assert response.status_code == 201
    assert response.json()["ownerId"] == "alice"


@pytest.mark.asyncio
async def test_create_reminder_validation(client: AsyncClient):
    missing_title = await client.post(
        "/api/reminders", json={"dueDate": "2025-04-01T09:00:00Z"}, headers=auth_headers("alice")
    )
    bad_priority = await create(client, priority="urgent")

    assert missing_title.status_code == 400
    assert missing_title.json()["kind"] == "validation_error"
    assert bad_priority.status_code == 400


@pytest.mark.asyncio
async def test_create_reminder_for_missing_document(client: AsyncClient):
    response = await create(client, documentId=424242)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_reminders_only_own(client: AsyncClient):
    await create(client, title="later", dueDate="2025-05-01T00:00:00Z")
    await create(client, title="sooner", dueDate="2025-02-01T00:00:00Z")
    await create(client, user_id="bob", title="bob's")

    response = await client.get("/api/reminders", headers=auth_headers("alice"))

    assert response.status_code == 200
    assert [r["title"] for r in response.json()] == ["sooner", "later"]


@pytest.mark.asyncio
async def test_list_reminders_requires_authentication(client: AsyncClient):
    response = await client.get("/api/reminders")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_update_reminder(client: AsyncClient):
    reminder = (await create(client)).json()

    response = await client.patch(
        f"/api/reminders/{reminder['id']}",
        json={"completed": True, "priority": "low"},
        headers=auth_headers("alice"),
    )

    assert response.status_code == 200
    assert response.json()["completed"] is True
    assert response.json()["priority"] == "low"
    assert response.json()["title"] == reminder["title"]


@pytest.mark.asyncio
async def test_update_reminder_forbidden_and_missing(client: AsyncClient):
    reminder = (await create(client)).json()

    forbidden = await client.patch(
        f"/api/reminders/{reminder['id']}", json={"completed": True}, headers=auth_headers("bob")
    )
    missing = await client.patch("/api/reminders/99999", json={"completed": True}, headers=auth_headers("bob"))

    assert forbidden.status_code == 403
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_delete_reminder(client: AsyncClient):
    reminder = (await create(client)).json()

    assert (await client.delete(f"/api/reminders/{reminder['id']}", headers=auth_headers("bob"))).status_code == 403
    assert (await client.delete(f"/api/reminders/{reminder['id']}", headers=auth_headers("alice"))).status_code == 204
    assert (await client.delete(f"/api/reminders/{reminder['id']}", headers=auth_headers("alice"))).status_code == 404
