from __future__ import annotations

import uuid

import pytest

pytestmark = pytest.mark.anyio


async def test_usage_reflects_chat_activity(client, free_user, completion_endpoint):
    completion_endpoint.reply_with("ok")
    await client.post("/api/v1/chat", json={"question": "Pergunta", "userId": str(free_user.id)})

    response = await client.get("/api/v1/usage", params={"userId": str(free_user.id)})

    assert response.status_code == 200
    body = response.json()
    assert body["plan"] == "free"
    assert body["chat"]["used"] == 1
    assert body["chat"]["remaining"] == 4
    assert body["essay"]["used"] == 0
    assert body["essay"]["limit"] == 3


async def test_usage_for_premium_user_is_unlimited(client, premium_user):
    response = await client.get("/api/v1/usage", params={"userId": str(premium_user.id)})

    body = response.json()
    assert body["plan"] == "premium"
    assert body["chat"]["limit"] is None
    assert body["essay"]["remaining"] is None


async def test_usage_for_unknown_user_is_a_400(client):
    response = await client.get("/api/v1/usage", params={"userId": str(uuid.uuid4())})

    assert response.status_code == 400
    assert response.json()["error"] == "Usuário não encontrado"


async def test_stats_shape(client, free_user):
    response = await client.get("/api/v1/stats", params={"userId": str(free_user.id), "days": 30})

    assert response.status_code == 200
    body = response.json()
    assert body["periodDays"] == 30
    assert body["exams"]["total"] == 0
    assert body["essays"]["total"] == 0
    assert body["chatQuestions"] == 0


async def test_missing_user_id_is_a_400(client):
    response = await client.get("/api/v1/stats")

    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"
