"""Integration tests for credits_service endpoints."""

import pytest
from services.credits_service.app.main import app
from tests.conftest import make_auth_user, override_auth
from tests.factories import UserFactory


async def _client_user(db):
    user = UserFactory.create(name="Pat Client")
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def _allocate(credits_client, user_id, amount, reason="test"):
    return await credits_client.post(
        "/admin/credits/allocate",
        json={"user_id": user_id, "amount": amount, "reason": reason},
    )


@pytest.mark.asyncio
@pytest.mark.integration
async def test_allocate_credits(credits_client, db_session):
    """POST /admin/credits/allocate — returns the ledger row and new balance."""
    user = await _client_user(db_session)

    response = await _allocate(credits_client, user.id, 10, "starter pack")

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["new_balance"] == 10
    assert data["transaction"]["amount"] == 10
    assert data["transaction"]["kind"] == "admin_allocation"
    assert data["transaction"]["reason"] == "starter pack"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_overdraw_returns_400(credits_client, db_session):
    user = await _client_user(db_session)
    user_id = user.id
    await _allocate(credits_client, user_id, 10)

    response = await _allocate(credits_client, user_id, -15, "over-deduct test")

    assert response.status_code == 400
    assert response.json()["detail"] == (
        "Cannot deduct 15 credits. User only has 10 credits."
    )
    summary = await credits_client.get(f"/admin/credits/users/{user_id}/summary")
    assert summary.json()["current_balance"] == 10
    assert len(summary.json()["recent_transactions"]) == 1


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize(
    "payload",
    [
        {"user_id": 1, "amount": 0, "reason": "zero"},
        {"user_id": 1, "amount": 5, "reason": ""},
        {"user_id": -1, "amount": 5, "reason": "negative id"},
        {"user_id": 1, "amount": 5},
    ],
)
async def test_allocate_invalid_body(credits_client, payload):
    response = await credits_client.post("/admin/credits/allocate", json=payload)
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_allocate_forbidden_for_coach(credits_client, db_session, coach):
    user = await _client_user(db_session)

    with override_auth(app, make_auth_user(coach)):
        response = await _allocate(credits_client, user.id, 5)

    assert response.status_code == 403
    assert response.json()["detail"] == "Admin privileges required"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_history_and_summary(credits_client, db_session):
    user = await _client_user(db_session)
    user_id = user.id
    for amount in (5, -2, 4):
        await _allocate(credits_client, user_id, amount)

    history = await credits_client.get(f"/admin/credits/users/{user_id}/history")
    assert history.status_code == 200
    body = history.json()
    assert body["total"] == 3
    assert [t["amount"] for t in body["transactions"]] == [4, -2, 5]
    assert body["transactions"][0]["created_by"] == {
        "name": "Ada Admin",
        "email": "admin@test.com",
    }

    summary = await credits_client.get(f"/admin/credits/users/{user_id}/summary")
    assert summary.json()["current_balance"] == 7
    assert summary.json()["total_allocated"] == 7

    consistency = await credits_client.get(
        f"/admin/credits/users/{user_id}/consistency"
    )
    assert consistency.json()["consistent"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_summary_unknown_user(credits_client):
    response = await credits_client.get("/admin/credits/users/4242/summary")
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_my_credits(credits_client, db_session):
    """GET /credits/me — any authenticated user sees their own ledger."""
    user = await _client_user(db_session)
    await _allocate(credits_client, user.id, 3)

    with override_auth(app, make_auth_user(user)):
        response = await credits_client.get("/credits/me")

    assert response.status_code == 200
    assert response.json()["balance"] == 3
    assert len(response.json()["transactions"]) == 1
