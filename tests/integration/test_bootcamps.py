"""Integration tests for bootcamps_service endpoints."""

from datetime import datetime, timedelta, timezone

import pytest
from services.bootcamps_service.app.main import app
from services.credits_service.services.ledger_ops import allocate_credits
from tests.conftest import make_auth_user, override_auth
from tests.factories import BootcampFactory, UserFactory


def _iso_in(hours):
    return (datetime.now(timezone.utc) + timedelta(hours=hours)).isoformat()


async def _add(db, instance):
    db.add(instance)
    await db.commit()
    await db.refresh(instance)
    return instance


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_bootcamp(bootcamps_client):
    """POST /bootcamps — coach schedules a bootcamp."""
    response = await bootcamps_client.post(
        "/bootcamps",
        json={
            "name": "Hill Sprints",
            "start_time": _iso_in(24),
            "end_time": _iso_in(25),
            "capacity": 8,
        },
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["name"] == "Hill Sprints"
    assert data["attendees"] == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_bootcamp_inverted_range(bootcamps_client):
    response = await bootcamps_client.post(
        "/bootcamps",
        json={"name": "Oops", "start_time": _iso_in(5), "end_time": _iso_in(4)},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_coach_enrols_and_removes_attendee(
    bootcamps_client, db_session, admin_actor
):
    user = await _add(db_session, UserFactory.create(name="Robin Runner"))
    user_id = user.id
    await allocate_credits(
        db_session, actor=admin_actor, user_id=user_id, amount=2, reason="pack"
    )
    bootcamp = await _add(db_session, BootcampFactory.create())
    bootcamp_id = bootcamp.id

    enrolled = await bootcamps_client.post(
        f"/bootcamps/{bootcamp_id}/attendees", json={"user_id": user_id}
    )
    assert enrolled.status_code == 201, enrolled.text
    assert enrolled.json()["credits_balance"] == 1

    detail = await bootcamps_client.get(f"/bootcamps/{bootcamp_id}")
    attendees = detail.json()["attendees"]
    assert [a["user"]["name"] for a in attendees] == ["Robin Runner"]

    removed = await bootcamps_client.delete(
        f"/bootcamps/{bootcamp_id}/attendees/{user_id}"
    )
    assert removed.status_code == 200
    assert removed.json() == {
        "bootcamp_id": bootcamp_id,
        "user_id": user_id,
        "credits_balance": 2,
        "refunded": True,
    }


@pytest.mark.asyncio
@pytest.mark.integration
async def test_client_self_registration(bootcamps_client, db_session, admin_actor):
    user = await _add(db_session, UserFactory.create())
    await allocate_credits(
        db_session, actor=admin_actor, user_id=user.id, amount=1, reason="pack"
    )
    bootcamp = await _add(db_session, BootcampFactory.create(capacity=5))
    bootcamp_id = bootcamp.id

    with override_auth(app, make_auth_user(user)):
        available = await bootcamps_client.get("/bootcamps/me/available")
        registered = await bootcamps_client.post(f"/bootcamps/me/{bootcamp_id}/register")
        again = await bootcamps_client.post(f"/bootcamps/me/{bootcamp_id}/register")
        left = await bootcamps_client.delete(f"/bootcamps/me/{bootcamp_id}/register")

    assert available.status_code == 200
    assert available.json()[0]["spots_left"] == 5
    assert registered.status_code == 201, registered.text
    assert registered.json()["credits_balance"] == 0
    assert again.status_code == 409
    assert left.status_code == 200
    assert left.json()["refunded"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_client_registration_without_credits(bootcamps_client, db_session):
    user = await _add(db_session, UserFactory.create())
    bootcamp = await _add(db_session, BootcampFactory.create())

    with override_auth(app, make_auth_user(user)):
        response = await bootcamps_client.post(f"/bootcamps/me/{bootcamp.id}/register")

    assert response.status_code == 400
    assert response.json()["detail"] == "Insufficient credits to register for bootcamp"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_client_cannot_schedule(bootcamps_client, client_actor):
    with override_auth(app, client_actor):
        response = await bootcamps_client.post(
            "/bootcamps",
            json={"name": "Nope", "start_time": _iso_in(1), "end_time": _iso_in(2)},
        )
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_bootcamp(bootcamps_client, db_session):
    bootcamp = await _add(db_session, BootcampFactory.create())
    bootcamp_id = bootcamp.id

    response = await bootcamps_client.delete(f"/bootcamps/{bootcamp_id}")
    assert response.status_code == 204

    missing = await bootcamps_client.get(f"/bootcamps/{bootcamp_id}")
    assert missing.status_code == 404
