"""Shared fixtures: seeded staff accounts, auth helpers and per-service clients."""

from contextlib import contextmanager
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser, Role
from libs.db.session import get_async_db
from services.members_service.models import User
from tests.factories import UserFactory


# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------


def make_auth_user(user: User) -> AuthUser:
    """AuthUser for an existing ``users`` row."""
    return AuthUser(user_id=user.id, email=user.email, role=user.role)


def make_admin_user(user_id: int = 1, email: Optional[str] = "admin@test.com") -> AuthUser:
    return AuthUser(user_id=user_id, email=email, role=Role.ADMIN)


def make_coach_user(user_id: int = 2, email: Optional[str] = "coach@test.com") -> AuthUser:
    return AuthUser(user_id=user_id, email=email, role=Role.COACH)


def make_client_user(user_id: int = 3, email: Optional[str] = "client@test.com") -> AuthUser:
    return AuthUser(user_id=user_id, email=email, role=Role.CLIENT)


@contextmanager
def override_auth(app: FastAPI, user: AuthUser):
    """Temporarily authenticate requests to ``app`` as ``user``."""
    previous = app.dependency_overrides.get(get_current_user)
    app.dependency_overrides[get_current_user] = lambda: user
    try:
        yield user
    finally:
        if previous is None:
            app.dependency_overrides.pop(get_current_user, None)
        else:
            app.dependency_overrides[get_current_user] = previous


# ---------------------------------------------------------------------------
# Seeded accounts
# ---------------------------------------------------------------------------


async def _persist(db_session, instance):
    db_session.add(instance)
    await db_session.commit()
    await db_session.refresh(instance)
    return instance


@pytest_asyncio.fixture
async def admin(db_session) -> User:
    return await _persist(
        db_session,
        UserFactory.create(email="admin@test.com", name="Ada Admin", role=Role.ADMIN),
    )


@pytest_asyncio.fixture
async def coach(db_session) -> User:
    return await _persist(
        db_session,
        UserFactory.create(email="coach@test.com", name="Cory Coach", role=Role.COACH),
    )


@pytest_asyncio.fixture
async def client_user(db_session) -> User:
    return await _persist(db_session, UserFactory.create(name="Cleo Client"))


@pytest.fixture
def admin_actor(admin) -> AuthUser:
    return make_auth_user(admin)


@pytest.fixture
def coach_actor(coach) -> AuthUser:
    return make_auth_user(coach)


@pytest.fixture
def client_actor(client_user) -> AuthUser:
    return make_auth_user(client_user)


# ---------------------------------------------------------------------------
# Service clients
# ---------------------------------------------------------------------------


@contextmanager
def _wired(app: FastAPI, db_session, user: AuthUser):
    app.dependency_overrides[get_async_db] = lambda: db_session
    app.dependency_overrides[get_current_user] = lambda: user
    try:
        yield app
    finally:
        app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def members_client(db_session, admin_actor) -> AsyncGenerator[AsyncClient, None]:
    """Members Service client, authenticated as the seeded admin."""
    from services.members_service.app.main import app

    with _wired(app, db_session, admin_actor):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac


@pytest_asyncio.fixture
async def credits_client(db_session, admin_actor) -> AsyncGenerator[AsyncClient, None]:
    """Credits Service client, authenticated as the seeded admin."""
    from services.credits_service.app.main import app

    with _wired(app, db_session, admin_actor):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac


@pytest_asyncio.fixture
async def settings_client(db_session, admin_actor) -> AsyncGenerator[AsyncClient, None]:
    """Settings Service client, authenticated as the seeded admin."""
    from services.settings_service.app.main import app

    with _wired(app, db_session, admin_actor):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac


@pytest_asyncio.fixture
async def bootcamps_client(db_session, coach_actor) -> AsyncGenerator[AsyncClient, None]:
    """Bootcamps Service client, authenticated as the seeded coach."""
    from services.bootcamps_service.app.main import app

    with _wired(app, db_session, coach_actor):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
