import os
from typing import AsyncGenerator

import pytest_asyncio
from dotenv import load_dotenv

# Settings are read at import time by libs.db.config; configure before importing it.
env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=False)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

from libs.common.config import get_settings  # noqa: E402
from libs.db.base import Base  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

# Import all models so metadata includes every table
from services.bootcamps_service import models as _bootcamp_models  # noqa: E402,F401
from services.credits_service import models as _credit_models  # noqa: E402,F401
from services.members_service import models as _member_models  # noqa: E402,F401
from services.settings_service import models as _settings_models  # noqa: E402,F401

# Clear cached settings to reload with new env vars
get_settings.cache_clear()
settings = get_settings()


@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh schema per test. SQLite in-memory shares one connection via
    StaticPool so every session sees the same database.
    """
    engine_kwargs = {"future": True}
    if settings.is_sqlite:
        engine_kwargs.update(
            connect_args={"check_same_thread": False}, poolclass=StaticPool
        )
    engine = create_async_engine(settings.DATABASE_URL, **engine_kwargs)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a database session bound to the per-test engine.
    """
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session
