"""Shared fixtures: core-type factories, an aiosqlite database and an API client."""

import os

# Must be set before app.core.config.get_settings() is first called
os.environ.setdefault("DATABASE_DSN", "sqlite+aiosqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import asyncio
import uuid
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app import models  # noqa: F401
from app.core.enums import Equipment, MuscleGroup
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.schemas.records import ExerciseMeta, LoggedSet

BENCH_ID = uuid.UUID("00000000-0000-0000-0000-0000000000b1")
PLANK_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c1")
SESSION_ID = uuid.UUID("00000000-0000-0000-0000-0000000000a1")


# =============================================================================
# Core-type factories
# =============================================================================


@pytest.fixture
def bench() -> ExerciseMeta:
    return ExerciseMeta(
        exercise_id=BENCH_ID,
        name="Bench Press",
        muscle_group=MuscleGroup.CHEST,
        equipment=Equipment.BARBELL,
    )


@pytest.fixture
def plank() -> ExerciseMeta:
    return ExerciseMeta(
        exercise_id=PLANK_ID,
        name="Plank",
        muscle_group=MuscleGroup.CORE,
        equipment=Equipment.BODYWEIGHT,
        is_timed=True,
    )


@pytest.fixture
def make_set():
    """Build a LoggedSet for the bench press unless told otherwise."""

    def _make(**overrides) -> LoggedSet:
        fields = {
            "id": uuid.uuid4(),
            "exercise_id": BENCH_ID,
            "session_id": SESSION_ID,
            "set_number": 1,
            "logged_at": datetime(2024, 3, 4, 18, 0, tzinfo=timezone.utc),
        }
        fields.update(overrides)
        return LoggedSet(**fields)

    return _make


# =============================================================================
# Database
# =============================================================================


def _sqlite_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'fitness.db'}"


@pytest_asyncio.fixture
async def db_session(tmp_path):
    """AsyncSession on a fresh file-backed SQLite database."""
    engine = create_async_engine(_sqlite_url(tmp_path), poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with session_maker() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def client(tmp_path):
    """TestClient whose get_db dependency points at a fresh SQLite database."""
    engine = create_async_engine(_sqlite_url(tmp_path), poolclass=NullPool)

    async def _create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(_create_tables())
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    async def _get_test_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_test_db

    yield TestClient(app)

    app.dependency_overrides.clear()
    asyncio.run(engine.dispose())
