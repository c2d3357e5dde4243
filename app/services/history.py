"""Loaders that turn stored rows into record-engine inputs."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.exercise import Exercise
from app.models.workout import WorkoutSession, WorkoutSet
from app.schemas.progression import SessionRecord
from app.schemas.records import ExerciseMeta, LoggedSet


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def to_logged_set(row: WorkoutSet) -> LoggedSet:
    return LoggedSet.model_validate(row)


def to_exercise_meta(row: Exercise) -> ExerciseMeta:
    return ExerciseMeta(
        exercise_id=row.id,
        name=row.name,
        muscle_group=row.muscle_group,
        equipment=row.equipment,
        is_timed=row.is_timed,
    )


async def load_logged_sets(
    db: AsyncSession,
    user_id: uuid.UUID,
    exercise_id: uuid.UUID | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
) -> list[LoggedSet]:
    """A user's sets, oldest first; date bounds are inclusive whole days (UTC)."""
    conditions = [WorkoutSession.user_id == user_id]
    if exercise_id is not None:
        conditions.append(WorkoutSet.exercise_id == exercise_id)
    if from_date:
        conditions.append(WorkoutSet.logged_at >= _day_start(from_date))
    if to_date:
        conditions.append(WorkoutSet.logged_at < _day_start(to_date + timedelta(days=1)))
    result = await db.execute(
        select(WorkoutSet)
        .join(WorkoutSession, WorkoutSession.id == WorkoutSet.session_id)
        .where(*conditions)
        .order_by(WorkoutSet.logged_at, WorkoutSet.set_number)
    )
    return [to_logged_set(row) for row in result.scalars().all()]


async def load_exercise_meta(db: AsyncSession, exercise_id: uuid.UUID) -> ExerciseMeta | None:
    result = await db.execute(select(Exercise).where(Exercise.id == exercise_id))
    exercise = result.scalar_one_or_none()
    return to_exercise_meta(exercise) if exercise else None


async def load_exercise_index(
    db: AsyncSession,
    exercise_ids: Iterable[uuid.UUID],
) -> dict[uuid.UUID, ExerciseMeta]:
    """Exercise metadata keyed by id (one query)."""
    ids = set(exercise_ids)
    if not ids:
        return {}
    result = await db.execute(select(Exercise).where(Exercise.id.in_(ids)))
    return {row.id: to_exercise_meta(row) for row in result.scalars().all()}


async def load_sessions(
    db: AsyncSession,
    user_id: uuid.UUID,
    from_date: date | None = None,
) -> list[SessionRecord]:
    """Completed sessions, oldest first."""
    conditions = [WorkoutSession.user_id == user_id, WorkoutSession.completed_at.isnot(None)]
    if from_date:
        conditions.append(WorkoutSession.completed_at >= _day_start(from_date))
    result = await db.execute(
        select(
            WorkoutSession.id,
            WorkoutSession.completed_at,
            WorkoutSession.duration_seconds,
            WorkoutSession.mood_rating,
        )
        .where(*conditions)
        .order_by(WorkoutSession.completed_at)
    )
    return [
        SessionRecord(
            session_id=r.id,
            completed_at=r.completed_at,
            duration_seconds=r.duration_seconds,
            mood_rating=r.mood_rating,
        )
        for r in result.all()
    ]
