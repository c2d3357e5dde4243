"""Workout session endpoints: start/complete sessions, log and delete sets, PR detection on log."""

from __future__ import annotations

import logging
import uuid
from datetime import timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import get_settings
from app.core.exceptions import RecordConflictError, RecordEngineError
from app.db.session import get_db
from app.models.exercise import Exercise
from app.models.workout import WorkoutSession, WorkoutSet
from app.schemas.workout import (
    RecordUpdateRead,
    SetLogResult,
    WorkoutSessionCreate,
    WorkoutSessionRead,
    WorkoutSessionReadWithSets,
    WorkoutSessionUpdate,
    WorkoutSetCreate,
    WorkoutSetRead,
)
from app.services.history import to_exercise_meta, to_logged_set
from app.services.pr_detection import is_dominated_by_existing_pr
from app.services.record_store import load_current_records, recalculate_records, store_set_records

logger = logging.getLogger(__name__)
router = APIRouter()


async def _get_session_or_404(db: AsyncSession, session_id: uuid.UUID) -> WorkoutSession:
    result = await db.execute(select(WorkoutSession).where(WorkoutSession.id == session_id))
    session = result.scalar_one_or_none()
    if not session:
        raise HTTPException(status_code=404, detail="Workout not found")
    return session


@router.get("", response_model=list[WorkoutSessionRead])
async def list_workouts(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    completed: bool | None = None,
    skip: int = 0,
    limit: int = 50,
):
    """A user's sessions, newest first (without sets); completed=true/false filters on completion."""
    stmt = select(WorkoutSession).where(WorkoutSession.user_id == user_id)
    if completed is True:
        stmt = stmt.where(WorkoutSession.completed_at.isnot(None))
    elif completed is False:
        stmt = stmt.where(WorkoutSession.completed_at.is_(None))
    result = await db.execute(stmt.order_by(WorkoutSession.started_at.desc()).offset(skip).limit(limit))
    return list(result.scalars().all())


@router.post("", response_model=WorkoutSessionRead, status_code=201)
async def create_workout(
    payload: WorkoutSessionCreate,
    db: AsyncSession = Depends(get_db),
):
    """Start a new workout session."""
    session = WorkoutSession(**payload.model_dump())
    db.add(session)
    await db.flush()
    await db.refresh(session)
    return session


@router.get("/{workout_id}", response_model=WorkoutSessionReadWithSets)
async def get_workout(
    workout_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get a workout with all sets (and exercise info), ordered by log time."""
    result = await db.execute(
        select(WorkoutSession)
        .where(WorkoutSession.id == workout_id)
        .options(selectinload(WorkoutSession.sets).selectinload(WorkoutSet.exercise))
    )
    session = result.scalar_one_or_none()
    if not session:
        raise HTTPException(status_code=404, detail="Workout not found")
    sorted_sets = sorted(session.sets, key=lambda s: (s.logged_at, s.set_number))
    return WorkoutSessionReadWithSets(
        **WorkoutSessionRead.model_validate(session).model_dump(),
        sets=[WorkoutSetRead.model_validate(s) for s in sorted_sets],
    )


@router.patch("/{workout_id}", response_model=WorkoutSessionRead)
async def update_workout(
    workout_id: uuid.UUID,
    payload: WorkoutSessionUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Complete/update a workout. Sets duration_seconds from started_at/completed_at if not provided."""
    session = await _get_session_or_404(db, workout_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("completed_at") and session.started_at and "duration_seconds" not in data:
        completed = data["completed_at"]
        started = session.started_at
        # Normalize both to tz-aware UTC for safe subtraction
        if completed.tzinfo is None:
            completed = completed.replace(tzinfo=timezone.utc)
        if started.tzinfo is None:
            started = started.replace(tzinfo=timezone.utc)
        data["duration_seconds"] = max(0, int((completed - started).total_seconds()))
    for k, v in data.items():
        setattr(session, k, v)
    await db.flush()
    await db.refresh(session)
    return session


@router.delete("/{workout_id}", status_code=204)
async def delete_workout(
    workout_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete a workout and its sets, then rebuild records for every exercise it touched."""
    result = await db.execute(
        select(WorkoutSession)
        .where(WorkoutSession.id == workout_id)
        .options(selectinload(WorkoutSession.sets))
    )
    session = result.scalar_one_or_none()
    if not session:
        raise HTTPException(status_code=404, detail="Workout not found")
    user_id = session.user_id
    exercise_ids = {s.exercise_id for s in session.sets}
    await db.delete(session)
    await db.flush()
    for exercise_id in exercise_ids:
        await recalculate_records(db, user_id, exercise_id)
    return None


@router.post("/{workout_id}/sets", response_model=SetLogResult, status_code=201)
async def log_set(
    workout_id: uuid.UUID,
    payload: WorkoutSetCreate,
    db: AsyncSession = Depends(get_db),
):
    """Log a set and persist any personal records it sets (warmups and dropsets never count)."""
    session = await _get_session_or_404(db, workout_id)
    ex_result = await db.execute(select(Exercise).where(Exercise.id == payload.exercise_id))
    exercise = ex_result.scalar_one_or_none()
    if not exercise:
        raise HTTPException(status_code=404, detail="Exercise not found")

    data = payload.model_dump(exclude_none=True)
    set_ = WorkoutSet(session_id=workout_id, **data)
    db.add(set_)
    await db.flush()
    await db.refresh(set_)

    meta = to_exercise_meta(exercise)
    existing_types = {r.record_type for r in await load_current_records(db, session.user_id, exercise.id)}
    try:
        updates = await store_set_records(
            db,
            session.user_id,
            to_logged_set(set_),
            meta,
            max_retries=get_settings().record_update_max_retries,
        )
    except RecordConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except RecordEngineError as e:
        raise HTTPException(status_code=422, detail=str(e))

    records = [
        RecordUpdateRead(
            **u.model_dump(),
            celebrate=not is_dominated_by_existing_pr(
                u.record_type, existing_types | {o.record_type for o in updates}
            ),
        )
        for u in updates
    ]
    if records:
        logger.info(
            "Set %s on %s set %d record(s): %s",
            set_.id,
            exercise.name,
            len(records),
            ", ".join(r.record_type.value for r in records),
        )

    result = await db.execute(
        select(WorkoutSet).where(WorkoutSet.id == set_.id).options(selectinload(WorkoutSet.exercise))
    )
    return SetLogResult(workout_set=WorkoutSetRead.model_validate(result.scalar_one()), records=records)


@router.delete("/{workout_id}/sets/{set_id}", status_code=204)
async def delete_set(
    workout_id: uuid.UUID,
    set_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete a set from a workout and rebuild the records it may have held."""
    session = await _get_session_or_404(db, workout_id)
    result = await db.execute(
        select(WorkoutSet).where(WorkoutSet.id == set_id, WorkoutSet.session_id == workout_id)
    )
    set_ = result.scalar_one_or_none()
    if not set_:
        raise HTTPException(status_code=404, detail="Set not found")
    exercise_id = set_.exercise_id
    await db.delete(set_)
    await db.flush()
    await recalculate_records(db, session.user_id, exercise_id)
    return None
