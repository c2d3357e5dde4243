"""Personal records: current bests, headline PR per exercise, PR Trophy Room."""

from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.models.exercise import Exercise
from app.models.personal_record import PersonalRecord
from app.models.workout import WorkoutSet
from app.schemas.records import PersonalRecordState
from app.schemas.workout import DisplayRecord, PersonalRecordRead
from app.services.formatting import format_record_value
from app.services.pr_detection import select_display_pr
from app.services.progression import week_start

router = APIRouter()


def _record_rows(user_id: uuid.UUID):
    return (
        select(PersonalRecord, Exercise, WorkoutSet.weight, WorkoutSet.reps, WorkoutSet.time_seconds)
        .join(Exercise, Exercise.id == PersonalRecord.exercise_id)
        .outerjoin(WorkoutSet, WorkoutSet.id == PersonalRecord.workout_set_id)
        .where(PersonalRecord.user_id == user_id)
    )


def _display(pr: PersonalRecord, ex: Exercise, weight, reps, time_seconds) -> DisplayRecord:
    return DisplayRecord(
        exercise_id=ex.id,
        exercise_name=ex.name,
        muscle_group=ex.muscle_group,
        is_timed=ex.is_timed,
        record_type=pr.record_type,
        value=pr.value,
        weight=weight,
        reps=reps,
        time_seconds=time_seconds,
        achieved_at=pr.achieved_at,
        display=format_record_value(pr.value, pr.record_type),
    )


@router.get("", response_model=list[PersonalRecordRead])
async def list_records(
    user_id: uuid.UUID,
    exercise_id: uuid.UUID | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Current record rows for a user (one per exercise and record type)."""
    stmt = select(PersonalRecord).where(PersonalRecord.user_id == user_id)
    if exercise_id:
        stmt = stmt.where(PersonalRecord.exercise_id == exercise_id)
    result = await db.execute(stmt.order_by(PersonalRecord.achieved_at.desc()))
    return list(result.scalars().all())


@router.get("/best")
async def best_records(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """
    Headline PR per exercise, grouped by muscle group.
    Priority: MAX_VOLUME > MAX_TIME = MAX_REPS > MAX_WEIGHT.
    """
    result = await db.execute(_record_rows(user_id))
    by_exercise: dict[uuid.UUID, list] = defaultdict(list)
    for row in result.all():
        by_exercise[row[1].id].append(row)

    grouped: dict[str, list[DisplayRecord]] = defaultdict(list)
    total = 0
    for rows in by_exercise.values():
        states = [
            PersonalRecordState(record_type=r[0].record_type, value=r[0].value, achieved_at=r[0].achieved_at)
            for r in rows
        ]
        chosen = select_display_pr(states)
        row = next(r for r, s in zip(rows, states) if s is chosen)
        display = _display(*row)
        grouped[display.muscle_group.value if display.muscle_group else "OTHER"].append(display)
        total += 1
    for records in grouped.values():
        records.sort(key=lambda d: d.exercise_name)
    return {"grouped": grouped, "total": total}


@router.get("/this-week")
async def records_this_week(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Count of records achieved since Monday (UTC)."""
    monday = week_start(datetime.now(timezone.utc))
    start = datetime(monday.year, monday.month, monday.day, tzinfo=timezone.utc)
    result = await db.execute(
        select(func.count(PersonalRecord.id)).where(
            PersonalRecord.user_id == user_id, PersonalRecord.achieved_at >= start
        )
    )
    return {"count": int(result.scalar() or 0)}


@router.get("/trophy-room")
async def pr_trophy_room(
    user_id: uuid.UUID,
    period: Literal["month", "year"] = "month",
    db: AsyncSession = Depends(get_db),
):
    """
    Lists records achieved in the given period.
    period=month: this calendar month; period=year: this calendar year.
    """
    now = datetime.now(timezone.utc)
    if period == "month":
        start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    else:
        start = now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)

    result = await db.execute(
        _record_rows(user_id)
        .where(PersonalRecord.achieved_at >= start)
        .order_by(PersonalRecord.achieved_at.desc())
    )
    records = [_display(*row) for row in result.all()]
    return {
        "period": period,
        "from": start.isoformat(),
        "to": now.isoformat(),
        "count": len(records),
        "records": records,
    }
