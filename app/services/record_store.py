"""Persist personal records with compare-and-set semantics.

Two near-simultaneous sets for the same exercise may both read the same
"current best". Each write is therefore conditional on the stored value still
being the one the evaluator compared against; a lost race re-reads and
re-evaluates, which is safe because evaluation is idempotent.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import RecordType
from app.core.exceptions import RecordConflictError
from app.models.personal_record import PersonalRecord
from app.schemas.records import ExerciseMeta, LoggedSet, PersonalRecordState, RecordUpdate
from app.services.history import load_exercise_meta, load_logged_sets
from app.services.pr_detection import evaluate_set, rebuild_records

logger = logging.getLogger(__name__)

records = PersonalRecord.__table__


def _insert_for(db: AsyncSession):
    """Dialect insert that supports ON CONFLICT DO NOTHING."""
    if db.get_bind().dialect.name == "sqlite":
        return sqlite_insert
    return pg_insert


async def load_current_records(
    db: AsyncSession,
    user_id: uuid.UUID,
    exercise_id: uuid.UUID,
) -> list[PersonalRecordState]:
    """Current records for one exercise, read as plain rows (never from the identity map)."""
    result = await db.execute(
        select(
            records.c.record_type,
            records.c.value,
            records.c.workout_set_id,
            records.c.achieved_at,
            records.c.previous_value,
        ).where(records.c.user_id == user_id, records.c.exercise_id == exercise_id)
    )
    return [
        PersonalRecordState(
            record_type=r.record_type,
            value=r.value,
            set_id=r.workout_set_id,
            achieved_at=r.achieved_at,
            previous_value=r.previous_value,
        )
        for r in result.all()
    ]


async def compare_and_set_record(db: AsyncSession, user_id: uuid.UUID, rec: RecordUpdate) -> bool:
    """
    Apply one RecordUpdate only if the stored record is still what it was evaluated against.
    Returns False when another writer got there first.
    """
    if rec.previous_value is None:
        stmt = (
            _insert_for(db)(records)
            .values(
                id=uuid.uuid4(),
                user_id=user_id,
                exercise_id=rec.exercise_id,
                record_type=rec.record_type,
                value=rec.value,
                previous_value=None,
                workout_set_id=rec.set_id,
                achieved_at=rec.achieved_at,
            )
            .on_conflict_do_nothing(index_elements=["user_id", "exercise_id", "record_type"])
        )
    else:
        stmt = (
            update(records)
            .where(
                records.c.user_id == user_id,
                records.c.exercise_id == rec.exercise_id,
                records.c.record_type == rec.record_type,
                records.c.value == rec.previous_value,
                records.c.value < rec.value,
            )
            .values(
                value=rec.value,
                previous_value=rec.previous_value,
                workout_set_id=rec.set_id,
                achieved_at=rec.achieved_at,
            )
        )
    result = await db.execute(stmt)
    return result.rowcount == 1


async def store_set_records(
    db: AsyncSession,
    user_id: uuid.UUID,
    logged_set: LoggedSet,
    exercise: ExerciseMeta,
    max_retries: int = 3,
) -> list[RecordUpdate]:
    """
    Evaluate a freshly logged set and persist every record it sets.
    Returns the applied updates in RecordType order.
    """
    applied: dict[RecordType, RecordUpdate] = {}
    attempts = max_retries + 1
    for attempt in range(1, attempts + 1):
        current = await load_current_records(db, user_id, exercise.exercise_id)
        lost: list[RecordType] = []
        for rec in evaluate_set(logged_set, exercise, current):
            if await compare_and_set_record(db, user_id, rec):
                applied[rec.record_type] = rec
            else:
                lost.append(rec.record_type)
        if not lost:
            return [applied[t] for t in RecordType if t in applied]
        logger.info(
            "PR compare-and-set lost for %s on exercise %s (attempt %d/%d); re-evaluating",
            ", ".join(t.value for t in lost),
            exercise.exercise_id,
            attempt,
            attempts,
        )
    logger.warning("Giving up on PR update for set %s after %d attempts", logged_set.id, attempts)
    raise RecordConflictError(exercise.exercise_id, attempts)


async def recalculate_records(
    db: AsyncSession,
    user_id: uuid.UUID,
    exercise_id: uuid.UUID,
) -> dict[RecordType, PersonalRecordState]:
    """
    Rebuild records for (user, exercise) from the remaining sets, e.g. after a set is deleted.
    Record types with no qualifying set left are removed.
    """
    exercise = await load_exercise_meta(db, exercise_id)
    if exercise is None:
        return {}
    best = rebuild_records(await load_logged_sets(db, user_id, exercise_id=exercise_id), exercise)

    result = await db.execute(
        select(PersonalRecord)
        .where(PersonalRecord.user_id == user_id, PersonalRecord.exercise_id == exercise_id)
        .execution_options(populate_existing=True)
    )
    existing = {row.record_type: row for row in result.scalars().all()}

    for record_type in RecordType:
        rebuilt = best.get(record_type)
        row = existing.get(record_type)
        if rebuilt is None:
            if row is not None:
                await db.delete(row)
            continue
        if row is not None and row.value == rebuilt.value and row.workout_set_id == rebuilt.set_id:
            continue
        if row is None:
            row = PersonalRecord(user_id=user_id, exercise_id=exercise_id, record_type=record_type)
            db.add(row)
        row.value = rebuilt.value
        row.previous_value = rebuilt.previous_value
        row.workout_set_id = rebuilt.set_id
        row.achieved_at = rebuilt.achieved_at
    await db.flush()
    logger.debug("Recalculated %d record types for exercise %s", len(best), exercise_id)
    return best
