"""Storage-boundary tests: compare-and-set persistence, lost-race retry, recalculation."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from app.core.enums import MuscleGroup, RecordType
from app.core.exceptions import RecordConflictError
from app.models.exercise import Exercise
from app.models.personal_record import PersonalRecord
from app.models.workout import WorkoutSession, WorkoutSet
from app.schemas.records import RecordUpdate
from app.services import record_store
from app.services.history import to_exercise_meta, to_logged_set
from app.services.record_store import (
    compare_and_set_record,
    load_current_records,
    recalculate_records,
    store_set_records,
)

USER_ID = uuid.UUID("00000000-0000-0000-0000-00000000a5e1")
T0 = datetime(2024, 3, 4, 18, 0, tzinfo=timezone.utc)


async def _seed(db):
    exercise = Exercise(name="Bench Press", muscle_group=MuscleGroup.CHEST)
    session = WorkoutSession(user_id=USER_ID, started_at=T0)
    db.add_all([exercise, session])
    await db.flush()
    return exercise, session


async def _log(db, exercise, session, weight, reps, minutes=0, **kw):
    set_ = WorkoutSet(
        session_id=session.id,
        exercise_id=exercise.id,
        weight=weight,
        reps=reps,
        logged_at=T0 + timedelta(minutes=minutes),
        **kw,
    )
    db.add(set_)
    await db.flush()
    await db.refresh(set_)
    return set_


def _values(states):
    return {s.record_type: s.value for s in states}


@pytest.mark.asyncio
async def test_first_set_creates_records(db_session):
    exercise, session = await _seed(db_session)
    set_ = await _log(db_session, exercise, session, 100, 5)

    updates = await store_set_records(db_session, USER_ID, to_logged_set(set_), to_exercise_meta(exercise))

    assert [u.record_type for u in updates] == [RecordType.MAX_WEIGHT, RecordType.MAX_REPS, RecordType.MAX_VOLUME]
    current = await load_current_records(db_session, USER_ID, exercise.id)
    assert _values(current) == {
        RecordType.MAX_WEIGHT: 100,
        RecordType.MAX_REPS: 5,
        RecordType.MAX_VOLUME: 500,
    }
    assert all(s.set_id == set_.id for s in current)


@pytest.mark.asyncio
async def test_later_set_supersedes_in_place(db_session):
    exercise, session = await _seed(db_session)
    meta = to_exercise_meta(exercise)
    first = await _log(db_session, exercise, session, 100, 5)
    await store_set_records(db_session, USER_ID, to_logged_set(first), meta)
    second = await _log(db_session, exercise, session, 110, 3, minutes=5)

    updates = await store_set_records(db_session, USER_ID, to_logged_set(second), meta)

    assert [(u.record_type, u.previous_value) for u in updates] == [(RecordType.MAX_WEIGHT, 100)]
    rows = (await db_session.execute(select(PersonalRecord))).scalars().all()
    assert len(rows) == 3
    weight = (await load_current_records(db_session, USER_ID, exercise.id))
    assert _values(weight)[RecordType.MAX_WEIGHT] == 110


@pytest.mark.asyncio
async def test_compare_and_set_rejects_stale_previous(db_session):
    exercise, session = await _seed(db_session)
    set_ = await _log(db_session, exercise, session, 100, 5)
    await store_set_records(db_session, USER_ID, to_logged_set(set_), to_exercise_meta(exercise))

    stale = RecordUpdate(
        record_type=RecordType.MAX_WEIGHT,
        exercise_id=exercise.id,
        value=105,
        previous_value=90,
        improvement=15,
        set_id=set_.id,
        achieved_at=T0,
    )
    assert await compare_and_set_record(db_session, USER_ID, stale) is False

    duplicate_initial = RecordUpdate(
        record_type=RecordType.MAX_WEIGHT,
        exercise_id=exercise.id,
        value=105,
        set_id=set_.id,
        achieved_at=T0,
    )
    assert await compare_and_set_record(db_session, USER_ID, duplicate_initial) is False
    assert _values(await load_current_records(db_session, USER_ID, exercise.id))[RecordType.MAX_WEIGHT] == 100


@pytest.mark.asyncio
async def test_compare_and_set_never_lowers_a_record(db_session):
    exercise, session = await _seed(db_session)
    set_ = await _log(db_session, exercise, session, 100, 5)
    await store_set_records(db_session, USER_ID, to_logged_set(set_), to_exercise_meta(exercise))

    lower = RecordUpdate(
        record_type=RecordType.MAX_WEIGHT,
        exercise_id=exercise.id,
        value=95,
        previous_value=100,
        set_id=set_.id,
        achieved_at=T0,
    )
    assert await compare_and_set_record(db_session, USER_ID, lower) is False


@pytest.mark.asyncio
async def test_lost_race_is_re_evaluated(db_session, monkeypatch):
    """A writer that read stale state retries against the fresh record and only keeps real improvements."""
    exercise, session = await _seed(db_session)
    meta = to_exercise_meta(exercise)
    rival = await _log(db_session, exercise, session, 120, 1)
    await store_set_records(db_session, USER_ID, to_logged_set(rival), meta)
    ours = await _log(db_session, exercise, session, 100, 8, minutes=1)

    real_load = record_store.load_current_records
    calls = []

    async def stale_then_real(db, user_id, exercise_id):
        calls.append(1)
        if len(calls) == 1:
            return []
        return await real_load(db, user_id, exercise_id)

    monkeypatch.setattr(record_store, "load_current_records", stale_then_real)

    updates = await store_set_records(db_session, USER_ID, to_logged_set(ours), meta)

    assert len(calls) == 2
    assert {u.record_type for u in updates} == {RecordType.MAX_REPS, RecordType.MAX_VOLUME}
    current = _values(await real_load(db_session, USER_ID, exercise.id))
    assert current[RecordType.MAX_WEIGHT] == 120
    assert current[RecordType.MAX_REPS] == 8
    assert current[RecordType.MAX_VOLUME] == 800


@pytest.mark.asyncio
async def test_gives_up_after_retry_budget(db_session, monkeypatch):
    exercise, session = await _seed(db_session)
    meta = to_exercise_meta(exercise)
    rival = await _log(db_session, exercise, session, 120, 1)
    await store_set_records(db_session, USER_ID, to_logged_set(rival), meta)
    ours = await _log(db_session, exercise, session, 100, 8, minutes=1)

    async def always_stale(db, user_id, exercise_id):
        return []

    monkeypatch.setattr(record_store, "load_current_records", always_stale)

    with pytest.raises(RecordConflictError) as exc_info:
        await store_set_records(db_session, USER_ID, to_logged_set(ours), meta, max_retries=2)
    assert exc_info.value.attempts == 3


@pytest.mark.asyncio
async def test_warmup_stores_nothing(db_session):
    exercise, session = await _seed(db_session)
    set_ = await _log(db_session, exercise, session, 200, 10, is_warmup=True)

    assert await store_set_records(db_session, USER_ID, to_logged_set(set_), to_exercise_meta(exercise)) == []
    assert await load_current_records(db_session, USER_ID, exercise.id) == []


@pytest.mark.asyncio
async def test_recalculate_after_deleting_record_set(db_session):
    exercise, session = await _seed(db_session)
    meta = to_exercise_meta(exercise)
    light = await _log(db_session, exercise, session, 80, 10)
    heavy = await _log(db_session, exercise, session, 120, 1, minutes=5)
    for s in (light, heavy):
        await store_set_records(db_session, USER_ID, to_logged_set(s), meta)

    await db_session.delete(heavy)
    await db_session.flush()
    best = await recalculate_records(db_session, USER_ID, exercise.id)

    assert best[RecordType.MAX_WEIGHT].value == 80
    current = {s.record_type: s for s in await load_current_records(db_session, USER_ID, exercise.id)}
    assert current[RecordType.MAX_WEIGHT].value == 80
    assert current[RecordType.MAX_WEIGHT].set_id == light.id
    assert current[RecordType.MAX_WEIGHT].previous_value is None


@pytest.mark.asyncio
async def test_recalculate_removes_records_without_sets(db_session):
    exercise, session = await _seed(db_session)
    set_ = await _log(db_session, exercise, session, 100, 5)
    await store_set_records(db_session, USER_ID, to_logged_set(set_), to_exercise_meta(exercise))

    await db_session.delete(set_)
    await db_session.flush()

    assert await recalculate_records(db_session, USER_ID, exercise.id) == {}
    assert await load_current_records(db_session, USER_ID, exercise.id) == []
