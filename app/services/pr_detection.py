"""PR detection: flag a set as a record when it strictly beats the current best.

Pure functions over in-memory state. The caller supplies the current records
for (user, exercise) and persists the returned updates; nothing here touches
storage, so evaluating the same input twice gives the same output.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

from app.core.constants import PR_PRIORITY
from app.core.enums import RecordType
from app.core.exceptions import InvalidInputError, OrderingViolationError
from app.schemas.records import ExerciseMeta, LoggedSet, PersonalRecordState, RecordUpdate
from app.services.record_values import check_set, extract_record_value


def is_record_eligible(logged_set: LoggedSet) -> bool:
    """Warmups and dropsets are never peak efforts."""
    return not (logged_set.is_warmup or logged_set.is_dropset)


def _index_records(records: Iterable[PersonalRecordState]) -> dict[RecordType, PersonalRecordState]:
    by_type: dict[RecordType, PersonalRecordState] = {}
    for record in records:
        if record.record_type in by_type:
            raise InvalidInputError(f"more than one current {record.record_type.value} record")
        by_type[record.record_type] = record
    return by_type


def _improvement_pct(value: float, previous: float) -> float | None:
    if previous <= 0:
        return None
    return round((value - previous) / previous * 100, 1)


def _evaluate(
    logged_set: LoggedSet,
    exercise: ExerciseMeta,
    current: dict[RecordType, PersonalRecordState],
) -> list[RecordUpdate]:
    check_set(logged_set)
    if logged_set.exercise_id != exercise.exercise_id:
        raise InvalidInputError(
            f"set {logged_set.id} belongs to exercise {logged_set.exercise_id}, "
            f"not {exercise.exercise_id}"
        )
    if not is_record_eligible(logged_set):
        return []

    updates: list[RecordUpdate] = []
    for record_type in RecordType:
        value = extract_record_value(logged_set, record_type, exercise.is_timed)
        if value is None:
            continue
        existing = current.get(record_type)
        if existing is None:
            updates.append(
                RecordUpdate(
                    record_type=record_type,
                    exercise_id=exercise.exercise_id,
                    value=value,
                    set_id=logged_set.id,
                    achieved_at=logged_set.logged_at,
                )
            )
        elif value > existing.value:
            updates.append(
                RecordUpdate(
                    record_type=record_type,
                    exercise_id=exercise.exercise_id,
                    value=value,
                    previous_value=existing.value,
                    improvement=value - existing.value,
                    improvement_pct=_improvement_pct(value, existing.value),
                    set_id=logged_set.id,
                    achieved_at=logged_set.logged_at,
                )
            )
    return updates


def evaluate_set(
    logged_set: LoggedSet,
    exercise: ExerciseMeta,
    current_records: Iterable[PersonalRecordState],
) -> list[RecordUpdate]:
    """
    Compare one set against the current records for its exercise.
    Returns one RecordUpdate per record type the set beats (or sets for the first time).
    """
    return _evaluate(logged_set, exercise, _index_records(current_records))


def evaluate_batch(
    sets: Sequence[LoggedSet],
    exercise: ExerciseMeta,
    initial_records: Iterable[PersonalRecordState] = (),
) -> list[RecordUpdate]:
    """
    Evaluate a chronological run of sets (backfill/import) against a running best.
    Each improving set registers as its own record. Out-of-order input is rejected.
    """
    running = _index_records(initial_records)
    updates: list[RecordUpdate] = []
    previous_at: datetime | None = None
    for index, logged_set in enumerate(sets):
        if previous_at is not None and logged_set.logged_at < previous_at:
            raise OrderingViolationError(index)
        previous_at = logged_set.logged_at
        for update in _evaluate(logged_set, exercise, running):
            running[update.record_type] = update.as_state()
            updates.append(update)
    return updates


def rebuild_records(
    sets: Iterable[LoggedSet],
    exercise: ExerciseMeta,
) -> dict[RecordType, PersonalRecordState]:
    """Best record per type from a full history (e.g. after a set was deleted). Earliest set wins ties."""
    ordered = sorted(sets, key=lambda s: (s.logged_at, s.set_number))
    best: dict[RecordType, PersonalRecordState] = {}
    for update in evaluate_batch(ordered, exercise):
        best[update.record_type] = update.as_state()
    return best


def select_display_pr(records: Sequence[PersonalRecordState]) -> PersonalRecordState | None:
    """
    From the records of one exercise, pick the one to display.
    Priority: MAX_VOLUME > MAX_TIME = MAX_REPS > MAX_WEIGHT.
    Tiebreak: higher value, then more recent achieved_at.
    """
    if not records:
        return None
    best = records[0]
    for current in records[1:]:
        best_priority = PR_PRIORITY[best.record_type]
        current_priority = PR_PRIORITY[current.record_type]
        if current_priority != best_priority:
            if current_priority < best_priority:
                best = current
            continue
        if current.value != best.value:
            if current.value > best.value:
                best = current
            continue
        if current.achieved_at and (best.achieved_at is None or current.achieved_at > best.achieved_at):
            best = current
    return best


def is_dominated_by_existing_pr(new_type: RecordType, existing_types: Iterable[RecordType]) -> bool:
    """True when a more impressive record type already exists (suppress lesser celebrations)."""
    new_priority = PR_PRIORITY[new_type]
    return any(PR_PRIORITY[t] < new_priority for t in existing_types)
