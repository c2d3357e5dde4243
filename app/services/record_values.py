"""Scalar extraction for record types and progression metrics.

Every record type maps to one extraction rule; a rule returns None when the
set has no value for that dimension (e.g. MAX_REPS on a timed exercise).
Zero is a legitimate value (bodyweight work with no added load).
"""

from __future__ import annotations

from typing import Callable

from app.core.enums import OneRepMaxFormula, ProgressionMetric, RecordType
from app.core.exceptions import InvalidInputError
from app.schemas.records import LoggedSet


def check_set(logged_set: LoggedSet) -> None:
    """Reject malformed sets (negative numbers, missing exercise reference)."""
    if logged_set.exercise_id is None:
        raise InvalidInputError(f"set {logged_set.id} has no exercise reference")
    for field in ("weight", "reps", "time_seconds"):
        value = getattr(logged_set, field)
        if value is not None and value < 0:
            raise InvalidInputError(f"set {logged_set.id}: {field} must be non-negative, got {value}")


def calculate_volume(
    weight: float | None,
    reps: int | None,
    time_seconds: int | None,
    is_timed: bool = False,
) -> float:
    """
    Volume = weight * time for timed exercises, else weight * reps, else weight * time.
    Zero reps count as absent so a loaded hold logged with reps=0 still has volume.
    """
    if weight is None:
        return 0.0
    if is_timed and time_seconds:
        return float(weight) * time_seconds
    if reps:
        return float(weight) * reps
    if time_seconds:
        return float(weight) * time_seconds
    return 0.0


def _weight(s: LoggedSet, is_timed: bool) -> float | None:
    return float(s.weight) if s.weight is not None else None


def _reps(s: LoggedSet, is_timed: bool) -> float | None:
    if is_timed or s.reps is None:
        return None
    return float(s.reps)


def _time(s: LoggedSet, is_timed: bool) -> float | None:
    if not is_timed or s.time_seconds is None:
        return None
    return float(s.time_seconds)


def _volume(s: LoggedSet, is_timed: bool) -> float | None:
    if s.weight is None or (s.reps is None and s.time_seconds is None):
        return None
    return calculate_volume(s.weight, s.reps, s.time_seconds, is_timed)


_EXTRACTORS: dict[RecordType, Callable[[LoggedSet, bool], float | None]] = {
    RecordType.MAX_WEIGHT: _weight,
    RecordType.MAX_REPS: _reps,
    RecordType.MAX_VOLUME: _volume,
    RecordType.MAX_TIME: _time,
}


def extract_record_value(logged_set: LoggedSet, record_type: RecordType, is_timed: bool) -> float | None:
    """Scalar for one record type, or None when the type does not apply to this set."""
    return _EXTRACTORS[record_type](logged_set, is_timed)


def _epley_1rm(weight: float, reps: int) -> float:
    """1RM = weight * (1 + reps/30)."""
    if reps == 1:
        return weight
    return weight * (1 + reps / 30)


def _brzycki_1rm(weight: float, reps: int) -> float:
    """1RM = weight * (36 / (37 - reps))."""
    if reps >= 37:
        return weight * 1.1  # extrapolate
    return weight * (36 / (37 - reps))


def estimate_one_rep_max(
    weight: float,
    reps: int,
    formula: OneRepMaxFormula = OneRepMaxFormula.EPLEY,
) -> float:
    """Estimated 1-rep max rounded to 2 decimals; 0 when weight or reps is not positive."""
    if weight <= 0 or reps <= 0:
        return 0.0
    fn = _brzycki_1rm if formula == OneRepMaxFormula.BRZYCKI else _epley_1rm
    return round(fn(float(weight), int(reps)), 2)


def metric_value(
    logged_set: LoggedSet,
    metric: ProgressionMetric,
    formula: OneRepMaxFormula = OneRepMaxFormula.EPLEY,
    is_timed: bool = False,
) -> float | None:
    """Value of a progression metric for one set (raw fields; is_timed only picks the volume factor)."""
    if metric == ProgressionMetric.MAX_WEIGHT:
        return float(logged_set.weight) if logged_set.weight is not None else None
    if metric == ProgressionMetric.MAX_REPS:
        return float(logged_set.reps) if logged_set.reps is not None else None
    if metric == ProgressionMetric.MAX_TIME:
        return float(logged_set.time_seconds) if logged_set.time_seconds is not None else None
    if metric == ProgressionMetric.VOLUME:
        return _volume(logged_set, is_timed)
    if metric == ProgressionMetric.ESTIMATED_1RM:
        if logged_set.weight is None or logged_set.reps is None:
            return None
        return estimate_one_rep_max(logged_set.weight, logged_set.reps, formula)
    raise InvalidInputError(f"unknown progression metric: {metric!r}")
