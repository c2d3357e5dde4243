"""Progression analytics: metric series, weekly volume, muscle split, RPE, duration, mood.

Everything here is derived fresh from set/session history on each query.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Collection, Iterable, Mapping
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from app.core.constants import DEFAULT_TREND_LIMIT, DEFAULT_VOLUME_WEEKS, MAX_STREAK_WEEKS, RPE_MAX, RPE_MIN
from app.core.enums import OneRepMaxFormula, ProgressionMetric
from app.core.exceptions import InvalidInputError
from app.schemas.progression import (
    DurationStats,
    DurationTrendPoint,
    MoodStats,
    MoodTrendPoint,
    MuscleShare,
    ProgressionDataPoint,
    RpeSummary,
    RpeTrendPoint,
    SessionRecord,
    WeekBucket,
)
from app.schemas.records import ExerciseMeta, LoggedSet
from app.services.pr_detection import is_record_eligible
from app.services.record_values import calculate_volume, metric_value


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a person would (2.5 -> 3), not banker's rounding."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def week_start(day: date | datetime) -> date:
    """Monday of the week containing day."""
    d = _as_date(day)
    return d - timedelta(days=d.weekday())


# ── Metric series ────────────────────────────────────────────────────────

def build_metric_series(
    sets: Iterable[LoggedSet],
    metric: ProgressionMetric,
    start_date: date | None = None,
    end_date: date | None = None,
    formula: OneRepMaxFormula = OneRepMaxFormula.EPLEY,
    is_timed: bool = False,
) -> list[ProgressionDataPoint]:
    """
    One point per day with a qualifying set; value is the day's peak (not an average).
    Warmups and dropsets are ignored. Ordered ascending by date.
    """
    best_by_day: dict[date, float] = {}
    for s in sets:
        if not is_record_eligible(s):
            continue
        day = s.logged_at.date()
        if start_date and day < start_date:
            continue
        if end_date and day > end_date:
            continue
        value = metric_value(s, metric, formula, is_timed)
        if value is None:
            continue
        if day not in best_by_day or value > best_by_day[day]:
            best_by_day[day] = value
    return [ProgressionDataPoint(date=d, value=v) for d, v in sorted(best_by_day.items())]


def calculate_improvement(first_value: float, last_value: float) -> int | None:
    """Whole-percent change from first to last; None when there is no positive baseline."""
    if first_value <= 0:
        return None
    return int(round_half_up((last_value - first_value) / first_value * 100))


# ── Weekly volume ────────────────────────────────────────────────────────

def weeks_since(start_date: date, today: date | None = None) -> int:
    """Number of Monday-anchored weeks from start_date's week to the current week, inclusive."""
    current = week_start(today or date.today())
    return max(1, (current - week_start(start_date)).days // 7 + 1)


def build_weekly_volume_trend(
    sets: Iterable[LoggedSet],
    weeks: int = DEFAULT_VOLUME_WEEKS,
    today: date | None = None,
    start_date: date | None = None,
    timed_exercise_ids: Collection[UUID] = (),
) -> list[WeekBucket]:
    """
    Exactly `weeks` buckets (oldest first) ending with the current week.
    Empty weeks are kept with zero volume so the chart axis is continuous.
    Sets of exercises in timed_exercise_ids count weight * time.
    """
    today = today or date.today()
    if start_date is not None:
        weeks = weeks_since(start_date, today)
    if weeks < 1:
        raise InvalidInputError(f"weeks must be at least 1, got {weeks}")

    current = week_start(today)
    first = current - timedelta(weeks=weeks - 1)

    volume: dict[date, float] = defaultdict(float)
    sessions: dict[date, set[UUID]] = defaultdict(set)
    for s in sets:
        key = week_start(s.logged_at)
        if key < first or key > current:
            continue
        sessions[key].add(s.session_id)
        if not s.is_warmup:
            volume[key] += calculate_volume(
                s.weight, s.reps, s.time_seconds, s.exercise_id in timed_exercise_ids
            )

    buckets = []
    for i in range(weeks):
        key = first + timedelta(weeks=i)
        buckets.append(
            WeekBucket(week_start=key, volume=volume.get(key, 0.0), workouts=len(sessions.get(key, ())))
        )
    return buckets


# ── Distributions ────────────────────────────────────────────────────────

def build_muscle_group_distribution(
    sets: Iterable[LoggedSet],
    exercises: Mapping[UUID, ExerciseMeta],
) -> list[MuscleShare]:
    """
    Working-set count per muscle group with whole-number percentages.
    Percentages are rounded independently, so they may not sum to exactly 100.
    """
    counts: dict = defaultdict(int)
    for s in sets:
        if not is_record_eligible(s):
            continue
        exercise = exercises.get(s.exercise_id)
        if exercise is None or exercise.muscle_group is None:
            continue
        counts[exercise.muscle_group] += 1

    total = sum(counts.values())
    if total == 0:
        return []
    shares = [
        MuscleShare(muscle=muscle, count=count, percentage=int(round_half_up(count / total * 100)))
        for muscle, count in counts.items()
    ]
    shares.sort(key=lambda m: (-m.count, m.muscle.value))
    return shares


def build_rpe_distribution(sets: Iterable[LoggedSet]) -> RpeSummary:
    """Average RPE, dense 1-10 histogram, and per-day average trend over rated working sets."""
    distribution = {rating: 0 for rating in range(RPE_MIN, RPE_MAX + 1)}
    by_day: dict[date, list[int]] = defaultdict(list)
    ratings: list[int] = []
    for s in sets:
        if s.rpe is None or s.is_warmup:
            continue
        ratings.append(s.rpe)
        distribution[s.rpe] += 1
        by_day[s.logged_at.date()].append(s.rpe)

    if not ratings:
        return RpeSummary(distribution=distribution)
    trend = [
        RpeTrendPoint(date=d, avg_rpe=round_half_up(sum(v) / len(v), 1))
        for d, v in sorted(by_day.items())
    ]
    return RpeSummary(
        avg_rpe=round_half_up(sum(ratings) / len(ratings), 1),
        total_rated_sets=len(ratings),
        distribution=distribution,
        trend=trend,
    )


# ── Session trends ───────────────────────────────────────────────────────

def _completed(sessions: Iterable[SessionRecord]) -> list[SessionRecord]:
    done = [s for s in sessions if s.completed_at is not None]
    done.sort(key=lambda s: s.completed_at)
    return done


def build_duration_stats(
    sessions: Iterable[SessionRecord],
    trend_limit: int = DEFAULT_TREND_LIMIT,
) -> DurationStats:
    """Average/max/total duration of completed sessions plus a sparkline of the first `trend_limit`."""
    timed = [s for s in _completed(sessions) if s.duration_seconds is not None]
    if not timed:
        return DurationStats()
    durations = [s.duration_seconds for s in timed]
    return DurationStats(
        avg_duration_seconds=int(round_half_up(sum(durations) / len(durations))),
        max_duration_seconds=max(durations),
        total_duration_seconds=sum(durations),
        session_count=len(timed),
        trend=[
            DurationTrendPoint(date=s.completed_at.date(), duration=s.duration_seconds)
            for s in timed[:trend_limit]
        ],
    )


def build_mood_stats(
    sessions: Iterable[SessionRecord],
    trend_limit: int = DEFAULT_TREND_LIMIT,
) -> MoodStats:
    rated = [s for s in _completed(sessions) if s.mood_rating is not None]
    if not rated:
        return MoodStats()
    moods = [s.mood_rating for s in rated]
    return MoodStats(
        avg_mood=round_half_up(sum(moods) / len(moods), 1),
        mood_count=len(rated),
        trend=[MoodTrendPoint(date=s.completed_at.date(), mood=s.mood_rating) for s in rated[:trend_limit]],
    )


def calculate_weekly_streak(
    completed_dates: Iterable[date | datetime],
    today: date | None = None,
) -> int:
    """
    Consecutive weeks (Monday-anchored) with at least one completed workout.
    The streak must include the current week or last week to count.
    """
    weeks = {week_start(d) for d in completed_dates}
    if not weeks:
        return 0
    current = week_start(today or date.today())
    latest = max(weeks)
    if latest not in (current, current - timedelta(weeks=1)):
        return 0

    streak = 0
    expected = latest
    while expected in weeks and streak < MAX_STREAK_WEEKS:
        streak += 1
        expected -= timedelta(weeks=1)
    return streak
