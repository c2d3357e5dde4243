"""Progression analytics: metric series, weekly volume, muscle split, RPE, duration, mood, streak."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.constants import MAX_VOLUME_WEEKS
from app.core.enums import OneRepMaxFormula, ProgressionMetric
from app.db.session import get_db
from app.schemas.progression import (
    DurationStatsRead,
    MetricOption,
    MoodStats,
    MuscleShare,
    RpeSummary,
    WeekBucket,
)
from app.services.formatting import (
    available_metrics,
    format_duration,
    format_metric_value,
    metric_axis_label,
)
from app.services.history import (
    load_exercise_index,
    load_exercise_meta,
    load_logged_sets,
    load_sessions,
)
from app.services.progression import (
    build_duration_stats,
    build_metric_series,
    build_mood_stats,
    build_muscle_group_distribution,
    build_rpe_distribution,
    build_weekly_volume_trend,
    calculate_improvement,
    calculate_weekly_streak,
    week_start,
)

router = APIRouter()


@router.get("/progression/{exercise_id}")
async def exercise_progression(
    exercise_id: uuid.UUID,
    user_id: uuid.UUID,
    metric: ProgressionMetric = ProgressionMetric.MAX_WEIGHT,
    from_date: date | None = None,
    to_date: date | None = None,
    formula: OneRepMaxFormula | None = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Daily peak of a metric for one exercise (warmups/dropsets excluded).
    Includes whole-percent improvement from the first to the last point.
    """
    exercise = await load_exercise_meta(db, exercise_id)
    if exercise is None:
        raise HTTPException(status_code=404, detail="Exercise not found")
    sets = await load_logged_sets(db, user_id, exercise_id=exercise_id, from_date=from_date, to_date=to_date)
    points = build_metric_series(
        sets,
        metric,
        start_date=from_date,
        end_date=to_date,
        formula=formula or get_settings().one_rm_formula,
        is_timed=exercise.is_timed,
    )
    improvement = calculate_improvement(points[0].value, points[-1].value) if len(points) > 1 else None
    return {
        "exercise_id": exercise_id,
        "metric": metric.value,
        "axis_label": metric_axis_label(metric),
        "points": [{**p.model_dump(), "display": format_metric_value(p.value, metric)} for p in points],
        "improvement_pct": improvement,
    }


@router.get("/metrics/{exercise_id}", response_model=list[MetricOption])
async def exercise_metrics(
    exercise_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Metrics available for the exercise type (timed vs reps)."""
    exercise = await load_exercise_meta(db, exercise_id)
    if exercise is None:
        raise HTTPException(status_code=404, detail="Exercise not found")
    return available_metrics(exercise.is_timed)


@router.get("/weekly-volume", response_model=list[WeekBucket])
async def weekly_volume(
    user_id: uuid.UUID,
    weeks: int | None = Query(None, ge=1, le=MAX_VOLUME_WEEKS),
    from_date: date | None = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Volume and workout count per Monday-anchored week, oldest first.
    Always one bucket per week (empty weeks are zero) ending with the current week.
    """
    today = datetime.now(timezone.utc).date()
    n_weeks = weeks or get_settings().default_volume_weeks
    if from_date is None:
        load_from = week_start(today) - timedelta(weeks=n_weeks - 1)
    else:
        load_from = week_start(from_date)
    sets = await load_logged_sets(db, user_id, from_date=load_from)
    exercises = await load_exercise_index(db, {s.exercise_id for s in sets})
    return build_weekly_volume_trend(
        sets,
        weeks=n_weeks,
        today=today,
        start_date=from_date,
        timed_exercise_ids={ex_id for ex_id, ex in exercises.items() if ex.is_timed},
    )


@router.get("/muscle-distribution", response_model=list[MuscleShare])
async def muscle_distribution(
    user_id: uuid.UUID,
    from_date: date | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Working-set count and percentage per muscle group (percentages are not renormalized)."""
    sets = await load_logged_sets(db, user_id, from_date=from_date)
    exercises = await load_exercise_index(db, {s.exercise_id for s in sets})
    return build_muscle_group_distribution(sets, exercises)


@router.get("/rpe", response_model=RpeSummary)
async def rpe_stats(
    user_id: uuid.UUID,
    from_date: date | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Average RPE, 1-10 histogram and daily trend over rated working sets."""
    sets = await load_logged_sets(db, user_id, from_date=from_date)
    return build_rpe_distribution(sets)


@router.get("/duration", response_model=DurationStatsRead)
async def duration_stats(
    user_id: uuid.UUID,
    from_date: date | None = None,
    db: AsyncSession = Depends(get_db),
):
    sessions = await load_sessions(db, user_id, from_date=from_date)
    stats = build_duration_stats(sessions, trend_limit=get_settings().default_trend_limit)
    return DurationStatsRead(
        **stats.model_dump(),
        avg_display=format_duration(stats.avg_duration_seconds),
        total_display=format_duration(stats.total_duration_seconds),
    )


@router.get("/mood", response_model=MoodStats)
async def mood_stats(
    user_id: uuid.UUID,
    from_date: date | None = None,
    db: AsyncSession = Depends(get_db),
):
    sessions = await load_sessions(db, user_id, from_date=from_date)
    return build_mood_stats(sessions, trend_limit=get_settings().default_trend_limit)


@router.get("/streak")
async def weekly_streak(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Consecutive weeks with at least one completed workout (must include this or last week)."""
    sessions = await load_sessions(db, user_id)
    today = datetime.now(timezone.utc).date()
    return {"current_streak": calculate_weekly_streak((s.completed_at for s in sessions), today=today)}
