"""Chart-ready aggregation outputs. Plain data, produced fresh per query."""

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.constants import MOOD_MAX, MOOD_MIN
from app.core.enums import MuscleGroup


class ProgressionDataPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    value: float


class WeekBucket(BaseModel):
    """Volume/frequency for one Monday-anchored week."""

    model_config = ConfigDict(frozen=True)

    week_start: dt.date
    volume: float = 0.0
    workouts: int = 0


class MuscleShare(BaseModel):
    model_config = ConfigDict(frozen=True)

    muscle: MuscleGroup
    count: int
    percentage: int


class RpeTrendPoint(BaseModel):
    date: dt.date
    avg_rpe: float


class RpeSummary(BaseModel):
    avg_rpe: float = 0.0
    total_rated_sets: int = 0
    distribution: dict[int, int]
    trend: list[RpeTrendPoint] = []


class SessionRecord(BaseModel):
    """Completed-session fields needed for duration/mood trends."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    session_id: UUID
    completed_at: dt.datetime | None = None
    duration_seconds: int | None = Field(default=None, ge=0)
    mood_rating: int | None = Field(default=None, ge=MOOD_MIN, le=MOOD_MAX)


class DurationTrendPoint(BaseModel):
    date: dt.date
    duration: int


class DurationStats(BaseModel):
    avg_duration_seconds: int = 0
    max_duration_seconds: int = 0
    total_duration_seconds: int = 0
    session_count: int = 0
    trend: list[DurationTrendPoint] = []


class DurationStatsRead(DurationStats):
    """Duration stats with human-readable average and total ('45m', '1h 30m')."""

    avg_display: str
    total_display: str


class MoodTrendPoint(BaseModel):
    date: dt.date
    mood: int


class MoodStats(BaseModel):
    avg_mood: float = 0.0
    mood_count: int = 0
    trend: list[MoodTrendPoint] = []


class MetricOption(BaseModel):
    value: str
    label: str
