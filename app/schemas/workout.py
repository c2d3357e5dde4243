"""Workout session, set and personal-record schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.core.constants import MOOD_MAX, MOOD_MIN, RPE_MAX, RPE_MIN
from app.core.enums import MuscleGroup, RecordType
from app.schemas.records import RecordUpdate


class ExerciseRef(BaseModel):
    """Minimal exercise info for embedding in set responses."""

    id: UUID
    name: str
    is_timed: bool = False

    model_config = ConfigDict(from_attributes=True)


class WorkoutSetBase(BaseModel):
    exercise_id: UUID
    set_number: int = Field(default=1, ge=0)
    weight: float | None = Field(default=None, ge=0)
    reps: int | None = Field(default=None, ge=0)
    time_seconds: int | None = Field(default=None, ge=0)
    rpe: int | None = Field(default=None, ge=RPE_MIN, le=RPE_MAX)
    is_warmup: bool = False
    is_dropset: bool = False
    notes: str | None = Field(default=None, max_length=500)


class WorkoutSetCreate(WorkoutSetBase):
    logged_at: datetime | None = None

    @model_validator(mode="after")
    def _has_reps_or_time(self):
        if not self.reps and not self.time_seconds:
            raise ValueError("Set must have either reps or time recorded")
        return self


class WorkoutSetRead(WorkoutSetBase):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    session_id: UUID
    logged_at: datetime
    exercise: ExerciseRef | None = None


class RecordUpdateRead(RecordUpdate):
    """A record set by a logged set; celebrate is False when a more impressive type already exists."""

    celebrate: bool = True


class SetLogResult(BaseModel):
    workout_set: WorkoutSetRead
    records: list[RecordUpdateRead] = []


class WorkoutSessionCreate(BaseModel):
    user_id: UUID
    notes: str | None = None


class WorkoutSessionUpdate(BaseModel):
    completed_at: datetime | None = None
    duration_seconds: int | None = Field(default=None, ge=0)
    mood_rating: int | None = Field(default=None, ge=MOOD_MIN, le=MOOD_MAX)
    notes: str | None = None


class WorkoutSessionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    user_id: UUID
    started_at: datetime
    completed_at: datetime | None = None
    duration_seconds: int | None = None
    mood_rating: int | None = None
    notes: str | None = None


class WorkoutSessionReadWithSets(WorkoutSessionRead):
    sets: list[WorkoutSetRead] = []


class PersonalRecordRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    exercise_id: UUID
    record_type: RecordType
    value: float
    previous_value: float | None = None
    workout_set_id: UUID | None = None
    achieved_at: datetime


class DisplayRecord(BaseModel):
    """The headline record of one exercise, with the set that achieved it."""

    exercise_id: UUID
    exercise_name: str
    muscle_group: MuscleGroup | None = None
    is_timed: bool = False
    record_type: RecordType
    value: float
    weight: float | None = None
    reps: int | None = None
    time_seconds: int | None = None
    achieved_at: datetime | None = None
    display: str | None = None
