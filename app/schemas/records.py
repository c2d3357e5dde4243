"""Core record-engine types: logged sets, exercise metadata, records and updates."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.constants import RPE_MAX, RPE_MIN
from app.core.enums import Equipment, MuscleGroup, RecordType


class LoggedSet(BaseModel):
    """One performed set. weight/reps/time_seconds are optional depending on exercise shape."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: UUID
    exercise_id: UUID
    session_id: UUID
    set_number: int = Field(default=1, ge=0)
    weight: float | None = Field(default=None, ge=0)
    reps: int | None = Field(default=None, ge=0)
    time_seconds: int | None = Field(default=None, ge=0)
    rpe: int | None = Field(default=None, ge=RPE_MIN, le=RPE_MAX)
    is_warmup: bool = False
    is_dropset: bool = False
    logged_at: datetime


class ExerciseMeta(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    exercise_id: UUID
    name: str = ""
    muscle_group: MuscleGroup | None = None
    equipment: Equipment = Equipment.NONE
    is_timed: bool = False


class PersonalRecordState(BaseModel):
    """Current stored best for one (user, exercise, record type)."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    record_type: RecordType
    value: float
    set_id: UUID | None = None
    achieved_at: datetime | None = None
    previous_value: float | None = None


class RecordUpdate(BaseModel):
    """A new personal record produced by the evaluator; persisted by the caller."""

    model_config = ConfigDict(frozen=True)

    record_type: RecordType
    exercise_id: UUID
    value: float
    previous_value: float | None = None
    improvement: float | None = None
    improvement_pct: float | None = None
    set_id: UUID
    achieved_at: datetime

    def as_state(self) -> PersonalRecordState:
        """The record row this update leaves behind."""
        return PersonalRecordState(
            record_type=self.record_type,
            value=self.value,
            set_id=self.set_id,
            achieved_at=self.achieved_at,
            previous_value=self.previous_value,
        )
