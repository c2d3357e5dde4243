"""ORM models - import all so Base.metadata is complete for create_all."""

from app.models.exercise import Exercise
from app.models.personal_record import PersonalRecord
from app.models.workout import WorkoutSession, WorkoutSet

__all__ = [
    "Exercise",
    "PersonalRecord",
    "WorkoutSession",
    "WorkoutSet",
]
