"""Exercise model - trackable exercise with muscle group, equipment and timed flag."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Enum, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.enums import Equipment, MuscleGroup
from app.db.base import Base


class Exercise(Base):
    """Exercise definition. is_timed switches records from reps to time."""

    __tablename__ = "exercises"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    muscle_group: Mapped[MuscleGroup | None] = mapped_column(Enum(MuscleGroup), nullable=True, index=True)
    equipment: Mapped[Equipment] = mapped_column(Enum(Equipment), default=Equipment.NONE, nullable=False)
    is_timed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    workout_sets: Mapped[list["WorkoutSet"]] = relationship(
        "WorkoutSet", back_populates="exercise", cascade="all, delete-orphan"
    )
    personal_records: Mapped[list["PersonalRecord"]] = relationship(
        "PersonalRecord", back_populates="exercise", cascade="all, delete-orphan"
    )
