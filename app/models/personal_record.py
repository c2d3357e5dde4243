"""PersonalRecord model - current best per (user, exercise, record type)."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, Float, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.enums import RecordType
from app.db.base import Base


class PersonalRecord(Base):
    """At most one row per (user, exercise, record type); superseded in place by compare-and-set."""

    __tablename__ = "personal_records"
    __table_args__ = (
        UniqueConstraint("user_id", "exercise_id", "record_type", name="uq_personal_records_user_exercise_type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    exercise_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False
    )
    record_type: Mapped[RecordType] = mapped_column(Enum(RecordType), nullable=False)
    value: Mapped[float] = mapped_column(Float, nullable=False)
    previous_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    # SET NULL when the achieving set is deleted; recalculate_records rewrites the row
    workout_set_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("workout_sets.id", ondelete="SET NULL"), nullable=True
    )
    achieved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )

    exercise: Mapped["Exercise"] = relationship("Exercise", back_populates="personal_records")
