"""Exercise catalogue: list with filters, create, get."""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import Equipment, MuscleGroup
from app.db.session import get_db
from app.models.exercise import Exercise
from app.schemas.exercise import ExerciseCreate, ExerciseRead

router = APIRouter()


@router.get("", response_model=list[ExerciseRead])
async def list_exercises(
    db: AsyncSession = Depends(get_db),
    muscle_group: MuscleGroup | None = None,
    equipment: Equipment | None = None,
    search: str | None = None,
    skip: int = 0,
    limit: int = 100,
):
    """List exercises by name; filter by muscle group, equipment, or a case-insensitive name fragment."""
    conditions = []
    if muscle_group:
        conditions.append(Exercise.muscle_group == muscle_group)
    if equipment:
        conditions.append(Exercise.equipment == equipment)
    if search:
        conditions.append(Exercise.name.ilike(f"%{search.strip()}%"))
    result = await db.execute(
        select(Exercise).where(*conditions).order_by(Exercise.name).offset(skip).limit(limit)
    )
    return list(result.scalars().all())


@router.post("", response_model=ExerciseRead, status_code=201)
async def create_exercise(
    payload: ExerciseCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create an exercise. is_timed decides whether it tracks MAX_TIME or MAX_REPS records."""
    exercise = Exercise(**payload.model_dump())
    db.add(exercise)
    await db.flush()
    await db.refresh(exercise)
    return exercise


@router.get("/{exercise_id}", response_model=ExerciseRead)
async def get_exercise(
    exercise_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    exercise = await db.get(Exercise, exercise_id)
    if not exercise:
        raise HTTPException(status_code=404, detail="Exercise not found")
    return exercise
