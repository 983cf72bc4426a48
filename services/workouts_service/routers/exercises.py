import uuid

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.workouts_service.schemas import (
    WorkoutExerciseCreate,
    WorkoutExerciseListResponse,
    WorkoutExerciseResponse,
    WorkoutExerciseUpdate,
)
from services.workouts_service.services import workout_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/workout-exercises", tags=["workout-exercises"])


@router.get("", response_model=WorkoutExerciseListResponse)
async def list_workout_exercises(
    workout_id: uuid.UUID = Query(..., alias="workoutId"),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Exercises of a workout ordered by position."""
    exercises = await workout_ops.list_exercises(
        db, actor=current_user, workout_id=workout_id
    )
    return WorkoutExerciseListResponse(
        exercises=[WorkoutExerciseResponse.model_validate(e) for e in exercises]
    )


@router.post(
    "", response_model=WorkoutExerciseResponse, status_code=status.HTTP_201_CREATED
)
async def add_workout_exercise(
    item_in: WorkoutExerciseCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Append an exercise to a workout at the given position."""
    return await workout_ops.add_exercise(db, actor=current_user, **item_in.model_dump())


@router.patch("/{item_id}", response_model=WorkoutExerciseResponse)
async def update_workout_exercise(
    item_id: uuid.UUID,
    item_in: WorkoutExerciseUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await workout_ops.update_exercise(
        db,
        actor=current_user,
        item_id=item_id,
        changes=item_in.model_dump(exclude_unset=True),
    )


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workout_exercise(
    item_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Remove an exercise; the remaining ones are renumbered."""
    await workout_ops.delete_exercise(db, actor=current_user, item_id=item_id)
