import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.workouts_service.schemas import (
    Pagination,
    WorkoutCreate,
    WorkoutDetailResponse,
    WorkoutExerciseResponse,
    WorkoutListResponse,
    WorkoutResponse,
    WorkoutUpdate,
)
from services.workouts_service.services import workout_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/workouts", tags=["workouts"])


@router.get("", response_model=WorkoutListResponse)
async def list_workouts(
    team_id: Optional[uuid.UUID] = Query(None, alias="teamId"),
    my_workouts: bool = Query(False, alias="myWorkouts"),
    public_only: bool = Query(False, alias="publicOnly"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(workout_ops.DEFAULT_PAGE_SIZE, ge=1, le=workout_ops.MAX_PAGE_SIZE),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    List workouts visible to the caller, newest first, paginated.
    """
    workouts, total = await workout_ops.list_workouts(
        db,
        actor=current_user,
        team_id=team_id,
        my_workouts=my_workouts,
        public_only=public_only,
        search=search,
        page=page,
        limit=limit,
    )
    counts = await workout_ops.exercise_counts(db, [w.id for w in workouts])

    items = []
    for workout in workouts:
        resp = WorkoutResponse.model_validate(workout)
        resp.exercise_count = counts.get(workout.id, 0)
        items.append(resp)

    return WorkoutListResponse(
        workouts=items,
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=workout_ops.total_pages(total, limit),
        ),
    )


@router.post("", response_model=WorkoutResponse, status_code=status.HTTP_201_CREATED)
async def create_workout(
    workout_in: WorkoutCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Create a workout template owned by the caller."""
    return await workout_ops.create_workout(
        db, actor=current_user, **workout_in.model_dump()
    )


@router.get("/{workout_id}", response_model=WorkoutDetailResponse)
async def get_workout(
    workout_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get a workout with its ordered exercise list."""
    workout, exercises = await workout_ops.get_workout(
        db, actor=current_user, workout_id=workout_id
    )
    resp = WorkoutDetailResponse.model_validate(workout)
    resp.exercises = [WorkoutExerciseResponse.model_validate(e) for e in exercises]
    resp.exercise_count = len(exercises)
    return resp


@router.patch("/{workout_id}", response_model=WorkoutResponse)
async def update_workout(
    workout_id: uuid.UUID,
    workout_in: WorkoutUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Update a workout. Already scheduled sessions are not affected.
    """
    return await workout_ops.update_workout(
        db,
        actor=current_user,
        workout_id=workout_id,
        changes=workout_in.model_dump(exclude_unset=True),
    )


@router.delete("/{workout_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workout(
    workout_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Delete a workout template."""
    await workout_ops.delete_workout(db, actor=current_user, workout_id=workout_id)
