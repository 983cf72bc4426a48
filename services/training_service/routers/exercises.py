import uuid

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.training_service.schemas import (
    SessionExerciseCreate,
    SessionExerciseListResponse,
    SessionExerciseResponse,
    SessionExerciseUpdate,
)
from services.training_service.services import session_exercise_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/session-exercises", tags=["session-exercises"])


@router.get("", response_model=SessionExerciseListResponse)
async def list_session_exercises(
    session_id: uuid.UUID = Query(..., alias="sessionId"),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    exercises = await session_exercise_ops.list_exercises(
        db, actor=current_user, session_id=session_id
    )
    return SessionExerciseListResponse(
        exercises=[SessionExerciseResponse.model_validate(e) for e in exercises]
    )


@router.post(
    "", response_model=SessionExerciseResponse, status_code=status.HTTP_201_CREATED
)
async def add_session_exercise(
    item_in: SessionExerciseCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Add an exercise to this session only; the source workout is untouched."""
    return await session_exercise_ops.add_exercise(
        db, actor=current_user, **item_in.model_dump()
    )


@router.patch("/{item_id}", response_model=SessionExerciseResponse)
async def update_session_exercise(
    item_id: uuid.UUID,
    item_in: SessionExerciseUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await session_exercise_ops.update_exercise(
        db,
        actor=current_user,
        item_id=item_id,
        changes=item_in.model_dump(exclude_unset=True),
    )


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session_exercise(
    item_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await session_exercise_ops.delete_exercise(db, actor=current_user, item_id=item_id)
