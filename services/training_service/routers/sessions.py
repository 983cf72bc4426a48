import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.training_service.models import SessionStatus
from services.training_service.routers._helpers import (
    session_detail_response,
    session_response,
)
from services.training_service.schemas import (
    MarkAllRequest,
    MarkAllResult,
    TrainingSessionCreate,
    TrainingSessionDetailResponse,
    TrainingSessionResponse,
    TrainingSessionUpdate,
)
from services.training_service.services import attendance_ops, scheduler
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/training-sessions", tags=["training-sessions"])


@router.get("", response_model=List[TrainingSessionResponse])
async def list_training_sessions(
    team_id: Optional[uuid.UUID] = Query(None, alias="teamId"),
    workout_id: Optional[uuid.UUID] = Query(None, alias="workoutId"),
    session_status: Optional[SessionStatus] = Query(None, alias="status"),
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    List sessions newest first with attendance counts.
    Without teamId, returns sessions of every team the caller belongs to.
    """
    sessions = await scheduler.list_sessions(
        db,
        actor=current_user,
        team_id=team_id,
        workout_id=workout_id,
        status=session_status,
        date_from=date_from,
        date_to=date_to,
    )
    return [session_response(s) for s in sessions]


@router.post(
    "",
    response_model=TrainingSessionDetailResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_training_session(
    session_in: TrainingSessionCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Schedule a session. Every current team member gets a PENDING attendance
    row and the workout's exercises (if any) are copied in order.
    """
    hydrated = await scheduler.create_session(
        db, actor=current_user, **session_in.model_dump()
    )
    return session_detail_response(hydrated)


@router.get("/{session_id}", response_model=TrainingSessionDetailResponse)
async def get_training_session(
    session_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    hydrated = await scheduler.get_session(db, actor=current_user, session_id=session_id)
    return session_detail_response(hydrated)


@router.patch("/{session_id}", response_model=TrainingSessionDetailResponse)
async def update_training_session(
    session_id: uuid.UUID,
    session_in: TrainingSessionUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Edit details or move the session along its status lifecycle."""
    hydrated = await scheduler.update_session(
        db,
        actor=current_user,
        session_id=session_id,
        changes=session_in.model_dump(exclude_unset=True),
    )
    return session_detail_response(hydrated)


@router.post("/{session_id}/cancel", response_model=TrainingSessionDetailResponse)
async def cancel_training_session(
    session_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    hydrated = await scheduler.transition_session(
        db, actor=current_user, session_id=session_id, target=SessionStatus.CANCELLED
    )
    return session_detail_response(hydrated)


@router.post("/{session_id}/complete", response_model=TrainingSessionDetailResponse)
async def complete_training_session(
    session_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    hydrated = await scheduler.transition_session(
        db, actor=current_user, session_id=session_id, target=SessionStatus.COMPLETED
    )
    return session_detail_response(hydrated)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_training_session(
    session_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Delete a session with its attendance and exercises."""
    await scheduler.delete_session(db, actor=current_user, session_id=session_id)


@router.post("/{session_id}/attendance/mark-all", response_model=MarkAllResult)
async def mark_all_pending_attendance(
    session_id: uuid.UUID,
    body: Optional[MarkAllRequest] = Body(None),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Mark every PENDING attendance row of the session (PRESENT by default).
    Rows are written independently; failures are counted, not fatal.
    """
    target = body.status if body is not None else MarkAllRequest().status
    updated, failed = await attendance_ops.mark_all_pending(
        db, actor=current_user, session_id=session_id, status=target
    )
    return MarkAllResult(updated=updated, failed=failed)
