import uuid

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.training_service.routers._helpers import attendance_response
from services.training_service.schemas import (
    AttendanceBulkResult,
    AttendanceBulkUpdate,
    AttendanceResponse,
    AttendanceUpdate,
)
from services.training_service.services import attendance_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.patch("", response_model=AttendanceBulkResult)
async def bulk_update_attendance(
    payload: AttendanceBulkUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Mark several attendance rows of one session at once.
    All-or-nothing: a single bad item rejects the batch.
    """
    updated = await attendance_ops.bulk_update(
        db,
        actor=current_user,
        updates=[
            item.model_dump(exclude_unset=True) for item in payload.attendance_updates
        ],
    )
    return AttendanceBulkResult(success=True, updated=updated)


@router.patch("/{attendance_id}", response_model=AttendanceResponse)
async def update_attendance(
    attendance_id: uuid.UUID,
    attendance_in: AttendanceUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Mark one attendance row PRESENT, ABSENT, LATE or EXCUSED."""
    attendance, member = await attendance_ops.update_status(
        db,
        actor=current_user,
        attendance_id=attendance_id,
        status=attendance_in.status,
        notes=attendance_in.notes,
        set_notes="notes" in attendance_in.model_fields_set,
    )
    return attendance_response(attendance, member)
