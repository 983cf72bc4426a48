"""Attendance marking.

Rows are created PENDING by the scheduler; from here they only move to one
of the marked statuses. Marking is last-write-wins.
"""

import uuid
from typing import Any, Optional

from libs.auth.models import AuthUser
from libs.common.errors import NotFound, ValidationFailed
from libs.common.logging import get_logger
from services.roster_service.models import TeamMember
from services.roster_service.policy import Action
from services.training_service.models import (
    MARKABLE_STATUSES,
    Attendance,
    AttendanceStatus,
)
from services.training_service.services.scheduler import (
    authorize_session,
    get_session_or_404,
)
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

PENDING_NOT_ALLOWED = "Attendance cannot be reset to PENDING"


def _check_markable(status: AttendanceStatus) -> AttendanceStatus:
    status = AttendanceStatus(status)
    if status not in MARKABLE_STATUSES:
        raise ValidationFailed(PENDING_NOT_ALLOWED)
    return status


async def _get_attendance_or_404(
    db: AsyncSession, attendance_id: uuid.UUID
) -> Attendance:
    attendance = await db.get(Attendance, attendance_id)
    if attendance is None:
        raise NotFound("Attendance record not found")
    return attendance


async def with_member(
    db: AsyncSession, attendance: Attendance
) -> tuple[Attendance, Optional[TeamMember]]:
    member = None
    if attendance.member_id is not None:
        member = await db.get(TeamMember, attendance.member_id)
    return attendance, member


async def update_status(
    db: AsyncSession,
    *,
    actor: AuthUser,
    attendance_id: uuid.UUID,
    status: AttendanceStatus,
    notes: Optional[str] = None,
    set_notes: bool = False,
) -> tuple[Attendance, Optional[TeamMember]]:
    """Mark one attendance row. Re-marking with the same status is a no-op."""
    status = _check_markable(status)
    attendance = await _get_attendance_or_404(db, attendance_id)
    session = await get_session_or_404(db, attendance.session_id)
    await authorize_session(db, actor, session, Action.MARK_ATTENDANCE)

    attendance.status = status
    if set_notes:
        attendance.notes = notes
    await db.commit()
    await db.refresh(attendance)

    logger.info(
        "Attendance %s marked %s by %s", attendance.id, status.value, actor.user_id
    )
    return await with_member(db, attendance)


async def bulk_update(
    db: AsyncSession,
    *,
    actor: AuthUser,
    updates: list[dict[str, Any]],
) -> int:
    """Apply many marks in one transaction.

    All rows must belong to the same session. Any bad item (unknown id,
    PENDING, other session) rejects the whole batch before anything is written.
    """
    if not updates:
        raise ValidationFailed("attendanceUpdates must not be empty")

    wanted: dict[uuid.UUID, dict[str, Any]] = {}
    for item in updates:
        _check_markable(item["status"])
        wanted[item["id"]] = item

    rows = (
        await db.execute(select(Attendance).where(Attendance.id.in_(list(wanted))))
    ).scalars().all()
    found = {row.id: row for row in rows}
    missing = [str(i) for i in wanted if i not in found]
    if missing:
        raise NotFound(f"Attendance record not found: {', '.join(missing)}")

    session_ids = {row.session_id for row in rows}
    if len(session_ids) != 1:
        raise ValidationFailed("All attendance updates must belong to the same session")
    session = await get_session_or_404(db, session_ids.pop())
    await authorize_session(db, actor, session, Action.MARK_ATTENDANCE)

    try:
        for attendance_id, item in wanted.items():
            row = found[attendance_id]
            row.status = AttendanceStatus(item["status"])
            if "notes" in item:
                row.notes = item["notes"]
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Bulk-marked %d attendance rows on session %s by %s",
        len(wanted),
        session.id,
        actor.user_id,
    )
    return len(wanted)


async def mark_all_pending(
    db: AsyncSession,
    *,
    actor: AuthUser,
    session_id: uuid.UUID,
    status: AttendanceStatus = AttendanceStatus.PRESENT,
) -> tuple[int, int]:
    """Mark every still-PENDING row of a session, one row per transaction.

    A row that fails is logged and counted, the rest are still attempted.
    Rows marked concurrently by someone else are left alone. Returns
    ``(updated, failed)``.
    """
    status = _check_markable(status)
    session = await get_session_or_404(db, session_id)
    await authorize_session(db, actor, session, Action.MARK_ATTENDANCE)

    pending_ids = (
        await db.execute(
            select(Attendance.id).where(
                Attendance.session_id == session_id,
                Attendance.status == AttendanceStatus.PENDING,
            )
        )
    ).scalars().all()
    await db.commit()

    updated = failed = 0
    for attendance_id in pending_ids:
        try:
            result = await db.execute(
                update(Attendance)
                .where(
                    Attendance.id == attendance_id,
                    Attendance.status == AttendanceStatus.PENDING,
                )
                .values(status=status)
            )
            await db.commit()
            updated += result.rowcount
        except SQLAlchemyError:
            await db.rollback()
            failed += 1
            logger.exception(
                "Failed to mark attendance %s on session %s", attendance_id, session_id
            )

    logger.info(
        "Marked pending attendance on session %s as %s: %d updated, %d failed",
        session_id,
        status.value,
        updated,
        failed,
    )
    return updated, failed
