"""Unit tests for attendance marking."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from libs.common.errors import Forbidden, NotFound, ValidationFailed
from services.roster_service.models import TeamRole
from services.training_service.models import Attendance, AttendanceStatus
from services.training_service.services import attendance_ops, scheduler
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.sql.dml import Update
from tests.factories import make_user, seed_team

COACH = make_user("coach-1")


async def _session_with_roster(db, players=3):
    team, members = await seed_team(
        db, players=players, extra_leaders=[("assistant-1", TeamRole.ASSISTANT_COACH)]
    )
    hydrated = await scheduler.create_session(
        db,
        actor=COACH,
        team_id=team.id,
        title="Practice",
        scheduled_at=datetime.now(timezone.utc) + timedelta(days=1),
    )
    rows = {a.user_id: a.id for a, _ in hydrated.attendance}
    return hydrated.session.id, rows


async def _statuses(db, session_id):
    result = await db.execute(
        select(Attendance.user_id, Attendance.status).where(
            Attendance.session_id == session_id
        )
    )
    return dict(result.all())


# ---------------------------------------------------------------------------
# update_status
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_mark_single_row(db_session):
    _, rows = await _session_with_roster(db_session)

    attendance, member = await attendance_ops.update_status(
        db_session,
        actor=COACH,
        attendance_id=rows["player-1"],
        status=AttendanceStatus.LATE,
        notes="Bus was late",
        set_notes=True,
    )

    assert attendance.status == AttendanceStatus.LATE
    assert attendance.notes == "Bus was late"
    assert member.user_id == "player-1"


@pytest.mark.asyncio
async def test_marking_twice_is_idempotent(db_session):
    session_id, rows = await _session_with_roster(db_session)

    for _ in range(2):
        await attendance_ops.update_status(
            db_session,
            actor=COACH,
            attendance_id=rows["player-2"],
            status=AttendanceStatus.PRESENT,
        )

    assert (await _statuses(db_session, session_id))["player-2"] == AttendanceStatus.PRESENT


@pytest.mark.asyncio
async def test_resetting_to_pending_is_rejected(db_session):
    _, rows = await _session_with_roster(db_session)

    with pytest.raises(ValidationFailed):
        await attendance_ops.update_status(
            db_session,
            actor=COACH,
            attendance_id=rows["player-1"],
            status=AttendanceStatus.PENDING,
        )


@pytest.mark.asyncio
async def test_assistant_coach_may_mark(db_session):
    session_id, rows = await _session_with_roster(db_session)

    await attendance_ops.update_status(
        db_session,
        actor=make_user("assistant-1"),
        attendance_id=rows["player-1"],
        status=AttendanceStatus.ABSENT,
    )

    assert (await _statuses(db_session, session_id))["player-1"] == AttendanceStatus.ABSENT


@pytest.mark.asyncio
async def test_player_may_not_mark_even_themselves(db_session):
    session_id, rows = await _session_with_roster(db_session)

    with pytest.raises(Forbidden):
        await attendance_ops.update_status(
            db_session,
            actor=make_user("player-1"),
            attendance_id=rows["player-1"],
            status=AttendanceStatus.PRESENT,
        )

    assert (await _statuses(db_session, session_id))["player-1"] == AttendanceStatus.PENDING


# ---------------------------------------------------------------------------
# bulk_update
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_bulk_update_marks_all_items(db_session):
    session_id, rows = await _session_with_roster(db_session)

    updated = await attendance_ops.bulk_update(
        db_session,
        actor=COACH,
        updates=[
            {"id": rows["player-1"], "status": AttendanceStatus.PRESENT},
            {"id": rows["player-2"], "status": AttendanceStatus.EXCUSED, "notes": "Ill"},
        ],
    )

    statuses = await _statuses(db_session, session_id)
    assert updated == 2
    assert statuses["player-1"] == AttendanceStatus.PRESENT
    assert statuses["player-2"] == AttendanceStatus.EXCUSED
    assert statuses["player-3"] == AttendanceStatus.PENDING


@pytest.mark.asyncio
async def test_bulk_update_with_pending_item_changes_nothing(db_session):
    session_id, rows = await _session_with_roster(db_session)

    with pytest.raises(ValidationFailed):
        await attendance_ops.bulk_update(
            db_session,
            actor=COACH,
            updates=[
                {"id": rows["player-1"], "status": AttendanceStatus.PRESENT},
                {"id": rows["player-2"], "status": AttendanceStatus.PENDING},
            ],
        )

    statuses = await _statuses(db_session, session_id)
    assert statuses["player-1"] == AttendanceStatus.PENDING


@pytest.mark.asyncio
async def test_bulk_update_across_sessions_is_rejected(db_session):
    _, first = await _session_with_roster(db_session)
    _, second = await _session_with_roster(db_session)

    with pytest.raises(ValidationFailed):
        await attendance_ops.bulk_update(
            db_session,
            actor=COACH,
            updates=[
                {"id": first["player-1"], "status": AttendanceStatus.PRESENT},
                {"id": second["player-1"], "status": AttendanceStatus.PRESENT},
            ],
        )


@pytest.mark.asyncio
async def test_bulk_update_unknown_id_is_not_found(db_session):
    _, rows = await _session_with_roster(db_session)

    with pytest.raises(NotFound):
        await attendance_ops.bulk_update(
            db_session,
            actor=COACH,
            updates=[
                {"id": rows["player-1"], "status": AttendanceStatus.PRESENT},
                {"id": uuid.uuid4(), "status": AttendanceStatus.PRESENT},
            ],
        )


# ---------------------------------------------------------------------------
# mark_all_pending
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_mark_all_only_touches_pending_rows(db_session):
    session_id, rows = await _session_with_roster(db_session, players=3)
    await attendance_ops.update_status(
        db_session,
        actor=COACH,
        attendance_id=rows["player-1"],
        status=AttendanceStatus.ABSENT,
    )

    updated, failed = await attendance_ops.mark_all_pending(
        db_session, actor=COACH, session_id=session_id
    )

    statuses = await _statuses(db_session, session_id)
    # coach + assistant + player-2 + player-3
    assert (updated, failed) == (4, 0)
    assert statuses["player-1"] == AttendanceStatus.ABSENT
    assert statuses["player-2"] == AttendanceStatus.PRESENT
    assert AttendanceStatus.PENDING not in statuses.values()


@pytest.mark.asyncio
async def test_mark_all_with_explicit_status(db_session):
    session_id, _ = await _session_with_roster(db_session, players=1)

    updated, failed = await attendance_ops.mark_all_pending(
        db_session, actor=COACH, session_id=session_id, status=AttendanceStatus.ABSENT
    )

    assert (updated, failed) == (3, 0)
    assert set((await _statuses(db_session, session_id)).values()) == {
        AttendanceStatus.ABSENT
    }


@pytest.mark.asyncio
async def test_mark_all_twice_updates_nothing_second_time(db_session):
    session_id, _ = await _session_with_roster(db_session, players=2)

    await attendance_ops.mark_all_pending(db_session, actor=COACH, session_id=session_id)
    updated, failed = await attendance_ops.mark_all_pending(
        db_session, actor=COACH, session_id=session_id
    )

    assert (updated, failed) == (0, 0)


@pytest.mark.asyncio
async def test_mark_all_rejects_pending_target(db_session):
    session_id, _ = await _session_with_roster(db_session, players=1)

    with pytest.raises(ValidationFailed):
        await attendance_ops.mark_all_pending(
            db_session,
            actor=COACH,
            session_id=session_id,
            status=AttendanceStatus.PENDING,
        )


@pytest.mark.asyncio
async def test_mark_all_keeps_going_after_a_row_fails(db_session, monkeypatch):
    session_id, rows = await _session_with_roster(db_session, players=3)
    broken_id = rows["player-2"]
    real_execute = db_session.execute

    async def execute(statement, *args, **kwargs):
        if isinstance(statement, Update) and broken_id in _bound_ids(statement):
            raise OperationalError("UPDATE training_attendance", {}, Exception("locked"))
        return await real_execute(statement, *args, **kwargs)

    monkeypatch.setattr(db_session, "execute", execute)

    updated, failed = await attendance_ops.mark_all_pending(
        db_session, actor=COACH, session_id=session_id
    )
    monkeypatch.undo()

    statuses = await _statuses(db_session, session_id)
    # coach + assistant + three players, one of which fails
    assert (updated, failed) == (4, 1)
    assert statuses.pop("player-2") == AttendanceStatus.PENDING
    assert set(statuses.values()) == {AttendanceStatus.PRESENT}


def _bound_ids(statement):
    return {
        value
        for value in statement.compile().params.values()
        if isinstance(value, uuid.UUID)
    }
