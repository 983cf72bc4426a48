"""Unit tests for session scheduling and the session lifecycle."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from libs.common.errors import Conflict, Forbidden, NotFound, ValidationFailed
from services.roster_service.models import TeamRole
from services.roster_service.services import roster_ops
from services.training_service.models import (
    Attendance,
    AttendanceStatus,
    SessionExercise,
    SessionStatus,
    TrainingSession,
)
from services.training_service.services import scheduler
from services.workouts_service.services import workout_ops
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from tests.factories import TrainingSessionFactory, make_user, seed_team, seed_workout

COACH = make_user("coach-1")
NEXT_WEEK = datetime.now(timezone.utc) + timedelta(days=7)


async def _schedule(db, team_id, **kwargs):
    kwargs.setdefault("title", "Practice")
    kwargs.setdefault("scheduled_at", NEXT_WEEK)
    return await scheduler.create_session(db, actor=COACH, team_id=team_id, **kwargs)


# ---------------------------------------------------------------------------
# create_session
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_one_pending_row_per_member(db_session):
    team, members = await seed_team(
        db_session, players=4, extra_leaders=[("trainer-1", TeamRole.TRAINER)]
    )

    hydrated = await _schedule(db_session, team.id)

    assert len(hydrated.attendance) == len(members) == 6
    assert {a.member_id for a, _ in hydrated.attendance} == {m.id for m in members}
    assert all(a.status == AttendanceStatus.PENDING for a, _ in hydrated.attendance)
    assert hydrated.session.status == SessionStatus.SCHEDULED
    assert hydrated.counts.pending == 6
    assert hydrated.counts.attendance_rate == 0


@pytest.mark.asyncio
async def test_workout_exercises_are_copied_in_order(db_session):
    team, _ = await seed_team(db_session, players=1)
    workout, exercises = await seed_workout(db_session, steps=3)

    hydrated = await _schedule(db_session, team.id, workout_id=workout.id)

    assert [e.exercise_id for e in hydrated.exercises] == [
        e.exercise_id for e in exercises
    ]
    assert [e.order for e in hydrated.exercises] == [0, 1, 2]
    assert hydrated.workout.id == workout.id


@pytest.mark.asyncio
async def test_session_is_isolated_from_later_workout_edits(db_session):
    team, _ = await seed_team(db_session, players=1)
    workout, exercises = await seed_workout(db_session, steps=2)
    hydrated = await _schedule(db_session, team.id, workout_id=workout.id)
    session_id = hydrated.session.id

    await workout_ops.add_exercise(
        db_session,
        actor=COACH,
        workout_id=workout.id,
        exercise_id=exercises[0].exercise_id,
        order=2,
    )
    await workout_ops.delete_exercise(db_session, actor=COACH, item_id=exercises[0].id)

    copies = await scheduler.session_exercises(db_session, session_id)
    assert [c.exercise_id for c in copies] == [e.exercise_id for e in exercises]


@pytest.mark.asyncio
async def test_session_survives_workout_deletion(db_session):
    team, _ = await seed_team(db_session, players=1)
    workout, _ = await seed_workout(db_session, steps=2)
    hydrated = await _schedule(db_session, team.id, workout_id=workout.id)
    session_id = hydrated.session.id

    await workout_ops.delete_workout(db_session, actor=COACH, workout_id=workout.id)

    reloaded = await scheduler.get_session(
        db_session, actor=COACH, session_id=session_id
    )
    assert reloaded.session.workout_id is None
    assert reloaded.workout is None
    assert len(reloaded.exercises) == 2


@pytest.mark.asyncio
async def test_player_cannot_schedule(db_session):
    team, _ = await seed_team(db_session, players=1)
    team_id = team.id

    with pytest.raises(Forbidden):
        await scheduler.create_session(
            db_session,
            actor=make_user("player-1"),
            team_id=team_id,
            title="Sneaky",
            scheduled_at=NEXT_WEEK,
        )

    count = (await db_session.execute(select(func.count(TrainingSession.id)))).scalar_one()
    assert count == 0


@pytest.mark.asyncio
async def test_unknown_workout_creates_nothing(db_session):
    team, _ = await seed_team(db_session, players=2)
    team_id = team.id

    with pytest.raises(NotFound):
        await _schedule(db_session, team_id, workout_id=uuid.uuid4())

    sessions = (await db_session.execute(select(func.count(TrainingSession.id)))).scalar_one()
    rows = (await db_session.execute(select(func.count(Attendance.id)))).scalar_one()
    assert (sessions, rows) == (0, 0)


@pytest.mark.asyncio
async def test_member_added_later_has_no_attendance_row(db_session):
    team, _ = await seed_team(db_session, players=1)
    hydrated = await _schedule(db_session, team.id)
    session_id = hydrated.session.id

    await roster_ops.add_member(
        db_session, actor=COACH, team_id=team.id, user_id="late-joiner"
    )

    reloaded = await scheduler.get_session(
        db_session, actor=COACH, session_id=session_id
    )
    assert "late-joiner" not in {a.user_id for a, _ in reloaded.attendance}
    assert reloaded.counts.total == 2


# ---------------------------------------------------------------------------
# list / get
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_sessions_scopes_to_my_teams_and_filters(db_session):
    mine, _ = await seed_team(db_session, players=1)
    theirs, _ = await seed_team(db_session, creator_id="coach-2", players=1)
    early = TrainingSessionFactory.create(
        mine.id, scheduled_at=NEXT_WEEK - timedelta(days=3)
    )
    late = TrainingSessionFactory.create(mine.id, scheduled_at=NEXT_WEEK)
    cancelled = TrainingSessionFactory.create(
        mine.id, scheduled_at=NEXT_WEEK, status=SessionStatus.CANCELLED
    )
    other = TrainingSessionFactory.create(theirs.id)
    db_session.add_all([early, late, cancelled, other])
    await db_session.commit()

    everything = await scheduler.list_sessions(db_session, actor=COACH)
    assert {h.session.id for h in everything} == {early.id, late.id, cancelled.id}
    assert everything[-1].session.id == early.id

    scheduled = await scheduler.list_sessions(
        db_session, actor=COACH, status=SessionStatus.SCHEDULED
    )
    assert {h.session.id for h in scheduled} == {early.id, late.id}

    ranged = await scheduler.list_sessions(
        db_session, actor=COACH, date_from=NEXT_WEEK - timedelta(days=1)
    )
    assert early.id not in {h.session.id for h in ranged}


@pytest.mark.asyncio
async def test_list_sessions_for_foreign_team_is_forbidden(db_session):
    theirs, _ = await seed_team(db_session, creator_id="coach-2", players=1)

    with pytest.raises(Forbidden):
        await scheduler.list_sessions(db_session, actor=COACH, team_id=theirs.id)


@pytest.mark.asyncio
async def test_admin_lists_every_session(db_session):
    theirs, _ = await seed_team(db_session, creator_id="coach-2", players=1)
    db_session.add(TrainingSessionFactory.create(theirs.id))
    await db_session.commit()

    listed = await scheduler.list_sessions(db_session, actor=make_user("root", admin=True))
    assert len(listed) == 1


@pytest.mark.asyncio
async def test_list_includes_attendance_summary(db_session):
    team, _ = await seed_team(db_session, players=2)
    hydrated = await _schedule(db_session, team.id)
    rows = [a for a, _ in hydrated.attendance]
    rows[0].status = AttendanceStatus.PRESENT
    rows[1].status = AttendanceStatus.LATE
    rows[2].status = AttendanceStatus.ABSENT
    await db_session.commit()

    (listed,) = await scheduler.list_sessions(db_session, actor=COACH, team_id=team.id)

    assert listed.counts.total == 3
    assert listed.counts.attendance_rate == 67


# ---------------------------------------------------------------------------
# Lifecycle / delete
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_complete_then_cancel_is_rejected(db_session):
    team, _ = await seed_team(db_session, players=1)
    hydrated = await _schedule(db_session, team.id)
    session_id = hydrated.session.id

    done = await scheduler.transition_session(
        db_session, actor=COACH, session_id=session_id, target=SessionStatus.COMPLETED
    )
    assert done.session.status == SessionStatus.COMPLETED

    with pytest.raises(ValidationFailed):
        await scheduler.transition_session(
            db_session,
            actor=COACH,
            session_id=session_id,
            target=SessionStatus.CANCELLED,
        )

    status = (
        await db_session.execute(
            select(TrainingSession.status).where(TrainingSession.id == session_id)
        )
    ).scalar_one()
    assert status == SessionStatus.COMPLETED


@pytest.mark.asyncio
async def test_update_session_details_and_start(db_session):
    team, _ = await seed_team(db_session, players=1)
    hydrated = await _schedule(db_session, team.id)

    updated = await scheduler.update_session(
        db_session,
        actor=COACH,
        session_id=hydrated.session.id,
        changes={"location": "Gym", "status": SessionStatus.IN_PROGRESS},
    )

    assert updated.session.location == "Gym"
    assert updated.session.status == SessionStatus.IN_PROGRESS


@pytest.mark.asyncio
async def test_delete_session_removes_children(db_session):
    team, _ = await seed_team(db_session, players=2)
    workout, _ = await seed_workout(db_session, steps=2)
    hydrated = await _schedule(db_session, team.id, workout_id=workout.id)
    session_id = hydrated.session.id

    await scheduler.delete_session(db_session, actor=COACH, session_id=session_id)

    attendance = (
        await db_session.execute(
            select(func.count(Attendance.id)).where(Attendance.session_id == session_id)
        )
    ).scalar_one()
    exercises = (
        await db_session.execute(
            select(func.count(SessionExercise.id)).where(
                SessionExercise.session_id == session_id
            )
        )
    ).scalar_one()
    assert (attendance, exercises) == (0, 0)
    with pytest.raises(NotFound):
        await scheduler.get_session(db_session, actor=COACH, session_id=session_id)


@pytest.mark.asyncio
async def test_failure_after_session_insert_rolls_everything_back(db_session, monkeypatch):
    team, _ = await seed_team(db_session, players=2)
    workout, _ = await seed_workout(db_session, steps=2)
    team_id, workout_id = team.id, workout.id

    async def broken_copy(db, workout_id):
        raise RuntimeError("exercise copy failed")

    monkeypatch.setattr(scheduler, "ordered_exercises", broken_copy)

    with pytest.raises(RuntimeError):
        await _schedule(db_session, team_id, workout_id=workout_id)

    counts = [
        (await db_session.execute(select(func.count(model.id)))).scalar_one()
        for model in (TrainingSession, Attendance, SessionExercise)
    ]
    assert counts == [0, 0, 0]


@pytest.mark.asyncio
async def test_integrity_error_while_scheduling_is_conflict(db_session, monkeypatch):
    team, _ = await seed_team(db_session, players=1)
    workout, _ = await seed_workout(db_session, steps=1)
    team_id, workout_id = team.id, workout.id

    async def racing_copy(db, workout_id):
        raise IntegrityError("INSERT INTO training_attendance", {}, Exception("unique"))

    monkeypatch.setattr(scheduler, "ordered_exercises", racing_copy)

    with pytest.raises(Conflict):
        await _schedule(db_session, team_id, workout_id=workout_id)

    sessions = (await db_session.execute(select(func.count(TrainingSession.id)))).scalar_one()
    assert sessions == 0


@pytest.mark.asyncio
async def test_update_session_rejects_null_title(db_session):
    team, _ = await seed_team(db_session, players=1)
    hydrated = await _schedule(db_session, team.id)
    session_id = hydrated.session.id

    with pytest.raises(ValidationFailed):
        await scheduler.update_session(
            db_session, actor=COACH, session_id=session_id, changes={"title": None}
        )
    with pytest.raises(ValidationFailed):
        await scheduler.update_session(
            db_session, actor=COACH, session_id=session_id, changes={"scheduled_at": None}
        )

    title = (
        await db_session.execute(
            select(TrainingSession.title).where(TrainingSession.id == session_id)
        )
    ).scalar_one()
    assert title == "Practice"
