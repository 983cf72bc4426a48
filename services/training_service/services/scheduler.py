"""Session scheduling: snapshot a roster and a workout into a session.

A session, its attendance rows and its exercise copies are written in one
transaction. The team row is locked for the duration so roster mutations
(which take the same lock) cannot interleave with the snapshot.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from libs.auth.models import AuthUser
from libs.common.datetime_utils import as_utc
from libs.common.errors import Conflict, NotFound, ValidationFailed
from libs.common.logging import get_logger
from services.roster_service.models import Team, TeamMember
from services.roster_service.policy import (
    Action,
    TeamContext,
    ensure,
    load_team_context,
)
from services.training_service.lifecycle import ensure_transition
from services.training_service.models import (
    Attendance,
    AttendanceStatus,
    SessionExercise,
    SessionStatus,
    TrainingSession,
)
from services.training_service.summary import (
    AttendanceCounts,
    counts_from_mapping,
    summarize,
)
from services.workouts_service.models import Workout
from services.workouts_service.services.workout_ops import (
    load_workout_context,
    ordered_exercises,
)
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("title", "description", "scheduled_at", "duration", "location")


@dataclass
class HydratedSession:
    """A session with everything the API returns alongside it."""

    session: TrainingSession
    team: Optional[Team] = None
    workout: Optional[Workout] = None
    attendance: list[tuple[Attendance, Optional[TeamMember]]] = field(
        default_factory=list
    )
    exercises: list[SessionExercise] = field(default_factory=list)
    counts: AttendanceCounts = field(default_factory=AttendanceCounts)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


async def get_session_or_404(
    db: AsyncSession, session_id: uuid.UUID
) -> TrainingSession:
    session = await db.get(TrainingSession, session_id)
    if session is None:
        raise NotFound("Training session not found")
    return session


async def authorize_session(
    db: AsyncSession,
    actor: AuthUser,
    session: TrainingSession,
    action: Action,
) -> TeamContext:
    ctx = await load_team_context(db, actor, session.team_id)
    ensure(actor, action, ctx)
    return ctx


async def session_exercises(
    db: AsyncSession, session_id: uuid.UUID
) -> list[SessionExercise]:
    result = await db.execute(
        select(SessionExercise)
        .where(SessionExercise.session_id == session_id)
        .order_by(SessionExercise.order, SessionExercise.id)
    )
    return list(result.scalars().all())


async def hydrate(db: AsyncSession, session: TrainingSession) -> HydratedSession:
    """Load team, workout, attendance (with member rows) and exercises."""
    team = await db.get(Team, session.team_id)
    workout = (
        await db.get(Workout, session.workout_id) if session.workout_id else None
    )

    rows = await db.execute(
        select(Attendance, TeamMember)
        .outerjoin(TeamMember, Attendance.member_id == TeamMember.id)
        .where(Attendance.session_id == session.id)
        .order_by(Attendance.member_role, Attendance.user_id)
    )
    attendance = [(att, member) for att, member in rows.all()]

    return HydratedSession(
        session=session,
        team=team,
        workout=workout,
        attendance=attendance,
        exercises=await session_exercises(db, session.id),
        counts=summarize(att.status for att, _ in attendance),
    )


async def summaries_for(
    db: AsyncSession, session_ids: list[uuid.UUID]
) -> dict[uuid.UUID, AttendanceCounts]:
    """Attendance counts for many sessions in one grouped query."""
    if not session_ids:
        return {}
    result = await db.execute(
        select(Attendance.session_id, Attendance.status, func.count(Attendance.id))
        .where(Attendance.session_id.in_(session_ids))
        .group_by(Attendance.session_id, Attendance.status)
    )
    by_session: dict[uuid.UUID, dict[AttendanceStatus, int]] = {}
    for session_id, status, count in result.all():
        by_session.setdefault(session_id, {})[AttendanceStatus(status)] = count
    return {
        session_id: counts_from_mapping(by_session.get(session_id, {}))
        for session_id in session_ids
    }


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


async def create_session(
    db: AsyncSession,
    *,
    actor: AuthUser,
    team_id: uuid.UUID,
    title: str,
    scheduled_at: datetime,
    workout_id: Optional[uuid.UUID] = None,
    duration: Optional[int] = None,
    location: Optional[str] = None,
    description: Optional[str] = None,
) -> HydratedSession:
    """Schedule a session for a team.

    Every current role-row of the team gets one PENDING attendance row,
    leaders included. With ``workout_id`` the workout's exercises are copied
    in order; later edits to the workout never reach this session.
    """
    ctx = await load_team_context(db, actor, team_id, lock=True)
    try:
        ensure(actor, Action.SCHEDULE_SESSION, ctx)

        if workout_id is not None:
            workout = await db.get(Workout, workout_id)
            if workout is None:
                raise NotFound("Workout not found")
            ensure(
                actor, Action.VIEW_WORKOUT, await load_workout_context(db, actor, workout)
            )

        session = TrainingSession(
            team_id=team_id,
            workout_id=workout_id,
            title=title,
            description=description,
            scheduled_at=as_utc(scheduled_at),
            duration=duration,
            location=location,
            status=SessionStatus.SCHEDULED,
        )
        db.add(session)
        await db.flush()

        members = (
            await db.execute(select(TeamMember).where(TeamMember.team_id == team_id))
        ).scalars().all()
        db.add_all(
            Attendance(
                session_id=session.id,
                member_id=member.id,
                user_id=member.user_id,
                member_role=member.role,
                status=AttendanceStatus.PENDING,
            )
            for member in members
        )

        copied = 0
        if workout_id is not None:
            for item in await ordered_exercises(db, workout_id):
                db.add(
                    SessionExercise(
                        session_id=session.id,
                        exercise_id=item.exercise_id,
                        order=item.order,
                        duration=item.duration,
                        notes=item.notes,
                    )
                )
                copied += 1

        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning("Scheduling for team %s lost a race with a roster change", team_id)
        raise Conflict("The team roster changed while scheduling, please retry")
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Scheduled session %s for team %s: %d attendance rows, %d exercises",
        session.id,
        team_id,
        len(members),
        copied,
    )
    return await hydrate(db, session)


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


async def list_sessions(
    db: AsyncSession,
    *,
    actor: AuthUser,
    team_id: Optional[uuid.UUID] = None,
    workout_id: Optional[uuid.UUID] = None,
    status: Optional[SessionStatus] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> list[HydratedSession]:
    """
    List sessions newest first, each with its attendance counts.

    Without ``team_id`` admins see every session and everyone else sees the
    sessions of the teams they belong to.
    """
    query = select(TrainingSession)

    if team_id is not None:
        ctx = await load_team_context(db, actor, team_id)
        ensure(actor, Action.VIEW_SESSION, ctx)
        query = query.where(TrainingSession.team_id == team_id)
    elif not actor.is_admin:
        my_team_ids = select(TeamMember.team_id).where(
            TeamMember.user_id == actor.user_id
        )
        query = query.where(TrainingSession.team_id.in_(my_team_ids))

    if workout_id is not None:
        query = query.where(TrainingSession.workout_id == workout_id)
    if status is not None:
        query = query.where(TrainingSession.status == status)
    if date_from is not None:
        query = query.where(TrainingSession.scheduled_at >= as_utc(date_from))
    if date_to is not None:
        query = query.where(TrainingSession.scheduled_at <= as_utc(date_to))

    query = query.order_by(TrainingSession.scheduled_at.desc())
    sessions = list((await db.execute(query)).scalars().all())
    if not sessions:
        return []

    counts = await summaries_for(db, [s.id for s in sessions])
    teams = {
        t.id: t
        for t in (
            await db.execute(
                select(Team).where(Team.id.in_({s.team_id for s in sessions}))
            )
        ).scalars()
    }
    workout_ids = {s.workout_id for s in sessions if s.workout_id}
    workouts = {}
    if workout_ids:
        workouts = {
            w.id: w
            for w in (
                await db.execute(select(Workout).where(Workout.id.in_(workout_ids)))
            ).scalars()
        }

    return [
        HydratedSession(
            session=s,
            team=teams.get(s.team_id),
            workout=workouts.get(s.workout_id) if s.workout_id else None,
            counts=counts[s.id],
        )
        for s in sessions
    ]


async def get_session(
    db: AsyncSession, *, actor: AuthUser, session_id: uuid.UUID
) -> HydratedSession:
    session = await get_session_or_404(db, session_id)
    await authorize_session(db, actor, session, Action.VIEW_SESSION)
    return await hydrate(db, session)


# ---------------------------------------------------------------------------
# Update / lifecycle / delete
# ---------------------------------------------------------------------------


async def update_session(
    db: AsyncSession,
    *,
    actor: AuthUser,
    session_id: uuid.UUID,
    changes: dict[str, Any],
) -> HydratedSession:
    """Edit session details; a status change must follow the lifecycle."""
    for name, label in (("title", "title"), ("scheduled_at", "scheduledAt")):
        if name in changes and changes[name] is None:
            raise ValidationFailed(f"{label} cannot be null")
    session = await get_session_or_404(db, session_id)
    await authorize_session(db, actor, session, Action.MANAGE_SESSION)

    new_status = changes.get("status")
    if new_status is not None:
        new_status = SessionStatus(new_status)
        ensure_transition(session.status, new_status)

    for name in UPDATABLE_FIELDS:
        if name not in changes:
            continue
        value = changes[name]
        if name == "scheduled_at":
            value = as_utc(value)
        setattr(session, name, value)
    if new_status is not None and new_status != session.status:
        logger.info(
            "Session %s status %s -> %s by %s",
            session.id,
            session.status.value,
            new_status.value,
            actor.user_id,
        )
        session.status = new_status

    await db.commit()
    await db.refresh(session)
    return await hydrate(db, session)


async def transition_session(
    db: AsyncSession,
    *,
    actor: AuthUser,
    session_id: uuid.UUID,
    target: SessionStatus,
) -> HydratedSession:
    return await update_session(
        db, actor=actor, session_id=session_id, changes={"status": target}
    )


async def delete_session(
    db: AsyncSession, *, actor: AuthUser, session_id: uuid.UUID
) -> None:
    """Hard-delete a session with its attendance and exercise rows."""
    session = await get_session_or_404(db, session_id)
    await authorize_session(db, actor, session, Action.MANAGE_SESSION)

    await db.execute(delete(Attendance).where(Attendance.session_id == session_id))
    await db.execute(
        delete(SessionExercise).where(SessionExercise.session_id == session_id)
    )
    await db.delete(session)
    await db.commit()

    logger.info("Deleted session %s by %s", session_id, actor.user_id)
