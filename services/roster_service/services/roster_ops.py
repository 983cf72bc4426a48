"""Roster operations: teams, members and the leadership invariant.

Invariant: a team that has members keeps at least one, and a team that has
a leadership-role member keeps at least one. Every operation that could
break it locks the team row first, re-reads the member under that lock,
checks, writes and commits in the same transaction.
"""

import uuid
from typing import Any, Optional

from libs.auth.models import AuthUser
from libs.common.errors import Conflict, InvariantViolation, NotFound, ValidationFailed
from libs.common.logging import get_logger
from services.roster_service.models import (
    LEADERSHIP_ROLES,
    Team,
    TeamMember,
    TeamRole,
    is_leadership_role,
)
from services.roster_service.policy import Action, ensure, load_team_context
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

LAST_MEMBER = (
    "last member: cannot remove the only member of a team, delete the team instead"
)
LAST_LEADER = "last leader: a team must keep at least one leadership-role member"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _commit_or_conflict(db: AsyncSession, detail: str) -> None:
    """Commit, remapping unique-constraint races to Conflict."""
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info("Integrity error on commit remapped to Conflict: %s", detail)
        raise Conflict(detail)


async def _team_id_of_member(db: AsyncSession, member_id: uuid.UUID) -> uuid.UUID:
    team_id = (
        await db.execute(select(TeamMember.team_id).where(TeamMember.id == member_id))
    ).scalar_one_or_none()
    if team_id is None:
        raise NotFound("Team member not found")
    return team_id


async def _get_member(db: AsyncSession, member_id: uuid.UUID) -> TeamMember:
    member = (
        await db.execute(
            select(TeamMember)
            .where(TeamMember.id == member_id)
            .execution_options(populate_existing=True)
        )
    ).scalar_one_or_none()
    if member is None:
        raise NotFound("Team member not found")
    return member


async def count_members(db: AsyncSession, team_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count(TeamMember.id)).where(TeamMember.team_id == team_id)
    )
    return result.scalar_one()


async def count_leaders(
    db: AsyncSession,
    team_id: uuid.UUID,
    *,
    exclude_member_id: Optional[uuid.UUID] = None,
) -> int:
    query = select(func.count(TeamMember.id)).where(
        TeamMember.team_id == team_id,
        TeamMember.role.in_(list(LEADERSHIP_ROLES)),
    )
    if exclude_member_id is not None:
        query = query.where(TeamMember.id != exclude_member_id)
    return (await db.execute(query)).scalar_one()


async def _role_row_exists(
    db: AsyncSession, team_id: uuid.UUID, user_id: str, role: TeamRole
) -> bool:
    result = await db.execute(
        select(TeamMember.id).where(
            TeamMember.team_id == team_id,
            TeamMember.user_id == user_id,
            TeamMember.role == role,
        )
    )
    return result.first() is not None


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------


async def create_team(
    db: AsyncSession,
    *,
    actor: AuthUser,
    name: str,
    sport_id: str,
    description: Optional[str] = None,
) -> Team:
    """Create a team with the creator as its first COACH."""
    team = Team(
        name=name,
        sport_id=sport_id,
        description=description,
        creator_id=actor.user_id,
    )
    db.add(team)
    await db.flush()
    db.add(TeamMember(team_id=team.id, user_id=actor.user_id, role=TeamRole.COACH))
    await db.commit()
    await db.refresh(team)

    logger.info("Created team %s (%s) for %s", team.id, team.name, actor.user_id)
    return team


async def list_teams(
    db: AsyncSession, *, actor: AuthUser, my_teams: bool = False
) -> list[tuple[Team, int]]:
    """List teams with their member counts, newest first."""
    member_count = (
        select(func.count(TeamMember.id))
        .where(TeamMember.team_id == Team.id)
        .correlate(Team)
        .scalar_subquery()
    )
    query = select(Team, member_count).order_by(Team.created_at.desc())
    if my_teams:
        query = query.where(
            Team.id.in_(
                select(TeamMember.team_id).where(TeamMember.user_id == actor.user_id)
            )
        )
    result = await db.execute(query)
    return [(team, count) for team, count in result.all()]


async def get_team(
    db: AsyncSession, *, actor: AuthUser, team_id: uuid.UUID
) -> tuple[Team, list[TeamMember]]:
    ctx = await load_team_context(db, actor, team_id)
    ensure(actor, Action.VIEW_TEAM, ctx)

    team = await db.get(Team, team_id)
    members = await _members_of(db, team_id)
    return team, members


async def update_team(
    db: AsyncSession, *, actor: AuthUser, team_id: uuid.UUID, changes: dict[str, Any]
) -> Team:
    if "name" in changes and changes["name"] is None:
        raise ValidationFailed("name cannot be null")
    ctx = await load_team_context(db, actor, team_id)
    ensure(actor, Action.MANAGE_TEAM, ctx)

    team = await db.get(Team, team_id)
    for field, value in changes.items():
        setattr(team, field, value)
    await db.commit()
    await db.refresh(team)
    return team


async def delete_team(db: AsyncSession, *, actor: AuthUser, team_id: uuid.UUID) -> None:
    """Hard-delete a team with its roster and sessions.

    Team workouts survive as personal templates of their creators.
    """
    # Import here to avoid circular imports
    from services.training_service.models import (
        Attendance,
        SessionExercise,
        TrainingSession,
    )
    from services.workouts_service.models import Workout

    ctx = await load_team_context(db, actor, team_id, lock=True)
    ensure(actor, Action.MANAGE_TEAM, ctx)

    session_ids = select(TrainingSession.id).where(TrainingSession.team_id == team_id)
    await db.execute(delete(Attendance).where(Attendance.session_id.in_(session_ids)))
    await db.execute(
        delete(SessionExercise).where(SessionExercise.session_id.in_(session_ids))
    )
    await db.execute(delete(TrainingSession).where(TrainingSession.team_id == team_id))
    await db.execute(delete(TeamMember).where(TeamMember.team_id == team_id))
    await db.execute(
        update(Workout).where(Workout.team_id == team_id).values(team_id=None)
    )
    await db.execute(delete(Team).where(Team.id == team_id))
    await db.commit()

    logger.info("Deleted team %s by %s", team_id, actor.user_id)


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


async def _members_of(db: AsyncSession, team_id: uuid.UUID) -> list[TeamMember]:
    result = await db.execute(
        select(TeamMember)
        .where(TeamMember.team_id == team_id)
        .order_by(TeamMember.role, TeamMember.number, TeamMember.joined_at)
    )
    return list(result.scalars().all())


async def list_members(
    db: AsyncSession, *, actor: AuthUser, team_id: uuid.UUID
) -> list[TeamMember]:
    ctx = await load_team_context(db, actor, team_id)
    ensure(actor, Action.VIEW_TEAM, ctx)
    return await _members_of(db, team_id)


async def add_member(
    db: AsyncSession,
    *,
    actor: AuthUser,
    team_id: uuid.UUID,
    user_id: str,
    role: TeamRole = TeamRole.PLAYER,
    number: Optional[int] = None,
    position: Optional[str] = None,
) -> TeamMember:
    """Add a role-row for ``user_id``. Conflict if that exact role exists."""
    ctx = await load_team_context(db, actor, team_id)
    ensure(actor, Action.MANAGE_ROSTER, ctx)

    duplicate = f"User {user_id} already holds role {role.value} on this team"
    if await _role_row_exists(db, team_id, user_id, role):
        raise Conflict(duplicate)

    member = TeamMember(
        team_id=team_id,
        user_id=user_id,
        role=role,
        number=number,
        position=position or None,
    )
    db.add(member)
    await _commit_or_conflict(db, duplicate)
    await db.refresh(member)

    logger.info(
        "Added %s as %s to team %s (by %s)",
        user_id,
        role.value,
        team_id,
        actor.user_id,
    )
    return member


async def update_member(
    db: AsyncSession,
    *,
    actor: AuthUser,
    member_id: uuid.UUID,
    changes: dict[str, Any],
) -> TeamMember:
    """Change role, number or position of a role-row.

    Demoting the team's last leadership-role row fails with
    InvariantViolation and leaves the row untouched.
    """
    if "role" in changes and changes["role"] is None:
        raise ValidationFailed("role cannot be null")
    team_id = await _team_id_of_member(db, member_id)
    ctx = await load_team_context(db, actor, team_id, lock=True)
    try:
        ensure(actor, Action.MANAGE_ROSTER, ctx)
        member = await _get_member(db, member_id)

        new_role = changes.get("role")
        if new_role is not None and new_role != member.role:
            new_role = TeamRole(new_role)
            if is_leadership_role(member.role) and not is_leadership_role(new_role):
                if await count_leaders(db, team_id, exclude_member_id=member.id) == 0:
                    logger.info(
                        "Refused to demote last leader %s on team %s", member.id, team_id
                    )
                    raise InvariantViolation(LAST_LEADER)
            if await _role_row_exists(db, team_id, member.user_id, new_role):
                raise Conflict(
                    f"User {member.user_id} already holds role {new_role.value} on this team"
                )
            member.role = new_role
    except Exception:
        await db.rollback()
        raise

    if "number" in changes:
        member.number = changes["number"]
    if "position" in changes:
        member.position = changes["position"] or None

    await _commit_or_conflict(db, "Team member update conflicts with an existing role")
    await db.refresh(member)
    return member


async def remove_member(
    db: AsyncSession, *, actor: AuthUser, member_id: uuid.UUID
) -> None:
    """Delete one role-row.

    Attendance rows that reference it are kept; they fall back to the
    user/role snapshot taken when the session was scheduled.
    """
    # Import here to avoid circular imports
    from services.training_service.models import Attendance

    team_id = await _team_id_of_member(db, member_id)
    ctx = await load_team_context(db, actor, team_id, lock=True)
    try:
        ensure(actor, Action.MANAGE_ROSTER, ctx)
        member = await _get_member(db, member_id)

        if await count_members(db, team_id) <= 1:
            raise ValidationFailed(LAST_MEMBER)
        if is_leadership_role(member.role):
            if await count_leaders(db, team_id, exclude_member_id=member.id) == 0:
                logger.info(
                    "Refused to remove last leader %s on team %s", member.id, team_id
                )
                raise InvariantViolation(LAST_LEADER)
    except Exception:
        await db.rollback()
        raise

    await db.execute(
        update(Attendance).where(Attendance.member_id == member_id).values(member_id=None)
    )
    await db.delete(member)
    await db.commit()

    logger.info(
        "Removed %s (%s) from team %s (by %s)",
        member.user_id,
        member.role.value,
        team_id,
        actor.user_id,
    )
