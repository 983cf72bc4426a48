"""Authorization policy for every team-scoped operation.

``can()`` is pure: it only looks at the actor and an already-loaded context,
so it can be unit tested without a database. Routers and service operations
load the context with ``load_team_context`` and call ``ensure``.
"""

import enum
import uuid
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Union

from libs.auth.models import AuthUser
from libs.common.errors import Forbidden, NotFound
from services.roster_service.models import Team, TeamMember, TeamRole, is_leadership_role
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


class Action(str, enum.Enum):
    VIEW_TEAM = "view_team"
    MANAGE_TEAM = "manage_team"
    MANAGE_ROSTER = "manage_roster"
    SCHEDULE_SESSION = "schedule_session"
    MANAGE_SESSION = "manage_session"
    VIEW_SESSION = "view_session"
    MARK_ATTENDANCE = "mark_attendance"
    VIEW_WORKOUT = "view_workout"
    MANAGE_WORKOUT = "manage_workout"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


@dataclass(frozen=True)
class TeamContext:
    """What the policy needs to know about a team relative to the actor."""

    team_id: uuid.UUID
    creator_id: str
    actor_roles: FrozenSet[TeamRole] = field(default_factory=frozenset)

    @property
    def is_member(self) -> bool:
        return bool(self.actor_roles)

    @property
    def is_leader(self) -> bool:
        return any(is_leadership_role(role) for role in self.actor_roles)


@dataclass(frozen=True)
class WorkoutContext:
    creator_id: str
    is_public: bool = False
    team: Optional[TeamContext] = None


Resource = Union[TeamContext, WorkoutContext]

# Actions where the team creator is trusted even without a current role-row
_CREATOR_ACTIONS = frozenset({Action.VIEW_TEAM, Action.MANAGE_TEAM, Action.MANAGE_ROSTER})

_LEADER_ACTIONS = frozenset(
    {
        Action.MANAGE_TEAM,
        Action.MANAGE_ROSTER,
        Action.SCHEDULE_SESSION,
        Action.MANAGE_SESSION,
        Action.MARK_ATTENDANCE,
    }
)

_MEMBER_ACTIONS = frozenset({Action.VIEW_TEAM, Action.VIEW_SESSION})

_DENIAL_REASONS = {
    Action.VIEW_TEAM: "You don't have access to this team",
    Action.MANAGE_TEAM: "Only team leaders can modify this team",
    Action.MANAGE_ROSTER: "Only team leaders can manage team members",
    Action.SCHEDULE_SESSION: "You must be a coach of this team to create training sessions",
    Action.MANAGE_SESSION: "You must be a coach of this team to modify training sessions",
    Action.VIEW_SESSION: "You do not have access to this training session",
    Action.MARK_ATTENDANCE: "You must be a coach of this team to update attendance",
    Action.VIEW_WORKOUT: "You don't have permission to view this workout",
    Action.MANAGE_WORKOUT: "You don't have permission to modify this workout",
}


def _deny(action: Action) -> Decision:
    return Decision(False, _DENIAL_REASONS[action])


def _can_on_team(actor: AuthUser, action: Action, team: TeamContext) -> Decision:
    if action in _CREATOR_ACTIONS and team.creator_id == actor.user_id:
        return ALLOW
    if action in _LEADER_ACTIONS and team.is_leader:
        return ALLOW
    if action in _MEMBER_ACTIONS and team.is_member:
        return ALLOW
    return _deny(action)


def _can_on_workout(actor: AuthUser, action: Action, workout: WorkoutContext) -> Decision:
    if workout.creator_id == actor.user_id:
        return ALLOW
    if action == Action.VIEW_WORKOUT:
        if workout.is_public or (workout.team is not None and workout.team.is_member):
            return ALLOW
    elif action == Action.MANAGE_WORKOUT:
        if workout.team is not None and workout.team.is_leader:
            return ALLOW
    return _deny(action)


def can(actor: AuthUser, action: Action, resource: Resource) -> Decision:
    """Decide whether ``actor`` may perform ``action`` on ``resource``.

    Platform admins may do everything. Otherwise:

    - team creators may view and manage their team and its roster;
    - leadership-role members may manage the roster, sessions and attendance;
    - any member may view the team and its sessions;
    - workouts are visible to their creator, their team and everyone when
      public, and editable by their creator and their team's leaders.
    """
    if actor.is_admin:
        return ALLOW
    if isinstance(resource, WorkoutContext):
        if action not in (Action.VIEW_WORKOUT, Action.MANAGE_WORKOUT):
            return _deny(action)
        return _can_on_workout(actor, action, resource)
    return _can_on_team(actor, action, resource)


def ensure(actor: AuthUser, action: Action, resource: Resource) -> None:
    """Raise Forbidden unless ``can`` allows the action."""
    decision = can(actor, action, resource)
    if not decision:
        raise Forbidden(decision.reason)


async def load_team_context(
    db: AsyncSession,
    actor: AuthUser,
    team_id: uuid.UUID,
    *,
    lock: bool = False,
) -> TeamContext:
    """Load the team and the actor's role-rows on it.

    With ``lock=True`` the team row is selected FOR UPDATE, serialising every
    roster mutation on the same team until the caller commits.
    """
    query = select(Team).where(Team.id == team_id)
    if lock:
        query = query.with_for_update()
    team = (await db.execute(query)).scalar_one_or_none()
    if team is None:
        raise NotFound("Team not found")

    roles = await db.execute(
        select(TeamMember.role).where(
            TeamMember.team_id == team_id,
            TeamMember.user_id == actor.user_id,
        )
    )
    return TeamContext(
        team_id=team.id,
        creator_id=team.creator_id,
        actor_roles=frozenset(roles.scalars().all()),
    )
