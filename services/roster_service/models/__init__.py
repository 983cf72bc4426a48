"""Roster Service models package."""

from services.roster_service.models.core import Team, TeamMember
from services.roster_service.models.enums import (
    LEADERSHIP_ROLES,
    TeamRole,
    is_leadership_role,
)

__all__ = [
    "LEADERSHIP_ROLES",
    "Team",
    "TeamMember",
    "TeamRole",
    "is_leadership_role",
]
