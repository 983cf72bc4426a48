"""Enum definitions for roster service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class TeamRole(str, enum.Enum):
    COACH = "COACH"
    TRAINER = "TRAINER"
    ASSISTANT_COACH = "ASSISTANT_COACH"
    PLAYER = "PLAYER"
    PARENT = "PARENT"
    VOLUNTEER = "VOLUNTEER"


LEADERSHIP_ROLES = frozenset(
    {TeamRole.COACH, TeamRole.TRAINER, TeamRole.ASSISTANT_COACH}
)


def is_leadership_role(role) -> bool:
    """Single source of truth for which roles lead a team."""
    try:
        return TeamRole(role) in LEADERSHIP_ROLES
    except ValueError:
        return False
