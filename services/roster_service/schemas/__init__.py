"""Roster Service schemas package."""

from services.roster_service.schemas.main import (
    MemberCreate,
    MemberListResponse,
    MemberResponse,
    MemberUpdate,
    TeamCreate,
    TeamDetailResponse,
    TeamResponse,
    TeamSummary,
    TeamUpdate,
)

__all__ = [
    "MemberCreate",
    "MemberListResponse",
    "MemberResponse",
    "MemberUpdate",
    "TeamCreate",
    "TeamDetailResponse",
    "TeamResponse",
    "TeamSummary",
    "TeamUpdate",
]
