import uuid
from datetime import datetime
from typing import List, Optional

from libs.common.schemas import APIModel
from pydantic import Field
from services.roster_service.models import TeamRole


# ============================================================================
# TEAMS
# ============================================================================


class TeamBase(APIModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None


class TeamCreate(TeamBase):
    sport_id: str = Field(..., min_length=1)


class TeamUpdate(APIModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class TeamResponse(TeamBase):
    id: uuid.UUID
    sport_id: str
    creator_id: str
    created_at: datetime
    updated_at: datetime
    member_count: int = 0


class TeamSummary(APIModel):
    id: uuid.UUID
    name: str


# ============================================================================
# MEMBERS
# ============================================================================


class MemberCreate(APIModel):
    team_id: uuid.UUID
    user_id: str = Field(..., min_length=1)
    role: TeamRole = TeamRole.PLAYER
    number: Optional[int] = Field(None, ge=0)
    position: Optional[str] = None


class MemberUpdate(APIModel):
    role: Optional[TeamRole] = None
    number: Optional[int] = Field(None, ge=0)
    position: Optional[str] = None


class MemberResponse(APIModel):
    id: uuid.UUID
    team_id: uuid.UUID
    user_id: str
    role: TeamRole
    number: Optional[int] = None
    position: Optional[str] = None
    joined_at: datetime


class TeamDetailResponse(TeamResponse):
    members: List[MemberResponse] = []


class MemberListResponse(APIModel):
    members: List[MemberResponse]
