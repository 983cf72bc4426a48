import uuid
from typing import List

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.roster_service.schemas import (
    MemberResponse,
    TeamCreate,
    TeamDetailResponse,
    TeamResponse,
    TeamUpdate,
)
from services.roster_service.services import roster_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/teams", tags=["teams"])


@router.get("", response_model=List[TeamResponse])
async def list_teams(
    my_teams: bool = Query(False, alias="myTeams"),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    List teams, newest first. ``myTeams=true`` limits to teams the caller
    belongs to.
    """
    rows = await roster_ops.list_teams(db, actor=current_user, my_teams=my_teams)
    responses = []
    for team, member_count in rows:
        resp = TeamResponse.model_validate(team)
        resp.member_count = member_count
        responses.append(resp)
    return responses


@router.post("", response_model=TeamResponse, status_code=status.HTTP_201_CREATED)
async def create_team(
    team_in: TeamCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Create a team. The caller becomes its first coach.
    """
    team = await roster_ops.create_team(
        db,
        actor=current_user,
        name=team_in.name,
        sport_id=team_in.sport_id,
        description=team_in.description,
    )
    resp = TeamResponse.model_validate(team)
    resp.member_count = 1
    return resp


@router.get("/{team_id}", response_model=TeamDetailResponse)
async def get_team(
    team_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get a team with its roster (members only)."""
    team, members = await roster_ops.get_team(db, actor=current_user, team_id=team_id)
    resp = TeamDetailResponse.model_validate(team)
    resp.members = [MemberResponse.model_validate(m) for m in members]
    resp.member_count = len(members)
    return resp


@router.patch("/{team_id}", response_model=TeamResponse)
async def update_team(
    team_id: uuid.UUID,
    team_in: TeamUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Rename or re-describe a team (leaders and creator)."""
    team = await roster_ops.update_team(
        db,
        actor=current_user,
        team_id=team_id,
        changes=team_in.model_dump(exclude_unset=True),
    )
    resp = TeamResponse.model_validate(team)
    resp.member_count = await roster_ops.count_members(db, team.id)
    return resp


@router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_team(
    team_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Delete a team together with its roster and training sessions.
    """
    await roster_ops.delete_team(db, actor=current_user, team_id=team_id)
