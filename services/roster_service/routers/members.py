import uuid

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.roster_service.schemas import (
    MemberCreate,
    MemberListResponse,
    MemberResponse,
    MemberUpdate,
)
from services.roster_service.services import roster_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/team-members", tags=["team-members"])


@router.get("", response_model=MemberListResponse)
async def list_team_members(
    team_id: uuid.UUID = Query(..., alias="teamId"),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """List a team's role-rows, ordered by role, jersey number and join date."""
    members = await roster_ops.list_members(db, actor=current_user, team_id=team_id)
    return MemberListResponse(
        members=[MemberResponse.model_validate(m) for m in members]
    )


@router.post("", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def add_team_member(
    member_in: MemberCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Add a user to a team in a given role.

    Returns 409 if the user already holds exactly this role on the team.
    """
    return await roster_ops.add_member(
        db,
        actor=current_user,
        team_id=member_in.team_id,
        user_id=member_in.user_id,
        role=member_in.role,
        number=member_in.number,
        position=member_in.position,
    )


@router.patch("/{member_id}", response_model=MemberResponse)
async def update_team_member(
    member_id: uuid.UUID,
    member_in: MemberUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Update role, jersey number or position.

    Demoting the team's last leader is rejected with 400.
    """
    return await roster_ops.update_member(
        db,
        actor=current_user,
        member_id=member_id,
        changes=member_in.model_dump(exclude_unset=True),
    )


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_team_member(
    member_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Remove a role-row. Rejected with 400 for the team's only member or only
    leader.
    """
    await roster_ops.remove_member(db, actor=current_user, member_id=member_id)
