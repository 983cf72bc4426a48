"""Roster service routers."""

from services.roster_service.routers.members import router as members_router
from services.roster_service.routers.teams import router as teams_router

__all__ = [
    "members_router",
    "teams_router",
]
