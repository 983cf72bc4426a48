"""Workouts service routers."""

from services.workouts_service.routers.exercises import router as exercises_router
from services.workouts_service.routers.workouts import router as workouts_router

__all__ = [
    "exercises_router",
    "workouts_router",
]
