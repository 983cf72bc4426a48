"""Training service routers."""

from services.training_service.routers.attendance import router as attendance_router
from services.training_service.routers.exercises import router as exercises_router
from services.training_service.routers.sessions import router as sessions_router

__all__ = [
    "attendance_router",
    "exercises_router",
    "sessions_router",
]
