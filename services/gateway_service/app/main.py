"""FastAPI application entrypoint for the team training gateway.

Mounts the roster, workouts and training routers in one ASGI application so
a single deployment serves the whole API.
"""

from __future__ import annotations

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.roster_service.routers import members_router, teams_router
from services.training_service.routers import (
    attendance_router,
    exercises_router as session_exercises_router,
    sessions_router,
)
from services.workouts_service.routers import (
    exercises_router as workout_exercises_router,
    workouts_router,
)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    settings = get_settings()

    app = FastAPI(
        title="Team Training Gateway",
        version="0.1.0",
        description="Rosters, workout templates, training sessions and attendance.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Add global exception handlers for consistent error responses
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple readiness endpoint."""
        return {"status": "ok"}

    # Roster
    app.include_router(teams_router)
    app.include_router(members_router)

    # Workout templates
    app.include_router(workouts_router)
    app.include_router(workout_exercises_router)

    # Sessions and attendance
    app.include_router(sessions_router)
    app.include_router(attendance_router)
    app.include_router(session_exercises_router)

    return app


app = create_app()
