"""FastAPI application for the Workouts Service."""
from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()

from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.workouts_service.routers import exercises_router, workouts_router


def create_app() -> FastAPI:
    """Create and configure the Workouts Service FastAPI app."""
    app = FastAPI(
        title="Team Training Workouts Service",
        version="0.1.0",
        description="Reusable training-plan templates.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "workouts"}

    app.include_router(workouts_router)
    app.include_router(exercises_router)

    return app


app = create_app()
