"""FastAPI application for the Training Service."""
from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()

from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.training_service.routers import (
    attendance_router,
    exercises_router,
    sessions_router,
)


def create_app() -> FastAPI:
    """Create and configure the Training Service FastAPI app."""
    app = FastAPI(
        title="Team Training Sessions Service",
        version="0.1.0",
        description="Session scheduling, session lifecycle and attendance.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "training"}

    app.include_router(sessions_router)
    app.include_router(attendance_router)
    app.include_router(exercises_router)

    return app


app = create_app()
