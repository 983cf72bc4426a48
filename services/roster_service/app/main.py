"""FastAPI application for the Roster Service."""
from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()

from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.roster_service.routers import members_router, teams_router


def create_app() -> FastAPI:
    """Create and configure the Roster Service FastAPI app."""
    app = FastAPI(
        title="Team Training Roster Service",
        version="0.1.0",
        description="Teams, team members and the leadership invariant.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "roster"}

    app.include_router(teams_router)
    app.include_router(members_router)

    return app


app = create_app()
