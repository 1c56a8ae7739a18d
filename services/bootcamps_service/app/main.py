"""FastAPI application for the Bootcamps Service."""

from fastapi import FastAPI
from libs.common.middleware import add_observability_middleware
from services.bootcamps_service.routers import client_router, coach_router


def create_app() -> FastAPI:
    """Create and configure the Bootcamps Service FastAPI app."""
    app = FastAPI(
        title="FitCoach Bootcamps Service",
        version="0.1.0",
        description="Bootcamp scheduling and credit-backed registration.",
    )
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "bootcamps"}

    app.include_router(client_router)
    app.include_router(coach_router)

    return app


app = create_app()
