"""FastAPI application for the Settings Service."""

from fastapi import FastAPI
from libs.common.middleware import add_observability_middleware
from services.settings_service.routers import admin_router


def create_app() -> FastAPI:
    """Create and configure the Settings Service FastAPI app."""
    app = FastAPI(
        title="FitCoach Settings Service",
        version="0.1.0",
        description="System settings and audit trail for FitCoach admins.",
    )
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "settings"}

    # Gateway: /api/v1/admin/{path} → /admin/{path}
    app.include_router(admin_router)

    return app


app = create_app()
