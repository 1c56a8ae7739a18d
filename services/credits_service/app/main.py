"""FastAPI application for the Credits Service."""

from fastapi import FastAPI
from libs.common.middleware import add_observability_middleware
from services.credits_service.routers import admin_router, member_router


def create_app() -> FastAPI:
    """Create and configure the Credits Service FastAPI app."""
    app = FastAPI(
        title="FitCoach Credits Service",
        version="0.1.0",
        description="Credit ledger: admin allocation, history and member balance.",
    )
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "credits"}

    # Gateway: /api/v1/admin/credits/{path} → /admin/credits/{path}
    app.include_router(admin_router)
    app.include_router(member_router)

    return app


app = create_app()
