"""Settings service routers."""

from services.settings_service.routers.admin import router as admin_router

__all__ = ["admin_router"]
