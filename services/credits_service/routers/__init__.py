"""Credits Service routers package."""

from services.credits_service.routers.admin import router as admin_router
from services.credits_service.routers.member import router as member_router

__all__ = ["admin_router", "member_router"]
