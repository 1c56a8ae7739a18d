"""Members service routers package."""

from services.members_service.routers.checkin import router as checkin_router
from services.members_service.routers.cohorts import router as cohorts_router

__all__ = [
    "checkin_router",
    "cohorts_router",
]
