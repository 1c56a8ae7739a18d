"""Bootcamps Service routers package."""

from services.bootcamps_service.routers.client import router as client_router
from services.bootcamps_service.routers.coach import router as coach_router

__all__ = ["client_router", "coach_router"]
