"""Bootcamps Service schemas package."""

from services.bootcamps_service.schemas.bootcamp import (  # noqa: F401
    AttendanceChangeResponse,
    AttendeeCreate,
    AttendeeUser,
    AvailableBootcampResponse,
    BootcampAttendeeResponse,
    BootcampCreate,
    BootcampListResponse,
    BootcampResponse,
    BootcampUpdate,
)

__all__ = [
    "AttendanceChangeResponse",
    "AttendeeCreate",
    "AttendeeUser",
    "AvailableBootcampResponse",
    "BootcampAttendeeResponse",
    "BootcampCreate",
    "BootcampListResponse",
    "BootcampResponse",
    "BootcampUpdate",
]
