"""Bootcamps Service models package.

IMPORTANT: Every model class must be listed here.
"""

from services.bootcamps_service.models.bootcamp import (  # noqa: F401
    BOOTCAMP_CREDIT_COST,
    Bootcamp,
    BootcampAttendee,
)

__all__ = [
    "BOOTCAMP_CREDIT_COST",
    "Bootcamp",
    "BootcampAttendee",
]
