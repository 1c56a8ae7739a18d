"""Settings Service schemas package."""

from services.settings_service.schemas.settings import (  # noqa: F401
    DEFAULT_CHECK_IN_FREQUENCY_DAYS,
    AuditLogEntry,
    AuditLogListResponse,
    SystemSettingsSnapshot,
    SystemSettingsUpdate,
)

__all__ = [
    "DEFAULT_CHECK_IN_FREQUENCY_DAYS",
    "AuditLogEntry",
    "AuditLogListResponse",
    "SystemSettingsSnapshot",
    "SystemSettingsUpdate",
]
