"""Settings Service models package.

IMPORTANT: Every model class AND enum must be listed here.
"""

from services.settings_service.models.enums import AuditAction  # noqa: F401
from services.settings_service.models.settings import (  # noqa: F401
    AuditLog,
    SystemSetting,
)

__all__ = [
    "AuditAction",
    "AuditLog",
    "SystemSetting",
]
