"""Enums for the Settings Service models."""

import enum


class AuditAction(str, enum.Enum):
    """Action tags written to the audit log."""

    ALLOCATE_CREDITS = "ALLOCATE_CREDITS"
    DEDUCT_CREDITS = "DEDUCT_CREDITS"
    UPDATE_SYSTEM_SETTINGS = "UPDATE_SYSTEM_SETTINGS"
    UPDATE_CHECK_IN_FREQUENCY = "UPDATE_CHECK_IN_FREQUENCY"
