"""Enum definitions for members service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class CohortStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class MembershipStatus(str, enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    INACTIVE = "inactive"


class FrequencySource(str, enum.Enum):
    """Which level of the override chain produced a check-in frequency."""

    USER = "user"
    COHORT = "cohort"
    SYSTEM = "system"
