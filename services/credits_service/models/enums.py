"""Enums for the Credits Service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class CreditTransactionKind(str, enum.Enum):
    ADMIN_ALLOCATION = "admin_allocation"
    ADMIN_DEDUCTION = "admin_deduction"
    BOOTCAMP_REGISTRATION = "bootcamp_registration"
    BOOTCAMP_REFUND = "bootcamp_refund"
