"""Credits Service models package.

IMPORTANT: Every model class AND enum must be listed here.
"""

from services.credits_service.models.credit_transaction import (  # noqa: F401
    REASON_MAX_LENGTH,
    CreditTransaction,
)
from services.credits_service.models.enums import CreditTransactionKind  # noqa: F401

__all__ = [
    "CreditTransactionKind",
    "CreditTransaction",
    "REASON_MAX_LENGTH",
]
