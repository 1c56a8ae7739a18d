"""Credits Service schemas package."""

from services.credits_service.schemas.credits import (  # noqa: F401
    AllocateCreditsRequest,
    AllocateCreditsResponse,
    CreatorInfo,
    CreditsHistoryResponse,
    CreditsSummaryResponse,
    CreditTransactionResponse,
    LedgerConsistencyResponse,
    MyCreditsResponse,
)

__all__ = [
    "AllocateCreditsRequest",
    "AllocateCreditsResponse",
    "CreatorInfo",
    "CreditsHistoryResponse",
    "CreditsSummaryResponse",
    "CreditTransactionResponse",
    "LedgerConsistencyResponse",
    "MyCreditsResponse",
]
