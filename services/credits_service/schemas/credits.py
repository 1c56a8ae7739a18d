"""Credit ledger request/response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from services.credits_service.models.enums import CreditTransactionKind


class AllocateCreditsRequest(BaseModel):
    user_id: int = Field(..., gt=0)
    amount: int = Field(..., description="Positive to grant, negative to deduct")
    reason: str = Field(..., min_length=1, max_length=200)
    expiry_date: Optional[str] = Field(None, description="ISO date or datetime")

    @field_validator("amount")
    @classmethod
    def amount_not_zero(cls, v: int) -> int:
        if v == 0:
            raise ValueError("Amount cannot be zero")
        return v


class CreatorInfo(BaseModel):
    name: Optional[str] = None
    email: str


class CreditTransactionResponse(BaseModel):
    id: int
    user_id: int
    amount: int
    kind: CreditTransactionKind
    reason: str
    balance_after: int
    reference_type: Optional[str] = None
    reference_id: Optional[int] = None
    expires_at: Optional[datetime] = None
    created_by_id: int
    created_at: datetime
    created_by: Optional[CreatorInfo] = None

    model_config = ConfigDict(from_attributes=True)


class AllocateCreditsResponse(BaseModel):
    transaction: CreditTransactionResponse
    new_balance: int


class CreditsHistoryResponse(BaseModel):
    transactions: list[CreditTransactionResponse]
    total: int


class CreditsSummaryResponse(BaseModel):
    current_balance: int
    total_allocated: int
    recent_transactions: list[CreditTransactionResponse]


class LedgerConsistencyResponse(BaseModel):
    user_id: int
    balance: int
    ledger_total: int
    consistent: bool


class MyCreditsResponse(BaseModel):
    balance: int
    transactions: list[CreditTransactionResponse]
