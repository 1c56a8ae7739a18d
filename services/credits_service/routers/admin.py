"""Admin credit allocation and ledger endpoints."""

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.credits_service.schemas import (
    AllocateCreditsRequest,
    AllocateCreditsResponse,
    CreditsHistoryResponse,
    CreditsSummaryResponse,
    CreditTransactionResponse,
    LedgerConsistencyResponse,
)
from services.credits_service.services.ledger_ops import (
    allocate_credits,
    check_ledger_consistency,
    get_credits_history,
    get_credits_summary,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin/credits", tags=["admin-credits"])


@router.post(
    "/allocate",
    response_model=AllocateCreditsResponse,
    status_code=status.HTTP_201_CREATED,
)
async def admin_allocate_credits(
    request: AllocateCreditsRequest,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Grant or deduct credits. Negative amounts deduct."""
    entry = await allocate_credits(
        db,
        actor=admin,
        user_id=request.user_id,
        amount=request.amount,
        reason=request.reason,
        expiry_date=request.expiry_date,
    )
    return AllocateCreditsResponse(
        transaction=CreditTransactionResponse.model_validate(entry.transaction),
        new_balance=entry.new_balance,
    )


@router.get("/users/{user_id}/history", response_model=CreditsHistoryResponse)
async def admin_credits_history(
    user_id: int,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    transactions = await get_credits_history(db, actor=admin, user_id=user_id)
    return CreditsHistoryResponse(transactions=transactions, total=len(transactions))


@router.get("/users/{user_id}/summary", response_model=CreditsSummaryResponse)
async def admin_credits_summary(
    user_id: int,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await get_credits_summary(db, actor=admin, user_id=user_id)


@router.get(
    "/users/{user_id}/consistency", response_model=LedgerConsistencyResponse
)
async def admin_ledger_consistency(
    user_id: int,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Cached balance vs. ledger sum for one user."""
    return await check_ledger_consistency(db, actor=admin, user_id=user_id)
