"""Credit ledger: atomic balance adjustments with row-level locking.

``apply_credit_delta`` is the only code path that writes ``users.credits``.
Every change inserts an immutable ``CreditTransaction`` carrying the balance
after the change, so ``sum(amount) == users.credits`` holds for every user.
"""

from datetime import datetime
from typing import NamedTuple, Optional

from fastapi import HTTPException, status
from libs.auth.dependencies import ensure_admin
from libs.auth.models import AuthUser
from libs.common.datetime_utils import parse_iso_datetime, utc_now
from libs.common.logging import get_logger
from pydantic import ValidationError
from services.credits_service.models import CreditTransaction, CreditTransactionKind
from services.credits_service.schemas import (
    AllocateCreditsRequest,
    CreatorInfo,
    CreditsSummaryResponse,
    CreditTransactionResponse,
    LedgerConsistencyResponse,
    MyCreditsResponse,
)
from services.members_service.models import User
from services.settings_service.models import AuditAction
from services.settings_service.services.audit_ops import log_audit_event
from sqlalchemy import desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

logger = get_logger(__name__)

RECENT_TRANSACTIONS_LIMIT = 5


class LedgerEntry(NamedTuple):
    transaction: CreditTransaction
    previous_balance: int
    new_balance: int


def insufficient_credits_detail(amount: int, balance: int) -> str:
    return f"Cannot deduct {abs(amount)} credits. User only has {balance} credits."


# ---------------------------------------------------------------------------
# Ledger primitive
# ---------------------------------------------------------------------------


async def apply_credit_delta(
    db: AsyncSession,
    *,
    user_id: int,
    amount: int,
    reason: str,
    kind: CreditTransactionKind,
    actor_id: int,
    expires_at: Optional[datetime] = None,
    reference_type: Optional[str] = None,
    reference_id: Optional[int] = None,
    commit: bool = True,
) -> LedgerEntry:
    """Atomically apply a signed credit change to a user's balance.

    1. SELECT FOR UPDATE on the user row
    2. Reject if the resulting balance would be negative
    3. Insert the ledger row with the balance snapshot
    4. Update ``users.credits``
    5. Commit (or only flush when ``commit=False`` so the caller can add
       more rows to the same unit of work)

    Any failure rolls the session back.
    """
    if amount == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Amount cannot be zero",
        )

    try:
        # populate_existing: the identity map may hold a stale balance
        result = await db.execute(
            select(User)
            .where(User.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
            )

        previous_balance = user.credits
        new_balance = previous_balance + amount
        if new_balance < 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=insufficient_credits_detail(amount, previous_balance),
            )

        txn = CreditTransaction(
            user_id=user_id,
            amount=amount,
            kind=kind,
            reason=reason,
            balance_after=new_balance,
            reference_type=reference_type,
            reference_id=reference_id,
            expires_at=expires_at,
            created_by_id=actor_id,
        )
        db.add(txn)

        user.credits = new_balance
        user.updated_at = utc_now()

        if commit:
            await db.commit()
            await db.refresh(txn)
        else:
            await db.flush()
    except (HTTPException, SQLAlchemyError):
        await db.rollback()
        raise

    logger.info(
        "Credits %+d (%s) user=%s balance %d→%d by %s",
        amount,
        kind.value,
        user_id,
        previous_balance,
        new_balance,
        actor_id,
    )
    return LedgerEntry(txn, previous_balance, new_balance)


# ---------------------------------------------------------------------------
# Admin allocation
# ---------------------------------------------------------------------------


def _validation_detail(exc: ValidationError) -> str:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"])
    message = error["msg"].removeprefix("Value error, ")
    return f"{field}: {message}" if field else message


async def allocate_credits(
    db: AsyncSession,
    *,
    actor: AuthUser,
    user_id: int,
    amount: int,
    reason: str,
    expiry_date: Optional[str] = None,
) -> LedgerEntry:
    """Grant (positive) or deduct (negative) credits on behalf of an admin.

    The ledger row, balance update and audit entry commit together.
    """
    ensure_admin(actor)

    try:
        request = AllocateCreditsRequest(
            user_id=user_id, amount=amount, reason=reason, expiry_date=expiry_date
        )
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=_validation_detail(exc)
        ) from exc

    expires_at = None
    if request.expiry_date:
        try:
            expires_at = parse_iso_datetime(request.expiry_date)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="expiry_date: Invalid ISO date",
            ) from exc

    kind = (
        CreditTransactionKind.ADMIN_ALLOCATION
        if request.amount > 0
        else CreditTransactionKind.ADMIN_DEDUCTION
    )
    entry = await apply_credit_delta(
        db,
        user_id=request.user_id,
        amount=request.amount,
        reason=request.reason,
        kind=kind,
        actor_id=actor.user_id,
        expires_at=expires_at,
        commit=False,
    )

    log_audit_event(
        db,
        action=(
            AuditAction.ALLOCATE_CREDITS
            if request.amount > 0
            else AuditAction.DEDUCT_CREDITS
        ),
        actor_id=actor.user_id,
        target_id=request.user_id,
        target_type="User",
        details={
            "amount": request.amount,
            "reason": request.reason,
            "previous_balance": entry.previous_balance,
            "new_balance": entry.new_balance,
            "expiry_date": request.expiry_date,
        },
    )
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise
    await db.refresh(entry.transaction)
    return entry


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def _get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id, populate_existing=True)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )
    return user


async def _transactions_with_creator(
    db: AsyncSession, user_id: int, limit: Optional[int] = None
) -> list[CreditTransactionResponse]:
    creator = aliased(User)
    query = (
        select(CreditTransaction, creator.name, creator.email)
        .outerjoin(creator, creator.id == CreditTransaction.created_by_id)
        .where(CreditTransaction.user_id == user_id)
        .order_by(desc(CreditTransaction.created_at), desc(CreditTransaction.id))
    )
    if limit is not None:
        query = query.limit(limit)
    result = await db.execute(query)

    transactions = []
    for txn, creator_name, creator_email in result.all():
        response = CreditTransactionResponse.model_validate(txn)
        if creator_email is not None:
            response.created_by = CreatorInfo(name=creator_name, email=creator_email)
        transactions.append(response)
    return transactions


async def get_credits_history(
    db: AsyncSession, *, actor: AuthUser, user_id: int
) -> list[CreditTransactionResponse]:
    """Full ledger for ``user_id``, newest first. Unknown users have none."""
    ensure_admin(actor)
    return await _transactions_with_creator(db, user_id)


async def get_credits_summary(
    db: AsyncSession, *, actor: AuthUser, user_id: int
) -> CreditsSummaryResponse:
    """Balance, all-time signed ledger total and the newest transactions."""
    ensure_admin(actor)

    user = await _get_user(db, user_id)
    total_allocated = (
        await db.execute(
            select(func.coalesce(func.sum(CreditTransaction.amount), 0)).where(
                CreditTransaction.user_id == user_id
            )
        )
    ).scalar_one()

    return CreditsSummaryResponse(
        current_balance=user.credits,
        total_allocated=total_allocated,
        recent_transactions=await _transactions_with_creator(
            db, user_id, limit=RECENT_TRANSACTIONS_LIMIT
        ),
    )


async def get_my_credits(db: AsyncSession, *, actor: AuthUser) -> MyCreditsResponse:
    """Balance and ledger of the authenticated user."""
    user = await _get_user(db, actor.user_id)
    return MyCreditsResponse(
        balance=user.credits,
        transactions=await _transactions_with_creator(db, actor.user_id),
    )


async def check_ledger_consistency(
    db: AsyncSession, *, actor: AuthUser, user_id: int
) -> LedgerConsistencyResponse:
    """Compare the cached balance with the sum of the user's ledger rows."""
    ensure_admin(actor)

    user = await _get_user(db, user_id)
    ledger_total = (
        await db.execute(
            select(func.coalesce(func.sum(CreditTransaction.amount), 0)).where(
                CreditTransaction.user_id == user_id
            )
        )
    ).scalar_one()

    consistent = ledger_total == user.credits
    if not consistent:
        logger.error(
            "Ledger drift for user %s: balance=%d ledger=%d",
            user_id,
            user.credits,
            ledger_total,
        )
    return LedgerConsistencyResponse(
        user_id=user_id,
        balance=user.credits,
        ledger_total=ledger_total,
        consistent=consistent,
    )
