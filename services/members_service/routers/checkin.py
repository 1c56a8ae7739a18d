"""Check-in frequency endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.dependencies import get_current_user, require_coach
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.members_service.schemas import (
    CheckInFrequencyConfig,
    CheckInFrequencyUpdate,
    CohortResponse,
    EffectiveFrequencyResponse,
    MemberFrequencyResponse,
    MemberFrequencyUpdate,
    UserFrequencyResponse,
)
from services.members_service.services.checkin_frequency import (
    get_check_in_frequency_config,
    get_effective_check_in_frequency,
    get_member_effective_frequency,
    update_cohort_check_in_frequency,
    update_member_check_in_frequency,
    update_user_check_in_frequency,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/checkin", tags=["checkin"])


def _ensure_can_view(current_user: AuthUser, user_id: int) -> None:
    """Clients may only look at their own cadence."""
    if not current_user.is_staff and current_user.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to view another user's check-in frequency",
        )


@router.get("/frequency/{user_id}", response_model=EffectiveFrequencyResponse)
async def read_effective_frequency(
    user_id: int,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Effective days between check-ins (user > cohort > system)."""
    _ensure_can_view(current_user, user_id)
    days = await get_effective_check_in_frequency(db, user_id)
    return EffectiveFrequencyResponse(user_id=user_id, frequency_days=days)


@router.get("/frequency/{user_id}/config", response_model=CheckInFrequencyConfig)
async def read_frequency_config(
    user_id: int,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Every level of the override chain for display."""
    _ensure_can_view(current_user, user_id)
    return await get_check_in_frequency_config(db, user_id)


@router.put("/users/{user_id}/frequency", response_model=UserFrequencyResponse)
async def set_user_frequency(
    user_id: int,
    body: CheckInFrequencyUpdate,
    coach: AuthUser = Depends(require_coach),
    db: AsyncSession = Depends(get_async_db),
):
    """Set or clear a user-level override."""
    return await update_user_check_in_frequency(
        db, actor=coach, user_id=user_id, days=body.days
    )


@router.put("/cohorts/{cohort_id}/frequency", response_model=CohortResponse)
async def set_cohort_frequency(
    cohort_id: int,
    body: CheckInFrequencyUpdate,
    coach: AuthUser = Depends(require_coach),
    db: AsyncSession = Depends(get_async_db),
):
    """Set or clear a cohort-level override."""
    return await update_cohort_check_in_frequency(
        db, actor=coach, cohort_id=cohort_id, days=body.days
    )


@router.get("/members/{member_id}/frequency", response_model=MemberFrequencyResponse)
async def read_member_frequency(
    member_id: int,
    coach: AuthUser = Depends(require_coach),
    db: AsyncSession = Depends(get_async_db),
):
    """Effective frequency and its source; unknown members get 1 day / system."""
    return await get_member_effective_frequency(db, actor=coach, member_id=member_id)


@router.put("/members/{member_id}/frequency", response_model=UserFrequencyResponse)
async def set_member_frequency(
    member_id: int,
    body: MemberFrequencyUpdate,
    coach: AuthUser = Depends(require_coach),
    db: AsyncSession = Depends(get_async_db),
):
    """Per-client override on a weekly scale (1-7 days)."""
    return await update_member_check_in_frequency(
        db, actor=coach, member_id=member_id, frequency_days=body.frequency_days
    )
