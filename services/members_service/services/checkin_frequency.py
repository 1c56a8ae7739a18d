"""Check-in frequency resolution.

The number of days between expected check-ins is resolved through an
override chain, first defined value wins:

1. ``users.check_in_frequency_days``
2. ``cohorts.check_in_frequency_days`` of the user's ACTIVE membership
3. system setting ``defaultCheckInFrequencyDays`` (missing, unparseable or
   non-positive falls back to 7)

Nothing is cached; every call re-reads all three levels.
"""

from typing import Optional

from fastapi import HTTPException, status
from libs.auth.dependencies import ensure_coach
from libs.auth.models import AuthUser, Role
from libs.common.logging import get_logger
from services.members_service.models import (
    CHECK_IN_FREQUENCY_MAX_DAYS,
    CHECK_IN_FREQUENCY_MIN_DAYS,
    Cohort,
    CohortMembership,
    FrequencySource,
    MembershipStatus,
    User,
)
from services.members_service.schemas import (
    CheckInFrequencyConfig,
    MemberFrequencyResponse,
)
from services.settings_service.models import AuditAction
from services.settings_service.services.audit_ops import log_audit_event
from services.settings_service.services.settings_ops import load_settings_snapshot
from sqlalchemy import Row, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# Coaches set per-member cadence on a weekly scale.
MEMBER_FREQUENCY_MAX_DAYS = 7

# Returned for unknown members instead of raising.
MISSING_MEMBER_FREQUENCY = MemberFrequencyResponse(
    frequency_days=1, source=FrequencySource.SYSTEM
)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


async def _user_override(db: AsyncSession, user_id: int) -> Optional[int]:
    result = await db.execute(
        select(User.check_in_frequency_days).where(User.id == user_id)
    )
    return result.scalar_one_or_none()


async def get_active_cohort(db: AsyncSession, user_id: int) -> Optional[Row]:
    """``(cohort_id, name, check_in_frequency_days)`` of the ACTIVE membership.

    Oldest membership wins should more than one ever be ACTIVE.
    """
    result = await db.execute(
        select(Cohort.id, Cohort.name, Cohort.check_in_frequency_days)
        .join(CohortMembership, CohortMembership.cohort_id == Cohort.id)
        .where(
            CohortMembership.user_id == user_id,
            CohortMembership.status == MembershipStatus.ACTIVE,
        )
        .order_by(CohortMembership.joined_at, CohortMembership.id)
        .limit(1)
    )
    return result.first()


async def _system_default(db: AsyncSession) -> int:
    snapshot = await load_settings_snapshot(db)
    return snapshot.default_check_in_frequency_days


def _validate_days(days: Optional[int], low: int, high: int) -> None:
    if days is not None and (days < low or days > high):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Frequency must be between {low} and {high} days",
        )


# ---------------------------------------------------------------------------
# Resolution (read-only)
# ---------------------------------------------------------------------------


async def get_effective_check_in_frequency(db: AsyncSession, user_id: int) -> int:
    """Days between expected check-ins for ``user_id`` (user > cohort > system)."""
    user_override = await _user_override(db, user_id)
    if user_override is not None:
        return user_override

    cohort = await get_active_cohort(db, user_id)
    if cohort is not None and cohort.check_in_frequency_days is not None:
        return cohort.check_in_frequency_days

    return await _system_default(db)


async def get_check_in_frequency_config(
    db: AsyncSession, user_id: int
) -> CheckInFrequencyConfig:
    """All three levels for ``user_id`` plus the effective value."""
    system_default = await _system_default(db)

    cohort = await get_active_cohort(db, user_id)
    cohort_override = cohort.check_in_frequency_days if cohort else None
    cohort_name = cohort.name if cohort else None

    user_override = await _user_override(db, user_id)

    if user_override is not None:
        effective = user_override
    elif cohort_override is not None:
        effective = cohort_override
    else:
        effective = system_default

    return CheckInFrequencyConfig(
        system_default=system_default,
        cohort_override=cohort_override,
        cohort_name=cohort_name,
        user_override=user_override,
        effective=effective,
    )


async def get_member_effective_frequency(
    db: AsyncSession, *, actor: AuthUser, member_id: int
) -> MemberFrequencyResponse:
    """Effective frequency with the level it came from.

    Unlike the admin/coach operations this never raises for an unknown
    member; it answers ``1 day / system``.
    """
    ensure_coach(actor)

    result = await db.execute(
        select(User.id, User.check_in_frequency_days).where(User.id == member_id)
    )
    row = result.first()
    if row is None:
        return MISSING_MEMBER_FREQUENCY

    if row.check_in_frequency_days is not None:
        return MemberFrequencyResponse(
            frequency_days=row.check_in_frequency_days, source=FrequencySource.USER
        )

    cohort = await get_active_cohort(db, member_id)
    if cohort is not None and cohort.check_in_frequency_days is not None:
        return MemberFrequencyResponse(
            frequency_days=cohort.check_in_frequency_days,
            source=FrequencySource.COHORT,
        )

    return MemberFrequencyResponse(
        frequency_days=await _system_default(db), source=FrequencySource.SYSTEM
    )


# ---------------------------------------------------------------------------
# Overrides (coach/admin)
# ---------------------------------------------------------------------------


async def _commit_override(
    db: AsyncSession,
    *,
    actor: AuthUser,
    target_type: str,
    target_id: int,
    previous: Optional[int],
    days: Optional[int],
) -> None:
    log_audit_event(
        db,
        action=AuditAction.UPDATE_CHECK_IN_FREQUENCY,
        actor_id=actor.user_id,
        target_id=target_id,
        target_type=target_type,
        details={"previous_days": previous, "days": days},
    )
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise
    logger.info(
        "%s %s check-in frequency %s→%s by %s",
        target_type,
        target_id,
        previous,
        days,
        actor.user_id,
    )


async def update_cohort_check_in_frequency(
    db: AsyncSession, *, actor: AuthUser, cohort_id: int, days: Optional[int]
) -> Cohort:
    """Set or clear (``None``) the cohort-level override."""
    ensure_coach(actor)
    _validate_days(days, CHECK_IN_FREQUENCY_MIN_DAYS, CHECK_IN_FREQUENCY_MAX_DAYS)

    cohort = await db.get(Cohort, cohort_id)
    if cohort is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Cohort not found"
        )

    previous = cohort.check_in_frequency_days
    cohort.check_in_frequency_days = days
    await _commit_override(
        db,
        actor=actor,
        target_type="Cohort",
        target_id=cohort_id,
        previous=previous,
        days=days,
    )
    await db.refresh(cohort)
    return cohort


async def update_user_check_in_frequency(
    db: AsyncSession, *, actor: AuthUser, user_id: int, days: Optional[int]
) -> User:
    """Set or clear (``None``) the user-level override."""
    ensure_coach(actor)
    _validate_days(days, CHECK_IN_FREQUENCY_MIN_DAYS, CHECK_IN_FREQUENCY_MAX_DAYS)

    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )

    previous = user.check_in_frequency_days
    user.check_in_frequency_days = days
    await _commit_override(
        db,
        actor=actor,
        target_type="User",
        target_id=user_id,
        previous=previous,
        days=days,
    )
    await db.refresh(user)
    return user


async def update_member_check_in_frequency(
    db: AsyncSession,
    *,
    actor: AuthUser,
    member_id: int,
    frequency_days: Optional[int],
) -> User:
    """Coach-facing override for a client, limited to a weekly cadence."""
    ensure_coach(actor)
    _validate_days(frequency_days, CHECK_IN_FREQUENCY_MIN_DAYS, MEMBER_FREQUENCY_MAX_DAYS)

    member = await db.get(User, member_id)
    if member is None or member.role != Role.CLIENT:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Member not found"
        )

    previous = member.check_in_frequency_days
    member.check_in_frequency_days = frequency_days
    await _commit_override(
        db,
        actor=actor,
        target_type="User",
        target_id=member_id,
        previous=previous,
        days=frequency_days,
    )
    await db.refresh(member)
    return member
