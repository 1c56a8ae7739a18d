"""Cohort and membership operations.

A user may hold at most one ACTIVE membership. The check here gives a clear
409; the partial unique index on ``cohort_memberships`` catches races.
"""

from typing import Optional

from fastapi import HTTPException, status
from libs.auth.dependencies import ensure_coach
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.members_service.models import (
    Cohort,
    CohortMembership,
    CohortStatus,
    MembershipStatus,
    User,
)
from services.members_service.schemas import CohortCreate
from sqlalchemy import desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

ACTIVE_MEMBERSHIP_CONFLICT = "User already has an active cohort membership"


async def get_cohort(db: AsyncSession, cohort_id: int) -> Cohort:
    """Get cohort by ID. Raises 404 if not found."""
    cohort = await db.get(Cohort, cohort_id)
    if cohort is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Cohort not found"
        )
    return cohort


async def create_cohort(
    db: AsyncSession, *, actor: AuthUser, data: CohortCreate
) -> Cohort:
    ensure_coach(actor)

    cohort = Cohort(
        name=data.name,
        description=data.description,
        end_date=data.end_date,
        check_in_frequency_days=data.check_in_frequency_days,
        status=CohortStatus.ACTIVE,
    )
    if data.start_date is not None:
        cohort.start_date = data.start_date
    db.add(cohort)
    await db.commit()
    await db.refresh(cohort)

    logger.info("Coach %s created cohort %s (%s)", actor.user_id, cohort.id, cohort.name)
    return cohort


async def list_cohorts(
    db: AsyncSession,
    *,
    actor: AuthUser,
    cohort_status: Optional[CohortStatus] = None,
) -> tuple[list[Cohort], int]:
    ensure_coach(actor)

    query = select(Cohort)
    count_query = select(func.count()).select_from(Cohort)
    if cohort_status:
        query = query.where(Cohort.status == cohort_status)
        count_query = count_query.where(Cohort.status == cohort_status)

    total = (await db.execute(count_query)).scalar() or 0
    result = await db.execute(query.order_by(desc(Cohort.start_date), desc(Cohort.id)))
    return list(result.scalars().all()), total


async def _other_active_membership(
    db: AsyncSession, user_id: int, exclude_id: Optional[int] = None
) -> Optional[CohortMembership]:
    query = select(CohortMembership).where(
        CohortMembership.user_id == user_id,
        CohortMembership.status == MembershipStatus.ACTIVE,
    )
    if exclude_id is not None:
        query = query.where(CohortMembership.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalars().first()


async def _commit_membership(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=ACTIVE_MEMBERSHIP_CONFLICT
        ) from exc


async def add_cohort_member(
    db: AsyncSession, *, actor: AuthUser, cohort_id: int, user_id: int
) -> CohortMembership:
    """Enrol ``user_id`` in the cohort with an ACTIVE membership."""
    ensure_coach(actor)

    await get_cohort(db, cohort_id)
    if await db.get(User, user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )

    existing = await db.execute(
        select(CohortMembership).where(
            CohortMembership.cohort_id == cohort_id,
            CohortMembership.user_id == user_id,
        )
    )
    if existing.scalars().first() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User is already a member of this cohort",
        )
    if await _other_active_membership(db, user_id) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=ACTIVE_MEMBERSHIP_CONFLICT
        )

    membership = CohortMembership(
        cohort_id=cohort_id,
        user_id=user_id,
        status=MembershipStatus.ACTIVE,
    )
    db.add(membership)
    await _commit_membership(db)
    await db.refresh(membership)

    logger.info("User %s joined cohort %s", user_id, cohort_id)
    return membership


async def update_membership_status(
    db: AsyncSession,
    *,
    actor: AuthUser,
    membership_id: int,
    new_status: MembershipStatus,
) -> CohortMembership:
    """Pause, deactivate or re-activate a membership."""
    ensure_coach(actor)

    membership = await db.get(CohortMembership, membership_id)
    if membership is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Membership not found"
        )
    if membership.status == new_status:
        return membership

    if new_status == MembershipStatus.ACTIVE:
        if await _other_active_membership(db, membership.user_id, membership.id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=ACTIVE_MEMBERSHIP_CONFLICT,
            )
        membership.left_at = None
    elif membership.status == MembershipStatus.ACTIVE:
        membership.left_at = utc_now()

    old_status = membership.status
    membership.status = new_status
    await _commit_membership(db)
    await db.refresh(membership)

    logger.info(
        "Membership %s status %s→%s by %s",
        membership_id,
        old_status.value,
        new_status.value,
        actor.user_id,
    )
    return membership
