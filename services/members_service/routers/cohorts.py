"""Cohort management endpoints (coach/admin)."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import require_coach
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.members_service.models import CohortStatus
from services.members_service.schemas import (
    CohortCreate,
    CohortListResponse,
    CohortResponse,
    MembershipCreate,
    MembershipResponse,
    MembershipStatusUpdate,
)
from services.members_service.services.cohort_ops import (
    add_cohort_member,
    create_cohort,
    get_cohort,
    list_cohorts,
    update_membership_status,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/cohorts", tags=["cohorts"])


@router.post("", response_model=CohortResponse, status_code=status.HTTP_201_CREATED)
async def create_new_cohort(
    body: CohortCreate,
    coach: AuthUser = Depends(require_coach),
    db: AsyncSession = Depends(get_async_db),
):
    return await create_cohort(db, actor=coach, data=body)


@router.get("", response_model=CohortListResponse)
async def list_all_cohorts(
    cohort_status: Optional[CohortStatus] = Query(None, alias="status"),
    coach: AuthUser = Depends(require_coach),
    db: AsyncSession = Depends(get_async_db),
):
    cohorts, total = await list_cohorts(db, actor=coach, cohort_status=cohort_status)
    return CohortListResponse(cohorts=cohorts, total=total)


@router.get("/{cohort_id}", response_model=CohortResponse)
async def get_cohort_detail(
    cohort_id: int,
    _coach: AuthUser = Depends(require_coach),
    db: AsyncSession = Depends(get_async_db),
):
    return await get_cohort(db, cohort_id)


@router.post(
    "/{cohort_id}/members",
    response_model=MembershipResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_member(
    cohort_id: int,
    body: MembershipCreate,
    coach: AuthUser = Depends(require_coach),
    db: AsyncSession = Depends(get_async_db),
):
    """Enrol a user; 409 if they already hold an ACTIVE membership."""
    return await add_cohort_member(
        db, actor=coach, cohort_id=cohort_id, user_id=body.user_id
    )


@router.patch("/memberships/{membership_id}", response_model=MembershipResponse)
async def change_membership_status(
    membership_id: int,
    body: MembershipStatusUpdate,
    coach: AuthUser = Depends(require_coach),
    db: AsyncSession = Depends(get_async_db),
):
    return await update_membership_status(
        db, actor=coach, membership_id=membership_id, new_status=body.status
    )
