"""Coach/admin bootcamp scheduling and roster endpoints."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import require_coach
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.bootcamps_service.schemas import (
    AttendanceChangeResponse,
    AttendeeCreate,
    BootcampCreate,
    BootcampListResponse,
    BootcampResponse,
    BootcampUpdate,
)
from services.bootcamps_service.services.bootcamp_ops import (
    add_bootcamp_attendee,
    create_bootcamp,
    delete_bootcamp,
    get_bootcamp,
    list_bootcamps,
    remove_bootcamp_attendee,
    update_bootcamp,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/bootcamps", tags=["bootcamps"])


@router.get("", response_model=BootcampListResponse)
async def list_all_bootcamps(
    start_from: Optional[datetime] = Query(None, alias="from"),
    end_to: Optional[datetime] = Query(None, alias="to"),
    coach: AuthUser = Depends(require_coach),
    db: AsyncSession = Depends(get_async_db),
):
    bootcamps = await list_bootcamps(
        db, actor=coach, start_from=start_from, end_to=end_to
    )
    return BootcampListResponse(bootcamps=bootcamps, total=len(bootcamps))


@router.post("", response_model=BootcampResponse, status_code=status.HTTP_201_CREATED)
async def create_new_bootcamp(
    body: BootcampCreate,
    coach: AuthUser = Depends(require_coach),
    db: AsyncSession = Depends(get_async_db),
):
    return await create_bootcamp(db, actor=coach, data=body)


@router.get("/{bootcamp_id}", response_model=BootcampResponse)
async def get_bootcamp_detail(
    bootcamp_id: int,
    coach: AuthUser = Depends(require_coach),
    db: AsyncSession = Depends(get_async_db),
):
    """Bootcamp with its attendee roster."""
    return await get_bootcamp(db, actor=coach, bootcamp_id=bootcamp_id)


@router.patch("/{bootcamp_id}", response_model=BootcampResponse)
async def patch_bootcamp(
    bootcamp_id: int,
    body: BootcampUpdate,
    coach: AuthUser = Depends(require_coach),
    db: AsyncSession = Depends(get_async_db),
):
    return await update_bootcamp(db, actor=coach, bootcamp_id=bootcamp_id, data=body)


@router.delete("/{bootcamp_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_bootcamp(
    bootcamp_id: int,
    coach: AuthUser = Depends(require_coach),
    db: AsyncSession = Depends(get_async_db),
):
    await delete_bootcamp(db, actor=coach, bootcamp_id=bootcamp_id)


@router.post(
    "/{bootcamp_id}/attendees",
    response_model=AttendanceChangeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def enrol_attendee(
    bootcamp_id: int,
    body: AttendeeCreate,
    coach: AuthUser = Depends(require_coach),
    db: AsyncSession = Depends(get_async_db),
):
    """Enrol a client; consumes one credit."""
    return await add_bootcamp_attendee(
        db, actor=coach, bootcamp_id=bootcamp_id, user_id=body.user_id
    )


@router.delete(
    "/{bootcamp_id}/attendees/{user_id}", response_model=AttendanceChangeResponse
)
async def drop_attendee(
    bootcamp_id: int,
    user_id: int,
    coach: AuthUser = Depends(require_coach),
    db: AsyncSession = Depends(get_async_db),
):
    """Remove a client; refunds the credit if the bootcamp has not started."""
    return await remove_bootcamp_attendee(
        db, actor=coach, bootcamp_id=bootcamp_id, user_id=user_id
    )
