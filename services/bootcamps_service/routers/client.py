"""Client self-service bootcamp endpoints."""

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.bootcamps_service.schemas import (
    AttendanceChangeResponse,
    AvailableBootcampResponse,
)
from services.bootcamps_service.services.bootcamp_ops import (
    list_available_bootcamps,
    register_for_bootcamp,
    unregister_from_bootcamp,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/bootcamps/me", tags=["bootcamps-client"])


@router.get("/available", response_model=list[AvailableBootcampResponse])
async def available_bootcamps(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await list_available_bootcamps(db, actor=current_user)


@router.post(
    "/{bootcamp_id}/register",
    response_model=AttendanceChangeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    bootcamp_id: int,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await register_for_bootcamp(db, actor=current_user, bootcamp_id=bootcamp_id)


@router.delete("/{bootcamp_id}/register", response_model=AttendanceChangeResponse)
async def unregister(
    bootcamp_id: int,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await unregister_from_bootcamp(
        db, actor=current_user, bootcamp_id=bootcamp_id
    )
