"""Bootcamp scheduling and attendance.

Registration costs ``BOOTCAMP_CREDIT_COST`` credits and leaving a bootcamp
that has not started refunds them. Both go through the credit ledger in the
same commit as the attendee row change.
"""

from datetime import datetime
from typing import Optional

from fastapi import HTTPException, status
from libs.auth.dependencies import ensure_coach
from libs.auth.models import AuthUser
from libs.common.datetime_utils import ensure_aware, utc_now
from libs.common.logging import get_logger
from services.bootcamps_service.models import (
    BOOTCAMP_CREDIT_COST,
    Bootcamp,
    BootcampAttendee,
)
from services.bootcamps_service.schemas import (
    AttendanceChangeResponse,
    AvailableBootcampResponse,
    BootcampCreate,
    BootcampUpdate,
)
from services.credits_service.models import REASON_MAX_LENGTH, CreditTransactionKind
from services.credits_service.services.ledger_ops import apply_credit_delta
from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)

INSUFFICIENT_CREDITS = "Insufficient credits to register for bootcamp"
BOOTCAMP_REFERENCE = "bootcamp"

# Fields an update may clear with an explicit null.
CLEARABLE_FIELDS = {"location", "capacity", "description"}


def _reason(text: str) -> str:
    if len(text) > REASON_MAX_LENGTH:
        logger.warning(
            "Ledger reason truncated to %s characters: %r", REASON_MAX_LENGTH, text
        )
    return text[:REASON_MAX_LENGTH]


def _has_started(bootcamp: Bootcamp, now: Optional[datetime] = None) -> bool:
    return ensure_aware(bootcamp.start_time) <= (now or utc_now())


async def _load_bootcamp(
    db: AsyncSession, bootcamp_id: int, *, for_update: bool = False
) -> Bootcamp:
    query = (
        select(Bootcamp)
        .where(Bootcamp.id == bootcamp_id)
        .options(selectinload(Bootcamp.attendees).selectinload(BootcampAttendee.user))
        .execution_options(populate_existing=True)
    )
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    bootcamp = result.scalar_one_or_none()
    if bootcamp is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Bootcamp not found"
        )
    return bootcamp


# ---------------------------------------------------------------------------
# Coach/admin scheduling
# ---------------------------------------------------------------------------


async def get_bootcamp(db: AsyncSession, *, actor: AuthUser, bootcamp_id: int) -> Bootcamp:
    ensure_coach(actor)
    return await _load_bootcamp(db, bootcamp_id)


async def list_bootcamps(
    db: AsyncSession,
    *,
    actor: AuthUser,
    start_from: Optional[datetime] = None,
    end_to: Optional[datetime] = None,
) -> list[Bootcamp]:
    """Bootcamps inside ``[start_from, end_to]``, most recent first."""
    ensure_coach(actor)

    query = select(Bootcamp)
    if start_from is not None:
        query = query.where(Bootcamp.start_time >= start_from)
    if end_to is not None:
        query = query.where(Bootcamp.end_time <= end_to)

    result = await db.execute(
        query.order_by(desc(Bootcamp.start_time)).execution_options(
            populate_existing=True
        )
    )
    return list(result.scalars().all())


async def create_bootcamp(
    db: AsyncSession, *, actor: AuthUser, data: BootcampCreate
) -> Bootcamp:
    ensure_coach(actor)

    bootcamp = Bootcamp(**data.model_dump())
    db.add(bootcamp)
    await db.commit()

    logger.info("Coach %s created bootcamp %s (%s)", actor.user_id, bootcamp.id, bootcamp.name)
    return await _load_bootcamp(db, bootcamp.id)


async def update_bootcamp(
    db: AsyncSession, *, actor: AuthUser, bootcamp_id: int, data: BootcampUpdate
) -> Bootcamp:
    ensure_coach(actor)

    bootcamp = await _load_bootcamp(db, bootcamp_id)
    changes = {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None or field in CLEARABLE_FIELDS
    }
    start = changes.get("start_time") or ensure_aware(bootcamp.start_time)
    end = changes.get("end_time") or ensure_aware(bootcamp.end_time)
    if end <= start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="End time must be after start time",
        )

    for field, value in changes.items():
        setattr(bootcamp, field, value)
    await db.commit()

    logger.info("Bootcamp %s updated (%s)", bootcamp_id, ", ".join(sorted(changes)))
    return await _load_bootcamp(db, bootcamp_id)


async def delete_bootcamp(db: AsyncSession, *, actor: AuthUser, bootcamp_id: int) -> int:
    """Delete a bootcamp. Attendees of a future bootcamp are refunded.

    Returns the number of refunds issued.
    """
    ensure_coach(actor)

    bootcamp = await _load_bootcamp(db, bootcamp_id, for_update=True)
    refunds = 0
    if not _has_started(bootcamp):
        for attendee_user_id in [a.user_id for a in bootcamp.attendees]:
            await apply_credit_delta(
                db,
                user_id=attendee_user_id,
                amount=BOOTCAMP_CREDIT_COST,
                reason=_reason(f"Refund: bootcamp '{bootcamp.name}' cancelled"),
                kind=CreditTransactionKind.BOOTCAMP_REFUND,
                actor_id=actor.user_id,
                reference_type=BOOTCAMP_REFERENCE,
                reference_id=bootcamp_id,
                commit=False,
            )
            refunds += 1

    await db.delete(bootcamp)
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise

    logger.info(
        "Coach %s deleted bootcamp %s (%d refunds)", actor.user_id, bootcamp_id, refunds
    )
    return refunds


# ---------------------------------------------------------------------------
# Attendance (shared by coach and client paths)
# ---------------------------------------------------------------------------


async def _register(
    db: AsyncSession,
    *,
    bootcamp_id: int,
    user_id: int,
    actor_id: int,
    full_detail: str,
    duplicate_detail: str,
) -> AttendanceChangeResponse:
    bootcamp = await _load_bootcamp(db, bootcamp_id, for_update=True)

    if any(a.user_id == user_id for a in bootcamp.attendees):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=duplicate_detail)
    if bootcamp.capacity and len(bootcamp.attendees) >= bootcamp.capacity:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=full_detail)

    try:
        entry = await apply_credit_delta(
            db,
            user_id=user_id,
            amount=-BOOTCAMP_CREDIT_COST,
            reason=_reason(f"Bootcamp registration: {bootcamp.name}"),
            kind=CreditTransactionKind.BOOTCAMP_REGISTRATION,
            actor_id=actor_id,
            reference_type=BOOTCAMP_REFERENCE,
            reference_id=bootcamp_id,
            commit=False,
        )
    except HTTPException as exc:
        if exc.status_code == status.HTTP_400_BAD_REQUEST:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=INSUFFICIENT_CREDITS
            ) from exc
        raise

    bootcamp.attendees.append(BootcampAttendee(user_id=user_id))
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=duplicate_detail
        ) from exc
    except SQLAlchemyError:
        await db.rollback()
        raise

    logger.info(
        "User %s registered for bootcamp %s by %s (balance=%d)",
        user_id,
        bootcamp_id,
        actor_id,
        entry.new_balance,
    )
    return AttendanceChangeResponse(
        bootcamp_id=bootcamp_id, user_id=user_id, credits_balance=entry.new_balance
    )


async def _unregister(
    db: AsyncSession,
    *,
    bootcamp_id: int,
    user_id: int,
    actor_id: int,
    missing_detail: str,
) -> AttendanceChangeResponse:
    bootcamp = await _load_bootcamp(db, bootcamp_id, for_update=True)
    attendee = next((a for a in bootcamp.attendees if a.user_id == user_id), None)
    if attendee is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=missing_detail)

    refunded = not _has_started(bootcamp)
    if refunded:
        entry = await apply_credit_delta(
            db,
            user_id=user_id,
            amount=BOOTCAMP_CREDIT_COST,
            reason=_reason(f"Refund: left bootcamp {bootcamp.name}"),
            kind=CreditTransactionKind.BOOTCAMP_REFUND,
            actor_id=actor_id,
            reference_type=BOOTCAMP_REFERENCE,
            reference_id=bootcamp_id,
            commit=False,
        )
        balance = entry.new_balance
    else:
        balance = attendee.user.credits

    bootcamp.attendees.remove(attendee)
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise

    logger.info(
        "User %s left bootcamp %s by %s (refunded=%s)",
        user_id,
        bootcamp_id,
        actor_id,
        refunded,
    )
    return AttendanceChangeResponse(
        bootcamp_id=bootcamp_id,
        user_id=user_id,
        credits_balance=balance,
        refunded=refunded,
    )


async def add_bootcamp_attendee(
    db: AsyncSession, *, actor: AuthUser, bootcamp_id: int, user_id: int
) -> AttendanceChangeResponse:
    """Coach enrols a client, consuming one of the client's credits."""
    ensure_coach(actor)
    return await _register(
        db,
        bootcamp_id=bootcamp_id,
        user_id=user_id,
        actor_id=actor.user_id,
        full_detail="Bootcamp is at capacity",
        duplicate_detail="User is already registered for this bootcamp",
    )


async def remove_bootcamp_attendee(
    db: AsyncSession, *, actor: AuthUser, bootcamp_id: int, user_id: int
) -> AttendanceChangeResponse:
    ensure_coach(actor)
    return await _unregister(
        db,
        bootcamp_id=bootcamp_id,
        user_id=user_id,
        actor_id=actor.user_id,
        missing_detail="Attendee not found",
    )


# ---------------------------------------------------------------------------
# Client self-service
# ---------------------------------------------------------------------------


async def list_available_bootcamps(
    db: AsyncSession, *, actor: AuthUser
) -> list[AvailableBootcampResponse]:
    """Upcoming bootcamps, soonest first, without other attendees' details."""
    result = await db.execute(
        select(Bootcamp)
        .where(Bootcamp.start_time >= utc_now())
        .order_by(Bootcamp.start_time)
        .execution_options(populate_existing=True)
    )

    available = []
    for bootcamp in result.scalars().all():
        count = len(bootcamp.attendees)
        available.append(
            AvailableBootcampResponse(
                id=bootcamp.id,
                name=bootcamp.name,
                start_time=bootcamp.start_time,
                end_time=bootcamp.end_time,
                location=bootcamp.location,
                capacity=bootcamp.capacity,
                description=bootcamp.description,
                attendee_count=count,
                spots_left=(
                    max(bootcamp.capacity - count, 0) if bootcamp.capacity else None
                ),
                is_registered=any(a.user_id == actor.user_id for a in bootcamp.attendees),
            )
        )
    return available


async def register_for_bootcamp(
    db: AsyncSession, *, actor: AuthUser, bootcamp_id: int
) -> AttendanceChangeResponse:
    return await _register(
        db,
        bootcamp_id=bootcamp_id,
        user_id=actor.user_id,
        actor_id=actor.user_id,
        full_detail="Bootcamp is full",
        duplicate_detail="Already registered",
    )


async def unregister_from_bootcamp(
    db: AsyncSession, *, actor: AuthUser, bootcamp_id: int
) -> AttendanceChangeResponse:
    return await _unregister(
        db,
        bootcamp_id=bootcamp_id,
        user_id=actor.user_id,
        actor_id=actor.user_id,
        missing_detail="Not registered for this bootcamp",
    )

