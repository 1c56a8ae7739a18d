"""Unit tests for cohort memberships and the single-active-membership rule."""

import pytest
from fastapi import HTTPException
from services.members_service.models import CohortMembership, MembershipStatus
from services.members_service.schemas import CohortCreate
from services.members_service.services.checkin_frequency import (
    get_effective_check_in_frequency,
)
from services.members_service.services.cohort_ops import (
    ACTIVE_MEMBERSHIP_CONFLICT,
    add_cohort_member,
    create_cohort,
    list_cohorts,
    update_membership_status,
)
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from tests.factories import CohortFactory, MembershipFactory, UserFactory


async def _add(db, instance):
    db.add(instance)
    await db.commit()
    await db.refresh(instance)
    return instance


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_and_list_cohorts(db_session, coach_actor):
    cohort = await create_cohort(
        db_session,
        actor=coach_actor,
        data=CohortCreate(name="Winter Base", check_in_frequency_days=4),
    )

    assert cohort.id is not None
    assert cohort.check_in_frequency_days == 4

    cohorts, total = await list_cohorts(db_session, actor=coach_actor)
    assert total == 1
    assert cohorts[0].name == "Winter Base"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_member_creates_active_membership(db_session, coach_actor):
    user = await _add(db_session, UserFactory.create())
    cohort = await _add(db_session, CohortFactory.create(check_in_frequency_days=3))

    membership = await add_cohort_member(
        db_session, actor=coach_actor, cohort_id=cohort.id, user_id=user.id
    )

    assert membership.status == MembershipStatus.ACTIVE
    assert membership.left_at is None
    assert await get_effective_check_in_frequency(db_session, user.id) == 3


@pytest.mark.asyncio
@pytest.mark.unit
async def test_second_active_membership_rejected(db_session, coach_actor):
    user = await _add(db_session, UserFactory.create())
    first = await _add(db_session, CohortFactory.create())
    second = await _add(db_session, CohortFactory.create())
    user_id, second_id = user.id, second.id
    await add_cohort_member(
        db_session, actor=coach_actor, cohort_id=first.id, user_id=user_id
    )

    with pytest.raises(HTTPException) as exc_info:
        await add_cohort_member(
            db_session, actor=coach_actor, cohort_id=second_id, user_id=user_id
        )

    assert exc_info.value.status_code == 409
    assert exc_info.value.detail == ACTIVE_MEMBERSHIP_CONFLICT


@pytest.mark.asyncio
@pytest.mark.unit
async def test_same_cohort_twice_rejected(db_session, coach_actor):
    user = await _add(db_session, UserFactory.create())
    cohort = await _add(db_session, CohortFactory.create())
    await add_cohort_member(
        db_session, actor=coach_actor, cohort_id=cohort.id, user_id=user.id
    )

    with pytest.raises(HTTPException) as exc_info:
        await add_cohort_member(
            db_session, actor=coach_actor, cohort_id=cohort.id, user_id=user.id
        )

    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_member_missing_targets(db_session, coach_actor):
    user = await _add(db_session, UserFactory.create())

    with pytest.raises(HTTPException) as exc_info:
        await add_cohort_member(
            db_session, actor=coach_actor, cohort_id=321, user_id=user.id
        )
    assert exc_info.value.detail == "Cohort not found"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_database_rejects_duplicate_active_membership(db_session):
    """The partial unique index backs up the service-level check."""
    user = await _add(db_session, UserFactory.create())
    first = await _add(db_session, CohortFactory.create())
    second = await _add(db_session, CohortFactory.create())
    user_id, first_id, second_id = user.id, first.id, second.id
    await _add(db_session, MembershipFactory.create(cohort_id=first_id, user_id=user_id))

    db_session.add(MembershipFactory.create(cohort_id=second_id, user_id=user_id))
    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()


@pytest.mark.asyncio
@pytest.mark.unit
async def test_pause_sets_left_at_and_frees_user(db_session, coach_actor):
    user = await _add(db_session, UserFactory.create())
    first = await _add(db_session, CohortFactory.create(check_in_frequency_days=2))
    second = await _add(db_session, CohortFactory.create(check_in_frequency_days=9))
    membership = await add_cohort_member(
        db_session, actor=coach_actor, cohort_id=first.id, user_id=user.id
    )

    paused = await update_membership_status(
        db_session,
        actor=coach_actor,
        membership_id=membership.id,
        new_status=MembershipStatus.PAUSED,
    )
    assert paused.left_at is not None

    await add_cohort_member(
        db_session, actor=coach_actor, cohort_id=second.id, user_id=user.id
    )
    assert await get_effective_check_in_frequency(db_session, user.id) == 9


@pytest.mark.asyncio
@pytest.mark.unit
async def test_reactivation_blocked_by_other_active(db_session, coach_actor):
    user = await _add(db_session, UserFactory.create())
    first = await _add(db_session, CohortFactory.create())
    second = await _add(db_session, CohortFactory.create())
    paused = await _add(
        db_session,
        MembershipFactory.create(
            cohort_id=first.id, user_id=user.id, status=MembershipStatus.PAUSED
        ),
    )
    await _add(db_session, MembershipFactory.create(cohort_id=second.id, user_id=user.id))
    paused_id = paused.id

    with pytest.raises(HTTPException) as exc_info:
        await update_membership_status(
            db_session,
            actor=coach_actor,
            membership_id=paused_id,
            new_status=MembershipStatus.ACTIVE,
        )

    assert exc_info.value.status_code == 409
    result = await db_session.execute(
        select(CohortMembership.status).where(CohortMembership.id == paused_id)
    )
    assert result.scalar_one() == MembershipStatus.PAUSED


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cohort_ops_require_staff(db_session, client_actor):
    with pytest.raises(HTTPException) as exc_info:
        await list_cohorts(db_session, actor=client_actor)
    assert exc_info.value.status_code == 403
