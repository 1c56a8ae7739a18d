"""Unit tests for system settings and the audit trail."""

import pytest
from fastapi import HTTPException
from services.settings_service.models import AuditAction, AuditLog, SystemSetting
from services.settings_service.schemas import SystemSettingsSnapshot
from services.settings_service.services.audit_ops import (
    build_target,
    list_audit_events,
    log_audit_event,
)
from services.settings_service.services.settings_ops import (
    get_system_setting,
    get_system_settings,
    load_settings_snapshot,
    update_system_settings,
)
from sqlalchemy import select
from tests.factories import SystemSettingFactory


@pytest.mark.unit
def test_snapshot_defaults():
    snapshot = SystemSettingsSnapshot.from_stored({})

    assert snapshot.default_check_in_frequency_days == 7
    assert snapshot.notification_time_utc == "09:00"
    assert snapshot.cohorts_enabled is True


@pytest.mark.unit
def test_snapshot_drops_only_invalid_keys():
    snapshot = SystemSettingsSnapshot.from_stored(
        {
            "defaultCheckInFrequencyDays": "abc",
            "maxClientsPerCoach": 80,
            "notificationTimeUtc": "25:00",
            "someRetiredKey": True,
        }
    )

    assert snapshot.default_check_in_frequency_days == 7
    assert snapshot.max_clients_per_coach == 80
    assert snapshot.notification_time_utc == "09:00"


@pytest.mark.unit
@pytest.mark.parametrize(
    "target_type, target_id, expected",
    [("User", 5, "User:5"), ("User", None, None), (None, 5, None), ("User", 0, "User:0")],
)
def test_build_target(target_type, target_id, expected):
    assert build_target(target_type, target_id) == expected


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_system_setting_raw_value(db_session):
    db_session.add(SystemSettingFactory.create(key="notificationTimeUtc", value="07:30"))
    await db_session.commit()

    assert await get_system_setting(db_session, "notificationTimeUtc", "09:00") == "07:30"
    assert await get_system_setting(db_session, "missingKey", 3) == 3


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_settings_upserts_and_audits(db_session, admin_actor):
    db_session.add(SystemSettingFactory.create(value=7))
    await db_session.commit()

    applied = await update_system_settings(
        db_session,
        actor=admin_actor,
        changes={"defaultCheckInFrequencyDays": 10, "appointmentsEnabled": True},
    )

    assert applied == {"defaultCheckInFrequencyDays": 10, "appointmentsEnabled": True}
    snapshot = await load_settings_snapshot(db_session)
    assert snapshot.default_check_in_frequency_days == 10
    assert snapshot.appointments_enabled is True

    rows = (await db_session.execute(select(SystemSetting))).scalars().all()
    assert len(rows) == 2

    audit = (await db_session.execute(select(AuditLog))).scalars().one()
    assert audit.action == AuditAction.UPDATE_SYSTEM_SETTINGS.value
    assert audit.details == applied
    assert audit.target is None


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize(
    "changes",
    [
        {"defaultCheckInFrequencyDays": 0},
        {"defaultCheckInFrequencyDays": "often"},
        {"notificationTimeUtc": "9am"},
        {"unknownSetting": 1},
    ],
)
async def test_update_settings_rejects_invalid(db_session, admin_actor, changes):
    with pytest.raises(HTTPException) as exc_info:
        await update_system_settings(db_session, actor=admin_actor, changes=changes)

    assert exc_info.value.status_code == 400
    assert (await db_session.execute(select(SystemSetting))).first() is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_settings_empty_is_noop(db_session, admin_actor):
    assert await update_system_settings(db_session, actor=admin_actor, changes={}) == {}
    assert (await db_session.execute(select(AuditLog))).first() is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_settings_admin_only(db_session, coach_actor):
    with pytest.raises(HTTPException) as exc_info:
        await get_system_settings(db_session, actor=coach_actor)
    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
@pytest.mark.unit
async def test_audit_events_filter_and_order(db_session, admin_actor):
    log_audit_event(
        db_session, action=AuditAction.ALLOCATE_CREDITS, actor_id=1, target_id=2, target_type="User"
    )
    log_audit_event(
        db_session, action=AuditAction.DEDUCT_CREDITS, actor_id=1, target_id=2, target_type="User"
    )
    log_audit_event(db_session, action="CUSTOM_EVENT", actor_id=None)
    await db_session.commit()

    entries, total = await list_audit_events(db_session, actor=admin_actor)
    assert total == 3
    assert entries[0].action == "CUSTOM_EVENT"

    entries, total = await list_audit_events(
        db_session, actor=admin_actor, action="DEDUCT_CREDITS"
    )
    assert total == 1
    assert entries[0].target == "User:2"

    _, total = await list_audit_events(db_session, actor=admin_actor, target_type="User")
    assert total == 2
