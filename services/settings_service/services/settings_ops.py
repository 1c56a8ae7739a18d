"""System settings: typed snapshot over the key/value table.

Settings are read fresh for every call (one query per snapshot) so an admin
change is visible on the next request without any cache invalidation.
"""

from typing import Any, TypeVar

from fastapi import HTTPException, status
from libs.auth.dependencies import ensure_admin
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from pydantic import ValidationError
from services.settings_service.models import AuditAction, SystemSetting
from services.settings_service.schemas import (
    SystemSettingsSnapshot,
    SystemSettingsUpdate,
)
from services.settings_service.services.audit_ops import log_audit_event
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

T = TypeVar("T")


async def _load_stored(db: AsyncSession) -> dict[str, Any]:
    result = await db.execute(select(SystemSetting.key, SystemSetting.value))
    return {key: value for key, value in result.all()}


async def load_settings_snapshot(db: AsyncSession) -> SystemSettingsSnapshot:
    """Typed view of every setting, falling back per key to its default."""
    return SystemSettingsSnapshot.from_stored(await _load_stored(db))


async def get_system_setting(db: AsyncSession, key: str, default: T) -> T:
    """Raw stored value for ``key`` or ``default`` when absent."""
    result = await db.execute(
        select(SystemSetting.value).where(SystemSetting.key == key)
    )
    row = result.first()
    return row[0] if row is not None else default


async def get_system_settings(
    db: AsyncSession, *, actor: AuthUser
) -> SystemSettingsSnapshot:
    ensure_admin(actor)
    return await load_settings_snapshot(db)


async def update_system_settings(
    db: AsyncSession,
    *,
    actor: AuthUser,
    changes: dict[str, Any],
) -> dict[str, Any]:
    """Validate and upsert a partial settings update.

    Returns the applied values keyed by their stored name.
    """
    ensure_admin(actor)

    try:
        update = SystemSettingsUpdate.model_validate(changes)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{field}: {first['msg']}",
        ) from exc

    applied = update.changes()
    if not applied:
        return {}

    try:
        result = await db.execute(
            select(SystemSetting).where(SystemSetting.key.in_(applied.keys()))
        )
        existing = {row.key: row for row in result.scalars().all()}

        for key, value in applied.items():
            row = existing.get(key)
            if row is None:
                db.add(SystemSetting(key=key, value=value))
            else:
                row.value = value
                row.updated_at = utc_now()

        log_audit_event(
            db,
            action=AuditAction.UPDATE_SYSTEM_SETTINGS,
            actor_id=actor.user_id,
            target_type="SystemSettings",
            details=applied,
        )
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise

    logger.info(
        "Admin %s updated system settings: %s", actor.user_id, ", ".join(applied)
    )
    return applied
