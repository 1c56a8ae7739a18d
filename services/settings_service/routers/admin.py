"""Admin settings and audit log endpoints."""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.settings_service.schemas import (
    AuditLogListResponse,
    SystemSettingsSnapshot,
)
from services.settings_service.services.audit_ops import list_audit_events
from services.settings_service.services.settings_ops import (
    get_system_settings,
    update_system_settings,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin", tags=["admin-settings"])


@router.get("/settings", response_model=SystemSettingsSnapshot)
async def read_settings(
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Effective system settings (stored values over defaults)."""
    return await get_system_settings(db, actor=admin)


@router.patch("/settings", response_model=dict[str, Any])
async def patch_settings(
    changes: dict[str, Any] = Body(...),
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Partial update. Returns only the values that were written."""
    return await update_system_settings(db, actor=admin, changes=changes)


@router.get("/audit-log", response_model=AuditLogListResponse)
async def get_audit_log(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=200),
    action: Optional[str] = None,
    target_type: Optional[str] = None,
    target_id: Optional[int] = None,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Admin action audit trail."""
    entries, total = await list_audit_events(
        db,
        actor=admin,
        action=action,
        target_type=target_type,
        target_id=target_id,
        skip=skip,
        limit=limit,
    )
    return AuditLogListResponse(entries=entries, total=total, skip=skip, limit=limit)
