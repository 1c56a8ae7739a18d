"""Audit log writes and reads.

``log_audit_event`` only adds the row to the caller's session so the entry
commits (or rolls back) together with the mutation it describes.
"""

from typing import Any, Optional, Union

from libs.auth.dependencies import ensure_admin
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from services.settings_service.models import AuditAction, AuditLog
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def build_target(target_type: Optional[str], target_id: Optional[int]) -> Optional[str]:
    """``"User:5"`` style reference; only when both parts are known."""
    if target_type and target_id is not None:
        return f"{target_type}:{target_id}"
    return None


def log_audit_event(
    db: AsyncSession,
    *,
    action: Union[AuditAction, str],
    actor_id: Optional[int],
    target_id: Optional[int] = None,
    target_type: Optional[str] = None,
    details: Optional[dict[str, Any]] = None,
) -> AuditLog:
    action_value = action.value if isinstance(action, AuditAction) else action
    entry = AuditLog(
        action=action_value,
        actor_id=actor_id,
        target_type=target_type,
        target_id=target_id,
        target=build_target(target_type, target_id),
        details=details,
    )
    db.add(entry)
    logger.info(
        "Audit %s by actor=%s target=%s", action_value, actor_id, entry.target
    )
    return entry


async def list_audit_events(
    db: AsyncSession,
    *,
    actor: AuthUser,
    action: Optional[str] = None,
    target_type: Optional[str] = None,
    target_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[AuditLog], int]:
    """Admin view of the audit trail, newest first."""
    ensure_admin(actor)

    query = select(AuditLog)
    count_query = select(func.count()).select_from(AuditLog)

    if action:
        query = query.where(AuditLog.action == action)
        count_query = count_query.where(AuditLog.action == action)
    if target_type:
        query = query.where(AuditLog.target_type == target_type)
        count_query = count_query.where(AuditLog.target_type == target_type)
    if target_id is not None:
        query = query.where(AuditLog.target_id == target_id)
        count_query = count_query.where(AuditLog.target_id == target_id)

    total = (await db.execute(count_query)).scalar() or 0
    result = await db.execute(
        query.order_by(desc(AuditLog.created_at), desc(AuditLog.id))
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all()), total
