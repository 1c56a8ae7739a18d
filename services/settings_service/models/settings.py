"""SystemSetting and AuditLog models."""

from datetime import datetime
from typing import Any, Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, JSONType
from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column


class SystemSetting(Base):
    """Key/value row of admin-tunable platform configuration.

    Values are opaque JSON; ``SystemSettingsSnapshot`` gives them types.
    """

    __tablename__ = "system_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    value: Mapped[Any] = mapped_column(JSONType, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<SystemSetting {self.key}={self.value!r}>"


class AuditLog(Base):
    """Append-only trail of sensitive admin and credit operations."""

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    action: Mapped[str] = mapped_column(String, index=True, nullable=False)
    actor_id: Mapped[Optional[int]] = mapped_column(Integer, index=True, nullable=True)
    target_type: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    target_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    target: Mapped[Optional[str]] = mapped_column(String, index=True, nullable=True)
    details: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False, index=True
    )

    def __repr__(self) -> str:
        return f"<AuditLog {self.id} {self.action} target={self.target}>"
