"""Typed system settings and audit log schemas."""

from datetime import datetime
from typing import Any, Optional

from libs.common.logging import get_logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

logger = get_logger(__name__)

DEFAULT_CHECK_IN_FREQUENCY_DAYS = 7

_TIME_OF_DAY = r"^([01]\d|2[0-3]):[0-5]\d$"


class SystemSettingsSnapshot(BaseModel):
    """Effective platform configuration: stored values over typed defaults.

    Keys are persisted in camelCase (``defaultCheckInFrequencyDays``).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    # Coach management
    max_clients_per_coach: int = Field(50, gt=0)
    min_clients_per_coach: int = Field(10, gt=0)

    # Activity windows
    recent_activity_days: int = Field(14, gt=0)
    low_engagement_entries: int = Field(7, gt=0)
    no_activity_days: int = Field(14, gt=0)
    critical_no_activity_days: int = Field(30, gt=0)
    short_term_window_days: int = Field(7, gt=0)
    long_term_window_days: int = Field(30, gt=0)

    # Check-in
    default_check_in_frequency_days: int = Field(DEFAULT_CHECK_IN_FREQUENCY_DAYS, gt=0)
    notification_time_utc: str = Field("09:00", pattern=_TIME_OF_DAY)

    # Feature flags
    healthkit_enabled: bool = True
    ios_integration_enabled: bool = True
    show_personalized_plan: bool = True
    appointments_enabled: bool = False
    sessions_enabled: bool = True
    cohorts_enabled: bool = True

    # Adherence scoring
    adherence_green_minimum: int = Field(6, ge=0)
    adherence_amber_minimum: int = Field(3, ge=0)

    @classmethod
    def from_stored(cls, stored: dict[str, Any]) -> "SystemSettingsSnapshot":
        """Build a snapshot from raw key/value rows.

        A stored value that does not validate for its key is dropped and the
        default for that key is used instead.
        """
        accepted: dict[str, Any] = {}
        for key, value in stored.items():
            try:
                cls.model_validate({key: value})
            except ValidationError:
                logger.warning(
                    "Ignoring invalid system setting %s=%r, using default", key, value
                )
                continue
            accepted[key] = value
        return cls.model_validate(accepted)


class SystemSettingsUpdate(BaseModel):
    """Partial update; unknown keys are rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    max_clients_per_coach: Optional[int] = Field(None, gt=0)
    min_clients_per_coach: Optional[int] = Field(None, gt=0)
    recent_activity_days: Optional[int] = Field(None, gt=0)
    low_engagement_entries: Optional[int] = Field(None, gt=0)
    no_activity_days: Optional[int] = Field(None, gt=0)
    critical_no_activity_days: Optional[int] = Field(None, gt=0)
    short_term_window_days: Optional[int] = Field(None, gt=0)
    long_term_window_days: Optional[int] = Field(None, gt=0)
    default_check_in_frequency_days: Optional[int] = Field(None, gt=0)
    notification_time_utc: Optional[str] = Field(None, pattern=_TIME_OF_DAY)
    healthkit_enabled: Optional[bool] = None
    ios_integration_enabled: Optional[bool] = None
    show_personalized_plan: Optional[bool] = None
    appointments_enabled: Optional[bool] = None
    sessions_enabled: Optional[bool] = None
    cohorts_enabled: Optional[bool] = None
    adherence_green_minimum: Optional[int] = Field(None, ge=0)
    adherence_amber_minimum: Optional[int] = Field(None, ge=0)

    def changes(self) -> dict[str, Any]:
        """Provided values keyed by their stored (camelCase) name."""
        return self.model_dump(by_alias=True, exclude_none=True)


class AuditLogEntry(BaseModel):
    id: int
    action: str
    actor_id: Optional[int] = None
    target_type: Optional[str] = None
    target_id: Optional[int] = None
    target: Optional[str] = None
    details: Optional[dict] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuditLogListResponse(BaseModel):
    entries: list[AuditLogEntry]
    total: int
    skip: int
    limit: int
