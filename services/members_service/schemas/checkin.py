"""Check-in frequency request/response schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from services.members_service.models.enums import FrequencySource


class CheckInFrequencyUpdate(BaseModel):
    """``days: null`` clears the override."""

    days: Optional[int]


class MemberFrequencyUpdate(BaseModel):
    frequency_days: Optional[int]


class EffectiveFrequencyResponse(BaseModel):
    user_id: int
    frequency_days: int


class CheckInFrequencyConfig(BaseModel):
    """All three override levels plus the value that wins."""

    system_default: int
    cohort_override: Optional[int] = None
    cohort_name: Optional[str] = None
    user_override: Optional[int] = None
    effective: int


class MemberFrequencyResponse(BaseModel):
    frequency_days: int
    source: FrequencySource


class UserFrequencyResponse(BaseModel):
    id: int
    check_in_frequency_days: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)
