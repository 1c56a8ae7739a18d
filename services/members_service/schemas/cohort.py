"""Cohort and membership schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from services.members_service.models.enums import CohortStatus, MembershipStatus


class CohortCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=120)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    check_in_frequency_days: Optional[int] = Field(None, ge=1, le=90)

    @model_validator(mode="after")
    def check_dates(self) -> "CohortCreate":
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class CohortResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    status: CohortStatus
    check_in_frequency_days: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CohortListResponse(BaseModel):
    cohorts: list[CohortResponse]
    total: int


class MembershipCreate(BaseModel):
    user_id: int = Field(..., gt=0)


class MembershipStatusUpdate(BaseModel):
    status: MembershipStatus


class MembershipResponse(BaseModel):
    id: int
    cohort_id: int
    user_id: int
    status: MembershipStatus
    joined_at: datetime
    left_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
