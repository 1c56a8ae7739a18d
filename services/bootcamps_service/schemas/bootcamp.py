"""Bootcamp request/response schemas."""

from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import ensure_aware
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class BootcampBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None
    capacity: Optional[int] = Field(None, gt=0)
    description: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        return ensure_aware(v)


class BootcampCreate(BootcampBase):
    @model_validator(mode="after")
    def validate_range(self) -> "BootcampCreate":
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


class BootcampUpdate(BaseModel):
    """Partial update; the merged range is checked by the service."""

    name: Optional[str] = Field(None, min_length=2, max_length=200)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    capacity: Optional[int] = Field(None, gt=0)
    description: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_aware(v) if v is not None else v


class AttendeeUser(BaseModel):
    id: int
    name: Optional[str] = None
    email: str

    model_config = ConfigDict(from_attributes=True)


class BootcampAttendeeResponse(BaseModel):
    id: int
    user_id: int
    created_at: datetime
    user: Optional[AttendeeUser] = None

    model_config = ConfigDict(from_attributes=True)


class BootcampResponse(BootcampBase):
    id: int
    created_at: datetime
    updated_at: datetime
    attendees: list[BootcampAttendeeResponse] = []

    model_config = ConfigDict(from_attributes=True)


class BootcampListResponse(BaseModel):
    bootcamps: list[BootcampResponse]
    total: int


class AvailableBootcampResponse(BootcampBase):
    """Client view: counts instead of the attendee roster."""

    id: int
    attendee_count: int
    spots_left: Optional[int] = None
    is_registered: bool = False


class AttendeeCreate(BaseModel):
    user_id: int = Field(..., gt=0)


class AttendanceChangeResponse(BaseModel):
    bootcamp_id: int
    user_id: int
    credits_balance: int
    refunded: bool = False
