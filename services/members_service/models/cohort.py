"""Cohort and CohortMembership models."""

from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.members_service.models.enums import (
    CohortStatus,
    MembershipStatus,
    enum_values,
)
from services.members_service.models.user import (
    CHECK_IN_FREQUENCY_MAX_DAYS,
    CHECK_IN_FREQUENCY_MIN_DAYS,
)
from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column


class Cohort(Base):
    """A group coaching program."""

    __tablename__ = "cohorts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    end_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    status: Mapped[CohortStatus] = mapped_column(
        SAEnum(
            CohortStatus,
            name="cohort_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=CohortStatus.ACTIVE,
        nullable=False,
    )
    check_in_frequency_days: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "check_in_frequency_days IS NULL OR "
            f"(check_in_frequency_days >= {CHECK_IN_FREQUENCY_MIN_DAYS} AND "
            f"check_in_frequency_days <= {CHECK_IN_FREQUENCY_MAX_DAYS})",
            name="check_in_frequency_range",
        ),
    )

    def __repr__(self) -> str:
        return f"<Cohort {self.id} {self.name}>"


class CohortMembership(Base):
    """Links a client to a cohort.

    A user has at most one ACTIVE membership; the partial unique index below
    enforces it at the database level.
    """

    __tablename__ = "cohort_memberships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cohort_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cohorts.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[MembershipStatus] = mapped_column(
        SAEnum(
            MembershipStatus,
            name="membership_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=MembershipStatus.ACTIVE,
        nullable=False,
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    left_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("cohort_id", "user_id", name="uq_cohort_memberships_cohort_user"),
        Index(
            "uq_cohort_memberships_one_active",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    def __repr__(self) -> str:
        return f"<CohortMembership {self.id} user={self.user_id} cohort={self.cohort_id} {self.status.value}>"
