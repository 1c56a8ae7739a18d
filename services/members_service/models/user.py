"""User model: coaching platform account with credit balance."""

from datetime import datetime
from typing import Optional

from libs.auth.models import Role
from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.members_service.models.enums import enum_values
from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

CHECK_IN_FREQUENCY_MIN_DAYS = 1
CHECK_IN_FREQUENCY_MAX_DAYS = 90


class User(Base):
    """Admin, coach or client account.

    ``credits`` is a cached running total of the user's credit ledger and is
    only written by ``credits_service.services.ledger_ops.apply_credit_delta``.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    role: Mapped[Role] = mapped_column(
        SAEnum(
            Role,
            name="role_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=Role.CLIENT,
        nullable=False,
        index=True,
    )
    credits: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
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
        CheckConstraint("credits >= 0", name="credits_non_negative"),
        CheckConstraint(
            "check_in_frequency_days IS NULL OR "
            f"(check_in_frequency_days >= {CHECK_IN_FREQUENCY_MIN_DAYS} AND "
            f"check_in_frequency_days <= {CHECK_IN_FREQUENCY_MAX_DAYS})",
            name="check_in_frequency_range",
        ),
    )

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email} role={self.role.value} credits={self.credits}>"
