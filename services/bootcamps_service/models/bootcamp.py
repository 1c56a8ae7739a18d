"""Bootcamp and BootcampAttendee models."""

from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.members_service.models import User
from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

# Credits one registration consumes.
BOOTCAMP_CREDIT_COST = 1


class Bootcamp(Base):
    """A scheduled group training session clients spend credits on."""

    __tablename__ = "bootcamps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    attendees: Mapped[list["BootcampAttendee"]] = relationship(
        back_populates="bootcamp",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="BootcampAttendee.created_at",
    )

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="time_range"),
        CheckConstraint("capacity IS NULL OR capacity > 0", name="capacity_positive"),
    )

    def __repr__(self) -> str:
        return f"<Bootcamp {self.id} {self.name}>"


class BootcampAttendee(Base):
    __tablename__ = "bootcamp_attendees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    bootcamp_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("bootcamps.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    bootcamp: Mapped["Bootcamp"] = relationship(back_populates="attendees")
    user: Mapped[User] = relationship(lazy="selectin")

    __table_args__ = (
        UniqueConstraint(
            "bootcamp_id", "user_id", name="uq_bootcamp_attendees_bootcamp_user"
        ),
    )
