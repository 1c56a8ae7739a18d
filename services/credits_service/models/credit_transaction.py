"""CreditTransaction model: immutable credit ledger."""

from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.credits_service.models.enums import CreditTransactionKind, enum_values
from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

REASON_MAX_LENGTH = 200


class CreditTransaction(Base):
    """Signed balance adjustment. Rows are never updated or deleted.

    ``users.credits`` always equals the sum of ``amount`` over a user's rows.
    """

    __tablename__ = "credit_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    kind: Mapped[CreditTransactionKind] = mapped_column(
        SAEnum(
            CreditTransactionKind,
            name="credit_transaction_kind_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    reason: Mapped[str] = mapped_column(String(REASON_MAX_LENGTH), nullable=False)
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)
    reference_type: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    reference_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_by_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint("amount <> 0", name="amount_non_zero"),
        CheckConstraint("balance_after >= 0", name="balance_after_non_negative"),
        Index(
            "ix_credit_transactions_user_created",
            "user_id",
            "created_at",
        ),
    )

    def __repr__(self) -> str:
        return f"<CreditTransaction {self.id} user={self.user_id} {self.amount:+d}>"
