"""
Vesting schedule model.

Linear token grant with optional cliff. Soft-disabled via is_active,
never deleted.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from presale.models.base import Base
from presale.models.types import MoneyType

if TYPE_CHECKING:
    from presale.models.user import User


class VestingSchedule(Base):
    """VestingSchedule model - token grants unlocking over time."""

    __tablename__ = "vesting_schedules"
    __table_args__ = (
        CheckConstraint('total_amount > 0', name='check_vesting_total_positive'),
        CheckConstraint('end_date > start_date', name='check_vesting_dates_ordered'),
        CheckConstraint(
            'cliff_date IS NULL OR (cliff_date >= start_date AND cliff_date <= end_date)',
            name='check_vesting_cliff_in_range'
        ),
        CheckConstraint(
            'claimed_amount >= 0', name='check_vesting_claimed_non_negative'
        ),
        CheckConstraint(
            'claimed_amount <= total_amount',
            name='check_vesting_claimed_not_exceeds_total'
        ),
        CheckConstraint(
            'vested_amount <= total_amount',
            name='check_vesting_vested_not_exceeds_total'
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    presale_id: Mapped[int | None] = mapped_column(
        ForeignKey("presales.id", ondelete="SET NULL"), nullable=True, index=True
    )
    label: Mapped[str | None] = mapped_column(String(100), nullable=True)

    total_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    cliff_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    end_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    # Running counters, only ever incremented
    vested_amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    claimed_amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    last_claim_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    claim_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False
    )

    user: Mapped["User"] = relationship("User", back_populates="vesting_schedules")

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<VestingSchedule(id={self.id}, user_id={self.user_id}, "
            f"total={self.total_amount}, claimed={self.claimed_amount})>"
        )
