"""
Presale model.

Configuration and running totals of a token sale round.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from presale.models.base import Base
from presale.models.enums import PresaleStatus
from presale.models.types import MoneyType, PriceType

if TYPE_CHECKING:
    from presale.models.transaction import Transaction


class Presale(Base):
    """Presale model - token sale rounds."""

    __tablename__ = "presales"
    __table_args__ = (
        CheckConstraint('token_price > 0', name='check_presale_price_positive'),
        CheckConstraint('hard_cap > 0', name='check_presale_hard_cap_positive'),
        CheckConstraint('soft_cap >= 0', name='check_presale_soft_cap_non_negative'),
        CheckConstraint('soft_cap <= hard_cap', name='check_presale_soft_cap_le_hard_cap'),
        CheckConstraint('end_date > start_date', name='check_presale_dates_ordered'),
        CheckConstraint('raised_amount >= 0', name='check_presale_raised_non_negative'),
        CheckConstraint('raised_amount <= hard_cap', name='check_presale_raised_le_hard_cap'),
        CheckConstraint('tokens_sold >= 0', name='check_presale_tokens_sold_non_negative'),
        CheckConstraint(
            'tokens_sold <= total_tokens', name='check_presale_tokens_sold_le_total'
        ),
        Index('idx_presale_status_dates', 'status', 'start_date', 'end_date'),
    )

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Configuration
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    token_symbol: Mapped[str] = mapped_column(String(20), nullable=False)
    token_price: Mapped[Decimal] = mapped_column(
        PriceType, nullable=False
    )  # payment currency per token
    total_tokens: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    hard_cap: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    soft_cap: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    min_purchase: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    max_purchase: Mapped[Decimal | None] = mapped_column(
        MoneyType, nullable=True
    )
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    end_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    # Status
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PresaleStatus.UPCOMING.value, index=True
    )  # upcoming, active, ended, cancelled

    # Running totals
    raised_amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    tokens_sold: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    participants_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False
    )

    # Relationships
    transactions: Mapped[list["Transaction"]] = relationship(
        "Transaction",
        back_populates="presale",
    )

    @property
    def remaining_cap(self) -> Decimal:
        """Payment amount still accepted before the hard cap."""
        return max(self.hard_cap - self.raised_amount, Decimal("0"))

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Presale(id={self.id}, name={self.name}, "
            f"status={self.status}, raised={self.raised_amount})>"
        )
