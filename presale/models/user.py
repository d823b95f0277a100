"""
User model.

Represents a registered presale participant identified by wallet address.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

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
    from presale.models.stake import Stake
    from presale.models.transaction import Transaction
    from presale.models.vesting_schedule import VestingSchedule


class User(Base):
    """User model - presale participants."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            'total_invested >= 0',
            name='check_user_total_invested_non_negative'
        ),
        CheckConstraint(
            'total_tokens_purchased >= 0',
            name='check_user_total_tokens_non_negative'
        ),
        CheckConstraint(
            'referral_earnings >= 0',
            name='check_user_referral_earnings_non_negative'
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Identity
    wallet_address: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True
    )
    username: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )
    email: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    # Referral
    referral_code: Mapped[str] = mapped_column(
        String(20), nullable=False, unique=True, index=True
    )
    referrer_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Lifetime counters
    total_invested: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    total_tokens_purchased: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    referral_earnings: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    # Status flags
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    is_banned: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
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
    referrer: Mapped[Optional["User"]] = relationship(
        "User",
        remote_side=[id],
        back_populates="referrals",
        foreign_keys=[referrer_id],
    )
    referrals: Mapped[list["User"]] = relationship(
        "User",
        back_populates="referrer",
        foreign_keys=[referrer_id]
    )
    transactions: Mapped[list["Transaction"]] = relationship(
        "Transaction",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    stakes: Mapped[list["Stake"]] = relationship(
        "Stake",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    vesting_schedules: Mapped[list["VestingSchedule"]] = relationship(
        "VestingSchedule",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @property
    def masked_wallet(self) -> str:
        """
        Get masked wallet address for display.

        Returns:
            Masked wallet address (first 10 + ... + last 8)
        """
        if len(self.wallet_address) > 20:
            return f"{self.wallet_address[:10]}...{self.wallet_address[-8:]}"
        return self.wallet_address

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<User(id={self.id}, wallet={self.masked_wallet}, "
            f"referral_code={self.referral_code})>"
        )
