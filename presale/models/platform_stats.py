"""
Platform statistics model.

Single-row table of platform-wide counters maintained by atomic
increments from the services.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from presale.models.base import Base
from presale.models.types import MoneyType


class PlatformStats(Base):
    """PlatformStats model - aggregate counters."""

    __tablename__ = "platform_stats"

    id: Mapped[int] = mapped_column(primary_key=True)

    total_users: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_raised: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    total_tokens_sold: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    total_staked: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    total_rewards_claimed: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    total_vested_claimed: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    total_referral_paid: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PlatformStats(users={self.total_users}, raised={self.total_raised}, "
            f"staked={self.total_staked})>"
        )
