"""
Staking pool model.

A pool defines APR, lock period and stake limits shared by its stakes.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from presale.models.base import Base
from presale.models.types import MoneyType, RatePercentType

if TYPE_CHECKING:
    from presale.models.stake import Stake


class StakingPool(Base):
    """StakingPool model - staking products."""

    __tablename__ = "staking_pools"
    __table_args__ = (
        CheckConstraint('apr_percent >= 0', name='check_pool_apr_non_negative'),
        CheckConstraint('lock_days >= 0', name='check_pool_lock_days_non_negative'),
        CheckConstraint('min_stake >= 0', name='check_pool_min_stake_non_negative'),
        CheckConstraint('total_staked >= 0', name='check_pool_total_staked_non_negative'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    apr_percent: Mapped[Decimal] = mapped_column(
        RatePercentType, nullable=False
    )  # percent per year, simple interest
    lock_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    min_stake: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    max_stake: Mapped[Decimal | None] = mapped_column(MoneyType, nullable=True)

    total_staked: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
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

    stakes: Mapped[list["Stake"]] = relationship(
        "Stake",
        back_populates="pool",
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<StakingPool(id={self.id}, name={self.name}, "
            f"apr={self.apr_percent}%, total_staked={self.total_staked})>"
        )
