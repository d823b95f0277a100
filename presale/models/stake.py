"""
Stake models.

Stake holds a user's principal in a pool together with lifetime reward
counters; StakingRewardClaim is the immutable record of each payout.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from presale.models.base import Base
from presale.models.enums import StakeStatus
from presale.models.types import MoneyType

if TYPE_CHECKING:
    from presale.models.staking_pool import StakingPool
    from presale.models.user import User


class Stake(Base):
    """Stake model - user deposits into staking pools."""

    __tablename__ = "stakes"
    __table_args__ = (
        CheckConstraint('amount > 0', name='check_stake_amount_positive'),
        CheckConstraint(
            'rewards_earned >= 0', name='check_stake_rewards_earned_non_negative'
        ),
        CheckConstraint(
            'rewards_claimed >= 0', name='check_stake_rewards_claimed_non_negative'
        ),
        CheckConstraint(
            'rewards_claimed <= rewards_earned',
            name='check_stake_claimed_not_exceeds_earned'
        ),
        Index('idx_stake_user_status', 'user_id', 'status'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    pool_id: Mapped[int] = mapped_column(
        ForeignKey("staking_pools.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)  # principal
    staking_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(UTC),
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=StakeStatus.ACTIVE.value, index=True
    )  # active, withdrawn

    # Lifetime counters, only ever incremented
    rewards_earned: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    rewards_claimed: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    last_claim_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    withdrawn_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    # Bumped on every claim; guards the claim update
    claim_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

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
    user: Mapped["User"] = relationship("User", back_populates="stakes")
    pool: Mapped["StakingPool"] = relationship("StakingPool", back_populates="stakes")
    claims: Mapped[list["StakingRewardClaim"]] = relationship(
        "StakingRewardClaim",
        back_populates="stake",
        cascade="all, delete-orphan",
    )

    @property
    def is_active(self) -> bool:
        """Whether principal is still staked."""
        return self.status == StakeStatus.ACTIVE.value

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Stake(id={self.id}, user_id={self.user_id}, pool_id={self.pool_id}, "
            f"amount={self.amount}, status={self.status})>"
        )


class StakingRewardClaim(Base):
    """StakingRewardClaim model - append-only reward payout records."""

    __tablename__ = "staking_reward_claims"
    __table_args__ = (
        CheckConstraint('amount > 0', name='check_reward_claim_positive'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    stake_id: Mapped[int] = mapped_column(
        ForeignKey("stakes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    claimed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    stake: Mapped["Stake"] = relationship("Stake", back_populates="claims")

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<StakingRewardClaim(id={self.id}, stake_id={self.stake_id}, "
            f"amount={self.amount})>"
        )
