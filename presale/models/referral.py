"""
Referral models.

Referral links a referrer to a referred user at a chain level;
ReferralEarning records each commission paid along that link.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from presale.models.base import Base
from presale.models.types import MoneyType

if TYPE_CHECKING:
    from presale.models.user import User


class Referral(Base):
    """Referral model - referrer/referral relationship per level."""

    __tablename__ = "referrals"
    __table_args__ = (
        UniqueConstraint(
            'referrer_id', 'referral_id', name='uq_referral_referrer_referral'
        ),
        CheckConstraint('level >= 1', name='check_referral_level_positive'),
        CheckConstraint(
            'referrer_id <> referral_id', name='check_referral_not_self'
        ),
        CheckConstraint(
            'total_earned >= 0', name='check_referral_total_earned_non_negative'
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    referrer_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    referral_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    level: Mapped[int] = mapped_column(Integer, nullable=False)  # 1 = direct

    total_earned: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    # Relationships
    referrer: Mapped["User"] = relationship("User", foreign_keys=[referrer_id])
    referral: Mapped["User"] = relationship("User", foreign_keys=[referral_id])
    earnings: Mapped[list["ReferralEarning"]] = relationship(
        "ReferralEarning",
        back_populates="referral",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Referral(id={self.id}, referrer_id={self.referrer_id}, "
            f"referral_id={self.referral_id}, level={self.level})>"
        )


class ReferralEarning(Base):
    """ReferralEarning model - immutable commission records."""

    __tablename__ = "referral_earnings"
    __table_args__ = (
        CheckConstraint('amount > 0', name='check_referral_earning_positive'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    referral_id: Mapped[int] = mapped_column(
        ForeignKey("referrals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    source_transaction_id: Mapped[int | None] = mapped_column(
        ForeignKey("transactions.id", ondelete="SET NULL"), nullable=True, index=True
    )
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    referral: Mapped["Referral"] = relationship(
        "Referral", back_populates="earnings"
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ReferralEarning(id={self.id}, referral_id={self.referral_id}, "
            f"amount={self.amount})>"
        )
