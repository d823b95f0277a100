"""
Transaction model.

Ledger of purchases, staking movements, claims and referral bonuses.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from presale.models.base import Base
from presale.models.enums import TransactionStatus
from presale.models.types import MoneyType

if TYPE_CHECKING:
    from presale.models.presale import Presale
    from presale.models.user import User


class Transaction(Base):
    """Transaction model - append-only ledger entries."""

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint('amount >= 0', name='check_transaction_amount_non_negative'),
        CheckConstraint(
            'token_amount >= 0', name='check_transaction_token_amount_non_negative'
        ),
        Index('idx_transaction_user_type', 'user_id', 'type'),
    )

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # References
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    presale_id: Mapped[int | None] = mapped_column(
        ForeignKey("presales.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Entry details
    type: Mapped[str] = mapped_column(
        String(30), nullable=False
    )  # purchase, stake, unstake, staking_reward, vesting_claim, referral_bonus
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TransactionStatus.PENDING.value, index=True
    )
    amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )  # payment currency
    token_amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )

    # Blockchain data
    tx_hash: Mapped[str | None] = mapped_column(
        String(255), nullable=True, unique=True
    )
    wallet_address: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    # Optional link to the staking/vesting row that produced the entry
    reference_id: Mapped[int | None] = mapped_column(nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    confirmed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="transactions",
    )
    presale: Mapped["Presale | None"] = relationship(
        "Presale",
        back_populates="transactions",
    )

    @property
    def is_pending(self) -> bool:
        """Whether the entry still awaits confirmation."""
        return self.status == TransactionStatus.PENDING.value

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Transaction(id={self.id}, user_id={self.user_id}, "
            f"type={self.type}, amount={self.amount}, status={self.status})>"
        )
