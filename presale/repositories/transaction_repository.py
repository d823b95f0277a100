"""
Transaction repository.

Data access layer for Transaction model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from presale.models.enums import TransactionStatus, TransactionType
from presale.models.transaction import Transaction
from presale.repositories.base import BaseRepository


class TransactionRepository(BaseRepository[Transaction]):
    """Transaction repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize transaction repository."""
        super().__init__(Transaction, session)

    async def get_by_tx_hash(self, tx_hash: str) -> Transaction | None:
        """
        Get transaction by blockchain hash.

        Args:
            tx_hash: Transaction hash

        Returns:
            Transaction or None
        """
        return await self.get_by(tx_hash=tx_hash)

    async def get_by_user(
        self,
        user_id: int,
        type: TransactionType | None = None,
        status: TransactionStatus | None = None,
        limit: int | None = None,
    ) -> list[Transaction]:
        """
        Get user's ledger entries, newest first.

        Args:
            user_id: User ID
            type: Optional type filter
            status: Optional status filter
            limit: Max number of results

        Returns:
            List of transactions
        """
        stmt = select(Transaction).where(Transaction.user_id == user_id)
        if type is not None:
            stmt = stmt.where(Transaction.type == type.value)
        if status is not None:
            stmt = stmt.where(Transaction.status == status.value)
        stmt = stmt.order_by(Transaction.created_at.desc(), Transaction.id.desc())
        if limit:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def has_confirmed_purchase(self, user_id: int, presale_id: int) -> bool:
        """
        Check whether user already has a confirmed purchase in a presale.

        Args:
            user_id: User ID
            presale_id: Presale ID

        Returns:
            True if a confirmed purchase exists
        """
        return await self.exists(
            user_id=user_id,
            presale_id=presale_id,
            type=TransactionType.PURCHASE.value,
            status=TransactionStatus.CONFIRMED.value,
        )
