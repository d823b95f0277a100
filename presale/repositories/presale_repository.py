"""
Presale repository.

Data access layer for Presale model.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from presale.models.enums import PresaleStatus
from presale.models.presale import Presale
from presale.repositories.base import BaseRepository


class PresaleRepository(BaseRepository[Presale]):
    """Presale repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize presale repository."""
        super().__init__(Presale, session)

    async def get_active(self, now: datetime) -> Presale | None:
        """
        Get the presale currently open for purchases.

        Args:
            now: Current time

        Returns:
            Earliest-starting active presale whose window contains now
        """
        stmt = (
            select(Presale)
            .where(Presale.status == PresaleStatus.ACTIVE.value)
            .where(Presale.start_date <= now)
            .where(Presale.end_date > now)
            .order_by(Presale.start_date)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def apply_purchase(
        self,
        presale_id: int,
        amount: Decimal,
        token_amount: Decimal,
        new_participant: bool,
    ) -> bool:
        """
        Atomically add a confirmed purchase to the running totals.

        The update is conditional on the hard cap and the token supply
        still having room, so concurrent confirmations cannot oversell.

        Args:
            presale_id: Presale ID
            amount: Payment amount
            token_amount: Tokens bought
            new_participant: Whether to count a new participant

        Returns:
            True if applied, False if the presale is missing or sold out
        """
        stmt = (
            update(Presale)
            .where(Presale.id == presale_id)
            .where(Presale.raised_amount + amount <= Presale.hard_cap)
            .where(Presale.tokens_sold + token_amount <= Presale.total_tokens)
            .values(
                raised_amount=Presale.raised_amount + amount,
                tokens_sold=Presale.tokens_sold + token_amount,
                participants_count=(
                    Presale.participants_count + (1 if new_participant else 0)
                ),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
