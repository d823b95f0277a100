"""
Referral service.

Builds multi-level referral chains and pays per-level commissions on
confirmed purchases.
"""

from decimal import ROUND_DOWN, Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from presale.config.business_constants import (
    AMOUNT_QUANTUM,
    REFERRAL_DEPTH,
    REFERRAL_RATES,
)
from presale.models.enums import TransactionStatus, TransactionType
from presale.models.referral import ReferralEarning
from presale.models.user import User
from presale.repositories.platform_stats_repository import PlatformStatsRepository
from presale.repositories.referral_repository import ReferralRepository
from presale.repositories.transaction_repository import TransactionRepository
from presale.repositories.user_repository import UserRepository
from presale.utils.datetime_utils import utc_now


class ReferralService:
    """Referral chain and commission management."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral service."""
        self.session = session
        self.referral_repo = ReferralRepository(session)
        self.user_repo = UserRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.stats_repo = PlatformStatsRepository(session)

    async def get_referral_chain(
        self, user_id: int, depth: int = REFERRAL_DEPTH
    ) -> list[User]:
        """
        Get upline of a user by following referrer links.

        The walk is bounded by ``depth`` and stops early on a loop.

        Args:
            user_id: User ID
            depth: Maximum number of levels

        Returns:
            List of users from direct referrer to Nth level
        """
        chain: list[User] = []
        seen = {user_id}

        user = await self.user_repo.get_by_id(user_id)
        while user is not None and user.referrer_id is not None and len(chain) < depth:
            if user.referrer_id in seen:
                logger.warning(
                    "Referral loop detected while walking chain",
                    extra={"user_id": user_id, "loop_at": user.referrer_id},
                )
                break
            seen.add(user.referrer_id)
            user = await self.user_repo.get_by_id(user.referrer_id)
            if user is not None:
                chain.append(user)

        return chain

    async def create_referral_relationships(
        self, new_user_id: int, direct_referrer_id: int
    ) -> tuple[bool, str | None]:
        """
        Create referral links for a new user.

        Creates one link per level up to REFERRAL_DEPTH. Does not commit;
        the caller owns the transaction.

        Args:
            new_user_id: New user ID
            direct_referrer_id: Direct referrer ID

        Returns:
            Tuple of (success, error_message)
        """
        if new_user_id == direct_referrer_id:
            return False, "Self-referral is not allowed"

        direct_referrer = await self.user_repo.get_by_id(direct_referrer_id)
        if not direct_referrer:
            return False, "Referrer not found"

        referrers = await self.get_referral_chain(
            direct_referrer_id, REFERRAL_DEPTH - 1
        )
        referrers.insert(0, direct_referrer)

        referrer_ids = [r.id for r in referrers]
        if new_user_id in referrer_ids:
            logger.warning(
                "Referral loop detected",
                extra={
                    "new_user_id": new_user_id,
                    "direct_referrer_id": direct_referrer_id,
                    "chain_ids": referrer_ids,
                },
            )
            return False, "Referral chain would form a loop"

        for level, referrer in enumerate(referrers[:REFERRAL_DEPTH], start=1):
            existing = await self.referral_repo.get_link(referrer.id, new_user_id)
            if existing:
                continue

            await self.referral_repo.create(
                referrer_id=referrer.id,
                referral_id=new_user_id,
                level=level,
                total_earned=Decimal("0"),
            )
            logger.debug(
                "Referral relationship created",
                extra={
                    "referrer_id": referrer.id,
                    "referral_id": new_user_id,
                    "level": level,
                },
            )

        logger.info(
            "Referral chain created",
            extra={
                "new_user_id": new_user_id,
                "direct_referrer_id": direct_referrer_id,
                "levels_created": min(len(referrers), REFERRAL_DEPTH),
            },
        )
        return True, None

    def calculate_commission(self, amount: Decimal, level: int) -> Decimal:
        """
        Calculate commission for a purchase at a referral level.

        Rounded down to storage precision.

        Args:
            amount: Purchase amount
            level: Referral level (1 = direct)

        Returns:
            Commission (0 for levels without a rate)
        """
        rate = REFERRAL_RATES.get(level, Decimal("0"))
        if amount <= 0 or rate <= 0:
            return Decimal("0")
        return (amount * rate).quantize(AMOUNT_QUANTUM, rounding=ROUND_DOWN)

    async def distribute_purchase_commission(
        self,
        user_id: int,
        purchase_amount: Decimal,
        source_transaction_id: int | None = None,
    ) -> list[ReferralEarning]:
        """
        Pay commissions to a buyer's upline.

        Banned or inactive referrers are skipped. Does not commit.

        Args:
            user_id: Buyer user ID
            purchase_amount: Confirmed purchase amount
            source_transaction_id: Purchase ledger entry

        Returns:
            Created earning records
        """
        earnings: list[ReferralEarning] = []
        links = await self.referral_repo.get_by_referral_user(user_id)

        for link in links:
            commission = self.calculate_commission(purchase_amount, link.level)
            if commission <= 0:
                continue

            referrer = await self.user_repo.get_by_id(link.referrer_id)
            if referrer is None or referrer.is_banned or not referrer.is_active:
                logger.info(
                    "Skipping referral commission for ineligible referrer",
                    extra={"referrer_id": link.referrer_id, "level": link.level},
                )
                continue

            earning = await self.referral_repo.add_earning(
                link, commission, source_transaction_id
            )
            await self.user_repo.increment(
                referrer.id, referral_earnings=commission
            )
            await self.transaction_repo.create(
                user_id=referrer.id,
                type=TransactionType.REFERRAL_BONUS.value,
                status=TransactionStatus.CONFIRMED.value,
                amount=commission,
                reference_id=link.id,
                confirmed_at=utc_now(),
            )
            await self.stats_repo.bump(total_referral_paid=commission)
            earnings.append(earning)

            logger.info(
                "Referral commission paid",
                extra={
                    "referrer_id": referrer.id,
                    "buyer_id": user_id,
                    "level": link.level,
                    "amount": str(commission),
                },
            )

        return earnings

    async def get_referral_stats(
        self, referrer_id: int
    ) -> dict[int, dict[str, int | Decimal]]:
        """
        Get per-level referral counts and earnings.

        Args:
            referrer_id: Referrer user ID

        Returns:
            Dict mapping level to {"count", "total_earned"}
        """
        return await self.referral_repo.get_referral_stats(referrer_id)
