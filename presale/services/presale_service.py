"""
Presale service.

Presale configuration, purchases and the purchase ledger lifecycle
(pending -> confirmed / failed).
"""

from datetime import datetime
from decimal import ROUND_DOWN, Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from presale.config.business_constants import AMOUNT_QUANTUM
from presale.models.enums import PresaleStatus, TransactionStatus, TransactionType
from presale.models.presale import Presale
from presale.models.transaction import Transaction
from presale.repositories.platform_stats_repository import PlatformStatsRepository
from presale.repositories.presale_repository import PresaleRepository
from presale.repositories.transaction_repository import TransactionRepository
from presale.repositories.user_repository import UserRepository
from presale.schemas import PresaleConfig
from presale.services.referral_service import ReferralService
from presale.utils.datetime_utils import ensure_utc, utc_now
from presale.utils.db_decorators import with_auto_commit
from presale.utils.exceptions import (
    PresaleNotFoundError,
    TransactionNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from presale.utils.validation import validate_amount


class PresaleService:
    """Presale rounds and purchases."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize presale service."""
        self.session = session
        self.presale_repo = PresaleRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.user_repo = UserRepository(session)
        self.stats_repo = PlatformStatsRepository(session)
        self.referral_service = ReferralService(session)

    @with_auto_commit
    async def create_presale(
        self, config: PresaleConfig, activate: bool = False
    ) -> Presale:
        """
        Create a presale round.

        Args:
            config: Validated presale configuration
            activate: Open the round immediately

        Returns:
            Created presale
        """
        status = PresaleStatus.ACTIVE if activate else PresaleStatus.UPCOMING
        data = config.model_dump()
        data["start_date"] = ensure_utc(config.start_date)
        data["end_date"] = ensure_utc(config.end_date)

        presale = await self.presale_repo.create(**data, status=status.value)

        logger.info(
            "Presale created",
            extra={
                "presale_id": presale.id,
                "token_symbol": presale.token_symbol,
                "hard_cap": str(presale.hard_cap),
                "status": presale.status,
            },
        )
        return presale

    async def get_presale(self, presale_id: int) -> Presale:
        """
        Get presale by ID.

        Raises:
            PresaleNotFoundError: If the presale does not exist
        """
        presale = await self.presale_repo.get_by_id(presale_id)
        if presale is None:
            raise PresaleNotFoundError(presale_id)
        return presale

    async def get_active_presale(
        self, now: datetime | None = None
    ) -> Presale | None:
        """
        Get the presale open for purchases at ``now``.

        Args:
            now: Current time (defaults to UTC now)

        Returns:
            Active presale or None
        """
        now = ensure_utc(now) or utc_now()
        return await self.presale_repo.get_active(now)

    @with_auto_commit
    async def update_status(
        self, presale_id: int, status: PresaleStatus
    ) -> Presale:
        """
        Change presale status.

        Ended and cancelled rounds are final.

        Args:
            presale_id: Presale ID
            status: New status

        Returns:
            Updated presale

        Raises:
            PresaleNotFoundError: If the presale does not exist
            ValidationError: If the current status is final
        """
        presale = await self.presale_repo.get_for_update(presale_id)
        if presale is None:
            raise PresaleNotFoundError(presale_id)

        final = {PresaleStatus.ENDED.value, PresaleStatus.CANCELLED.value}
        if presale.status in final and presale.status != status.value:
            raise ValidationError(
                f"Presale {presale_id} is {presale.status} and cannot change status"
            )

        presale = await self.presale_repo.update(presale_id, status=status.value)
        logger.info(
            "Presale status changed",
            extra={"presale_id": presale_id, "status": status.value},
        )
        return presale

    def calculate_token_amount(
        self, amount: Decimal, token_price: Decimal
    ) -> Decimal:
        """
        Convert a payment into tokens, rounded down to storage precision.

        Args:
            amount: Payment amount
            token_price: Payment units per token

        Returns:
            Token amount
        """
        if amount <= 0 or token_price <= 0:
            return Decimal("0")
        return (amount / token_price).quantize(AMOUNT_QUANTUM, rounding=ROUND_DOWN)

    @with_auto_commit
    async def create_purchase(
        self,
        user_id: int,
        presale_id: int,
        amount: Decimal | str,
        tx_hash: str | None = None,
        now: datetime | None = None,
    ) -> Transaction:
        """
        Record a pending purchase.

        Counters are only applied on confirmation.

        Args:
            user_id: Buyer user ID
            presale_id: Presale ID
            amount: Payment amount
            tx_hash: Payment transaction hash
            now: Current time (defaults to UTC now)

        Returns:
            Pending purchase transaction

        Raises:
            UserNotFoundError: If the user does not exist
            PresaleNotFoundError: If the presale does not exist
            ValidationError: If the purchase breaks a presale rule
        """
        now = ensure_utc(now) or utc_now()
        amount = validate_amount(amount)

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        if user.is_banned or not user.is_active:
            raise ValidationError(f"User {user_id} cannot purchase")

        presale = await self.get_presale(presale_id)
        if presale.status != PresaleStatus.ACTIVE.value:
            raise ValidationError(f"Presale {presale_id} is {presale.status}")
        if not ensure_utc(presale.start_date) <= now < ensure_utc(presale.end_date):
            raise ValidationError(f"Presale {presale_id} is outside its sale window")

        if amount < presale.min_purchase:
            raise ValidationError(
                f"Amount {amount} is below minimum purchase {presale.min_purchase}"
            )
        if presale.max_purchase is not None and amount > presale.max_purchase:
            raise ValidationError(
                f"Amount {amount} exceeds maximum purchase {presale.max_purchase}"
            )
        if amount > presale.remaining_cap:
            raise ValidationError(
                f"Amount {amount} exceeds remaining cap {presale.remaining_cap}"
            )

        token_amount = self.calculate_token_amount(amount, presale.token_price)
        if token_amount <= 0:
            raise ValidationError("Amount buys less than the smallest token unit")
        if presale.tokens_sold + token_amount > presale.total_tokens:
            raise ValidationError("Not enough tokens left in this presale")

        if tx_hash and await self.transaction_repo.get_by_tx_hash(tx_hash):
            raise ValidationError(f"Transaction {tx_hash} already recorded")

        transaction = await self.transaction_repo.create(
            user_id=user_id,
            presale_id=presale_id,
            type=TransactionType.PURCHASE.value,
            status=TransactionStatus.PENDING.value,
            amount=amount,
            token_amount=token_amount,
            tx_hash=tx_hash,
            wallet_address=user.wallet_address,
            created_at=now,
        )

        logger.info(
            "Purchase recorded",
            extra={
                "transaction_id": transaction.id,
                "user_id": user_id,
                "presale_id": presale_id,
                "amount": str(amount),
                "token_amount": str(token_amount),
            },
        )
        return transaction

    @with_auto_commit
    async def confirm_transaction(
        self, transaction_id: int, now: datetime | None = None
    ) -> Transaction:
        """
        Confirm a pending purchase and apply all of its effects.

        Presale totals, the buyer's lifetime counters, platform stats and
        referral commissions are applied in one database transaction.

        Args:
            transaction_id: Purchase transaction ID
            now: Confirmation time (defaults to UTC now)

        Returns:
            Confirmed transaction

        Raises:
            TransactionNotFoundError: If the transaction does not exist
            ValidationError: If it is not a pending purchase or the
                presale has no room left
        """
        now = ensure_utc(now) or utc_now()

        transaction = await self.transaction_repo.get_for_update(transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)
        if transaction.type != TransactionType.PURCHASE.value:
            raise ValidationError(f"Transaction {transaction_id} is not a purchase")
        if not transaction.is_pending:
            raise ValidationError(
                f"Transaction {transaction_id} is already {transaction.status}"
            )

        new_participant = not await self.transaction_repo.has_confirmed_purchase(
            transaction.user_id, transaction.presale_id
        )
        applied = await self.presale_repo.apply_purchase(
            transaction.presale_id,
            transaction.amount,
            transaction.token_amount,
            new_participant,
        )
        if not applied:
            logger.warning(
                "Purchase confirmation rejected: presale cap reached",
                extra={
                    "transaction_id": transaction_id,
                    "presale_id": transaction.presale_id,
                },
            )
            raise ValidationError(
                f"Presale {transaction.presale_id} has no room for this purchase"
            )

        transaction.status = TransactionStatus.CONFIRMED.value
        transaction.confirmed_at = now

        await self.user_repo.increment(
            transaction.user_id,
            total_invested=transaction.amount,
            total_tokens_purchased=transaction.token_amount,
        )
        await self.stats_repo.bump(
            total_raised=transaction.amount,
            total_tokens_sold=transaction.token_amount,
        )
        await self.referral_service.distribute_purchase_commission(
            user_id=transaction.user_id,
            purchase_amount=transaction.amount,
            source_transaction_id=transaction.id,
        )
        await self.session.flush()

        logger.info(
            "Purchase confirmed",
            extra={
                "transaction_id": transaction_id,
                "user_id": transaction.user_id,
                "amount": str(transaction.amount),
            },
        )
        return transaction

    @with_auto_commit
    async def fail_transaction(
        self, transaction_id: int, now: datetime | None = None
    ) -> Transaction:
        """
        Mark a pending transaction as failed. No counters change.

        Raises:
            TransactionNotFoundError: If the transaction does not exist
            ValidationError: If it is not pending
        """
        transaction = await self.transaction_repo.get_for_update(transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)
        if not transaction.is_pending:
            raise ValidationError(
                f"Transaction {transaction_id} is already {transaction.status}"
            )

        transaction.status = TransactionStatus.FAILED.value
        transaction.confirmed_at = ensure_utc(now) or utc_now()
        await self.session.flush()

        logger.warning(
            "Transaction failed",
            extra={"transaction_id": transaction_id, "user_id": transaction.user_id},
        )
        return transaction

    async def get_user_transactions(
        self,
        user_id: int,
        type: TransactionType | None = None,
        limit: int | None = None,
    ) -> list[Transaction]:
        """Get a user's ledger entries, newest first."""
        return await self.transaction_repo.get_by_user(user_id, type=type, limit=limit)
