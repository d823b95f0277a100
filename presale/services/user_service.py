"""
User service.

Registration with referral support, lookups and profile updates.
"""

import re
import secrets

from loguru import logger
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from presale.config.business_constants import REFERRAL_CODE_ALPHABET
from presale.config.settings import settings
from presale.models.user import User
from presale.repositories.platform_stats_repository import PlatformStatsRepository
from presale.repositories.user_repository import UserRepository
from presale.schemas import UserProfileUpdate
from presale.services.referral_service import ReferralService
from presale.utils.db_decorators import with_auto_commit
from presale.utils.exceptions import (
    ReferralCodeExhaustedError,
    UserNotFoundError,
    ValidationError,
)

WALLET_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-f]{40}$")


class UserService:
    """User account management."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user service."""
        self.session = session
        self.user_repo = UserRepository(session)
        self.stats_repo = PlatformStatsRepository(session)
        self.referral_service = ReferralService(session)

    @staticmethod
    def normalize_wallet_address(wallet_address: str) -> str:
        """
        Normalize and validate an EVM wallet address.

        Args:
            wallet_address: Address in any case

        Returns:
            Lower-cased address

        Raises:
            ValidationError: If the address is malformed
        """
        normalized = (wallet_address or "").strip().lower()
        if not WALLET_ADDRESS_PATTERN.match(normalized):
            raise ValidationError(f"Invalid wallet address: {wallet_address!r}")
        return normalized

    async def generate_referral_code(self) -> str:
        """
        Generate a referral code not yet used by any user.

        Tries at most ``settings.referral_code_max_attempts`` candidates.

        Returns:
            Unique referral code

        Raises:
            ReferralCodeExhaustedError: If every attempt collided
        """
        attempts = settings.referral_code_max_attempts
        for attempt in range(1, attempts + 1):
            code = "".join(
                secrets.choice(REFERRAL_CODE_ALPHABET)
                for _ in range(settings.referral_code_length)
            )
            if not await self.user_repo.referral_code_exists(code):
                return code
            logger.debug(
                "Referral code collision",
                extra={"attempt": attempt, "max_attempts": attempts},
            )

        logger.error(
            "Referral code generation exhausted",
            extra={"attempts": attempts, "length": settings.referral_code_length},
        )
        raise ReferralCodeExhaustedError(
            f"Could not generate a unique referral code in {attempts} attempts"
        )

    @with_auto_commit
    async def register_user(
        self,
        wallet_address: str,
        username: str | None = None,
        email: str | None = None,
        referral_code: str | None = None,
    ) -> User:
        """
        Register new user with referral support.

        Args:
            wallet_address: User's wallet address
            username: Optional display name
            email: Optional email
            referral_code: Referral code of the inviting user

        Returns:
            Created user

        Raises:
            ValidationError: If wallet is malformed or already registered
            ReferralCodeExhaustedError: If no unique code could be generated
        """
        wallet = self.normalize_wallet_address(wallet_address)

        if await self.user_repo.get_by_wallet_address(wallet):
            raise ValidationError("User already registered")

        referrer_id = None
        if referral_code:
            referrer = await self.user_repo.get_by_referral_code(referral_code)
            if referrer:
                referrer_id = referrer.id
            else:
                logger.warning(
                    "Unknown referral code at registration",
                    extra={"referral_code": referral_code},
                )

        if username is not None or email is not None:
            try:
                profile = UserProfileUpdate(username=username, email=email)
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid profile data: {e}") from e
            username, email = profile.username, profile.email

        user = await self.user_repo.create(
            wallet_address=wallet,
            username=username,
            email=email,
            referrer_id=referrer_id,
            referral_code=await self.generate_referral_code(),
        )
        await self.stats_repo.bump(total_users=1)

        if referrer_id:
            success, error_msg = (
                await self.referral_service.create_referral_relationships(
                    new_user_id=user.id,
                    direct_referrer_id=referrer_id,
                )
            )
            if not success:
                logger.warning(
                    "Failed to create referral relationships",
                    extra={
                        "new_user_id": user.id,
                        "referrer_id": referrer_id,
                        "error": error_msg,
                    },
                )

        logger.info(
            "User registered",
            extra={"user_id": user.id, "referrer_id": referrer_id},
        )
        return user

    async def get_user(self, user_id: int) -> User:
        """
        Get user by ID.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def get_by_wallet(self, wallet_address: str) -> User | None:
        """Get user by wallet address (any case)."""
        return await self.user_repo.get_by_wallet_address(wallet_address)

    async def get_by_referral_code(self, referral_code: str) -> User | None:
        """Get user by referral code."""
        return await self.user_repo.get_by_referral_code(referral_code)

    @with_auto_commit
    async def update_profile(
        self, user_id: int, update: UserProfileUpdate
    ) -> User:
        """
        Apply an explicit profile update.

        Only fields set on ``update`` are written.

        Args:
            user_id: User ID
            update: Profile changes

        Returns:
            Updated user

        Raises:
            UserNotFoundError: If the user does not exist
        """
        changes = update.changes()
        user = await self.user_repo.update(user_id, **changes)
        if user is None:
            raise UserNotFoundError(user_id)

        logger.info(
            "User profile updated",
            extra={"user_id": user_id, "fields": sorted(changes)},
        )
        return user

    @with_auto_commit
    async def ban_user(self, user_id: int, banned: bool = True) -> User:
        """
        Ban or unban a user.

        Banned users cannot purchase, stake or claim, and receive no
        referral commissions.

        Args:
            user_id: User ID
            banned: New ban state

        Returns:
            Updated user
        """
        user = await self.user_repo.update(user_id, is_banned=banned)
        if user is None:
            raise UserNotFoundError(user_id)

        logger.warning(
            "User ban state changed",
            extra={"user_id": user_id, "is_banned": banned},
        )
        return user
