"""
User repository.

Data access layer for User model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from presale.models.user import User
from presale.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_by_wallet_address(
        self, wallet_address: str
    ) -> User | None:
        """
        Get user by wallet address (case-insensitive).

        Addresses are stored lower-cased.

        Args:
            wallet_address: Wallet address (any case)

        Returns:
            User or None
        """
        if not wallet_address:
            return None
        return await self.get_by(wallet_address=wallet_address.strip().lower())

    async def get_by_referral_code(
        self, referral_code: str
    ) -> User | None:
        """
        Get user by referral code.

        Args:
            referral_code: Referral code

        Returns:
            User or None
        """
        return await self.get_by(referral_code=referral_code.strip().upper())

    async def referral_code_exists(self, referral_code: str) -> bool:
        """
        Check whether a referral code is already taken.

        Args:
            referral_code: Candidate code

        Returns:
            True if taken
        """
        return await self.exists(referral_code=referral_code)
