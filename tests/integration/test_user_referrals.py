"""Integration tests for user registration and the referral program."""

from decimal import Decimal

import pytest

from presale.models.enums import TransactionType
from presale.repositories.referral_repository import ReferralRepository
from presale.schemas import UserProfileUpdate
from presale.services.referral_service import ReferralService
from presale.services.stats_service import StatsService
from presale.services.user_service import UserService
from presale.utils.exceptions import UserNotFoundError, ValidationError


async def register_chain(session, wallet, length: int):
    """Register users where each one is referred by the previous one."""
    service = UserService(session)
    users = [await service.register_user(wallet(100))]
    for n in range(1, length):
        users.append(
            await service.register_user(
                wallet(100 + n), referral_code=users[-1].referral_code
            )
        )
    return users


class TestRegistration:
    """Tests for UserService.register_user."""

    @pytest.mark.asyncio
    async def test_register_normalizes_wallet(self, db_session, sample_wallet_address):
        service = UserService(db_session)

        user = await service.register_user(sample_wallet_address, username="alice")

        assert user.wallet_address == sample_wallet_address.lower()
        assert user.username == "alice"
        assert len(user.referral_code) == 8
        assert user.referrer_id is None

        found = await service.get_by_wallet(sample_wallet_address.upper().replace("0X", "0x"))
        assert found is not None and found.id == user.id

    @pytest.mark.asyncio
    async def test_duplicate_wallet_rejected(self, db_session, wallet):
        service = UserService(db_session)
        await service.register_user(wallet(1))

        with pytest.raises(ValidationError, match="already registered"):
            await service.register_user(wallet(1))

    @pytest.mark.asyncio
    async def test_unknown_referral_code_ignored(self, db_session, wallet):
        user = await UserService(db_session).register_user(
            wallet(2), referral_code="NOSUCHCODE"
        )
        assert user.referrer_id is None

    @pytest.mark.asyncio
    async def test_invalid_email_rejected(self, db_session, wallet):
        with pytest.raises(ValidationError, match="profile"):
            await UserService(db_session).register_user(wallet(3), email="broken")

    @pytest.mark.asyncio
    async def test_lookup_by_referral_code_any_case(self, db_session, user):
        found = await UserService(db_session).get_by_referral_code(
            user.referral_code.lower()
        )
        assert found is not None and found.id == user.id

    @pytest.mark.asyncio
    async def test_stats_count_users(self, db_session, wallet):
        await register_chain(db_session, wallet, 3)

        stats = await StatsService(db_session).get_stats()

        assert stats.total_users == 3


class TestProfile:
    """Tests for profile updates and bans."""

    @pytest.mark.asyncio
    async def test_update_profile(self, db_session, user):
        updated = await UserService(db_session).update_profile(
            user.id, UserProfileUpdate(email="a@example.com")
        )
        assert updated.email == "a@example.com"
        assert updated.username is None

    @pytest.mark.asyncio
    async def test_update_missing_user(self, db_session):
        with pytest.raises(UserNotFoundError):
            await UserService(db_session).update_profile(
                999, UserProfileUpdate(username="ghost")
            )

    @pytest.mark.asyncio
    async def test_ban_and_unban(self, db_session, user):
        service = UserService(db_session)

        assert (await service.ban_user(user.id)).is_banned is True
        assert (await service.ban_user(user.id, banned=False)).is_banned is False


class TestReferralChain:
    """Tests for multi-level referral links."""

    @pytest.mark.asyncio
    async def test_chain_walk_is_bounded(self, db_session, wallet):
        users = await register_chain(db_session, wallet, 5)
        service = ReferralService(db_session)

        chain = await service.get_referral_chain(users[4].id)

        assert [u.id for u in chain] == [users[3].id, users[2].id, users[1].id]

    @pytest.mark.asyncio
    async def test_links_created_per_level(self, db_session, wallet):
        users = await register_chain(db_session, wallet, 5)
        repo = ReferralRepository(db_session)

        links = await repo.get_by_referral_user(users[4].id)

        assert [(link.referrer_id, link.level) for link in links] == [
            (users[3].id, 1),
            (users[2].id, 2),
            (users[1].id, 3),
        ]

    @pytest.mark.asyncio
    async def test_self_referral_rejected(self, db_session, user):
        success, error = await ReferralService(
            db_session
        ).create_referral_relationships(user.id, user.id)

        assert success is False
        assert "Self-referral" in error

    @pytest.mark.asyncio
    async def test_referral_stats(self, db_session, wallet):
        users = await register_chain(db_session, wallet, 3)

        stats = await ReferralService(db_session).get_referral_stats(users[0].id)

        assert stats[1]["count"] == 1
        assert stats[2]["count"] == 1
        assert stats[3]["count"] == 0
        assert stats[1]["total_earned"] == Decimal("0")


class TestCommissionDistribution:
    """Tests for commission payout to the upline."""

    @pytest.mark.asyncio
    async def test_commission_per_level(self, db_session, wallet):
        users = await register_chain(db_session, wallet, 4)
        buyer_id = users[3].id
        upline_ids = [users[2].id, users[1].id, users[0].id]
        service = ReferralService(db_session)

        earnings = await service.distribute_purchase_commission(
            buyer_id, Decimal("1000")
        )
        await db_session.commit()

        assert [e.amount for e in earnings] == [
            Decimal("50"), Decimal("20"), Decimal("10"),
        ]
        for referrer_id, expected in zip(upline_ids, ("50", "20", "10")):
            referrer = await service.user_repo.get_for_update(referrer_id)
            assert referrer.referral_earnings == Decimal(expected)
            bonuses = await service.transaction_repo.get_by_user(
                referrer_id, type=TransactionType.REFERRAL_BONUS
            )
            assert len(bonuses) == 1

        stats = await StatsService(db_session).get_stats()
        assert stats.total_referral_paid == Decimal("80")

    @pytest.mark.asyncio
    async def test_banned_referrer_skipped(self, db_session, wallet):
        users = await register_chain(db_session, wallet, 3)
        await UserService(db_session).ban_user(users[1].id)

        earnings = await ReferralService(
            db_session
        ).distribute_purchase_commission(users[2].id, Decimal("1000"))

        assert [e.amount for e in earnings] == [Decimal("20")]
