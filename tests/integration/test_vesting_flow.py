"""Integration tests for vesting schedules and claims."""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from presale.models.enums import TransactionType
from presale.services.stats_service import StatsService
from presale.services.vesting_service import VestingService
from presale.utils.exceptions import (
    ConcurrentUpdateConflictError,
    InvalidScheduleError,
    OverclaimAttemptError,
    UserNotFoundError,
    ValidationError,
    VestingScheduleNotFoundError,
)


@pytest_asyncio.fixture
async def schedule(db_session, user, t0):
    """1200 tokens over 360 days with a 90-day cliff."""
    return await VestingService(db_session).create_schedule(
        user_id=user.id,
        total_amount=Decimal("1200"),
        start_date=t0,
        cliff_date=t0 + timedelta(days=90),
        end_date=t0 + timedelta(days=360),
        label="Seed allocation",
    )


class TestCreateSchedule:
    """Tests for schedule creation."""

    @pytest.mark.asyncio
    async def test_created(self, schedule):
        assert schedule.total_amount == Decimal("1200")
        assert schedule.claimed_amount == Decimal("0")
        assert schedule.is_active is True

    @pytest.mark.asyncio
    async def test_end_not_after_start(self, db_session, user, t0):
        with pytest.raises(InvalidScheduleError):
            await VestingService(db_session).create_schedule(
                user.id, Decimal("100"), t0, t0
            )

    @pytest.mark.asyncio
    async def test_cliff_outside_range(self, db_session, user, t0):
        """Creation is stricter than computation: cliff must lie in [start, end]."""
        with pytest.raises(InvalidScheduleError):
            await VestingService(db_session).create_schedule(
                user.id,
                Decimal("100"),
                t0,
                t0 + timedelta(days=10),
                cliff_date=t0 + timedelta(days=11),
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("total", ["0", "-5"])
    async def test_non_positive_total(self, db_session, user, t0, total):
        with pytest.raises(InvalidScheduleError):
            await VestingService(db_session).create_schedule(
                user.id, Decimal(total), t0, t0 + timedelta(days=10)
            )

    @pytest.mark.asyncio
    async def test_unknown_user(self, db_session, t0):
        with pytest.raises(UserNotFoundError):
            await VestingService(db_session).create_schedule(
                999, Decimal("100"), t0, t0 + timedelta(days=10)
            )


class TestClaimable:
    """Tests for claimable amount lookups."""

    @pytest.mark.asyncio
    async def test_before_cliff(self, db_session, schedule, t0):
        result = await VestingService(db_session).get_claimable(
            schedule.id, now=t0 + timedelta(days=30)
        )
        assert result == Decimal("0")

    @pytest.mark.asyncio
    async def test_midpoint(self, db_session, schedule, t0):
        result = await VestingService(db_session).get_claimable(
            schedule.id, now=t0 + timedelta(days=180)
        )
        assert result == Decimal("600")

    @pytest.mark.asyncio
    async def test_after_end(self, db_session, schedule, t0):
        result = await VestingService(db_session).get_claimable(
            schedule.id, now=t0 + timedelta(days=1000)
        )
        assert result == Decimal("1200")

    @pytest.mark.asyncio
    async def test_missing(self, db_session):
        with pytest.raises(VestingScheduleNotFoundError):
            await VestingService(db_session).get_claimable(77)


class TestClaim:
    """Tests for vesting claims."""

    @pytest.mark.asyncio
    async def test_claim_round_trip(self, db_session, user, schedule, t0):
        service = VestingService(db_session)
        schedule_id = schedule.id
        now = t0 + timedelta(days=180)

        updated = await service.claim(schedule_id, Decimal("250"), now=now)

        assert updated.claimed_amount == Decimal("250")
        assert updated.vested_amount == Decimal("250")
        assert await service.get_claimable(schedule_id, now=now) == Decimal("350")

        ledger = await service.transaction_repo.get_by_user(
            user.id, type=TransactionType.VESTING_CLAIM
        )
        assert [t.token_amount for t in ledger] == [Decimal("250")]

        stats = await StatsService(db_session).get_stats()
        assert stats.total_vested_claimed == Decimal("250")

    @pytest.mark.asyncio
    async def test_overclaim_leaves_counters_unchanged(self, db_session, schedule, t0):
        service = VestingService(db_session)
        schedule_id = schedule.id

        with pytest.raises(OverclaimAttemptError):
            await service.claim(
                schedule_id, Decimal("601"), now=t0 + timedelta(days=180)
            )

        reloaded = await service.get_schedule(schedule_id)
        assert reloaded.claimed_amount == Decimal("0")
        assert reloaded.vested_amount == Decimal("0")

    @pytest.mark.asyncio
    async def test_claim_before_cliff_is_overclaim(self, db_session, schedule, t0):
        with pytest.raises(OverclaimAttemptError):
            await VestingService(db_session).claim(
                schedule.id, Decimal("1"), now=t0 + timedelta(days=89)
            )

    @pytest.mark.asyncio
    async def test_full_claim_after_end(self, db_session, schedule, t0):
        service = VestingService(db_session)
        schedule_id = schedule.id
        now = t0 + timedelta(days=400)

        await service.claim(schedule_id, Decimal("1000"), now=now)
        await service.claim(schedule_id, Decimal("200"), now=now)

        assert await service.get_claimable(schedule_id, now=now) == Decimal("0")

    @pytest.mark.asyncio
    async def test_lost_race_raises_conflict(self, db_session, schedule, t0):
        service = VestingService(db_session)
        schedule_id = schedule.id
        service.vesting_repo.apply_claim = AsyncMock(return_value=False)

        with pytest.raises(ConcurrentUpdateConflictError):
            await service.claim(
                schedule_id, Decimal("10"), now=t0 + timedelta(days=200)
            )

    @pytest.mark.asyncio
    async def test_sequential_fractional_claims(self, db_session, schedule, t0):
        service = VestingService(db_session)
        schedule_id = schedule.id
        now = t0 + timedelta(days=180)

        for amount in ("0.1", "0.2", "0.3"):
            await service.claim(schedule_id, Decimal(amount), now=now)

        reloaded = await service.get_schedule(schedule_id)
        assert reloaded.claimed_amount == Decimal("0.6")
        assert reloaded.claim_version == 3
        assert await service.get_claimable(schedule_id, now=now) == Decimal("599.4")

    @pytest.mark.asyncio
    async def test_stale_version_not_applied(self, db_session, schedule, t0):
        service = VestingService(db_session)
        schedule_id = schedule.id
        now = t0 + timedelta(days=180)
        await service.claim(schedule_id, Decimal("10"), now=now)

        assert await service.vesting_repo.apply_claim(
            schedule_id, Decimal("5"), 0, now
        ) is False
        assert await service.vesting_repo.apply_claim(
            schedule_id, Decimal("5"), 1, now
        ) is True

        reloaded = await service.vesting_repo.get_for_update(schedule_id)
        assert reloaded.claimed_amount == Decimal("15")
        assert reloaded.claim_version == 2

    @pytest.mark.asyncio
    async def test_deactivated_schedule(self, db_session, user, schedule, t0):
        service = VestingService(db_session)
        schedule_id = schedule.id
        user_id = user.id
        now = t0 + timedelta(days=200)

        await service.deactivate(schedule_id)

        assert await service.get_claimable(schedule_id, now=now) == Decimal("0")
        with pytest.raises(ValidationError, match="inactive"):
            await service.claim(schedule_id, Decimal("1"), now=now)

        assert await service.get_user_schedules(user_id) == []
        assert len(await service.get_user_schedules(user_id, active_only=False)) == 1
