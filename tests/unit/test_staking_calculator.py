"""
Tests for the staking reward calculator.

Tests the calculator package without database dependencies.
"""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from presale_calculator import (
    CalculationInputError,
    InvalidStakeError,
    StakeSnapshot,
    StakingRewardCalculator,
)


T0 = datetime(2024, 1, 1, tzinfo=UTC)


class TestElapsedDays:
    """Tests for whole-day counting."""

    @pytest.fixture
    def calc(self) -> StakingRewardCalculator:
        """Create calculator instance."""
        return StakingRewardCalculator()

    def test_partial_day_is_floored(self, calc: StakingRewardCalculator) -> None:
        """23 hours is still day zero."""
        assert calc.elapsed_days(T0, T0 + timedelta(hours=23)) == 0

    def test_exact_days(self, calc: StakingRewardCalculator) -> None:
        assert calc.elapsed_days(T0, T0 + timedelta(days=7)) == 7

    def test_now_before_staking_date(self, calc: StakingRewardCalculator) -> None:
        """Clock skew never yields negative days."""
        assert calc.elapsed_days(T0, T0 - timedelta(days=3)) == 0

    def test_naive_datetimes_are_utc(self, calc: StakingRewardCalculator) -> None:
        naive = datetime(2024, 1, 1)
        assert calc.elapsed_days(naive, T0 + timedelta(days=2)) == 2


class TestComputeAccruedReward:
    """Tests for compute_accrued_reward."""

    @pytest.fixture
    def calc(self) -> StakingRewardCalculator:
        """Create calculator instance."""
        return StakingRewardCalculator()

    def test_thirty_days_at_twelve_percent(
        self, calc: StakingRewardCalculator
    ) -> None:
        """Reward equals principal * apr/365/100 * days exactly."""
        result = calc.compute_accrued_reward(
            principal=Decimal("1000"),
            staking_date=T0,
            apr_percent=Decimal("12"),
            rewards_claimed=Decimal("0"),
            now=T0 + timedelta(days=30),
        )

        expected = Decimal("1000") * (Decimal("12") / Decimal("365") / Decimal("100")) * 30
        assert result == expected

    def test_zero_at_staking_date(self, calc: StakingRewardCalculator) -> None:
        result = calc.compute_accrued_reward(
            Decimal("1000"), T0, Decimal("12"), Decimal("0"), T0
        )
        assert result == Decimal("0")

    def test_zero_before_staking_date(self, calc: StakingRewardCalculator) -> None:
        result = calc.compute_accrued_reward(
            Decimal("1000"), T0, Decimal("12"), Decimal("0"), T0 - timedelta(days=5)
        )
        assert result == Decimal("0")

    def test_prior_claims_are_subtracted(self, calc: StakingRewardCalculator) -> None:
        """10 days at 0.1%/day is 10; 4 already claimed leaves 6."""
        result = calc.compute_accrued_reward(
            Decimal("1000"), T0, Decimal("36.5"), Decimal("4"),
            T0 + timedelta(days=10),
        )
        assert result == Decimal("6")

    def test_never_negative(self, calc: StakingRewardCalculator) -> None:
        """Claims above accrual clamp to zero."""
        result = calc.compute_accrued_reward(
            Decimal("1000"), T0, Decimal("36.5"), Decimal("50"),
            T0 + timedelta(days=10),
        )
        assert result == Decimal("0")

    def test_zero_apr(self, calc: StakingRewardCalculator) -> None:
        result = calc.compute_accrued_reward(
            Decimal("1000"), T0, Decimal("0"), Decimal("0"),
            T0 + timedelta(days=100),
        )
        assert result == Decimal("0")

    def test_no_upper_cap(self, calc: StakingRewardCalculator) -> None:
        """Ten years at 36.5% pays 3650 with no cap applied."""
        result = calc.compute_accrued_reward(
            Decimal("1000"), T0, Decimal("36.5"), Decimal("0"),
            T0 + timedelta(days=3650),
        )
        assert result == Decimal("3650")

    def test_accepts_decimal_strings(self, calc: StakingRewardCalculator) -> None:
        result = calc.compute_accrued_reward(
            "1000", T0, "36.5", "0", T0 + timedelta(days=1)
        )
        assert result == Decimal("1")

    def test_monotonic_in_now(self, calc: StakingRewardCalculator) -> None:
        """Later time never yields a smaller reward."""
        previous = Decimal("0")
        for hours in range(0, 24 * 40, 7):
            current = calc.compute_accrued_reward(
                Decimal("2500"), T0, Decimal("18"), Decimal("0"),
                T0 + timedelta(hours=hours),
            )
            assert current >= previous
            previous = current

    def test_non_increasing_in_claimed(self, calc: StakingRewardCalculator) -> None:
        now = T0 + timedelta(days=20)
        results = [
            calc.compute_accrued_reward(
                Decimal("1000"), T0, Decimal("36.5"), Decimal(claimed), now
            )
            for claimed in ("0", "5", "10", "20", "25")
        ]
        assert results == sorted(results, reverse=True)

    def test_idempotent(self, calc: StakingRewardCalculator) -> None:
        args = (Decimal("777"), T0, Decimal("9.5"), Decimal("1.25"), T0 + timedelta(days=45))
        assert calc.compute_accrued_reward(*args) == calc.compute_accrued_reward(*args)


class TestInvalidStakeInput:
    """Malformed stakes fail loudly."""

    @pytest.fixture
    def calc(self) -> StakingRewardCalculator:
        """Create calculator instance."""
        return StakingRewardCalculator()

    @pytest.mark.parametrize("principal", [Decimal("0"), Decimal("-1")])
    def test_non_positive_principal(
        self, calc: StakingRewardCalculator, principal: Decimal
    ) -> None:
        with pytest.raises(InvalidStakeError, match="principal"):
            calc.compute_accrued_reward(
                principal, T0, Decimal("12"), Decimal("0"), T0 + timedelta(days=1)
            )

    def test_negative_apr(self, calc: StakingRewardCalculator) -> None:
        with pytest.raises(InvalidStakeError, match="apr_percent"):
            calc.compute_accrued_reward(
                Decimal("100"), T0, Decimal("-1"), Decimal("0"), T0
            )

    def test_negative_claimed(self, calc: StakingRewardCalculator) -> None:
        with pytest.raises(InvalidStakeError, match="rewards_claimed"):
            calc.compute_accrued_reward(
                Decimal("100"), T0, Decimal("12"), Decimal("-0.01"), T0
            )

    def test_float_rejected(self, calc: StakingRewardCalculator) -> None:
        """Binary floats never enter the computation."""
        with pytest.raises(InvalidStakeError):
            calc.compute_accrued_reward(100.0, T0, Decimal("12"), Decimal("0"), T0)

    def test_error_is_value_error(self, calc: StakingRewardCalculator) -> None:
        with pytest.raises(ValueError):
            calc.compute_accrued_reward("abc", T0, "12", "0", T0)
        assert issubclass(InvalidStakeError, CalculationInputError)


class TestStakeSnapshot:
    """Tests for StakeSnapshot model."""

    def test_compute_for_stake(self) -> None:
        snapshot = StakeSnapshot(
            principal=Decimal("1000"),
            staking_date=T0,
            apr_percent=Decimal("36.5"),
            rewards_claimed=Decimal("2"),
        )
        result = StakingRewardCalculator().compute_for_stake(
            snapshot, T0 + timedelta(days=5)
        )
        assert result == Decimal("3")

    def test_snapshot_is_frozen(self) -> None:
        snapshot = StakeSnapshot(
            principal=Decimal("1"), staking_date=T0, apr_percent=Decimal("1")
        )
        with pytest.raises(Exception):
            snapshot.principal = Decimal("2")

    def test_snapshot_rejects_float(self) -> None:
        with pytest.raises(ValueError):
            StakeSnapshot(principal=1.5, staking_date=T0, apr_percent=Decimal("1"))

    def test_naive_staking_date_becomes_utc(self) -> None:
        snapshot = StakeSnapshot(
            principal=Decimal("1"),
            staking_date=datetime(2024, 1, 1),
            apr_percent=Decimal("1"),
        )
        assert snapshot.staking_date == T0
