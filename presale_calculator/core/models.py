"""Pydantic snapshot models for calculator input."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from presale_calculator.utils.conversion import as_utc, reject_float


class StakeSnapshot(BaseModel):
    """Read-only view of a stake taken at computation time."""

    model_config = ConfigDict(frozen=True)

    principal: Decimal = Field(..., gt=0, description="Staked principal")
    staking_date: datetime = Field(..., description="When the stake was created")
    apr_percent: Decimal = Field(..., ge=0, description="Pool APR, percent per year")
    rewards_claimed: Decimal = Field(
        default=Decimal("0"), ge=0, description="Lifetime rewards already claimed"
    )

    @field_validator("principal", "apr_percent", "rewards_claimed", mode="before")
    @classmethod
    def no_floats(cls, v: object) -> object:
        """Reject binary floating point amounts."""
        return reject_float(v)

    @field_validator("staking_date")
    @classmethod
    def normalize_tz(cls, v: datetime) -> datetime:
        """Interpret naive timestamps as UTC."""
        return as_utc(v)


class VestingSnapshot(BaseModel):
    """Read-only view of a vesting schedule taken at computation time.

    Cross-field invariants (end after start, claimed within total) are
    checked by ``VestingAmountCalculator`` so that a violation surfaces
    as ``InvalidScheduleError`` rather than a pydantic error.
    """

    model_config = ConfigDict(frozen=True)

    total_amount: Decimal = Field(..., ge=0, description="Total granted amount")
    start_date: datetime
    end_date: datetime
    cliff_date: datetime | None = None
    claimed_amount: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator("total_amount", "claimed_amount", mode="before")
    @classmethod
    def no_floats(cls, v: object) -> object:
        """Reject binary floating point amounts."""
        return reject_float(v)

    @field_validator("start_date", "end_date", "cliff_date")
    @classmethod
    def normalize_tz(cls, v: datetime | None) -> datetime | None:
        """Interpret naive timestamps as UTC."""
        if v is None:
            return None
        return as_utc(v)
