"""
Input records for service operations.

Explicit pydantic models with enumerated fields; unknown keys are
rejected instead of being written through to the database.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from presale_calculator.utils.conversion import reject_float


class UserProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    username: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(
        default=None, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
    )

    def changes(self) -> dict[str, str]:
        """Return only the fields explicitly set by the caller."""
        return self.model_dump(exclude_unset=True)


class PresaleConfig(BaseModel):
    """Configuration of a new presale round."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    token_symbol: str = Field(..., min_length=1, max_length=20)
    token_price: Decimal = Field(..., gt=0, description="Payment units per token")
    total_tokens: Decimal = Field(..., gt=0)
    hard_cap: Decimal = Field(..., gt=0)
    soft_cap: Decimal = Field(default=Decimal("0"), ge=0)
    min_purchase: Decimal = Field(default=Decimal("0"), ge=0)
    max_purchase: Decimal | None = Field(default=None, gt=0)
    start_date: datetime
    end_date: datetime

    @field_validator(
        "token_price", "total_tokens", "hard_cap", "soft_cap",
        "min_purchase", "max_purchase",
        mode="before",
    )
    @classmethod
    def no_floats(cls, v: object) -> object:
        """Reject binary floating point amounts."""
        return reject_float(v)

    @model_validator(mode="after")
    def check_consistency(self) -> "PresaleConfig":
        """Validate cross-field constraints."""
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        if self.soft_cap > self.hard_cap:
            raise ValueError("soft_cap cannot exceed hard_cap")
        if self.max_purchase is not None and self.max_purchase < self.min_purchase:
            raise ValueError("max_purchase cannot be below min_purchase")
        return self


class StakingPoolConfig(BaseModel):
    """Configuration of a new staking pool."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    apr_percent: Decimal = Field(..., ge=0, le=Decimal("100000"))
    lock_days: int = Field(default=0, ge=0)
    min_stake: Decimal = Field(default=Decimal("0"), ge=0)
    max_stake: Decimal | None = Field(default=None, gt=0)

    @field_validator("apr_percent", "min_stake", "max_stake", mode="before")
    @classmethod
    def no_floats(cls, v: object) -> object:
        """Reject binary floating point amounts."""
        return reject_float(v)

    @model_validator(mode="after")
    def check_limits(self) -> "StakingPoolConfig":
        """Validate stake limits."""
        if self.max_stake is not None and self.max_stake < self.min_stake:
            raise ValueError("max_stake cannot be below min_stake")
        return self
