"""Simulator configuration.

SimConfig is frozen (immutable) and defines all simulation parameters.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from scalper.contracts.base import parse_decimal


class FillModel(str, Enum):
    """Fill model type.

    IMMEDIATE: every open order fills on the next open-order poll.
    CROSS: orders fill at their limit once the book crosses them.
    """

    IMMEDIATE = "IMMEDIATE"
    CROSS = "CROSS"


class SimConfig(BaseModel):
    """Simulator configuration (frozen).

    All monetary values use Decimal for precision.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    impl_name: str = Field(default="simulated", description="Reported exchange adapter name")
    market_id: str = Field(default="btc_usd", description="Market ID")
    market_name: str = Field(default="BTC_USD", description="Market display name")
    base_currency: str = Field(default="BTC")
    counter_currency: str = Field(default="USD")
    half_spread_frac: Annotated[
        Decimal,
        Field(ge=0, lt=1, description="Bid/ask offset from the sample price as a fraction"),
    ] = Field(default=Decimal("0.0005"))
    # $1000 to start - half USD, half BTC at 25000 USD/BTC
    initial_base_balance: Annotated[
        Decimal,
        Field(ge=0, description="Starting base currency balance"),
    ] = Field(default=Decimal("0.02"))
    initial_counter_balance: Annotated[
        Decimal,
        Field(ge=0, description="Starting counter currency balance"),
    ] = Field(default=Decimal("500"))
    fill_model: FillModel = Field(default=FillModel.IMMEDIATE)
    start_ts: int = Field(default=1706140800000, ge=0, description="Timestamp of sample 0 (ms)")
    cycle_ms: int = Field(default=60000, gt=0, description="Time between samples (ms)")

    @field_validator(
        "half_spread_frac",
        "initial_base_balance",
        "initial_counter_balance",
        mode="before",
    )
    @classmethod
    def parse_decimal_fields(cls, v: object) -> Decimal:
        """Parse Decimal fields."""
        return parse_decimal(v)
