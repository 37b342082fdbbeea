"""Strategy configuration.

Configs are frozen (immutable) and built once at strategy init from raw
string config items. Percentages are configured as whole percent values
(e.g. "2" means 2%) and stored as fractions.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from scalper.contracts.base import parse_decimal
from scalper.strategy.base import StrategyConfigError, StrategyConfigItems

COUNTER_CURRENCY_BUY_ORDER_AMOUNT = "counter-currency-buy-order-amount"
PERCENT_CHANGE_THRESHOLD = "percent-change-threshold"
MINIMUM_PERCENTAGE_GAIN = "minimum-percentage-gain"
MAX_CONCURRENT_SELL_ORDERS = "max-concurrent-sell-orders"

DEFAULT_MAX_CONCURRENT_SELL_ORDERS = 5

_FRACTION_SCALE = Decimal("0.00000001")


def _decimal_item(items: StrategyConfigItems, key: str) -> Decimal:
    raw = items.require(key)
    try:
        return parse_decimal(raw)
    except ValueError as e:
        raise StrategyConfigError(f"{key} is not a number: {raw!r}") from e


def _percent_item(items: StrategyConfigItems, key: str) -> Decimal:
    percent = _decimal_item(items, key)
    return (percent / Decimal(100)).quantize(_FRACTION_SCALE, rounding=ROUND_HALF_UP)


def _int_item(items: StrategyConfigItems, key: str, default: int) -> int:
    raw = items.get(key)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError as e:
        raise StrategyConfigError(f"{key} is not an integer: {raw!r}") from e


class _StrategyConfigBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    strategy_id: str = Field(description="Strategy ID from strategies.yaml")
    counter_currency_buy_order_amount: Decimal = Field(
        gt=0,
        description="Counter currency amount spent per BUY order",
    )

    @field_validator("counter_currency_buy_order_amount", mode="before")
    @classmethod
    def parse_amount(cls, v: object) -> Decimal:
        """Parse Decimal fields."""
        return parse_decimal(v)


class MultiOrderStrategyConfig(_StrategyConfigBase):
    """Config for MultiOrderScalpingStrategy (frozen)."""

    percent_change_threshold: Decimal = Field(
        gt=0,
        lt=1,
        description="Fractional move that sets the SELL above a fill and the BUY trigger below",
    )
    max_concurrent_sell_orders: int = Field(
        default=DEFAULT_MAX_CONCURRENT_SELL_ORDERS,
        ge=1,
        description="Cap on outstanding SELL orders",
    )

    @field_validator("percent_change_threshold", mode="before")
    @classmethod
    def parse_threshold(cls, v: object) -> Decimal:
        """Parse Decimal fields."""
        return parse_decimal(v)

    @classmethod
    def from_config_items(cls, items: StrategyConfigItems) -> MultiOrderStrategyConfig:
        """Build config from raw items, failing fast on any bad value.

        Raises:
            StrategyConfigError: If an item is missing, not a number or out of range.
        """
        try:
            return cls(
                strategy_id=items.strategy_id,
                counter_currency_buy_order_amount=_decimal_item(
                    items, COUNTER_CURRENCY_BUY_ORDER_AMOUNT
                ),
                percent_change_threshold=_percent_item(items, PERCENT_CHANGE_THRESHOLD),
                max_concurrent_sell_orders=_int_item(
                    items, MAX_CONCURRENT_SELL_ORDERS, DEFAULT_MAX_CONCURRENT_SELL_ORDERS
                ),
            )
        except (ValidationError, InvalidOperation) as e:
            raise StrategyConfigError(f"Invalid config for {items.strategy_id}: {e}") from e


class ScalpingStrategyConfig(_StrategyConfigBase):
    """Config for the single-order ScalpingStrategy (frozen)."""

    minimum_percentage_gain: Decimal = Field(
        gt=0,
        lt=1,
        description="Fractional gain added to the BUY fill price for the SELL order",
    )

    @field_validator("minimum_percentage_gain", mode="before")
    @classmethod
    def parse_gain(cls, v: object) -> Decimal:
        """Parse Decimal fields."""
        return parse_decimal(v)

    @classmethod
    def from_config_items(cls, items: StrategyConfigItems) -> ScalpingStrategyConfig:
        """Build config from raw items, failing fast on any bad value.

        Raises:
            StrategyConfigError: If an item is missing, not a number or out of range.
        """
        try:
            return cls(
                strategy_id=items.strategy_id,
                counter_currency_buy_order_amount=_decimal_item(
                    items, COUNTER_CURRENCY_BUY_ORDER_AMOUNT
                ),
                minimum_percentage_gain=_percent_item(items, MINIMUM_PERCENTAGE_GAIN),
            )
        except (ValidationError, InvalidOperation) as e:
            raise StrategyConfigError(f"Invalid config for {items.strategy_id}: {e}") from e
