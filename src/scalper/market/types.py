"""Market data types.

Immutable value types exchanged between the strategy, the TradingContext
and exchange adapters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal  # noqa: TC003 - used at runtime in dataclasses

from scalper.contracts import OrderSide  # noqa: TC001 - used at runtime


@dataclass(frozen=True)
class OrderState:
    """An order the strategy submitted and has not yet seen filled.

    Attributes:
        id: Exchange-assigned order ID.
        side: BUY or SELL.
        price: Limit price.
        quantity: Base currency quantity.
    """

    id: str
    side: OrderSide
    price: Decimal
    quantity: Decimal

    def __str__(self) -> str:
        return f"{self.side.value} {self.id} {self.quantity}@{self.price}"


@dataclass(frozen=True)
class Market:
    """A market the strategy trades on, e.g. BTC_USD."""

    id: str
    name: str
    base_currency: str
    counter_currency: str


@dataclass(frozen=True)
class MarketOrder:
    """One price level of the order book."""

    side: OrderSide
    price: Decimal
    quantity: Decimal


@dataclass(frozen=True)
class MarketOrderBook:
    """Order book snapshot, best price first on each side."""

    market_id: str
    buy_orders: tuple[MarketOrder, ...] = ()
    sell_orders: tuple[MarketOrder, ...] = ()


@dataclass(frozen=True)
class OpenOrder:
    """One of our orders still resting on the exchange."""

    id: str
    market_id: str
    side: OrderSide
    price: Decimal
    quantity: Decimal


@dataclass(frozen=True)
class BalanceInfo:
    """Available balances keyed by currency code."""

    available: dict[str, Decimal] = field(default_factory=dict)
