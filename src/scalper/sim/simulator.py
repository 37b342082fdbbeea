"""Simulated exchange.

Deterministic TradingApi driven by a fixed price series. Used with a
TradingContext to backtest strategies against reproducible price paths.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from scalper.contracts import OrderSide
from scalper.market import (
    PRICE_SCALE,
    BalanceInfo,
    Market,
    MarketOrder,
    MarketOrderBook,
    OpenOrder,
    TradingApiError,
)
from scalper.sim.config import SimConfig
from scalper.sim.fill_model import MarketTick, create_fill_model

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


class IndexOutOfRangeError(IndexError):
    """The simulator was asked to move past the end of its price series."""


@dataclass(frozen=True)
class SimFill:
    """A fill applied to the simulated ledger."""

    order_id: str
    side: OrderSide
    price: Decimal
    quantity: Decimal
    index: int


class SimulatedTradingApi:
    """Simulated exchange replaying a fixed series of mid prices.

    The order book at sample i has a single level on each side, offset from
    the sample price by config.half_spread_frac. Orders fill between cycles:
    an order submitted at sample i is first offered to the fill model at
    sample i + 1. Matching is lazy, so the ledger only changes when
    get_your_open_orders() observes a fill.
    """

    def __init__(self, series: Sequence[Decimal], config: SimConfig | None = None) -> None:
        """Initialize simulator.

        Args:
            series: Mid price per trade cycle. Must not be empty.
            config: Simulation configuration. Uses defaults if not provided.
        """
        if not series:
            raise ValueError("Price series must not be empty")
        if any(p <= 0 for p in series):
            raise ValueError("Price series must be strictly positive")

        self.config = config or SimConfig()
        self.fill_model = create_fill_model(self.config.fill_model)
        self._series: tuple[Decimal, ...] = tuple(series)
        self._index = 0
        self._next_order_id = 1
        self._open_orders: list[OpenOrder] = []
        self._submitted_at: dict[str, int] = {}
        self._balances: dict[str, Decimal] = {
            self.config.base_currency: self.config.initial_base_balance,
            self.config.counter_currency: self.config.initial_counter_balance,
        }
        self.fills: list[SimFill] = []

    @property
    def impl_name(self) -> str:
        return self.config.impl_name

    @property
    def market(self) -> Market:
        """The one market this simulator serves."""
        return Market(
            id=self.config.market_id,
            name=self.config.market_name,
            base_currency=self.config.base_currency,
            counter_currency=self.config.counter_currency,
        )

    @property
    def num_samples(self) -> int:
        return len(self._series)

    @property
    def index(self) -> int:
        """Index of the current sample."""
        return self._index

    def advance(self) -> None:
        """Move to the next sample.

        Raises:
            IndexOutOfRangeError: If the current sample is the last one.
        """
        if self._index + 1 >= len(self._series):
            raise IndexOutOfRangeError(
                f"index {self._index + 1} exceeded size of series ({len(self._series)})"
            )
        self._index += 1

    def clock(self) -> int:
        """Simulated time of the current sample in epoch ms."""
        return self.config.start_ts + self._index * self.config.cycle_ms

    def current_tick(self) -> MarketTick:
        price = self._series[self._index]
        half_spread = self.config.half_spread_frac
        return MarketTick(
            index=self._index,
            price=price,
            bid=(price * (1 - half_spread)).quantize(PRICE_SCALE),
            ask=(price * (1 + half_spread)).quantize(PRICE_SCALE),
        )

    def get_market_orders(self, market_id: str) -> MarketOrderBook:
        self._check_market(market_id)
        tick = self.current_tick()
        depth = Decimal("100")
        return MarketOrderBook(
            market_id=market_id,
            buy_orders=(MarketOrder(OrderSide.BUY, tick.bid, depth),),
            sell_orders=(MarketOrder(OrderSide.SELL, tick.ask, depth),),
        )

    def get_your_open_orders(self, market_id: str) -> list[OpenOrder]:
        self._check_market(market_id)
        self._match_open_orders()
        return list(self._open_orders)

    def create_order(
        self,
        market_id: str,
        side: OrderSide,
        quantity: Decimal,
        price: Decimal,
    ) -> str:
        self._check_market(market_id)
        if quantity <= 0 or price <= 0:
            raise TradingApiError(f"Invalid order: quantity={quantity} price={price}")

        order_id = str(self._next_order_id)
        self._next_order_id += 1
        self._open_orders.append(
            OpenOrder(id=order_id, market_id=market_id, side=side, price=price, quantity=quantity)
        )
        self._submitted_at[order_id] = self._index
        return order_id

    def cancel_order(self, order_id: str, market_id: str) -> bool:
        self._check_market(market_id)
        remaining = [o for o in self._open_orders if o.id != order_id]
        cancelled = len(remaining) != len(self._open_orders)
        self._open_orders = remaining
        self._submitted_at.pop(order_id, None)
        return cancelled

    def get_latest_market_price(self, market_id: str) -> Decimal:
        self._check_market(market_id)
        return self._series[self._index]

    def get_balance_info(self) -> BalanceInfo:
        return BalanceInfo(available=dict(self._balances))

    def portfolio_value(self) -> Decimal:
        """Counter currency balance plus base currency marked at the current price."""
        base = self._balances[self.config.base_currency]
        counter = self._balances[self.config.counter_currency]
        return counter + base * self._series[self._index]

    def _check_market(self, market_id: str) -> None:
        if market_id != self.config.market_id:
            raise TradingApiError(f"Unknown market: {market_id}")

    def _match_open_orders(self) -> None:
        tick = self.current_tick()
        still_open: list[OpenOrder] = []
        for order in self._open_orders:
            if self._submitted_at[order.id] >= tick.index:
                still_open.append(order)
                continue
            result = self.fill_model.check_fill(order, tick)
            if result.filled and result.fill_price is not None and result.fill_qty is not None:
                self._apply_fill(order, result.fill_price, result.fill_qty, tick.index)
                del self._submitted_at[order.id]
            else:
                still_open.append(order)
        self._open_orders = still_open

    def _apply_fill(self, order: OpenOrder, price: Decimal, quantity: Decimal, index: int) -> None:
        base = self.config.base_currency
        counter = self.config.counter_currency
        notional = price * quantity

        if order.side == OrderSide.BUY:
            self._balances[base] += quantity
            self._balances[counter] -= notional
        else:
            self._balances[base] -= quantity
            self._balances[counter] += notional

        self.fills.append(
            SimFill(order_id=order.id, side=order.side, price=price, quantity=quantity, index=index)
        )

        for currency in (base, counter):
            if self._balances[currency] < 0:
                logger.warning(
                    f"Simulated {currency} balance went negative",
                    extra={"balance": str(self._balances[currency]), "order_id": order.id},
                )
