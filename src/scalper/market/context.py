"""Market access for strategies.

TradingContext binds a TradingApi to one Market and exposes the handful of
operations the scalping strategies need: top of book, order submission,
open-order checks and budget-to-quantity conversion.
"""

from __future__ import annotations

import logging
import time
from decimal import ROUND_DOWN, Decimal
from typing import TYPE_CHECKING

from scalper.contracts import OrderSide
from scalper.market.errors import NoLiquidityError, TradingApiError
from scalper.market.types import OrderState

if TYPE_CHECKING:
    from collections.abc import Callable

    from scalper.market.api import TradingApi
    from scalper.market.types import Market

logger = logging.getLogger(__name__)

# Most exchanges use 8 decimal places for prices and quantities
PRICE_SCALE = Decimal("0.00000001")


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class TradingContext:
    """MarketAccess implementation over a TradingApi.

    Args:
        trading_api: Exchange adapter.
        market: Market to trade on.
        clock: Returns the current time in epoch ms. Backtests inject a
            simulated clock so transaction timestamps are reproducible.
    """

    def __init__(
        self,
        trading_api: TradingApi,
        market: Market,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._api = trading_api
        self._market = market
        self._clock = clock or _wall_clock_ms

    @property
    def market_name(self) -> str:
        return self._market.name

    @property
    def market_id(self) -> str:
        return self._market.id

    @property
    def base_currency(self) -> str:
        return self._market.base_currency

    @property
    def counter_currency(self) -> str:
        return self._market.counter_currency

    @property
    def exchange_api(self) -> str:
        return self._api.impl_name

    def now_ms(self) -> int:
        """Current time in epoch milliseconds."""
        return self._clock()

    def top_of_book(self) -> tuple[Decimal, Decimal]:
        """Fetch best bid and best ask.

        Returns:
            Tuple of (best_bid, best_ask).

        Raises:
            NoLiquidityError: If either side of the book is empty.
            TradingApiError: If the best price on a side is not positive.
        """
        book = self._api.get_market_orders(self._market.id)
        if not book.buy_orders:
            raise NoLiquidityError("BUY")
        if not book.sell_orders:
            raise NoLiquidityError("SELL")

        best_bid = book.buy_orders[0].price
        best_ask = book.sell_orders[0].price
        if best_bid <= 0 or best_ask <= 0:
            raise TradingApiError(
                f"Malformed order book for {self._market.id}: bid={best_bid} ask={best_ask}"
            )
        return best_bid, best_ask

    def submit_buy(self, quantity: Decimal, price: Decimal) -> OrderState:
        """Send a BUY limit order to the exchange."""
        return self._submit(OrderSide.BUY, quantity, price)

    def submit_sell(self, quantity: Decimal, price: Decimal) -> OrderState:
        """Send a SELL limit order to the exchange."""
        return self._submit(OrderSide.SELL, quantity, price)

    def _submit(self, side: OrderSide, quantity: Decimal, price: Decimal) -> OrderState:
        logger.info(
            f"{self.market_name} Sending {side.value} order to exchange --->",
            extra={"quantity": str(quantity), "price": str(price)},
        )
        order_id = self._api.create_order(self._market.id, side, quantity, price)
        logger.info(
            f"{self.market_name} {side.value} order sent successfully",
            extra={"order_id": order_id},
        )
        return OrderState(id=order_id, side=side, price=price, quantity=quantity)

    def is_open(self, order_id: str) -> bool:
        """Check whether an order is still open on the exchange.

        There is no partial-fill model: an order missing from the open-order
        list is treated as fully filled.
        """
        open_orders = self._api.get_your_open_orders(self._market.id)
        return any(order.id == order_id for order in open_orders)

    def quantity_for_budget(self, counter_amount: Decimal) -> Decimal:
        """Base currency quantity purchasable for a counter currency amount.

        Uses the latest trade price and rounds down to 8 decimal places,
        in favour of the exchange, so we never over-commit.
        """
        last_price = self._api.get_latest_market_price(self._market.id)
        if last_price <= 0:
            raise TradingApiError(f"Malformed last trade price for {self._market.id}: {last_price}")

        quantity = (counter_amount / last_price).quantize(PRICE_SCALE, rounding=ROUND_DOWN)
        logger.info(
            f"{self.market_name} Amount of {self.base_currency} to BUY for "
            f"{counter_amount} {self.counter_currency}: {quantity}",
            extra={"last_price": str(last_price)},
        )
        return quantity
