"""Exchange adapter interface.

TradingApi is the seam to a concrete exchange. Wire protocol, signing and
transport live behind it; the strategy never calls it directly and goes
through TradingContext instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from decimal import Decimal

    from scalper.contracts import OrderSide
    from scalper.market.types import BalanceInfo, MarketOrderBook, OpenOrder


class TradingApi(Protocol):
    """Protocol every exchange adapter implements.

    Every call may raise ExchangeNetworkError (transient) or
    TradingApiError (fatal).
    """

    @property
    def impl_name(self) -> str:
        """Human readable adapter name, e.g. 'bitstamp'."""
        ...

    def get_market_orders(self, market_id: str) -> MarketOrderBook:
        """Fetch the current order book."""
        ...

    def get_your_open_orders(self, market_id: str) -> list[OpenOrder]:
        """Fetch our orders that are still open."""
        ...

    def create_order(
        self,
        market_id: str,
        side: OrderSide,
        quantity: Decimal,
        price: Decimal,
    ) -> str:
        """Place a limit order and return the exchange order ID."""
        ...

    def cancel_order(self, order_id: str, market_id: str) -> bool:
        """Cancel an open order."""
        ...

    def get_latest_market_price(self, market_id: str) -> Decimal:
        """Price of the last trade on the market."""
        ...

    def get_balance_info(self) -> BalanceInfo:
        """Available balances for the account."""
        ...
