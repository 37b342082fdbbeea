"""Market access layer.

- TradingApi: exchange adapter protocol
- TradingContext: market access used by strategies
- Value types for orders, order books and balances
- Exchange error taxonomy (transient vs. fatal)
"""

from scalper.market.api import TradingApi
from scalper.market.context import PRICE_SCALE, TradingContext
from scalper.market.errors import (
    ExchangeError,
    ExchangeNetworkError,
    NoLiquidityError,
    TradingApiError,
)
from scalper.market.types import (
    BalanceInfo,
    Market,
    MarketOrder,
    MarketOrderBook,
    OpenOrder,
    OrderState,
)

__all__ = [
    "PRICE_SCALE",
    "BalanceInfo",
    "ExchangeError",
    "ExchangeNetworkError",
    "Market",
    "MarketOrder",
    "MarketOrderBook",
    "NoLiquidityError",
    "OpenOrder",
    "OrderState",
    "TradingApi",
    "TradingApiError",
    "TradingContext",
]
