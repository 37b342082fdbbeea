"""Exchange error taxonomy.

Strategies treat these differently:
- ExchangeNetworkError, NoLiquidityError: transient, skip the cycle and retry
- TradingApiError: fatal, the strategy must stop until an operator intervenes
"""

from __future__ import annotations


class ExchangeError(Exception):
    """Base class for errors raised while talking to an exchange."""


class ExchangeNetworkError(ExchangeError):
    """Request to the exchange timed out or the connection dropped."""


class TradingApiError(ExchangeError):
    """Exchange rejected the request or returned a malformed response."""


class NoLiquidityError(ExchangeError):
    """Order book has no orders on one side (market may be closed)."""

    def __init__(self, side: str) -> None:
        super().__init__(f"Exchange returned no {side} orders")
        self.side = side
