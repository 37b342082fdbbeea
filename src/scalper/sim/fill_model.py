"""Fill models for the simulator.

IMMEDIATE: unconditional fills once the simulator moves past the submit sample.
CROSS: fills at the limit price once the synthetic book crosses the order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal  # noqa: TC003 - used at runtime in dataclasses
from typing import TYPE_CHECKING

from scalper.contracts import OrderSide
from scalper.sim.config import FillModel

if TYPE_CHECKING:
    from scalper.market import OpenOrder


@dataclass(frozen=True)
class FillResult:
    """Result of a fill check.

    Attributes:
        filled: Whether the order was filled.
        fill_price: Price at which order was filled (if filled).
        fill_qty: Quantity filled (if filled).
    """

    filled: bool
    fill_price: Decimal | None = None
    fill_qty: Decimal | None = None


@dataclass(frozen=True)
class MarketTick:
    """Synthetic market state at one sample.

    Attributes:
        index: Sample index in the price series.
        price: Sample (last trade) price.
        bid: Best bid derived from the sample.
        ask: Best ask derived from the sample.
    """

    index: int
    price: Decimal
    bid: Decimal
    ask: Decimal


class BaseFillModel(ABC):
    """Abstract base class for fill models."""

    @abstractmethod
    def check_fill(self, order: OpenOrder, tick: MarketTick) -> FillResult:
        """Check if an order should be filled given market data.

        Args:
            order: The open order to check.
            tick: Current market sample.

        Returns:
            FillResult indicating if and how the order was filled.
        """
        ...


class ImmediateFillModel(BaseFillModel):
    """Fills every order at its limit price, whatever the market does.

    Models "orders fill between cycles": the simulator only offers an order
    to the model from the sample after it was submitted.
    """

    def check_fill(self, order: OpenOrder, tick: MarketTick) -> FillResult:
        return FillResult(filled=True, fill_price=order.price, fill_qty=order.quantity)


class CrossFillModel(BaseFillModel):
    """Fills an order once the synthetic book crosses its limit.

    - BUY filled if ask <= limit price
    - SELL filled if bid >= limit price
    - Fill occurs at our limit price (optimistic)

    Does NOT model queue position or partial fills.
    """

    def check_fill(self, order: OpenOrder, tick: MarketTick) -> FillResult:
        if order.side == OrderSide.BUY and tick.ask <= order.price:
            return FillResult(filled=True, fill_price=order.price, fill_qty=order.quantity)
        if order.side == OrderSide.SELL and tick.bid >= order.price:
            return FillResult(filled=True, fill_price=order.price, fill_qty=order.quantity)
        return FillResult(filled=False)


def create_fill_model(fill_model: FillModel) -> BaseFillModel:
    """Instantiate the fill model selected in SimConfig."""
    if fill_model == FillModel.IMMEDIATE:
        return ImmediateFillModel()
    if fill_model == FillModel.CROSS:
        return CrossFillModel()
    raise NotImplementedError(f"Fill model {fill_model} not implemented")
