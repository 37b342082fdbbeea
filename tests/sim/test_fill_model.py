"""Tests for simulator fill models.

- IMMEDIATE: every order fills at its limit
- CROSS: BUY filled if ask <= limit, SELL filled if bid >= limit
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from scalper.contracts import OrderSide
from scalper.market import OpenOrder
from scalper.sim import CrossFillModel, FillModel, ImmediateFillModel, MarketTick
from scalper.sim.fill_model import create_fill_model


def make_order(side: OrderSide, price: str) -> OpenOrder:
    return OpenOrder(
        id="1",
        market_id="btc_usd",
        side=side,
        price=Decimal(price),
        quantity=Decimal("0.1"),
    )


TICK = MarketTick(
    index=0,
    price=Decimal("42000"),
    bid=Decimal("41990"),
    ask=Decimal("42010"),
)


class TestImmediateFillModel:
    """Test IMMEDIATE fill model."""

    @pytest.mark.parametrize("side", [OrderSide.BUY, OrderSide.SELL])
    def test_fills_at_limit_regardless_of_market(self, side: OrderSide) -> None:
        result = ImmediateFillModel().check_fill(make_order(side, "99999"), TICK)

        assert result.filled is True
        assert result.fill_price == Decimal("99999")
        assert result.fill_qty == Decimal("0.1")


class TestCrossFillModel:
    """Test CROSS fill model."""

    def test_buy_filled_when_ask_at_limit(self) -> None:
        result = CrossFillModel().check_fill(make_order(OrderSide.BUY, "42010"), TICK)
        assert result.filled is True
        assert result.fill_price == Decimal("42010")

    def test_buy_not_filled_below_ask(self) -> None:
        result = CrossFillModel().check_fill(make_order(OrderSide.BUY, "42009"), TICK)
        assert result.filled is False
        assert result.fill_price is None
        assert result.fill_qty is None

    def test_sell_filled_when_bid_at_limit(self) -> None:
        result = CrossFillModel().check_fill(make_order(OrderSide.SELL, "41990"), TICK)
        assert result.filled is True
        assert result.fill_qty == Decimal("0.1")

    def test_sell_not_filled_above_bid(self) -> None:
        result = CrossFillModel().check_fill(make_order(OrderSide.SELL, "41991"), TICK)
        assert result.filled is False


class TestCreateFillModel:
    """Test factory."""

    def test_immediate(self) -> None:
        assert isinstance(create_fill_model(FillModel.IMMEDIATE), ImmediateFillModel)

    def test_cross(self) -> None:
        assert isinstance(create_fill_model(FillModel.CROSS), CrossFillModel)
