"""Tests for SimulatedTradingApi.

Verifies:
- Synthetic book and clock derived from the current sample
- Orders fill lazily, never in the sample they were submitted in
- Ledger updates on fills
- Advancing past the end of the series fails
"""

from __future__ import annotations

import logging
from decimal import Decimal

import pytest

from scalper.contracts import OrderSide
from scalper.market import TradingApiError
from scalper.sim import FillModel, IndexOutOfRangeError, SimConfig, SimulatedTradingApi

SERIES = [Decimal("25000"), Decimal("26000"), Decimal("24000")]


class TestSimulatorSetup:
    """Test construction and market data."""

    def test_empty_series_rejected(self) -> None:
        with pytest.raises(ValueError):
            SimulatedTradingApi([])

    def test_non_positive_series_rejected(self) -> None:
        with pytest.raises(ValueError):
            SimulatedTradingApi([Decimal("100"), Decimal("0")])

    def test_market_from_config(self) -> None:
        api = SimulatedTradingApi(SERIES)
        assert api.impl_name == "simulated"
        assert api.market.id == "btc_usd"
        assert api.market.name == "BTC_USD"
        assert api.market.base_currency == "BTC"
        assert api.market.counter_currency == "USD"
        assert api.num_samples == 3

    def test_book_straddles_sample(self) -> None:
        api = SimulatedTradingApi(SERIES)
        book = api.get_market_orders("btc_usd")

        assert len(book.buy_orders) == 1
        assert len(book.sell_orders) == 1
        assert book.buy_orders[0].price == Decimal("24987.5")
        assert book.sell_orders[0].price == Decimal("25012.5")

    def test_latest_price_is_sample(self) -> None:
        api = SimulatedTradingApi(SERIES)
        assert api.get_latest_market_price("btc_usd") == Decimal("25000")
        api.advance()
        assert api.get_latest_market_price("btc_usd") == Decimal("26000")

    def test_unknown_market_rejected(self) -> None:
        api = SimulatedTradingApi(SERIES)
        with pytest.raises(TradingApiError):
            api.get_market_orders("eth_usd")


class TestSimulatorAdvance:
    """Test series navigation and clock."""

    def test_advance_past_end(self) -> None:
        api = SimulatedTradingApi(SERIES)
        api.advance()
        api.advance()

        with pytest.raises(IndexOutOfRangeError):
            api.advance()
        assert api.index == 2

    def test_index_error_subclass(self) -> None:
        with pytest.raises(IndexError):
            SimulatedTradingApi([Decimal("1")]).advance()

    def test_clock_follows_index(self) -> None:
        config = SimConfig(start_ts=1000, cycle_ms=500)
        api = SimulatedTradingApi(SERIES, config)
        assert api.clock() == 1000
        api.advance()
        assert api.clock() == 1500


class TestSimulatorOrders:
    """Test order creation and lazy matching."""

    def test_order_ids_increase(self) -> None:
        api = SimulatedTradingApi(SERIES, SimConfig(fill_model=FillModel.CROSS))
        first = api.create_order("btc_usd", OrderSide.BUY, Decimal("0.01"), Decimal("20000"))
        second = api.create_order("btc_usd", OrderSide.SELL, Decimal("0.01"), Decimal("30000"))
        assert (first, second) == ("1", "2")

    @pytest.mark.parametrize(
        ("quantity", "price"),
        [("0", "25000"), ("-1", "25000"), ("0.01", "0")],
    )
    def test_invalid_order_rejected(self, quantity: str, price: str) -> None:
        api = SimulatedTradingApi(SERIES)
        with pytest.raises(TradingApiError):
            api.create_order("btc_usd", OrderSide.BUY, Decimal(quantity), Decimal(price))

    def test_immediate_fill_on_next_sample(self) -> None:
        api = SimulatedTradingApi(SERIES)
        order_id = api.create_order("btc_usd", OrderSide.BUY, Decimal("0.01"), Decimal("25000"))

        assert [o.id for o in api.get_your_open_orders("btc_usd")] == [order_id]
        assert api.fills == []

        api.advance()
        assert api.get_your_open_orders("btc_usd") == []
        assert len(api.fills) == 1
        assert api.fills[0].index == 1

        balances = api.get_balance_info().available
        assert balances["BTC"] == Decimal("0.03")
        assert balances["USD"] == Decimal("250")

    def test_sell_fill_credits_counter(self) -> None:
        api = SimulatedTradingApi(SERIES)
        api.create_order("btc_usd", OrderSide.SELL, Decimal("0.02"), Decimal("26000"))
        api.advance()
        api.get_your_open_orders("btc_usd")

        balances = api.get_balance_info().available
        assert balances["BTC"] == Decimal("0")
        assert balances["USD"] == Decimal("1020")

    def test_cross_sell_waits_for_bid(self) -> None:
        api = SimulatedTradingApi(SERIES, SimConfig(fill_model=FillModel.CROSS))
        order_id = api.create_order("btc_usd", OrderSide.SELL, Decimal("0.01"), Decimal("25500"))

        assert [o.id for o in api.get_your_open_orders("btc_usd")] == [order_id]

        api.advance()  # bid 25987
        assert api.get_your_open_orders("btc_usd") == []
        assert api.fills[0].price == Decimal("25500")
        assert api.fills[0].index == 1

    def test_cross_buy_waits_for_ask(self) -> None:
        api = SimulatedTradingApi(SERIES, SimConfig(fill_model=FillModel.CROSS))
        api.create_order("btc_usd", OrderSide.BUY, Decimal("0.01"), Decimal("24500"))

        api.advance()
        assert len(api.get_your_open_orders("btc_usd")) == 1

        api.advance()  # ask 24012
        assert api.get_your_open_orders("btc_usd") == []

    def test_crossing_order_waits_for_next_sample(self) -> None:
        api = SimulatedTradingApi(SERIES, SimConfig(fill_model=FillModel.CROSS))
        api.advance()
        api.create_order("btc_usd", OrderSide.BUY, Decimal("0.01"), Decimal("30000"))

        assert len(api.get_your_open_orders("btc_usd")) == 1

        api.advance()
        assert api.get_your_open_orders("btc_usd") == []
        assert api.fills[0].index == 2

    def test_cancel_order(self) -> None:
        api = SimulatedTradingApi(SERIES, SimConfig(fill_model=FillModel.CROSS))
        order_id = api.create_order("btc_usd", OrderSide.BUY, Decimal("0.01"), Decimal("1000"))

        assert api.cancel_order(order_id, "btc_usd") is True
        assert api.cancel_order(order_id, "btc_usd") is False
        assert api.get_your_open_orders("btc_usd") == []
        assert api.fills == []

    def test_negative_balance_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        api = SimulatedTradingApi(SERIES)
        api.create_order("btc_usd", OrderSide.BUY, Decimal("1"), Decimal("25000"))
        api.advance()

        with caplog.at_level(logging.WARNING, logger="scalper.sim.simulator"):
            api.get_your_open_orders("btc_usd")

        assert "USD balance went negative" in caplog.text


class TestPortfolioValue:
    """Test mark-to-market valuation."""

    def test_initial_value(self) -> None:
        api = SimulatedTradingApi(SERIES)
        # 500 USD + 0.02 BTC * 25000
        assert api.portfolio_value() == Decimal("1000")

    def test_value_marked_at_current_sample(self) -> None:
        api = SimulatedTradingApi(SERIES)
        api.advance()
        assert api.portfolio_value() == Decimal("1020")
