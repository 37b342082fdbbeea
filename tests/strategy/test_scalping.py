"""Tests for the single-order ScalpingStrategy.

Verifies:
- First cycle BUYs at the bid
- A filled BUY becomes a SELL at price * (1 + minimum gain), rounded up
- A filled SELL is followed by a new BUY in the same cycle
"""

from __future__ import annotations

import logging
from decimal import Decimal

import pytest

from scalper.contracts import OrderSide, TransactionStatus
from scalper.market import ExchangeNetworkError, TradingApiError, TradingContext
from scalper.persistence import InMemoryTransactionRepository
from scalper.strategy import (
    ScalpingStrategy,
    StrategyConfigError,
    StrategyConfigItems,
    StrategyError,
)
from tests.fixtures.fake_exchange import MARKET, FakeExchange


def make_items(buy_amount: str = "20", gain: str = "2") -> StrategyConfigItems:
    return StrategyConfigItems(
        strategy_id="scalper",
        items={
            "counter-currency-buy-order-amount": buy_amount,
            "minimum-percentage-gain": gain,
        },
    )


def make_strategy(
    exchange: FakeExchange,
    items: StrategyConfigItems | None = None,
) -> tuple[ScalpingStrategy, InMemoryTransactionRepository]:
    repository = InMemoryTransactionRepository()
    context = TradingContext(exchange, MARKET, clock=lambda: 1706140800000)
    strategy = ScalpingStrategy()
    strategy.init(context, items or make_items(), repository)
    return strategy, repository


def summary(repository: InMemoryTransactionRepository) -> list[tuple[str, OrderSide, TransactionStatus]]:
    return [(r.order_id, r.side, r.status) for r in repository.find_all()]


class TestScalpingInit:
    """Test config loading."""

    def test_gain_parsed_as_fraction(self) -> None:
        strategy, _ = make_strategy(FakeExchange(), make_items(gain="2"))
        assert strategy.config.minimum_percentage_gain == Decimal("0.02")

    def test_missing_gain_fails_fast(self) -> None:
        items = StrategyConfigItems(
            strategy_id="scalper",
            items={"counter-currency-buy-order-amount": "20"},
        )
        with pytest.raises(StrategyConfigError):
            make_strategy(FakeExchange(), items)


class TestScalpingCycle:
    """Test the BUY -> SELL -> BUY cycle."""

    def test_first_cycle_buys_at_bid(self) -> None:
        exchange = FakeExchange(bid="1453.014", ask="1455.016", last_price="1454.018")
        strategy, repository = make_strategy(exchange)

        strategy.execute()

        assert len(exchange.created) == 1
        assert exchange.created[0].side == OrderSide.BUY
        assert exchange.created[0].price == Decimal("1453.014")
        assert exchange.created[0].quantity == Decimal("0.01375498")
        assert summary(repository) == [("1", OrderSide.BUY, TransactionStatus.SENT)]
        assert strategy.last_order is not None
        assert strategy.last_order.id == "1"

    def test_open_buy_holds(self) -> None:
        exchange = FakeExchange()
        strategy, repository = make_strategy(exchange)
        strategy.execute()

        strategy.execute()

        assert len(exchange.created) == 1
        assert len(repository) == 1

    def test_filled_buy_becomes_sell(self) -> None:
        exchange = FakeExchange(bid="1453.014")
        strategy, repository = make_strategy(exchange)
        strategy.execute()
        exchange.fill("1")

        strategy.execute()

        sell = exchange.created[1]
        assert sell.side == OrderSide.SELL
        assert sell.price == Decimal("1482.07428000")
        assert sell.quantity == exchange.created[0].quantity
        assert summary(repository) == [
            ("1", OrderSide.BUY, TransactionStatus.SENT),
            ("1", OrderSide.BUY, TransactionStatus.FILLED),
            ("2", OrderSide.SELL, TransactionStatus.SENT),
        ]
        assert strategy.last_order is not None
        assert strategy.last_order.side == OrderSide.SELL

    def test_filled_sell_rebuys_same_cycle(self) -> None:
        exchange = FakeExchange(bid="1453.014")
        strategy, repository = make_strategy(exchange)
        strategy.execute()
        exchange.fill("1")
        strategy.execute()
        exchange.fill("2")
        exchange.set_book("1490", "1491")

        strategy.execute()

        assert exchange.created[2].side == OrderSide.BUY
        assert exchange.created[2].price == Decimal("1490")
        assert summary(repository)[-2:] == [
            ("2", OrderSide.SELL, TransactionStatus.FILLED),
            ("3", OrderSide.BUY, TransactionStatus.SENT),
        ]
        assert strategy.last_order is not None
        assert strategy.last_order.id == "3"

    def test_open_sell_with_higher_ask_logs_error(self, caplog: pytest.LogCaptureFixture) -> None:
        exchange = FakeExchange(bid="1000", ask="1001", last_price="1000")
        strategy, _ = make_strategy(exchange)
        strategy.execute()
        exchange.fill("1")
        strategy.execute()

        exchange.set_book("1100", "1101")
        with caplog.at_level(logging.ERROR, logger="scalper.strategy.scalping"):
            strategy.execute()

        assert any("HIGHER" in r.getMessage() for r in caplog.records)
        assert len(exchange.created) == 2


class TestScalpingErrors:
    """Test error handling."""

    def test_empty_book_sends_nothing(self) -> None:
        exchange = FakeExchange(bid=None)
        strategy, repository = make_strategy(exchange)

        strategy.execute()

        assert exchange.created == []
        assert len(repository) == 0

    def test_network_error_keeps_last_order(self) -> None:
        exchange = FakeExchange()
        strategy, repository = make_strategy(exchange)
        strategy.execute()
        last_order = strategy.last_order
        exchange.fill("1")

        exchange.create_error = ExchangeNetworkError("timeout")
        strategy.execute()

        assert strategy.last_order == last_order
        assert len(repository) == 1

    def test_trading_api_error_raises_strategy_error(self) -> None:
        exchange = FakeExchange()
        strategy, _ = make_strategy(exchange)
        exchange.book_error = TradingApiError("bad response")

        with pytest.raises(StrategyError) as exc_info:
            strategy.execute()
        assert isinstance(exc_info.value.__cause__, TradingApiError)
