"""Fake exchange fixture for strategy tests."""

from tests.fixtures.fake_exchange.exchange import MARKET, FakeExchange

__all__ = ["MARKET", "FakeExchange"]
