"""Deterministic market simulator and backtest harness.

Validates strategy behaviour on reproducible price paths before it runs
against a live exchange.
"""

from __future__ import annotations

from scalper.sim.config import FillModel, SimConfig
from scalper.sim.fill_model import CrossFillModel, ImmediateFillModel, MarketTick
from scalper.sim.harness import BacktestHarness, BacktestResult, write_backtest_outputs
from scalper.sim.scenarios import ScenarioName, generate_series
from scalper.sim.simulator import IndexOutOfRangeError, SimFill, SimulatedTradingApi

__all__ = [
    "BacktestHarness",
    "BacktestResult",
    "CrossFillModel",
    "FillModel",
    "ImmediateFillModel",
    "IndexOutOfRangeError",
    "MarketTick",
    "ScenarioName",
    "SimConfig",
    "SimFill",
    "SimulatedTradingApi",
    "generate_series",
    "write_backtest_outputs",
]
