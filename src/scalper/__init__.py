"""Stack-based scalping strategy engine.

Decides once per trade cycle whether to place, hold, or roll over buy/sell
orders on a single market, and records every order transition for audit.
A deterministic simulator and backtest harness live in scalper.sim.
"""

__version__ = "0.1.0"
