"""Trading strategies.

- TradingStrategy Protocol: init(context, config, sink) then execute() per cycle
- MultiOrderScalpingStrategy: stack-based, several orders in flight
- ScalpingStrategy: single order in flight, re-buys as soon as a SELL fills
"""

from scalper.strategy.base import (
    StrategyConfigError,
    StrategyConfigItems,
    StrategyError,
    TradingStrategy,
)
from scalper.strategy.config import MultiOrderStrategyConfig, ScalpingStrategyConfig
from scalper.strategy.multi_order import MultiOrderScalpingStrategy
from scalper.strategy.scalping import ScalpingStrategy

__all__ = [
    "MultiOrderScalpingStrategy",
    "MultiOrderStrategyConfig",
    "ScalpingStrategy",
    "ScalpingStrategyConfig",
    "StrategyConfigError",
    "StrategyConfigItems",
    "StrategyError",
    "TradingStrategy",
]
