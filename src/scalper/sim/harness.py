"""Backtest harness.

Runs a strategy against a simulated exchange, one execute() per price
sample, and reports the final portfolio value:

    final_value = counter_balance + base_balance * last_price

Outputs are deterministic: the same series and config always produce the
same transactions and the same SHA256 digest.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal  # noqa: TC003 - used at runtime in dataclasses
from typing import TYPE_CHECKING, Any

import orjson

from scalper.contracts import OrderSide
from scalper.market import TradingContext
from scalper.persistence import InMemoryTransactionRepository
from scalper.sim.config import SimConfig
from scalper.sim.scenarios import DEFAULT_NUM_SAMPLES, DEFAULT_SEED, ScenarioName, generate_series
from scalper.sim.simulator import SimulatedTradingApi
from scalper.strategy import MultiOrderScalpingStrategy, ScalpingStrategy

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from scalper.contracts import TransactionEntry
    from scalper.strategy import StrategyConfigItems, TradingStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BacktestResult:
    """Outcome of one backtest run.

    Attributes:
        scenario: Scenario name (or "custom" for a caller-supplied series).
        num_cycles: Number of execute() calls made.
        final_balances: Simulated balances after the last cycle.
        last_price: Price of the last sample used.
        final_value: Portfolio value in counter currency.
        transactions: Every SENT/FILLED entry, in order.
        max_sell_depth: Most open SELL orders observed after any cycle, or
            None when the strategy does not expose its order state.
        sha256: Digest of the canonical dump of the fields above.
    """

    scenario: str
    num_cycles: int
    final_balances: dict[str, Decimal]
    last_price: Decimal
    final_value: Decimal
    transactions: list[TransactionEntry] = field(default_factory=list)
    max_sell_depth: int | None = None
    sha256: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "scenario": self.scenario,
            "num_cycles": self.num_cycles,
            "final_balances": {k: str(v) for k, v in sorted(self.final_balances.items())},
            "last_price": str(self.last_price),
            "final_value": str(self.final_value),
            "max_sell_depth": self.max_sell_depth,
            "transactions": [t.model_dump(mode="json") for t in self.transactions],
        }


def sell_depth(strategy: TradingStrategy) -> int | None:
    """Open SELL orders a known strategy is tracking, None for any other."""
    if isinstance(strategy, MultiOrderScalpingStrategy):
        return len(strategy.sell_stack)
    if isinstance(strategy, ScalpingStrategy):
        last = strategy.last_order
        return int(last is not None and last.side == OrderSide.SELL)
    return None


def compute_sha256(data: dict[str, Any]) -> str:
    """SHA256 of canonical JSON (orjson, sorted keys)."""
    return hashlib.sha256(orjson.dumps(data, option=orjson.OPT_SORT_KEYS)).hexdigest()


class BacktestHarness:
    """Drives a strategy over a price series on a SimulatedTradingApi."""

    def __init__(self, sim_config: SimConfig | None = None) -> None:
        self.sim_config = sim_config or SimConfig()

    def run_scenario(
        self,
        scenario: ScenarioName,
        strategy: TradingStrategy,
        config_items: StrategyConfigItems,
        num_samples: int = DEFAULT_NUM_SAMPLES,
        seed: int = DEFAULT_SEED,
    ) -> BacktestResult:
        """Generate a named scenario and run the strategy over every sample."""
        series = generate_series(scenario, num_samples=num_samples, seed=seed)
        return self.run(series, strategy, config_items, scenario_name=scenario.value)

    def run(
        self,
        series: Sequence[Decimal],
        strategy: TradingStrategy,
        config_items: StrategyConfigItems,
        num_cycles: int | None = None,
        scenario_name: str = "custom",
    ) -> BacktestResult:
        """Run the strategy over a price series.

        Args:
            series: Mid price per cycle.
            strategy: Fresh (un-initialised) strategy instance.
            config_items: Strategy config items.
            num_cycles: Cycles to run. Defaults to the length of the series.
            scenario_name: Label stored in the result.

        Raises:
            IndexOutOfRangeError: If num_cycles exceeds the series length.
            StrategyError: If the strategy fails fatally.
        """
        api = SimulatedTradingApi(series, self.sim_config)
        cycles = api.num_samples if num_cycles is None else num_cycles
        if cycles < 1:
            raise ValueError(f"num_cycles must be >= 1, got {cycles}")

        repository = InMemoryTransactionRepository()
        context = TradingContext(api, api.market, clock=api.clock)
        strategy.init(context, config_items, repository)

        depths: list[int] = []
        for cycle in range(cycles):
            if cycle:
                api.advance()
            strategy.execute()
            depth = sell_depth(strategy)
            if depth is not None:
                depths.append(depth)

        balances = api.get_balance_info().available
        last_price = api.get_latest_market_price(api.market.id)
        result = BacktestResult(
            scenario=scenario_name,
            num_cycles=cycles,
            final_balances=balances,
            last_price=last_price,
            final_value=api.portfolio_value(),
            transactions=repository.find_all(),
            max_sell_depth=max(depths) if depths else None,
        )
        digest = compute_sha256(result.to_dict())
        logger.info(
            f"Backtest {scenario_name} finished",
            extra={
                "cycles": cycles,
                "final_value": str(result.final_value),
                "transactions": len(result.transactions),
            },
        )
        return replace(result, sha256=digest)


def write_backtest_outputs(result: BacktestResult, output_dir: Path) -> tuple[Path, Path]:
    """Write backtest outputs to files.

    Args:
        result: BacktestResult from harness.run().
        output_dir: Directory to write files to.

    Returns:
        Tuple of (transactions_path, result_path).
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    transactions_path = output_dir / "transactions.jsonl"
    with open(transactions_path, "wb") as f:
        for entry in result.transactions:
            line = orjson.dumps(entry.model_dump(mode="json"), option=orjson.OPT_SORT_KEYS)
            f.write(line + b"\n")

    result_path = output_dir / "backtest_result.json"
    data = result.to_dict()
    data["sha256"] = result.sha256
    with open(result_path, "wb") as f:
        f.write(orjson.dumps(data, option=orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2))

    return transactions_path, result_path
