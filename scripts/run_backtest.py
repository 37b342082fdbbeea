#!/usr/bin/env python3
"""Run a scalping strategy against a simulated price scenario.

Usage:
    python scripts/run_backtest.py --scenario VOLATILE_DECREASING --threshold 2
    python scripts/run_backtest.py --scenario HISTORICAL_DATA \
        --config config/strategies.yaml --strategy-id multi-order-scalper

Outputs (with --out):
    transactions.jsonl - Every SENT/FILLED transition
    backtest_result.json - Final balances, value and SHA256 digest
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path


def main() -> int:
    """Run backtest."""
    parser = argparse.ArgumentParser(description="Backtest a scalping strategy")
    parser.add_argument(
        "--scenario",
        type=str,
        required=True,
        help="Scenario name, e.g. FLAT, RANDOM_WALK, HISTORICAL_DATA",
    )
    parser.add_argument(
        "--strategy",
        type=str,
        choices=["multi", "single"],
        default="multi",
        help="Strategy type: multi (stack-based) or single (one order in flight)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="strategies.yaml to load config items from (requires --strategy-id)",
    )
    parser.add_argument(
        "--strategy-id",
        type=str,
        default=None,
        help="Strategy ID in --config",
    )
    parser.add_argument(
        "--markets",
        type=Path,
        default=None,
        help="markets.yaml to load the simulated market from",
    )
    parser.add_argument(
        "--market-id",
        type=str,
        default="btc_usd",
        help="Market ID in --markets (default: btc_usd)",
    )
    parser.add_argument(
        "--exchange",
        type=Path,
        default=None,
        help="exchange.yaml with authentication items (credentials may come from env)",
    )
    parser.add_argument(
        "--buy-amount",
        type=str,
        default="50",
        help="Counter currency spent per BUY (default: 50)",
    )
    parser.add_argument(
        "--threshold",
        type=str,
        default="4",
        help="Percent change threshold / minimum gain in percent (default: 4)",
    )
    parser.add_argument(
        "--max-sells",
        type=str,
        default="5",
        help="Max concurrent SELL orders, multi strategy only (default: 5)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=None,
        help="Number of price samples (default: 100)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="RNG seed for random scenarios (default: 42)",
    )
    parser.add_argument(
        "--fill-model",
        type=str,
        choices=["IMMEDIATE", "CROSS"],
        default="IMMEDIATE",
        help="Simulator fill model (default: IMMEDIATE)",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Output directory (default: no files written)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Log level (default: WARNING)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit JSON log lines instead of plain text",
    )

    args = parser.parse_args()

    if (args.config is None) != (args.strategy_id is None):
        print("ERROR: --config and --strategy-id must be given together")
        return 1
    if args.config is not None and not args.config.exists():
        print(f"ERROR: Config file not found: {args.config}")
        return 1
    if args.markets is not None and not args.markets.exists():
        print(f"ERROR: Markets file not found: {args.markets}")
        return 1
    if args.exchange is not None and not args.exchange.exists():
        print(f"ERROR: Exchange file not found: {args.exchange}")
        return 1

    # Import after arg parsing to fail fast on bad args
    from scalper.config import (
        load_authentication_config,
        load_market,
        load_strategy_config_items,
    )
    from scalper.logging_config import setup_logging
    from scalper.sim import BacktestHarness, FillModel, ScenarioName, SimConfig
    from scalper.sim.scenarios import DEFAULT_NUM_SAMPLES, DEFAULT_SEED
    from scalper.strategy import (
        MultiOrderScalpingStrategy,
        ScalpingStrategy,
        StrategyConfigError,
        StrategyConfigItems,
        StrategyError,
    )
    from scalper.strategy.config import (
        COUNTER_CURRENCY_BUY_ORDER_AMOUNT,
        MAX_CONCURRENT_SELL_ORDERS,
        MINIMUM_PERCENTAGE_GAIN,
        PERCENT_CHANGE_THRESHOLD,
    )

    setup_logging(level=args.log_level.upper(), json_format=args.json_logs)

    try:
        scenario = ScenarioName(args.scenario.upper())
    except ValueError:
        names = ", ".join(s.value for s in ScenarioName)
        print(f"ERROR: Unknown scenario {args.scenario!r}. Choose from: {names}")
        return 1

    # Build config items
    if args.config is not None:
        try:
            config_items = load_strategy_config_items(args.config, args.strategy_id)
        except StrategyConfigError as e:
            print(f"ERROR: {e}")
            return 1
    elif args.strategy == "multi":
        config_items = StrategyConfigItems(
            strategy_id="multi-order-scalper",
            items={
                COUNTER_CURRENCY_BUY_ORDER_AMOUNT: args.buy_amount,
                PERCENT_CHANGE_THRESHOLD: args.threshold,
                MAX_CONCURRENT_SELL_ORDERS: args.max_sells,
            },
        )
    else:
        config_items = StrategyConfigItems(
            strategy_id="scalper",
            items={
                COUNTER_CURRENCY_BUY_ORDER_AMOUNT: args.buy_amount,
                MINIMUM_PERCENTAGE_GAIN: args.threshold,
            },
        )

    sim_config = SimConfig(fill_model=FillModel(args.fill_model))
    if args.markets is not None:
        try:
            market = load_market(args.markets, args.market_id)
        except StrategyConfigError as e:
            print(f"ERROR: {e}")
            return 1
        sim_config = sim_config.model_copy(
            update={
                "market_id": market.id,
                "market_name": market.name,
                "base_currency": market.base_currency,
                "counter_currency": market.counter_currency,
            }
        )

    if args.exchange is not None:
        try:
            auth = load_authentication_config(args.exchange)
        except StrategyConfigError as e:
            print(f"ERROR: {e}")
            return 1
        # The simulator needs no credentials; report what a live adapter would get
        resolved = ", ".join(auth.resolved_items()) or "none"
        print(f"Auth items for {sim_config.impl_name}: {resolved}")

    strategy: MultiOrderScalpingStrategy | ScalpingStrategy
    strategy = MultiOrderScalpingStrategy() if args.strategy == "multi" else ScalpingStrategy()
    print(f"Scenario: {scenario.value}, strategy: {args.strategy}, fill model: {args.fill_model}")
    print(f"Config items: {dict(config_items.items)}")

    harness = BacktestHarness(sim_config)
    try:
        result = harness.run_scenario(
            scenario,
            strategy,
            config_items,
            num_samples=DEFAULT_NUM_SAMPLES if args.samples is None else args.samples,
            seed=DEFAULT_SEED if args.seed is None else args.seed,
        )
    except StrategyConfigError as e:
        print(f"ERROR: Invalid strategy config: {e}")
        return 1
    except StrategyError as e:
        logging.getLogger(__name__).error(f"Backtest aborted: {e}")
        print(f"ERROR: Backtest aborted: {e}")
        return 2
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1

    if args.out is not None:
        from scalper.sim import write_backtest_outputs

        transactions_path, result_path = write_backtest_outputs(result, args.out)
        print(f"  Transactions written to {transactions_path}")
        print(f"  Result written to {result_path}")

    # Print summary
    print("\n=== BACKTEST RESULTS ===")
    print(f"  SHA256: {result.sha256}")
    print(f"  Cycles: {result.num_cycles}")
    print(f"  Transactions: {len(result.transactions)}")
    if result.max_sell_depth is not None:
        print(f"  Max SELL depth: {result.max_sell_depth}")
    for currency, balance in sorted(result.final_balances.items()):
        print(f"  {currency} balance: {balance}")
    print(f"  Last price: {result.last_price}")
    print(f"  Final value: {result.final_value} {sim_config.counter_currency}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
