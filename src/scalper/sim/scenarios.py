"""Named price scenarios for backtests.

Every series is generated with Decimal arithmetic and a seeded RNG, so the
same (name, num_samples, seed) always yields the same prices on any
platform.
"""

from __future__ import annotations

import random
from decimal import Decimal
from enum import Enum

from scalper.market import PRICE_SCALE

DEFAULT_NUM_SAMPLES = 100
DEFAULT_SEED = 42
START_PRICE = Decimal("25000")


class ScenarioName(str, Enum):
    """Backtest price scenarios."""

    LINEAR_INCREASING = "LINEAR_INCREASING"
    LINEAR_DECREASING = "LINEAR_DECREASING"
    FLAT = "FLAT"
    VOLATILE_INCREASING = "VOLATILE_INCREASING"
    VOLATILE_DECREASING = "VOLATILE_DECREASING"
    EXPONENTIAL_INCREASING = "EXPONENTIAL_INCREASING"
    EXPONENTIAL_DECREASING = "EXPONENTIAL_DECREASING"
    EXPONENTIAL_INCREASE_WITH_CRASH = "EXPONENTIAL_INCREASE_WITH_CRASH"
    EXPONENTIAL_INCREASING_WITH_CRASHES = "EXPONENTIAL_INCREASING_WITH_CRASHES"
    RANDOM_WALK = "RANDOM_WALK"
    HISTORICAL_DATA = "HISTORICAL_DATA"


# BTC/USD daily closes, January 2021 (rounded to whole dollars)
HISTORICAL_BTC_USD: tuple[Decimal, ...] = tuple(
    Decimal(p)
    for p in (
        "29374", "32127", "32782", "31971", "33992", "36824", "39371", "40797",
        "40254", "38356", "35566", "33922", "37316", "39187", "36825", "36178",
        "35792", "36630", "36069", "35547", "30825", "33005", "32067", "32289",
        "32366", "32569", "30432", "33466", "34316", "34269", "33114",
    )
)


def _q(price: Decimal) -> Decimal:
    return price.quantize(PRICE_SCALE)


def _linear(n: int, step: Decimal) -> list[Decimal]:
    return [START_PRICE + step * i for i in range(n)]


def _exponential(n: int, rate: Decimal) -> list[Decimal]:
    prices = []
    price = START_PRICE
    for _ in range(n):
        prices.append(price)
        price = price * rate
    return prices


def _volatile(n: int, step: Decimal, rng: random.Random) -> list[Decimal]:
    # Trend plus an alternating swing of up to 6% of the start price
    swing = START_PRICE * Decimal("0.06")
    prices = []
    for i, base in enumerate(_linear(n, step)):
        jitter = Decimal(str(round(rng.random(), 8))) * swing
        prices.append(base + jitter if i % 2 == 0 else base - jitter)
    return prices


def _with_crashes(n: int, rate: Decimal, crash_at: list[int], keep: Decimal) -> list[Decimal]:
    prices = []
    price = START_PRICE
    for i in range(n):
        if i in crash_at:
            price = price * keep
        prices.append(price)
        price = price * rate
    return prices


def _random_walk(n: int, rng: random.Random) -> list[Decimal]:
    prices = []
    price = START_PRICE
    max_move = Decimal("0.06")
    for _ in range(n):
        prices.append(price)
        move = (Decimal(str(round(rng.random(), 8))) - Decimal("0.5")) * max_move
        price = price * (1 + move)
    return prices


def generate_series(
    name: ScenarioName,
    num_samples: int = DEFAULT_NUM_SAMPLES,
    seed: int = DEFAULT_SEED,
) -> tuple[Decimal, ...]:
    """Generate the price series for a scenario.

    Args:
        name: Scenario to generate.
        num_samples: Number of samples. Ignored for HISTORICAL_DATA, which
            always returns the full embedded series.
        seed: RNG seed for the volatile and random walk scenarios.

    Returns:
        Prices quantized to 8 decimal places.
    """
    if num_samples < 1:
        raise ValueError(f"num_samples must be >= 1, got {num_samples}")

    rng = random.Random(seed)
    n = num_samples

    if name == ScenarioName.LINEAR_INCREASING:
        prices = _linear(n, Decimal("100"))
    elif name == ScenarioName.LINEAR_DECREASING:
        # Floor keeps long series positive
        prices = [max(p, Decimal("100")) for p in _linear(n, Decimal("-100"))]
    elif name == ScenarioName.FLAT:
        prices = [START_PRICE] * n
    elif name == ScenarioName.VOLATILE_INCREASING:
        prices = _volatile(n, Decimal("100"), rng)
    elif name == ScenarioName.VOLATILE_DECREASING:
        prices = [max(p, Decimal("100")) for p in _volatile(n, Decimal("-100"), rng)]
    elif name == ScenarioName.EXPONENTIAL_INCREASING:
        prices = _exponential(n, Decimal("1.01"))
    elif name == ScenarioName.EXPONENTIAL_DECREASING:
        prices = _exponential(n, Decimal("0.99"))
    elif name == ScenarioName.EXPONENTIAL_INCREASE_WITH_CRASH:
        prices = _with_crashes(n, Decimal("1.02"), [n * 7 // 10], Decimal("0.4"))
    elif name == ScenarioName.EXPONENTIAL_INCREASING_WITH_CRASHES:
        prices = _with_crashes(n, Decimal("1.02"), list(range(20, n, 20)), Decimal("0.7"))
    elif name == ScenarioName.RANDOM_WALK:
        prices = _random_walk(n, rng)
    elif name == ScenarioName.HISTORICAL_DATA:
        prices = list(HISTORICAL_BTC_USD)
    else:
        raise ValueError(f"Unknown scenario: {name}")

    return tuple(_q(p) for p in prices)
