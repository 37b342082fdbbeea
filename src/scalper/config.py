"""
Bot configuration loading.

Strategies and markets are described in YAML, e.g. config/strategies.yaml:

    strategies:
      - id: multi-order-scalper
        name: Multi-order scalper
        config-items:
          counter-currency-buy-order-amount: "50"
          percent-change-threshold: "4"
          max-concurrent-sell-orders: "5"

config/exchange.yaml names the exchange adapter and its authentication
items. Credentials should not live in YAML: AuthenticationConfig falls back
to EXCHANGE_KEY / EXCHANGE_SECRET / EXCHANGE_CLIENT_ID env vars. It is the
hook live exchange adapters read credentials through; the simulator needs
none, so backtests only report which items resolved.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

import yaml  # type: ignore[import-untyped]

from scalper.market import Market
from scalper.strategy import StrategyConfigError, StrategyConfigItems

# Auth items resolved from the environment when not set explicitly
AUTH_ENV_VARS: dict[str, str] = {
    "key": "EXCHANGE_KEY",
    "secret": "EXCHANGE_SECRET",
    "client-id": "EXCHANGE_CLIENT_ID",
}


def _load_yaml(path: Path) -> dict[str, Any]:
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise StrategyConfigError(f"{path} is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise StrategyConfigError(f"{path} must contain a YAML mapping")
    return data


def _entries(data: dict[str, Any], section: str, path: Path) -> list[dict[str, Any]]:
    entries = data.get(section) or []
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise StrategyConfigError(f"{section} in {path} must be a list of mappings")
    return entries


def load_strategy_config_items(path: Path, strategy_id: str) -> StrategyConfigItems:
    """Load config items for one strategy from strategies.yaml.

    Raises:
        StrategyConfigError: If the file has no entry for strategy_id.
    """
    data = _load_yaml(path)
    for entry in _entries(data, "strategies", path):
        if entry.get("id") == strategy_id:
            raw_items = entry.get("config-items") or {}
            if not isinstance(raw_items, dict):
                raise StrategyConfigError(f"config-items for {strategy_id} must be a mapping")
            items = {str(k): str(v) for k, v in raw_items.items()}
            return StrategyConfigItems(strategy_id=strategy_id, items=items)
    raise StrategyConfigError(f"No strategy with id {strategy_id!r} in {path}")


def load_market(path: Path, market_id: str) -> Market:
    """Load one market definition from markets.yaml.

    Expected shape: markets: [{id, name, base-currency, counter-currency}]
    """
    data = _load_yaml(path)
    for entry in _entries(data, "markets", path):
        if entry.get("id") == market_id:
            try:
                return Market(
                    id=str(entry["id"]),
                    name=str(entry.get("name", entry["id"])),
                    base_currency=str(entry["base-currency"]),
                    counter_currency=str(entry["counter-currency"]),
                )
            except KeyError as e:
                raise StrategyConfigError(f"Market {market_id!r} in {path} is missing {e}") from e
    raise StrategyConfigError(f"No market with id {market_id!r} in {path}")


@dataclass
class AuthenticationConfig:
    """Exchange API authentication items.

    Items missing from the mapping are looked up in the environment for
    the names in AUTH_ENV_VARS.
    """

    items: dict[str, str] = field(default_factory=dict)

    def get_item(self, name: str) -> str | None:
        if name not in self.items and name in AUTH_ENV_VARS:
            return os.environ.get(AUTH_ENV_VARS[name])
        return self.items.get(name)

    def resolved_items(self) -> list[str]:
        """Names of the items that resolve to a value, never the values."""
        names = set(self.items) | set(AUTH_ENV_VARS)
        return sorted(name for name in names if self.get_item(name))

    def __repr__(self) -> str:
        return f"AuthenticationConfig(items=[{', '.join(sorted(self.items))}])"


def load_authentication_config(path: Path) -> AuthenticationConfig:
    """Load exchange authentication items from exchange.yaml.

    Expected shape:

        exchange:
          name: Simulated
          authentication-config:
            key: ...

    Items left out of the file resolve from the environment.
    """
    data = _load_yaml(path)
    exchange = data.get("exchange") or {}
    if not isinstance(exchange, dict):
        raise StrategyConfigError(f"exchange in {path} must be a mapping")
    raw_items = exchange.get("authentication-config") or {}
    if not isinstance(raw_items, dict):
        raise StrategyConfigError(f"authentication-config in {path} must be a mapping")
    return AuthenticationConfig(items={str(k): str(v) for k, v in raw_items.items()})
