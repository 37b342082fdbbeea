"""Trading strategy interface base classes.

Defines the TradingStrategy Protocol the scheduler drives, the error types
a strategy raises, and the config items a strategy is initialised with.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from scalper.contracts import TransactionEntry, TransactionStatus

if TYPE_CHECKING:
    from scalper.market import OrderState, TradingContext
    from scalper.persistence import TransactionSink

logger = logging.getLogger(__name__)


class StrategyError(Exception):
    """Fatal strategy failure.

    The scheduler must stop invoking the strategy until an operator
    intervenes.
    """


class StrategyConfigError(StrategyError, ValueError):
    """Strategy config is missing a mandatory item or holds a bad value."""


@dataclass(frozen=True)
class StrategyConfigItems:
    """Raw string config items for one strategy, as loaded from YAML."""

    strategy_id: str
    items: Mapping[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        """Return the item, or None when absent."""
        value = self.items.get(key)
        return None if value is None else str(value)

    def require(self, key: str) -> str:
        """Return the item, failing fast when absent."""
        value = self.get(key)
        if value is None or not value.strip():
            raise StrategyConfigError(
                f"Mandatory {key} value missing in config for strategy {self.strategy_id}"
            )
        logger.info(f"<{key}> from config is: {value}", extra={"strategy_id": self.strategy_id})
        return value


class TradingStrategy(Protocol):
    """Protocol defining the strategy interface.

    init() is called once when the bot starts; execute() once per trade
    cycle. The scheduler guarantees at most one execute() in flight per
    instance.
    """

    def init(
        self,
        context: TradingContext,
        config: StrategyConfigItems,
        transaction_sink: TransactionSink,
    ) -> None:
        """Bind market access, load config and the audit sink."""
        ...

    def execute(self) -> None:
        """Run one trade cycle.

        Raises:
            StrategyError: On a fatal exchange error.
        """
        ...


def persist_transaction(
    sink: TransactionSink,
    context: TradingContext,
    strategy_id: str,
    status: TransactionStatus,
    order: OrderState,
) -> None:
    """Record a SENT/FILLED transition, best effort.

    Called after the stack mutation is committed. A failing sink is logged
    and never propagates, so in-memory order state stays authoritative.
    """
    entry = TransactionEntry(
        order_id=order.id,
        side=order.side,
        status=status,
        market=context.market_name,
        amount=order.quantity,
        price=order.price,
        strategy_id=strategy_id,
        exchange_api=context.exchange_api,
        ts=context.now_ms(),
    )
    try:
        sink.save(entry)
    except Exception:
        logger.exception(
            "Failed to persist transaction",
            extra={"order_id": order.id, "status": status.value},
        )
