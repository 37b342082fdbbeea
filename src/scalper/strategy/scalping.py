"""Single-order scalping strategy.

Tracks exactly one outstanding order and alternates BUY -> SELL -> BUY.
Unlike MultiOrderScalpingStrategy, a filled SELL immediately triggers a new
BUY at the current bid in the same cycle.
"""

from __future__ import annotations

import logging
from decimal import ROUND_UP, Decimal
from typing import TYPE_CHECKING

from scalper.contracts import OrderSide, TransactionStatus
from scalper.market import (
    PRICE_SCALE,
    ExchangeNetworkError,
    NoLiquidityError,
    TradingApiError,
)
from scalper.strategy.base import StrategyError, persist_transaction
from scalper.strategy.config import ScalpingStrategyConfig

if TYPE_CHECKING:
    from scalper.market import OrderState, TradingContext
    from scalper.persistence import TransactionSink
    from scalper.strategy.base import StrategyConfigItems

logger = logging.getLogger(__name__)


class ScalpingStrategy:
    """Scalping strategy with a single order in flight."""

    def __init__(self) -> None:
        self._context: TradingContext | None = None
        self._config: ScalpingStrategyConfig | None = None
        self._sink: TransactionSink | None = None
        self._last_order: OrderState | None = None

    def init(
        self,
        context: TradingContext,
        config: StrategyConfigItems,
        transaction_sink: TransactionSink,
    ) -> None:
        self._config = ScalpingStrategyConfig.from_config_items(config)
        self._context = context
        self._sink = transaction_sink
        self._last_order = None
        logger.info(f"{self._config.strategy_id} was initialised successfully!")

    @property
    def config(self) -> ScalpingStrategyConfig:
        if self._config is None:
            raise StrategyError("Strategy has not been initialised")
        return self._config

    @property
    def last_order(self) -> OrderState | None:
        """The one order currently in flight (or last seen filled)."""
        return self._last_order

    def execute(self) -> None:
        """Run one trade cycle.

        Raises:
            StrategyError: On a fatal exchange error.
        """
        if self._context is None or self._config is None or self._sink is None:
            raise StrategyError("Strategy has not been initialised")
        context = self._context
        logger.info(f"{context.market_name} Checking order status...")

        try:
            bid, ask = context.top_of_book()
            logger.info(f"{context.market_name} Current BID={bid} ASK={ask}")
            logger.info(f"{context.market_name} Last Order was: {self._last_order}")

            if self._last_order is None:
                logger.info(f"{context.market_name} No order yet - placing BUY order at [{bid}]")
                self._send_buy_order(context, bid)
            elif self._last_order.side == OrderSide.BUY:
                self._execute_when_last_order_was_buy(context, self._last_order)
            else:
                self._execute_when_last_order_was_sell(context, self._last_order, bid, ask)
        except NoLiquidityError as e:
            logger.warning(f"{context.market_name} {e}. Ignoring this trade window.")
        except ExchangeNetworkError:
            logger.error(
                f"{context.market_name} Exchange threw network exception. "
                f"Waiting until next trade cycle. Last Order: {self._last_order}",
                exc_info=True,
            )
        except TradingApiError as e:
            logger.error(
                f"{context.market_name} Exchange threw TradingApi exception. "
                f"Telling Trading Engine to shutdown bot! Last Order: {self._last_order}",
                exc_info=True,
            )
            raise StrategyError(str(e)) from e

    def _execute_when_last_order_was_buy(self, context: TradingContext, last: OrderState) -> None:
        if context.is_open(last.id):
            logger.info(
                f"{context.market_name} !!! Still have BUY order {last.id} waiting to fill "
                f"at [{last.price}] - holding last BUY order..."
            )
            return

        logger.info(f"{context.market_name} ^^^ Last BUY order {last.id} filled at [{last.price}]")
        new_ask = (last.price * (1 + self.config.minimum_percentage_gain)).quantize(
            PRICE_SCALE, rounding=ROUND_UP
        )
        sell_order = context.submit_sell(last.quantity, new_ask)
        self._last_order = sell_order

        self._persist(TransactionStatus.FILLED, last)
        self._persist(TransactionStatus.SENT, sell_order)

    def _execute_when_last_order_was_sell(
        self,
        context: TradingContext,
        last: OrderState,
        bid: Decimal,
        ask: Decimal,
    ) -> None:
        if context.is_open(last.id):
            if ask > last.price:
                logger.error(
                    f"{context.market_name} >>> Current ask price [{ask}] is HIGHER than last "
                    f"order price [{last.price}] but the SELL order is still open"
                )
            else:
                logger.info(
                    f"{context.market_name} Current ask price [{ask}] is not above last order "
                    f"price [{last.price}] - holding last SELL order..."
                )
            return

        logger.info(f"{context.market_name} ^^^ Last SELL order {last.id} filled at [{last.price}]")
        self._persist(TransactionStatus.FILLED, last)
        self._send_buy_order(context, bid)

    def _send_buy_order(self, context: TradingContext, price: Decimal) -> None:
        quantity = context.quantity_for_budget(self.config.counter_currency_buy_order_amount)
        if quantity <= 0:
            logger.warning(
                f"{context.market_name} Buy amount rounds to zero base units, skipping BUY"
            )
            return
        order = context.submit_buy(quantity, price)
        self._last_order = order
        self._persist(TransactionStatus.SENT, order)

    def _persist(self, status: TransactionStatus, order: OrderState) -> None:
        assert self._sink is not None and self._context is not None
        persist_transaction(self._sink, self._context, self.config.strategy_id, status, order)
