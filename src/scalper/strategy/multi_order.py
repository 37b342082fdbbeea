"""Multi-order scalping strategy.

Keeps two LIFO stacks of outstanding orders, one per side. Each cycle:

1. No order sent yet: BUY at the current ask.
2. Top BUY filled: SELL the same quantity at fill price * (1 + threshold).
3. Top SELL filled: drop it. No immediate re-buy.
4. Bid has fallen below last BUY price * (1 - threshold) and a SELL slot is
   free: BUY at the current bid.

Only the top of each stack is ever polled for fill status.
"""

from __future__ import annotations

import logging
from decimal import ROUND_UP, Decimal
from typing import TYPE_CHECKING

from scalper.contracts import TransactionStatus
from scalper.market import (
    PRICE_SCALE,
    ExchangeNetworkError,
    NoLiquidityError,
    OrderState,
    TradingApiError,
)
from scalper.strategy.base import StrategyError, persist_transaction
from scalper.strategy.config import MultiOrderStrategyConfig

if TYPE_CHECKING:
    from scalper.market import TradingContext
    from scalper.persistence import TransactionSink
    from scalper.strategy.base import StrategyConfigItems

logger = logging.getLogger(__name__)

ONE = Decimal("1")


def _order_prices(stack: list[OrderState]) -> str:
    return ", ".join(str(order.price) for order in stack)


class MultiOrderScalpingStrategy:
    """Scalping strategy holding several BUY/SELL orders at once.

    The SELL stack never grows beyond max_concurrent_sell_orders: a new BUY
    is only sent while the outstanding BUYs plus SELLs leave a free slot,
    since every BUY turns into a SELL once it fills.

    Deterministic given the same sequence of market responses.
    """

    def __init__(self) -> None:
        self._context: TradingContext | None = None
        self._config: MultiOrderStrategyConfig | None = None
        self._sink: TransactionSink | None = None
        self._last_order: OrderState | None = None
        self._buy_stack: list[OrderState] = []
        self._sell_stack: list[OrderState] = []

    def init(
        self,
        context: TradingContext,
        config: StrategyConfigItems,
        transaction_sink: TransactionSink,
    ) -> None:
        """Bind market access, load config and the audit sink.

        Raises:
            StrategyConfigError: If config items are missing or invalid.
        """
        self._config = MultiOrderStrategyConfig.from_config_items(config)
        self._context = context
        self._sink = transaction_sink
        self._last_order = None
        self._buy_stack = []
        self._sell_stack = []
        logger.info(f"{self._config.strategy_id} was initialised successfully!")

    @property
    def config(self) -> MultiOrderStrategyConfig:
        if self._config is None:
            raise StrategyError("Strategy has not been initialised")
        return self._config

    @property
    def last_order(self) -> OrderState | None:
        """Most recently submitted BUY; reference price for new BUYs."""
        return self._last_order

    @property
    def buy_stack(self) -> tuple[OrderState, ...]:
        """Outstanding BUY orders, oldest first."""
        return tuple(self._buy_stack)

    @property
    def sell_stack(self) -> tuple[OrderState, ...]:
        """Outstanding SELL orders, oldest first."""
        return tuple(self._sell_stack)

    def execute(self) -> None:
        """Run one trade cycle.

        Transient failures (network timeout, empty order book) abandon the
        cycle with state unchanged. Fatal exchange errors are re-raised as
        StrategyError.
        """
        context = self._require_context()
        logger.info(f"{context.market_name} Checking order status...")

        try:
            self._execute_cycle(context)
        except NoLiquidityError as e:
            logger.warning(
                f"{context.market_name} {e}. Ignoring this trade window.",
                extra={"side": e.side},
            )
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

    def _require_context(self) -> TradingContext:
        if self._context is None or self._config is None or self._sink is None:
            raise StrategyError("Strategy has not been initialised")
        return self._context

    def _execute_cycle(self, context: TradingContext) -> None:
        bid, ask = context.top_of_book()
        logger.info(f"{context.market_name} Current BID={bid} ASK={ask}")

        if self._last_order is None:
            logger.info(f"{context.market_name} Just starting - placing new BUY order at [{ask}]")
            self._send_buy_order(context, ask)
            return

        if self._buy_stack:
            self._send_sell_order_if_buy_filled(context)
        if self._sell_stack:
            self._check_for_filled_sell_order(context, bid)
        self._send_buy_order_if_sufficiently_low(context, bid)

    def _send_sell_order_if_buy_filled(self, context: TradingContext) -> None:
        top = self._buy_stack[-1]
        if context.is_open(top.id):
            logger.info(
                f"{context.market_name} Still have BUY orders. They are "
                f"{_order_prices(self._buy_stack)}",
                extra={"order_id": top.id},
            )
            return

        logger.info(f"{context.market_name} ^^^ BUY order {top.id} filled at [{top.price}]")

        # Round the ASK up so the SELL never lands below fill price + threshold
        new_ask = (top.price * (ONE + self.config.percent_change_threshold)).quantize(
            PRICE_SCALE, rounding=ROUND_UP
        )
        sell_order = context.submit_sell(top.quantity, new_ask)

        self._buy_stack.pop()
        self._sell_stack.append(sell_order)

        self._persist(TransactionStatus.FILLED, top)
        self._persist(TransactionStatus.SENT, sell_order)

    def _check_for_filled_sell_order(self, context: TradingContext, bid: Decimal) -> None:
        top = self._sell_stack[-1]
        if not context.is_open(top.id):
            self._sell_stack.pop()
            logger.info(f"{context.market_name} ^^^ SELL order {top.id} filled at [{top.price}]")
            self._persist(TransactionStatus.FILLED, top)
            return

        prices = _order_prices(self._sell_stack)
        if bid > top.price:
            # Exchange should have matched this order already
            logger.error(
                f"{context.market_name} Current bid [{bid}] is HIGHER than last SELL order "
                f"price [{top.price}] but the order is still open. SELL orders: {prices}",
                extra={"order_id": top.id},
            )
        else:
            logger.info(
                f"{context.market_name} Current bid [{bid}] is not above last SELL order "
                f"price [{top.price}]. SELL orders: {prices}",
                extra={"order_id": top.id},
            )

    def _send_buy_order_if_sufficiently_low(self, context: TradingContext, bid: Decimal) -> None:
        if self._last_order is None:
            return
        threshold_price = self._last_order.price * (ONE - self.config.percent_change_threshold)
        if bid >= threshold_price:
            return

        committed = len(self._sell_stack) + len(self._buy_stack)
        if committed >= self.config.max_concurrent_sell_orders:
            logger.info(
                f"{context.market_name} Bid [{bid}] is below [{threshold_price}] but all "
                f"{self.config.max_concurrent_sell_orders} SELL slots are taken",
            )
            return

        logger.info(f"{context.market_name} Placing new BUY order at [{bid}]")
        self._send_buy_order(context, bid)

    def _send_buy_order(self, context: TradingContext, price: Decimal) -> None:
        quantity = context.quantity_for_budget(self.config.counter_currency_buy_order_amount)
        if quantity <= 0:
            logger.warning(
                f"{context.market_name} Buy amount rounds to zero base units, skipping BUY",
                extra={"price": str(price)},
            )
            return

        order = context.submit_buy(quantity, price)
        self._buy_stack.append(order)
        self._last_order = order
        self._persist(TransactionStatus.SENT, order)

    def _persist(self, status: TransactionStatus, order: OrderState) -> None:
        assert self._sink is not None and self._context is not None
        persist_transaction(self._sink, self._context, self.config.strategy_id, status, order)
