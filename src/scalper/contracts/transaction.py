"""TransactionEntry contract.

Audit record of one order transition.
Producer: trading strategies (on every SENT and FILLED transition)
Consumer: TransactionSink implementations

Append-only: entries are never mutated once saved.
"""

from __future__ import annotations

from decimal import Decimal  # noqa: TC003 - used at runtime in validators
from typing import Annotated

from pydantic import Field, field_validator

from scalper.contracts.base import SCHEMA_VERSION, ContractBase, parse_decimal
from scalper.contracts.types import (  # noqa: TC001 - used at runtime
    OrderSide,
    TransactionStatus,
)


class TransactionEntry(ContractBase):
    """A SENT or FILLED transition of one exchange order."""

    schema_version: str = Field(default=SCHEMA_VERSION, description="Contract schema version")
    order_id: str = Field(min_length=1, description="Exchange-assigned order ID")
    side: OrderSide = Field(description="BUY or SELL")
    status: TransactionStatus = Field(description="SENT or FILLED")
    market: str = Field(description="Market name (e.g., BTC_USD)")
    amount: Annotated[Decimal, Field(description="Base currency quantity")] = Field()
    price: Annotated[Decimal, Field(description="Limit price in counter currency")] = Field()
    strategy_id: str = Field(default="", description="Strategy that produced the transition")
    exchange_api: str = Field(default="", description="Exchange adapter name")
    ts: int = Field(ge=0, description="Transition timestamp (ms)")

    @field_validator("amount", "price", mode="before")
    @classmethod
    def parse_decimal_fields(cls, v: object) -> Decimal:
        """Parse Decimal fields."""
        return parse_decimal(v)

    @property
    def total(self) -> Decimal:
        """Counter currency value of the order."""
        return self.amount * self.price

    @property
    def identity_key(self) -> tuple[str, str, str, str, Decimal, Decimal]:
        """Identity of the transition, ignoring when it was recorded."""
        return (
            self.order_id,
            self.side.value,
            self.status.value,
            self.market,
            self.amount,
            self.price,
        )
