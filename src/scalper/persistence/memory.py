"""In-memory transaction repository.

Used by the backtest harness and tests. Keeps entries in insertion order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from scalper.contracts import OrderSide, TransactionEntry


class InMemoryTransactionRepository:
    """TransactionSink that keeps every entry in a list."""

    def __init__(self) -> None:
        self._entries: list[TransactionEntry] = []

    def save(self, entry: TransactionEntry) -> TransactionEntry:
        self._entries.append(entry)
        return entry

    def find_all(self) -> list[TransactionEntry]:
        """All entries in the order they were saved."""
        return list(self._entries)

    def find_by_id(self, order_id: str) -> list[TransactionEntry]:
        """All transitions recorded for one exchange order."""
        return [e for e in self._entries if e.order_id == order_id]

    def find_by_type(self, side: OrderSide) -> list[TransactionEntry]:
        """All transitions for BUY or SELL orders."""
        return [e for e in self._entries if e.side == side]

    def __len__(self) -> int:
        return len(self._entries)
