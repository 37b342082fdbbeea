"""Transaction sink protocol.

Strategies record every SENT/FILLED transition through a TransactionSink
passed in at init time. Storage format and query surface belong to the
sink implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from scalper.contracts import TransactionEntry


class TransactionSink(Protocol):
    """Write interface for the transaction audit trail."""

    def save(self, entry: TransactionEntry) -> TransactionEntry:
        """Persist an entry and return it."""
        ...
