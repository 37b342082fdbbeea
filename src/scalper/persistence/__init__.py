"""Transaction persistence."""

from scalper.persistence.base import TransactionSink
from scalper.persistence.jsonl import JsonlTransactionSink
from scalper.persistence.memory import InMemoryTransactionRepository

__all__ = [
    "InMemoryTransactionRepository",
    "JsonlTransactionSink",
    "TransactionSink",
]
