"""Append-only JSONL transaction sink.

One canonical JSON object per line (orjson, sorted keys). The file is
opened per write so a crash never leaves a buffered, unflushed entry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson

from scalper.contracts import TransactionEntry

if TYPE_CHECKING:
    from pathlib import Path


class JsonlTransactionSink:
    """TransactionSink that appends entries to a JSONL file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def save(self, entry: TransactionEntry) -> TransactionEntry:
        line = orjson.dumps(entry.model_dump(mode="json"), option=orjson.OPT_SORT_KEYS)
        with open(self.path, "ab") as f:
            f.write(line + b"\n")
        return entry

    def load(self) -> list[TransactionEntry]:
        """Read back every entry written so far."""
        if not self.path.exists():
            return []
        entries = []
        with open(self.path, "rb") as f:
            for line in f:
                if line.strip():
                    entries.append(TransactionEntry.model_validate(orjson.loads(line)))
        return entries
