"""Contract enums.

All enums are strict string enums so they serialize as plain values.
"""

from enum import Enum


class OrderSide(str, Enum):
    """Order side."""

    BUY = "BUY"
    SELL = "SELL"


class TransactionStatus(str, Enum):
    """Order lifecycle transition recorded for audit."""

    SENT = "SENT"  # Accepted by the exchange
    FILLED = "FILLED"  # No longer in the open-order list
