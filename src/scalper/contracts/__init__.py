"""Strategy data contracts.

Pydantic models for the audit trail produced by trading strategies.

All contracts follow these invariants:
- Money/price/qty fields use Decimal (not float)
- Strict enums for side/status
- No extra fields allowed (extra='forbid')
"""

from scalper.contracts.transaction import TransactionEntry
from scalper.contracts.types import OrderSide, TransactionStatus

__all__ = [
    "OrderSide",
    "TransactionEntry",
    "TransactionStatus",
]
