"""Base configuration for strategy contracts.

All contracts inherit from ContractBase which enforces:
- Extra fields are forbidden
- Instances are frozen once validated
- Decimal fields accept string input and never go through float
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict

# Schema version for transaction contracts
SCHEMA_VERSION = "1.0.0"


class ContractBase(BaseModel):
    """Base class for all contracts."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        str_strip_whitespace=True,
        validate_default=True,
    )


def parse_decimal(v: Any) -> Decimal:
    """Parse value to Decimal safely.

    Accepts:
    - Decimal (passthrough)
    - str (parsed to Decimal)
    - int (converted via string to avoid precision loss)
    - float (NOT recommended, but converted via string)
    """
    if isinstance(v, bool):
        raise ValueError("Cannot convert bool to Decimal")
    if isinstance(v, Decimal):
        return v
    if isinstance(v, (str, int, float)):
        try:
            value = Decimal(str(v).strip())
        except InvalidOperation as e:
            raise ValueError(f"Not a decimal number: {v!r}") from e
        if not value.is_finite():
            raise ValueError(f"Decimal must be finite, got {v!r}")
        return value
    raise ValueError(f"Cannot convert {type(v).__name__} to Decimal")
