from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class Coin(BaseModel):
    """Single-denomination balance as returned by Red Bank smart queries."""

    amount: int = Field(..., description="Amount in the denom's base units")
    denom: str

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


class AccountKey(BaseModel):
    """
    Parsed form of an account identifier recovered from contract storage.

    The identifier is a JSON document shaped like `{"addr": "<address>"}`.
    """

    addr: str


class HealthSummary(BaseModel):
    """
    Aggregate view from `user_position_liquidation_pricing`.

    Fields
    - health_status: either a plain string (e.g. "not_borrowing") or an object
      such as `{"borrowing": {"max_ltv_hf": "...", "liq_threshold_hf": "..."}}`.
    - total_collateralized_debt / total_enabled_collateral: decimal strings as
      rendered by the contract.
    """

    health_status: Union[str, Dict[str, Any], None] = None
    total_collateralized_debt: str
    total_enabled_collateral: str


@dataclass(frozen=True)
class RawStateEntry:
    key: bytes
    value: bytes


@dataclass
class ScanResult:
    """Outcome of a full contract-state scan.

    Attributes
    - addresses: distinct account addresses, in first-seen order
    - scanned: raw entries seen across all pages
    - skipped: entries whose key could not be decoded
    - pages: state pages fetched
    """

    addresses: List[str] = field(default_factory=list)
    scanned: int = 0
    skipped: int = 0
    pages: int = 0


@dataclass
class PositionSnapshot:
    debts: List[Coin] = field(default_factory=list)
    collaterals: List[Coin] = field(default_factory=list)
    health: Optional[HealthSummary] = None
    # query type -> error message for fetches that failed
    errors: Dict[str, str] = field(default_factory=dict)

    def ok(self) -> bool:
        return not self.errors


__all__ = [
    "AccountKey",
    "Coin",
    "HealthSummary",
    "PositionSnapshot",
    "RawStateEntry",
    "ScanResult",
]
