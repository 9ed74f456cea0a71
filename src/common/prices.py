from __future__ import annotations

from typing import Dict, Optional, Protocol


class PriceSource(Protocol):
    """Per-denomination price lookup used by the ratio calculation."""

    def price(self, denom: str) -> int: ...


class FixedPriceSource:
    """Returns the same price for every denom; stand-in until an oracle is wired up."""

    def __init__(self, value: int = 1, *, overrides: Optional[Dict[str, int]] = None) -> None:
        self._value = value
        self._overrides = dict(overrides or {})

    def price(self, denom: str) -> int:
        return self._overrides.get(denom, self._value)


__all__ = ["FixedPriceSource", "PriceSource"]
