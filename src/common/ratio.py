from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from .models import Coin
from .prices import FixedPriceSource, PriceSource


@dataclass(frozen=True)
class CollateralizationResult:
    """Priced totals and the derived ratio for one account.

    `ratio` is 0 when there is no debt; callers should check `applicable`
    and report the ratio as not applicable in that case.
    """

    total_debt: int
    total_collateral: int
    ratio: Decimal

    @property
    def applicable(self) -> bool:
        return self.total_debt != 0


def priced_total(coins: Iterable[Coin], prices: PriceSource) -> int:
    total = 0
    for coin in coins:
        total += coin.amount * prices.price(coin.denom)
    return total


def calculate_collateralization_ratio(
    debts: Iterable[Coin],
    collaterals: Iterable[Coin],
    prices: Optional[PriceSource] = None,
) -> CollateralizationResult:
    """
    Sum priced debt and collateral and derive `(collateral / debt) / 100`.

    Totals stay integers; the division is done in `Decimal` using the
    current context precision. Zero debt yields a ratio of exactly 0.
    """
    src = prices or FixedPriceSource()
    total_debt = priced_total(debts, src)
    total_collateral = priced_total(collaterals, src)

    if total_debt == 0:
        return CollateralizationResult(total_debt, total_collateral, Decimal(0))

    ratio = (Decimal(total_collateral) / Decimal(total_debt)) / Decimal(100)
    return CollateralizationResult(total_debt, total_collateral, ratio)


__all__ = [
    "CollateralizationResult",
    "calculate_collateralization_ratio",
    "priced_total",
]
