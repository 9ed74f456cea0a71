from __future__ import annotations

from typing import Iterable

from .models import Coin, PositionSnapshot
from .ratio import CollateralizationResult


SEPARATOR = "-" * 51


def _fmt_coins(coins: Iterable[Coin]) -> str:
    items = [str(c) for c in coins]
    return "[" + ", ".join(items) + "]"


def format_account_report(address: str, snapshot: PositionSnapshot, result: CollateralizationResult) -> str:
    """Return the console diagnostic block for one account.

    Health lines are omitted when the aggregate view was unavailable; the
    ratio is shown as N/A when the account has no debt.
    """
    lines = [
        f"user address: {address}",
        f"debtCoins: {_fmt_coins(snapshot.debts)} collateralCoins: {_fmt_coins(snapshot.collaterals)}",
    ]
    if snapshot.health is not None:
        lines.append(f"Health Status: {snapshot.health.health_status}")
        lines.append(f"Total Collateralized Debt: {snapshot.health.total_collateralized_debt}")
        lines.append(f"Total Enabled Collateral: {snapshot.health.total_enabled_collateral}")

    if result.applicable:
        lines.append(f"Collateralization Ratio: {result.ratio}")
    else:
        lines.append("Collateralization Ratio N/A as zero debt")

    for query_type, err in sorted(snapshot.errors.items()):
        lines.append(f"Error ({query_type}): {err}")
    lines.append(SEPARATOR)
    return "\n".join(lines)


__all__ = ["SEPARATOR", "format_account_report"]
