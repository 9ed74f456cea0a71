from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import ValidationError

from .models import Coin, HealthSummary, PositionSnapshot
from .wasm import WasmQueryApiError, WasmQueryError, WasmRestClient, user_query

logger = logging.getLogger(__name__)

QUERY_USER_DEBTS = "user_debts"
QUERY_USER_COLLATERALS = "user_collaterals"
QUERY_LIQUIDATION_PRICING = "user_position_liquidation_pricing"

T = TypeVar("T")


@dataclass
class FetchOutcome(Generic[T]):
    """Result of one smart-query task; `error` is set when the fetch failed."""

    value: T
    error: Optional[Exception] = None


def parse_coins(payload: Dict[str, Any]) -> List[Coin]:
    """
    Extract `{amount, denom}` entries from a smart-query body's `data` list.

    Entries that are not objects, lack either field, or carry a non-string or
    non-integer value are skipped individually.
    """
    data = payload.get("data")
    if not isinstance(data, list):
        return []
    coins: List[Coin] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        amount = item.get("amount")
        denom = item.get("denom")
        if not isinstance(amount, str) or not isinstance(denom, str):
            continue
        try:
            coins.append(Coin(amount=int(amount), denom=denom))
        except (ValueError, ValidationError):
            continue
    return coins


def parse_health(payload: Dict[str, Any]) -> Optional[HealthSummary]:
    """Extract the aggregate health fields; None when the totals are absent."""
    data = payload.get("data")
    if not isinstance(data, dict):
        return None
    debt = data.get("total_collateralized_debt")
    collateral = data.get("total_enabled_collateral")
    if not isinstance(debt, str) or not isinstance(collateral, str):
        return None
    try:
        return HealthSummary(
            health_status=data.get("health_status"),
            total_collateralized_debt=debt,
            total_enabled_collateral=collateral,
        )
    except ValidationError as ve:
        raise WasmQueryApiError(f"Failed to parse liquidation pricing payload: {ve}") from ve


def fetch_coins(rest: WasmRestClient, contract: str, query_type: str, address: str) -> List[Coin]:
    return parse_coins(rest.smart_query(contract, user_query(query_type, address)))


def fetch_health(rest: WasmRestClient, contract: str, address: str) -> Optional[HealthSummary]:
    return parse_health(rest.smart_query(contract, user_query(QUERY_LIQUIDATION_PRICING, address)))


def _run(query_type: str, address: str, default: T, fn, *args) -> FetchOutcome[T]:
    try:
        return FetchOutcome(fn(*args))
    except WasmQueryError as exc:
        logger.warning("%s query failed for %s: %s", query_type, address, exc)
        return FetchOutcome(default, exc)


def fetch_positions(rest: WasmRestClient, contract: str, address: str) -> PositionSnapshot:
    """
    Fetch debts, collaterals and the liquidation-pricing view concurrently.

    Exactly three tasks run in parallel; all are joined before returning. A
    failed task leaves its part of the snapshot empty and records the error
    under its query type.
    """
    with ThreadPoolExecutor(max_workers=3, thread_name_prefix="positions") as pool:
        debts_f = pool.submit(
            _run, QUERY_USER_DEBTS, address, [], fetch_coins, rest, contract, QUERY_USER_DEBTS, address
        )
        collaterals_f = pool.submit(
            _run, QUERY_USER_COLLATERALS, address, [], fetch_coins, rest, contract, QUERY_USER_COLLATERALS, address
        )
        health_f = pool.submit(
            _run, QUERY_LIQUIDATION_PRICING, address, None, fetch_health, rest, contract, address
        )
        outcomes = {
            QUERY_USER_DEBTS: debts_f.result(),
            QUERY_USER_COLLATERALS: collaterals_f.result(),
            QUERY_LIQUIDATION_PRICING: health_f.result(),
        }

    errors = {name: str(o.error) for name, o in outcomes.items() if o.error is not None}
    return PositionSnapshot(
        debts=outcomes[QUERY_USER_DEBTS].value,
        collaterals=outcomes[QUERY_USER_COLLATERALS].value,
        health=outcomes[QUERY_LIQUIDATION_PRICING].value,
        errors=errors,
    )


__all__ = [
    "FetchOutcome",
    "QUERY_LIQUIDATION_PRICING",
    "QUERY_USER_COLLATERALS",
    "QUERY_USER_DEBTS",
    "fetch_coins",
    "fetch_health",
    "fetch_positions",
    "parse_coins",
    "parse_health",
]
