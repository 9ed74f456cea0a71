from __future__ import annotations

import logging
import os
import sys
from typing import Any, Dict, Iterable, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

from common.keys import DEFAULT_LENGTH_PREFIX_BYTES
from common.positions import fetch_positions
from common.prices import FixedPriceSource, PriceSource
from common.ratio import calculate_collateralization_ratio
from common.report import format_account_report
from common.scanner import scan_contract_accounts
from common.tendermint import DEFAULT_RPC_TIMEOUT, TendermintRpcClient
from common.wasm import WasmRestClient

logger = logging.getLogger(__name__)


# Environment variable names (also the keys expected in a local .env file)
ENV_REST_ENDPOINT = "REST_ENDPOINT"
ENV_RPC_ENDPOINT = "RPC_ENDPOINT"
ENV_CONTRACT = "REDBANK_CONTRACT"
ENV_PARAM_PREFIX = "PARAM_PREFIX"  # optional; enables SSM fallback

ENV_RPC_TIMEOUT = "RPC_TIMEOUT"
ENV_REST_TIMEOUT = "REST_TIMEOUT"
ENV_KEY_PREFIX_BYTES = "KEY_LENGTH_PREFIX_BYTES"
ENV_PAGE_LIMIT = "STATE_PAGE_LIMIT"
ENV_MAX_PAGES = "STATE_MAX_PAGES"
ENV_LOG_LEVEL = "LOG_LEVEL"

# SSM parameter names under PARAM_PREFIX for the required values
_SSM_NAMES = {
    ENV_REST_ENDPOINT: "rest_endpoint",
    ENV_RPC_ENDPOINT: "rpc_endpoint",
    ENV_CONTRACT: "redbank_contract",
}


class MonitorConfig(BaseModel):
    rest_endpoint: str
    rpc_endpoint: str
    contract: str
    rpc_timeout: Optional[float] = DEFAULT_RPC_TIMEOUT
    rest_timeout: Optional[float] = None
    key_length_prefix_bytes: int = Field(default=DEFAULT_LENGTH_PREFIX_BYTES, ge=1, le=2)
    page_limit: Optional[int] = Field(default=None, ge=1)
    max_pages: int = Field(default=0, ge=0)


def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    val = os.environ.get(name)
    return val if val not in (None, "") else default


def _require(v: Optional[str], what: str) -> str:
    if not v:
        raise RuntimeError(f"Missing required configuration: {what}")
    return v


def _load_ssm_params(prefix: str, names: Iterable[str]) -> Dict[str, Optional[str]]:
    import boto3
    from botocore.exceptions import ClientError

    ssm = boto3.client("ssm")
    out: Dict[str, Optional[str]] = {k: None for k in names}
    for name in names:
        full = f"{prefix}{name}"
        try:
            resp = ssm.get_parameter(Name=full, WithDecryption=True)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in ("ParameterNotFound", "AccessDeniedException"):
                out[name] = None
                continue
            raise
        val = resp.get("Parameter", {}).get("Value")
        out[name] = val if isinstance(val, str) and val != "" else None
    return out


def _optional_number(name: str, cast):
    raw = _getenv(name)
    if raw is None:
        return None
    try:
        return cast(raw)
    except ValueError as exc:
        raise RuntimeError(f"Invalid value for {name}: {raw!r}") from exc


def load_config(*, dotenv_path: Optional[str] = None) -> MonitorConfig:
    """
    Resolve configuration from the environment.

    A local `.env` file is loaded first without overriding variables that are
    already set. Required values still missing afterwards are read from SSM
    when `PARAM_PREFIX` is configured.
    """
    load_dotenv(dotenv_path or find_dotenv(usecwd=True))

    values = {name: _getenv(name) for name in _SSM_NAMES}
    missing = [name for name, v in values.items() if not v]
    prefix = _getenv(ENV_PARAM_PREFIX)
    if missing and prefix:
        params = _load_ssm_params(prefix, [_SSM_NAMES[n] for n in missing])
        for name in missing:
            values[name] = params.get(_SSM_NAMES[name])

    rpc_timeout = _optional_number(ENV_RPC_TIMEOUT, float)
    key_prefix = _optional_number(ENV_KEY_PREFIX_BYTES, int)
    return MonitorConfig(
        rest_endpoint=_require(values[ENV_REST_ENDPOINT], ENV_REST_ENDPOINT),
        rpc_endpoint=_require(values[ENV_RPC_ENDPOINT], ENV_RPC_ENDPOINT),
        contract=_require(values[ENV_CONTRACT], ENV_CONTRACT),
        rpc_timeout=rpc_timeout if rpc_timeout is not None else DEFAULT_RPC_TIMEOUT,
        rest_timeout=_optional_number(ENV_REST_TIMEOUT, float),
        key_length_prefix_bytes=key_prefix if key_prefix is not None else DEFAULT_LENGTH_PREFIX_BYTES,
        page_limit=_optional_number(ENV_PAGE_LIMIT, int),
        max_pages=_optional_number(ENV_MAX_PAGES, int) or 0,
    )


def run_once(config: Optional[MonitorConfig] = None, *, prices: Optional[PriceSource] = None) -> Dict[str, Any]:
    cfg = config or load_config()
    price_source = prices or FixedPriceSource()

    with TendermintRpcClient(cfg.rpc_endpoint, timeout=cfg.rpc_timeout) as rpc, WasmRestClient(
        cfg.rest_endpoint, timeout=cfg.rest_timeout
    ) as rest:
        scan = scan_contract_accounts(
            rpc,
            cfg.contract,
            length_prefix_bytes=cfg.key_length_prefix_bytes,
            page_limit=cfg.page_limit,
            max_pages=cfg.max_pages,
        )

        with_debt = 0
        fetch_errors = 0
        # One account at a time; fan-out happens inside fetch_positions
        for address in scan.addresses:
            snapshot = fetch_positions(rest, cfg.contract, address)
            result = calculate_collateralization_ratio(snapshot.debts, snapshot.collaterals, price_source)
            if result.applicable:
                with_debt += 1
            fetch_errors += len(snapshot.errors)
            print(format_account_report(address, snapshot, result))

    return {
        "ok": True,
        "scanned": scan.scanned,
        "skipped": scan.skipped,
        "pages": scan.pages,
        "accounts": len(scan.addresses),
        "with_debt": with_debt,
        "fetch_errors": fetch_errors,
    }


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    return run_once()


def main() -> int:
    load_dotenv(find_dotenv(usecwd=True))
    logging.basicConfig(
        level=(_getenv(ENV_LOG_LEVEL, "INFO") or "INFO").upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stderr,
    )
    try:
        summary = run_once()
    except (RuntimeError, ValueError):
        logger.exception("Monitor run failed")
        return 1
    logger.info(
        "Processed %d accounts (%d with debt) from %d state entries",
        summary["accounts"],
        summary["with_debt"],
        summary["scanned"],
    )
    return 0
