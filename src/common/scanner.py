from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from google.protobuf.message import DecodeError
from pydantic import ValidationError

from .keys import DEFAULT_LENGTH_PREFIX_BYTES, KeyDecodeError, decode_map_key
from .models import AccountKey, RawStateEntry, ScanResult
from .proto import (
    ALL_CONTRACT_STATE_PATH,
    QueryAllContractStateRequest,
    QueryAllContractStateResponse,
)
from .tendermint import TendermintRpcClient

logger = logging.getLogger(__name__)


class StateScanError(RuntimeError):
    """Raised when the contract-state scan cannot produce an address set."""


def _build_request(contract: str, next_key: bytes, page_limit: Optional[int]) -> bytes:
    req = QueryAllContractStateRequest(address=contract)
    if next_key:
        req.pagination.key = next_key
    if page_limit:
        req.pagination.limit = page_limit
    return req.SerializeToString()


def fetch_state_page(
    rpc: TendermintRpcClient,
    contract: str,
    *,
    next_key: bytes = b"",
    page_limit: Optional[int] = None,
) -> Tuple[List[RawStateEntry], bytes]:
    """Fetch one page of the contract's state dump.

    Returns (entries, next_key); `next_key` is empty on the last page.
    """
    raw = rpc.abci_query(ALL_CONTRACT_STATE_PATH, _build_request(contract, next_key, page_limit))
    resp = QueryAllContractStateResponse()
    try:
        resp.ParseFromString(raw)
    except DecodeError as exc:
        raise StateScanError("Failed to decode AllContractState response") from exc
    entries = [RawStateEntry(key=bytes(m.key), value=bytes(m.value)) for m in resp.models]
    return entries, bytes(resp.pagination.next_key)


def collect_identifiers(
    entries: Iterable[RawStateEntry],
    *,
    length_prefix_bytes: int = DEFAULT_LENGTH_PREFIX_BYTES,
    into: Optional[Dict[str, str]] = None,
) -> Tuple[Dict[str, str], int, int]:
    """
    Decode each entry key and dedup the recovered identifiers.

    Malformed keys are logged and skipped. Returns (identifiers, scanned,
    skipped); the mapping keeps first-seen order and maps each identifier to
    its work item until `resolve_addresses` parses it.
    """
    identifiers: Dict[str, str] = into if into is not None else {}
    scanned = 0
    skipped = 0
    for entry in entries:
        scanned += 1
        try:
            identifier = decode_map_key(entry.key, length_prefix_bytes=length_prefix_bytes)
        except KeyDecodeError as exc:
            skipped += 1
            logger.debug("Skipping contract state key %s: %s", entry.key.hex(), exc)
            continue
        identifiers.setdefault(identifier, identifier)
    return identifiers, scanned, skipped


def resolve_addresses(identifiers: Iterable[str]) -> List[str]:
    """Parse each identifier as `{"addr": ...}`; any failure aborts the whole pass."""
    out: List[str] = []
    seen: set[str] = set()
    for identifier in identifiers:
        try:
            key = AccountKey.model_validate_json(identifier)
        except ValidationError as exc:
            raise StateScanError(f"Unable to parse account identifier {identifier!r}") from exc
        # Distinct identifiers can still name the same address
        if key.addr not in seen:
            seen.add(key.addr)
            out.append(key.addr)
    return out


def scan_contract_accounts(
    rpc: TendermintRpcClient,
    contract: str,
    *,
    length_prefix_bytes: int = DEFAULT_LENGTH_PREFIX_BYTES,
    page_limit: Optional[int] = None,
    max_pages: int = 0,
) -> ScanResult:
    """
    Enumerate every account address stored in the contract's map keys.

    Follows `pagination.next_key` until the node reports the last page, or
    until `max_pages` pages were read when it is non-zero. RPC and decode
    failures propagate.
    """
    result = ScanResult()
    identifiers: Dict[str, str] = {}
    next_key = b""
    while True:
        entries, next_key = fetch_state_page(rpc, contract, next_key=next_key, page_limit=page_limit)
        result.pages += 1
        _, scanned, skipped = collect_identifiers(
            entries, length_prefix_bytes=length_prefix_bytes, into=identifiers
        )
        result.scanned += scanned
        result.skipped += skipped
        if not next_key:
            break
        if max_pages and result.pages >= max_pages:
            logger.warning(
                "Stopped contract state scan after %d pages; results are truncated", result.pages
            )
            break

    result.addresses = resolve_addresses(identifiers)
    logger.info(
        "Scanned %d state entries over %d page(s): %d accounts, %d keys skipped",
        result.scanned,
        result.pages,
        len(result.addresses),
        result.skipped,
    )
    return result


__all__ = [
    "StateScanError",
    "collect_identifiers",
    "fetch_state_page",
    "resolve_addresses",
    "scan_contract_accounts",
]
