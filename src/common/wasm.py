from __future__ import annotations

import base64
import json
from typing import Any, Dict, Optional

import httpx


class WasmQueryError(RuntimeError):
    """Base error for CosmWasm smart-query client."""


class WasmQueryApiError(WasmQueryError):
    """REST gateway returned an error status or a body that is not JSON."""


def encode_query(query: Dict[str, Any]) -> str:
    """Serialize a smart query to JSON and base64 it for the REST path."""
    raw = json.dumps(query).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def user_query(query_type: str, address: str) -> Dict[str, Any]:
    return {query_type: {"user": address}}


class WasmRestClient:
    """
    Minimal client for CosmWasm smart queries over a node's REST (LCD) gateway.

    Notes
    - `GET {rest}/cosmwasm/wasm/v1/contract/{contract}/smart/{base64(query)}`.
    - No retries. No timeout by default; pass `timeout` to bound requests.
    - The underlying `httpx.Client` is safe to share across threads.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        if not endpoint:
            raise ValueError("endpoint is required")
        self._endpoint = endpoint.rstrip("/")
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=self._timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "WasmRestClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --------------- Public API ---------------
    def smart_query(self, contract: str, query: Dict[str, Any]) -> Dict[str, Any]:
        """Run a smart query and return the decoded JSON body (incl. `data`)."""
        url = f"{self._endpoint}/cosmwasm/wasm/v1/contract/{contract}/smart/{encode_query(query)}"
        try:
            resp = self._client.get(url)
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            raise WasmQueryError(f"REST transport error querying {contract}") from exc

        if resp.status_code >= 400:
            raise WasmQueryApiError(f"HTTP {resp.status_code} from REST gateway: {resp.text[:200]}")
        try:
            body = resp.json()
        except ValueError as exc:
            raise WasmQueryApiError("REST gateway returned a non-JSON body") from exc
        if not isinstance(body, dict):
            raise WasmQueryApiError("REST gateway response is not a JSON object")
        return body


__all__ = [
    "WasmQueryApiError",
    "WasmQueryError",
    "WasmRestClient",
    "encode_query",
    "user_query",
]
