from __future__ import annotations

import base64
import itertools
from typing import Any, Dict, Optional

import httpx


DEFAULT_RPC_TIMEOUT = 30.0


class TendermintError(RuntimeError):
    """Base error for the Tendermint RPC client."""


class TendermintRpcError(TendermintError):
    """RPC returned an error object, a non-zero ABCI code or an unexpected structure."""


class TendermintRpcClient:
    """
    Minimal Tendermint/CometBFT JSON-RPC client focused on `abci_query`.

    Notes
    - Requests are JSON-RPC 2.0 POSTs against the node's RPC root.
    - No retries. Transport failures are raised as `TendermintError`.
    - Timeout defaults to 30 seconds per request.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: Optional[float] = DEFAULT_RPC_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ) -> None:
        if not endpoint:
            raise ValueError("endpoint is required")
        self._endpoint = endpoint.rstrip("/")
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=self._timeout)
        self._ids = itertools.count(1)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "TendermintRpcClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --------------- Public API ---------------
    def abci_query(self, path: str, data: bytes, *, height: int = 0, prove: bool = False) -> bytes:
        """
        Run an ABCI query and return the raw response value bytes.

        `data` is the protobuf-encoded request; it is sent hex-encoded as the
        RPC expects. A non-zero response `code` raises `TendermintRpcError`
        carrying the node's log message.
        """
        result = self._call(
            "abci_query",
            {
                "path": path,
                "data": data.hex(),
                "height": str(height),
                "prove": prove,
            },
        )
        response = result.get("response")
        if not isinstance(response, dict):
            raise TendermintRpcError("abci_query result missing 'response'")

        code = int(response.get("code") or 0)
        if code != 0:
            log = response.get("log") or ""
            codespace = response.get("codespace") or ""
            raise TendermintRpcError(f"abci_query failed with code {code} ({codespace}): {log}")

        value = response.get("value")
        if not value:
            return b""
        try:
            return base64.b64decode(value)
        except (ValueError, TypeError) as exc:
            raise TendermintRpcError("abci_query value is not valid base64") from exc

    # --------------- Internal ---------------
    def _call(self, method: str, params: Dict[str, Any]) -> Dict[str, Any]:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        try:
            resp = self._client.post(self._endpoint, json=payload)
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            raise TendermintError(f"RPC transport error calling {method}") from exc

        try:
            body = resp.json()
        except ValueError as exc:
            raise TendermintRpcError(
                f"HTTP {resp.status_code} from RPC with non-JSON body: {resp.text[:200]}"
            ) from exc

        if not isinstance(body, dict):
            raise TendermintRpcError("RPC response is not a JSON object")
        err = body.get("error")
        if err:
            if isinstance(err, dict):
                msg = err.get("message", "RPC error")
                detail = err.get("data")
                raise TendermintRpcError(f"{msg}: {detail}" if detail else str(msg))
            raise TendermintRpcError(str(err))
        if resp.status_code != 200:
            raise TendermintRpcError(f"HTTP {resp.status_code} from RPC: {resp.text[:200]}")

        result = body.get("result")
        if not isinstance(result, dict):
            raise TendermintRpcError(f"RPC response for {method} missing 'result'")
        return result


__all__ = [
    "DEFAULT_RPC_TIMEOUT",
    "TendermintError",
    "TendermintRpcClient",
    "TendermintRpcError",
]
