from __future__ import annotations

import base64
import json
from typing import Any, Dict

import httpx
import pytest

from common.wasm import WasmQueryApiError, WasmQueryError, WasmRestClient, encode_query, user_query


CONTRACT = "osmo1c3ljch9dfw5kf52nfwpxd2zmj2ese7agnx0p9tenkrryasrle5sqf3ftpg"


def test_encode_query_matches_smart_query_json():
    q = user_query("user_debts", "osmo1abc")
    raw = base64.b64decode(encode_query(q))
    assert raw == b'{"user_debts": {"user": "osmo1abc"}}'


def test_smart_query_builds_rest_path():
    seen: Dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["method"] = request.method
        return httpx.Response(200, json={"data": []})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    with WasmRestClient("https://lcd.example.com/", client=client) as rest:
        body = rest.smart_query(CONTRACT, user_query("user_collaterals", "osmo1abc"))

    assert body == {"data": []}
    assert seen["method"] == "GET"
    prefix = f"https://lcd.example.com/cosmwasm/wasm/v1/contract/{CONTRACT}/smart/"
    assert seen["url"].startswith(prefix)
    encoded = seen["url"][len(prefix):]
    assert json.loads(base64.b64decode(encoded)) == {"user_collaterals": {"user": "osmo1abc"}}


def test_http_error_status_raises():
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"code": 2, "message": "query wasm contract failed"})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    with WasmRestClient("https://lcd.example.com", client=client) as rest:
        with pytest.raises(WasmQueryApiError, match="HTTP 500"):
            rest.smart_query(CONTRACT, user_query("user_debts", "osmo1abc"))


def test_non_json_body_raises():
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>bad gateway</html>")

    client = httpx.Client(transport=httpx.MockTransport(handler))
    with WasmRestClient("https://lcd.example.com", client=client) as rest:
        with pytest.raises(WasmQueryApiError):
            rest.smart_query(CONTRACT, user_query("user_debts", "osmo1abc"))


def test_transport_error_raises_base_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    with WasmRestClient("https://lcd.example.com", client=client) as rest:
        with pytest.raises(WasmQueryError):
            rest.smart_query(CONTRACT, user_query("user_debts", "osmo1abc"))
