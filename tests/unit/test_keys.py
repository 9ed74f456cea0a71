from __future__ import annotations

import json

import pytest

from common import keys
from common.keys import KeyDecodeError, MIN_MAP_KEY_LENGTH, decode_map_key


ADDR = "osmo1cyyzpxplxdzkeea7kwsydadg87357qnahakaks"


def _identifier(addr: str = ADDR) -> bytes:
    return json.dumps({"addr": addr}).encode("utf-8")


def _map_key(name: bytes, ident: bytes, remainder: bytes = b"uosmo", *, width: int = 1) -> bytes:
    return (
        len(name).to_bytes(width, "big")
        + name
        + len(ident).to_bytes(width, "big")
        + ident
        + remainder
    )


def test_decodes_identifier_from_composite_key():
    key = _map_key(b"collaterals", _identifier())
    assert len(key) >= MIN_MAP_KEY_LENGTH

    assert decode_map_key(key) == json.dumps({"addr": ADDR})


def test_remainder_is_ignored():
    a = decode_map_key(_map_key(b"debts", _identifier(), b"uatom"))
    b = decode_map_key(_map_key(b"debts", _identifier(), b""))
    assert a == b


def test_two_byte_length_prefixes():
    key = _map_key(b"collaterals", _identifier(), width=2)
    assert decode_map_key(key, length_prefix_bytes=2) == json.dumps({"addr": ADDR})


def test_short_key_rejected_before_length_parsing(monkeypatch: pytest.MonkeyPatch):
    def boom(*_a, **_k):
        raise AssertionError("length prefix should not be read")

    monkeypatch.setattr(keys, "_read_length", boom)
    with pytest.raises(KeyDecodeError, match="too short"):
        decode_map_key(b"\x05abcde\x03xyz")


def test_map_name_length_past_end_rejected():
    key = bytes([0xFF]) + b"a" * (MIN_MAP_KEY_LENGTH - 1)
    with pytest.raises(KeyDecodeError, match="map name"):
        decode_map_key(key)


def test_address_length_past_end_rejected():
    name = b"debts"
    key = bytes([len(name)]) + name + bytes([200]) + b"x" * MIN_MAP_KEY_LENGTH
    with pytest.raises(KeyDecodeError, match="address length"):
        decode_map_key(key)


def test_missing_address_prefix_rejected():
    # Map name consumes the whole rest of the key
    key = bytes([MIN_MAP_KEY_LENGTH - 1]) + b"n" * (MIN_MAP_KEY_LENGTH - 1)
    with pytest.raises(KeyDecodeError, match="truncated"):
        decode_map_key(key)


def test_invalid_utf8_payload_rejected():
    key = _map_key(b"collaterals", b"\xff\xfe" * 30)
    with pytest.raises(KeyDecodeError, match="UTF-8"):
        decode_map_key(key)


def test_unsupported_prefix_width():
    with pytest.raises(ValueError):
        decode_map_key(_map_key(b"collaterals", _identifier()), length_prefix_bytes=3)


def test_two_byte_prefix_reads_high_byte():
    name = b"n" * 256
    key = _map_key(name, _identifier(), width=2)
    assert key[:2] == b"\x01\x00"
    assert decode_map_key(key, length_prefix_bytes=2) == json.dumps({"addr": ADDR})
