from __future__ import annotations

from typing import Tuple


# Anything shorter than this can't be a map entry key.
MIN_MAP_KEY_LENGTH = 50

DEFAULT_LENGTH_PREFIX_BYTES = 1


class KeyDecodeError(ValueError):
    """Raised when a contract-state key does not follow the map key layout."""


def _read_length(key: bytes, offset: int, width: int, what: str) -> Tuple[int, int]:
    """Read a `width`-byte length prefix at `offset`.

    Returns (length, next_offset). The prefix bytes are rendered as hex digits
    and parsed in base 16, i.e. a big-endian unsigned integer.
    """
    chunk = key[offset : offset + width]
    if len(chunk) != width:
        raise KeyDecodeError(f"truncated length prefix ({what}) at offset {offset}")
    return int(chunk.hex(), 16), offset + width


def decode_map_key(key: bytes, *, length_prefix_bytes: int = DEFAULT_LENGTH_PREFIX_BYTES) -> str:
    """
    Recover the account identifier embedded in a map-backed storage key.

    Layout: `[len][map name][len][identifier][remainder]`, where each `len`
    is a `length_prefix_bytes`-wide big-endian prefix. The remainder (e.g. a
    denom for composite keys) is ignored.

    Raises `KeyDecodeError` for short keys, bad prefixes, slices running past
    the end of the key, or identifiers that are not valid UTF-8.
    """
    if length_prefix_bytes not in (1, 2):
        raise ValueError("length_prefix_bytes must be 1 or 2")
    if len(key) < MIN_MAP_KEY_LENGTH:
        raise KeyDecodeError(f"key too short to be a map key ({len(key)} bytes)")

    name_len, offset = _read_length(key, 0, length_prefix_bytes, "map name")
    offset += name_len
    if offset > len(key):
        raise KeyDecodeError(f"map name length {name_len} exceeds key bounds")

    addr_len, offset = _read_length(key, offset, length_prefix_bytes, "address")
    end = offset + addr_len
    if end > len(key):
        raise KeyDecodeError(f"address length {addr_len} exceeds key bounds")

    try:
        return key[offset:end].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise KeyDecodeError("address payload is not valid UTF-8") from exc


__all__ = [
    "DEFAULT_LENGTH_PREFIX_BYTES",
    "KeyDecodeError",
    "MIN_MAP_KEY_LENGTH",
    "decode_map_key",
]
