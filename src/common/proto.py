"""
Protobuf wire types for the `cosmwasm.wasm.v1.Query/AllContractState` call.

Only the handful of messages needed by the scanner are declared. They are built
from a `FileDescriptorProto` at import time so no generated `_pb2` modules or
`protoc` step are required. Field numbers match the upstream definitions in
`cosmwasm/wasm/v1/query.proto` and `cosmos/base/query/v1beta1/pagination.proto`.
"""

from __future__ import annotations

from typing import Iterable, Tuple

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

_PACKAGE = "cosmwasm.wasm.v1"

_F = descriptor_pb2.FieldDescriptorProto

# (message name, [(field name, number, type, label, type_name)])
_MESSAGES: Tuple[Tuple[str, Iterable[tuple]], ...] = (
    (
        "PageRequest",
        (
            ("key", 1, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
            ("offset", 2, _F.TYPE_UINT64, _F.LABEL_OPTIONAL, None),
            ("limit", 3, _F.TYPE_UINT64, _F.LABEL_OPTIONAL, None),
            ("count_total", 4, _F.TYPE_BOOL, _F.LABEL_OPTIONAL, None),
            ("reverse", 5, _F.TYPE_BOOL, _F.LABEL_OPTIONAL, None),
        ),
    ),
    (
        "PageResponse",
        (
            ("next_key", 1, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
            ("total", 2, _F.TYPE_UINT64, _F.LABEL_OPTIONAL, None),
        ),
    ),
    (
        "Model",
        (
            ("key", 1, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
            ("value", 2, _F.TYPE_BYTES, _F.LABEL_OPTIONAL, None),
        ),
    ),
    (
        "QueryAllContractStateRequest",
        (
            ("address", 1, _F.TYPE_STRING, _F.LABEL_OPTIONAL, None),
            ("pagination", 2, _F.TYPE_MESSAGE, _F.LABEL_OPTIONAL, "PageRequest"),
        ),
    ),
    (
        "QueryAllContractStateResponse",
        (
            ("models", 1, _F.TYPE_MESSAGE, _F.LABEL_REPEATED, "Model"),
            ("pagination", 2, _F.TYPE_MESSAGE, _F.LABEL_OPTIONAL, "PageResponse"),
        ),
    ),
)


def _build_pool() -> descriptor_pool.DescriptorPool:
    fdp = descriptor_pb2.FileDescriptorProto()
    fdp.name = "cosmwasm/wasm/v1/all_contract_state.proto"
    fdp.package = _PACKAGE
    fdp.syntax = "proto3"
    for msg_name, fields in _MESSAGES:
        msg = fdp.message_type.add()
        msg.name = msg_name
        for name, number, ftype, label, type_name in fields:
            f = msg.field.add()
            f.name = name
            f.number = number
            f.type = ftype
            f.label = label
            if type_name:
                f.type_name = f".{_PACKAGE}.{type_name}"
    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(fdp.SerializeToString())
    return pool


_POOL = _build_pool()


def _message_class(name: str):
    return message_factory.GetMessageClass(_POOL.FindMessageTypeByName(f"{_PACKAGE}.{name}"))


PageRequest = _message_class("PageRequest")
PageResponse = _message_class("PageResponse")
Model = _message_class("Model")
QueryAllContractStateRequest = _message_class("QueryAllContractStateRequest")
QueryAllContractStateResponse = _message_class("QueryAllContractStateResponse")

ALL_CONTRACT_STATE_PATH = "/cosmwasm.wasm.v1.Query/AllContractState"


__all__ = [
    "ALL_CONTRACT_STATE_PATH",
    "Model",
    "PageRequest",
    "PageResponse",
    "QueryAllContractStateRequest",
    "QueryAllContractStateResponse",
]
