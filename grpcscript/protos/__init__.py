"""
Proto Loading

This package compiles .proto files at runtime, resolves service methods,
and converts between JSON and protobuf wire payloads.

Usage:
    from grpcscript.protos import load_protos, ProtoCodec

    registry = load_protos("./protos")
    operation = registry.find_method("example.UserService", "GetUser")

    codec = ProtoCodec(registry.pool)
    payload = codec.encode('{"userId": "123"}', operation)
"""

from .codec import CodecError, ProtoCodec
from .loader import ProtoLoadError, compile_protos, find_proto_files, load_protos
from .registry import (
    MethodInfo,
    Operation,
    OperationNotFoundError,
    Registry,
    ServiceInfo,
)

__all__ = [
    # Loader
    "load_protos",
    "compile_protos",
    "find_proto_files",
    "ProtoLoadError",
    # Registry
    "Registry",
    "Operation",
    "ServiceInfo",
    "MethodInfo",
    "OperationNotFoundError",
    # Codec
    "ProtoCodec",
    "CodecError",
]
