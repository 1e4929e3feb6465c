"""
RPC Transport Layer

This package provides transports for sending encoded unary requests
with the gRPC, gRPC-Web and Connect protocols.

Usage:
    from grpcscript.transport import create_transport, RPCRequest

    transport = create_transport("grpc-web")

    # Use as async context manager
    async with transport:
        response = await transport.invoke(RPCRequest(
            address="http://localhost:8080/api/grpc",
            path="/example.UserService/GetUser",
            payload=payload,
            headers={"Authorization": "Bearer token123"},
        ))

        if response.success:
            print(response.payload)
        else:
            print(response.error)
"""

# Factory
from .factory import create_transport

# Transport implementations
from .base import BaseTransport
from .http import ConnectTransport, GRPCWebTransport, HTTPTransport
from .native import GRPCTransport

# Models
from .models import (
    RPCCode,
    RPCError,
    RPCRequest,
    RPCResponse,
)

__all__ = [
    # Factory
    "create_transport",
    # Base
    "BaseTransport",
    # Implementations
    "HTTPTransport",
    "GRPCWebTransport",
    "ConnectTransport",
    "GRPCTransport",
    # Models
    "RPCCode",
    "RPCError",
    "RPCRequest",
    "RPCResponse",
]
