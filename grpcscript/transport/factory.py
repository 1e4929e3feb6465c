"""
Transport factory for creating transports from a protocol variant.
"""

from __future__ import annotations

from ..document.models import ProtocolVariant
from .base import BaseTransport
from .http import ConnectTransport, GRPCWebTransport
from .native import GRPCTransport


def create_transport(protocol: ProtocolVariant | str) -> BaseTransport:
    """
    Create a transport instance for a protocol variant.

    Args:
        protocol: grpc, grpc-web or connect

    Returns:
        An unconnected transport

    Raises:
        ValueError: If the protocol is unsupported

    Example:
        async with create_transport(ProtocolVariant.GRPC_WEB) as transport:
            response = await transport.invoke(request)
    """
    protocol = ProtocolVariant.parse(protocol) if isinstance(protocol, str) else protocol

    if protocol == ProtocolVariant.GRPC_WEB:
        return GRPCWebTransport()

    elif protocol == ProtocolVariant.CONNECT:
        return ConnectTransport()

    elif protocol == ProtocolVariant.GRPC:
        return GRPCTransport()

    else:
        raise ValueError(f"Unsupported protocol: {protocol}")
