"""
Native gRPC transport over HTTP/2.

Uses grpcio's asyncio channels with identity (de)serializers, so the
already-encoded payload is sent unchanged.
"""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

import grpc
from grpc import aio

from .base import BaseTransport
from .models import RPCCode, RPCError, RPCRequest, RPCResponse

logger = logging.getLogger(__name__)


def _identity(data: bytes) -> bytes:
    return data


def channel_target(address: str) -> tuple[str, bool]:
    """
    Turn an address into a channel target and whether TLS is used.

    Example:
        >>> channel_target("https://api.example.com/prefix")
        ('api.example.com:443', True)
    """
    if "://" not in address:
        return address.rstrip("/"), False

    parts = urlsplit(address)
    secure = parts.scheme == "https"
    port = parts.port or (443 if secure else 80)
    return f"{parts.hostname}:{port}", secure


class GRPCTransport(BaseTransport):
    """
    gRPC transport using grpc.aio.

    One channel is kept per target for the lifetime of the transport.
    """

    def __init__(self):
        self._channels: dict[str, aio.Channel] = {}
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self._connected = True

    async def disconnect(self) -> None:
        """Close every open channel."""
        for target, channel in self._channels.items():
            logger.debug(f"Closing gRPC channel to {target}")
            await channel.close()
        self._channels.clear()
        self._connected = False

    def _channel(self, address: str) -> aio.Channel:
        target, secure = channel_target(address)
        channel = self._channels.get(target)
        if channel is None:
            logger.info(f"Opening {'secure' if secure else 'insecure'} gRPC channel to {target}")
            if secure:
                channel = aio.secure_channel(target, grpc.ssl_channel_credentials())
            else:
                channel = aio.insecure_channel(target)
            self._channels[target] = channel
        return channel

    async def invoke(self, request: RPCRequest) -> RPCResponse:
        """
        Send a unary call on the channel for the request's address.

        Path prefixes in the address are ignored; gRPC routes on the
        method path alone.
        """
        if not self.is_connected:
            return RPCResponse.from_error(
                RPCError.connection_error("Transport not connected. Call connect() first.")
            )

        call = self._channel(request.address).unary_unary(
            request.path,
            request_serializer=_identity,
            response_deserializer=_identity,
        )
        # gRPC metadata keys must be lowercase
        metadata = [(key.lower(), value) for key, value in request.headers.items()]

        try:
            payload = await call(request.payload, timeout=request.timeout, metadata=metadata)
        except aio.AioRpcError as e:
            code = RPCCode.from_name(e.code().name)
            if e.code() == grpc.StatusCode.CANCELLED:
                code = RPCCode.CANCELED
            return RPCResponse.from_error(RPCError(code, e.details() or ""))

        return RPCResponse.from_payload(payload)

    def __repr__(self) -> str:
        return f"GRPCTransport(channels={sorted(self._channels)})"
