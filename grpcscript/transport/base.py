"""
Base transport interface for RPC calls.

This module defines the abstract base class that all transport
implementations must follow.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import RPCRequest, RPCResponse


class BaseTransport(ABC):
    """
    Abstract base class for RPC transports.

    Transports carry an already-encoded request payload to the server
    and hand back the response payload. They never raise for call
    failures; errors are reported through RPCResponse.error.
    """

    @abstractmethod
    async def connect(self) -> None:
        """
        Prepare the transport for sending requests.

        For HTTP-based protocols this opens the client session.
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Release sessions and channels."""
        pass

    @abstractmethod
    async def invoke(self, request: RPCRequest) -> RPCResponse:
        """
        Send a unary request and wait for its response.

        The request's timeout is the deadline for the whole call.

        Args:
            request: The encoded request

        Returns:
            RPCResponse with either the response payload or an error
        """
        pass

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Return True if the transport is ready to send."""
        pass

    async def __aenter__(self) -> BaseTransport:
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.disconnect()
