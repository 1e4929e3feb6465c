"""
Transport layer models for RPC calls.

This module defines the data structures for unary requests,
responses, and error handling.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RPCCode(str, Enum):
    """Canonical gRPC status codes, in the lowercase form Connect uses."""
    OK = "ok"
    CANCELED = "canceled"
    UNKNOWN = "unknown"
    INVALID_ARGUMENT = "invalid_argument"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    PERMISSION_DENIED = "permission_denied"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    FAILED_PRECONDITION = "failed_precondition"
    ABORTED = "aborted"
    OUT_OF_RANGE = "out_of_range"
    UNIMPLEMENTED = "unimplemented"
    INTERNAL = "internal"
    UNAVAILABLE = "unavailable"
    DATA_LOSS = "data_loss"
    UNAUTHENTICATED = "unauthenticated"

    @classmethod
    def from_number(cls, number: int) -> RPCCode:
        """Map a numeric grpc-status to its code."""
        members = list(cls)
        if 0 <= number < len(members):
            return members[number]
        return cls.UNKNOWN

    @classmethod
    def from_name(cls, name: str) -> RPCCode:
        try:
            return cls(name.lower())
        except ValueError:
            return cls.UNKNOWN

    @classmethod
    def from_http_status(cls, status: int) -> RPCCode:
        """Map an HTTP status without an RPC error body to a code."""
        return {
            400: cls.INTERNAL,
            401: cls.UNAUTHENTICATED,
            403: cls.PERMISSION_DENIED,
            404: cls.UNIMPLEMENTED,
            408: cls.DEADLINE_EXCEEDED,
            429: cls.UNAVAILABLE,
            502: cls.UNAVAILABLE,
            503: cls.UNAVAILABLE,
            504: cls.UNAVAILABLE,
        }.get(status, cls.UNKNOWN)


@dataclass
class RPCError:
    """Represents a failed call, either from the server or the transport."""
    code: RPCCode
    message: str
    data: Any = None

    def __str__(self) -> str:
        return f"gRPC error [{self.code.value}]: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.data is not None:
            result["data"] = self.data
        return result

    @classmethod
    def connection_error(cls, message: str, data: Any = None) -> RPCError:
        return cls(RPCCode.UNAVAILABLE, message, data)

    @classmethod
    def timeout_error(cls, message: str, data: Any = None) -> RPCError:
        return cls(RPCCode.DEADLINE_EXCEEDED, message, data)

    @classmethod
    def protocol_error(cls, message: str, data: Any = None) -> RPCError:
        return cls(RPCCode.INTERNAL, message, data)


@dataclass
class RPCRequest:
    """A unary call ready to be sent."""
    address: str  # e.g. "http://localhost:8080/api/grpc"
    path: str  # e.g. "/example.UserService/GetUser"
    payload: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float = 30.0  # seconds

    @property
    def url(self) -> str:
        return self.address.rstrip("/") + self.path

    @property
    def timeout_ms(self) -> int:
        return max(int(self.timeout * 1000), 0)


@dataclass
class RPCResponse:
    """Represents the result of an RPC call."""
    success: bool
    payload: bytes = b""
    error: RPCError | None = None
    headers: dict[str, str] = field(default_factory=dict)
    trailers: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        if self.success:
            return {
                "success": True,
                "payload_size": len(self.payload),
            }
        return {
            "success": False,
            "error": self.error.to_dict() if self.error else None,
        }

    @classmethod
    def from_payload(
        cls,
        payload: bytes,
        headers: dict[str, str] | None = None,
        trailers: dict[str, str] | None = None,
    ) -> RPCResponse:
        return cls(
            success=True,
            payload=payload,
            headers=headers or {},
            trailers=trailers or {},
        )

    @classmethod
    def from_error(cls, error: RPCError) -> RPCResponse:
        """Create a response from a server or transport error."""
        return cls(success=False, error=error)

