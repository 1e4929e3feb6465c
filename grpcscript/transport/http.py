"""
HTTP/1.1 transports for gRPC-Web and Connect.

Both protocols POST the encoded message to <address><prefix>/<Service>/<Method>:
- gRPC-Web wraps the message in a 5-byte length-prefixed frame and returns
  the status in a trailer frame (or in the headers for trailers-only replies)
- Connect unary sends the bare message and reports errors as a JSON body
  with a non-200 status
"""

from __future__ import annotations

import asyncio
import json
import logging
import struct
from abc import abstractmethod
from urllib.parse import unquote

import aiohttp

from .. import __version__
from .base import BaseTransport
from .models import RPCCode, RPCError, RPCRequest, RPCResponse

logger = logging.getLogger(__name__)

# Headers
CONTENT_TYPE = "Content-Type"
ACCEPT = "Accept"
USER_AGENT = f"grpcscript/{__version__}"

# Content types
GRPC_WEB_CONTENT_TYPE = "application/grpc-web+proto"
CONNECT_CONTENT_TYPE = "application/proto"

# gRPC-Web frame flags
FRAME_COMPRESSED = 0x01
FRAME_TRAILERS = 0x80

_FRAME_HEADER = struct.Struct(">BI")


# ─────────────────────────────────────────────────────────────────────────────
# gRPC-Web framing
# ─────────────────────────────────────────────────────────────────────────────

def encode_frame(payload: bytes, flags: int = 0) -> bytes:
    """Prefix a payload with its gRPC-Web frame header."""
    return _FRAME_HEADER.pack(flags, len(payload)) + payload


def decode_frames(data: bytes) -> list[tuple[int, bytes]]:
    """
    Split a gRPC-Web response body into (flags, payload) frames.

    Raises:
        ValueError: If the body ends in the middle of a frame
    """
    frames: list[tuple[int, bytes]] = []
    pos = 0
    while pos < len(data):
        if len(data) - pos < _FRAME_HEADER.size:
            raise ValueError("truncated gRPC-Web frame header")
        flags, length = _FRAME_HEADER.unpack_from(data, pos)
        pos += _FRAME_HEADER.size
        if len(data) - pos < length:
            raise ValueError(f"truncated gRPC-Web frame: expected {length} bytes")
        frames.append((flags, data[pos:pos + length]))
        pos += length
    return frames


def parse_trailers(block: bytes) -> dict[str, str]:
    """Parse a trailers frame ("name: value" lines) into a lowercase dict."""
    trailers: dict[str, str] = {}
    for line in block.decode("utf-8", errors="replace").splitlines():
        name, sep, value = line.partition(":")
        if sep:
            trailers[name.strip().lower()] = value.strip()
    return trailers


def status_error(metadata: dict[str, str]) -> RPCError | None:
    """Return the error described by grpc-status/grpc-message, if any."""
    status = metadata.get("grpc-status")
    if status is None:
        return None
    try:
        number = int(status)
    except ValueError:
        return RPCError.protocol_error(f"invalid grpc-status {status!r}")
    if number == 0:
        return None
    return RPCError(RPCCode.from_number(number), unquote(metadata.get("grpc-message", "")))


# ─────────────────────────────────────────────────────────────────────────────
# Transports
# ─────────────────────────────────────────────────────────────────────────────

class HTTPTransport(BaseTransport):
    """
    Shared aiohttp plumbing for HTTP/1.1 based protocols.

    Subclasses provide the protocol headers, body encoding and
    response interpretation.
    """

    protocol_name = "http"

    def __init__(self):
        self._session: aiohttp.ClientSession | None = None
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected and self._session is not None

    async def connect(self) -> None:
        """Create the HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession()
        self._connected = True

    async def disconnect(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None
        self._connected = False

    @abstractmethod
    def _build_headers(self, request: RPCRequest) -> dict[str, str]:
        """Protocol headers; request headers are applied on top."""

    @abstractmethod
    def _encode_body(self, request: RPCRequest) -> bytes:
        """Request body for the encoded message."""

    @abstractmethod
    def _handle_response(
        self, status: int, reason: str | None, headers: dict[str, str], body: bytes
    ) -> RPCResponse:
        """Turn the raw HTTP response into an RPCResponse."""

    async def invoke(self, request: RPCRequest) -> RPCResponse:
        """
        POST the request and interpret the reply.

        Args:
            request: The encoded request

        Returns:
            RPCResponse with payload or error
        """
        if not self.is_connected:
            return RPCResponse.from_error(
                RPCError.connection_error("Transport not connected. Call connect() first.")
            )

        # aiohttp treats a non-positive total as "no timeout"
        if request.timeout <= 0:
            return RPCResponse.from_error(
                RPCError.timeout_error(
                    f"Request timed out after {request.timeout_ms}ms",
                    data={"url": request.url},
                )
            )

        headers = self._build_headers(request)
        headers.update(request.headers)
        timeout = aiohttp.ClientTimeout(total=request.timeout)
        url = request.url

        logger.debug(f"{self.protocol_name} POST {url} ({len(request.payload)} bytes)")

        try:
            async with self._session.post(
                url,
                data=self._encode_body(request),
                headers=headers,
                timeout=timeout,
            ) as resp:
                body = await resp.read()
                resp_headers = {k.lower(): v for k, v in resp.headers.items()}
                return self._handle_response(resp.status, resp.reason, resp_headers, body)

        except asyncio.TimeoutError:
            return RPCResponse.from_error(
                RPCError.timeout_error(
                    f"Request timed out after {request.timeout_ms}ms",
                    data={"url": url},
                )
            )
        except aiohttp.ClientConnectorError as e:
            return RPCResponse.from_error(
                RPCError.connection_error(
                    f"Connection failed: {e}",
                    data={"url": url},
                )
            )
        except aiohttp.ClientError as e:
            return RPCResponse.from_error(
                RPCError.connection_error(
                    f"HTTP error: {e}",
                    data={"url": url},
                )
            )

    def __repr__(self) -> str:
        status = "connected" if self.is_connected else "disconnected"
        return f"{type(self).__name__}(status={status})"


class GRPCWebTransport(HTTPTransport):
    """gRPC-Web (binary) over HTTP/1.1."""

    protocol_name = "grpc-web"

    def _build_headers(self, request: RPCRequest) -> dict[str, str]:
        return {
            CONTENT_TYPE: GRPC_WEB_CONTENT_TYPE,
            ACCEPT: GRPC_WEB_CONTENT_TYPE,
            "X-Grpc-Web": "1",
            "X-User-Agent": USER_AGENT,
            "Grpc-Timeout": f"{request.timeout_ms}m",
        }

    def _encode_body(self, request: RPCRequest) -> bytes:
        return encode_frame(request.payload)

    def _handle_response(
        self, status: int, reason: str | None, headers: dict[str, str], body: bytes
    ) -> RPCResponse:
        if status != 200:
            return RPCResponse.from_error(
                RPCError(
                    RPCCode.from_http_status(status),
                    f"HTTP {status}: {reason}",
                    data={"body": body[:500].decode("utf-8", errors="replace")},
                )
            )

        try:
            frames = decode_frames(body)
        except ValueError as e:
            return RPCResponse.from_error(RPCError.protocol_error(str(e)))

        message: bytes | None = None
        trailers: dict[str, str] = {}
        for flags, chunk in frames:
            if flags & FRAME_TRAILERS:
                trailers.update(parse_trailers(chunk))
            elif flags & FRAME_COMPRESSED:
                return RPCResponse.from_error(
                    RPCError.protocol_error("compressed gRPC-Web frames are not supported")
                )
            elif message is None:
                message = chunk

        # Trailers-only responses carry the status in the headers
        metadata = trailers if "grpc-status" in trailers else headers
        if "grpc-status" not in metadata:
            return RPCResponse.from_error(
                RPCError.protocol_error("response is missing grpc-status")
            )

        error = status_error(metadata)
        if error is not None:
            return RPCResponse.from_error(error)

        if message is None:
            return RPCResponse.from_error(
                RPCError.protocol_error("response contained no message")
            )

        return RPCResponse.from_payload(message, headers, trailers)


class ConnectTransport(HTTPTransport):
    """Connect protocol (unary, binary) over HTTP/1.1."""

    protocol_name = "connect"

    def _build_headers(self, request: RPCRequest) -> dict[str, str]:
        return {
            CONTENT_TYPE: CONNECT_CONTENT_TYPE,
            "Connect-Protocol-Version": "1",
            "Connect-Timeout-Ms": str(request.timeout_ms),
            "User-Agent": USER_AGENT,
        }

    def _encode_body(self, request: RPCRequest) -> bytes:
        return request.payload

    def _handle_response(
        self, status: int, reason: str | None, headers: dict[str, str], body: bytes
    ) -> RPCResponse:
        if status == 200:
            return RPCResponse.from_payload(body, headers)

        try:
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            data = None

        if isinstance(data, dict) and "code" in data:
            return RPCResponse.from_error(
                RPCError(
                    RPCCode.from_name(str(data["code"])),
                    str(data.get("message", "")),
                    data=data.get("details"),
                )
            )

        return RPCResponse.from_error(
            RPCError(
                RPCCode.from_http_status(status),
                f"HTTP {status}: {reason}",
                data={"body": body[:500].decode("utf-8", errors="replace")},
            )
        )
