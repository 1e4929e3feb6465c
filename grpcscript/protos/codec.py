"""
Conversion between request/response JSON and protobuf wire payloads.
"""

from __future__ import annotations

from google.protobuf import descriptor_pool, json_format
from google.protobuf.message import DecodeError

from .registry import Operation


class CodecError(ValueError):
    """A payload could not be converted."""


class ProtoCodec:
    """
    Encodes request JSON to wire bytes and decodes responses back to JSON.

    JSON uses protobuf's canonical mapping: lowerCamelCase field names,
    unpopulated fields omitted, two-space indentation.
    """

    def __init__(self, pool: descriptor_pool.DescriptorPool | None = None):
        self.pool = pool

    def encode(self, body_json: str, operation: Operation) -> bytes:
        """
        Convert a JSON body into the serialized input message.

        Raises:
            CodecError: If the JSON does not fit the input message type
        """
        message = operation.new_request()
        try:
            json_format.Parse(body_json, message, descriptor_pool=self.pool)
        except json_format.ParseError as e:
            raise CodecError(
                f"invalid JSON for message type {operation.input_type.full_name}: {e}"
            ) from e
        return message.SerializeToString()

    def decode(self, payload: bytes, operation: Operation) -> str:
        """
        Convert a serialized output message into JSON text.

        Raises:
            CodecError: If the payload is not a valid output message
        """
        message = operation.new_response()
        try:
            message.ParseFromString(payload)
        except DecodeError as e:
            raise CodecError(
                f"failed to decode {operation.output_type.full_name}: {e}"
            ) from e
        return json_format.MessageToJson(
            message, indent=2, descriptor_pool=self.pool, ensure_ascii=False
        )
