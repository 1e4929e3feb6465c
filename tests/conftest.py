"""Shared fixtures: an in-memory user service and a scripted transport."""

from __future__ import annotations

from typing import Callable

import pytest
from google.protobuf import descriptor_pb2, message_factory

from grpcscript.protos import ProtoCodec, Registry
from grpcscript.transport import BaseTransport, RPCRequest, RPCResponse

_FIELD = descriptor_pb2.FieldDescriptorProto


def _message(name: str, *fields: str) -> descriptor_pb2.DescriptorProto:
    message = descriptor_pb2.DescriptorProto(name=name)
    for number, field_name in enumerate(fields, start=1):
        message.field.add(
            name=field_name,
            number=number,
            type=_FIELD.TYPE_STRING,
            label=_FIELD.LABEL_OPTIONAL,
        )
    return message


def build_user_service() -> descriptor_pb2.FileDescriptorSet:
    """example.UserService with GetUser and DeleteUser."""
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="example/users.proto",
        package="example",
        syntax="proto3",
    )
    file_proto.message_type.extend([
        _message("GetUserRequest", "user_id"),
        _message("User", "id", "name", "status"),
    ])
    service = file_proto.service.add(name="UserService")
    service.method.add(
        name="GetUser",
        input_type=".example.GetUserRequest",
        output_type=".example.User",
    )
    service.method.add(
        name="DeleteUser",
        input_type=".example.GetUserRequest",
        output_type=".example.User",
    )
    return descriptor_pb2.FileDescriptorSet(file=[file_proto])


class ScriptedTransport(BaseTransport):
    """Records requests and answers them with a responder function."""

    def __init__(self, responder: Callable[[RPCRequest], RPCResponse]):
        self.responder = responder
        self.requests: list[RPCRequest] = []
        self._connected = False
        self.connect_count = 0

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self._connected = True
        self.connect_count += 1

    async def disconnect(self) -> None:
        self._connected = False

    async def invoke(self, request: RPCRequest) -> RPCResponse:
        self.requests.append(request)
        return self.responder(request)


@pytest.fixture
def registry() -> Registry:
    registry = Registry()
    registry.add_descriptor_set(build_user_service())
    return registry


@pytest.fixture
def codec(registry) -> ProtoCodec:
    return ProtoCodec(registry.pool)


@pytest.fixture
def user_message(registry):
    """Build serialized example.User payloads."""
    user_class = message_factory.GetMessageClass(
        registry.pool.FindMessageTypeByName("example.User")
    )

    def build(**fields: str) -> bytes:
        return user_class(**fields).SerializeToString()

    return build


@pytest.fixture
def request_message(registry):
    """Parse serialized example.GetUserRequest payloads."""
    request_class = message_factory.GetMessageClass(
        registry.pool.FindMessageTypeByName("example.GetUserRequest")
    )

    def parse(payload: bytes):
        return request_class.FromString(payload)

    return parse
