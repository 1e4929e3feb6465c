"""Tests for proto compilation, lookup and the JSON codec."""

import json

import pytest

from grpcscript.protos import (
    CodecError,
    OperationNotFoundError,
    ProtoCodec,
    ProtoLoadError,
    find_proto_files,
    load_protos,
)

USERS_PROTO = """
syntax = "proto3";

package example;

import "google/protobuf/timestamp.proto";

service UserService {
  rpc GetUser(GetUserRequest) returns (User);
  rpc ListUsers(ListUsersRequest) returns (ListUsersResponse);
}

message GetUserRequest {
  string user_id = 1;
}

message User {
  string id = 1;
  string display_name = 2;
  int32 age = 3;
  repeated string tags = 4;
  google.protobuf.Timestamp created_at = 5;
}

message ListUsersRequest {
  int32 page_size = 1;
}

message ListUsersResponse {
  repeated User users = 1;
}
"""


@pytest.fixture
def proto_dir(tmp_path):
    root = tmp_path / "protos"
    (root / "example").mkdir(parents=True)
    (root / "example" / "users.proto").write_text(USERS_PROTO)
    (root / ".hidden").mkdir()
    (root / ".hidden" / "broken.proto").write_text("not a proto")
    return root


@pytest.fixture
def compiled(proto_dir):
    return load_protos(proto_dir)


class TestLoadProtos:

    def test_hidden_directories_are_skipped(self, proto_dir):
        files = find_proto_files(proto_dir)
        assert [f.name for f in files] == ["users.proto"]

    def test_services_are_registered(self, compiled):
        assert compiled.service_names == ["example.UserService"]

        [service] = compiled.list_services()
        assert service.full_name == "example.UserService"
        assert [m.name for m in service.methods] == ["GetUser", "ListUsers"]
        assert service.methods[0].input_type == "example.GetUserRequest"
        assert service.methods[0].output_type == "example.User"

    def test_missing_path(self, tmp_path):
        with pytest.raises(ProtoLoadError, match="does not exist"):
            load_protos(tmp_path / "missing")

    def test_path_is_a_file(self, tmp_path):
        path = tmp_path / "file.proto"
        path.write_text("")
        with pytest.raises(ProtoLoadError, match="not a directory"):
            load_protos(path)

    def test_no_proto_files(self, tmp_path):
        with pytest.raises(ProtoLoadError, match="no .proto files found"):
            load_protos(tmp_path)

    def test_compile_error(self, tmp_path):
        (tmp_path / "bad.proto").write_text('syntax = "proto3";\nmessage {')
        with pytest.raises(ProtoLoadError, match="failed to compile protos"):
            load_protos(tmp_path)


class TestFindMethod:

    def test_operation(self, compiled):
        operation = compiled.find_method("example.UserService", "GetUser")
        assert operation.path == "/example.UserService/GetUser"
        assert operation.input_type.full_name == "example.GetUserRequest"

    def test_unknown_service(self, compiled):
        with pytest.raises(OperationNotFoundError) as exc:
            compiled.find_method("example.Nope", "GetUser")
        assert exc.value.available == ["example.UserService"]
        assert "Available services: example.UserService" in str(exc.value)

    def test_unknown_method(self, compiled):
        with pytest.raises(OperationNotFoundError) as exc:
            compiled.find_method("example.UserService", "Delete")
        assert exc.value.available == ["GetUser", "ListUsers"]


class TestCodec:

    def test_request_round_trip(self, compiled):
        codec = ProtoCodec(compiled.pool)
        operation = compiled.find_method("example.UserService", "GetUser")

        payload = codec.encode('{"userId": "42"}', operation)
        message = operation.new_request()
        message.ParseFromString(payload)

        assert message.user_id == "42"

    def test_response_json(self, compiled):
        codec = ProtoCodec(compiled.pool)
        operation = compiled.find_method("example.UserService", "GetUser")
        user = operation.new_response()
        user.id = "u-1"
        user.display_name = "Alice"
        user.tags.extend(["a", "b"])
        user.created_at.seconds = 86400

        text = codec.decode(user.SerializeToString(), operation)

        assert json.loads(text) == {
            "id": "u-1",
            "displayName": "Alice",
            "tags": ["a", "b"],
            "createdAt": "1970-01-02T00:00:00Z",
        }
        assert text.startswith('{\n  "')

    def test_non_ascii_strings_are_not_escaped(self, compiled):
        codec = ProtoCodec(compiled.pool)
        operation = compiled.find_method("example.UserService", "GetUser")
        user = operation.new_response()
        user.display_name = "Zoë 東京"

        text = codec.decode(user.SerializeToString(), operation)

        assert '"displayName": "Zoë 東京"' in text

    def test_nested_response(self, compiled):
        codec = ProtoCodec(compiled.pool)
        operation = compiled.find_method("example.UserService", "ListUsers")
        response = operation.new_response()
        response.users.add(id="a")
        response.users.add(id="b", age=3)

        data = json.loads(codec.decode(response.SerializeToString(), operation))

        assert data == {"users": [{"id": "a"}, {"id": "b", "age": 3}]}

    def test_unknown_field(self, compiled):
        codec = ProtoCodec(compiled.pool)
        operation = compiled.find_method("example.UserService", "GetUser")
        with pytest.raises(CodecError, match="example.GetUserRequest"):
            codec.encode('{"nope": 1}', operation)

    def test_invalid_payload(self, compiled):
        codec = ProtoCodec(compiled.pool)
        operation = compiled.find_method("example.UserService", "GetUser")
        with pytest.raises(CodecError):
            codec.decode(b"\xff\xff\xff", operation)
