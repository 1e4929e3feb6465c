"""Tests for .grpc document parsing."""

import pytest

from grpcscript.document import (
    DEFAULT_BODY,
    DEFAULT_PROTOCOL,
    DEFAULT_TIMEOUT,
    AssertionSpec,
    DocumentParser,
    EmptyDocumentError,
    InvalidProtocolError,
    InvalidTimeoutError,
    MissingFieldError,
    ProtocolVariant,
    StructuralParseError,
    parse_assertion_line,
    parse_document,
    parse_duration,
    validate_document,
)

MINIMAL = """\
GRPC http://localhost:8080
Service: example.UserService
Method: GetUser
"""


class TestDefaults:
    """A request with only the required fields."""

    def test_minimal_request(self):
        [record] = parse_document(MINIMAL)

        assert record.address == "http://localhost:8080"
        assert record.service == "example.UserService"
        assert record.method == "GetUser"
        assert record.protocol == DEFAULT_PROTOCOL == ProtocolVariant.GRPC_WEB
        assert record.timeout == DEFAULT_TIMEOUT == 30.0
        assert record.body == DEFAULT_BODY == "{}"
        assert record.headers == {}
        assert record.captures == {}
        assert record.assertions == []
        assert record.name == ""
        assert record.index == 1

    def test_title_falls_back_to_index(self):
        [record] = parse_document(MINIMAL)
        assert record.title == "Request 1"
        assert record.operation == "example.UserService/GetUser"


class TestSegments:

    def test_multiple_requests_in_order(self):
        text = MINIMAL + "---\n" + MINIMAL.replace("GetUser", "DeleteUser")
        records = parse_document(text)

        assert [r.method for r in records] == ["GetUser", "DeleteUser"]
        assert [r.index for r in records] == [1, 2]

    def test_blank_segments_are_dropped(self):
        text = "---\n\n---\n" + MINIMAL + "---\n   \n---\n"
        records = parse_document(text)
        assert len(records) == 1

    def test_separator_with_surrounding_whitespace(self):
        text = MINIMAL + "  ---  \n" + MINIMAL
        assert len(parse_document(text)) == 2

    def test_empty_document(self):
        with pytest.raises(EmptyDocumentError, match="no requests found in file"):
            parse_document("\n\n---\n")

    def test_comment_only_segment_is_kept_and_fails(self):
        # A segment with only a comment is not blank
        with pytest.raises(MissingFieldError):
            parse_document("# just a note\n")


class TestHeaders:

    def test_custom_headers(self):
        text = MINIMAL + "Authorization: Bearer abc\nX-Trace: a:b:c\n"
        [record] = parse_document(text)
        assert record.headers == {"Authorization": "Bearer abc", "X-Trace": "a:b:c"}

    def test_protocol_and_timeout(self):
        text = MINIMAL + "Protocol: Connect\nTimeout: 1m30s\n"
        [record] = parse_document(text)
        assert record.protocol == ProtocolVariant.CONNECT
        assert record.timeout == 90.0

    def test_address_keyword_requires_trailing_space(self):
        text = "GRPC\tlocalhost\nService: s\nMethod: m\n"
        with pytest.raises(MissingFieldError) as exc:
            parse_document(text)
        assert exc.value.field == "address"

    def test_indented_address_line_is_not_an_address(self):
        text = "  GRPC http://localhost:8080\nService: s\nMethod: m\n"
        with pytest.raises(MissingFieldError):
            parse_document(text)

    def test_first_comment_names_the_request(self):
        text = "# Fetch user\n# second comment\n" + MINIMAL
        [record] = parse_document(text)
        assert record.name == "Fetch user"
        assert record.title == "Fetch user"

    def test_line_without_colon_is_ignored(self):
        text = MINIMAL + "garbage line\n"
        [record] = parse_document(text)
        assert record.headers == {}


class TestRequiredFields:

    @pytest.mark.parametrize(
        "text,field,message",
        [
            ("Service: s\nMethod: m\n", "address", "missing required 'GRPC <address>' line"),
            ("GRPC http://h\nMethod: m\n", "service", "missing required 'Service:' field"),
            ("GRPC http://h\nService: s\n", "method", "missing required 'Method:' field"),
        ],
    )
    def test_missing_field(self, text, field, message):
        with pytest.raises(MissingFieldError) as exc:
            parse_document(text)
        assert exc.value.field == field
        assert str(exc.value) == f"request 1: {message}"

    def test_error_names_the_segment(self):
        text = MINIMAL + "---\nGRPC http://h\nService: s\n"
        with pytest.raises(MissingFieldError) as exc:
            parse_document(text)
        assert exc.value.segment == 2

    def test_invalid_timeout(self):
        with pytest.raises(InvalidTimeoutError) as exc:
            parse_document(MINIMAL + "Timeout: soon\n")
        assert exc.value.value == "soon"
        assert "invalid timeout duration 'soon'" in str(exc.value)

    def test_timeout_without_unit(self):
        with pytest.raises(InvalidTimeoutError, match="missing unit in duration"):
            parse_document(MINIMAL + "Timeout: 30\n")

    def test_invalid_protocol(self):
        with pytest.raises(InvalidProtocolError) as exc:
            parse_document(MINIMAL + "Protocol: http3\n")
        assert "grpc, grpc-web, connect" in str(exc.value)

    def test_errors_share_a_base(self):
        for error_type in (EmptyDocumentError, MissingFieldError, InvalidTimeoutError, InvalidProtocolError):
            assert issubclass(error_type, StructuralParseError)


class TestBody:

    def test_multiline_body(self):
        text = MINIMAL + '\n{\n  "user_id": "123"\n}\n'
        [record] = parse_document(text)
        assert record.body.strip() == '{\n  "user_id": "123"\n}'

    def test_body_stops_at_section_marker(self):
        text = MINIMAL + '{"user_id": "1"}\n[Captures]\nid: $.id\n'
        [record] = parse_document(text)
        assert record.body == '{"user_id": "1"}'
        assert record.captures == {"id": "$.id"}

    def test_comment_inside_body_is_skipped(self):
        text = MINIMAL + '{\n# note\n"a": 1\n}\n'
        [record] = parse_document(text)
        assert "# note" not in record.body

    def test_brace_inside_section_is_not_body(self):
        text = MINIMAL + "[Captures]\n{weird}\n"
        [record] = parse_document(text)
        assert record.body == "{}"
        assert record.captures == {}


class TestCaptures:

    def test_captures(self):
        text = MINIMAL + "[Captures]\nuser_id: $.user.id\n  token :  $.auth.token  \n"
        [record] = parse_document(text)
        assert record.captures == {"user_id": "$.user.id", "token": "$.auth.token"}

    def test_capture_line_without_colon_is_dropped(self):
        text = MINIMAL + "[Captures]\nnot a capture\nid: $.id\n"
        [record] = parse_document(text)
        assert record.captures == {"id": "$.id"}

    def test_later_capture_of_same_name_wins(self):
        text = MINIMAL + "[Captures]\nid: $.a\nid: $.b\n"
        [record] = parse_document(text)
        assert record.captures == {"id": "$.b"}


class TestAsserts:

    def test_asserts(self):
        text = MINIMAL + (
            "[Asserts]\n"
            'jsonpath "$.status" == "active"\n'
            'jsonpath "$.name" contains "Ali"\n'
            'jsonpath "$.count" != 0\n'
        )
        [record] = parse_document(text)
        assert record.assertions == [
            AssertionSpec("jsonpath", "$.status", "==", "active"),
            AssertionSpec("jsonpath", "$.name", "contains", "Ali"),
            AssertionSpec("jsonpath", "$.count", "!=", "0"),
        ]

    def test_captures_and_asserts_in_either_order(self):
        text = MINIMAL + '[Asserts]\njsonpath "$.a" == "1"\n[Captures]\nx: $.a\n'
        [record] = parse_document(text)
        assert len(record.assertions) == 1
        assert record.captures == {"x": "$.a"}

    def test_short_assertion_line_is_dropped(self):
        text = MINIMAL + '[Asserts]\njsonpath "$.a" ==\n'
        [record] = parse_document(text)
        assert record.assertions == []


class TestAssertionLine:

    def test_unquoted_expected(self):
        spec = parse_assertion_line('jsonpath "$.id" == 42')
        assert spec == AssertionSpec("jsonpath", "$.id", "==", "42")

    def test_expected_with_spaces(self):
        spec = parse_assertion_line('jsonpath "$.name" == "Alice Smith"')
        assert spec.expected == "Alice Smith"

    def test_unclosed_expected_quote_is_empty(self):
        spec = parse_assertion_line('jsonpath "$.name" == "Alice')
        assert spec.expected == ""

    def test_quote_ends_value_early(self):
        spec = parse_assertion_line('jsonpath "$.q" == "say "hi""')
        assert spec.expected == "say "

    def test_unquoted_path_is_rejected(self):
        assert parse_assertion_line("jsonpath $.id == 42") is None

    def test_unclosed_path_quote_is_rejected(self):
        assert parse_assertion_line('jsonpath "$.id == 42 x') is None

    def test_unknown_kind_is_kept(self):
        spec = parse_assertion_line('xpath "//id" == "1"')
        assert spec.kind == "xpath"
        assert not spec.is_jsonpath


class TestDuration:

    @pytest.mark.parametrize(
        "text,seconds",
        [
            ("30s", 30.0),
            ("500ms", 0.5),
            ("1m30s", 90.0),
            ("1.5h", 5400.0),
            ("0", 0.0),
            ("250us", 0.00025),
            ("-2s", -2.0),
        ],
    )
    def test_valid(self, text, seconds):
        assert parse_duration(text) == pytest.approx(seconds)

    @pytest.mark.parametrize("text", ["", "abc", "10", "5 s", "1x", "s"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_duration(text)


class TestParseEach:

    def test_collects_every_error(self):
        text = "Service: s\nMethod: m\n---\n" + MINIMAL + "---\nGRPC http://h\nMethod: m\n"
        results = DocumentParser(text).parse_each()

        assert isinstance(results[0], MissingFieldError)
        assert results[1].method == "GetUser"
        assert isinstance(results[2], MissingFieldError)

    def test_validate_document_reports_all_errors(self):
        text = "Service: s\nMethod: m\n---\nGRPC http://h\nService: s\nMethod: m\nTimeout: x\n"
        records, result = validate_document(text)

        assert records is None
        assert len(result.errors) == 2
        assert result.errors[0].path == "request 1"
        assert result.errors[0].suggestion
        assert result.errors[1].value == "x"

    def test_validate_document_success(self):
        records, result = validate_document(MINIMAL)
        assert result.is_valid
        assert len(records) == 1
