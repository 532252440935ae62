import json
import os
import tempfile

import pytest

from protoc_json.errors import ProtoIOError, ProtoNestingError, ProtoSyntaxError
from protoc_json.parser.proto_parser import parse, parse_file, parse_file_to_json, parse_to_json


def _write_temp_proto(content: str) -> str:
    fd, path = tempfile.mkstemp(suffix=".proto")
    os.write(fd, content.encode())
    os.close(fd)
    return path


ORDERS_PROTO = """\
syntax = "proto3";

package shop.orders;

import "google/protobuf/timestamp.proto";
import "shop/common.proto";

// An order placed by a customer.
message Order {
    string id = 1;
    repeated LineItem items = 2;
    optional string note = 3;
    Status status = 4;

    message LineItem {
        string sku = 1;
        int32 quantity = 2;
    }

    enum Status {
        PENDING = 0;
        SHIPPED = 1;
    }
}

enum Priority {
    LOW = 0;
    HIGH = 1;
}

service OrderService {
    rpc PlaceOrder (Order) returns (Order);
    rpc StreamOrders (stream Order) returns (stream Order);
}
"""


class TestParse:
    def test_canonical_example(self):
        doc = json.loads(parse_to_json('syntax = "proto3";\nmessage Test { string name = 1; }'))
        assert doc == {
            "syntax": "proto3",
            "package": None,
            "imports": [],
            "messages": [
                {
                    "name": "Test",
                    "fields": [
                        {"name": "name", "type_name": "string", "tag": 1, "repeated": False}
                    ],
                    "nested_messages": [],
                    "nested_enums": [],
                }
            ],
            "enums": [],
            "services": [],
        }

    def test_full_document(self):
        doc = json.loads(parse_to_json(ORDERS_PROTO))
        assert doc["package"] == "shop.orders"
        assert doc["imports"] == ["google/protobuf/timestamp.proto", "shop/common.proto"]

        order = doc["messages"][0]
        assert order["name"] == "Order"
        assert [f["name"] for f in order["fields"]] == ["id", "items", "note", "status"]
        assert [f["tag"] for f in order["fields"]] == [1, 2, 3, 4]
        assert [f["repeated"] for f in order["fields"]] == [False, True, False, False]
        assert order["nested_messages"][0]["name"] == "LineItem"
        assert order["nested_enums"][0]["values"][1] == {"name": "SHIPPED", "number": 1}

        assert doc["enums"][0]["name"] == "Priority"
        methods = doc["services"][0]["methods"]
        assert methods[1] == {
            "name": "StreamOrders",
            "input_type": "Order",
            "output_type": "Order",
        }

    def test_default_syntax(self):
        assert parse("message M {}").syntax == "proto3"

    def test_streaming_markers_stripped(self):
        method = parse("service S { rpc M (stream A) returns (stream B); }").services[0].methods[0]
        assert method.input_type == "A"
        assert method.output_type == "B"
        assert "stream" not in method.input_type + method.output_type

    def test_repeated_only_for_repeated_keyword(self):
        fields = parse(
            "message M { repeated int32 a = 1; optional int32 b = 2; "
            "required int32 c = 3; int32 d = 4; }"
        ).messages[0].fields
        assert [f.repeated for f in fields] == [True, False, False, False]

    def test_calls_are_independent(self):
        first = parse("message A { int32 x = 1; }")
        second = parse("message B { int32 y = 1; }")
        assert [m.name for m in first.messages] == ["A"]
        assert [m.name for m in second.messages] == ["B"]


class TestFormattingInvariance:
    def test_comments_and_whitespace_do_not_change_output(self):
        compact = 'syntax="proto3";message M{repeated string a=1;enum E{X=0;}}service S{rpc R(A)returns(B);}'
        spread = (
            "// header comment\n"
            "syntax = \"proto3\";  /* trailing */\n"
            "\n"
            "message M {\n"
            "\trepeated string a = 1; // tabbed\n"
            "\tenum E {\r\n"
            "\t\tX = 0;\r\n"
            "\t}\n"
            "}\n"
            "/* between\n   definitions */\n"
            "service S {\n"
            "    rpc R ( A ) returns ( B ) ;\n"
            "}\n"
        )
        assert parse_to_json(compact) == parse_to_json(spread)

    def test_qualified_names_ignore_spacing_and_comments(self):
        compact = (
            "package acme.orders.v1;"
            "message M{google.protobuf.Timestamp at=1;}"
            "service S{rpc R(stream acme.Req)returns(acme.v1.Resp);}"
        )
        spread = (
            "package acme . orders\n  .v1 ;\n"
            "message M {\n"
            "  google . /* pkg */ protobuf\n\t. Timestamp at = 1;\n"
            "}\n"
            "service S {\n"
            "  rpc R ( stream acme // request\n . Req ) returns ( acme .v1. Resp );\n"
            "}\n"
        )
        assert parse_to_json(compact) == parse_to_json(spread)
        proto = parse(spread)
        assert proto.package == "acme.orders.v1"
        assert proto.messages[0].fields[0].type_name == "google.protobuf.Timestamp"
        method = proto.services[0].methods[0]
        assert (method.input_type, method.output_type) == ("acme.Req", "acme.v1.Resp")


class TestDeepNesting:
    @staticmethod
    def _nested(depth: int) -> str:
        opening = "".join(f"message M{i} {{ " for i in range(depth))
        return opening + "int32 leaf = 1; " + "} " * depth

    def test_moderate_depth(self):
        message = parse(self._nested(50)).messages[0]
        for _ in range(49):
            message = message.nested_messages[0]
        assert message.name == "M49"
        assert message.fields[0].name == "leaf"

    def test_too_deep_reports_nesting_error(self):
        with pytest.raises(ProtoNestingError) as exc_info:
            parse(self._nested(5000))
        assert isinstance(exc_info.value.__cause__, RecursionError)


class TestMalformedInput:
    @pytest.mark.parametrize(
        "source",
        [
            "message M { int32 a = 1 }",
            'syntax = "proto3;\nmessage M {}',
            "message M { int32 a = 1;",
            "message M { int32 a = 1; }}",
            "service S { rpc M (A) returns (B) }",
        ],
        ids=["missing-semicolon", "unterminated-string", "unclosed-brace", "extra-brace", "rpc-terminator"],
    )
    def test_rejected(self, source):
        with pytest.raises(ProtoSyntaxError):
            parse(source)

    def test_error_carries_location(self):
        with pytest.raises(ProtoSyntaxError) as exc_info:
            parse('syntax = "proto3";\n\nmessage M {\n    string name 1;\n}\n')
        err = exc_info.value
        assert (err.line, err.col) == (4, 17)
        assert str(err).startswith("Line 4:17:")


class TestParseFile:
    def test_parse_file(self):
        path = _write_temp_proto(ORDERS_PROTO)
        try:
            proto = parse_file(path)
            assert proto.package == "shop.orders"
            assert json.loads(parse_file_to_json(path, pretty=False))["services"][0]["name"] == (
                "OrderService"
            )
        finally:
            os.unlink(path)

    def test_missing_file(self, tmp_path):
        missing = tmp_path / "missing.proto"
        with pytest.raises(ProtoIOError) as exc_info:
            parse_file(str(missing))
        assert exc_info.value.path == str(missing)
        assert isinstance(exc_info.value.__cause__, OSError)
