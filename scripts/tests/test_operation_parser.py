"""Tests for operation_parser.py - the escape-aware operation micro-language."""

import pytest

from manip.errors import MalformedOperationError
from manip.models import Operation
from manip.operation_parser import (
    escape_field,
    format_operation,
    format_operations,
    parse_operations,
    split_records,
)


class TestParseOperations:
    def test_single_operation(self):
        ops = parse_operations("package.json:$.version:1.0.1")
        assert ops == [Operation("package.json", "$.version", "1.0.1")]

    def test_records_in_declaration_order(self):
        ops = parse_operations("a.json:$.x:1,b.json:$.y:2,a.json:$.z:3")
        assert [op.target for op in ops] == ["a.json", "b.json", "a.json"]
        assert [op.value for op in ops] == ["1", "2", "3"]

    @pytest.mark.parametrize("count", [1, 2, 5, 12])
    def test_n_records_give_n_operations(self, count):
        text = ",".join(f"f{i}.json:$.k{i}:v{i}" for i in range(count))
        ops = parse_operations(text)
        assert len(ops) == count
        assert [op.path for op in ops] == [f"$.k{i}" for i in range(count)]

    def test_none_and_empty_yield_nothing(self):
        assert parse_operations(None) == []
        assert parse_operations("") == []

    def test_two_fields_has_no_value(self):
        ops = parse_operations("package.json:$.scripts.test")
        assert ops == [Operation("package.json", "$.scripts.test", None)]

    def test_empty_third_field_is_empty_string(self):
        ops = parse_operations("package.json:$.description:")
        assert ops[0].value == ""

    def test_whitespace_preserved(self):
        ops = parse_operations(" a.json : $.x : some value ")
        assert ops[0] == Operation(" a.json ", " $.x ", " some value ")

    def test_escaped_delimiters_in_all_fields(self):
        text = (
            r"amg-plugin-registry.json:$xpath-with\:and\,:replace with space and "
            r"\,\:controlling\:access_to_resources_outside_of_an_originating_domain\,and_to_this_domain."
        )
        ops = parse_operations(text)
        assert len(ops) == 1
        assert ops[0].target == "amg-plugin-registry.json"
        assert ops[0].path == "$xpath-with:and,"
        assert ops[0].value == (
            "replace with space and ,:controlling:access_to_resources_outside_"
            "of_an_originating_domain,and_to_this_domain."
        )

    def test_escaped_backslash(self):
        ops = parse_operations(r"a.json:$.path:C\\temp\\dir")
        assert ops[0].value == r"C\temp\dir"

    def test_escaped_backslash_before_delimiter(self):
        # \\ is a literal backslash, the following ':' is a real delimiter
        ops = parse_operations(r"a.json:$.x\\:tail")
        assert ops[0].path == "$.x\\"
        assert ops[0].value == "tail"

    def test_escape_of_ordinary_character_keeps_character(self):
        ops = parse_operations(r"a.json:$.x:\a\b")
        assert ops[0].value == "ab"

    def test_many_escaped_delimiters(self):
        value = r"\:" * 10 + r"\," * 10
        ops = parse_operations(f"a.json:$.x:{value}")
        assert ops[0].value == ":" * 10 + "," * 10


class TestMalformedOperations:
    def test_single_field_rejected(self):
        with pytest.raises(MalformedOperationError) as excinfo:
            parse_operations("just-a-file.json")
        assert excinfo.value.record == "just-a-file.json"

    def test_too_many_fields_rejected(self):
        with pytest.raises(MalformedOperationError) as excinfo:
            parse_operations("a.json:$.x:CORS:controlling")
        assert excinfo.value.record == "a.json:$.x:CORS:controlling"

    def test_trailing_record_delimiter_rejected(self):
        with pytest.raises(MalformedOperationError) as excinfo:
            parse_operations("a.json:$.x:1,")
        assert excinfo.value.record == ""

    def test_error_names_offending_record(self):
        with pytest.raises(MalformedOperationError) as excinfo:
            parse_operations("a.json:$.x:1,broken,b.json:$.y:2")
        assert excinfo.value.record == "broken"
        assert "broken" in str(excinfo.value)

    def test_dangling_escape_rejected(self):
        with pytest.raises(MalformedOperationError) as excinfo:
            parse_operations("a.json:$.x:1,b.json:$.y:oops\\")
        assert excinfo.value.record == "b.json:$.y:oops\\"

    def test_empty_target_rejected(self):
        with pytest.raises(MalformedOperationError):
            parse_operations(":$.x:1")

    def test_empty_path_rejected(self):
        with pytest.raises(MalformedOperationError):
            parse_operations("a.json::1")


class TestSplitRecords:
    def test_raw_record_keeps_escapes(self):
        records = split_records(r"a:b\,c:d,e:f")
        assert records == [(r"a:b\,c:d", ["a", "b,c", "d"]), ("e:f", ["e", "f"])]


class TestEscaping:
    def test_escape_field(self):
        assert escape_field("a:b,c\\d") == r"a\:b\,c\\d"

    @pytest.mark.parametrize("literal", ["a:b", "x,y", "back\\slash", "plain", ":,\\", ""])
    def test_escape_then_parse_is_identity(self, literal):
        op = Operation("t.json", "$.p", literal)
        assert parse_operations(format_operation(op)) == [op]

    def test_format_operations_omits_missing_value(self):
        ops = [Operation("a.json", "$.x", "1"), Operation("b.json", "$.y")]
        assert format_operations(ops) == "a.json:$.x:1,b.json:$.y"
        assert parse_operations(format_operations(ops)) == ops
