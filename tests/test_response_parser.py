"""Tests for the response parser and its convenience wrappers."""

import pytest

from llm_parsing.config import JsonParserOptions, ParserConfig
from llm_parsing.exceptions import ParseError, ParseErrorCode, SchemaDefinitionError
from llm_parsing.response import (
    create_type_guard,
    parse_array_response,
    parse_field_response,
    parse_object_response,
    parse_response,
    recover_partial_array,
)

PERSON = {
    "type": "object",
    "properties": {"name": {"type": "string"}, "age": {"type": "number"}},
    "required": ["name"],
}


class TestParseResponse:
    def test_parse_valid_json(self):
        result = parse_response('{"name": "Alice"}')
        assert result.success
        assert result.data == {"name": "Alice"}
        assert result.error is None
        assert result.metadata.validated is False

    def test_raw_input_preserved(self):
        raw = 'Result: {"a": 1}'
        assert parse_response(raw).raw_input == raw

    def test_extraction_failure_is_result(self):
        result = parse_response("no json here")
        assert not result.success
        assert result.data is None
        assert isinstance(result.error, ParseError)
        assert result.error.code == ParseErrorCode.NO_JSON_FOUND
        assert result.metadata.validated is False
        assert result.metadata.extraction_method == "direct"

    def test_empty_input(self):
        result = parse_response("")
        assert result.error.code == ParseErrorCode.EMPTY_RESPONSE

    def test_lenient_repair_with_schema(self):
        result = parse_response('{"name": "Alice", age: 5,}', schema=PERSON)
        assert result.success
        assert result.data == {"name": "Alice", "age": 5}
        assert result.metadata.validated is True

    def test_lenient_disabled(self):
        result = parse_response(
            '{"name": "Alice",}', json_options=JsonParserOptions(lenient=False)
        )
        assert not result.success

    def test_missing_required_field(self):
        result = parse_response('{"age": 5}', schema=PERSON)
        assert not result.success
        assert "Validation failed" in str(result.error)
        assert "Required field missing: name" in str(result.error)
        assert result.error.code == ParseErrorCode.MISSING_REQUIRED_FIELD
        assert result.metadata.validated is True

    def test_type_mismatch(self):
        result = parse_response('{"name": "A", "age": "old"}', schema=PERSON)
        assert not result.success
        assert result.error.code == ParseErrorCode.INVALID_TYPE

    def test_falsy_data_is_success(self):
        result = parse_response("0", schema={"type": "number"})
        assert result.success
        assert result.data == 0

    def test_defaults_applied(self):
        schema = {
            "type": "object",
            "properties": {"count": {"type": "number", "default": 1}},
        }
        assert parse_response("{}", schema=schema).data == {"count": 1}

    def test_warnings_reported(self):
        result = parse_response('{"name": 42}', schema=PERSON)
        assert result.success
        assert result.data == {"name": "42"}
        assert result.metadata.warnings == ["name: number coerced to string"]

    def test_transform_applied(self):
        result = parse_response("[1, 2, 3]", transform=lambda data: sum(data))
        assert result.data == 6

    def test_transform_error_is_result(self):
        def boom(data):
            raise ValueError("bad transform")

        result = parse_response('{"name": 42}', schema=PERSON, transform=boom)
        assert not result.success
        assert isinstance(result.error, ValueError)
        assert result.metadata.validated is True
        assert result.metadata.warnings == ["name: number coerced to string"]

    def test_null_without_schema_passes_through(self):
        result = parse_response("null")
        assert result.success
        assert result.data is None

    @pytest.mark.parametrize(
        "schema",
        [
            {"type": "string"},
            {"type": "object", "required": ["title"]},
            {"type": "array", "items": {"type": "string"}},
        ],
    )
    def test_null_with_schema_fails(self, schema):
        result = parse_response("null", schema=schema)
        assert not result.success
        assert result.data is None
        assert result.error.code == ParseErrorCode.INVALID_TYPE
        assert f"Expected {schema['type']}, got null" in str(result.error)
        assert result.metadata.validated is True

    def test_null_replaced_by_schema_default(self):
        result = parse_response("null", schema={"type": "string", "default": "n/a"})
        assert result.success
        assert result.data == "n/a"

    def test_config_supplies_options(self):
        config = ParserConfig(json=JsonParserOptions(lenient=False))
        assert not parse_response('{"a": 1,}', config=config).success
        assert parse_response('{"a": 1,}').success

    def test_config_apply_defaults(self):
        schema = {"type": "object", "properties": {"n": {"type": "number", "default": 1}}}
        config = ParserConfig(apply_defaults=False)
        assert parse_response("{}", schema=schema, config=config).data == {}
        assert parse_response("{}", schema=schema).data == {"n": 1}

    def test_explicit_arguments_override_config(self):
        schema = {"type": "object", "properties": {"n": {"type": "number", "default": 1}}}
        config = ParserConfig(apply_defaults=False)
        result = parse_response("{}", schema=schema, apply_defaults=True, config=config)
        assert result.data == {"n": 1}

    def test_config_clips_input(self):
        raw = '[1, 2, 3] trailing text'
        result = parse_response(raw, config=ParserConfig(max_input_chars=9))
        assert result.data == [1, 2, 3]
        assert result.raw_input == raw

    def test_invalid_schema_raises(self):
        with pytest.raises(SchemaDefinitionError):
            parse_response("{}", schema={"type": "widget"})


class TestExtractionMethod:
    def test_direct(self):
        assert parse_response('{"a": 1}').metadata.extraction_method == "direct"

    def test_code_block(self):
        result = parse_response('```json\n{"a": 1}\n```')
        assert result.metadata.extraction_method == "code-block"

    def test_lenient(self):
        result = parse_response('Here: {"a": 1}')
        assert result.metadata.extraction_method == "lenient"


class TestConvenienceParsers:
    def test_array_response(self):
        result = parse_array_response('["a", "b"]', {"type": "string"})
        assert result.data == ["a", "b"]

    def test_array_response_validates_items(self):
        result = parse_array_response('[{"x": 1}]', {"type": "object", "required": ["id"]})
        assert not result.success

    def test_array_response_rejects_object(self):
        assert not parse_array_response('{"a": 1}').success

    def test_object_response(self):
        result = parse_object_response(
            '{"title": "Hi"}', {"title": {"type": "string"}}, ["title"]
        )
        assert result.data == {"title": "Hi"}

    def test_object_response_missing_required(self):
        assert not parse_object_response("{}", required=["title"]).success

    def test_field_response(self):
        result = parse_field_response('{"title": "Hi", "x": 1}', "title", {"type": "string"})
        assert result.success
        assert result.data == "Hi"

    def test_field_response_failure_passes_through(self):
        result = parse_field_response('{"x": 1}', "title")
        assert not result.success
        assert "title" in str(result.error)

    def test_field_response_null_body(self):
        result = parse_field_response("null", "title")
        assert not result.success
        assert result.error.code == ParseErrorCode.INVALID_TYPE

    def test_object_response_null_body(self):
        result = parse_object_response("null", required=["title"])
        assert not result.success
        assert result.data is None

    def test_array_response_null_body(self):
        assert not parse_array_response("null").success


class TestRecoverPartialArray:
    def test_recovers_valid_items(self):
        text = '[{"id": "1"}, {"bad": true}, {"id": "2"}]'
        recovery = recover_partial_array(text, lambda item: "id" in item)
        assert recovery.recovered == [{"id": "1"}, {"id": "2"}]
        assert recovery.skipped == 1

    def test_invalid_input(self):
        recovery = recover_partial_array("nothing useful", lambda item: True)
        assert recovery.recovered == []
        assert recovery.skipped == 0

    def test_non_array_json(self):
        recovery = recover_partial_array('{"id": "1"}', lambda item: True)
        assert recovery.recovered == []

    def test_raising_validator_keeps_items_so_far(self):
        text = '[{"id": "1"}, 1, {"id": "2"}]'
        recovery = recover_partial_array(text, lambda item: "id" in item)
        assert recovery.recovered == [{"id": "1"}]
        assert recovery.skipped == 0

    def test_raising_validator_on_first_item(self):
        recovery = recover_partial_array('[1, {"id": "1"}]', lambda item: "id" in item)
        assert recovery.recovered == []
        assert recovery.skipped == 0


class TestCreateTypeGuard:
    def test_type_guard(self):
        guard = create_type_guard(PERSON)
        assert guard({"name": "Alice"})
        assert not guard({"age": 3})
        assert not guard("Alice")

    def test_type_guard_ignores_defaults(self):
        schema = {
            "type": "object",
            "properties": {"name": {"type": "string", "default": "x"}},
            "required": ["name"],
        }
        assert not create_type_guard(schema)({})
