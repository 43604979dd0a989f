"""Response parsing: extraction plus schema validation in one call.

``parse_response`` never raises for producer output: every failure comes
back as a ``ParseResult`` with ``success=False`` and ``error`` set.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Sequence

from .config import JsonParserOptions, ParserConfig
from .exceptions import ParseError, ParseErrorCode
from .extraction.json_extract import extract_json
from .results import (
    ExtractionMethod,
    ParseMetadata,
    ParseResult,
    PartialRecovery,
    ValidationError,
)
from .schema.models import ArraySchema, ObjectSchema, SchemaLike, coerce_schema
from .schema.validator import validate

logger = logging.getLogger("llm-parsing")


def _classify_extraction(text: str) -> ExtractionMethod:
    """Guess the extraction method from the raw text's shape.

    Descriptive only: it looks at the input, not at which cascade step
    actually produced the value.
    """
    if "```" in text:
        return "code-block"
    stripped = text.strip()
    if stripped.startswith("{") or stripped.startswith("["):
        return "direct"
    return "lenient"


def _validation_error_code(errors: list[ValidationError]) -> ParseErrorCode:
    first = errors[0]
    if first.message.startswith("Required field missing"):
        return ParseErrorCode.MISSING_REQUIRED_FIELD
    if first.message.startswith("Expected "):
        return ParseErrorCode.INVALID_TYPE
    return ParseErrorCode.SCHEMA_MISMATCH


def parse_response(
    text: str,
    schema: SchemaLike | None = None,
    json_options: JsonParserOptions | None = None,
    apply_defaults: bool | None = None,
    transform: Callable[[Any], Any] | None = None,
    config: ParserConfig | None = None,
) -> ParseResult[Any]:
    """Parse a raw LLM response into (optionally validated) data.

    Args:
        text: Raw response string.
        schema: Optional schema model or dict literal to validate against.
        json_options: Extraction options (lenient repair, code blocks, depth).
        apply_defaults: Fill schema defaults for missing values.
        transform: Applied to the validated data; an exception here fails
            the result instead of propagating.
        config: Supplies ``json_options``, ``apply_defaults`` and the input
            size limit when those are not passed explicitly.

    A malformed ``schema`` raises SchemaDefinitionError immediately since
    that is a caller bug rather than bad producer output.
    """
    model = coerce_schema(schema) if schema is not None else None

    source = text
    if config is not None:
        source = config.clip_input(text)
        if json_options is None:
            json_options = config.json_options
        if apply_defaults is None:
            apply_defaults = config.apply_defaults
    if apply_defaults is None:
        apply_defaults = True

    try:
        extracted = extract_json(source, json_options)
    except ParseError as e:
        logger.debug("Response extraction failed (%s): %s", e.code.value, e)
        return ParseResult.fail(e, text, ParseMetadata(extraction_method="direct"))

    metadata = ParseMetadata(extraction_method=_classify_extraction(source))

    data = extracted
    if model is not None:
        validation = validate(extracted, model, apply_defaults)
        metadata.validated = True
        metadata.warnings.extend(validation.warnings)
        if not validation.valid:
            message = ", ".join(err.message for err in validation.errors)
            return ParseResult.fail(
                ParseError(
                    f"Validation failed: {message}",
                    _validation_error_code(validation.errors),
                    context=validation.errors[0].path,
                ),
                text,
                metadata,
            )
        # null passes validation when no default replaces it
        if validation.data is None:
            return ParseResult.fail(
                ParseError(
                    f"Validation failed: Expected {model.type}, got null",
                    ParseErrorCode.INVALID_TYPE,
                    context="root",
                ),
                text,
                metadata,
            )
        data = validation.data

    if transform is not None:
        try:
            data = transform(data)
        except Exception as e:
            logger.debug("Response transform failed: %s", e)
            return ParseResult.fail(e, text, metadata)

    return ParseResult.ok(data, text, metadata)


def parse_array_response(
    text: str, item_schema: SchemaLike | None = None
) -> ParseResult[list[Any]]:
    """Parse a response expected to be a JSON array."""
    schema = ArraySchema(
        items=coerce_schema(item_schema) if item_schema is not None else None
    )
    return parse_response(text, schema=schema)


def parse_object_response(
    text: str,
    properties: Mapping[str, SchemaLike] | None = None,
    required: Sequence[str] | None = None,
) -> ParseResult[dict[str, Any]]:
    """Parse a response expected to be a JSON object."""
    schema = ObjectSchema(
        properties=(
            {name: coerce_schema(prop) for name, prop in properties.items()}
            if properties is not None
            else None
        ),
        required=list(required or []),
    )
    return parse_response(text, schema=schema)


def parse_field_response(
    text: str, field_name: str, field_schema: SchemaLike | None = None
) -> ParseResult[Any]:
    """Parse an object response and return just ``field_name``'s value."""
    schema = ObjectSchema(
        properties=(
            {field_name: coerce_schema(field_schema)}
            if field_schema is not None
            else None
        ),
        required=[field_name],
    )
    result = parse_response(text, schema=schema)
    if not result.success:
        return result
    if not isinstance(result.data, dict):
        return ParseResult.fail(
            ParseError(
                f"Expected object, got {type(result.data).__name__}",
                ParseErrorCode.INVALID_TYPE,
            ),
            result.raw_input,
            result.metadata,
        )
    return ParseResult.ok(result.data.get(field_name), result.raw_input, result.metadata)


def recover_partial_array(
    text: str, item_validator: Callable[[Any], bool]
) -> PartialRecovery[Any]:
    """Keep the array items that pass ``item_validator``; count the rest.

    Never raises: extraction failures yield an empty recovery, and a
    validator that raises stops the scan with the items kept so far.
    """
    recovery: PartialRecovery[Any] = PartialRecovery()
    try:
        extracted = extract_json(text, lenient=True)
        if isinstance(extracted, list):
            for item in extracted:
                if item_validator(item):
                    recovery.recovered.append(item)
                else:
                    recovery.skipped += 1
    except Exception as e:
        logger.debug("Partial array recovery stopped: %s", e)
    return recovery


def create_type_guard(schema: SchemaLike) -> Callable[[Any], bool]:
    """Build a predicate that checks values against ``schema`` (no defaults)."""
    model = coerce_schema(schema)

    def type_guard(value: Any) -> bool:
        return validate(value, model, apply_defaults=False).valid

    return type_guard
