"""Schema validation with lenient coercion.

Producer output typing is unreliable, so the validator converts values that
loosely match (``"42"`` for a number, ``[1, 2]`` for a list of strings)
instead of rejecting them. Every conversion is reported as a warning.
"""

from __future__ import annotations

import copy
import json
import math
import re
from typing import Any

from ..results import ValidationError, ValidationResult
from .models import (
    ArraySchema,
    NumberSchema,
    ObjectSchema,
    SchemaLike,
    SimpleSchema,
    StringSchema,
    coerce_schema,
)

_NUMERIC_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")


def validate(
    data: Any, schema: SchemaLike, apply_defaults: bool = True
) -> ValidationResult[Any]:
    """Validate ``data`` against ``schema``, coercing where reasonable.

    Never raises for any JSON-compatible ``data``. ``result.data`` holds the
    coerced value (with defaults filled in) only when ``result.valid``.

    Example::

        schema = {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "age": {"type": "number", "default": 0},
            },
            "required": ["name"],
        }
        validate({"name": "Alice"}, schema).data
        # {"name": "Alice", "age": 0}
    """
    model = coerce_schema(schema)
    errors: list[ValidationError] = []
    warnings: list[str] = []

    validated = _validate_node(data, model, "", errors, warnings, apply_defaults)

    valid = not errors
    return ValidationResult(
        valid=valid,
        data=validated if valid else None,
        errors=errors,
        warnings=warnings,
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _type_name(value: Any) -> str:
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, bool):
        return "boolean"
    if _is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if value is None:
        return "null"
    return type(value).__name__


def _parse_number(value: Any) -> int | float | None:
    """Number for numeric input or numeric strings, else None."""
    if _is_number(value):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not _NUMERIC_RE.match(text):
        return None
    if any(c in text for c in ".eE"):
        return float(text)
    return int(text)


def _format_number(value: int | float) -> str:
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if _is_number(value):
        return _format_number(value)
    return json.dumps(value)


def _enum_contains(options: list[Any], value: Any) -> bool:
    # 1 == True in Python; keep booleans and numbers apart
    return any(
        option == value and isinstance(option, bool) == isinstance(value, bool)
        for option in options
    )


def _child_path(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _validate_node(
    data: Any,
    schema: SimpleSchema,
    path: str,
    errors: list[ValidationError],
    warnings: list[str],
    apply_defaults: bool,
) -> Any:
    label = path or "root"

    if data is None:
        if schema.has_default and apply_defaults:
            return copy.deepcopy(schema.default)
        # Required check at the parent level reports missing values
        return None

    if (
        isinstance(schema, ArraySchema)
        and not isinstance(data, list)
        and schema.allow_single_value_as_array
    ):
        warnings.append(f"{label}: single value coerced to array")
        data = [data]

    actual = _type_name(data)

    if actual == "array" and schema.type in ("string", "number") and data:
        if schema.type == "string":
            warnings.append(f"{label}: array coerced to string")
            data = " ".join(_stringify(item) for item in data)
            actual = "string"
        else:
            number = _parse_number(data[0])
            if number is not None:
                warnings.append(f"{label}: array coerced to number from first element")
                data = number
                actual = "number"

    if actual != schema.type:
        number = _parse_number(data) if actual == "string" else None
        if schema.type == "string" and actual == "number":
            warnings.append(f"{label}: number coerced to string")
            data = _format_number(data)
        elif schema.type == "number" and number is not None:
            warnings.append(f"{label}: string coerced to number")
            data = number
        else:
            errors.append(
                ValidationError(
                    path=label,
                    message=f"Expected {schema.type}, got {actual}",
                    expected=schema.type,
                    actual=data,
                )
            )
            return data

    options = getattr(schema, "enum", None)
    if options and not _enum_contains(options, data):
        errors.append(
            ValidationError(
                path=label,
                message=f"Value must be one of: {', '.join(_stringify(o) for o in options)}",
                expected=" | ".join(_stringify(o) for o in options),
                actual=data,
            )
        )

    if isinstance(schema, ObjectSchema):
        return _validate_object(data, schema, path, errors, warnings, apply_defaults)
    if isinstance(schema, ArraySchema):
        return _validate_array(data, schema, path, errors, warnings, apply_defaults)
    if isinstance(schema, StringSchema):
        _check_string(data, schema, label, errors)
    elif isinstance(schema, NumberSchema):
        _check_number(data, schema, label, errors)
    return data


def _validate_object(
    data: dict[str, Any],
    schema: ObjectSchema,
    path: str,
    errors: list[ValidationError],
    warnings: list[str],
    apply_defaults: bool,
) -> dict[str, Any]:
    properties = schema.properties or {}
    # Undeclared keys pass through untouched
    result = dict(data)

    for name in schema.required:
        if data.get(name) is not None:
            continue
        prop = properties.get(name)
        if prop is not None and prop.has_default and apply_defaults:
            result[name] = copy.deepcopy(prop.default)
        else:
            errors.append(
                ValidationError(
                    path=_child_path(path, name),
                    message=f"Required field missing: {name}",
                    expected="value",
                    actual=None,
                )
            )

    for key, prop in properties.items():
        if key in data:
            result[key] = _validate_node(
                data[key],
                prop,
                _child_path(path, key),
                errors,
                warnings,
                apply_defaults,
            )
        elif prop.has_default and apply_defaults:
            result[key] = copy.deepcopy(prop.default)

    return result


def _validate_array(
    data: list[Any],
    schema: ArraySchema,
    path: str,
    errors: list[ValidationError],
    warnings: list[str],
    apply_defaults: bool,
) -> list[Any]:
    item_schema = schema.items
    if item_schema is None:
        return data

    result = []
    for index, item in enumerate(data):
        item_path = f"{path}[{index}]"
        if (
            schema.allow_numeric_to_string_array
            and item_schema.type == "string"
            and _is_number(item)
        ):
            warnings.append(f"{item_path}: number coerced to string in array")
            item = _format_number(item)
        result.append(
            _validate_node(item, item_schema, item_path, errors, warnings, apply_defaults)
        )
    return result


def _check_string(
    data: str, schema: StringSchema, label: str, errors: list[ValidationError]
) -> None:
    if schema.min_length is not None and len(data) < schema.min_length:
        errors.append(
            ValidationError(
                path=label,
                message=f"String too short (min: {schema.min_length})",
                expected=f"length >= {schema.min_length}",
                actual=len(data),
            )
        )
    if schema.max_length is not None and len(data) > schema.max_length:
        errors.append(
            ValidationError(
                path=label,
                message=f"String too long (max: {schema.max_length})",
                expected=f"length <= {schema.max_length}",
                actual=len(data),
            )
        )


def _check_number(
    data: int | float, schema: NumberSchema, label: str, errors: list[ValidationError]
) -> None:
    if schema.minimum is not None and data < schema.minimum:
        errors.append(
            ValidationError(
                path=label,
                message=f"Number too small (min: {schema.minimum})",
                expected=f">= {schema.minimum}",
                actual=data,
            )
        )
    if schema.maximum is not None and data > schema.maximum:
        errors.append(
            ValidationError(
                path=label,
                message=f"Number too large (max: {schema.maximum})",
                expected=f"<= {schema.maximum}",
                actual=data,
            )
        )
