"""Pydantic models for response schemas.

A schema is one of five variants discriminated on ``type``. Callers usually
write them as dict literals with camelCase keys::

    {
        "type": "array",
        "items": {"type": "string"},
        "allowNumericToStringArray": True,
    }

``coerce_schema`` turns such a literal into the matching model. Unknown keys
and keys that don't belong to the variant (``minLength`` on a number) are
rejected.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import SchemaDefinitionError

EnumValue = Union[str, int, float, bool]


class _SchemaBase(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    default: Any = None

    @property
    def has_default(self) -> bool:
        """True when ``default`` was given explicitly (``None`` included)."""
        return "default" in self.model_fields_set


class StringSchema(_SchemaBase):
    type: Literal["string"] = "string"
    enum: list[EnumValue] | None = None
    min_length: int | None = Field(default=None, alias="minLength")
    max_length: int | None = Field(default=None, alias="maxLength")


class NumberSchema(_SchemaBase):
    type: Literal["number"] = "number"
    enum: list[EnumValue] | None = None
    minimum: int | float | None = None
    maximum: int | float | None = None


class BooleanSchema(_SchemaBase):
    type: Literal["boolean"] = "boolean"
    enum: list[EnumValue] | None = None


class ArraySchema(_SchemaBase):
    type: Literal["array"] = "array"
    items: SimpleSchema | None = None
    # Accept [1, 2] where items are strings, coercing each number
    allow_numeric_to_string_array: bool = Field(
        default=False, alias="allowNumericToStringArray"
    )
    # Accept "x" and treat it as ["x"]
    allow_single_value_as_array: bool = Field(
        default=False, alias="allowSingleValueAsArray"
    )


class ObjectSchema(_SchemaBase):
    type: Literal["object"] = "object"
    properties: dict[str, SimpleSchema] | None = None
    required: list[str] = Field(default_factory=list)


SimpleSchema = Annotated[
    Union[ObjectSchema, ArraySchema, StringSchema, NumberSchema, BooleanSchema],
    Field(discriminator="type"),
]

ArraySchema.model_rebuild()
ObjectSchema.model_rebuild()

SchemaLike = Union[
    ObjectSchema, ArraySchema, StringSchema, NumberSchema, BooleanSchema, dict
]

_schema_adapter: TypeAdapter = TypeAdapter(SimpleSchema)


def coerce_schema(schema: SchemaLike) -> SimpleSchema:
    """Return ``schema`` as a model, building it from a dict literal if needed.

    Raises SchemaDefinitionError for malformed literals.
    """
    if isinstance(schema, _SchemaBase):
        return schema
    try:
        return _schema_adapter.validate_python(schema)
    except PydanticValidationError as e:
        raise SchemaDefinitionError(f"Invalid schema: {e}") from e
