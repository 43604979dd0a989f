"""Response schemas — tagged-union models and the coercing validator."""

from .models import (
    ArraySchema,
    BooleanSchema,
    NumberSchema,
    ObjectSchema,
    SchemaLike,
    SimpleSchema,
    StringSchema,
    coerce_schema,
)
from .validator import validate

__all__ = [
    "ArraySchema",
    "BooleanSchema",
    "NumberSchema",
    "ObjectSchema",
    "SchemaLike",
    "SimpleSchema",
    "StringSchema",
    "coerce_schema",
    "validate",
]
