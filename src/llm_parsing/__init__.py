"""LLM Parsing — structured data from unreliable LLM output."""

__version__ = "1.1.0"

from .config import JsonParserOptions, ParserConfig, TextParseOptions, load_config
from .exceptions import (
    ConfigError,
    LLMParsingError,
    ParseError,
    ParseErrorCode,
    SchemaDefinitionError,
)
from .extraction import extract_array_items, extract_json
from .recovery import (
    RecoveryStrategy,
    apply_recovery_strategies,
    create_standard_strategies,
)
from .response import (
    create_type_guard,
    parse_array_response,
    parse_field_response,
    parse_object_response,
    parse_response,
    recover_partial_array,
)
from .results import (
    ParseMetadata,
    ParseResult,
    RecoveryResult,
    TextParseResult,
    ValidationError,
    ValidationResult,
)
from .schema import validate
from .text import parse_text_response

__all__ = [
    "__version__",
    "LLMParsingError",
    "ParseError",
    "ParseErrorCode",
    "SchemaDefinitionError",
    "ConfigError",
    "JsonParserOptions",
    "TextParseOptions",
    "ParserConfig",
    "load_config",
    "extract_json",
    "extract_array_items",
    "validate",
    "parse_response",
    "parse_array_response",
    "parse_object_response",
    "parse_field_response",
    "recover_partial_array",
    "create_type_guard",
    "RecoveryStrategy",
    "apply_recovery_strategies",
    "create_standard_strategies",
    "parse_text_response",
    "ParseMetadata",
    "ParseResult",
    "RecoveryResult",
    "TextParseResult",
    "ValidationError",
    "ValidationResult",
]
