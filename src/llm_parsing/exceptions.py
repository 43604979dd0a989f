"""Custom exception hierarchy for llm-parsing.

All llm-parsing exceptions inherit from LLMParsingError, allowing callers
to catch broad or specific errors:

    try:
        data = extract_json(raw)
    except ParseError as e:
        print(f"No usable JSON ({e.code}): {e}")
    except LLMParsingError as e:
        print(f"llm-parsing error: {e}")
"""

from __future__ import annotations

from enum import Enum


class ParseErrorCode(str, Enum):
    EMPTY_RESPONSE = "EMPTY_RESPONSE"
    NO_JSON_FOUND = "NO_JSON_FOUND"
    INVALID_JSON = "INVALID_JSON"
    SCHEMA_MISMATCH = "SCHEMA_MISMATCH"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_TYPE = "INVALID_TYPE"
    UNEXPECTED_FORMAT = "UNEXPECTED_FORMAT"


class LLMParsingError(Exception):
    """Base exception for all llm-parsing errors."""


class ParseError(LLMParsingError):
    """Raised when a response cannot be turned into a JSON value.

    ``context`` holds a short excerpt of the offending input and
    ``position`` an optional character offset.
    """

    def __init__(
        self,
        message: str,
        code: ParseErrorCode | str,
        position: int | None = None,
        context: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = ParseErrorCode(code)
        self.position = position
        self.context = context

    def __repr__(self) -> str:
        return f"ParseError({self.message!r}, code={self.code.value})"


class SchemaDefinitionError(LLMParsingError):
    """Raised when a schema literal is malformed (unknown type or keys)."""


class ConfigError(LLMParsingError):
    """Raised when configuration is invalid or missing."""
