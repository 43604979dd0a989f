"""Result envelopes returned by the parsing pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Literal, TypeVar

T = TypeVar("T")

ExtractionMethod = Literal["direct", "json-block", "code-block", "lenient"]


@dataclass
class ParseMetadata:
    extraction_method: ExtractionMethod = "direct"
    validated: bool = False
    warnings: list[str] = field(default_factory=list)


@dataclass
class ParseResult(Generic[T]):
    """Outcome of parsing one raw response.

    ``success`` is True exactly when ``error`` is None. Build instances with
    ``ok()`` / ``fail()`` so the two never disagree.
    """

    success: bool
    raw_input: str
    data: T | None = None
    error: Exception | None = None
    metadata: ParseMetadata = field(default_factory=ParseMetadata)

    @classmethod
    def ok(
        cls, data: T, raw_input: str, metadata: ParseMetadata | None = None
    ) -> ParseResult[T]:
        return cls(
            success=True,
            raw_input=raw_input,
            data=data,
            metadata=metadata or ParseMetadata(),
        )

    @classmethod
    def fail(
        cls,
        error: Exception,
        raw_input: str,
        metadata: ParseMetadata | None = None,
    ) -> ParseResult[T]:
        return cls(
            success=False,
            raw_input=raw_input,
            error=error,
            metadata=metadata or ParseMetadata(),
        )


@dataclass
class ValidationError:
    """A single schema violation. ``path`` looks like ``items[0].name``."""

    path: str
    message: str
    expected: str | None = None
    actual: Any = None


@dataclass
class ValidationResult(Generic[T]):
    valid: bool
    data: T | None = None
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class PartialRecovery(Generic[T]):
    recovered: list[T] = field(default_factory=list)
    skipped: int = 0


@dataclass
class RecoveryResult(Generic[T]):
    data: list[T] | None
    used_strategy: str | None
    attempted_strategies: int


@dataclass
class TextParseResult:
    text: str
    was_error: bool = False
    used_fallback: bool = False
    warnings: list[str] = field(default_factory=list)
