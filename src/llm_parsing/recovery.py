"""Recovery strategies for responses that fail primary parsing.

Strategies run in order, cheapest and most trustworthy first. A strategy
that raises is treated as a failed attempt; the chain keeps going because
its job is to get *some* usable data out of the response.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Sequence, TypeVar

from .config import JsonParserOptions
from .response import parse_response, recover_partial_array
from .results import RecoveryResult
from .schema.models import SchemaLike, coerce_schema

logger = logging.getLogger("llm-parsing")

T = TypeVar("T")


@dataclass(frozen=True)
class RecoveryStrategy(Generic[T]):
    """A named attempt that returns recovered items or None."""

    name: str
    attempt: Callable[[str], list[T] | None]


def apply_recovery_strategies(
    raw_response: str, strategies: Sequence[RecoveryStrategy[T]]
) -> RecoveryResult[T]:
    """Run ``strategies`` in order; the first non-empty result wins.

    ``attempted_strategies`` is the 1-based position of the winner, or the
    number of strategies when none produced data.
    """
    for position, strategy in enumerate(strategies, start=1):
        try:
            result = strategy.attempt(raw_response)
        except Exception as e:
            logger.debug("Recovery strategy %s raised: %s", strategy.name, e)
            continue
        if result:
            logger.info(
                "Recovered %d items using strategy %s", len(result), strategy.name
            )
            return RecoveryResult(
                data=list(result),
                used_strategy=strategy.name,
                attempted_strategies=position,
            )
        logger.debug("Recovery strategy %s found nothing", strategy.name)

    logger.warning("All %d recovery strategies failed", len(strategies))
    return RecoveryResult(
        data=None, used_strategy=None, attempted_strategies=len(strategies)
    )


def lenient_parse_strategy(schema: SchemaLike) -> RecoveryStrategy[Any]:
    """Lenient JSON parse plus schema validation."""
    model = coerce_schema(schema)

    def attempt(raw_response: str) -> list[Any] | None:
        result = parse_response(
            raw_response,
            schema=model,
            apply_defaults=True,
            json_options=JsonParserOptions(lenient=True),
        )
        if result.success and isinstance(result.data, list):
            return result.data
        return None

    return RecoveryStrategy(name="lenient-parse", attempt=attempt)


def partial_array_strategy(
    type_guard: Callable[[Any], bool],
) -> RecoveryStrategy[Any]:
    """Salvage the items of a malformed array that pass ``type_guard``."""

    def attempt(raw_response: str) -> list[Any] | None:
        recovery = recover_partial_array(raw_response, type_guard)
        return recovery.recovered or None

    return RecoveryStrategy(name="partial-array", attempt=attempt)


def json_substring_strategy() -> RecoveryStrategy[Any]:
    """Parse the span from the first ``[`` to the last ``]`` as-is (no repair)."""

    def attempt(raw_response: str) -> list[Any] | None:
        first = raw_response.find("[")
        last = raw_response.rfind("]")
        if first == -1 or last <= first:
            return None
        try:
            parsed = json.loads(raw_response[first : last + 1])
        except (ValueError, RecursionError):
            return None
        if isinstance(parsed, list) and parsed:
            return parsed
        return None

    return RecoveryStrategy(name="json-substring", attempt=attempt)


def create_standard_strategies(
    schema: SchemaLike, type_guard: Callable[[Any], bool]
) -> list[RecoveryStrategy[Any]]:
    """The default chain: lenient-parse, partial-array, json-substring."""
    return [
        lenient_parse_strategy(schema),
        partial_array_strategy(type_guard),
        json_substring_strategy(),
    ]
