"""Robust JSON extraction from LLM responses.

Every structured response goes through the same 4-stage fallback:
  1. Direct JSON parse of the trimmed text
  2. Markdown code fences (```json ... ``` or plain ``` ... ```)
  3. Bracket-matched substring starting at the first { or [
  4. Lenient repair (trailing commas, unclosed brackets, quotes, bare keys)
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from ..config import JsonParserOptions
from ..exceptions import ParseError, ParseErrorCode

logger = logging.getLogger("llm-parsing")

_MISSING = object()

_JSON_BLOCK_RE = re.compile(r"```(?:[jJ][sS][oO][nN])?\s*\n?([\s\S]*?)\n?```")
_TAGGED_BLOCK_RE = re.compile(r"```[\w+-]*[ \t]*\n([\s\S]*?)\n?```")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
# Matches inside string values too ("note": "a, b: c"); callers accept
# that risk in exchange for repairing {name: "x"} style output.
_UNQUOTED_KEY_RE = re.compile(r"([{,]\s*)(\w+)(\s*:)", re.ASCII)

_CONTEXT_CHARS = 100


def _try_parse(text: str) -> Any:
    """json.loads that returns _MISSING instead of raising."""
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return _MISSING


def extract_json(
    text: str,
    options: JsonParserOptions | None = None,
    *,
    lenient: bool | None = None,
    extract_from_code_blocks: bool | None = None,
    max_depth: int | None = None,
) -> Any:
    """Extract a JSON value from an LLM response string.

    Handles:
    - Plain JSON (objects, arrays and scalars)
    - Markdown code fences (```json ... ```)
    - Leading/trailing prose around JSON
    - Trailing commas, truncated output, single quotes, unquoted keys
      (only when ``lenient`` is on)

    Keyword arguments override the matching fields of ``options``.

    Raises ParseError (EMPTY_RESPONSE or NO_JSON_FOUND) when nothing works.
    """
    opts = options or JsonParserOptions()
    if lenient is None:
        lenient = opts.lenient
    if extract_from_code_blocks is None:
        extract_from_code_blocks = opts.extract_from_code_blocks
    if max_depth is None:
        max_depth = opts.max_depth

    if not text or not text.strip():
        raise ParseError("Empty response", ParseErrorCode.EMPTY_RESPONSE)

    text = text.strip()

    # Strategy 1: Direct parse
    result = _try_parse(text)
    if result is not _MISSING:
        return result

    # Strategy 2: Markdown code fences
    if extract_from_code_blocks:
        result = _parse_code_block(text)
        if result is not _MISSING:
            logger.debug("JSON extracted from code block")
            return result

    # Strategy 3: Bracket-matched substring (handles leading/trailing noise)
    result = _find_json_in_text(text, max_depth)
    if result is not _MISSING:
        logger.debug("JSON extracted from surrounding text")
        return result

    # Strategy 4: Heuristic repair
    if lenient:
        result = _lenient_parse(text)
        if result is not _MISSING:
            logger.debug("JSON extracted after lenient repair")
            return result

    raise ParseError(
        "No valid JSON found in response",
        ParseErrorCode.NO_JSON_FOUND,
        context=text[:_CONTEXT_CHARS],
    )


def _code_block_bodies(text: str) -> list[str]:
    bodies = []
    for pattern in (_JSON_BLOCK_RE, _TAGGED_BLOCK_RE):
        for match in pattern.finditer(text):
            body = match.group(1).strip()
            if body and body not in bodies:
                bodies.append(body)
    return bodies


def _parse_code_block(text: str) -> Any:
    if "```" not in text:
        return _MISSING
    for body in _code_block_bodies(text):
        result = _try_parse(body)
        if result is not _MISSING:
            return result
    return _MISSING


def _first_opener(text: str) -> int:
    """Index of the first { or [, whichever comes earlier (-1 if none)."""
    starts = [i for i in (text.find("{"), text.find("[")) if i >= 0]
    return min(starts) if starts else -1


def find_matching_bracket(
    text: str, start: int, open_char: str, close_char: str, max_depth: int = 10
) -> int:
    """Return the index of the bracket closing the one at ``start``.

    Brackets inside string literals are ignored. Returns -1 when the
    input ends first or nesting exceeds ``max_depth``.
    """
    depth = 0
    in_string = False
    escape_next = False

    for i in range(start, len(text)):
        char = text[i]
        if in_string:
            if escape_next:
                escape_next = False
            elif char == "\\":
                escape_next = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == open_char:
            depth += 1
            if depth > max_depth:
                return -1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return i

    return -1


def _find_json_in_text(text: str, max_depth: int) -> Any:
    start = _first_opener(text)
    if start < 0:
        return _MISSING

    open_char = text[start]
    close_char = "}" if open_char == "{" else "]"
    end = find_matching_bracket(text, start, open_char, close_char, max_depth)
    if end < 0:
        return _MISSING

    return _try_parse(text[start : end + 1])


def _close_open_brackets(text: str) -> str:
    """Append the closers for every bracket still open at end of input."""
    stack: list[str] = []
    in_string = False
    escape_next = False

    for char in text:
        if in_string:
            if escape_next:
                escape_next = False
            elif char == "\\":
                escape_next = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            stack.append("}")
        elif char == "[":
            stack.append("]")
        elif char in "}]" and stack and stack[-1] == char:
            stack.pop()

    return text + "".join(reversed(stack))


def repair_json(text: str) -> str:
    """Apply the lenient text repairs without parsing the result."""
    fixed = text.rstrip()

    # Single quotes are only swapped when the text has no double quotes at all
    if '"' not in fixed and "'" in fixed:
        fixed = fixed.replace("'", '"')

    fixed = _close_open_brackets(fixed)
    fixed = _TRAILING_COMMA_RE.sub(r"\1", fixed)
    fixed = _UNQUOTED_KEY_RE.sub(r'\1"\2"\3', fixed)
    return fixed


def _lenient_candidates(text: str) -> list[str]:
    candidates = [text]
    candidates.extend(_code_block_bodies(text))

    start = _first_opener(text)
    if start > 0:
        tail = text[start:]
        candidates.append(tail)
        last_close = max(tail.rfind("}"), tail.rfind("]"))
        if last_close >= 0:
            candidates.append(tail[: last_close + 1])

    unique = []
    for candidate in candidates:
        if candidate not in unique:
            unique.append(candidate)
    return unique


def _lenient_parse(text: str) -> Any:
    for candidate in _lenient_candidates(text):
        result = _try_parse(repair_json(candidate))
        if result is not _MISSING:
            return result
    return _MISSING


def _skip_whitespace(text: str, i: int) -> int:
    while i < len(text) and text[i].isspace():
        i += 1
    return i


def _string_end(text: str, start: int) -> int:
    """Index of the quote closing the string literal opened at ``start``."""
    escaped = False
    for j in range(start + 1, len(text)):
        c = text[j]
        if escaped:
            escaped = False
        elif c == "\\":
            escaped = True
        elif c == '"':
            return j
    return -1


def extract_array_items(text: str, max_depth: int = 10) -> list[Any] | None:
    """Parse complete top-level items from the first JSON array in ``text``.

    Stops at the first truncated or malformed item and returns what was
    parsed before it. Returns None (not []) if the text has no ``[`` at all.
    """
    first_bracket = text.find("[")
    if first_bracket == -1:
        return None

    items: list[Any] = []
    i = first_bracket + 1
    n = len(text)

    while True:
        i = _skip_whitespace(text, i)
        if i >= n or text[i] == "]":
            break

        ch = text[i]
        if ch in "{[":
            end = find_matching_bracket(
                text, i, ch, "}" if ch == "{" else "]", max_depth
            )
            if end < 0:
                break  # truncated item
            next_i = end + 1
        elif ch == '"':
            end = _string_end(text, i)
            if end < 0:
                break
            next_i = end + 1
        else:
            # number / true / false / null run until the next separator
            j = i
            while j < n and text[j] not in ",]":
                j += 1
            if j >= n:
                break  # no separator: the literal may be cut short
            next_i = j

        item = _try_parse(text[i:next_i].strip())
        if item is _MISSING:
            break
        items.append(item)

        i = _skip_whitespace(text, next_i)
        if i < n and text[i] == ",":
            i += 1
        elif i < n and text[i] != "]":
            break  # garbage between items

    return items


def is_object(value: Any) -> bool:
    """True for JSON objects (dicts), false for arrays, None and scalars."""
    return isinstance(value, dict)


def is_array(value: Any) -> bool:
    return isinstance(value, list)


def get_property(obj: Any, key: str, default: Any) -> Any:
    """Read ``obj[key]``, falling back to ``default`` for non-dicts and missing/None values."""
    if not isinstance(obj, dict):
        return default
    value = obj.get(key)
    if value is None:
        return default
    return value
