"""Plain-text response cleanup.

For prompts that ask for prose rather than JSON (rewrites, titles,
summaries). Strips the usual wrapping artifacts and flags refusals so the
caller can fall back to the original text.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from .config import DEFAULT_ERROR_PATTERNS, ParserConfig, TextParseOptions
from .results import TextParseResult

logger = logging.getLogger("llm-parsing")

_QUOTE_PAIRS = (
    ('"', '"'),
    ("'", "'"),
    ("“", "”"),
    ("‘", "’"),
)

_PARAGRAPH_BREAK_RE = re.compile(r"\n[ \t]*\n")

_PREAMBLE_PATTERNS = (
    re.compile(
        r"^here is the (?:revised|corrected|fixed|updated) (?:text|version|transcript)[:\s]*",
        re.IGNORECASE,
    ),
    re.compile(
        r"^(?:revised|corrected|fixed|updated) (?:text|version|transcript)[:\s]*",
        re.IGNORECASE,
    ),
    re.compile(r"^the (?:revised|corrected|fixed) (?:text|version) is[:\s]*", re.IGNORECASE),
    re.compile(
        r"^here(?:'s| is) (?:the|your) (?:revised|corrected) (?:text|version)[:\s]*",
        re.IGNORECASE,
    ),
)


def parse_text_response(
    response: str,
    original_text: str | None = None,
    options: TextParseOptions | None = None,
    *,
    remove_quotes: bool | None = None,
    remove_code_blocks: bool | None = None,
    detect_errors: bool | None = None,
    error_patterns: Iterable[str] | None = None,
    config: ParserConfig | None = None,
) -> TextParseResult:
    """Clean a prose response and detect refusal-style output.

    When the response looks like a refusal and ``original_text`` is given,
    the original is returned instead (``used_fallback=True``). Without it
    the refusal text is kept, since there is nothing safer to return.

    Keyword arguments override the matching fields of ``options``. When
    ``options`` is omitted, ``config.text`` is used, and ``config`` also
    clips the input to its size limit.
    """
    if config is not None:
        response = config.clip_input(response)
        opts = options or config.text
    else:
        opts = options or TextParseOptions()
    if remove_quotes is None:
        remove_quotes = opts.remove_quotes
    if remove_code_blocks is None:
        remove_code_blocks = opts.remove_code_blocks
    if detect_errors is None:
        detect_errors = opts.detect_errors
    patterns = list(error_patterns) if error_patterns is not None else opts.error_patterns

    warnings: list[str] = []
    text = response.strip()
    was_error = False
    used_fallback = False

    if remove_quotes:
        text = strip_quotes(text)

    if remove_code_blocks:
        text = strip_code_blocks(text)

    if detect_errors and looks_like_error(text, patterns):
        was_error = True
        warnings.append(f'Response appears to be an error: "{text[:100]}..."')
        logger.warning("Text response looks like a refusal: %s", text[:100])

        if original_text:
            text = original_text
            used_fallback = True
            warnings.append("Falling back to original text")

    return TextParseResult(
        text=text,
        was_error=was_error,
        used_fallback=used_fallback,
        warnings=warnings,
    )


def parse_text_simple(response: str, original_text: str | None = None) -> str:
    """Just the cleaned text, with refusal fallback to ``original_text``."""
    return parse_text_response(response, original_text=original_text).text


def strip_quotes(text: str) -> str:
    """Remove one pair of matching wrapping quotes (ASCII or typographic)."""
    result = text.strip()
    if len(result) < 2:
        return result
    for opening, closing in _QUOTE_PAIRS:
        if result.startswith(opening) and result.endswith(closing):
            return result[1:-1]
    return result


def strip_code_blocks(text: str) -> str:
    """Unwrap a fenced code block or single-line inline code."""
    result = text.strip()

    if len(result) >= 6 and result.startswith("```") and result.endswith("```"):
        result = result[3:-3].strip()

        # A short first line without spaces is a language tag (```text)
        first_newline = result.find("\n")
        if 0 < first_newline < 20 and " " not in result[:first_newline]:
            result = result[first_newline + 1 :].strip()

    if (
        len(result) >= 2
        and result.startswith("`")
        and result.endswith("`")
        and "\n" not in result
    ):
        result = result[1:-1]

    return result


def looks_like_error(
    text: str, patterns: Iterable[str] = DEFAULT_ERROR_PATTERNS
) -> bool:
    """Case-insensitive check for refusal/apology phrases."""
    lower = text.lower()
    return any(pattern.lower() in lower for pattern in patterns)


def extract_first_paragraph(text: str) -> str:
    """First blank-line-delimited block (LLMs like to append explanations)."""
    first = _PARAGRAPH_BREAK_RE.split(text, maxsplit=1)[0].strip()
    return first or text


def remove_preamble(text: str) -> str:
    """Strip lead-ins like "Here is the revised text:"."""
    result = text
    for pattern in _PREAMBLE_PATTERNS:
        result = pattern.sub("", result, count=1)
    return result.strip()
