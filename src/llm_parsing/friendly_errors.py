"""User-facing messages for parse failures and partial recoveries.

Maps ParseError codes and recovery outcomes to short, human-readable
messages that a feature layer can show without knowing parser internals.
"""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import ConfigError, ParseError, ParseErrorCode, SchemaDefinitionError
from .results import RecoveryResult


@dataclass
class FriendlyError:
    """A user-friendly error with a fix suggestion."""

    title: str
    message: str
    fix: str
    docs_url: str = ""


def friendly_parse_error(error: Exception) -> FriendlyError:
    """Convert a parse failure (or any pipeline exception) to a friendly message."""
    if isinstance(error, ParseError):
        code = error.code
        if code == ParseErrorCode.EMPTY_RESPONSE:
            return FriendlyError(
                title="Empty AI response",
                message="The AI returned an empty answer.",
                fix="This is usually temporary. Try the request again.",
            )
        if code in (ParseErrorCode.NO_JSON_FOUND, ParseErrorCode.INVALID_JSON):
            return FriendlyError(
                title="AI response could not be read",
                message="The AI answered in a format that could not be understood.",
                fix=(
                    "Try again. If it keeps happening:\n"
                    "1. Select a smaller amount of text\n"
                    "2. Switch to a more capable model"
                ),
            )
        if code in (
            ParseErrorCode.MISSING_REQUIRED_FIELD,
            ParseErrorCode.SCHEMA_MISMATCH,
            ParseErrorCode.INVALID_TYPE,
            ParseErrorCode.UNEXPECTED_FORMAT,
        ):
            return FriendlyError(
                title="Incomplete AI response",
                message="The AI response was missing information or had the wrong shape.",
                fix="Try again. Results from a retry are usually complete.",
            )

    if isinstance(error, SchemaDefinitionError):
        return FriendlyError(
            title="Response schema invalid",
            message=f"A response schema could not be used: {error}",
            fix="Check the schema literal for unknown keys or an unsupported 'type'.",
        )

    if isinstance(error, ConfigError):
        return FriendlyError(
            title="Configuration error",
            message=f"There's a problem with the parser configuration: {error}",
            fix=(
                "Check ~/.llm-parsing/config.yaml for syntax errors, or unset "
                "the LLM_PARSING_* environment variables."
            ),
        )

    return FriendlyError(
        title="AI response error",
        message=f"Something went wrong while reading the AI response: {error}",
        fix="Try the request again.",
    )


def format_recovery_notice(recovery: RecoveryResult, skipped: int = 0) -> str:
    """Summarize a recovery outcome, e.g. "Recovered 3 items (2 items skipped)"."""
    if not recovery.data:
        return "Could not read the AI response. No items were recovered."

    count = len(recovery.data)
    notice = f"Recovered {count} item{'s' if count != 1 else ''}"
    if skipped:
        notice += f" ({skipped} item{'s' if skipped != 1 else ''} skipped)"
    return notice


def format_friendly_error(err: FriendlyError) -> str:
    """Format a FriendlyError for display in a terminal or log."""
    lines = [
        err.title,
        f"   {err.message}",
        "",
        "How to fix:",
    ]
    for line in err.fix.split("\n"):
        lines.append(f"   {line}")
    if err.docs_url:
        lines.append("")
        lines.append(f"   More info: {err.docs_url}")
    return "\n".join(lines)
