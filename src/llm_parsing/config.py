"""Parser options and configuration loading."""

from __future__ import annotations

import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigError

# Lowercase substrings that mark a refusal or apology instead of content.
DEFAULT_ERROR_PATTERNS: tuple[str, ...] = (
    "i cannot",
    "i can't",
    "i'm sorry",
    "i am sorry",
    "as an ai",
    "as a language model",
    "i don't have",
    "i do not have",
    "error:",
    "apologies",
    "unfortunately",
)

DEFAULT_CONFIG_PATH = "~/.llm-parsing/config.yaml"


class JsonParserOptions(BaseModel):
    lenient: bool = True  # Apply heuristic repairs as the last extraction step
    extract_from_code_blocks: bool = True
    max_depth: int = Field(default=10, ge=1)  # Bracket nesting limit for substring scans


class TextParseOptions(BaseModel):
    remove_quotes: bool = True
    remove_code_blocks: bool = True
    detect_errors: bool = True
    error_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ERROR_PATTERNS)
    )


class ParserConfig(BaseModel):
    json_options: JsonParserOptions = Field(
        default_factory=JsonParserOptions, alias="json"
    )
    text: TextParseOptions = Field(default_factory=TextParseOptions)
    apply_defaults: bool = True
    max_input_chars: int = Field(default=0, ge=0)  # 0 = unlimited

    model_config = {"populate_by_name": True}

    def clip_input(self, text: str) -> str:
        """Truncate untrusted input to ``max_input_chars`` before parsing."""
        if self.max_input_chars and len(text) > self.max_input_chars:
            return text[: self.max_input_chars]
        return text


def _interpolate_env_vars(text: str) -> str:
    """Replace ${VAR_NAME} with environment variable values."""

    def replacer(match: re.Match) -> str:
        var_name = match.group(1)
        return os.environ.get(var_name, "")

    return re.sub(r"\$\{(\w+)\}", replacer, text)


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from e


def _config_from_env() -> ParserConfig:
    """Build config from environment variables, falling back to defaults."""
    try:
        return ParserConfig(
            json=JsonParserOptions(
                lenient=_env_bool("LLM_PARSING_LENIENT", True),
                max_depth=_env_int("LLM_PARSING_MAX_DEPTH", 10),
            ),
            max_input_chars=_env_int("LLM_PARSING_MAX_INPUT_CHARS", 0),
        )
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid environment configuration: {e}") from e


def load_config(path: str | Path | None = None) -> ParserConfig:
    """Load config from YAML file, env vars, or defaults.

    Priority: config.yaml (with ${ENV} interpolation) > env vars > defaults.
    """
    if path is None:
        path = Path(DEFAULT_CONFIG_PATH).expanduser()
    else:
        path = Path(path).expanduser()

    if not path.exists():
        return _config_from_env()

    raw_text = path.read_text()
    interpolated = _interpolate_env_vars(raw_text)
    try:
        data = yaml.safe_load(interpolated)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return ParserConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config in {path}: expected a mapping")
    try:
        return ParserConfig(**data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid config in {path}: {e}") from e


def save_config(config: ParserConfig, path: str | Path | None = None) -> Path:
    """Save config to YAML file."""
    if path is None:
        path = Path(DEFAULT_CONFIG_PATH).expanduser()
    else:
        path = Path(path).expanduser()

    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(by_alias=True)
    path.write_text(yaml.dump(data, default_flow_style=False, sort_keys=False))
    return path
