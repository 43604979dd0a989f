"""Tests for configuration loading."""

import pytest

from llm_parsing.config import (
    DEFAULT_ERROR_PATTERNS,
    JsonParserOptions,
    ParserConfig,
    load_config,
    save_config,
)
from llm_parsing.exceptions import ConfigError


class TestDefaults:
    def test_default_options(self):
        config = ParserConfig()
        assert config.json_options.lenient is True
        assert config.json_options.extract_from_code_blocks is True
        assert config.json_options.max_depth == 10
        assert config.text.error_patterns == list(DEFAULT_ERROR_PATTERNS)
        assert config.apply_defaults is True

    def test_max_depth_must_be_positive(self):
        with pytest.raises(ValueError):
            JsonParserOptions(max_depth=0)

    def test_clip_input(self):
        assert ParserConfig(max_input_chars=3).clip_input("abcdef") == "abc"
        assert ParserConfig().clip_input("abcdef") == "abcdef"


class TestLoadConfig:
    def test_missing_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("LLM_PARSING_MAX_DEPTH", raising=False)
        monkeypatch.delenv("LLM_PARSING_LENIENT", raising=False)
        config = load_config(tmp_path / "missing.yaml")
        assert config.json_options.max_depth == 10

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LLM_PARSING_LENIENT", "false")
        monkeypatch.setenv("LLM_PARSING_MAX_DEPTH", "25")
        monkeypatch.setenv("LLM_PARSING_MAX_INPUT_CHARS", "5000")
        config = load_config(tmp_path / "missing.yaml")
        assert config.json_options.lenient is False
        assert config.json_options.max_depth == 25
        assert config.max_input_chars == 5000

    def test_bad_env_value(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LLM_PARSING_MAX_DEPTH", "deep")
        with pytest.raises(ConfigError):
            load_config(tmp_path / "missing.yaml")

    def test_yaml_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MY_DEPTH", "4")
        path = tmp_path / "config.yaml"
        path.write_text(
            "json:\n"
            "  lenient: false\n"
            "  max_depth: ${MY_DEPTH}\n"
            "text:\n"
            "  error_patterns: ['nope']\n"
        )
        config = load_config(path)
        assert config.json_options.lenient is False
        assert config.json_options.max_depth == 4
        assert config.text.error_patterns == ["nope"]

    def test_empty_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == ParserConfig()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("json: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("json:\n  max_depth: -1\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "nested" / "config.yaml"
        original = ParserConfig(max_input_chars=100)
        save_config(original, path)
        assert load_config(path) == original
