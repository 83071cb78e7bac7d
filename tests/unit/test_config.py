"""
Unit tests for the configuration system.

Tests the layered configuration loading:
1. Default values
2. YAML config file overrides
3. Environment variable overrides
"""
import os
from unittest.mock import patch

import pytest

from altiteam.core.config import (
    Config,
    _parse_env_value,
    apply_env_overrides,
    find_config_file,
    load_config,
    load_yaml_config,
)


class TestDefaults:
    """Tests for built-in defaults."""

    def test_default_sections(self):
        """Test that an empty config has usable defaults."""
        config = Config()
        assert config.system.port == 8080
        assert config.llm.base_url == "https://api.anthropic.com/v1"
        assert config.llm.api_key is None
        assert config.chat.tool_timeout_seconds == 30.0
        assert config.auth.api_keys == {}

    def test_tool_results_prompt_has_placeholder(self):
        """Test that the follow-up prompt can embed tool results."""
        assert "{results}" in Config().chat.tool_results_prompt


class TestParseEnvValue:
    """Tests for environment value coercion."""

    @pytest.mark.parametrize("raw,expected", [
        ("true", True),
        ("YES", True),
        ("false", False),
        ("no", False),
        ("42", 42),
        ("2.5", 2.5),
        ("claude-sonnet", "claude-sonnet"),
    ])
    def test_parse(self, raw, expected):
        assert _parse_env_value(raw) == expected


class TestEnvOverrides:
    """Tests for ALTITEAM_ and ANTHROPIC_API_KEY overrides."""

    def test_nested_override(self):
        """Test that SECTION__KEY maps onto nested config."""
        with patch.dict(os.environ, {"ALTITEAM_SYSTEM__PORT": "9000"}, clear=True):
            result = apply_env_overrides({"system": {"host": "127.0.0.1"}})
        assert result["system"] == {"host": "127.0.0.1", "port": 9000}

    def test_anthropic_key(self):
        """Test that ANTHROPIC_API_KEY fills llm.api_key."""
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "sk-test"}, clear=True):
            result = apply_env_overrides({})
        assert result["llm"]["api_key"] == "sk-test"

    def test_altiteam_override_wins_over_anthropic_key(self):
        env = {"ANTHROPIC_API_KEY": "sk-generic", "ALTITEAM_LLM__API_KEY": "sk-specific"}
        with patch.dict(os.environ, env, clear=True):
            result = apply_env_overrides({})
        assert result["llm"]["api_key"] == "sk-specific"

    def test_config_file_variable_is_not_a_setting(self):
        with patch.dict(os.environ, {"ALTITEAM_CONFIG_FILE": "/tmp/x.yml"}, clear=True):
            assert apply_env_overrides({}) == {}


class TestYamlLoading:
    """Tests for YAML file discovery and loading."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("chat:\n  tool_timeout_seconds: 5\nauth:\n  api_keys:\n    tok: user-9\n")
        assert load_yaml_config(path) == {
            "chat": {"tool_timeout_seconds": 5},
            "auth": {"api_keys": {"tok": "user-9"}},
        }

    def test_invalid_yaml_returns_empty(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("chat: [unclosed")
        assert load_yaml_config(path) == {}

    def test_explicit_config_file(self, tmp_path):
        path = tmp_path / "custom.yml"
        path.write_text("system:\n  port: 7000\n")
        with patch.dict(os.environ, {"ALTITEAM_CONFIG_FILE": str(path)}, clear=True):
            assert find_config_file() == path
            config = load_config()
        assert config.system.port == 7000

    def test_env_beats_yaml(self, tmp_path):
        path = tmp_path / "custom.yml"
        path.write_text("system:\n  port: 7000\nllm:\n  model_name: from-yaml\n")
        env = {"ALTITEAM_CONFIG_FILE": str(path), "ALTITEAM_LLM__MODEL_NAME": "from-env"}
        with patch.dict(os.environ, env, clear=True):
            config = load_config()
        assert config.system.port == 7000
        assert config.llm.model_name == "from-env"
