"""
AltiTeam Configuration Loader

Loads configuration from:
1. Environment variables (.env)
2. config.yml (YAML file)
3. Default values

Environment variables take precedence over YAML values.
"""

import os
from pathlib import Path
from typing import Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


# Load .env file
load_dotenv()


# =============================================================================
# Pydantic Configuration Models
# =============================================================================

class SystemConfig(BaseModel):
    """System-level configuration."""
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    log_level: str = "INFO"


class LLMConfig(BaseModel):
    """Model provider configuration (Anthropic Messages API)."""
    api_key: Optional[str] = None
    base_url: str = "https://api.anthropic.com/v1"
    model_name: str = "claude-sonnet-4-20250514"
    max_tokens: int = 4096
    anthropic_version: str = "2023-06-01"
    timeout_seconds: float = 120.0


class ChatConfig(BaseModel):
    """Chat core configuration."""
    tool_timeout_seconds: float = 30.0
    tool_results_prompt: str = (
        "Here are the results of the tool calls:\n\n{results}\n\n"
        "Please provide a final answer to the user based on these results."
    )


class AuthConfig(BaseModel):
    """Bearer token to user id mapping."""
    api_keys: Dict[str, str] = Field(default_factory=dict)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Config(BaseModel):
    """Main configuration container."""
    system: SystemConfig = Field(default_factory=SystemConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    chat: ChatConfig = Field(default_factory=ChatConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def find_config_file() -> Optional[Path]:
    """Find the config.yml file, searching up the directory tree."""
    explicit = os.getenv("ALTITEAM_CONFIG_FILE")
    if explicit:
        path = Path(explicit)
        return path if path.exists() else None

    current = Path(__file__).parent

    # Search up to 5 levels
    for _ in range(5):
        config_path = current / "config.yml"
        if config_path.exists():
            return config_path
        current = current.parent

    cwd_config = Path.cwd() / "config.yml"
    if cwd_config.exists():
        return cwd_config

    return None


def load_yaml_config(config_path: Path) -> dict:
    """Load configuration from YAML file."""
    try:
        with open(config_path, "r") as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        print(f"Warning: Could not load config from {config_path}: {e}")
        return {}


def apply_env_overrides(config_dict: dict) -> dict:
    """Apply environment variable overrides to config dictionary.

    Environment variables are mapped using ALTITEAM_ prefix and double underscores
    for nesting. For example:
    - ALTITEAM_SYSTEM__PORT=9000 -> config['system']['port'] = 9000
    - ALTITEAM_LLM__MODEL_NAME=... -> config['llm']['model_name'] = ...

    ANTHROPIC_API_KEY is honored for llm.api_key unless an ALTITEAM_ override is set.
    """
    prefix = "ALTITEAM_"

    anthropic_key = os.getenv("ANTHROPIC_API_KEY")
    if anthropic_key:
        config_dict.setdefault("llm", {})["api_key"] = anthropic_key

    for key, value in os.environ.items():
        if not key.startswith(prefix) or key == "ALTITEAM_CONFIG_FILE":
            continue

        config_key = key[len(prefix):].lower()
        parts = config_key.split("__")

        if len(parts) == 1:
            config_dict[parts[0]] = _parse_env_value(value)
        elif len(parts) == 2:
            section, setting = parts
            if section not in config_dict:
                config_dict[section] = {}
            config_dict[section][setting] = _parse_env_value(value)

    return config_dict


def _parse_env_value(value: str):
    """Parse environment variable value to appropriate type."""
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value


def load_config() -> Config:
    """Load configuration from YAML file and environment variables.

    Returns:
        Config: Validated configuration object
    """
    config_path = find_config_file()
    if config_path:
        config_dict = load_yaml_config(config_path)
    else:
        config_dict = {}

    config_dict = apply_env_overrides(config_dict)

    return Config(**config_dict)


# =============================================================================
# Global Configuration Instance
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance.

    This function loads the configuration on first call and caches it.
    Use reload_config() to force a reload.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """Force reload of configuration from files.

    Returns:
        Config: Newly loaded configuration
    """
    global _config
    _config = load_config()
    return _config
