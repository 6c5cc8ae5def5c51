"""
Configuration Management - YAML-based configuration with environment overrides
=============================================================================

This module handles all configuration aspects including:
- Loading from YAML files
- Environment variable overrides
- Default values
- Configuration validation
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field, asdict

from .exceptions import ConfigError


RULE_SOURCES = ("builtin", "file", "url")
BUILTIN_TABLES = ("classic", "keyword")
DEFAULT_FALLBACK = "Please tell me more about that."


@dataclass
class RulesConfig:
    """
    Rule table configuration.

    Selects where the rule table comes from and how strictly an
    external rule source is parsed.
    """
    source: str = "builtin"  # builtin, file, url
    builtin: str = "classic"  # classic, keyword
    path: str = ""
    url: str = ""

    # Parsing behaviour
    strict_parsing: bool = False
    fallback_to_builtin: bool = True

    # Fetch timeout for url sources (seconds)
    timeout: float = 10.0

    def validate(self) -> None:
        """Validate rule source settings."""
        if self.source not in RULE_SOURCES:
            raise ConfigError(f"Invalid rule source: {self.source}")

        if self.builtin not in BUILTIN_TABLES:
            raise ConfigError(f"Unknown built-in rule table: {self.builtin}")

        if self.source == "file" and not self.path:
            raise ConfigError("rules.path is required when rules.source is 'file'")

        if self.source == "url" and not self.url:
            raise ConfigError("rules.url is required when rules.source is 'url'")

        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")

    @property
    def location(self) -> str:
        """Path or URL of the external source, empty for built-in tables."""
        if self.source == "file":
            return self.path
        if self.source == "url":
            return self.url
        return ""


@dataclass
class EngineConfig:
    """Response engine settings."""
    fallback_response: str = DEFAULT_FALLBACK
    seed: Optional[int] = None

    def validate(self) -> None:
        if not self.fallback_response.strip():
            raise ConfigError("fallback_response cannot be empty")


@dataclass
class UIConfig:
    """
    User interface configuration.

    Controls the web server address and the transcript labels
    used by the terminal and line-based chat front ends.
    """
    web_host: str = "127.0.0.1"
    web_port: int = 8080

    user_label: str = "You"
    bot_label: str = "ELIZA"

    def validate(self) -> None:
        if self.web_port < 1 or self.web_port > 65535:
            raise ConfigError(f"Invalid web port: {self.web_port}")


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    json_format: bool = False
    log_dir: str = ""  # empty = console only

    def validate(self) -> None:
        if self.level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigError(f"Invalid log level: {self.level}")


@dataclass
class Config:
    """
    Main configuration container.

    Aggregates all configuration sections into a single object
    and provides methods for loading, saving, and validating.
    """
    app_name: str = "ELIZA Responder"
    debug: bool = False

    rules: RulesConfig = field(default_factory=RulesConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Set at runtime
    config_dir: str = ""

    def validate(self) -> None:
        """
        Validate all configuration sections.

        Raises:
            ConfigError: If any configuration section is invalid
        """
        self.rules.validate()
        self.engine.validate()
        self.ui.validate()
        self.logging.validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "app_name": self.app_name,
            "debug": self.debug,
            "rules": asdict(self.rules),
            "engine": asdict(self.engine),
            "ui": asdict(self.ui),
            "logging": asdict(self.logging),
        }


SECTIONS = ("rules", "engine", "ui", "logging")


def get_default_config_dir() -> Path:
    """
    Get the default configuration directory path.

    Returns:
        Path to the configuration directory
    """
    if "ELIZA_CONFIG_DIR" in os.environ:
        return Path(os.environ["ELIZA_CONFIG_DIR"])

    if "XDG_CONFIG_HOME" in os.environ:
        return Path(os.environ["XDG_CONFIG_HOME"]) / "eliza-responder"

    return Path.home() / ".config" / "eliza-responder"


def load_config(config_path: Optional[str] = None, load_env: bool = True) -> Config:
    """
    Load configuration from YAML file with environment variable overrides.

    This function loads configuration in the following order:
    1. Default values from dataclass
    2. Values from YAML file
    3. Environment variable overrides

    Args:
        config_path: Path to configuration file (optional)
        load_env: Whether to load environment variable overrides

    Returns:
        Config object with loaded values

    Raises:
        ConfigError: If configuration is invalid or cannot be loaded
    """
    config = Config()
    config.config_dir = str(get_default_config_dir())

    if config_path:
        yaml_path = Path(config_path)
        if not yaml_path.exists():
            raise ConfigError("Config file not found", {"path": str(yaml_path)})
    else:
        yaml_path = Path(config.config_dir) / "config.yaml"

    if yaml_path.exists():
        try:
            with open(yaml_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file: {e}", {"path": str(yaml_path)})
        except OSError as e:
            raise ConfigError(f"Failed to read config file: {e}", {"path": str(yaml_path)})

        if not isinstance(yaml_config, dict):
            raise ConfigError("Config file must contain a mapping", {"path": str(yaml_path)})

        _apply_yaml_config(config, yaml_config)

    if load_env:
        _apply_env_overrides(config)

    config.validate()

    return config


def _apply_yaml_config(config: Config, yaml_config: Dict[str, Any]) -> None:
    """
    Apply YAML configuration values to Config object.

    Unknown keys are ignored.

    Args:
        config: Config object to update
        yaml_config: Dictionary of configuration values from YAML
    """
    if "app_name" in yaml_config:
        config.app_name = yaml_config["app_name"]
    if "debug" in yaml_config:
        config.debug = bool(yaml_config["debug"])

    for section in SECTIONS:
        values = yaml_config.get(section)
        if not values:
            continue
        if not isinstance(values, dict):
            raise ConfigError(f"Config section '{section}' must be a mapping")

        section_obj = getattr(config, section)
        for key, value in values.items():
            if hasattr(section_obj, key):
                setattr(section_obj, key, value)


def _apply_env_overrides(config: Config) -> None:
    """
    Apply environment variable overrides to Config object.

    Environment variables follow the pattern: ELIZA_SECTION_KEY
    For example: ELIZA_RULES_SOURCE, ELIZA_UI_WEB_PORT

    Args:
        config: Config object to update
    """
    env_mappings = {
        # Rule source settings
        "ELIZA_RULES_SOURCE": ("rules", "source"),
        "ELIZA_RULES_BUILTIN": ("rules", "builtin"),
        "ELIZA_RULES_PATH": ("rules", "path"),
        "ELIZA_RULES_URL": ("rules", "url"),
        "ELIZA_RULES_STRICT_PARSING": ("rules", "strict_parsing", bool),
        "ELIZA_RULES_FALLBACK_TO_BUILTIN": ("rules", "fallback_to_builtin", bool),
        "ELIZA_RULES_TIMEOUT": ("rules", "timeout", float),

        # Engine settings
        "ELIZA_ENGINE_FALLBACK_RESPONSE": ("engine", "fallback_response"),
        "ELIZA_ENGINE_SEED": ("engine", "seed", int),

        # UI settings
        "ELIZA_UI_WEB_HOST": ("ui", "web_host"),
        "ELIZA_UI_WEB_PORT": ("ui", "web_port", int),

        # Logging settings
        "ELIZA_LOGGING_LEVEL": ("logging", "level"),
        "ELIZA_LOGGING_JSON_FORMAT": ("logging", "json_format", bool),
        "ELIZA_LOGGING_LOG_DIR": ("logging", "log_dir"),
    }

    for env_var, mapping in env_mappings.items():
        value = os.environ.get(env_var)
        if value is None:
            continue

        section, key = mapping[0], mapping[1]
        converter = mapping[2] if len(mapping) > 2 else str

        if converter is bool:
            converted = value.lower() in ("true", "1", "yes", "on")
        else:
            try:
                converted = converter(value)
            except ValueError:
                raise ConfigError(f"Invalid value for {env_var}: {value!r}")

        setattr(getattr(config, section), key, converted)


def save_config(config: Config, config_path: Optional[str] = None) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Config object to save
        config_path: Path to save configuration (optional)

    Raises:
        ConfigError: If configuration cannot be saved
    """
    if config_path:
        yaml_path = Path(config_path)
    else:
        yaml_path = Path(config.config_dir) / "config.yaml"

    try:
        yaml_path.parent.mkdir(parents=True, exist_ok=True)
        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        raise ConfigError(f"Failed to save config file: {e}", {"path": str(yaml_path)})
