"""
Core Module - Foundation components for the ELIZA responder
===========================================================

This module provides the foundational components including:
- Configuration management
- Logging setup
- Exception handling
"""

from .config import Config, load_config, save_config
from .exceptions import (
    ElizaError,
    ConfigError,
    ResourceUnavailable,
    MalformedRuleTable,
    PatternCompileFailure,
)
from .logging import setup_logging, get_logger

__all__ = [
    "Config",
    "load_config",
    "save_config",
    "ElizaError",
    "ConfigError",
    "ResourceUnavailable",
    "MalformedRuleTable",
    "PatternCompileFailure",
    "setup_logging",
    "get_logger",
]
