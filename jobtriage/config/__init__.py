"""Configuration module for jobtriage."""

from jobtriage.config.loader import get_config_path, load_config, read_config, save_config
from jobtriage.config.schema import ClassifierConfig, Config, LoggingConfig

__all__ = [
    "ClassifierConfig",
    "Config",
    "LoggingConfig",
    "get_config_path",
    "load_config",
    "read_config",
    "save_config",
]
