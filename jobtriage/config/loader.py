"""Configuration loading utilities."""

import json
import os
from pathlib import Path

from loguru import logger

from jobtriage.config.schema import Config


def get_config_path() -> Path:
    """Get the default configuration file path."""
    env_path = os.environ.get("JOBTRIAGE_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".jobtriage" / "config.json"


def read_config(config_path: Path | None = None) -> Config:
    """
    Read configuration from file, raising on a broken file.

    A missing file gives the defaults.

    Raises:
        OSError: the file exists but cannot be read
        ValueError: the file is not valid JSON or does not match the schema
    """
    path = config_path or get_config_path()

    if not path.exists():
        return Config()

    with open(path) as f:
        data = json.load(f)
    return Config.model_validate(data)


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file or create default.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded configuration object, or the defaults when the file is
        missing or unreadable.
    """
    path = config_path or get_config_path()

    try:
        return read_config(path)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load config from {path}: {e}. Using default configuration.")

    return Config()


def save_config(config: Config, config_path: Path | None = None) -> None:
    """
    Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Optional path to save to. Uses default if not provided.
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(by_alias=True)

    with open(path, "w") as f:
        json.dump(data, f, indent=2)

    # Provider key lives in here
    os.chmod(path, 0o600)
    logger.debug(f"Config saved: {path}")
