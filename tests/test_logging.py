"""Tests for logging setup."""

import sys

import pytest
from loguru import logger

from jobtriage.config.schema import LoggingConfig
from jobtriage.utils.logging import configure_logging, configure_logging_from_config


@pytest.fixture(autouse=True)
def restore_default_sink():
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_configure_logging_creates_log_file(tmp_path):
    log_file = tmp_path / "logs" / "jobtriage.log"

    configure_logging(level="WARNING", log_file=log_file)

    assert log_file.exists()


def test_configure_logging_from_config(tmp_path):
    log_file = tmp_path / "logs" / "jobtriage.log"
    config = LoggingConfig.model_validate({"level": "ERROR", "logFile": str(log_file)})

    configure_logging_from_config(config)
    logger.error("keyword refresh failed")
    logger.remove()  # flush and close the file sink

    assert log_file.exists()
    assert "keyword refresh failed" in log_file.read_text()


def test_configure_logging_from_config_without_file(capsys):
    configure_logging_from_config(LoggingConfig(level="WARNING"))

    logger.info("hidden")
    logger.warning("shown")

    err = capsys.readouterr().err
    assert "shown" in err
    assert "hidden" not in err
