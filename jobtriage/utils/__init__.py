"""Utility functions for jobtriage."""

from jobtriage.utils.logging import configure_logging, configure_logging_from_config

__all__ = ["configure_logging", "configure_logging_from_config"]
