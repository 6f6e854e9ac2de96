"""Logging helpers."""

from pedtools.utils.logging import LOG_FORMAT, setup_logging, write_run_log

__all__ = ["LOG_FORMAT", "setup_logging", "write_run_log"]
