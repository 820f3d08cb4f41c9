"""Utility modules shared across the package."""

from .logging import JsonFormatter, configure_logging, get_logger, scrub, scrubbing_processor

__all__ = ["JsonFormatter", "configure_logging", "get_logger", "scrub", "scrubbing_processor"]
