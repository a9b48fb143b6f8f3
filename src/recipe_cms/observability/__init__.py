"""Observability components: logging."""

from recipe_cms.observability.logging import InterceptHandler, get_logger, logger, setup_logging


__all__ = [
    "InterceptHandler",
    "get_logger",
    "logger",
    "setup_logging",
]
