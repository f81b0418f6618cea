"""Logging setup for check-image.

Every module logs through a child of the ``check_image`` logger. Output goes
to stderr so that JSON results on stdout stay machine-readable.
"""

import logging
import sys
from typing import Any

ROOT_LOGGER = "check_image"

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")

DEFAULT_FORMAT = "%(levelname)s: %(message)s"
DEBUG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ContextFormatter(logging.Formatter):
    """Formatter appending a record's context as ``key=value`` pairs.

    Example output:
        ERROR: Check labels failed with error: invalid labels policy check=labels image=nginx:latest
    """

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = getattr(record, "context", None)
        if not context:
            return message
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{message} {pairs}"


def configure_logging(level: str = "info") -> None:
    """Send check-image logs to stderr at the given level.

    The debug level adds timestamps and logger names to each line. Calling
    this again replaces the previous configuration.

    Args:
        level: One of LOG_LEVELS, in any case

    Raises:
        ValueError: If the level name is not recognised
    """
    name = level.lower()
    if name not in LOG_LEVELS:
        raise ValueError(
            f"invalid log level {level!r}, valid levels are: {', '.join(LOG_LEVELS)}"
        )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        ContextFormatter(
            DEBUG_FORMAT if name == "debug" else DEFAULT_FORMAT,
            datefmt="%H:%M:%S",
        )
    )

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(name.upper())
    logger.handlers = [handler]
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get the logger for a module, e.g. ``get_logger("core.engine")``."""
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


class ContextAdapter(logging.LoggerAdapter):
    """Adapter attaching a fixed context (check name, image) to every record."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        kwargs.setdefault("extra", {})["context"] = self.extra
        return msg, kwargs


def get_logger_with_context(name: str, **context: Any) -> ContextAdapter:
    """Get a module logger whose records carry ``context``."""
    return ContextAdapter(get_logger(name), context)
