"""Logging bootstrap for the CLI."""
import logging
import os

from rich.logging import RichHandler


def configure_logging(level: str | None = None) -> None:
    """Configure the package logger with a rich handler, once."""
    logger = logging.getLogger("civique_prep")
    if getattr(logger, "_civique_logging_configured", False):
        return

    level_name = (level or os.environ.get("CIVIQUE_PREP_LOG_LEVEL", "WARNING")).upper()
    handler = RichHandler(show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level_name, logging.WARNING))
    logger.propagate = False

    logger._civique_logging_configured = True
