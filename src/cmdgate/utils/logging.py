"""Logging setup utilities for cmdgate.

Configures the ``cmdgate`` logger from the logging settings. Records
about requests carry their fields both in the message and as ``extra``
attributes, so structured handlers can pick them up.
"""

from __future__ import annotations

import logging
import sys

from cmdgate.config.settings import LoggingConfig


def setup_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Configure logging for the cmdgate application.

    The target selects the handler: ``stdout`` or ``stderr`` stream to
    that stream, an empty string discards everything, and any other value
    is treated as a file path to append to.

    Args:
        config: Logging configuration. If None, uses defaults
                (INFO level, stdout output).
    """
    if config is None:
        config = LoggingConfig()

    root_logger = logging.getLogger("cmdgate")
    root_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    target = config.target
    if target == "stdout":
        handler: logging.Handler = logging.StreamHandler(sys.stdout)
    elif target == "stderr":
        handler = logging.StreamHandler(sys.stderr)
    elif target == "":
        handler = logging.NullHandler()
    else:
        handler = logging.FileHandler(target)

    handler.setFormatter(logging.Formatter(config.format))
    root_logger.addHandler(handler)

    root_logger.debug("Logging initialized at %s level (target=%r)", config.level, target)
    return root_logger
