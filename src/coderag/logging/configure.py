"""Operational logging for the engine and the STDIO server."""

from __future__ import annotations

import logging
import os
import sys

ROOT_LOGGER_NAME = "coderag"
LEVEL_ENV_VAR = "CODERAG_LOG_LEVEL"
FILE_ENV_VAR = "CODERAG_LOG_FILE"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    *,
    force: bool = False,
) -> logging.Logger:
    """Attach handlers to the ``coderag`` logger and return it.

    Environment variables win over the arguments. Records go to stderr,
    since stdout carries the protocol. A second call is a no-op unless
    ``force`` is set.
    """
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    if package_logger.handlers and not force:
        return package_logger

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    level_name = os.getenv(LEVEL_ENV_VAR) or level
    resolved = logging.getLevelName(level_name.upper())
    package_logger.setLevel(resolved if isinstance(resolved, int) else logging.INFO)

    formatter = logging.Formatter(_LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    target = os.getenv(FILE_ENV_VAR, log_file)
    file_error: OSError | None = None
    if target:
        try:
            handlers.append(logging.FileHandler(target, encoding="utf-8"))
        except OSError as error:
            file_error = error
    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    if file_error is not None:
        package_logger.warning("Log file %s unavailable (%s); using stderr only", target, file_error)
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Return ``name`` as a child of the ``coderag`` logger."""
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
