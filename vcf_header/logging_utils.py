"""Shared logging helpers for the VCF header engine.

The ``vcf_header`` logger receives every diagnostic emitted while headers are
parsed, validated and merged: dropped duplicate lines, repaired historical
encodings, permissive-mode validation failures and merge conflicts. Importing
the module attaches only a :class:`logging.NullHandler` at ``WARNING`` and
lets records propagate, so the host application's own logging decides where
they go. Applications that want the engine to write its own output call
:func:`configure_logging` with ``enable_console`` or ``log_file`` and
``enable_file_logging=True``; the logger then stops propagating so records
are not printed twice. Repeated invocations clear previous handlers so no
duplicate outputs are accumulated.

Fatal conditions go through :func:`handle_critical_error`, which records the
message at ``ERROR`` and ``CRITICAL`` level before raising the requested
exception class. Recoverable conditions go through
:func:`handle_non_critical_error` and are logged as warnings.
"""
from __future__ import annotations

import logging
import os
from typing import Iterable

from .exceptions import VCFHeaderError

LOGGER_NAME = "vcf_header"
LOG_FILE = "vcf_header.log"
LOG_FORMAT = "%(asctime)s : %(levelname)s : %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(LOGGER_NAME)


def _normalize_level(level: int | str) -> int:
    """Return a numeric logging level for *level*."""
    if isinstance(level, str):
        name = level.upper()
        numeric = logging.getLevelName(name)
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")
        return numeric
    return int(level)


def _clear_handlers(existing: Iterable[logging.Handler]) -> None:
    for h in list(existing):
        try:
            h.close()
        finally:
            logger.removeHandler(h)


def configure_logging(
    *,
    log_level: int | str = logging.WARNING,
    log_file: str | os.PathLike[str] | None = LOG_FILE,
    enable_file_logging: bool = False,
    enable_console: bool = True,
    create_dirs: bool = True,
) -> None:
    """Idempotent logger setup for the header engine."""

    level = _normalize_level(log_level)
    _clear_handlers(logger.handlers)
    logger.setLevel(level)

    fmt = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    if enable_file_logging and log_file:
        path = os.fspath(log_file)
        if create_dirs:
            d = os.path.dirname(path)
            if d:
                os.makedirs(d, exist_ok=True)
        fh = logging.FileHandler(path)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    if enable_console:
        sh = logging.StreamHandler()
        sh.setFormatter(fmt)
        logger.addHandler(sh)

    # own output handlers replace propagation to the root logger
    logger.propagate = not logger.handlers
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())


def log_message(
    message: str,
    verbose: bool = False,
    level: int = logging.INFO,
    *,
    exc_info: BaseException | bool | None = None,
) -> None:
    """Log *message* at the requested level and optionally echo it to stdout."""

    logger.log(level, message, exc_info=exc_info)
    if verbose:
        print(message)


def handle_critical_error(
    message: str,
    exc_cls=None,
    *,
    exc_info: BaseException | bool | None = None,
    **exc_kwargs,
) -> None:
    """Log and raise a fatal error."""

    log_message(message, level=logging.ERROR)
    logger.critical(message, exc_info=exc_info)
    exception_class = exc_cls or VCFHeaderError
    if isinstance(exc_info, BaseException):
        raise exception_class(message, **exc_kwargs) from exc_info
    raise exception_class(message, **exc_kwargs)


def handle_non_critical_error(message: str, verbose: bool = False) -> None:
    """Log a recoverable error as a warning."""

    log_message(message, verbose, level=logging.WARNING)


__all__ = [
    "LOG_FILE",
    "LOGGER_NAME",
    "configure_logging",
    "logger",
    "log_message",
    "handle_critical_error",
    "handle_non_critical_error",
]

# Default configuration: no output of our own, records propagate at WARNING level.
configure_logging(enable_console=False)
