"""Output channels for the llm-summarize command-line tools.

The tools talk on two streams.  Diagnostics are log records on **stderr**,
configured once per process by ``setup_logging``; every module logs through
``logging.getLogger(__name__)`` and its records propagate to the
``"llm_summarize"`` package logger.  Results are plain lines on **stdout**,
written only through ``emit_result``: the summary Markdown for ``--print``,
``SELECTED:<id>`` / ``CANCELLED`` for the Automator model picker, and the new
folder's path.  Automator actions parse stdout, so nothing else may reach it.
"""

import logging
import sys
from pathlib import Path
from typing import Sequence

_FMT = "%(asctime)s  %(levelname)-7s %(message)s"
_DATE = "%H:%M:%S"

LOGGER_NAME = "llm_summarize"

# SDK loggers surfaced on stderr in verbose mode (request URLs, retries).
_VERBOSE_LIBRARY_LOGGERS = ("openai", "httpx")


def setup_logging(verbose: bool = False, log_file: Path | None = None) -> None:
    """Send ``llm_summarize`` log records to stderr and, optionally, a file.

    Args:
        verbose:  DEBUG instead of INFO, and the openai/httpx loggers are
                  routed to the same handlers.
        log_file: Extra destination for every record; parent directories
                  are created.

    Safe to call again: handlers installed by an earlier call are closed and
    replaced.
    """
    fmt = logging.Formatter(_FMT, datefmt=_DATE)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(fmt)

    level = logging.DEBUG if verbose else logging.INFO
    _install(logging.getLogger(LOGGER_NAME), handlers, level)
    for name in _VERBOSE_LIBRARY_LOGGERS:
        library = logging.getLogger(name)
        if verbose:
            _install(library, handlers, logging.DEBUG)
        else:
            _install(library, (), library.level)


def _install(logger: logging.Logger, handlers: Sequence[logging.Handler], level: int) -> None:
    for old in logger.handlers[:]:
        logger.removeHandler(old)
        if old not in handlers:
            old.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = not logger.handlers


def emit_result(text: str) -> None:
    """Write one result to stdout, newline-terminated, and flush it."""
    sys.stdout.write(text if text.endswith("\n") else text + "\n")
    sys.stdout.flush()
