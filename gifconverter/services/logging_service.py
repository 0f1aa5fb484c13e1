"""
This module configures application logging.

All logging goes through Loguru. Two sinks are installed:
- a colored console sink on stderr;
- the append-only log file, one line per message:
  `[2024-05-01 12:00:00Z|a1b2c] Processing file: "clip.mp4"`.

Files are processed concurrently, so each file gets a short random trace id
that is bound to every log line emitted while it is processed. Loguru
serializes writes to each sink, so lines from concurrent workers never
interleave.
"""

import sys
import threading
import uuid
from pathlib import Path

from loguru import logger

from ..config.common import DEFAULT_TRACE, LOG_FILE_FORMAT, LOGGER_FORMAT, TRACE_ID_LENGTH


def new_trace_id() -> str:
    return uuid.uuid4().hex[:TRACE_ID_LENGTH]


def setup_logging(log_file: Path, level: str = "INFO") -> int:
    """
    Replaces Loguru's default handler with the console and log file sinks.

    The file sink records every level from INFO up, independent of the console
    level, so the log file stays the complete record of a run.

    Returns:
        The handler id of the file sink.
    """
    logger.remove()
    logger.configure(extra={"trace": DEFAULT_TRACE})
    logger.add(sys.stderr, level=level, format=LOGGER_FORMAT)

    log_file.parent.mkdir(parents=True, exist_ok=True)
    return logger.add(
        log_file,
        level="INFO",
        format=LOG_FILE_FORMAT,
        colorize=False,
        encoding="utf-8",
        mode="a",
    )


def _log_unhandled(exc_type, exc_value, exc_traceback):
    logger.opt(exception=(exc_type, exc_value, exc_traceback)).critical(
        f"UnhandledException:\n{exc_type.__name__}: {exc_value}"
    )


def _log_unhandled_thread(args: threading.ExceptHookArgs):
    if args.exc_type is SystemExit:
        return
    _log_unhandled(args.exc_type, args.exc_value, args.exc_traceback)


def install_exception_hooks():
    """
    Logs any exception that escapes every per-file boundary, in the main thread
    or in a worker thread. The hooks only log; they do not recover.
    """
    sys.excepthook = _log_unhandled
    threading.excepthook = _log_unhandled_thread
