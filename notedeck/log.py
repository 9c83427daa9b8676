"""loguru setup for the CLI and the HTTP server.

The server gets timestamped, call-site annotated lines; the CLI gets a compact
``LEVEL | message`` form so log lines on stderr do not drown command output.
Records from stdlib ``logging`` (uvicorn, watchdog) are bridged into loguru.
"""

from __future__ import annotations

import inspect
import logging
import sys

from loguru import logger

SERVER_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
CLI_FORMAT = "<level>{level: <8}</level> | {message}"

# watchdog reports every inotify event; uvicorn.access one line per request.
QUIET_LOGGERS = ("uvicorn.access", "watchdog", "httpx", "httpcore")


class _StdlibBridge(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so loguru reports the original caller.
        frame, depth = inspect.currentframe(), 0
        while frame is not None and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO", *, compact: bool = False) -> None:
    """Make loguru the only sink.  Call once per process (CLI entry or app lifespan)."""
    level = level.upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=CLI_FORMAT if compact else SERVER_FORMAT)

    logging.basicConfig(handlers=[_StdlibBridge()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logging to stderr at {} ({} format)", level, "compact" if compact else "server")
