"""
Logging for the shutdown tracker.

Everything goes through loguru. Modules take a named logger from
``get_logger`` and pass context as keyword arguments, which loguru
stores in ``extra``. stdlib loggers (uvicorn, aiosqlite) are routed
into the same sinks.
"""

from __future__ import annotations
import logging
import sys
from loguru import logger

# ---- stdlib logging -> loguru ----
class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).bind(name=record.name).log(
            level, record.getMessage()
        )

def _hook_stdlib_logging() -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error", "aiosqlite"):
        std = logging.getLogger(name)
        std.handlers = [InterceptHandler()]
        std.propagate = False
    # aiosqlite logs every statement at DEBUG
    logging.getLogger("aiosqlite").setLevel(logging.INFO)

# ---- console format for humans; context stays in extra ----
DEV_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level:<7}</level> | "
    "<cyan>{extra[name]}</cyan> | "
    "<cyan>{file}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

def setup_logging(log_level: str = "INFO", log_format: str = "dev") -> None:
    """
    Configure the loguru sinks.

    Args:
        log_level: minimum level for every sink
        log_format: "dev" for colored console lines, "json" for one
            serialized record per line (message, level, time and extra)
    """
    logger.remove()
    logger.configure(extra={"name": "shutdowns"})
    if log_format == "json":
        logger.add(sys.stdout, serialize=True, level=log_level.upper(), backtrace=False,
                   diagnose=False, enqueue=False)
    else:
        logger.add(
            sink=lambda m: print(m, end=""),
            format=DEV_FORMAT,
            colorize=True,
            backtrace=True,
            diagnose=False,
            level=log_level.upper(),
            enqueue=False,
        )
    _hook_stdlib_logging()

def get_logger(name: str = "shutdowns", **ctx):
    """Named logger with optional bound context."""
    return logger.bind(name=name, **ctx)

def with_context(**ctx):
    """Attach context to every log call made inside the block, e.g. a request id."""
    return logger.contextualize(**ctx)
