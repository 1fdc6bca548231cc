"""
Logging Setup

loguru owns the sinks. Records emitted through the standard `logging`
module (service layer, uvicorn, sqlalchemy) are forwarded into loguru.
"""
import inspect
import logging
import sys

from loguru import logger

from audioshelf.config import LOG_LEVEL, LOG_FILE, LOG_ROTATION, LOG_RETENTION


class InterceptHandler(logging.Handler):
    """Forward standard logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller outside the logging module so loguru reports the right origin
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = LOG_LEVEL, log_file: str = LOG_FILE) -> None:
    """
    Configure loguru sinks and route standard logging into them.

    Args:
        level: Minimum level for every sink
        log_file: Rotating file sink path; empty string disables it
    """
    logger.remove()
    logger.add(sys.stderr, level=level)
    if log_file:
        logger.add(
            log_file,
            level=level,
            rotation=LOG_ROTATION,
            retention=LOG_RETENTION,
            encoding="utf-8",
            enqueue=True,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=level, force=True)
    # SQL statements only when database.echo is on
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False

    logger.info(f"Logging configured (level={level}, file={log_file or 'disabled'})")
