"""
Loguru logging configuration for the voter ingestion project.

Intercepts stdlib logging and redirects to loguru for consistent formatting.
Row-level ingest diagnostics (records bound with `row=`) go to their own
rows log and reach the console only at ROW_LOG_LEVEL and above.
"""

import logging
import os
import sys
from pathlib import Path

from loguru import logger

# Remove default loguru handler
logger.remove()

# Determine log level from environment
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if os.getenv("DEBUG") else "INFO")

# Console threshold for per-row skip/fallback/duplicate messages
ROW_LOG_LEVEL = os.getenv("ROW_LOG_LEVEL", "WARNING")


def is_row_record(record) -> bool:
    return "row" in record["extra"]


def console_filter(record) -> bool:
    """Let row diagnostics through only at ROW_LOG_LEVEL and above."""
    if not is_row_record(record):
        return True
    return record["level"].no >= logger.level(ROW_LOG_LEVEL).no


# Console handler with colors
logger.add(
    sys.stdout,
    format=(
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    ),
    level=LOG_LEVEL,
    filter=console_filter,
    colorize=True,
    backtrace=True,
    diagnose=True,
)

# File handlers for production runs (not in DEBUG mode or under pytest)
if not os.getenv("DEBUG") and "pytest" not in sys.modules:
    logs_dir = Path(os.getenv("LOG_DIR", "logs"))
    logs_dir.mkdir(exist_ok=True)

    logger.add(
        logs_dir / "ingest_{time:YYYY-MM-DD}.log",
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
        level="INFO",
        filter=lambda record: not is_row_record(record),
        rotation="00:00",
        retention="30 days",
        compression="zip",
        enqueue=True,
    )

    # Every row diagnostic, keyed by batch and row, for correcting the source roll
    logger.add(
        logs_dir / "ingest_rows_{time:YYYY-MM-DD}.log",
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | batch {extra[batch]} row {extra[row]} - {message}",
        level="DEBUG",
        filter=is_row_record,
        rotation="00:00",
        retention="30 days",
        compression="zip",
        enqueue=True,
    )


class InterceptHandler(logging.Handler):
    """Intercept stdlib logging and redirect to loguru."""

    def emit(self, record):
        # Get corresponding loguru level
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging():
    """Configure loguru to intercept all stdlib logging."""
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # Intercept Django loggers, quiet the spreadsheet readers
    for logger_name in ["django", "django.db.backends", "django.tasks"]:
        logging_logger = logging.getLogger(logger_name)
        logging_logger.handlers = [InterceptHandler()]
        logging_logger.propagate = False
    for logger_name in ["polars", "fastexcel"]:
        logging.getLogger(logger_name).setLevel(logging.ERROR)


# Auto-setup when module is imported
setup_logging()
