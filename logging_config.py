"""
Centralized logging configuration for PrintU Kiosk.

The backend serves overlapping requests on Flask worker threads and the
kiosk client runs its completion poller on a helper thread, so every record
carries the name of the thread that produced it.

Log Format:
    2026-10-19 10:15:30 [INFO    ] [MainThread] printu_kiosk.app - Starting PrintU Kiosk backend
    2026-10-19 10:15:41 [INFO    ] [Thread-7] printu_kiosk.job.a1b2c3d4 - Spooled page 3 x2 (a1b2c3d4-nup.pdf)
    2026-10-19 10:15:42 [WARNING ] [Poller-3] printu_kiosk.client.completion_poller - Printer still busy

Usage:
    # At startup
    from logging_config import setup_logging, get_logger

    setup_logging(log_level=logging.INFO, enable_file_logging=True)

    # In modules
    logger = get_logger(__name__)

    # Per print job (temp-file token)
    job_logger = get_job_logger("a1b2c3d4")
"""

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


APP_LOGGER_NAME = "printu_kiosk"

LOG_FORMAT = "%(asctime)s [%(levelname)-8s] [%(thread_name)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ThreadContextFilter(logging.Filter):
    """
    Adds `thread_name` and `thread_id` to every record.

    Never drops records.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        current_thread = threading.current_thread()
        record.thread_name = current_thread.name
        record.thread_id = threading.get_ident()
        return True


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=path,
        maxBytes=10 * 1024 * 1024,  # 10 MB per file
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(ThreadContextFilter())
    return handler


def setup_logging(
    app_name: str = APP_LOGGER_NAME,
    log_level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    enable_file_logging: bool = True,
) -> logging.Logger:
    """
    Configure the application logger.

    Installs a stdout handler and, when file logging is enabled, a rotating
    `<app_name>.log` plus an ERROR-only `<app_name>_error.log`. Calling it
    again replaces the previous handlers.

    Args:
        app_name: Name of the application root logger
        log_level: Minimum level for the console and main log
        log_dir: Directory for log files (default: ./logs next to this file)
        enable_file_logging: Whether to write log files

    Returns:
        The configured application root logger
    """
    logger = logging.getLogger(app_name)
    logger.setLevel(log_level)
    logger.propagate = False
    logger.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(ThreadContextFilter())
    logger.addHandler(console_handler)

    if enable_file_logging:
        if log_dir is None:
            log_dir = Path(__file__).parent / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        app_log_file = log_dir / f"{app_name}.log"
        logger.addHandler(_rotating_handler(app_log_file, log_level, formatter))
        logger.addHandler(_rotating_handler(log_dir / f"{app_name}_error.log", logging.ERROR, formatter))

        logger.info(f"File logging enabled: {app_log_file}")

    logger.info(f"Logging configured at level {logging.getLevelName(log_level)}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger under the application namespace.

    `services.print_service` becomes `printu_kiosk.services.print_service`.
    """
    if not name.startswith(APP_LOGGER_NAME):
        name = f"{APP_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def get_job_logger(token: str) -> logging.Logger:
    """
    Get a logger for one print job.

    The job's temp-file token (first 8 characters) is part of the logger
    name, so `grep printu_kiosk.job.a1b2c3d4` shows a single page's story.
    """
    return logging.getLogger(f"{APP_LOGGER_NAME}.job.{token[:8]}")


def set_thread_name(name: str) -> None:
    """Rename the current thread; the name shows up in every record."""
    threading.current_thread().name = name
