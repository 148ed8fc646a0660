"""Centralized logging configuration for imgman.

Editors built on imgman have no console of their own, so failed captures are
reported through logging. With file logging enabled every ERROR record, the
failed-capture reports included, also goes to a separate errors file that
acts as the plugin's dev console.
"""

import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from datetime import datetime
from typing import Iterable


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Libraries that log per request or per decoded image
NOISY_LOGGERS = ('aiohttp', 'PIL')


def _rotating_handler(
    path: Path,
    level: int,
    formatter: logging.Formatter,
    max_bytes: int,
    backup_count: int
) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_to_file: bool = False,
    log_dir: str = "logs",
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS
):
    """Setup logging for the plugin and its command line entry point.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Also write ``imgman_<date>.log`` and ``imgman_errors_<date>.log``
        log_dir: Directory for log files
        max_bytes: Maximum size of each log file before rotation
        backup_count: Number of backup log files to keep
        quiet_loggers: Third-party loggers limited to WARNING
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_to_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime('%Y%m%d')

        root_logger.addHandler(_rotating_handler(
            log_path / f"imgman_{stamp}.log", numeric_level, formatter, max_bytes, backup_count
        ))
        root_logger.addHandler(_rotating_handler(
            log_path / f"imgman_errors_{stamp}.log", logging.ERROR, formatter, max_bytes, backup_count
        ))

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(f"Logging configured: level={log_level}, file_logging={log_to_file}")
