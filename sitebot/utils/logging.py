"""
Logging utilities for SiteBot.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Third-party loggers that are only interesting when something goes wrong
NOISY_LOGGERS = (
    'urllib3',
    'requests',
    'transformers',
    'sentence_transformers',
    'werkzeug',
)


def _owned_handlers(logger: logging.Logger) -> List[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, '_sitebot_handler', False)]


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None,
                  enable_console: bool = True, max_bytes: int = 5 * 1024 * 1024,
                  backup_count: int = 3) -> None:
    """Configure the root logger for SiteBot.

    Calling this again replaces the handlers installed by a previous call, so
    the CLI and the web app can both set it up in the same process. The log
    file rotates at ``max_bytes`` because the webhook service runs for days.
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in _owned_handlers(root_logger):
        root_logger.removeHandler(handler)
        handler.close()

    handlers: List[logging.Handler] = []
    if enable_console:
        handlers.append(logging.StreamHandler(sys.stdout))

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8'))

    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        handler._sitebot_handler = True
        root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the given name."""
    return logging.getLogger(name)


class _ListHandler(logging.Handler):
    """Keeps emitted records in memory."""

    def __init__(self, level: int):
        super().__init__(level)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


class LogCapture:
    """Context manager collecting records from a logger subtree (tests).

    Defaults to the ``sitebot`` logger, which every module logger sits under.
    """

    def __init__(self, logger_name: Optional[str] = None, level: int = logging.INFO):
        self.logger_name = logger_name or 'sitebot'
        self.level = level
        self.handler: Optional[_ListHandler] = None
        self._previous_level = logging.NOTSET

    def __enter__(self):
        logger = logging.getLogger(self.logger_name)
        self.handler = _ListHandler(self.level)
        self._previous_level = logger.level
        if logger.level == logging.NOTSET or logger.level > self.level:
            logger.setLevel(self.level)
        logger.addHandler(self.handler)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        logger = logging.getLogger(self.logger_name)
        logger.removeHandler(self.handler)
        logger.setLevel(self._previous_level)

    @property
    def records(self) -> List[logging.LogRecord]:
        return self.handler.records if self.handler else []

    def get_messages(self, level: Optional[int] = None) -> List[str]:
        """Captured messages, optionally only those at ``level`` or above."""
        return [record.getMessage() for record in self.records
                if level is None or record.levelno >= level]
