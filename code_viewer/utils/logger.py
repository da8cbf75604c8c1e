# code_viewer/utils/logger.py

import logging
import logging.handlers
import os
from pathlib import Path

DEFAULT_LOG_FILE_NAME = 'code_viewer.log'

# The log file rotates at 5MB and keeps five old copies.
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 5

CONSOLE_FORMAT = '%(asctime)s - [%(levelname)s] - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - [%(levelname)s] - %(filename)s:%(lineno)d - %(message)s'


class LoggerManager:
    """
    Configures the application-wide logging system.

    Two handlers are attached to the root logger:
    1. Console Handler: short lines at the configured `log_level` setting
       (INFO unless settings.json says otherwise).
    2. Rotating File Handler: every DEBUG line with module and line numbers,
       so a bug report can always include the full story.
    """

    def __init__(self, log_file_name: str = DEFAULT_LOG_FILE_NAME, console_level="INFO",
                 log_dir: Path | None = None):
        """
        Initializes the manager.

        Args:
            log_file_name: The name of the log file.
            console_level: Level name (or number) for the console handler.
            log_dir: Where the log file lives. Defaults to the project root.
        """
        base_dir = log_dir if log_dir else Path(__file__).resolve().parents[2]
        self.log_file_path = Path(base_dir) / log_file_name
        self.console_level = console_level
        self.root_logger = logging.getLogger()

    def is_installed(self) -> bool:
        """True if a handler for this manager's log file is already on the root logger."""
        target = os.path.abspath(self.log_file_path)
        return any(
            isinstance(handler, logging.handlers.RotatingFileHandler) and handler.baseFilename == target
            for handler in self.root_logger.handlers
        )

    def setup(self) -> bool:
        """
        Attaches the handlers to the root logger.

        Returns:
            True if handlers were installed, False if this log file was already configured.
        """
        if self.is_installed():
            return False

        self.root_logger.setLevel(logging.DEBUG)
        self.root_logger.addHandler(self._build_handler(
            logging.StreamHandler(), self.console_level, logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S')
        ))
        self.root_logger.addHandler(self._build_handler(
            logging.handlers.RotatingFileHandler(
                self.log_file_path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUP_COUNT, encoding='utf-8'
            ),
            logging.DEBUG, logging.Formatter(FILE_FORMAT)
        ))

        logging.info(f"Logging configured (console: {self.console_level}). Detailed log: {self.log_file_path}")
        return True

    @staticmethod
    def _build_handler(handler: logging.Handler, level, formatter: logging.Formatter) -> logging.Handler:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        return handler


def setup_logging(console_level="INFO", log_dir: Path | None = None) -> bool:
    """Initializes and configures the application-wide logging system."""
    manager = LoggerManager(console_level=console_level, log_dir=log_dir)
    return manager.setup()
