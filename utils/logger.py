"""
Logging configuration for the exporter.
"""

import os
import sys
import logging
import logging.handlers
from pathlib import Path
import traceback
from datetime import datetime


class LogHandler:
    """Handler for application logs with console and optional file output."""

    def __init__(self, debug=False, log_to_file=True, log_dir=None):
        self.logger = logging.getLogger('mrc2tif')
        self.debug = debug
        self.log_to_file = log_to_file
        self.log_dir = Path(log_dir) if log_dir else None
        self.log_file = None
        self.setup_logger()

        # Register global exception handler
        sys.excepthook = self.handle_exception

    def setup_logger(self):
        """Set up logger with console and file handlers."""
        # Clear any existing handlers
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        level = logging.DEBUG if self.debug else logging.INFO
        self.logger.setLevel(level)

        console_formatter = logging.Formatter('%(levelname)s: %(message)s')
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(console_formatter)
        console_handler.setLevel(level)
        self.logger.addHandler(console_handler)

        if self.log_to_file:
            file_formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(threadName)s - %(filename)s:%(lineno)d - %(message)s'
            )
            log_dir = self.log_dir or self._get_log_directory()
            log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = log_dir / f"mrc2tif_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

            file_handler = logging.handlers.RotatingFileHandler(
                self.log_file, maxBytes=10*1024*1024, backupCount=5
            )
            file_handler.setFormatter(file_formatter)
            file_handler.setLevel(level)
            self.logger.addHandler(file_handler)

        self.logger.debug(f"Logging initialized. Debug mode: {self.debug}")
        if self.log_file:
            self.logger.debug(f"Log file: {self.log_file}")

    def _get_log_directory(self):
        """Return the default log directory."""
        if sys.platform == 'win32':
            base_dir = os.path.expandvars('%LOCALAPPDATA%')
        else:
            base_dir = os.path.expanduser('~')

        return Path(base_dir) / '.mrc2tif' / 'logs'

    def handle_exception(self, exc_type, exc_value, exc_traceback):
        """Handle uncaught exceptions."""
        if issubclass(exc_type, KeyboardInterrupt):
            # Don't log keyboard interrupt
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return

        tb_lines = traceback.format_exception(exc_type, exc_value, exc_traceback)
        tb_text = ''.join(tb_lines)
        self.logger.critical(f"Unhandled exception:\n{tb_text}")

        print(f"An unexpected error occurred: {exc_value}", file=sys.stderr)


def setup_logger(debug=False, log_to_file=True, log_dir=None):
    """Initialize and return the application logger."""
    handler = LogHandler(debug, log_to_file, log_dir)
    return handler.logger

