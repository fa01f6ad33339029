"""
Logging setup for the command-line tools.

Library modules log through logging.getLogger(__name__) and never configure
handlers themselves; scripts call setup_logging() once at start-up.

Usage:
    from pod_parser.logger import setup_logging
    setup_logging(level="INFO")
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Color-coded log formatter for terminal output."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    def __init__(self, fmt=None, datefmt=None, stream=sys.stderr):
        super().__init__(fmt, datefmt)
        self.stream = stream

    def format(self, record):
        message = super().format(record)
        if self.stream.isatty():
            color = self.COLORS.get(record.levelname, '')
            if color:
                message = message.replace(
                    f"[{record.levelname}]",
                    f"[{color}{record.levelname}{self.COLORS['RESET']}]", 1)
        return message


def setup_logging(level: str = "WARNING",
                  debug: bool = False,
                  log_file: Optional[Path] = None) -> logging.Logger:
    """
    Set up logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        debug: If True, enable DEBUG level
        log_file: Path to log file (if None, only console logging)

    Returns:
        The pod_parser package logger
    """
    if debug:
        level = "DEBUG"

    log_level = getattr(logging, level.upper(), logging.WARNING)

    pkg_logger = logging.getLogger('pod_parser')
    pkg_logger.setLevel(log_level)
    for handler in list(pkg_logger.handlers):
        handler.close()
        pkg_logger.removeHandler(handler)

    # Console output goes to stderr so CSV/JSON on stdout stays clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(ColoredFormatter(LOG_FORMAT, DATE_FORMAT, sys.stderr))
    pkg_logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        pkg_logger.addHandler(file_handler)

    return pkg_logger
