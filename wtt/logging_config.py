"""Logging configuration for wtt"""
import logging
import sys


class ColoredFormatter(logging.Formatter):
    """Custom formatter that adds colors to log levels in terminal output."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'RESET': '\033[0m'
    }

    def format(self, record):
        """Format log record with colors if stderr is a terminal."""
        if sys.stderr.isatty() and record.levelname in self.COLORS:
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """
    Configure logging for a wtt invocation.

    Args:
        verbose: If True, show INFO level messages (each step taken)
        debug: If True, show DEBUG level messages including git output
    """
    if debug:
        level = logging.DEBUG
        formatter = ColoredFormatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    elif verbose:
        level = logging.INFO
        formatter = ColoredFormatter(fmt='%(levelname)s: %(message)s')
    else:
        level = logging.WARNING
        formatter = ColoredFormatter(fmt='%(levelname)s: %(message)s')

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
