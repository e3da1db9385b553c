"""Logging configuration for PixelScope."""

import logging
import sys
import time
from pathlib import Path
from typing import Dict, Optional

import colorlog


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    enable_colors: bool = True,
    format_string: Optional[str] = None,
) -> None:
    """Setup logging configuration for PixelScope.

    Args:
        level: Logging level
        log_file: Optional log file path
        enable_colors: Whether to use colored output
        format_string: Custom format string
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    use_colors = enable_colors and sys.stderr.isatty()

    if format_string is None:
        if use_colors:
            format_string = "%(log_color)s%(levelname)-8s%(reset)s %(blue)s%(name)s%(reset)s: %(message)s"
        else:
            format_string = "%(asctime)s - %(levelname)-8s - %(name)s - %(message)s"

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)

    if use_colors:
        formatter = colorlog.ColoredFormatter(
            format_string,
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )
    else:
        formatter = logging.Formatter(format_string, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler.setFormatter(formatter)

    handlers = [console_handler]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.DEBUG)  # Always debug level for file

        file_formatter = logging.Formatter(
            "%(asctime)s - %(levelname)-8s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        file_handler.setFormatter(file_formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    _configure_library_loggers(level)


def _configure_library_loggers(level: int) -> None:
    """Configure logging levels for third-party libraries."""
    logging.getLogger("PIL").setLevel(logging.WARNING)

    logging.getLogger("pixelscope").setLevel(level)


class PerformanceLogger:
    """Logger for timing analysis stages."""

    def __init__(self, name: str = "pixelscope.performance"):
        """Initialize performance logger."""
        self.logger = logging.getLogger(name)
        self.timers: Dict[str, float] = {}

    def start_timer(self, name: str) -> None:
        """Start a performance timer.

        Args:
            name: Timer name
        """
        self.timers[name] = time.perf_counter()

    def end_timer(self, name: str) -> float:
        """End a performance timer and log result.

        Args:
            name: Timer name

        Returns:
            Elapsed time in seconds
        """
        if name not in self.timers:
            self.logger.warning(f"Timer '{name}' was not started")
            return 0.0

        elapsed = time.perf_counter() - self.timers.pop(name)

        self.logger.debug(f"{name}: {elapsed * 1000:.1f}ms")
        return elapsed


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
