"""Utility modules for PixelScope."""

from .color import ColorConverter, rgb_to_hex
from .config import AnalysisConfig, ConfigError, ConfigManager, InsightThresholds
from .logging import get_logger, setup_logging

__all__ = [
    "AnalysisConfig",
    "ColorConverter",
    "ConfigError",
    "ConfigManager",
    "InsightThresholds",
    "get_logger",
    "rgb_to_hex",
    "setup_logging",
]
