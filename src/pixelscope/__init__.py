"""PixelScope: pixel statistics, dominant palettes and quick insights for images."""

__version__ = "0.1.0"
__author__ = "PixelScope Team"

from .analysis import ImageAnalysis, ImageAnalyzer, PixelBuffer, analyze, analyze_rgba
from .errors import ImageLoadError, InvalidInput
from .utils.config import AnalysisConfig

__all__ = [
    "AnalysisConfig",
    "ImageAnalysis",
    "ImageAnalyzer",
    "ImageLoadError",
    "InvalidInput",
    "PixelBuffer",
    "analyze",
    "analyze_rgba",
]
