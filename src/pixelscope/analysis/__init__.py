"""Pixel statistics and palette extraction engine."""

from .aggregator import AggregateState, Aggregator
from .analyzer import ImageAnalyzer, analyze, analyze_rgba
from .insights import INSIGHT_RULES, InsightGenerator, InsightRule
from .palette import PaletteExtractor
from .results import AverageColor, ImageAnalysis, PaletteColor
from .sampler import ColorSample, PixelBuffer, PixelSampler, SampleChunk
from .statistics import ImageStatistics, aspect_ratio, compute_statistics

__all__ = [
    "AggregateState",
    "Aggregator",
    "AverageColor",
    "ColorSample",
    "INSIGHT_RULES",
    "ImageAnalysis",
    "ImageAnalyzer",
    "ImageStatistics",
    "InsightGenerator",
    "InsightRule",
    "PaletteColor",
    "PaletteExtractor",
    "PixelBuffer",
    "PixelSampler",
    "SampleChunk",
    "analyze",
    "analyze_rgba",
    "aspect_ratio",
    "compute_statistics",
]
