"""Entry point of the analysis engine."""

from typing import Optional

from ..utils.config import AnalysisConfig
from ..utils.logging import PerformanceLogger, get_logger
from .aggregator import Aggregator
from .insights import InsightGenerator
from .palette import PaletteExtractor
from .results import ImageAnalysis
from .sampler import BufferLike, PixelBuffer, PixelSampler
from .statistics import compute_statistics

logger = get_logger(__name__)


class ImageAnalyzer:
    """Runs sampler -> aggregator -> statistics/palette -> insights.

    An analyzer holds configuration only. Each ``analyze`` call builds its
    own aggregate state, so one instance may serve concurrent callers.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        """Initialize analyzer.

        Args:
            config: Engine configuration, defaults to ``AnalysisConfig()``
        """
        self.config = config or AnalysisConfig()
        self.palette_extractor = PaletteExtractor(
            palette_size=self.config.palette_size,
            min_share=self.config.min_share,
            merge_distance=self.config.merge_distance,
        )
        self.insight_generator = InsightGenerator(self.config.thresholds)

    def analyze(self, buffer: PixelBuffer) -> ImageAnalysis:
        """Analyze one decoded bitmap.

        Args:
            buffer: RGBA pixels with their dimensions

        Returns:
            Immutable analysis summary

        Raises:
            InvalidInput: If the buffer is malformed
        """
        perf = PerformanceLogger()
        perf.start_timer("analysis")

        sampler = PixelSampler(buffer, max_samples=self.config.max_samples)
        state = Aggregator(levels=self.config.levels).consume(sampler.iter_chunks())

        width, height = sampler.width, sampler.height
        statistics = compute_statistics(state, width, height)
        palette = self.palette_extractor.extract(state)
        insights = self.insight_generator.generate(
            statistics,
            palette,
            width,
            height,
            has_visible_pixels=not state.is_empty,
        )

        perf.end_timer("analysis")
        logger.debug(
            f"Analyzed {width}x{height} image: {state.sample_count} samples, "
            f"{len(palette)} palette colors, {len(insights)} insights"
        )

        return ImageAnalysis(
            width=width,
            height=height,
            aspect_ratio=statistics.aspect_ratio,
            entropy=statistics.entropy,
            average_color=statistics.average_color,
            brightness=statistics.brightness,
            contrast=statistics.contrast,
            palette=palette,
            insights=insights,
        )


def analyze(buffer: PixelBuffer, config: Optional[AnalysisConfig] = None) -> ImageAnalysis:
    """Analyze one decoded bitmap with the given (or default) configuration."""
    return ImageAnalyzer(config).analyze(buffer)


def analyze_rgba(
    width: int,
    height: int,
    data: BufferLike,
    config: Optional[AnalysisConfig] = None,
) -> ImageAnalysis:
    """Convenience wrapper taking the bitmap fields directly."""
    return analyze(PixelBuffer(width, height, data), config)
