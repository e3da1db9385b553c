"""Rule-based, human-readable observations about an image."""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from ..utils.config import InsightThresholds
from .results import PaletteColor
from .statistics import ImageStatistics


@dataclass(frozen=True)
class InsightContext:
    """Read-only view of everything the rules may look at."""

    statistics: ImageStatistics
    palette: Tuple[PaletteColor, ...]
    width: int
    height: int
    has_visible_pixels: bool
    thresholds: InsightThresholds


@dataclass(frozen=True)
class InsightRule:
    """One entry of the rule table."""

    key: str
    applies: Callable[[InsightContext], bool]
    message: str


INSIGHT_RULES: Tuple[InsightRule, ...] = (
    InsightRule(
        "transparent",
        lambda ctx: not ctx.has_visible_pixels,
        "Image is fully transparent; color statistics are unavailable.",
    ),
    InsightRule(
        "dark",
        lambda ctx: ctx.has_visible_pixels
        and ctx.statistics.brightness < ctx.thresholds.dark_below,
        "Image appears dark or underexposed.",
    ),
    InsightRule(
        "bright",
        lambda ctx: ctx.statistics.brightness > ctx.thresholds.bright_above,
        "Image appears very bright, highlights may be overexposed.",
    ),
    InsightRule(
        "flat",
        lambda ctx: ctx.has_visible_pixels
        and ctx.statistics.contrast < ctx.thresholds.low_contrast_below,
        "Image appears flat with a low dynamic range.",
    ),
    InsightRule(
        "punchy",
        lambda ctx: ctx.statistics.contrast > ctx.thresholds.high_contrast_above,
        "Image has strong contrast between light and dark areas.",
    ),
    InsightRule(
        "detailed",
        lambda ctx: ctx.statistics.entropy > ctx.thresholds.high_entropy_above,
        "Image has fine detail or noise across many tones.",
    ),
    InsightRule(
        "simple",
        lambda ctx: ctx.has_visible_pixels
        and ctx.statistics.entropy < ctx.thresholds.low_entropy_below,
        "Image uses only a few tones, typical of graphics or flat artwork.",
    ),
    InsightRule(
        "uniform",
        lambda ctx: any(
            entry.percentage > ctx.thresholds.uniform_share_above for entry in ctx.palette
        ),
        "Image is visually uniform, dominated by a single color.",
    ),
    InsightRule(
        "colorful",
        lambda ctx: len(ctx.palette) >= ctx.thresholds.colorful_palette_min,
        "Image has a rich, varied color palette.",
    ),
    InsightRule(
        "panoramic",
        lambda ctx: ctx.width >= ctx.thresholds.panoramic_ratio * ctx.height,
        "Image has a wide, panoramic format.",
    ),
    InsightRule(
        "portrait",
        lambda ctx: ctx.height > ctx.width,
        "Image is in portrait orientation.",
    ),
)


class InsightGenerator:
    """Evaluates the rule table in order; every matching rule contributes."""

    def __init__(
        self,
        thresholds: Optional[InsightThresholds] = None,
        rules: Sequence[InsightRule] = INSIGHT_RULES,
    ):
        self.thresholds = thresholds or InsightThresholds()
        self.rules = tuple(rules)

    def evaluate(
        self,
        statistics: ImageStatistics,
        palette: Sequence[PaletteColor],
        width: int,
        height: int,
        has_visible_pixels: bool = True,
    ) -> Tuple[InsightRule, ...]:
        """Return the matching rules, in table order."""
        ctx = InsightContext(
            statistics=statistics,
            palette=tuple(palette),
            width=width,
            height=height,
            has_visible_pixels=has_visible_pixels,
            thresholds=self.thresholds,
        )
        return tuple(rule for rule in self.rules if rule.applies(ctx))

    def generate(
        self,
        statistics: ImageStatistics,
        palette: Sequence[PaletteColor],
        width: int,
        height: int,
        has_visible_pixels: bool = True,
    ) -> Tuple[str, ...]:
        """Messages of the matching rules, in table order."""
        matched = self.evaluate(statistics, palette, width, height, has_visible_pixels)
        return tuple(rule.message for rule in matched)
