"""Closed-form image statistics derived from an ``AggregateState``."""

import math
from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

from .aggregator import LUMA_SCALE, AggregateState
from .results import SENTINEL_AVERAGE_COLOR, AverageColor

# Largest population standard deviation of values confined to [0, 255]
MAX_LUMINANCE_STD = 127.5
MAX_ENTROPY = 8.0

COMMON_RATIOS: Dict[Tuple[int, int], str] = {
    (1, 1): "1:1",
    (4, 3): "4:3",
    (3, 2): "3:2",
    (16, 9): "16:9",
    (9, 16): "9:16",
    (7, 3): "21:9",
}


@dataclass(frozen=True)
class ImageStatistics:
    """Scalar statistics of one image."""

    average_color: AverageColor
    brightness: int
    contrast: int
    entropy: float
    aspect_ratio: str


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _div_round(numerator: int, denominator: int) -> int:
    """Integer division rounded half up, for non-negative operands."""
    return (2 * numerator + denominator) // (2 * denominator)


def average_color(state: AggregateState) -> AverageColor:
    """Opacity-weighted mean color, or mid-gray when nothing is visible."""
    if state.is_empty:
        return SENTINEL_AVERAGE_COLOR

    r, g, b = (
        min(255, max(0, _div_round(int(total), state.total_alpha)))
        for total in state.channel_sums
    )
    return AverageColor(r, g, b)


def brightness(state: AggregateState) -> int:
    """Mean luminance as an integer percentage of full white."""
    if state.is_empty:
        return 0

    denominator = LUMA_SCALE * 255 * state.total_alpha
    return min(100, _div_round(state.luminance_sum * 100, denominator))


def contrast(state: AggregateState) -> int:
    """Luminance standard deviation as a percentage of the largest possible one."""
    histogram = state.luminance_histogram
    total = int(histogram.sum())
    if total == 0:
        return 0

    levels = np.arange(histogram.shape[0], dtype=np.float64)
    weights = histogram.astype(np.float64)
    mean = float((levels * weights).sum()) / total
    variance = float((((levels - mean) ** 2) * weights).sum()) / total
    std = math.sqrt(max(0.0, variance))

    return min(100, max(0, _round_half_up(std / MAX_LUMINANCE_STD * 100)))


def entropy(state: AggregateState) -> float:
    """Shannon entropy of the luminance histogram, in bits, two decimals."""
    histogram = state.luminance_histogram
    total = int(histogram.sum())
    if total == 0:
        return 0.0

    probabilities = histogram[histogram > 0].astype(np.float64) / total
    bits = float(-(probabilities * np.log2(probabilities)).sum())

    # max() also turns -0.0 into 0.0
    return min(MAX_ENTROPY, max(0.0, round(bits, 2)))


def aspect_ratio(width: int, height: int) -> str:
    """Reduced ``W:H`` ratio, using the common label when there is one.

    >>> aspect_ratio(1920, 1080)
    '16:9'
    >>> aspect_ratio(2100, 900)
    '21:9'
    >>> aspect_ratio(101, 100)
    '101:100'
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Dimensions must be positive, got {width}x{height}")

    divisor = math.gcd(width, height)
    reduced = (width // divisor, height // divisor)
    return COMMON_RATIOS.get(reduced, f"{reduced[0]}:{reduced[1]}")


def compute_statistics(state: AggregateState, width: int, height: int) -> ImageStatistics:
    """Derive every scalar statistic from the aggregate state."""
    return ImageStatistics(
        average_color=average_color(state),
        brightness=brightness(state),
        contrast=contrast(state),
        entropy=entropy(state),
        aspect_ratio=aspect_ratio(width, height),
    )
