"""Single-pass accumulation of color and luminance statistics."""

from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np

from ..utils.logging import get_logger
from .sampler import SampleChunk

logger = get_logger(__name__)

LUMINANCE_BINS = 256

# Rec. 601 luma weights scaled by 1000 so the sums stay integral
LUMA_WEIGHTS = np.array([299, 587, 114], dtype=np.int64)
LUMA_SCALE = 1000


def luminance_bin(scaled_luma: np.ndarray) -> np.ndarray:
    """Map luminance scaled by LUMA_SCALE to integer bins 0-255 (round half up)."""
    return (scaled_luma + LUMA_SCALE // 2) // LUMA_SCALE


def bucket_indices(rgb: np.ndarray, levels: int) -> np.ndarray:
    """Quantize RGB rows to flat palette bucket indices."""
    q = rgb.astype(np.int64) * levels // 256
    return (q[:, 0] * levels + q[:, 1]) * levels + q[:, 2]


@dataclass(frozen=True)
class AggregateState:
    """Accumulated sums of one analysis pass.

    Every weighted quantity is scaled by the pixel alpha (1-255) rather than
    by ``alpha / 255``, so all accumulators are exact integers. Divide by
    ``ALPHA_MAX`` (or by ``total_alpha``) when reading.
    """

    levels: int
    sample_count: int
    total_alpha: int
    channel_sums: np.ndarray
    luminance_sum: int
    luminance_histogram: np.ndarray
    bucket_weights: np.ndarray
    bucket_channel_sums: np.ndarray

    ALPHA_MAX = 255

    @property
    def total_weight(self) -> float:
        """Total opacity-weighted sample count."""
        return self.total_alpha / self.ALPHA_MAX

    @property
    def is_empty(self) -> bool:
        return self.total_alpha == 0

    def bucket_centroids(self, indices: np.ndarray) -> np.ndarray:
        """Weighted mean colors of non-empty buckets, rounded half up."""
        weights = self.bucket_weights[indices][:, None]
        if (weights == 0).any():
            raise ValueError("Centroid requested for an empty bucket")
        sums = self.bucket_channel_sums[indices]
        return np.clip((2 * sums + weights) // (2 * weights), 0, 255)


class Aggregator:
    """Consumes sample chunks once and builds an ``AggregateState``."""

    def __init__(self, levels: int = 8):
        """Initialize aggregator.

        Args:
            levels: Quantization levels per channel for palette buckets
        """
        if not 2 <= levels <= 256:
            raise ValueError(f"levels must be in [2, 256], got {levels}")

        self.levels = levels
        self.num_buckets = levels**3

        self._sample_count = 0
        self._total_alpha = 0
        self._channel_sums = np.zeros(3, dtype=np.int64)
        self._luminance_sum = 0
        self._luminance_histogram = np.zeros(LUMINANCE_BINS, dtype=np.int64)
        self._bucket_weights = np.zeros(self.num_buckets, dtype=np.int64)
        self._bucket_channel_sums = np.zeros((self.num_buckets, 3), dtype=np.int64)
        self._state: Optional[AggregateState] = None

    def add(self, chunk: SampleChunk) -> None:
        """Fold one chunk of samples into the running sums."""
        if self._state is not None:
            raise RuntimeError("Aggregator already finalized")
        if len(chunk) == 0:
            return

        rgb = chunk.rgb.astype(np.int64)
        alpha = chunk.alpha.astype(np.int64)
        weighted = rgb * alpha[:, None]

        self._sample_count += len(chunk)
        self._total_alpha += int(alpha.sum())
        self._channel_sums += weighted.sum(axis=0)

        scaled_luma = rgb @ LUMA_WEIGHTS
        self._luminance_sum += int((scaled_luma * alpha).sum())
        bins = luminance_bin(scaled_luma)
        self._luminance_histogram += _weighted_bincount(bins, alpha, LUMINANCE_BINS)

        buckets = bucket_indices(rgb, self.levels)
        self._bucket_weights += _weighted_bincount(buckets, alpha, self.num_buckets)
        for channel in range(3):
            self._bucket_channel_sums[:, channel] += _weighted_bincount(
                buckets, weighted[:, channel], self.num_buckets
            )

    def consume(self, chunks: Iterable[SampleChunk]) -> AggregateState:
        """Run the single pass over ``chunks`` and return the frozen state."""
        for chunk in chunks:
            self.add(chunk)
        return self.finalize()

    def finalize(self) -> AggregateState:
        """Freeze the accumulators. Further ``add`` calls are rejected."""
        if self._state is None:
            arrays = (
                self._channel_sums,
                self._luminance_histogram,
                self._bucket_weights,
                self._bucket_channel_sums,
            )
            for array in arrays:
                array.flags.writeable = False

            self._state = AggregateState(
                levels=self.levels,
                sample_count=self._sample_count,
                total_alpha=self._total_alpha,
                channel_sums=self._channel_sums,
                luminance_sum=self._luminance_sum,
                luminance_histogram=self._luminance_histogram,
                bucket_weights=self._bucket_weights,
                bucket_channel_sums=self._bucket_channel_sums,
            )
            logger.debug(
                f"Aggregated {self._sample_count} samples into "
                f"{int(np.count_nonzero(self._bucket_weights))} color buckets"
            )
        return self._state


def _weighted_bincount(indices: np.ndarray, weights: np.ndarray, size: int) -> np.ndarray:
    # float64 bincount is exact while a chunk's integer sums stay below 2**53
    counts = np.bincount(indices, weights=weights, minlength=size)
    return np.rint(counts).astype(np.int64)
