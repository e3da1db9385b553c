"""Dominant palette extraction from quantized color buckets."""

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from ..utils.color import ColorConverter, rgb_to_hex
from ..utils.logging import get_logger
from .aggregator import AggregateState
from .results import PaletteColor

logger = get_logger(__name__)


@dataclass
class _Cluster:
    """A kept bucket plus everything merged into it."""

    index: int
    weight: int
    rgb: Tuple[int, int, int]


class PaletteExtractor:
    """Reduces the bucket histogram to the top-K dominant colors.

    Buckets are visited heaviest first (ties: lower bucket index first). A
    bucket whose centroid is within ``merge_distance`` (CIE76 Delta E) of an
    already kept color is folded into the closest one, so neighbouring
    buckets on either side of a quantization edge count as one color.
    """

    def __init__(
        self,
        palette_size: int = 5,
        min_share: float = 1.0,
        merge_distance: float = 10.0,
    ):
        """Initialize palette extractor.

        Args:
            palette_size: Maximum number of colors returned
            min_share: Minimum percentage a color needs to be reported
            merge_distance: Delta E below which buckets are merged, 0 disables
        """
        if palette_size < 1:
            raise ValueError("palette_size must be at least 1")
        if min_share < 0 or merge_distance < 0:
            raise ValueError("min_share and merge_distance must be non-negative")

        self.palette_size = palette_size
        self.min_share = min_share
        self.merge_distance = merge_distance
        self.color_converter = ColorConverter()

    def extract(self, state: AggregateState) -> Tuple[PaletteColor, ...]:
        """Extract the dominant palette.

        Args:
            state: Aggregate state of a completed pass

        Returns:
            Palette entries sorted by descending percentage, possibly empty
        """
        if state.is_empty:
            return ()

        clusters = self._merge(self._ordered_buckets(state))
        clusters.sort(key=lambda c: (-c.weight, c.index))

        palette: List[PaletteColor] = []
        for cluster in clusters:
            # Floor to one decimal so the shares can never add up past 100
            percentage = (cluster.weight * 1000 // state.total_alpha) / 10
            if percentage < self.min_share:
                # Sorted by weight, nothing further can qualify
                break
            palette.append(
                PaletteColor(
                    hex=rgb_to_hex(cluster.rgb),
                    percentage=percentage,
                    rgb=cluster.rgb,
                )
            )
            if len(palette) == self.palette_size:
                break

        logger.debug(
            f"Palette: {len(palette)} colors from {len(clusters)} merged clusters"
        )
        return tuple(palette)

    def _ordered_buckets(self, state: AggregateState) -> List[_Cluster]:
        indices = np.flatnonzero(state.bucket_weights)
        weights = state.bucket_weights[indices]
        order = np.lexsort((indices, -weights))

        centroids = state.bucket_centroids(indices)

        return [
            _Cluster(
                index=int(indices[i]),
                weight=int(weights[i]),
                rgb=tuple(int(c) for c in centroids[i]),
            )
            for i in order
        ]

    def _merge(self, buckets: List[_Cluster]) -> List[_Cluster]:
        if self.merge_distance <= 0 or len(buckets) < 2:
            return list(buckets)

        labs = self.color_converter.rgb_to_lab(np.array([b.rgb for b in buckets]))

        kept: List[_Cluster] = []
        kept_labs = np.empty((len(buckets), 3), dtype=np.float64)
        for bucket, lab in zip(buckets, labs):
            if kept:
                distances = self.color_converter.calculate_delta_e(
                    kept_labs[: len(kept)], lab
                )
                nearest = int(np.argmin(distances))
                if distances[nearest] < self.merge_distance:
                    kept[nearest].weight += bucket.weight
                    continue
            kept_labs[len(kept)] = lab
            kept.append(_Cluster(bucket.index, bucket.weight, bucket.rgb))

        return kept
