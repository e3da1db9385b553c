"""Tests for the single-pass aggregator."""

import numpy as np
import pytest

from pixelscope.analysis.aggregator import Aggregator, bucket_indices
from pixelscope.analysis.sampler import PixelSampler

from conftest import aggregate, buffer_from_pixels, solid_buffer


class TestAggregator:
    """Accumulators reflect opacity-weighted samples exactly."""

    def test_black_and_white_sums(self):
        state = aggregate(buffer_from_pixels([(255, 255, 255, 255), (0, 0, 0, 255)]))

        assert state.sample_count == 2
        assert state.total_alpha == 510
        assert state.total_weight == pytest.approx(2.0)
        assert state.channel_sums.tolist() == [255 * 255] * 3
        assert state.luminance_sum == 255 * 255 * 1000
        assert state.luminance_histogram[0] == 255
        assert state.luminance_histogram[255] == 255
        assert state.luminance_histogram.sum() == 510

    def test_partial_alpha_contributes_proportionally(self):
        state = aggregate(buffer_from_pixels([(200, 0, 0, 255), (200, 0, 0, 51)]))

        assert state.total_alpha == 306
        assert state.channel_sums[0] == 200 * 306

    def test_transparent_pixels_do_not_count(self):
        state = aggregate(buffer_from_pixels([(10, 10, 10, 0), (90, 90, 90, 255)]))

        assert state.sample_count == 1
        assert state.channel_sums.tolist() == [90 * 255] * 3

    def test_luminance_bins_use_rec601_weights(self):
        state = aggregate(
            buffer_from_pixels(
                [(255, 0, 0, 255), (0, 255, 0, 255), (0, 0, 255, 255)]
            )
        )

        nonzero = np.flatnonzero(state.luminance_histogram).tolist()
        # 0.299 * 255, 0.587 * 255 and 0.114 * 255 rounded half up
        assert nonzero == [29, 76, 150]

    def test_bucket_weights_and_centroids(self):
        state = aggregate(
            buffer_from_pixels([(250, 10, 10, 255), (240, 20, 0, 255)]), levels=8
        )

        red_bucket = 7 * 64
        assert state.bucket_weights[red_bucket] == 510
        assert np.count_nonzero(state.bucket_weights) == 1
        assert state.bucket_centroids(np.array([red_bucket])).tolist() == [[245, 15, 5]]

    def test_empty_state(self):
        state = aggregate(solid_buffer(3, 3, (0, 0, 0, 0)))

        assert state.is_empty
        assert state.total_weight == 0
        assert state.bucket_weights.sum() == 0

    def test_state_is_read_only(self):
        state = aggregate(solid_buffer(2, 2, (1, 2, 3, 255)))

        with pytest.raises(ValueError):
            state.bucket_weights[0] = 1
        with pytest.raises(ValueError):
            state.luminance_histogram[0] = 1

    def test_add_after_finalize_is_rejected(self):
        buffer = solid_buffer(2, 2, (1, 2, 3, 255))
        aggregator = Aggregator()
        aggregator.consume(PixelSampler(buffer).iter_chunks())

        with pytest.raises(RuntimeError):
            aggregator.add(next(PixelSampler(buffer).iter_chunks()))

    def test_finalize_is_idempotent(self):
        aggregator = Aggregator()
        assert aggregator.finalize() is aggregator.finalize()

    @pytest.mark.parametrize("levels", [1, 257])
    def test_invalid_levels(self, levels):
        with pytest.raises(ValueError):
            Aggregator(levels=levels)


class TestBucketIndices:
    def test_corners_of_the_cube(self):
        rgb = np.array([[0, 0, 0], [255, 255, 255], [0, 0, 255], [255, 0, 0]])

        assert bucket_indices(rgb, 8).tolist() == [0, 511, 7, 448]
        assert bucket_indices(rgb, 4).tolist() == [0, 63, 3, 48]
