"""Tests for dominant palette extraction."""

import numpy as np
import pytest

from pixelscope.analysis.palette import PaletteExtractor
from pixelscope.analysis.results import PaletteColor

from conftest import aggregate, buffer_from_pixels, solid_buffer

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)


class TestPaletteExtractor:
    """Top-K selection, thresholds and ordering."""

    def setup_method(self):
        self.extractor = PaletteExtractor(palette_size=5, min_share=1.0, merge_distance=10.0)

    def test_uniform_image_is_one_full_color(self):
        palette = self.extractor.extract(aggregate(solid_buffer(6, 4, (18, 52, 86, 255))))

        assert palette == (PaletteColor("#123456", 100.0),)
        assert palette[0].rgb == (18, 52, 86)

    def test_sorted_by_share(self):
        state = aggregate(buffer_from_pixels([RED, RED, RED, BLUE]))

        palette = self.extractor.extract(state)

        assert [(p.hex, p.percentage) for p in palette] == [
            ("#ff0000", 75.0),
            ("#0000ff", 25.0),
        ]

    def test_ties_broken_by_lower_bucket_index(self):
        # blue quantizes to bucket 7, red to bucket 448
        state = aggregate(buffer_from_pixels([RED, BLUE, RED, BLUE]))

        palette = self.extractor.extract(state)

        assert [p.hex for p in palette] == ["#0000ff", "#ff0000"]

    def test_minor_colors_below_threshold_are_dropped(self):
        state = aggregate(buffer_from_pixels([RED] * 199 + [GREEN]))

        palette = self.extractor.extract(state)

        assert palette == (PaletteColor("#ff0000", 99.5),)

    def test_top_k_limit(self):
        colors = [
            (255, 0, 0, 255),
            (0, 255, 0, 255),
            (0, 0, 255, 255),
            (255, 255, 0, 255),
            (0, 0, 0, 255),
            (255, 255, 255, 255),
        ]
        state = aggregate(buffer_from_pixels(colors))

        assert len(PaletteExtractor(palette_size=3).extract(state)) == 3
        assert len(PaletteExtractor(palette_size=10).extract(state)) == 6

    def test_shares_are_floored_to_one_decimal(self):
        state = aggregate(buffer_from_pixels([RED, GREEN, BLUE]))

        palette = self.extractor.extract(state)

        assert [p.percentage for p in palette] == [33.3, 33.3, 33.3]

    def test_opacity_weighted_shares(self):
        state = aggregate(buffer_from_pixels([RED, (0, 0, 255, 85)]))

        palette = self.extractor.extract(state)

        assert [(p.hex, p.percentage) for p in palette] == [
            ("#ff0000", 75.0),
            ("#0000ff", 25.0),
        ]

    def test_transparent_image_has_empty_palette(self):
        state = aggregate(solid_buffer(5, 5, (255, 0, 0, 0)))

        assert self.extractor.extract(state) == ()

    def test_noise_respects_share_invariants(self, noise_buffer):
        palette = PaletteExtractor(palette_size=8).extract(aggregate(noise_buffer, levels=16))

        assert sum(p.percentage for p in palette) <= 100.0
        assert all(p.percentage >= 1.0 for p in palette)
        shares = [p.percentage for p in palette]
        assert shares == sorted(shares, reverse=True)

    @pytest.mark.parametrize("kwargs", [{"palette_size": 0}, {"min_share": -1}, {"merge_distance": -0.5}])
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(ValueError):
            PaletteExtractor(**kwargs)


class TestBucketMerging:
    """Neighbouring buckets across a quantization edge count as one color."""

    def setup_method(self):
        # 31 and 32 fall in different buckets at 8 levels
        pixels = [(31, 100, 100, 255)] * 6 + [(32, 100, 100, 255)] * 4
        self.state = aggregate(buffer_from_pixels(pixels), levels=8)

    def test_adjacent_buckets_merge(self):
        palette = PaletteExtractor(merge_distance=10.0).extract(self.state)

        assert palette == (PaletteColor("#1f6464", 100.0),)

    def test_merging_can_be_disabled(self):
        palette = PaletteExtractor(merge_distance=0.0).extract(self.state)

        assert [(p.hex, p.percentage) for p in palette] == [
            ("#1f6464", 60.0),
            ("#206464", 40.0),
        ]

    def test_distant_colors_never_merge(self):
        state = aggregate(buffer_from_pixels([RED, GREEN]))

        palette = PaletteExtractor(merge_distance=50.0).extract(state)

        assert len(palette) == 2

    def test_merged_weight_can_reorder(self):
        # Bucket A is heaviest alone, B plus its neighbour outweigh it
        pixels = (
            [(200, 200, 20, 255)] * 5
            + [(31, 100, 100, 255)] * 4
            + [(32, 100, 100, 255)] * 3
        )
        state = aggregate(buffer_from_pixels(pixels), levels=8)

        palette = PaletteExtractor(merge_distance=10.0).extract(state)

        assert [p.hex for p in palette] == ["#1f6464", "#c8c814"]
        assert palette[0].percentage == pytest.approx(58.3)
        assert np.isclose(sum(p.percentage for p in palette), 99.9)
