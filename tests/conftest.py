"""Shared fixtures for PixelScope tests."""

import numpy as np
import pytest

from pixelscope.analysis.aggregator import Aggregator
from pixelscope.analysis.sampler import PixelBuffer, PixelSampler


def buffer_from_pixels(pixels, width=None, height=None):
    """Build a PixelBuffer from a list of RGBA tuples (one row by default)."""
    array = np.array(pixels, dtype=np.uint8).reshape(-1, 4)
    if width is None:
        width, height = array.shape[0], 1
    return PixelBuffer(width=width, height=height, data=array.tobytes())


def solid_buffer(width, height, rgba):
    """Build a PixelBuffer filled with a single RGBA color."""
    array = np.empty((height, width, 4), dtype=np.uint8)
    array[:, :] = rgba
    return PixelBuffer(width=width, height=height, data=array.tobytes())


def aggregate(buffer, levels=8, max_samples=250_000):
    """Run sampler and aggregator over a buffer."""
    sampler = PixelSampler(buffer, max_samples=max_samples)
    return Aggregator(levels=levels).consume(sampler.iter_chunks())


@pytest.fixture
def gray_ramp_buffer():
    """16x16 image holding every gray level 0-255 exactly once."""
    values = np.arange(256, dtype=np.uint8)
    array = np.stack([values, values, values, np.full(256, 255, np.uint8)], axis=-1)
    return PixelBuffer(width=16, height=16, data=array.tobytes())


@pytest.fixture
def black_white_buffer():
    """16x16 image, left half black, right half white."""
    array = np.zeros((16, 16, 4), dtype=np.uint8)
    array[:, 8:, :3] = 255
    array[:, :, 3] = 255
    return PixelBuffer(width=16, height=16, data=array.tobytes())


@pytest.fixture
def noise_buffer():
    """Seeded random opaque noise image."""
    rng = np.random.default_rng(1234)
    array = rng.integers(0, 256, size=(64, 48, 4), dtype=np.uint8)
    array[:, :, 3] = 255
    return PixelBuffer(width=48, height=64, data=array.tobytes())
