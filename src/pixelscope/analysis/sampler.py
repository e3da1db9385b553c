"""Pixel sampling for the analysis pipeline."""

import math
from dataclasses import dataclass
from typing import Iterator, Union

import numpy as np

from ..errors import InvalidInput
from ..utils.logging import get_logger

logger = get_logger(__name__)

BufferLike = Union[bytes, bytearray, memoryview, np.ndarray]

CHANNELS = 4
_CHUNK_PIXELS = 65536


@dataclass(frozen=True)
class PixelBuffer:
    """Decoded bitmap handed over by an external decoder.

    ``data`` holds ``width * height`` RGBA pixels, row-major, one byte per
    channel (sRGB, straight alpha).
    """

    width: int
    height: int
    data: BufferLike

    def validate(self) -> None:
        """Raise ``InvalidInput`` unless dimensions and length agree."""
        for name, value in (("width", self.width), ("height", self.height)):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise InvalidInput(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise InvalidInput(f"{name} must be positive, got {value}")

        if isinstance(self.data, np.ndarray):
            if self.data.dtype != np.uint8:
                raise InvalidInput(f"pixel array must be uint8, got {self.data.dtype}")
            length = self.data.size
        elif isinstance(self.data, (bytes, bytearray, memoryview)):
            length = memoryview(self.data).nbytes
        else:
            raise InvalidInput(
                f"pixel data must be bytes-like or a numpy array, got {type(self.data).__name__}"
            )

        expected = int(self.width) * int(self.height) * CHANNELS
        if length != expected:
            raise InvalidInput(
                f"buffer holds {length} bytes, expected {expected} "
                f"for {self.width}x{self.height} RGBA"
            )

    def as_array(self) -> np.ndarray:
        """Return the pixels as a read-only ``(height, width, 4)`` uint8 view."""
        self.validate()
        if isinstance(self.data, np.ndarray):
            flat = np.ascontiguousarray(self.data).reshape(-1)
        else:
            view = memoryview(self.data)
            if view.c_contiguous:
                flat = np.frombuffer(view.cast("B"), dtype=np.uint8)
            else:
                flat = np.frombuffer(view.tobytes(), dtype=np.uint8)
        array = flat.reshape(int(self.height), int(self.width), CHANNELS)
        array.flags.writeable = False
        return array


@dataclass(frozen=True)
class ColorSample:
    """One visible pixel with its opacity weight in (0, 1]."""

    r: int
    g: int
    b: int
    weight: float


@dataclass(frozen=True)
class SampleChunk:
    """A band of visible pixels.

    ``alpha`` is kept as the integer 1-255 so that downstream sums stay
    exact; the sample weight is ``alpha / 255``.
    """

    rgb: np.ndarray
    alpha: np.ndarray

    def __len__(self) -> int:
        return int(self.alpha.shape[0])


def compute_stride(width: int, height: int, max_samples: int) -> int:
    """Smallest stride for which the strided grid fits in ``max_samples``."""
    if max_samples < 1:
        raise ValueError("max_samples must be at least 1")

    stride = max(1, math.isqrt((width * height) // max_samples))
    while math.ceil(width / stride) * math.ceil(height / stride) > max_samples:
        stride += 1
    return stride


class PixelSampler:
    """Turns a ``PixelBuffer`` into opacity-weighted color samples.

    Fully transparent pixels are skipped. Large images are read on a fixed
    stride grid that depends only on the dimensions and ``max_samples``, so
    the same buffer always yields the same samples.
    """

    def __init__(self, buffer: PixelBuffer, max_samples: int = 250_000):
        """Initialize sampler.

        Args:
            buffer: Decoded RGBA bitmap
            max_samples: Pixel budget before stride sub-sampling kicks in

        Raises:
            InvalidInput: If the buffer is malformed
        """
        self._pixels = buffer.as_array()
        self.width = int(buffer.width)
        self.height = int(buffer.height)
        self.stride = compute_stride(self.width, self.height, max_samples)

        if self.stride > 1:
            logger.debug(
                f"Sub-sampling {self.width}x{self.height} image with stride {self.stride}"
            )

    def iter_chunks(self) -> Iterator[SampleChunk]:
        """Lazily yield visible pixels band by band, in row-major order."""
        grid = self._pixels[:: self.stride, :: self.stride]
        rows_per_chunk = max(1, _CHUNK_PIXELS // grid.shape[1])

        for top in range(0, grid.shape[0], rows_per_chunk):
            band = grid[top : top + rows_per_chunk].reshape(-1, CHANNELS)
            alpha = band[:, 3]
            visible = alpha > 0
            if not visible.any():
                continue
            yield SampleChunk(
                rgb=band[visible, :3],
                alpha=alpha[visible].astype(np.int64),
            )

    def iter_samples(self) -> Iterator[ColorSample]:
        """Lazily yield one ``ColorSample`` per visible sampled pixel."""
        for chunk in self.iter_chunks():
            for (r, g, b), a in zip(chunk.rgb.tolist(), chunk.alpha.tolist()):
                yield ColorSample(r=r, g=g, b=b, weight=a / 255.0)
