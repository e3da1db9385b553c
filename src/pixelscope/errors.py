"""Exceptions raised by PixelScope."""


class InvalidInput(ValueError):
    """Raised when a pixel buffer is malformed.

    Covers non-positive dimensions and buffers whose length differs from
    ``width * height * 4``. No partial result accompanies this error.
    """


class ImageLoadError(Exception):
    """Raised when an image file is rejected or cannot be decoded."""
