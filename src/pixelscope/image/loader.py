"""Image file admission and decoding for PixelScope."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from ..analysis.sampler import PixelBuffer
from ..errors import ImageLoadError
from ..utils.logging import get_logger

logger = get_logger(__name__)

ACCEPTED_FORMATS = ("PNG", "JPEG", "WEBP", "GIF")
MAX_FILE_SIZE = 8 * 1024 * 1024


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of the admission check for one file."""

    ok: bool
    error: Optional[str] = None
    format: Optional[str] = None

    @classmethod
    def success(cls, image_format: str) -> "ValidationResult":
        return cls(ok=True, format=image_format)

    @classmethod
    def failure(cls, error: str) -> "ValidationResult":
        return cls(ok=False, error=error)


def validate_image_file(
    path: Union[str, Path], max_file_size: int = MAX_FILE_SIZE
) -> ValidationResult:
    """Check that a file is a supported image no larger than ``max_file_size``.

    The format is sniffed by Pillow from the file header; the suffix is
    ignored.

    Args:
        path: Image file path
        max_file_size: Size limit in bytes

    Returns:
        Tagged success/failure result, never raises for bad files
    """
    path = Path(path)

    if not path.is_file():
        return ValidationResult.failure(f"File not found: {path}")

    size = path.stat().st_size
    if size > max_file_size:
        return ValidationResult.failure(
            f"Image is {size / (1024 * 1024):.1f} MiB, "
            f"the limit is {max_file_size / (1024 * 1024):.0f} MiB"
        )

    try:
        with Image.open(path) as image:
            image_format = image.format
    except (UnidentifiedImageError, OSError):
        return ValidationResult.failure(f"Not a readable image: {path.name}")
    except Image.DecompressionBombError as e:
        return ValidationResult.failure(f"Image dimensions are too large: {e}")

    if image_format not in ACCEPTED_FORMATS:
        return ValidationResult.failure(
            f"Unsupported image format {image_format}; "
            f"expected one of {', '.join(ACCEPTED_FORMATS)}"
        )

    return ValidationResult.success(image_format)


def pixel_buffer_from_image(image: Image.Image) -> PixelBuffer:
    """Convert a Pillow image to an RGBA ``PixelBuffer``."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    width, height = image.size
    return PixelBuffer(width=width, height=height, data=image.tobytes())


def load_pixel_buffer(
    path: Union[str, Path], max_file_size: int = MAX_FILE_SIZE
) -> PixelBuffer:
    """Validate and decode an image file into RGBA pixels.

    Animated images contribute their first frame only.

    Args:
        path: Image file path
        max_file_size: Size limit in bytes

    Returns:
        Decoded pixel buffer

    Raises:
        ImageLoadError: If the file is rejected or cannot be decoded
    """
    result = validate_image_file(path, max_file_size)
    if not result.ok:
        raise ImageLoadError(result.error)

    try:
        with Image.open(path) as image:
            image.seek(0)
            buffer = pixel_buffer_from_image(image)
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        raise ImageLoadError(f"Failed to decode {Path(path).name}: {e}") from e

    logger.debug(f"Decoded {result.format} image {buffer.width}x{buffer.height}")
    return buffer
