"""Result types returned by the analysis engine."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Tuple

from ..utils.color import rgb_to_hex


@dataclass(frozen=True)
class AverageColor:
    """Mean visible color of an image."""

    r: int
    g: int
    b: int

    @property
    def hex(self) -> str:
        return rgb_to_hex((self.r, self.g, self.b))

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"r": self.r, "g": self.g, "b": self.b, "hex": self.hex}


# Reported when an image has no visible pixels
SENTINEL_AVERAGE_COLOR = AverageColor(128, 128, 128)


@dataclass(frozen=True)
class PaletteColor:
    """A dominant color and its share of the visible pixels."""

    hex: str
    percentage: float
    rgb: Tuple[int, int, int] = field(default=(0, 0, 0), compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"hex": self.hex, "percentage": self.percentage}


@dataclass(frozen=True)
class ImageAnalysis:
    """Statistical summary of a single image."""

    width: int
    height: int
    aspect_ratio: str
    entropy: float
    average_color: AverageColor
    brightness: int
    contrast: int
    palette: Tuple[PaletteColor, ...] = ()
    insights: Tuple[str, ...] = ()

    @property
    def megapixels(self) -> float:
        """Pixel count in millions, two decimals."""
        return round(self.width * self.height / 1_000_000, 2)

    @property
    def orientation(self) -> str:
        if self.width > self.height:
            return "landscape"
        if self.height > self.width:
            return "portrait"
        return "square"

    def preview_size(self, max_dimension: int = 420) -> Tuple[int, int]:
        """Size that fits the image in a ``max_dimension`` box without upscaling.

        Args:
            max_dimension: Longest allowed side in pixels

        Returns:
            (width, height), each at least 1
        """
        scale = min(1.0, max_dimension / max(self.width, self.height))
        return (
            max(1, round(self.width * scale)),
            max(1, round(self.height * scale)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serialisable dictionary."""
        data = asdict(self)
        data["average_color"] = self.average_color.to_dict()
        data["palette"] = [entry.to_dict() for entry in self.palette]
        data["insights"] = list(self.insights)
        data["megapixels"] = self.megapixels
        data["orientation"] = self.orientation
        return data
