"""Color space conversion utilities for PixelScope."""

from typing import Sequence

import numpy as np


def rgb_to_hex(rgb: Sequence[int]) -> str:
    """Convert an RGB triple (0-255) to a lowercase ``#rrggbb`` string."""
    r, g, b = (int(max(0, min(255, c))) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


class ColorConverter:
    """Color space conversion utilities with focus on perceptual accuracy."""

    def __init__(self):
        """Initialize color converter."""
        # D65 illuminant white point for XYZ conversion
        self.white_point = np.array([0.95047, 1.0, 1.08883], dtype=np.float64)

        # sRGB to XYZ conversion matrix (D65 illuminant)
        self.rgb_to_xyz_matrix = np.array(
            [
                [0.4124564, 0.3575761, 0.1804375],
                [0.2126729, 0.7151522, 0.0721750],
                [0.0193339, 0.1191920, 0.9503041],
            ],
            dtype=np.float64,
        )

    def rgb_to_lab(self, rgb: np.ndarray) -> np.ndarray:
        """Convert RGB colors to CIELAB color space.

        Implements the sRGB -> XYZ -> LAB conversion pipeline with
        gamma correction.

        Args:
            rgb: RGB values in range [0, 255] with shape (..., 3)

        Returns:
            LAB values with L* in [0, 100], same shape as the input
        """
        rgb_normalized = np.clip(np.asarray(rgb, dtype=np.float64) / 255.0, 0.0, 1.0)

        rgb_linear = self._srgb_to_linear(rgb_normalized)

        xyz = rgb_linear @ self.rgb_to_xyz_matrix.T

        xyz_normalized = xyz / self.white_point

        return self._xyz_to_lab(xyz_normalized)

    def calculate_delta_e(self, lab1: np.ndarray, lab2: np.ndarray) -> np.ndarray:
        """Calculate Delta E (CIE76) color difference.

        Args:
            lab1: First LAB colors (..., 3)
            lab2: Second LAB colors (..., 3), broadcastable against ``lab1``

        Returns:
            Delta E differences
        """
        diff = np.asarray(lab1) - np.asarray(lab2)
        return np.sqrt(np.sum(diff**2, axis=-1))

    def _srgb_to_linear(self, srgb: np.ndarray) -> np.ndarray:
        """Apply inverse gamma correction to convert sRGB to linear RGB."""
        threshold = 0.04045
        return np.where(
            srgb <= threshold,
            srgb / 12.92,
            np.power((srgb + 0.055) / 1.055, 2.4),
        )

    def _xyz_to_lab(self, xyz_normalized: np.ndarray) -> np.ndarray:
        """Convert normalized XYZ to LAB color space."""
        epsilon = 0.008856  # (6/29)^3
        kappa = 903.3  # 29^3/3^3

        f_xyz = np.where(
            xyz_normalized > epsilon,
            np.cbrt(xyz_normalized),
            (kappa * xyz_normalized + 16) / 116,
        )

        fX = f_xyz[..., 0]
        fY = f_xyz[..., 1]
        fZ = f_xyz[..., 2]

        L = 116 * fY - 16
        a = 500 * (fX - fY)
        b = 200 * (fY - fZ)

        return np.stack([L, a, b], axis=-1)
