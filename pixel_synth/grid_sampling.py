"""Grid sampling of RGBA images.

The sampler lays a ``resolution_x × resolution_y`` grid over the image and
reads one pixel per cell, at the cell center. It is a nearest-point reader,
not an averaging filter: a cell is exactly as bright as its center pixel.
"""

import logging
import math

import numpy as np

from pixel_synth.exceptions import InputError, InvalidSettingsError
from pixel_synth.models import Sample

logger = logging.getLogger(__name__)

# ITU-R BT.601 luma weights
LUMA_R = 0.299
LUMA_G = 0.587
LUMA_B = 0.114


def perceived_brightness(r, g, b):
    """Compute BT.601 perceptual brightness.

    Works element-wise on NumPy arrays as well as on plain numbers.

    Args:
        r: Red channel value(s), 0-255.
        g: Green channel value(s), 0-255.
        b: Blue channel value(s), 0-255.

    Returns:
        Brightness in the range 0-255.
    """
    return LUMA_R * r + LUMA_G * g + LUMA_B * b


def cell_size(
    width: int, height: int, resolution_x: int, resolution_y: int
) -> tuple[float, float]:
    """Return the real-valued (block_w, block_h) of one grid cell in pixels."""
    return width / resolution_x, height / resolution_y


def sample_point(x: int, y: int, block_w: float, block_h: float) -> tuple[int, int]:
    """Pixel coordinates of the center of grid cell ``(x, y)``.

    For any resolution of at least one, the result stays inside the image:
    ``(x + 0.5) * block_w`` is always below the image width.
    """
    return math.floor((x + 0.5) * block_w), math.floor((y + 0.5) * block_h)


def sample_grid(
    pixels: np.ndarray, resolution_x: int, resolution_y: int
) -> list[Sample]:
    """Read one brightness sample per grid cell.

    Args:
        pixels: ``H×W×4`` uint8 RGBA array.
        resolution_x: Number of grid columns.
        resolution_y: Number of grid rows.

    Returns:
        ``resolution_x * resolution_y`` samples ordered column by column
        (outer loop over x, inner loop over y).

    Raises:
        InputError: If ``pixels`` is not an RGBA array.
        InvalidSettingsError: If either resolution is below one.
    """
    if not isinstance(pixels, np.ndarray) or pixels.ndim != 3 or pixels.shape[2] != 4:
        shape = getattr(pixels, "shape", None)
        raise InputError(f"Expected an H×W×4 RGBA array, got shape {shape}")
    if resolution_x < 1 or resolution_y < 1:
        raise InvalidSettingsError(
            f"Grid resolution must be at least 1x1, got {resolution_x}x{resolution_y}"
        )

    height, width = pixels.shape[:2]
    if width == 0 or height == 0:
        raise InputError("Image is empty")

    block_w, block_h = cell_size(width, height, resolution_x, resolution_y)

    # Same float arithmetic as sample_point, vectorized per axis
    xs = np.floor((np.arange(resolution_x) + 0.5) * block_w).astype(np.intp)
    ys = np.floor((np.arange(resolution_y) + 0.5) * block_h).astype(np.intp)

    cells = pixels[np.ix_(ys, xs)].astype(np.float64)
    brightness = perceived_brightness(cells[..., 0], cells[..., 1], cells[..., 2])
    alpha = pixels[np.ix_(ys, xs)][..., 3]

    samples: list[Sample] = []
    for x in range(resolution_x):
        for y in range(resolution_y):
            samples.append(
                Sample(
                    x=x,
                    y=y,
                    brightness=min(255.0, float(brightness[y, x])),
                    alpha=int(alpha[y, x]),
                )
            )

    logger.debug(
        f"Sampled {len(samples)} cells from {width}x{height} image "
        f"({block_w:.2f}x{block_h:.2f} px per cell)"
    )
    return samples


def is_active(sample: Sample, threshold: int) -> bool:
    """A cell sounds if it is not transparent and strictly above threshold."""
    return sample.alpha > 0 and sample.brightness > threshold


def find_active_samples(samples: list[Sample], threshold: int) -> list[Sample]:
    """Filter samples down to the active ones, preserving their order."""
    return [s for s in samples if is_active(s, threshold)]
