"""Image loading and normalization for the pixel-to-MIDI pipeline.

The grid sampler consumes a single pixel format: an ``H×W×4`` uint8 RGBA
array. This module turns whatever the caller has (a file on disk, a Gradio
upload, a grayscale or RGB array) into that format, downscaled the same way
for every source so that grid sampling sees a consistent canvas.
"""

import logging

import cv2
import numpy as np

from pixel_synth.exceptions import InputError

logger = logging.getLogger(__name__)

# Canvas width cap; lower resolution keeps the retro crunch.
MAX_WIDTH = 512


def to_rgba(image: np.ndarray) -> np.ndarray:
    """Convert a grayscale, RGB or RGBA array to an RGBA array.

    Args:
        image: uint8 array shaped ``H×W``, ``H×W×3`` (RGB) or ``H×W×4`` (RGBA).

    Returns:
        A new ``H×W×4`` uint8 array. Sources without alpha become fully opaque.

    Raises:
        InputError: If the array has an unsupported shape or dtype.
    """
    if not isinstance(image, np.ndarray):
        raise InputError(f"Expected a NumPy array, got {type(image).__name__}")
    if image.dtype != np.uint8:
        raise InputError(f"Expected uint8 pixels, got {image.dtype}")
    if image.size == 0:
        raise InputError("Image is empty")

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if image.ndim == 3 and image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_RGB2RGBA)
    if image.ndim == 3 and image.shape[2] == 4:
        return image.copy()

    raise InputError(f"Unsupported image shape {image.shape}")


def fit_to_width(image: np.ndarray, max_width: int = MAX_WIDTH) -> np.ndarray:
    """Downscale an image so it is at most ``max_width`` pixels wide.

    Images that already fit are returned unchanged. The aspect ratio is
    preserved and both dimensions stay at least one pixel.

    Args:
        image: Image array with height and width as its first two axes.
        max_width: Largest allowed width in pixels.

    Returns:
        The resized image (or the input if no resize was needed).
    """
    height, width = image.shape[:2]
    scale = min(1.0, max_width / width)
    if scale >= 1.0:
        return image

    new_w = max(1, int(width * scale))
    new_h = max(1, int(height * scale))
    logger.debug(f"Resizing image from {width}x{height} to {new_w}x{new_h}")
    return cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_AREA)


def prepare_image(image: np.ndarray, max_width: int = MAX_WIDTH) -> np.ndarray:
    """Normalize an in-memory image to a downscaled RGBA canvas.

    Args:
        image: Grayscale, RGB or RGBA uint8 array.
        max_width: Largest allowed width in pixels.

    Returns:
        ``H×W×4`` uint8 RGBA array no wider than ``max_width``.
    """
    return fit_to_width(to_rgba(image), max_width)


def load_image(path: str, max_width: int = MAX_WIDTH) -> np.ndarray:
    """Load an image file as a downscaled RGBA NumPy array.

    Args:
        path: File path to the image.
        max_width: Largest allowed width in pixels.

    Returns:
        ``H×W×4`` uint8 RGBA array.

    Raises:
        InputError: If the file cannot be read as an image.
    """
    image = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if image is None:
        raise InputError(f"Could not read image file {path!r}")

    # OpenCV decodes to BGR(A); 16-bit sources are reduced to 8 bits
    if image.dtype == np.uint16:
        image = (image >> 8).astype(np.uint8)
    if image.ndim == 3 and image.shape[2] == 3:
        image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    elif image.ndim == 3 and image.shape[2] == 4:
        image = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)

    return prepare_image(image, max_width)
