"""Application state management for image registration.

This module provides functionality for registering and retrieving images
by unique identifiers, so that cached UI callbacks can be keyed on a short
string instead of the pixel array itself. Images are identified by CRC32
checksums of their binary data and stored already normalized to the RGBA
canvas the pipeline samples.
"""

import zlib

import numpy as np

from pixel_synth.image_processing import prepare_image

# In-memory registry of images by ID
_image_registry: dict[str, np.ndarray] = {}


def register_image(image: np.ndarray, image_id: str | None = None) -> str:
    """Normalize an image and store it in the global registry.

    Args:
        image: Grayscale, RGB or RGBA uint8 array.
        image_id: Optional unique identifier for the image. If None, a
                 CRC32-based ID is generated from the normalized pixels.

    Returns:
        The image identifier (either provided or generated) as a string.

    Raises:
        InputError: If the image cannot be normalized.
    """
    canvas = prepare_image(image)
    if image_id is None:
        data = canvas.tobytes()
        crc = zlib.crc32(data) & 0xFFFFFFFF
        image_id = f"img_{canvas.shape[1]}x{canvas.shape[0]}_{crc:08x}"

    _image_registry[image_id] = canvas
    return image_id


def get_image_by_id(image_id: str) -> np.ndarray | None:
    """Retrieve a registered RGBA image by its identifier.

    Args:
        image_id: Unique identifier for the image.

    Returns:
        The registered image as a NumPy array, or None if not found.
    """
    return _image_registry.get(image_id)


def clear_registry() -> None:
    """Forget every registered image."""
    _image_registry.clear()
