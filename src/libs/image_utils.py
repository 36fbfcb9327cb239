"""
Image utility functions for inspecting and preprocessing uploaded images.
"""

import io
import logging

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

# Modes whose single band is a luminance channel
_GRAYSCALE_MODES = {"1", "L", "I", "F", "I;16", "I;16L", "I;16B", "I;16N"}


def _open_image(image_bytes: bytes) -> Image.Image:
    try:
        return Image.open(io.BytesIO(image_bytes))
    except Exception as e:
        raise ValueError(f"Failed to decode image: {e}")


def count_channels(image: Image.Image) -> int:
    """
    Number of color channels as reported by the image header.

    Palette images expand to RGB (or RGBA with transparency) when decoded,
    so they count as 3 (or 4) channels rather than one index band.
    """
    if image.mode in ("P", "PA"):
        return 4 if image.mode == "PA" or "transparency" in image.info else 3
    if image.mode in _GRAYSCALE_MODES:
        return 1
    return len(image.getbands())


def read_channel_count(image_bytes: bytes) -> int:
    """
    Read the channel count without decoding pixel data.

    Raises:
        ValueError: If the bytes are not a recognizable image
    """
    return count_channels(_open_image(image_bytes))


def is_grayscale(image_bytes: bytes) -> bool:
    return read_channel_count(image_bytes) == 1


def preprocess_image(image_bytes: bytes, size: int = 224) -> np.ndarray:
    """
    Decode an image into a batched float tensor.

    The image is forced to 3 channels (alpha dropped, gray replicated),
    resized to ``size`` x ``size`` with nearest-neighbor interpolation
    (source pixel ``floor(dst * in / out)``, no half-pixel centers),
    and given a leading batch dimension.

    Args:
        image_bytes: Encoded image (PNG, JPEG, ...)
        size: Output edge length in pixels

    Returns:
        float32 array of shape (1, size, size, 3) with values in 0..255

    Raises:
        ValueError: If the image cannot be decoded
    """
    image = _open_image(image_bytes)
    try:
        rgb = image.convert("RGB")
    except Exception as e:
        raise ValueError(f"Failed to decode image: {e}")

    arr = np.asarray(rgb, dtype=np.uint8)
    h, w = arr.shape[:2]
    # Corner-aligned source index floor(dst * in / out), no half-pixel offset
    ys = np.minimum((np.arange(size) * h / size).astype(np.int64), h - 1)
    xs = np.minimum((np.arange(size) * w / size).astype(np.int64), w - 1)
    resized = arr[ys][:, xs]
    return np.expand_dims(resized, axis=0).astype(np.float32)
