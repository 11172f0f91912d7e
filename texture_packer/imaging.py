"""
Image decoding, manipulation and encoding on top of OpenCV.

All images are numpy arrays in BGRA format (uint8) with shape
(height, width, 4).
"""

from __future__ import annotations

import os

import cv2
import numpy as np

from texture_packer.errors import DecodeError, WriteError

ImageSource = str | os.PathLike | bytes


def to_bgra(img: np.ndarray) -> np.ndarray:
    """
    Convert a decoded image to 8-bit BGRA.

    Grayscale and BGR images get a fully opaque alpha channel, 16-bit images
    are reduced to 8 bits.

    Args:
        img: Image as returned by cv2.imdecode with IMREAD_UNCHANGED

    Returns:
        BGRA image (uint8)
    """
    if img.dtype == np.uint16:
        img = (img >> 8).astype(np.uint8)
    elif img.dtype != np.uint8:
        raise DecodeError(f"Unsupported image depth {img.dtype}")

    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2BGRA)
    if img.shape[2] == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2BGRA)
    if img.shape[2] == 4:
        return img
    raise DecodeError(f"Unsupported number of channels: {img.shape[2]}")


def decode_image(source: ImageSource) -> np.ndarray:
    """
    Decode an image from a file path or an in-memory encoded buffer.

    Args:
        source: Path to an image file, or the encoded file contents

    Returns:
        Decoded image (BGRA, uint8)

    Raises:
        DecodeError: If the source cannot be read or is not a supported image
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        data = np.frombuffer(source, dtype=np.uint8)
        label = f"<{len(data)} bytes>"
    else:
        label = os.fspath(source)
        try:
            # np.fromfile + imdecode instead of imread, which cannot report I/O errors
            data = np.fromfile(label, dtype=np.uint8)
        except OSError as e:
            raise DecodeError(f"Could not read image from {label}: {e}") from e

    img = cv2.imdecode(data, cv2.IMREAD_UNCHANGED) if data.size > 0 else None
    if img is None:
        raise DecodeError(f"Could not decode image from {label}")
    return to_bgra(img)


def crop_image(img: np.ndarray, left: int, top: int, width: int, height: int) -> np.ndarray:
    """Return the (left, top, width, height) region of the image as a new array."""
    return img[top:top + height, left:left + width].copy()


def rotate_image(img: np.ndarray) -> np.ndarray:
    """Return a copy of the image rotated by 90 degrees clockwise."""
    return cv2.rotate(img, cv2.ROTATE_90_CLOCKWISE)


def new_canvas(width: int, height: int) -> np.ndarray:
    """Create a fully transparent BGRA image."""
    return np.zeros((height, width, 4), dtype=np.uint8)


def composite(dest: np.ndarray, sprite: np.ndarray, x: int, y: int) -> None:
    """
    Copy a sprite into the destination image with its top-left corner at (x, y).

    Packed sprites never overlap and the canvas starts fully transparent, so
    the sprite pixels replace the destination pixels as they are.
    """
    h, w = sprite.shape[:2]
    if x < 0 or y < 0 or x + w > dest.shape[1] or y + h > dest.shape[0]:
        raise ValueError(
            f"Sprite of size {w}x{h} at ({x}, {y}) does not fit into "
            f"{dest.shape[1]}x{dest.shape[0]} image")
    dest[y:y + h, x:x + w] = sprite


def encode_png(img: np.ndarray) -> bytes:
    """
    Encode an image as PNG.

    Raises:
        WriteError: If OpenCV fails to encode the image
    """
    ok, buffer = cv2.imencode(".png", img)
    if not ok:
        raise WriteError(f"Could not encode {img.shape[1]}x{img.shape[0]} image as PNG")
    return buffer.tobytes()
