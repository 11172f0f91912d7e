"""
Functions for finding and trimming the transparent border around sprites.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

# Pixels with alpha at or below this value count as transparent
ALPHA_THRESHOLD = 5


@dataclass(frozen=True)
class CropRect:
    """Thickness of the transparent border on each side of an image, in pixels."""
    top: int
    bottom: int
    left: int
    right: int


def _transparent_run(opaque_lines: np.ndarray) -> tuple[int, int]:
    """
    Count fully transparent lines at the start and at the end of a sequence.

    Args:
        opaque_lines: Boolean array, True for lines containing an opaque pixel

    Returns:
        (leading, trailing) counts, both 0 if every line is transparent
    """
    if not opaque_lines.any():
        return 0, 0
    leading = int(np.argmax(opaque_lines))
    trailing = int(np.argmax(opaque_lines[::-1]))
    return leading, trailing


def compute_crop_rect(img: np.ndarray, alpha_threshold: int = ALPHA_THRESHOLD) -> CropRect:
    """
    Compute how many fully transparent rows and columns border the image.

    Rows and columns are analyzed independently on the original image. An
    image that is transparent everywhere is never cropped.

    Args:
        img: BGRA image
        alpha_threshold: Largest alpha value still considered transparent

    Returns:
        The transparent border on each side
    """
    if img.ndim != 3 or img.shape[2] != 4:
        raise ValueError(f"image must be BGRA with shape (height, width, 4), got shape {img.shape}")

    opaque = img[:, :, 3] > alpha_threshold
    top, bottom = _transparent_run(opaque.any(axis=1))
    left, right = _transparent_run(opaque.any(axis=0))
    return CropRect(top=top, bottom=bottom, left=left, right=right)


def correct_parity(source_len: int, lead: int, trail: int) -> tuple[int, int, int]:
    """
    Adjust a crop so the cropped length keeps the parity of the source length.

    If trimming would change the parity, one pixel of the leading border (or
    the trailing one if there is no leading border) is kept. The center of
    the cropped image then sits on a whole pixel relative to the source.

    Args:
        source_len: Width or height of the source image
        lead: Border to trim at the start (left or top)
        trail: Border to trim at the end (right or bottom)

    Returns:
        (lead, trail, cropped_len)
    """
    cropped_len = source_len - lead - trail
    if cropped_len % 2 != source_len % 2:
        if lead > 0:
            lead -= 1
        else:
            trail -= 1
        cropped_len += 1
    return lead, trail, cropped_len
