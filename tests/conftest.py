"""
Shared fixtures for building synthetic sprites.
"""

import cv2
import numpy as np
import pytest


def _sprite(width: int, height: int, border: tuple[int, int, int, int] = (0, 0, 0, 0),
            color: tuple[int, int, int] = (0, 0, 255)) -> np.ndarray:
    """Opaque BGRA rectangle of the given size surrounded by a transparent (top, bottom, left, right) border."""
    top, bottom, left, right = border
    img = np.zeros((height + top + bottom, width + left + right, 4), dtype=np.uint8)
    img[top:top + height, left:left + width] = (*color, 255)
    return img


def _png_bytes(img: np.ndarray) -> bytes:
    ok, buffer = cv2.imencode(".png", img)
    assert ok, "PNG encoding should succeed"
    return buffer.tobytes()


@pytest.fixture
def make_sprite():
    return _sprite


@pytest.fixture
def png_bytes():
    return _png_bytes


@pytest.fixture
def gradient_sprite():
    """Opaque sprite whose every pixel is distinct, so rotations can be verified."""
    def factory(width: int, height: int) -> np.ndarray:
        img = np.zeros((height, width, 4), dtype=np.uint8)
        ys, xs = np.mgrid[0:height, 0:width]
        img[:, :, 0] = (xs * 7) % 256
        img[:, :, 1] = (ys * 11) % 256
        img[:, :, 2] = (xs * ys) % 256
        img[:, :, 3] = 255
        return img
    return factory
