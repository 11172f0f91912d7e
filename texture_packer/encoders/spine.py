"""
Spine / libGDX texture atlas descriptors.

A single .atlas file lists every page (sheet) followed by its regions, so
several sheets share one descriptor.
"""

from __future__ import annotations

from collections.abc import Sequence

from texture_packer.encoders.base import EncodeMultipleResult, EncodeResult
from texture_packer.models import PackageInfo, SpriteMeta

ATLAS_EXTENSION = ".atlas"

# Spine counts region rotation in degrees counter-clockwise. Rotated sprites
# are stored turned 90 degrees clockwise, which is 270 in that convention.
ROTATED_DEGREES = 270


def region_offset(sprite: SpriteMeta) -> tuple[int, int]:
    """
    Offset of the cropped region from the bottom-left corner of the source image.

    Cropping keeps the parity of both dimensions, so the halves are exact.
    """
    x = (sprite.source_size[0] - sprite.size[0]) // 2 + sprite.offset[0]
    y = (sprite.source_size[1] - sprite.size[1]) // 2 + sprite.offset[1]
    return x, y


def rotate_value(sprite: SpriteMeta) -> str:
    """Value of the region's "rotate" entry."""
    return str(ROTATED_DEGREES) if sprite.rotated else "false"


def page_lines(info: PackageInfo) -> list[str]:
    w, h = info.sheet_meta.size
    lines = [info.texture_file_name, f"size: {w},{h}", f"format: {info.pixel_format}",
             "filter: Linear,Linear", "repeat: none"]
    if info.sheet_meta.premultiply_alpha:
        lines.append("pma: true")

    for sprite in info.sprites:
        ox, oy = region_offset(sprite)
        lines += [sprite.name,
                  f"  rotate: {rotate_value(sprite)}",
                  f"  xy: {sprite.position[0]}, {sprite.position[1]}",
                  f"  size: {sprite.size[0]}, {sprite.size[1]}",
                  f"  orig: {sprite.source_size[0]}, {sprite.source_size[1]}",
                  f"  offset: {ox}, {oy}",
                  "  index: -1"]
    return lines


class SpineAtlasEncoder:
    """Writes a Spine atlas; several sheets go into one shared file."""

    def _encode_atlas(self, infos: Sequence[PackageInfo]) -> bytes:
        pages = ["\n".join(page_lines(info)) for info in infos]
        return ("\n\n".join(pages) + "\n").encode("utf-8")

    def encode(self, info: PackageInfo) -> EncodeResult:
        return EncodeResult(extension=ATLAS_EXTENSION, buffer=self._encode_atlas([info]))

    def encode_multiple(self, infos: Sequence[PackageInfo]) -> EncodeMultipleResult:
        return EncodeMultipleResult(extension=ATLAS_EXTENSION, buffers=(self._encode_atlas(infos),))
