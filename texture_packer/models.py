"""
Data records shared by the packer, the writer and the encoders.

Geometry produced by cropping and placements produced by packing are kept
apart and only joined into a SpriteMeta when an encoder needs to see them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

import numpy as np


class PixelFormat(str, enum.Enum):
    """Pixel formats that can be declared in sheet descriptors."""
    RGBA8888 = "RGBA8888"

    def __str__(self) -> str:
        return self.value


class SpriteState(enum.Enum):
    """Processing stage of a registered sprite."""
    PENDING = "pending"
    DECODED = "decoded"
    CROPPED = "cropped"
    PACKED = "packed"


@dataclass(frozen=True)
class SpriteGeometry:
    """
    Size information of a sprite after transparent borders were cropped.

    Attributes:
        name: Sprite name
        offset: Shift of the cropped image's center relative to the source
                image's center, as (x, y). Positive y points up.
        size: Cropped size as (w, h)
        source_size: Size before cropping as (w, h)
    """
    name: str
    offset: tuple[int, int]
    size: tuple[int, int]
    source_size: tuple[int, int]


@dataclass(frozen=True)
class Placement:
    """Where a sprite ended up inside its sheet."""
    name: str
    position: tuple[int, int]
    rotated: bool


@dataclass(frozen=True)
class SpriteMeta:
    """
    Complete per-sprite metadata handed to encoders.

    Attributes:
        name: Sprite name
        offset: Center offset caused by cropping, as (x, y)
        size: Cropped size as (w, h), before any rotation
        source_size: Size before cropping as (w, h)
        position: Top-left corner inside the sheet as (x, y)
        rotated: True if the sprite is stored rotated by 90 degrees
    """
    name: str
    offset: tuple[int, int]
    size: tuple[int, int]
    source_size: tuple[int, int]
    position: tuple[int, int]
    rotated: bool

    @classmethod
    def join(cls, geometry: SpriteGeometry, placement: Placement) -> SpriteMeta:
        if geometry.name != placement.name:
            raise ValueError(f"Cannot join geometry of {geometry.name!r} with placement of {placement.name!r}")
        return cls(
            name=geometry.name,
            offset=geometry.offset,
            size=geometry.size,
            source_size=geometry.source_size,
            position=placement.position,
            rotated=placement.rotated,
        )


@dataclass(frozen=True)
class SheetMeta:
    """Size of a sheet and its (always false) premultiplied alpha flag."""
    size: tuple[int, int]
    premultiply_alpha: bool = False


@dataclass(frozen=True)
class Package:
    """
    One generated sprite sheet.

    Attributes:
        sheet_meta: Sheet size and alpha flag
        placements: Placements of the sprites in this sheet, in packing order
        texture: Composed sheet image (BGRA, uint8)
    """
    sheet_meta: SheetMeta
    placements: tuple[Placement, ...]
    texture: np.ndarray

    @property
    def sprite_names(self) -> list[str]:
        return [placement.name for placement in self.placements]


@dataclass(frozen=True)
class MetaOverrides:
    """Optional overrides for the values written into sheet descriptors."""
    texture_extension: str | None = None
    pixel_format: str | None = None


@dataclass(frozen=True)
class PackageInfo:
    """
    Encoder-facing description of one sheet.

    Attributes:
        file_name: Base file name of the sheet, without extension
        texture_extension: Extension of the sheet image, e.g. ".png"
        pixel_format: Declared pixel format, e.g. "RGBA8888"
        sprites: Metadata of every sprite in the sheet
        sheet_meta: Sheet size and alpha flag
    """
    file_name: str
    texture_extension: str
    pixel_format: str
    sprites: tuple[SpriteMeta, ...]
    sheet_meta: SheetMeta

    @property
    def texture_file_name(self) -> str:
        return self.file_name + self.texture_extension
