"""
Rectangle packing on top of the rectpack MaxRects implementation.

rectpack decides where rectangles go. This module adds what a sprite sheet
needs around it: padding between sprites, an empty border along the sheet
edges, trimming the sheet to its content, power-of-two and square sheet
sizes, separate sheets per tag, and an error for sprites that cannot fit.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Hashable, Mapping, Sequence
from dataclasses import dataclass

from rectpack import MaxRectsBssf, PackingBin, PackingMode, SORT_AREA, newPacker

from texture_packer.errors import PackingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackerOptions:
    """
    Packing configuration.

    Attributes:
        max_width: Maximum sheet width
        max_height: Maximum sheet height
        padding: Gap between packed sprites
        smart: Trim each sheet to the area actually used
        pot: Round sheet dimensions up to powers of two
        square: Make sheets square
        allow_rotation: Allow sprites to be rotated by 90 degrees
        tag: Only sprites with the same tag may share a sheet
        border: Empty margin kept along every sheet edge
    """
    max_width: int = 2048
    max_height: int = 2048
    padding: int = 2
    smart: bool = True
    pot: bool = True
    square: bool = False
    allow_rotation: bool = True
    tag: bool = False
    border: int = 5

    def __post_init__(self):
        if self.max_width <= 0 or self.max_height <= 0:
            raise ValueError(f"max_width and max_height must be positive, got {self.max_width}x{self.max_height}")
        if self.padding < 0:
            raise ValueError(f"padding must not be negative, got {self.padding}")
        if self.border < 0:
            raise ValueError(f"border must not be negative, got {self.border}")
        area_w, area_h = self.area_size
        if area_w - 2 * self.border <= 0 or area_h - 2 * self.border <= 0:
            raise ValueError(f"border {self.border} leaves no room inside a {area_w}x{area_h} sheet")

    def merged(self, overrides: Mapping[str, object]) -> PackerOptions:
        """Return a copy with the given options replaced; unknown names raise ValueError."""
        known = {f.name for f in dataclasses.fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ValueError(f"Unknown packing option(s): {', '.join(unknown)}")
        return dataclasses.replace(self, **overrides)

    @property
    def area_size(self) -> tuple[int, int]:
        """Largest sheet size that satisfies the size constraints."""
        width, height = self.max_width, self.max_height
        if self.pot:
            width, height = floor_pow2(width), floor_pow2(height)
        if self.square:
            width = height = min(width, height)
        return width, height


@dataclass(frozen=True)
class PackRect:
    """A rectangle to be packed, identified by name."""
    name: str
    width: int
    height: int
    tag: Hashable = None


@dataclass(frozen=True)
class RectPlacement:
    """Top-left position of a packed rectangle and whether it was rotated."""
    name: str
    x: int
    y: int
    rotated: bool


@dataclass(frozen=True)
class PackedBin:
    """One packed sheet: its final size and the rectangles placed in it."""
    width: int
    height: int
    placements: tuple[RectPlacement, ...]


def next_pow2(v: int) -> int:
    return 1 << max(v - 1, 0).bit_length()


def floor_pow2(v: int) -> int:
    return 1 << (v.bit_length() - 1)


def _check_fits(rect: PackRect, inner_w: int, inner_h: int, options: PackerOptions) -> None:
    """Raise PackingError if a rectangle cannot fit an empty sheet in any orientation."""
    if rect.width <= inner_w and rect.height <= inner_h:
        return
    if options.allow_rotation and rect.height <= inner_w and rect.width <= inner_h:
        return
    area_w, area_h = options.area_size
    raise PackingError(
        f"Sprite {rect.name!r} ({rect.width}x{rect.height}) does not fit into a "
        f"{area_w}x{area_h} sheet with border {options.border}")


def _sheet_size(placements: Sequence[tuple[RectPlacement, int, int]], options: PackerOptions) -> tuple[int, int]:
    area_w, area_h = options.area_size
    if options.smart:
        width = max(p.x + w for p, w, _h in placements) + options.border
        height = max(p.y + h for p, _w, h in placements) + options.border
    else:
        width, height = area_w, area_h
    if options.pot:
        width, height = next_pow2(width), next_pow2(height)
    if options.square:
        width = height = max(width, height)
    return width, height


def _pack_group(rects: Sequence[PackRect], options: PackerOptions) -> list[PackedBin]:
    """Pack rectangles of a single tag group into as many bins as needed."""
    area_w, area_h = options.area_size
    pad = options.padding
    border = options.border
    # The trailing padding of the last sprite in a row or column may overlap the border
    bin_w = area_w - 2 * border + pad
    bin_h = area_h - 2 * border + pad

    packer = newPacker(
        mode=PackingMode.Offline,
        bin_algo=PackingBin.BFF,
        pack_algo=MaxRectsBssf,
        sort_algo=SORT_AREA,
        rotation=options.allow_rotation,
    )
    for i, rect in enumerate(rects):
        packer.add_rect(rect.width + pad, rect.height + pad, rid=i)
    packer.add_bin(bin_w, bin_h, count=float("inf"))
    packer.pack()

    by_bin: dict[int, list[tuple[RectPlacement, int, int]]] = {}
    placed = set()
    for b, x, y, w, h, rid in packer.rect_list():
        rect = rects[rid]
        rotated = (w, h) != (rect.width + pad, rect.height + pad)
        sprite_w, sprite_h = (rect.height, rect.width) if rotated else (rect.width, rect.height)
        placement = RectPlacement(name=rect.name, x=x + border, y=y + border, rotated=rotated)
        by_bin.setdefault(b, []).append((placement, sprite_w, sprite_h))
        placed.add(rid)

    missing = [rects[i].name for i in range(len(rects)) if i not in placed]
    if missing:
        raise PackingError(f"Could not pack sprite(s): {', '.join(missing)}")

    bins = []
    for b in sorted(by_bin):
        width, height = _sheet_size(by_bin[b], options)
        bins.append(PackedBin(width=width, height=height,
                              placements=tuple(p for p, _w, _h in by_bin[b])))
    return bins


def pack_rectangles(rects: Sequence[PackRect], options: PackerOptions) -> list[PackedBin]:
    """
    Pack rectangles into one or more bins.

    Args:
        rects: Rectangles to pack; names must be unique
        options: Packing configuration

    Returns:
        Packed bins, each with its final (possibly trimmed) size. Every input
        rectangle appears in exactly one bin.

    Raises:
        PackingError: If a rectangle is too large for the configured sheet size
    """
    if not rects:
        return []

    area_w, area_h = options.area_size
    inner_w = area_w - 2 * options.border
    inner_h = area_h - 2 * options.border
    for rect in rects:
        if rect.width <= 0 or rect.height <= 0:
            raise PackingError(f"Sprite {rect.name!r} has empty size {rect.width}x{rect.height}")
        _check_fits(rect, inner_w, inner_h, options)

    if options.tag:
        groups: dict[Hashable, list[PackRect]] = {}
        for rect in rects:
            groups.setdefault(rect.tag, []).append(rect)
    else:
        groups = {None: list(rects)}

    bins = []
    for tag, group in groups.items():
        group_bins = _pack_group(group, options)
        logger.debug("Packed %d rectangle(s) with tag %r into %d bin(s)", len(group), tag, len(group_bins))
        bins.extend(group_bins)
    return bins
