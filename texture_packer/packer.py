"""
The TexturePacker: registers sprites, crops and packs them into sprite
sheets, and writes the sheets together with their descriptors.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from texture_packer import imaging, writer
from texture_packer.crop import compute_crop_rect, correct_parity
from texture_packer.encoders.base import Encoder
from texture_packer.errors import DuplicateNameError, TexturePackerError
from texture_packer.imaging import ImageSource
from texture_packer.models import (
    MetaOverrides,
    Package,
    PackageInfo,
    PixelFormat,
    Placement,
    SheetMeta,
    SpriteGeometry,
    SpriteMeta,
    SpriteState,
)
from texture_packer.packing import PackerOptions, PackRect, PackedBin, pack_rectangles

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS = PackerOptions()
DEFAULT_TEXTURE_EXTENSION = ".png"
DEFAULT_PIXEL_FORMAT = PixelFormat.RGBA8888


def default_file_name_format(base_name: str, index: int) -> str:
    """Name sheets "<base>-0", "<base>-1", ... when writing several of them."""
    return f"{base_name}-{index}"


@dataclass
class _SpriteEntry:
    name: str
    source: ImageSource
    tag: Hashable = None
    state: SpriteState = SpriteState.PENDING
    image: np.ndarray | None = None
    geometry: SpriteGeometry | None = None


class TexturePacker:
    """
    Packs named sprites into one or more sprite sheets.

    Sprites are decoded and cropped once, the first time generate() sees them.
    Every generate() call packs all sprites added so far and replaces the
    previously generated sheets.

    The instance is not safe for concurrent use; await each call before
    starting the next one.

    Example:
        >>> packer = TexturePacker()
        >>> packer.add("hero", "sprites/hero.png")
        >>> packer.add("coin", Path("sprites/coin.png").read_bytes())
        >>> asyncio.run(packer.generate(max_width=1024, max_height=1024))
        >>> asyncio.run(packer.write(CocosEncoder(), "out", "atlas"))
        [PosixPath('out/atlas.plist'), PosixPath('out/atlas.png')]
    """

    def __init__(self):
        self._sprites: dict[str, _SpriteEntry] = {}
        self._packages: tuple[Package, ...] = ()

    def add(self, name: str, source: ImageSource, tag: Hashable = None) -> None:
        """
        Register a sprite.

        Args:
            name: Unique sprite name, used as the key in descriptors
            source: Path to an image file, or the encoded image contents
            tag: Packing group; with the ``tag`` option only sprites with
                 equal tags share a sheet

        Raises:
            DuplicateNameError: If a sprite with this name was already added
        """
        if name in self._sprites:
            raise DuplicateNameError(name)
        self._sprites[name] = _SpriteEntry(name=name, source=source, tag=tag)

    def __len__(self) -> int:
        return len(self._sprites)

    def __contains__(self, name: object) -> bool:
        return name in self._sprites

    @property
    def sprite_sheet_count(self) -> int:
        """Number of sheets produced by the last successful generate()."""
        return len(self._packages)

    @property
    def packages(self) -> tuple[Package, ...]:
        return self._packages

    def state(self, name: str) -> SpriteState:
        return self._sprites[name].state

    def geometry(self, name: str) -> SpriteGeometry:
        """
        Crop geometry of a sprite.

        Raises:
            KeyError: If the sprite is unknown or has not been processed yet
        """
        geometry = self._sprites[name].geometry
        if geometry is None:
            raise KeyError(f"Sprite {name!r} has not been processed yet")
        return geometry

    def sprite_meta(self, name: str) -> SpriteMeta:
        """
        Full metadata of a sprite in the current sheets.

        Raises:
            KeyError: If the sprite is not part of the generated sheets
        """
        geometry = self.geometry(name)
        for package in self._packages:
            for placement in package.placements:
                if placement.name == name:
                    return SpriteMeta.join(geometry, placement)
        raise KeyError(f"Sprite {name!r} has not been packed yet")

    async def generate(self, **options) -> None:
        """
        Decode and crop new sprites, then pack all sprites into sheets.

        Args:
            **options: Packing options overriding the defaults, see PackerOptions

        Raises:
            ValueError: On unknown or invalid options
            DecodeError: If a new sprite cannot be decoded
            PackingError: If a sprite does not fit into a sheet
        """
        merged = DEFAULT_OPTIONS.merged(options)

        pending = [e for e in self._sprites.values() if e.state is SpriteState.PENDING]
        if pending:
            await self._decode(pending)
            for entry in pending:
                self._crop(entry)

        entries = list(self._sprites.values())
        rects = [PackRect(name=e.name, width=e.geometry.size[0], height=e.geometry.size[1], tag=e.tag)
                 for e in entries]
        bins = pack_rectangles(rects, merged)

        self._packages = tuple(self._assemble(packed_bin) for packed_bin in bins)
        for entry in entries:
            entry.state = SpriteState.PACKED

        logger.info("Packed %d sprite(s) into %d sheet(s)", len(entries), len(self._packages))

    async def _decode(self, entries: list[_SpriteEntry]) -> None:
        """Decode sprites concurrently; images are only stored once all of them succeeded."""
        try:
            async with asyncio.TaskGroup() as tg:
                tasks = [tg.create_task(asyncio.to_thread(imaging.decode_image, e.source)) for e in entries]
        except ExceptionGroup as group:
            raise group.exceptions[0] from None

        for entry, task in zip(entries, tasks):
            entry.image = task.result()
            entry.state = SpriteState.DECODED

    def _crop(self, entry: _SpriteEntry) -> None:
        img = entry.image
        source_h, source_w = img.shape[:2]

        rect = compute_crop_rect(img)
        left, right, w = correct_parity(source_w, rect.left, rect.right)
        top, bottom, h = correct_parity(source_h, rect.top, rect.bottom)

        offset = ((left - right) // 2, (bottom - top) // 2)

        entry.image = imaging.crop_image(img, left, top, w, h)
        entry.geometry = SpriteGeometry(
            name=entry.name,
            offset=offset,
            size=(w, h),
            source_size=(source_w, source_h),
        )
        entry.state = SpriteState.CROPPED
        logger.debug("Cropped %s from %dx%d to %dx%d, offset %s", entry.name, source_w, source_h, w, h, offset)

    def _assemble(self, packed_bin: PackedBin) -> Package:
        texture = imaging.new_canvas(packed_bin.width, packed_bin.height)
        placements = []
        for rect in packed_bin.placements:
            sprite = self._sprites[rect.name].image
            if rect.rotated:
                sprite = imaging.rotate_image(sprite)
            imaging.composite(texture, sprite, rect.x, rect.y)
            placements.append(Placement(name=rect.name, position=(rect.x, rect.y), rotated=rect.rotated))

        return Package(
            sheet_meta=SheetMeta(size=(packed_bin.width, packed_bin.height), premultiply_alpha=False),
            placements=tuple(placements),
            texture=texture,
        )

    def _package_info(self, package: Package, file_name: str, overrides: MetaOverrides) -> PackageInfo:
        pixel_format = overrides.pixel_format if overrides.pixel_format is not None else DEFAULT_PIXEL_FORMAT
        return PackageInfo(
            file_name=file_name,
            texture_extension=(overrides.texture_extension if overrides.texture_extension is not None
                               else DEFAULT_TEXTURE_EXTENSION),
            pixel_format=str(pixel_format),
            sprites=tuple(SpriteMeta.join(self._sprites[p.name].geometry, p) for p in package.placements),
            sheet_meta=package.sheet_meta,
        )

    def _require_packages(self) -> None:
        if not self._packages:
            raise TexturePackerError("No sprite sheets to write, call generate() first")

    async def write(
        self,
        encoder: Encoder,
        output_dir: str | os.PathLike,
        base_name: str,
        overrides: MetaOverrides | None = None,
    ) -> list[Path]:
        """
        Write the first sprite sheet and its descriptor.

        Args:
            encoder: Descriptor encoder
            output_dir: Directory for the output files, created if missing
            base_name: File name of the sheet and descriptor, without extension
            overrides: Values to declare in the descriptor instead of the defaults

        Returns:
            Paths of the written files, descriptor first

        Raises:
            TexturePackerError: If generate() has not produced any sheet
            WriteError: If a file cannot be written
        """
        self._require_packages()
        package = self._packages[0]
        info = self._package_info(package, base_name, overrides or MetaOverrides())
        return await writer.write_sheet(encoder, info, package.texture, Path(output_dir))

    async def write_multiple(
        self,
        encoder: Encoder,
        output_dir: str | os.PathLike,
        base_name: str,
        file_name_format: Callable[[str, int], str] | None = None,
        overrides: MetaOverrides | None = None,
    ) -> list[Path]:
        """
        Write every sprite sheet and the descriptor(s) produced by the encoder.

        Args:
            encoder: Descriptor encoder
            output_dir: Directory for the output files, created if missing
            base_name: Base file name
            file_name_format: Builds the file name of sheet ``index`` from
                              ``base_name``; defaults to "<base>-<index>"
            overrides: Values to declare in the descriptors instead of the defaults

        Returns:
            Paths of the written files, descriptors first

        Raises:
            TexturePackerError: If generate() has not produced any sheet
            WriteError: If a file cannot be written
        """
        self._require_packages()
        file_name_format = file_name_format or default_file_name_format
        overrides = overrides or MetaOverrides()
        infos = [self._package_info(package, file_name_format(base_name, i), overrides)
                 for i, package in enumerate(self._packages)]
        textures = [package.texture for package in self._packages]
        return await writer.write_sheets(encoder, infos, textures, Path(output_dir), base_name)
