"""
Functions for saving sprite sheets and their descriptor files.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

import numpy as np

from texture_packer import imaging
from texture_packer.encoders.base import Encoder
from texture_packer.errors import WriteError
from texture_packer.models import PackageInfo

logger = logging.getLogger(__name__)

# Sheets are always encoded as PNG, whatever extension descriptors declare
TEXTURE_FILE_EXTENSION = ".png"


def _write_file(path: Path, data: bytes) -> None:
    try:
        path.write_bytes(data)
    except OSError as e:
        raise WriteError(f"Could not write {path}: {e}") from e
    logger.debug("Wrote %s (%d bytes)", path, len(data))


def _write_texture(path: Path, texture: np.ndarray) -> None:
    _write_file(path, imaging.encode_png(texture))


async def _run_writes(jobs: Sequence[tuple]) -> None:
    """Run blocking write jobs concurrently and re-raise the first failure."""
    try:
        async with asyncio.TaskGroup() as tg:
            for func, *args in jobs:
                tg.create_task(asyncio.to_thread(func, *args))
    except ExceptionGroup as group:
        raise group.exceptions[0] from None


def _prepare_dir(output_dir: Path) -> None:
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WriteError(f"Could not create output directory {output_dir}: {e}") from e


async def write_sheet(encoder: Encoder, info: PackageInfo, texture: np.ndarray, output_dir: Path) -> list[Path]:
    """
    Save one sheet image and, if the encoder produces one, its descriptor.

    Args:
        encoder: Descriptor encoder
        info: Description of the sheet
        texture: Composed sheet image (BGRA)
        output_dir: Output directory

    Returns:
        Written paths, descriptor first
    """
    _prepare_dir(output_dir)

    paths: list[Path] = []
    jobs: list[tuple] = []

    result = encoder.encode(info)
    if result is not None:
        descriptor_path = output_dir / (info.file_name + result.extension)
        jobs.append((_write_file, descriptor_path, result.buffer))
        paths.append(descriptor_path)

    texture_path = output_dir / (info.file_name + TEXTURE_FILE_EXTENSION)
    jobs.append((_write_texture, texture_path, texture))
    paths.append(texture_path)

    await _run_writes(jobs)
    return paths


async def write_sheets(
    encoder: Encoder,
    infos: Sequence[PackageInfo],
    textures: Sequence[np.ndarray],
    output_dir: Path,
    base_name: str,
) -> list[Path]:
    """
    Save several sheet images and the descriptors the encoder produces for them.

    The encoder may return one descriptor shared by all sheets, saved as
    ``base_name`` plus the descriptor extension, or one descriptor per sheet,
    saved under the sheet's own file name. Any other number of descriptors
    is not written.

    Args:
        encoder: Descriptor encoder
        infos: Description of each sheet
        textures: Composed sheet images, in the same order as ``infos``
        output_dir: Output directory
        base_name: Base file name used for a shared descriptor

    Returns:
        Written paths, descriptors first, then sheet images in order
    """
    if len(infos) != len(textures):
        raise ValueError(f"Got {len(infos)} sheet descriptions for {len(textures)} sheet images")
    _prepare_dir(output_dir)

    paths: list[Path] = []
    jobs: list[tuple] = []

    result = encoder.encode_multiple(infos)
    if result is not None:
        buffers = result.buffers
        if len(buffers) == len(infos):
            for info, buffer in zip(infos, buffers):
                descriptor_path = output_dir / (info.file_name + result.extension)
                jobs.append((_write_file, descriptor_path, buffer))
                paths.append(descriptor_path)
        elif len(buffers) == 1:
            descriptor_path = output_dir / (base_name + result.extension)
            jobs.append((_write_file, descriptor_path, buffers[0]))
            paths.append(descriptor_path)
        else:
            logger.warning("Encoder %s returned %d descriptor(s) for %d sheet(s), no descriptor written",
                           type(encoder).__name__, len(buffers), len(infos))

    for info, texture in zip(infos, textures):
        texture_path = output_dir / (info.file_name + TEXTURE_FILE_EXTENSION)
        jobs.append((_write_texture, texture_path, texture))
        paths.append(texture_path)

    await _run_writes(jobs)
    return paths
