#!/usr/bin/env python3
"""
Texture Packer - Command Line Interface

Packs individual sprite images into one or more sprite sheets. Fully
transparent borders are cropped off each sprite before packing, and the
crop is recorded in the descriptor so engines can restore the original
sprite size and position.
"""

import asyncio
import logging
from pathlib import Path

import click

from texture_packer.encoders import ENCODERS
from texture_packer.errors import TexturePackerError
from texture_packer.models import MetaOverrides, PixelFormat
from texture_packer.packer import TexturePacker
from texture_packer.packing import PackerOptions

DEFAULTS = PackerOptions()


def collect_inputs(inputs: tuple[str, ...]) -> list[tuple[str, Path]]:
    """
    Resolve command line inputs to (sprite name, path) pairs.

    Files are named by their stem. Directories contribute every .png file
    below them (extension matched case-insensitively), named by their path
    relative to the directory, without extension and with forward slashes.
    """
    sprites = []
    for input_path in map(Path, inputs):
        if input_path.is_dir():
            pngs = [p for p in input_path.rglob("*") if p.is_file() and p.suffix.lower() == ".png"]
            for png in sorted(pngs):
                sprites.append((png.relative_to(input_path).with_suffix("").as_posix(), png))
        else:
            sprites.append((input_path.stem, input_path))
    return sprites


async def pack(sprites: list[tuple[str, Path]], output_dir: str, name: str, encoder_name: str,
               multiple: bool, overrides: MetaOverrides, **options) -> list[Path]:
    packer = TexturePacker()
    for sprite_name, path in sprites:
        packer.add(sprite_name, path)

    await packer.generate(**options)
    click.echo(f"Packed {len(packer)} sprite(s) into {packer.sprite_sheet_count} sheet(s)")

    encoder = ENCODERS[encoder_name]()
    if multiple:
        return await packer.write_multiple(encoder, output_dir, name, overrides=overrides)
    if packer.sprite_sheet_count > 1:
        raise click.ClickException(
            f"Sprites do not fit into a single {options['max_width']}x{options['max_height']} sheet, "
            "use --multiple to write several sheets")
    return await packer.write(encoder, output_dir, name, overrides=overrides)


@click.command(context_settings=dict(show_default=True))
@click.argument('inputs', nargs=-1, required=True, type=click.Path(exists=True))
@click.option('--output', '-o', 'output_dir', type=click.Path(file_okay=False), required=True,
              help='Directory to write sheets and descriptors into')
@click.option('--name', '-n', default='spritesheet', help='Base file name of the output')
@click.option('--format', '-f', 'encoder_name', type=click.Choice(sorted(ENCODERS)), default='cocos',
              help='Descriptor format')
@click.option('--max-width', '-W', type=int, default=DEFAULTS.max_width, help='Maximum sheet width')
@click.option('--max-height', '-H', type=int, default=DEFAULTS.max_height, help='Maximum sheet height')
@click.option('--padding', '-p', type=int, default=DEFAULTS.padding, help='Gap between sprites')
@click.option('--border', '-b', type=int, default=DEFAULTS.border, help='Empty margin along sheet edges')
@click.option('--smart/--no-smart', default=DEFAULTS.smart, help='Trim sheets to their content')
@click.option('--pot/--no-pot', default=DEFAULTS.pot, help='Power-of-two sheet dimensions')
@click.option('--square', is_flag=True, default=DEFAULTS.square, help='Force square sheets')
@click.option('--rotation/--no-rotation', 'allow_rotation', default=DEFAULTS.allow_rotation,
              help='Allow rotating sprites by 90 degrees')
@click.option('--multiple', '-m', is_flag=True, help='Write several sheets if sprites do not fit into one')
@click.option('--pixel-format', default=PixelFormat.RGBA8888.value, help='Pixel format declared in descriptors')
@click.option('--texture-extension', default='.png', help='Texture extension declared in descriptors')
@click.option('--verbose', '-v', is_flag=True, help='Log details of every processing step')
def main(inputs: tuple[str, ...], output_dir: str, name: str, encoder_name: str, max_width: int,
         max_height: int, padding: int, border: int, smart: bool, pot: bool, square: bool,
         allow_rotation: bool, multiple: bool, pixel_format: str, texture_extension: str,
         verbose: bool) -> None:
    """Pack sprite images into sprite sheets.

    INPUTS are image files, or directories whose .png files are all packed.

    Sprites are named after their file names without extension; sprites found
    in a directory keep their relative path, e.g. "walk/01".
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')

    sprites = collect_inputs(inputs)
    if not sprites:
        raise click.ClickException("No sprite images found")
    click.echo(f"Found {len(sprites)} sprite(s)")

    overrides = MetaOverrides(texture_extension=texture_extension, pixel_format=pixel_format)
    try:
        written = asyncio.run(pack(
            sprites, output_dir, name, encoder_name, multiple, overrides,
            max_width=max_width, max_height=max_height, padding=padding, border=border,
            smart=smart, pot=pot, square=square, allow_rotation=allow_rotation,
        ))
    except (TexturePackerError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    for path in written:
        click.echo(f"Saved {path}")


if __name__ == "__main__":
    main()
