"""
Cocos2d property list (format 3) descriptors.

Numeric tuples are written as brace-delimited strings, e.g. "{64,32}" for a
size and "{{0,0},{64,32}}" for a rectangle.
"""

from __future__ import annotations

import plistlib
from collections.abc import Sequence

from texture_packer.encoders.base import EncodeMultipleResult, EncodeResult
from texture_packer.models import PackageInfo

PLIST_EXTENSION = ".plist"
COCOS_FORMAT = 3


def format_braces(values: Sequence) -> str:
    """Format a (possibly nested) sequence of numbers as "{a,b}" / "{{a,b},{c,d}}"."""
    parts = [format_braces(v) if isinstance(v, (list, tuple)) else str(v) for v in values]
    return "{" + ",".join(parts) + "}"


def build_plist(info: PackageInfo) -> dict:
    """Build the property list of one sheet as a plain dictionary."""
    frames = {
        sprite.name: {
            "aliases": [],
            "spriteOffset": format_braces(sprite.offset),
            "spriteSize": format_braces(sprite.size),
            "spriteSourceSize": format_braces(sprite.source_size),
            "textureRect": format_braces((sprite.position, sprite.size)),
            "textureRotated": sprite.rotated,
        }
        for sprite in info.sprites
    }
    metadata = {
        "format": COCOS_FORMAT,
        "pixelFormat": info.pixel_format,
        "premultiplyAlpha": info.sheet_meta.premultiply_alpha,
        "size": format_braces(info.sheet_meta.size),
        "textureFileName": info.texture_file_name,
    }
    return {"frames": frames, "metadata": metadata}


class CocosEncoder:
    """Writes one XML property list per sheet."""

    def _encode_plist(self, info: PackageInfo) -> bytes:
        return plistlib.dumps(build_plist(info), fmt=plistlib.FMT_XML)

    def encode(self, info: PackageInfo) -> EncodeResult:
        return EncodeResult(extension=PLIST_EXTENSION, buffer=self._encode_plist(info))

    def encode_multiple(self, infos: Sequence[PackageInfo]) -> EncodeMultipleResult:
        return EncodeMultipleResult(
            extension=PLIST_EXTENSION,
            buffers=tuple(self._encode_plist(info) for info in infos),
        )
