"""
The encoder protocol for sprite sheet descriptor formats.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from texture_packer.models import PackageInfo


@dataclass(frozen=True)
class EncodeResult:
    """
    A single encoded descriptor.

    Attributes:
        extension: Descriptor file extension, e.g. ".plist"
        buffer: Descriptor file contents
    """
    extension: str
    buffer: bytes


@dataclass(frozen=True)
class EncodeMultipleResult:
    """
    Descriptors encoded for several sheets.

    Attributes:
        extension: Descriptor file extension
        buffers: Either one descriptor shared by all sheets, or one
                 descriptor per sheet in sheet order
    """
    extension: str
    buffers: tuple[bytes, ...]


class Encoder(Protocol):
    """Translates packed sheet metadata into a descriptor format."""

    def encode(self, info: PackageInfo) -> EncodeResult | None:
        """Encode the descriptor of a single sheet, or return None to write none."""
        ...

    def encode_multiple(self, infos: Sequence[PackageInfo]) -> EncodeMultipleResult | None:
        """Encode descriptors for several sheets, or return None to write none."""
        ...
