"""
Encoder for texture-only output without descriptor files.
"""

from __future__ import annotations

from collections.abc import Sequence

from texture_packer.encoders.base import EncodeMultipleResult, EncodeResult
from texture_packer.models import PackageInfo


class NoneEncoder:
    """Writes no descriptor at all, only the sheet images."""

    def encode(self, info: PackageInfo) -> EncodeResult | None:
        return None

    def encode_multiple(self, infos: Sequence[PackageInfo]) -> EncodeMultipleResult | None:
        return None
