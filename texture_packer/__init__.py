"""
Texture Packer

Crops transparent borders off sprites, packs them into one or more sprite
sheets and writes descriptor files for game engines.

Public API:
    - TexturePacker: Registers sprites, generates and writes sprite sheets
    - PackerOptions: Packing configuration and its defaults
    - Encoders: NoneEncoder, CocosEncoder, SpineAtlasEncoder
    - Errors: TexturePackerError and its subclasses
"""

from texture_packer.crop import CropRect, compute_crop_rect
from texture_packer.encoders import (
    CocosEncoder,
    Encoder,
    EncodeMultipleResult,
    EncodeResult,
    NoneEncoder,
    SpineAtlasEncoder,
)
from texture_packer.errors import (
    DecodeError,
    DuplicateNameError,
    PackingError,
    TexturePackerError,
    WriteError,
)
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
from texture_packer.packer import TexturePacker, default_file_name_format
from texture_packer.packing import PackerOptions

__version__ = "0.1.0"
__all__ = [
    "TexturePacker", "PackerOptions", "default_file_name_format",
    "CropRect", "compute_crop_rect",
    "Encoder", "EncodeResult", "EncodeMultipleResult", "NoneEncoder", "CocosEncoder", "SpineAtlasEncoder",
    "TexturePackerError", "DuplicateNameError", "DecodeError", "PackingError", "WriteError",
    "MetaOverrides", "Package", "PackageInfo", "PixelFormat", "Placement", "SheetMeta",
    "SpriteGeometry", "SpriteMeta", "SpriteState",
    "__version__",
]
