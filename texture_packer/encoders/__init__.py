"""
Sprite sheet descriptor encoders.

    - NoneEncoder: no descriptor, sheet images only
    - CocosEncoder: Cocos2d property list, one per sheet
    - SpineAtlasEncoder: Spine / libGDX atlas, one for all sheets
"""

from texture_packer.encoders.base import Encoder, EncodeMultipleResult, EncodeResult
from texture_packer.encoders.cocos import CocosEncoder
from texture_packer.encoders.none import NoneEncoder
from texture_packer.encoders.spine import SpineAtlasEncoder

# Encoder names accepted on the command line
ENCODERS: dict[str, type] = {
    "none": NoneEncoder,
    "cocos": CocosEncoder,
    "spine": SpineAtlasEncoder,
}

__all__ = ["Encoder", "EncodeResult", "EncodeMultipleResult",
           "NoneEncoder", "CocosEncoder", "SpineAtlasEncoder", "ENCODERS"]
