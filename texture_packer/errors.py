"""
Exception types raised by the texture packer.
"""


class TexturePackerError(Exception):
    """Base class for all texture packer errors."""


class DuplicateNameError(TexturePackerError, ValueError):
    """A sprite with the same name has already been added."""

    def __init__(self, name: str):
        super().__init__(f"Duplicated sprite name: {name}")
        self.name = name


class DecodeError(TexturePackerError, ValueError):
    """A sprite source could not be read or decoded as an image."""


class PackingError(TexturePackerError):
    """The packing service could not place every sprite."""


class WriteError(TexturePackerError, OSError):
    """A sprite sheet or descriptor file could not be written."""
