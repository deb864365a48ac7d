"""
Error types raised while reading or writing Sponge schematics.

All format problems derive from SchematicFormatError, which is a ValueError,
so a corrupt file can be told apart from an I/O failure (OSError).
"""

from typing import Optional, Tuple


class SchematicFormatError(ValueError):
    """Base class for every structural or validation failure in a schematic."""


class TagParseError(SchematicFormatError):
    """The NBT byte stream could not be parsed into a tag tree."""


class MissingOrWrongTypeTag(SchematicFormatError):
    """A required tag is absent or stored with a different kind."""

    def __init__(self, key: str, expected: str, actual: Optional[str]):
        self.key = key
        self.expected = expected
        self.actual = actual
        if actual is None:
            msg = f"Missing required tag '{key}' (expected {expected})"
        else:
            msg = f"Tag '{key}' has kind {actual}, expected {expected}"
        super().__init__(msg)


class InvalidRoot(SchematicFormatError):
    def __init__(self, name: str, kind: str):
        self.name = name
        self.kind = kind
        super().__init__(
            f"Root tag must be a Compound named 'Schematic', got {kind} named '{name}'"
        )


class UnsupportedVersion(SchematicFormatError):
    def __init__(self, version: int):
        self.version = version
        super().__init__(f"Unsupported schematic version: {version}")


class InvalidDimensions(SchematicFormatError):
    def __init__(self, width: int, height: int, length: int):
        self.dimensions = (width, height, length)
        super().__init__(
            f"Invalid dimensions {width}x{height}x{length}, each must be in 1..65535"
        )


class InvalidOffset(SchematicFormatError):
    def __init__(self, length: int):
        self.length = length
        super().__init__(f"Invalid offset specified in schematic: {length} elements, expected 3")


class PaletteSizeMismatch(SchematicFormatError):
    def __init__(self, declared: int, actual: int):
        self.declared = declared
        self.actual = actual
        super().__init__(
            f"Differing given palette size to actual size: PaletteMax={declared}, entries={actual}"
        )


class InvalidPaletteEntry(SchematicFormatError):
    """A palette key could not be parsed as a block state."""

    def __init__(self, key: str, cause: Optional[Exception] = None):
        self.key = key
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Invalid BlockState in schematic: {key}{detail}")


class UnresolvedPaletteId(SchematicFormatError):
    def __init__(self, palette_id: int):
        self.palette_id = palette_id
        super().__init__(f"Block data references palette id {palette_id}, which is not in the palette")


class VarintTooLong(SchematicFormatError):
    def __init__(self, offset: int):
        self.offset = offset
        super().__init__(f"VarInt too big at byte {offset} (probably corrupted data)")


class TruncatedVarint(SchematicFormatError):
    def __init__(self, offset: int):
        self.offset = offset
        super().__init__(f"Block data ends inside a VarInt starting at byte {offset}")


class BlockDataCountMismatch(SchematicFormatError):
    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Block data holds {actual} entries, expected {expected}")


class TileEntityParseError(SchematicFormatError):
    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Failed to load Tile Entities: {cause}")


class TileEntityOutOfBounds(SchematicFormatError):
    def __init__(self, pos: Tuple[int, int, int]):
        self.pos = tuple(pos)
        super().__init__(f"Tile entity at {self.pos} lies outside the schematic")


class BlockStateParseError(ValueError):
    """Raised by the block state grammar for malformed input."""
