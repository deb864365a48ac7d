"""
spongeschem - Read and write Sponge Schematic (.schem) files.

A schematic stores a box of Minecraft blocks as:
- a palette of block state strings
- varint palette ids for every block (BlockData)
- tile entity data (chests, signs...) keyed by position
- an offset and optional origin used when pasting
"""

__version__ = "0.1.0"

from spongeschem.clipboard import BaseBlock, BlockVector, Clipboard, CuboidRegion
from spongeschem.compat import CompatibilityHandler, CompatibilityPipeline
from spongeschem.errors import SchematicFormatError
from spongeschem.palette import BlockState, Palette, parse_block_state
from spongeschem.schematic import (
    SpongeSchematicReader,
    SpongeSchematicWriter,
    decode,
    encode,
    is_schematic,
    load_schematic,
    save_schematic,
)

__all__ = [
    "BaseBlock",
    "BlockState",
    "BlockVector",
    "Clipboard",
    "CompatibilityHandler",
    "CompatibilityPipeline",
    "CuboidRegion",
    "Palette",
    "SchematicFormatError",
    "SpongeSchematicReader",
    "SpongeSchematicWriter",
    "decode",
    "encode",
    "is_schematic",
    "load_schematic",
    "parse_block_state",
    "save_schematic",
]
