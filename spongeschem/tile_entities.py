"""
Tile entity records: the TileEntities list of a schematic.

On disk each record is a Compound with:
- Pos: IntArray [x, y, z], relative to the schematic's minimum point
- Id: block entity type, e.g. "minecraft:chest"
- any other entries of the block entity (Items, Text1, ...)

In memory the record lives on its block as the BaseBlock NBT, keyed `id`
and without `Pos`, since the block's position is already known. Every
other entry is carried through as is.
"""

from typing import Dict, Tuple

from nbtlib.tag import Compound, IntArray, List

from spongeschem.clipboard import BlockVector, Clipboard
from spongeschem.compat import CompatibilityPipeline
from spongeschem.errors import (
    SchematicFormatError,
    TileEntityOutOfBounds,
    TileEntityParseError,
)
from spongeschem.palette import BlockState
from spongeschem.tags import int_array, kind_name, require


def read_tile_entities(
    schematic: Compound,
    size: Tuple[int, int, int],
) -> Dict[BlockVector, Compound]:
    """
    Collect the TileEntities list into a position -> record map.

    Args:
        schematic: The root Schematic compound
        size: (width, height, length) of the grid

    Returns:
        Dict of relative position to the record

    Raises:
        TileEntityParseError: If the list or one of its records is malformed
        TileEntityOutOfBounds: If a record lies outside the grid
    """
    try:
        entities = require(schematic, "TileEntities", List)

        records: Dict[BlockVector, Compound] = {}
        for record in entities:
            if not isinstance(record, Compound):
                raise SchematicFormatError(
                    f"TileEntities must hold Compounds, got {kind_name(record)}"
                )
            pos = require(record, "Pos", IntArray)
            if len(pos) != 3:
                raise SchematicFormatError(f"Pos must have 3 elements, got {len(pos)}")
            key = BlockVector(*(int(v) for v in pos))
            if key in records:
                raise SchematicFormatError(f"Duplicate tile entity at {tuple(key)}")
            records[key] = record
    except SchematicFormatError as e:
        raise TileEntityParseError(e) from e

    width, height, length = size
    for pos in records:
        if not (0 <= pos.x < width and 0 <= pos.y < height and 0 <= pos.z < length):
            raise TileEntityOutOfBounds(pos)
    return records


def to_block_nbt(
    state: BlockState,
    record: Compound,
    compatibility: CompatibilityPipeline,
) -> Compound:
    """
    Turn an on-disk record into the NBT carried by its block.

    The record is copied, run through the compatibility pipeline, then
    `Id` is renamed to `id` and `Pos` dropped.
    """
    values = Compound(compatibility.apply(state, Compound(record)))
    if "Id" in values:
        values["id"] = values.pop("Id")
    values.pop("Pos", None)
    return values


def to_record(rel: Tuple[int, int, int], nbt: Compound) -> Compound:
    """
    Inverse of to_block_nbt: build the on-disk record for a block.

    Raises:
        ValueError: If the NBT already carries a Pos entry
    """
    if "Pos" in nbt:
        raise ValueError(f"Block NBT at {tuple(rel)} must not carry Pos")
    values = Compound(nbt)
    if "id" in values:
        values["Id"] = values.pop("id")
    values["Pos"] = int_array(rel)
    return values


def write_tile_entities(clipboard: Clipboard) -> List:
    """Build the TileEntities list for every block carrying NBT, in BlockData order."""
    return List[Compound]([
        to_record(rel, block.nbt)
        for rel, block in clipboard.iter_blocks()
        if block.has_nbt
    ])
