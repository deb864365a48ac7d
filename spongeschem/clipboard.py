"""
In-memory voxel region (clipboard) read from or written to a schematic.

Coordinate convention:
- Absolute positions are world block coordinates
- Relative positions are offsets from the region's minimum point
- The cell array is indexed [x, y, z] relative to the minimum point
- The origin is an anchor for pasting, independent of the minimum point
"""

from dataclasses import dataclass
from typing import Iterator, NamedTuple, Optional, Tuple, Union

import numpy as np
from nbtlib.tag import Compound

from spongeschem.palette import AIR, BlockState

MAX_DIMENSION = 0xFFFF


class BlockVector(NamedTuple):
    x: int
    y: int
    z: int

    def add(self, other: Tuple[int, int, int]) -> "BlockVector":
        return BlockVector(self.x + other[0], self.y + other[1], self.z + other[2])

    def subtract(self, other: Tuple[int, int, int]) -> "BlockVector":
        return BlockVector(self.x - other[0], self.y - other[1], self.z - other[2])


ONE = BlockVector(1, 1, 1)


@dataclass(frozen=True)
class CuboidRegion:
    """Axis aligned box of blocks, both corners inclusive."""
    minimum: BlockVector
    maximum: BlockVector

    @classmethod
    def from_size(cls, minimum: Tuple[int, int, int], size: Tuple[int, int, int]) -> "CuboidRegion":
        minimum = BlockVector(*minimum)
        return cls(minimum, minimum.add(size).subtract(ONE))

    @property
    def size(self) -> BlockVector:
        return self.maximum.subtract(self.minimum).add(ONE)

    @property
    def volume(self) -> int:
        width, height, length = self.size
        return width * height * length

    def contains(self, pos: Tuple[int, int, int]) -> bool:
        return all(lo <= p <= hi for lo, p, hi in zip(self.minimum, pos, self.maximum))


@dataclass(frozen=True)
class BaseBlock:
    """
    A block state with optional tile entity data.

    `nbt` is a Compound when the block is a tile entity (chest, sign...),
    otherwise None. It never holds `Pos`: the cell the block sits in is its
    position.
    """
    state: BlockState
    nbt: Optional[Compound] = None

    def __post_init__(self):
        if self.nbt is None:
            return
        if not isinstance(self.nbt, Compound):
            raise ValueError(f"Block NBT must be a Compound, got {type(self.nbt).__name__}")
        if "Pos" in self.nbt:
            raise ValueError("Block NBT must not carry Pos")

    @property
    def has_nbt(self) -> bool:
        return self.nbt is not None

    def __str__(self) -> str:
        if self.nbt is None:
            return str(self.state)
        return f"{self.state}{self.nbt.snbt()}"


AIR_BLOCK = BaseBlock(AIR)

BlockLike = Union[BlockState, BaseBlock]


class Clipboard:
    """
    A dense box of blocks with a paste origin.

    Every cell holds a BaseBlock; cells never set read back as air.

    Example:
        >>> region = CuboidRegion.from_size((10, 64, 10), (3, 2, 3))
        >>> clipboard = Clipboard(region)
        >>> clipboard.set_block((10, 64, 10), BlockState("minecraft:stone"))
        >>> clipboard.get_block((10, 64, 10)).state
        BlockState(block_id='minecraft:stone', properties=())
    """

    def __init__(self, region: CuboidRegion, origin: Optional[Tuple[int, int, int]] = None):
        size = region.size
        for dim in size:
            if dim < 1 or dim > MAX_DIMENSION:
                raise ValueError(
                    f"Clipboard dimensions must be in 1..{MAX_DIMENSION}, got {tuple(size)}"
                )
        self.region = region
        self.origin = BlockVector(*(origin if origin is not None else region.minimum))
        self._cells = np.full(tuple(size), AIR_BLOCK, dtype=object)

    @property
    def minimum(self) -> BlockVector:
        return self.region.minimum

    @property
    def maximum(self) -> BlockVector:
        return self.region.maximum

    @property
    def dimensions(self) -> BlockVector:
        return self.region.size

    def _to_relative(self, pos: Tuple[int, int, int]) -> BlockVector:
        if not self.region.contains(pos):
            raise IndexError(f"Position {tuple(pos)} is outside {self.minimum}..{self.maximum}")
        return BlockVector(*pos).subtract(self.minimum)

    def set_block(self, pos: Tuple[int, int, int], block: BlockLike) -> None:
        """Set the block at an absolute position."""
        self.set_relative(self._to_relative(pos), block)

    def get_block(self, pos: Tuple[int, int, int]) -> BaseBlock:
        """Get the block at an absolute position."""
        return self.get_relative(self._to_relative(pos))

    def _check_relative(self, rel: Tuple[int, int, int]) -> Tuple[int, int, int]:
        x, y, z = rel
        width, height, length = self.dimensions
        if not (0 <= x < width and 0 <= y < height and 0 <= z < length):
            raise IndexError(f"Relative position {tuple(rel)} is outside {tuple(self.dimensions)}")
        return x, y, z

    def set_relative(self, rel: Tuple[int, int, int], block: BlockLike) -> None:
        if isinstance(block, BlockState):
            block = BaseBlock(block)
        x, y, z = self._check_relative(rel)
        self._cells[x, y, z] = block

    def get_relative(self, rel: Tuple[int, int, int]) -> BaseBlock:
        x, y, z = self._check_relative(rel)
        return self._cells[x, y, z]

    def fill(self, cells: np.ndarray) -> None:
        """Replace every cell at once from a [x, y, z] object array of BaseBlocks."""
        if cells.shape != tuple(self.dimensions):
            raise ValueError(f"Cell array shape {cells.shape} does not match {tuple(self.dimensions)}")
        self._cells = np.array(cells, dtype=object)

    def iter_blocks(self) -> Iterator[Tuple[BlockVector, BaseBlock]]:
        """
        Iterate (relative position, block) in BlockData order.

        Y is the outermost loop, then Z, then X.
        """
        width, height, length = self.dimensions
        for y in range(height):
            for z in range(length):
                for x in range(width):
                    yield BlockVector(x, y, z), self._cells[x, y, z]

    def tile_entity_count(self) -> int:
        return sum(1 for block in self._cells.flat if block.has_nbt)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Clipboard):
            return NotImplemented
        return (
            self.region == other.region
            and self.origin == other.origin
            and bool(np.array_equal(self._cells, other._cells))
        )

    def __repr__(self) -> str:
        return (
            f"Clipboard(min={tuple(self.minimum)}, size={tuple(self.dimensions)}, "
            f"origin={tuple(self.origin)})"
        )
