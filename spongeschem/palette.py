"""
Block states and the palette that maps them to small integer ids.

A block state string looks like `minecraft:oak_stairs[facing=north,half=top]`.
The namespace defaults to `minecraft` and properties are optional. Inside a
schematic the Palette compound maps each such string to its id; the ids are
what BlockData stores.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, Tuple

from spongeschem.errors import (
    BlockStateParseError,
    InvalidPaletteEntry,
    PaletteSizeMismatch,
    UnresolvedPaletteId,
)
from nbtlib.tag import Compound, Int

from spongeschem.tags import require

DEFAULT_NAMESPACE = "minecraft"

_ID_RE = re.compile(r"^(?:([a-z0-9_.-]+):)?([a-z0-9_./-]+)$")
_PROPERTY_RE = re.compile(r"^([a-z0-9_]+)=([a-z0-9_]+)$")


@dataclass(frozen=True, order=True)
class BlockState:
    """
    An immutable block type plus its property values.

    Properties are kept sorted by name so equal states compare and hash equal
    regardless of the order they were written in.
    """
    block_id: str
    properties: Tuple[Tuple[str, str], ...] = field(default=())

    @classmethod
    def of(cls, block_id: str, **properties: str) -> "BlockState":
        return cls(block_id, tuple(sorted(properties.items())))

    @property
    def is_air(self) -> bool:
        return self.block_id in AIR_IDS

    def __str__(self) -> str:
        if not self.properties:
            return self.block_id
        props = ",".join(f"{k}={v}" for k, v in self.properties)
        return f"{self.block_id}[{props}]"


AIR_IDS = frozenset({"minecraft:air", "minecraft:cave_air", "minecraft:void_air"})
AIR = BlockState("minecraft:air")

BlockStateParser = Callable[[str], BlockState]


def parse_block_state(text: str) -> BlockState:
    """
    Parse a block state string.

    Args:
        text: e.g. "stone", "minecraft:stone" or "minecraft:chest[facing=west]"

    Returns:
        The parsed BlockState

    Raises:
        BlockStateParseError: If the text is not a valid block state
    """
    text = text.strip()
    props_text = None
    if text.endswith("]"):
        open_idx = text.find("[")
        if open_idx < 0:
            raise BlockStateParseError(f"Unbalanced ']' in block state: {text!r}")
        props_text = text[open_idx + 1:-1]
        text = text[:open_idx]
    elif "[" in text:
        raise BlockStateParseError(f"Unclosed '[' in block state: {text!r}")

    match = _ID_RE.match(text)
    if not match:
        raise BlockStateParseError(f"Invalid block id: {text!r}")
    namespace = match.group(1) or DEFAULT_NAMESPACE
    block_id = f"{namespace}:{match.group(2)}"

    properties: Dict[str, str] = {}
    if props_text:
        for part in props_text.split(","):
            prop = _PROPERTY_RE.match(part.strip())
            if not prop:
                raise BlockStateParseError(f"Invalid property {part!r} in {block_id}")
            name, value = prop.groups()
            if name in properties:
                raise BlockStateParseError(f"Duplicate property {name!r} in {block_id}")
            properties[name] = value

    return BlockState(block_id, tuple(sorted(properties.items())))


class Palette:
    """
    Bidirectional mapping between block states and palette ids.

    Ids are handed out in first-encounter order when building a palette for
    writing, so scanning cells in a fixed order always yields the same ids.
    """

    def __init__(self):
        self._by_id: Dict[int, BlockState] = {}
        self._by_state: Dict[BlockState, int] = {}

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[Tuple[int, BlockState]]:
        return iter(sorted(self._by_id.items()))

    def add(self, palette_id: int, state: BlockState) -> None:
        """Bind an explicit id, as found in a file."""
        if palette_id < 0:
            raise ValueError(f"Palette ids must be non-negative, got {palette_id}")
        self._by_id[palette_id] = state
        self._by_state.setdefault(state, palette_id)

    def id_for(self, state: BlockState) -> int:
        """Return the id of a state, assigning the next free one if new."""
        palette_id = self._by_state.get(state)
        if palette_id is None:
            palette_id = len(self._by_id)
            self.add(palette_id, state)
        return palette_id

    def state_for(self, palette_id: int) -> BlockState:
        state = self._by_id.get(palette_id)
        if state is None:
            raise UnresolvedPaletteId(palette_id)
        return state

    @classmethod
    def from_tag(
        cls,
        palette_tag: Compound,
        declared_max: int,
        parser: BlockStateParser = parse_block_state,
    ) -> "Palette":
        """
        Build a palette from the `Palette` compound of a schematic.

        Args:
            palette_tag: Compound of block state string -> Int id
            declared_max: Value of `PaletteMax`
            parser: Block state grammar

        Raises:
            PaletteSizeMismatch: If the entry count differs from declared_max
            MissingOrWrongTypeTag: If an id is not an Int
            InvalidPaletteEntry: If a key cannot be parsed
        """
        if len(palette_tag) != declared_max:
            raise PaletteSizeMismatch(declared_max, len(palette_tag))

        palette = cls()
        for key in palette_tag:
            palette_id = int(require(palette_tag, key, Int))
            try:
                state = parser(key)
            except ValueError as e:
                raise InvalidPaletteEntry(key, e) from e
            if palette_id < 0:
                raise InvalidPaletteEntry(key, ValueError(f"negative id {palette_id}"))
            if palette_id in palette._by_id:
                raise InvalidPaletteEntry(key, ValueError(f"id {palette_id} is used twice"))
            palette.add(palette_id, state)
        return palette

    def to_tag(self) -> Compound:
        return Compound({str(state): Int(palette_id) for palette_id, state in self})


__all__ = [
    "AIR",
    "BlockState",
    "BlockStateParser",
    "Palette",
    "parse_block_state",
]
