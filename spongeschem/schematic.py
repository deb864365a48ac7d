"""
Sponge Schematic (version 1) reader and writer.

File layout (one named Compound "Schematic", NBT big-endian):
- Version: Int, always 1
- Metadata: Compound, optional WEOffsetX/Y/Z Ints
- Width, Height, Length: Short, read as unsigned, each > 0
- Offset: IntArray [x, y, z], the minimum point of the region
- PaletteMax: Int, number of palette entries
- Palette: Compound of block state string -> Int id
- BlockData: ByteArray of varint palette ids, y/z/x order
- TileEntities: List of Compound, each with Pos IntArray and Id String

.schem files on disk are gzip-compressed.

Origin handling:
- With WEOffsetX/Y/Z present, origin = Offset - WEOffset
- Otherwise origin = Offset
- The region always starts at Offset
"""

import gzip
import io
import logging
import zlib
from pathlib import Path
from typing import BinaryIO, Optional, Union

import numpy as np
from nbtlib import File
from nbtlib.tag import ByteArray, Compound, Int, IntArray, Short

from spongeschem.blockdata import decode_block_data, encode_block_data, index_of
from spongeschem.clipboard import BaseBlock, BlockVector, Clipboard, CuboidRegion
from spongeschem.compat import CompatibilityPipeline
from spongeschem.errors import (
    InvalidDimensions,
    InvalidOffset,
    InvalidRoot,
    SchematicFormatError,
    TagParseError,
    UnsupportedVersion,
)
from spongeschem.palette import BlockStateParser, Palette, parse_block_state
from spongeschem.tags import (
    BYTE_ORDER,
    array_bytes,
    byte_array,
    int_array,
    kind_name,
    read_named_tag,
    require,
)
from spongeschem.tile_entities import read_tile_entities, to_block_nbt, write_tile_entities

logger = logging.getLogger(__name__)

ROOT_NAME = "Schematic"
VERSION = 1
FILE_EXTENSION = ".schem"
GZIP_MAGIC = b"\x1f\x8b"

LEGACY_OFFSET_KEYS = ("WEOffsetX", "WEOffsetY", "WEOffsetZ")


def _unsigned_short(value: int) -> int:
    return value & 0xFFFF


def _signed_short(value: int) -> int:
    return value - 0x10000 if value > 0x7FFF else value


class SpongeSchematicReader:
    """
    Read a clipboard from an uncompressed NBT stream.

    The reader owns the stream; use it as a context manager (or call close())
    so the stream is released whether or not reading succeeds.

    Args:
        stream: Readable binary stream positioned at the root tag
        parser: Block state grammar used for palette keys
        compatibility: Rewrites applied to tile entity data
    """

    def __init__(
        self,
        stream: BinaryIO,
        parser: BlockStateParser = parse_block_state,
        compatibility: Optional[CompatibilityPipeline] = None,
    ):
        if stream is None:
            raise TypeError("stream must not be None")
        self.stream = stream
        self.parser = parser
        self.compatibility = compatibility if compatibility is not None else CompatibilityPipeline()

    def __enter__(self) -> "SpongeSchematicReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.stream.close()

    def read(self) -> Clipboard:
        """
        Decode the stream into a Clipboard.

        Raises:
            SchematicFormatError: If the data is not a valid version 1 schematic
            OSError: If the underlying stream fails
        """
        name, root = read_named_tag(self.stream)
        if name != ROOT_NAME or not isinstance(root, Compound):
            raise InvalidRoot(name, kind_name(root))

        version = int(require(root, "Version", Int))
        if version != VERSION:
            raise UnsupportedVersion(version)
        return self._read_version1(root)

    def _read_version1(self, schematic: Compound) -> Clipboard:
        metadata = require(schematic, "Metadata", Compound)

        width = _unsigned_short(int(require(schematic, "Width", Short)))
        height = _unsigned_short(int(require(schematic, "Height", Short)))
        length = _unsigned_short(int(require(schematic, "Length", Short)))
        if not (width > 0 and height > 0 and length > 0):
            raise InvalidDimensions(width, height, length)

        offset_parts = require(schematic, "Offset", IntArray).tolist()
        if len(offset_parts) != 3:
            raise InvalidOffset(len(offset_parts))
        minimum = BlockVector(*offset_parts)

        if LEGACY_OFFSET_KEYS[0] in metadata:
            # Written by WorldEdit: the origin is stored relative to the minimum
            legacy = BlockVector(*(int(require(metadata, key, Int)) for key in LEGACY_OFFSET_KEYS))
            origin = minimum.subtract(legacy)
        else:
            origin = minimum
        region = CuboidRegion.from_size(minimum, (width, height, length))

        palette_max = int(require(schematic, "PaletteMax", Int))
        palette_tag = require(schematic, "Palette", Compound)
        palette = Palette.from_tag(palette_tag, palette_max, self.parser)

        block_data = array_bytes(require(schematic, "BlockData", ByteArray))
        tile_entities = read_tile_entities(schematic, (width, height, length))

        logger.debug(
            "Reading schematic %dx%dx%d at %s, origin %s, %d palette entries, %d tile entities",
            width, height, length, tuple(minimum), tuple(origin), len(palette), len(tile_entities),
        )

        ids = decode_block_data(block_data, width, height, length)

        # One shared BaseBlock per distinct id; unknown ids fail here
        unique_ids, inverse = np.unique(ids, return_inverse=True)
        blocks = np.empty(len(unique_ids), dtype=object)
        for i, palette_id in enumerate(unique_ids.tolist()):
            blocks[i] = BaseBlock(palette.state_for(palette_id))

        clipboard = Clipboard(region, origin)
        clipboard.fill(blocks[inverse].reshape(ids.shape))

        for rel in sorted(tile_entities, key=lambda p: index_of(p.x, p.y, p.z, width, length)):
            state = clipboard.get_relative(rel).state
            nbt = to_block_nbt(state, tile_entities[rel], self.compatibility)
            clipboard.set_relative(rel, BaseBlock(state, nbt))

        return clipboard


class SpongeSchematicWriter:
    """
    Write a clipboard to an uncompressed NBT stream.

    Like the reader, the writer owns its stream.
    """

    def __init__(self, stream: BinaryIO):
        if stream is None:
            raise TypeError("stream must not be None")
        self.stream = stream

    def __enter__(self) -> "SpongeSchematicWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.stream.close()

    def write(self, clipboard: Clipboard) -> None:
        width, height, length = clipboard.dimensions

        # Ids in first-encounter order over the BlockData scan
        palette = Palette()
        ids = np.empty((width, height, length), dtype=np.int64)
        for rel, block in clipboard.iter_blocks():
            ids[rel] = palette.id_for(block.state)

        metadata = {}
        if clipboard.origin != clipboard.minimum:
            legacy = clipboard.minimum.subtract(clipboard.origin)
            for key, value in zip(LEGACY_OFFSET_KEYS, legacy):
                metadata[key] = Int(value)

        tile_entities = write_tile_entities(clipboard)
        logger.debug(
            "Writing schematic %dx%dx%d at %s, origin %s, %d palette entries, %d tile entities",
            width, height, length, tuple(clipboard.minimum), tuple(clipboard.origin),
            len(palette), len(tile_entities),
        )

        schematic = {
            "Version": Int(VERSION),
            "Metadata": Compound(metadata),
            "Width": Short(_signed_short(width)),
            "Height": Short(_signed_short(height)),
            "Length": Short(_signed_short(length)),
            "Offset": int_array(clipboard.minimum),
            "PaletteMax": Int(len(palette)),
            "Palette": palette.to_tag(),
            "BlockData": byte_array(encode_block_data(ids)),
            "TileEntities": tile_entities,
        }
        File(schematic, root_name=ROOT_NAME).write(self.stream, byteorder=BYTE_ORDER)


def decode(
    stream: BinaryIO,
    parser: BlockStateParser = parse_block_state,
    compatibility: Optional[CompatibilityPipeline] = None,
) -> Clipboard:
    """
    Read a clipboard from an uncompressed NBT stream, closing it afterwards.

    Args:
        stream: Readable binary stream
        parser: Block state grammar used for palette keys
        compatibility: Rewrites applied to tile entity data

    Returns:
        The decoded Clipboard

    Raises:
        SchematicFormatError: If the data is not a valid schematic
        OSError: If reading the stream fails
    """
    with SpongeSchematicReader(stream, parser, compatibility) as reader:
        return reader.read()


def encode(clipboard: Clipboard, stream: BinaryIO) -> None:
    """Write a clipboard to an uncompressed NBT stream, closing it afterwards."""
    with SpongeSchematicWriter(stream) as writer:
        writer.write(clipboard)


def _read_file_bytes(path: Path) -> bytes:
    with open(path, "rb") as f:
        data = f.read()
    if data[:2] != GZIP_MAGIC:
        return data
    try:
        return gzip.decompress(data)
    except (EOFError, zlib.error, gzip.BadGzipFile) as e:
        raise TagParseError(f"Corrupt gzip data in {path}: {e}") from e


def load_schematic(
    path: Union[str, Path],
    parser: BlockStateParser = parse_block_state,
    compatibility: Optional[CompatibilityPipeline] = None,
) -> Clipboard:
    """
    Load a .schem file.

    Gzip-compressed and raw NBT files are both accepted.

    Args:
        path: Path to the schematic
        parser: Block state grammar used for palette keys
        compatibility: Rewrites applied to tile entity data

    Returns:
        The decoded Clipboard
    """
    path = Path(path)
    data = _read_file_bytes(path)
    clipboard = decode(io.BytesIO(data), parser, compatibility)
    logger.info("Loaded schematic %s: %r", path, clipboard)
    return clipboard


def save_schematic(
    clipboard: Clipboard,
    path: Union[str, Path],
    compress: bool = True,
) -> Path:
    """
    Save a clipboard as a .schem file.

    Args:
        clipboard: Clipboard to save
        path: Output path, parent directories are created
        compress: Gzip the output (the usual form of .schem files)

    Returns:
        Path to the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    buf = io.BytesIO()
    SpongeSchematicWriter(buf).write(clipboard)
    data = buf.getvalue()
    if compress:
        data = gzip.compress(data)

    with open(path, "wb") as f:
        f.write(data)
    logger.info("Saved schematic %s (%d bytes)", path, len(data))
    return path


def is_schematic(path: Union[str, Path]) -> bool:
    """
    Format check: root is a Compound named Schematic with an Int Version.

    The rest of the file is not validated until it is loaded.
    """
    try:
        name, root = read_named_tag(io.BytesIO(_read_file_bytes(Path(path))))
        if name != ROOT_NAME or not isinstance(root, Compound):
            return False
        require(root, "Version", Int)
    except (SchematicFormatError, OSError):
        return False
    return True
