"""
BlockData codec: varint-encoded palette ids for every cell of the grid.

Varint format:
- 7 data bits per byte, least significant group first
- Bit 7 set means another byte follows
- At most 5 bytes per value

Cell order:
- index = (y * length + z) * width + x
- X varies fastest, then Z, then Y
- Arrays returned here are indexed [x, y, z]
"""

from typing import Iterator, Tuple

import numpy as np

from spongeschem.errors import BlockDataCountMismatch, TruncatedVarint, VarintTooLong

MAX_VARINT_BYTES = 5
MAX_VARINT_VALUE = (1 << (7 * MAX_VARINT_BYTES)) - 1


def encode_varint(value: int) -> bytes:
    """
    Encode a non-negative integer as a varint.

    Raises:
        ValueError: If value is negative or needs more than 5 bytes
    """
    if value < 0 or value > MAX_VARINT_VALUE:
        raise ValueError(f"Value {value} cannot be encoded as a {MAX_VARINT_BYTES}-byte varint")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_varint(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Decode one varint starting at `offset`.

    Args:
        data: Encoded bytes
        offset: Position of the first byte of the varint

    Returns:
        Tuple of (value, number of bytes consumed)

    Raises:
        VarintTooLong: If 5 bytes all carry the continuation bit
        TruncatedVarint: If data ends before the varint is complete
    """
    value = 0
    consumed = 0
    while True:
        pos = offset + consumed
        if pos >= len(data):
            raise TruncatedVarint(offset)
        byte = data[pos]
        value |= (byte & 0x7F) << (7 * consumed)
        consumed += 1
        if not byte & 0x80:
            return value, consumed
        if consumed >= MAX_VARINT_BYTES:
            raise VarintTooLong(offset)


def iter_varints(data: bytes) -> Iterator[int]:
    """Yield every varint in `data`, in order."""
    offset = 0
    while offset < len(data):
        value, consumed = decode_varint(data, offset)
        offset += consumed
        yield value


def index_of(x: int, y: int, z: int, width: int, length: int) -> int:
    """Linear index of cell (x, y, z) in BlockData order."""
    return (y * length + z) * width + x


def coord_of(index: int, width: int, length: int) -> Tuple[int, int, int]:
    """Inverse of index_of: the (x, y, z) cell at a linear index."""
    layer = width * length
    y, rem = divmod(index, layer)
    z, x = divmod(rem, width)
    return x, y, z


def decode_block_data(data: bytes, width: int, height: int, length: int) -> np.ndarray:
    """
    Decode BlockData into a grid of palette ids.

    Args:
        data: Raw BlockData bytes
        width, height, length: Grid dimensions

    Returns:
        int64 array with shape [width, height, length]

    Raises:
        BlockDataCountMismatch: If the number of ids is not width*height*length,
            including data that ends inside a varint
        VarintTooLong: If a varint runs past 5 bytes
    """
    expected = width * height * length
    values = []
    try:
        for value in iter_varints(data):
            values.append(value)
    except TruncatedVarint as e:
        # The partial trailing varint does not count as an id
        raise BlockDataCountMismatch(expected, len(values)) from e
    if len(values) != expected:
        raise BlockDataCountMismatch(expected, len(values))

    # Linear order is [y][z][x]; move x to the front
    flat = np.array(values, dtype=np.int64)
    return flat.reshape((height, length, width)).transpose(2, 0, 1)


def encode_block_data(ids: np.ndarray) -> bytes:
    """
    Encode a grid of palette ids as BlockData.

    Args:
        ids: Integer array with shape [width, height, length]

    Returns:
        Varint bytes in y/z/x order
    """
    ids = np.asarray(ids)
    if ids.ndim != 3:
        raise ValueError(f"Grid must be 3D, got shape {ids.shape}")

    out = bytearray()
    for value in ids.transpose(1, 2, 0).ravel().tolist():
        out += encode_varint(value)
    return bytes(out)
