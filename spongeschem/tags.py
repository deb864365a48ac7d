"""
Named Binary Tag (NBT) helpers on top of nbtlib.

Tag kinds are the nbtlib tag classes:
- Byte, Short, Int, Long: signed 8/16/32/64-bit integers
- Float, Double: IEEE 754 single/double precision
- ByteArray, IntArray, LongArray: numpy backed arrays
- String, List, Compound

A named tag is a kind byte, a String name and the payload, all big-endian.
A schematic file is exactly one named Compound, written with nbtlib.File.
"""

import struct
from typing import BinaryIO, Iterable, Mapping, Tuple, Type

import numpy as np
from nbtlib.tag import (
    Base,
    Byte,
    ByteArray,
    Compound,
    Double,
    Float,
    Int,
    IntArray,
    List,
    Long,
    LongArray,
    Short,
    String,
)

from spongeschem.errors import MissingOrWrongTypeTag, TagParseError

BYTE_ORDER = "big"

TAG_TYPES = (
    Byte, Short, Int, Long, Float, Double,
    ByteArray, String, List, Compound, IntArray, LongArray,
)
_TYPES_BY_ID = {tag_type.tag_id: tag_type for tag_type in TAG_TYPES}

# What struct and nbtlib raise on truncated or malformed input
_PARSE_ERRORS = (
    AttributeError, EOFError, IndexError, KeyError,
    RecursionError, TypeError, ValueError, struct.error,
)


def kind_name(tag) -> str:
    """Kind of a tag as shown in error messages ("Int", "Compound"...)."""
    for tag_type in TAG_TYPES:
        if isinstance(tag, tag_type):
            return tag_type.__name__
    return type(tag).__name__


def require(container: Mapping[str, Base], key: str, kind: Type[Base]) -> Base:
    """
    Look up `key` in a Compound and check its kind.

    Args:
        container: Compound to look in
        key: Entry name
        kind: Expected nbtlib tag class, no coercion between kinds is done

    Returns:
        The stored tag

    Raises:
        MissingOrWrongTypeTag: If the key is absent or holds another kind
    """
    tag = container.get(key)
    if tag is None:
        raise MissingOrWrongTypeTag(key, kind.__name__, None)
    if not isinstance(tag, kind):
        raise MissingOrWrongTypeTag(key, kind.__name__, kind_name(tag))
    return tag


def read_named_tag(stream: BinaryIO) -> Tuple[str, Base]:
    """
    Read one named tag from a binary stream.

    Args:
        stream: Readable binary file object positioned at a tag

    Returns:
        Tuple of (name, tag)

    Raises:
        TagParseError: If the data is truncated or malformed
        OSError: If the stream itself fails
    """
    raw = stream.read(1)
    if not raw:
        raise TagParseError("Unexpected end of data, expected a named tag")
    tag_type = _TYPES_BY_ID.get(raw[0])
    if tag_type is None:
        raise TagParseError(f"Unknown tag kind {raw[0]} for a named tag")

    try:
        name = String.parse(stream, BYTE_ORDER)
        tag = tag_type.parse(stream, BYTE_ORDER)
    except _PARSE_ERRORS as e:
        raise TagParseError(f"Malformed {tag_type.__name__} tag: {e}") from e
    return str(name), tag


def byte_array(data: bytes) -> ByteArray:
    """ByteArray holding `data` verbatim; bytes above 0x7f are stored as negatives."""
    return ByteArray(np.frombuffer(bytes(data), dtype=np.int8))


def array_bytes(tag: ByteArray) -> bytes:
    """Raw bytes of a ByteArray, the inverse of byte_array."""
    return np.asarray(tag, dtype=np.int8).tobytes()


def int_array(values: Iterable[int]) -> IntArray:
    return IntArray([int(v) for v in values])
