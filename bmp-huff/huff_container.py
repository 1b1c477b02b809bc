import struct
from collections import namedtuple
from typing import Tuple

from huff_errors import ContainerError, EmptyAlphabetMismatch, MalformedTree, TruncatedInput
from huff_tree import HuffmanTree

__all__ = [
    "BMP_HEADER_SIZE", "FIXED_FIELDS", "MIN_CONTAINER_SIZE", "ContainerLayout",
    "ContainerError", "TruncatedInput", "MalformedTree", "EmptyAlphabetMismatch",
    "compress", "decompress", "pack_container", "read_layout",
]

BMP_HEADER_SIZE = 54

# original length (u64) + tree blob length (u32), little-endian
FIXED_FIELDS = struct.Struct("<QI")
MIN_CONTAINER_SIZE = FIXED_FIELDS.size + BMP_HEADER_SIZE

ContainerLayout = namedtuple("ContainerLayout", "original_length tree_blob header packed")


# -----------------------------------------------------------------------
# Layout: [u64 length][u32 tree len][tree blob][54-byte header][packed bits]
# No magic and no version field; files from the older tool must still load.
# -----------------------------------------------------------------------
def compress(header: bytes, payload: bytes) -> bytes:
    if len(header) != BMP_HEADER_SIZE:
        raise ValueError(f"Header must be {BMP_HEADER_SIZE} bytes, got {len(header)}")

    tree = HuffmanTree.build(payload)
    return pack_container(len(payload), tree.serialize(), header, tree.encode(payload))


def pack_container(original_length: int, tree_blob: bytes, header: bytes, packed: bytes) -> bytes:
    out = bytearray(FIXED_FIELDS.pack(original_length, len(tree_blob)))
    out += tree_blob
    out += header
    out += packed
    return bytes(out)


def read_layout(blob: bytes) -> ContainerLayout:
    if len(blob) < FIXED_FIELDS.size:
        raise TruncatedInput(
            f"Container is {len(blob)} bytes, fixed fields need {FIXED_FIELDS.size}")

    original_length, tree_len = FIXED_FIELDS.unpack_from(blob, 0)
    cursor = FIXED_FIELDS.size
    if cursor + tree_len > len(blob):
        raise TruncatedInput(
            f"Tree blob of {tree_len} bytes at {cursor} runs past end ({len(blob)} bytes)")
    tree_blob = blob[cursor:cursor + tree_len]
    cursor += tree_len

    if cursor + BMP_HEADER_SIZE > len(blob):
        raise TruncatedInput(
            f"Header at {cursor} needs {BMP_HEADER_SIZE} bytes, "
            f"{len(blob) - cursor} left")
    header = blob[cursor:cursor + BMP_HEADER_SIZE]
    cursor += BMP_HEADER_SIZE

    return ContainerLayout(original_length, tree_blob, header, blob[cursor:])


def decompress(blob: bytes) -> Tuple[bytes, bytes]:
    layout = read_layout(blob)
    tree = HuffmanTree.deserialize(layout.tree_blob)
    payload = tree.decode(layout.packed, layout.original_length)
    return layout.header, payload
