import os
from typing import Union

import huff_container
from huff_container import BMP_HEADER_SIZE

PathLike = Union[str, os.PathLike]


def read_file_bytes(path: PathLike) -> bytes:
    with open(path, 'rb') as f:
        return f.read()


class BmpImage:
    """A BMP file split into its fixed header and everything after it.

    The header is carried through compression verbatim; only ``data`` is
    Huffman coded.
    """

    def __init__(self, header: bytes, data: bytes):
        if len(header) != BMP_HEADER_SIZE:
            raise ValueError(f"BMP header must be {BMP_HEADER_SIZE} bytes, got {len(header)}")
        self.header = bytes(header)
        self.data = bytes(data)

    @classmethod
    def from_bytes(cls, raw: bytes) -> 'BmpImage':
        if len(raw) < BMP_HEADER_SIZE:
            raise ValueError(f"Not a valid BMP (only {len(raw)} bytes, header needs {BMP_HEADER_SIZE})")
        return cls(raw[:BMP_HEADER_SIZE], raw[BMP_HEADER_SIZE:])

    @classmethod
    def read(cls, path: PathLike) -> 'BmpImage':
        return cls.from_bytes(read_file_bytes(path))

    def to_bytes(self) -> bytes:
        return self.header + self.data

    def write(self, path: PathLike) -> None:
        with open(path, 'wb') as f:
            f.write(self.header)
            f.write(self.data)

    def compress(self) -> bytes:
        return huff_container.compress(self.header, self.data)

    @classmethod
    def decompress(cls, blob: bytes) -> 'BmpImage':
        header, data = huff_container.decompress(blob)
        return cls(header, data)
