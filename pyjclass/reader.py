"""
Big-endian byte cursor used by every decode step.
"""

import struct
from typing import Union

from .errors import TruncatedInputError


Buffer = Union[bytes, bytearray, memoryview]


class ByteCursor:
    """Reads a class file buffer front to back."""

    def __init__(self, data: Buffer, offset: int = 0):
        self.data = bytes(data)
        if not 0 <= offset <= len(self.data):
            raise ValueError(f"Offset {offset} outside buffer of {len(self.data)} bytes")
        self.pos = offset

    @property
    def offset(self) -> int:
        return self.pos

    @property
    def remaining(self) -> int:
        return len(self.data) - self.pos

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.data)

    def _require(self, width: int):
        if width > self.remaining:
            raise TruncatedInputError(self.pos, width, self.remaining)

    def read_u1(self) -> int:
        self._require(1)
        val = self.data[self.pos]
        self.pos += 1
        return val

    def read_u2(self) -> int:
        self._require(2)
        val = struct.unpack_from(">H", self.data, self.pos)[0]
        self.pos += 2
        return val

    def read_u4(self) -> int:
        self._require(4)
        val = struct.unpack_from(">I", self.data, self.pos)[0]
        self.pos += 4
        return val

    def read_bytes(self, length: int) -> bytes:
        if length < 0:
            raise ValueError(f"Negative read length: {length}")
        self._require(length)
        val = self.data[self.pos:self.pos + length]
        self.pos += length
        return val
