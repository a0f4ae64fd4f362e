from __future__ import annotations

import struct
import sys
from enum import IntEnum
from typing import Union

from .errors import TruncatedInput

BytesLike = Union[bytes, bytearray, memoryview]


class ByteOrder(IntEnum):
    """WKB byte-order marker values."""
    BIG = 0
    LITTLE = 1

    @classmethod
    def native(cls) -> "ByteOrder":
        return cls.LITTLE if sys.byteorder == "little" else cls.BIG


_INT32 = {ByteOrder.BIG: struct.Struct(">i"), ByteOrder.LITTLE: struct.Struct("<i")}
_UINT32 = {ByteOrder.BIG: struct.Struct(">I"), ByteOrder.LITTLE: struct.Struct("<I")}
_DOUBLE = {ByteOrder.BIG: struct.Struct(">d"), ByteOrder.LITTLE: struct.Struct("<d")}


class ByteCursor:
    """
    Bounds-checked positional reader over an immutable buffer.

    Every read checks ``position + width <= len(buf)`` before touching the data
    and raises TruncatedInput otherwise. A failed read leaves the cursor in an
    unspecified state: the whole decode must be abandoned.
    """
    __slots__ = ("buf", "pos")

    def __init__(self, data: BytesLike, pos: int = 0):
        self.buf = memoryview(data).cast("B") if isinstance(data, memoryview) else memoryview(data)
        self.pos = pos

    def __len__(self) -> int:
        return len(self.buf)

    @property
    def position(self) -> int:
        return self.pos

    @property
    def remaining(self) -> int:
        return len(self.buf) - self.pos

    def require(self, n: int) -> None:
        if n < 0 or self.pos + n > len(self.buf):
            raise TruncatedInput(f"need {n} bytes at offset {self.pos}, buffer has {len(self.buf)}")

    def skip(self, n: int) -> None:
        self.require(n)
        self.pos += n

    def seek(self, pos: int) -> None:
        if not (0 <= pos <= len(self.buf)):
            raise TruncatedInput(f"seek to {pos} outside buffer of {len(self.buf)} bytes")
        self.pos = pos

    def read_byte(self) -> int:
        self.require(1)
        b = self.buf[self.pos]
        self.pos += 1
        return b

    def _unpack(self, fmt: struct.Struct):
        self.require(fmt.size)
        v = fmt.unpack_from(self.buf, self.pos)[0]
        self.pos += fmt.size
        return v

    def read_int32(self, order: ByteOrder) -> int:
        return self._unpack(_INT32[order])

    def read_uint32(self, order: ByteOrder) -> int:
        return self._unpack(_UINT32[order])

    def read_double(self, order: ByteOrder) -> float:
        return self._unpack(_DOUBLE[order])
