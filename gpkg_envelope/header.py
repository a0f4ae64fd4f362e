from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from .cursor import ByteCursor, ByteOrder
from .errors import MalformedHeader
from .wkb import Ordinate, Statistic

# ------------------------- GeoPackageBinary header -------------------------

GPKG_MAGIC = b"GP"
GPKG_BINARY_VERSION = 0x00

EXTENDED_TYPE_BIT = 0x20
EMPTY_BIT = 0x10
ENVELOPE_BITS = 0x0E
BYTE_ORDER_BIT = 0x01

HEADER_FIXED_SIZE = 8


class EnvelopeType(IntEnum):
    NONE = 0
    XY = 1
    XYZ = 2
    XYM = 3
    XYZM = 4

    @property
    def dimension(self) -> int:
        return _ENVELOPE_DIMENSION[self]

    @property
    def size(self) -> int:
        return 2 * 8 * self.dimension

    @property
    def has_z(self) -> bool:
        return self in (EnvelopeType.XYZ, EnvelopeType.XYZM)

    @property
    def has_m(self) -> bool:
        return self in (EnvelopeType.XYM, EnvelopeType.XYZM)


_ENVELOPE_DIMENSION = {
    EnvelopeType.NONE: 0,
    EnvelopeType.XY: 2,
    EnvelopeType.XYZ: 3,
    EnvelopeType.XYM: 3,
    EnvelopeType.XYZM: 4,
}


@dataclass(frozen=True)
class OuterHeader:
    flags: int
    is_empty: bool
    envelope_type: EnvelopeType
    byte_order: ByteOrder
    extended: bool
    envelope_offset: int
    body_offset: int


def parse_header(cur: ByteCursor) -> OuterHeader:
    """
    Decode the GP header at the cursor and leave the cursor on the geometry body.

    The SRS id is skipped unread; envelope bytes are skipped by count and only
    decoded on demand by ``read_header_extreme``.
    """
    start = cur.pos
    cur.require(HEADER_FIXED_SIZE)
    if bytes(cur.buf[start:start + 2]) != GPKG_MAGIC:
        raise MalformedHeader(f"missing GP magic at offset {start}")
    cur.skip(2)
    version = cur.read_byte()
    if version != GPKG_BINARY_VERSION:
        raise MalformedHeader(f"unsupported GeoPackageBinary version {version}")

    flags = cur.read_byte()
    env_code = (flags & ENVELOPE_BITS) >> 1
    if env_code > EnvelopeType.XYZM:
        raise MalformedHeader(f"unknown envelope type {env_code}")
    envelope_type = EnvelopeType(env_code)

    cur.skip(4)  # srs_id
    envelope_offset = cur.pos
    cur.skip(envelope_type.size)

    return OuterHeader(
        flags=flags,
        is_empty=bool(flags & EMPTY_BIT),
        envelope_type=envelope_type,
        byte_order=ByteOrder.LITTLE if flags & BYTE_ORDER_BIT else ByteOrder.BIG,
        extended=bool(flags & EXTENDED_TYPE_BIT),
        envelope_offset=envelope_offset,
        body_offset=cur.pos,
    )


def _envelope_slot(envelope_type: EnvelopeType, ordinate: Ordinate) -> Optional[int]:
    if ordinate in (Ordinate.X, Ordinate.Y):
        return int(ordinate)
    if ordinate == Ordinate.Z:
        return 2 if envelope_type.has_z else None
    if not envelope_type.has_m:
        return None
    # XYM keeps M in the third slot
    return 2 if envelope_type == EnvelopeType.XYM else 3


def read_header_extreme(buf, header: OuterHeader, ordinate: Ordinate,
                        statistic: Statistic) -> Optional[float]:
    """
    Fast path: the requested extreme straight from the header envelope.

    Minimums occupy the first ``dimension`` doubles of the envelope and maximums
    the next ``dimension``. Returns None when the envelope is absent, does not
    carry the ordinate, or holds NaN in that slot; callers then derive the value
    from the geometry body.
    """
    env = header.envelope_type
    if env == EnvelopeType.NONE:
        return None
    slot = _envelope_slot(env, ordinate)
    if slot is None:
        return None
    if statistic == Statistic.MAX:
        slot += env.dimension

    cur = ByteCursor(buf, header.envelope_offset + slot * 8)
    value = cur.read_double(header.byte_order)
    if math.isnan(value):
        return None
    return value

