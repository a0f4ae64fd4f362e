from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

from .cursor import ByteCursor, ByteOrder
from .errors import NestingTooDeep, OrdinateNotApplicable, UnsupportedVariant, VariantMismatch

# ------------------------- Geometry type word -------------------------

WKB_Z_FLAG = 0x80000000
WKB_M_FLAG = 0x40000000
WKB_SRID_FLAG = 0x20000000

# Smallest BLOBs worth decoding: 8-byte GP header + 21-byte 2D point,
# and 8-byte GP header + byte-order marker + type word.
MIN_EXTREME_BLOB_SIZE = 29
MIN_EMPTY_BLOB_SIZE = 13

# Collection nesting accepted before a BLOB is rejected as malformed.
MAX_NESTING_DEPTH = 100


class GeometryKind(IntEnum):
    GEOMETRY = 0  # "any" when used as an expected kind
    POINT = 1
    LINESTRING = 2
    POLYGON = 3
    MULTIPOINT = 4
    MULTILINESTRING = 5
    MULTIPOLYGON = 6
    GEOMETRYCOLLECTION = 7


class Ordinate(IntEnum):
    X = 0
    Y = 1
    Z = 2
    M = 3


class Statistic(IntEnum):
    MIN = 0
    MAX = 1


class Emptiness(Enum):
    EMPTY = 1
    NON_EMPTY = 0
    ERROR = -1


# Kind every member of a homogeneous collection must have.
MEMBER_KIND = {
    GeometryKind.MULTIPOINT: GeometryKind.POINT,
    GeometryKind.MULTILINESTRING: GeometryKind.LINESTRING,
    GeometryKind.MULTIPOLYGON: GeometryKind.POLYGON,
    GeometryKind.GEOMETRYCOLLECTION: GeometryKind.GEOMETRY,
}


@dataclass(frozen=True)
class NodeHeader:
    byte_order: ByteOrder
    type_word: int
    kind: GeometryKind
    has_z: bool
    has_m: bool

    @property
    def dimension(self) -> int:
        return 2 + int(self.has_z) + int(self.has_m)


def decode_type_word(type_word: int):
    """
    Split a WKB type word into (kind code, has_z, has_m, has_srid).

    Z/M come from either the EWKB high bits or the ISO thousands suffix
    (1000 = Z, 2000 = M, 3000 = ZM); both encodings are honoured.
    """
    low = type_word & 0xFFFF
    suffix = low // 1000
    has_z = bool(type_word & WKB_Z_FLAG) or suffix in (1, 3)
    has_m = bool(type_word & WKB_M_FLAG) or suffix in (2, 3)
    has_srid = bool(type_word & WKB_SRID_FLAG)
    return low % 1000, has_z, has_m, has_srid


def read_node_header(cur: ByteCursor, byte_order: ByteOrder,
                     expected: GeometryKind = GeometryKind.GEOMETRY) -> NodeHeader:
    """Read marker, type word and optional SRID of one geometry node."""
    marker = cur.read_byte()
    if marker in (ByteOrder.BIG, ByteOrder.LITTLE):
        byte_order = ByteOrder(marker)

    type_word = cur.read_uint32(byte_order)
    code, has_z, has_m, has_srid = decode_type_word(type_word)
    if has_srid:
        cur.skip(4)

    if expected != GeometryKind.GEOMETRY and code != expected:
        raise VariantMismatch(f"expected {GeometryKind(expected).name}, found type code {code} at offset {cur.pos}")
    if not (GeometryKind.POINT <= code <= GeometryKind.GEOMETRYCOLLECTION):
        raise UnsupportedVariant(f"unknown geometry type code {code} (type word 0x{type_word:08x})")

    return NodeHeader(byte_order, type_word, GeometryKind(code), has_z, has_m)


def resolve_ordinate(node: NodeHeader, ordinate: Ordinate) -> int:
    """
    Slot index of ``ordinate`` inside one coordinate of ``node``.

    M sits in the 3rd slot when the node carries exactly three ordinates, so a
    3-dimension node queried for M is read at the Z slot.
    """
    dim = node.dimension
    if dim == 3 and ordinate == Ordinate.M:
        return int(Ordinate.Z)
    if ordinate >= dim:
        raise OrdinateNotApplicable(f"ordinate {Ordinate(ordinate).name} not present in a {dim}-dimension geometry")
    return int(ordinate)


def check_depth(depth: int, cur: ByteCursor) -> None:
    if depth > MAX_NESTING_DEPTH:
        raise NestingTooDeep(f"geometry nested more than {MAX_NESTING_DEPTH} levels deep at offset {cur.pos}")
