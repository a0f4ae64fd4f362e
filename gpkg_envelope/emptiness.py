from __future__ import annotations

import math

from .cursor import ByteCursor, ByteOrder
from .errors import InvalidCount
from .wkb import MEMBER_KIND, Emptiness, GeometryKind, NodeHeader, check_depth, read_node_header


def _read_count(cur: ByteCursor, order: ByteOrder, what: str, minimum: int = 0) -> int:
    n = cur.read_int32(order)
    if n < minimum:
        raise InvalidCount(f"{what} count {n} at offset {cur.pos - 4}")
    return n


def _point_emptiness(cur: ByteCursor, order: ByteOrder, dim: int) -> Emptiness:
    # WKB has no empty point; NaN in every ordinate is the GeoPackage convention
    cur.require(dim * 8)
    for i in range(dim):
        if not math.isnan(cur.read_double(order)):
            cur.pos += (dim - i - 1) * 8
            return Emptiness.NON_EMPTY
    return Emptiness.EMPTY


def _linestring_emptiness(cur: ByteCursor, order: ByteOrder, dim: int) -> Emptiness:
    n = _read_count(cur, order, "point")
    if n == 0:
        return Emptiness.EMPTY
    cur.skip(n * dim * 8)
    return Emptiness.NON_EMPTY


def _polygon_emptiness(cur: ByteCursor, order: ByteOrder, dim: int) -> Emptiness:
    rings = _read_count(cur, order, "ring", minimum=1)
    if rings == 1:
        return _linestring_emptiness(cur, order, dim)
    for _ in range(rings):
        _linestring_emptiness(cur, order, dim)
    return Emptiness.NON_EMPTY


def _members_emptiness(cur: ByteCursor, node: NodeHeader, depth: int) -> Emptiness:
    member_kind = MEMBER_KIND[node.kind]
    n = _read_count(cur, node.byte_order, "member")
    result = Emptiness.EMPTY
    # every member is walked so the cursor lands after the container
    for _ in range(n):
        if read_geometry_emptiness(cur, node.byte_order, member_kind, depth + 1) == Emptiness.NON_EMPTY:
            result = Emptiness.NON_EMPTY
    return result


def read_geometry_emptiness(cur: ByteCursor, byte_order: ByteOrder,
                            expected: GeometryKind = GeometryKind.GEOMETRY,
                            depth: int = 0) -> Emptiness:
    """EMPTY or NON_EMPTY for the WKB geometry at the cursor; decode errors raise."""
    check_depth(depth, cur)
    node = read_node_header(cur, byte_order, expected)
    order, dim = node.byte_order, node.dimension

    if node.kind == GeometryKind.POINT:
        return _point_emptiness(cur, order, dim)
    if node.kind == GeometryKind.LINESTRING:
        return _linestring_emptiness(cur, order, dim)
    if node.kind == GeometryKind.POLYGON:
        return _polygon_emptiness(cur, order, dim)
    return _members_emptiness(cur, node, depth)
