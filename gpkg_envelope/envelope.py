from __future__ import annotations

from .cursor import ByteCursor, ByteOrder
from .errors import InvalidCount
from .wkb import (
    MEMBER_KIND,
    GeometryKind,
    NodeHeader,
    Ordinate,
    Statistic,
    check_depth,
    read_node_header,
    resolve_ordinate,
)

# ------------------------- Folding helpers -------------------------


def _fold(statistic: Statistic, current: float, candidate: float) -> float:
    # strict comparison: ties and NaN candidates keep the running value
    if statistic == Statistic.MIN:
        return candidate if candidate < current else current
    return candidate if candidate > current else current


def _read_count(cur: ByteCursor, order: ByteOrder, what: str) -> int:
    n = cur.read_int32(order)
    if n < 1:
        raise InvalidCount(f"{what} count {n} at offset {cur.pos - 4}, at least 1 required")
    return n


# ------------------------- Per-variant readers -------------------------


def _point_ordinate(cur: ByteCursor, order: ByteOrder, dim: int, slot: int) -> float:
    cur.require(dim * 8)
    cur.pos += slot * 8
    value = cur.read_double(order)
    cur.pos += (dim - slot - 1) * 8
    return value


def _linestring_extreme(cur: ByteCursor, order: ByteOrder, dim: int, slot: int,
                        statistic: Statistic) -> float:
    n = _read_count(cur, order, "point")
    cur.require(n * dim * 8)
    res = _point_ordinate(cur, order, dim, slot)
    for _ in range(1, n):
        res = _fold(statistic, res, _point_ordinate(cur, order, dim, slot))
    return res


def _skip_ring(cur: ByteCursor, order: ByteOrder, dim: int) -> None:
    n = _read_count(cur, order, "point")
    cur.skip(n * dim * 8)


def _polygon_extreme(cur: ByteCursor, order: ByteOrder, dim: int, slot: int,
                     statistic: Statistic) -> float:
    rings = _read_count(cur, order, "ring")
    res = _linestring_extreme(cur, order, dim, slot, statistic)
    if slot < Ordinate.Z:
        # interior rings of a valid polygon lie inside the exterior ring in X/Y;
        # this is trusted, not verified
        for _ in range(1, rings):
            _skip_ring(cur, order, dim)
    else:
        for _ in range(1, rings):
            res = _fold(statistic, res, _linestring_extreme(cur, order, dim, slot, statistic))
    return res


def _members_extreme(cur: ByteCursor, node: NodeHeader, ordinate: Ordinate,
                     statistic: Statistic, depth: int) -> float:
    member_kind = MEMBER_KIND[node.kind]
    n = _read_count(cur, node.byte_order, "member")
    res = read_geometry_extreme(cur, node.byte_order, ordinate, statistic, member_kind, depth + 1)
    for _ in range(1, n):
        res = _fold(statistic, res,
                    read_geometry_extreme(cur, node.byte_order, ordinate, statistic, member_kind, depth + 1))
    return res


# ------------------------- Entry point -------------------------


def read_geometry_extreme(cur: ByteCursor, byte_order: ByteOrder, ordinate: Ordinate,
                          statistic: Statistic,
                          expected: GeometryKind = GeometryKind.GEOMETRY,
                          depth: int = 0) -> float:
    """
    Minimum or maximum of ``ordinate`` over the WKB geometry at the cursor.

    ``byte_order`` is only the inherited default: each node's own marker byte
    overrides it for that node and its children. The cursor ends right after
    the geometry so an enclosing collection can continue with the next member.
    ``depth`` counts enclosing collections and is capped at MAX_NESTING_DEPTH.
    Raises a GeometryDecodeError subclass on any failure.
    """
    check_depth(depth, cur)
    node = read_node_header(cur, byte_order, expected)
    slot = resolve_ordinate(node, ordinate)
    order, dim = node.byte_order, node.dimension

    if node.kind == GeometryKind.POINT:
        return _point_ordinate(cur, order, dim, slot)
    if node.kind == GeometryKind.LINESTRING:
        return _linestring_extreme(cur, order, dim, slot, statistic)
    if node.kind == GeometryKind.POLYGON:
        return _polygon_extreme(cur, order, dim, slot, statistic)
    # collections re-resolve the ordinate per member
    return _members_extreme(cur, node, ordinate, statistic, depth)
