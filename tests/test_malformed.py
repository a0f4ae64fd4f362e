import pytest

from gpkg_envelope import (
    Emptiness,
    GeometryDecodeError,
    NestingTooDeep,
    Ordinate,
    Statistic,
    add_spatial_index,
    get_extreme,
    is_empty,
)
from gpkg_envelope.wkb import MAX_NESTING_DEPTH

from gpkgblob import (
    GEOMETRYCOLLECTION,
    MULTILINESTRING,
    SQUARE,
    gpkg,
    linestring,
    multi,
    nested,
    point,
    polygon,
)

X, Z = Ordinate.X, Ordinate.Z
MIN, MAX = Statistic.MIN, Statistic.MAX

HOLE = [(2.0, 2.0), (3.0, 2.0), (3.0, 3.0), (2.0, 2.0)]

VALID = {
    "polygon_with_hole": gpkg(polygon([SQUARE, HOLE])),
    "nested_collection": gpkg(multi(GEOMETRYCOLLECTION, [
        point(50.0, 0.0),
        multi(GEOMETRYCOLLECTION, [linestring([(0.0, -3.0), (1.0, 1.0)]), polygon([SQUARE])]),
    ])),
    "xyzm_multilinestring": gpkg(multi(MULTILINESTRING, [
        linestring([(0.0, 0.0, 1.0, 2.0), (1.0, 1.0, 3.0, 4.0)], z=True, m=True),
        linestring([(5.0, 5.0, -1.0, 0.0), (6.0, 7.0, 9.0, 1.0)], z=True, m=True),
    ], z=True, m=True)),
}


@pytest.mark.parametrize("name", sorted(VALID))
def test_every_truncation_of_the_body_fails(name):
    blob = VALID[name]
    assert is_empty(blob) is Emptiness.NON_EMPTY
    get_extreme(blob, X, MIN)
    for n in range(8, len(blob)):
        prefix = blob[:n]
        with pytest.raises(GeometryDecodeError):
            get_extreme(prefix, X, MIN)
        assert is_empty(prefix) is Emptiness.ERROR, f"prefix of {n} bytes"


def test_every_truncation_fails_for_z():
    blob = VALID["xyzm_multilinestring"]
    assert get_extreme(blob, Z, MAX) == 9.0
    for n in range(8, len(blob)):
        with pytest.raises(GeometryDecodeError):
            get_extreme(blob[:n], Z, MAX)


def test_nesting_up_to_the_limit():
    blob = gpkg(nested(point(1.0, 2.0), MAX_NESTING_DEPTH))
    assert get_extreme(blob, X, MAX) == 1.0
    assert is_empty(blob) is Emptiness.NON_EMPTY


@pytest.mark.parametrize("levels", [MAX_NESTING_DEPTH + 1, 1200])
def test_nesting_past_the_limit(levels):
    blob = gpkg(nested(point(1.0, 2.0), levels))
    with pytest.raises(NestingTooDeep):
        get_extreme(blob, X, MIN)
    assert is_empty(blob) is Emptiness.ERROR


def test_deep_nesting_in_sql(conn):
    blob = gpkg(nested(point(1.0, 2.0), 1200))
    assert conn.execute("SELECT ST_IsEmpty(?), ST_MinX(?)", (blob, blob)).fetchone() == (-1, None)


def test_deeply_nested_row_is_not_indexed(rtree_conn):
    add_spatial_index(rtree_conn, "pts", "geom", "fid")
    rtree_conn.execute("INSERT INTO pts(geom) VALUES (?)", (gpkg(nested(point(1.0, 2.0), 1200)),))
    rtree_conn.execute("INSERT INTO pts(geom) VALUES (?)", (gpkg(point(1.0, 2.0)),))
    assert [r[0] for r in rtree_conn.execute("SELECT id FROM rtree_pts_geom")] == [2]
