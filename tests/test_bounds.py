import pyarrow as pa
import pytest

from gpkg_envelope import DecodeConfig, envelope_table, table_extent

from gpkgblob import NAN, SQUARE, gpkg, linestring, point, polygon


def _table(blobs, name="geom"):
    return pa.table({name: pa.array(blobs, type=pa.binary())})


BLOBS = [
    gpkg(polygon([SQUARE])),
    gpkg(linestring([(-5.0, 1.0), (2.0, 30.0)])),
    None,
    gpkg(point(NAN, NAN)),
    b"junk",
]


def test_envelope_table_columns():
    env = envelope_table(_table(BLOBS))
    assert env.column_names == ["is_empty", "minx", "maxx", "miny", "maxy"]
    assert env.schema.field("is_empty").type == pa.int8()
    assert env.schema.field("minx").type == pa.float64()


def test_envelope_table_values():
    env = envelope_table(_table(BLOBS)).to_pydict()
    assert env["is_empty"] == [0, 0, None, 1, -1]
    assert env["minx"] == [0.0, -5.0, None, None, None]
    assert env["maxy"] == [10.0, 30.0, None, None, None]


def test_missing_ordinate_is_null():
    blobs = [gpkg(point(1.0, 2.0)), gpkg(point(1.0, 2.0, 7.0, z=True))]
    env = envelope_table(_table(blobs), ordinates="z").to_pydict()
    assert env["minz"] == [None, 7.0]
    assert env["is_empty"] == [0, 0]


def test_config_is_applied():
    blob = gpkg(polygon([SQUARE]), envelope=[-1.0, -1.0, 11.0, 11.0], env_type=1)
    env = envelope_table(_table([blob]), config=DecodeConfig(trust_header_envelope=True))
    assert env["minx"].to_pylist() == [-1.0]


def test_errors():
    with pytest.raises(ValueError):
        envelope_table(_table(BLOBS), geom_col="shape")
    with pytest.raises(ValueError):
        envelope_table(_table(BLOBS), ordinates="xq")


def test_table_extent():
    tables = [_table(BLOBS), _table([gpkg(point(100.0, -100.0))])]
    assert table_extent(tables) == (-5.0, -100.0, 100.0, 30.0)


def test_table_extent_nothing_usable():
    assert table_extent([_table([None, gpkg(linestring([])), b"junk"])]) is None
    assert table_extent([]) is None
