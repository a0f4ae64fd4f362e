import sqlite3

import pytest

from gpkg_envelope import DecodeConfig, Ordinate, Statistic, __version__, register_functions
from gpkg_envelope.functions import emptiness_code, extreme_or_none, st_isempty, st_maxy, st_minx, st_minz
from gpkg_envelope.schema import initialize

from gpkgblob import NAN, SQUARE, gpkg, linestring, point, polygon

SQUARE_BLOB = gpkg(polygon([SQUARE]))


def test_python_level_functions():
    assert st_minx(SQUARE_BLOB) == 0.0
    assert st_maxy(SQUARE_BLOB) == 10.0
    assert st_minz(SQUARE_BLOB) is None
    assert st_isempty(SQUARE_BLOB) == 0
    assert st_minx.__name__ == "st_minx"


def test_minimum_sizes():
    blob = gpkg(point(1.0, 2.0))
    assert len(blob) == 29
    assert extreme_or_none(blob, Ordinate.X, Statistic.MIN) == 1.0
    assert extreme_or_none(blob[:28], Ordinate.X, Statistic.MIN) is None
    assert emptiness_code(blob[:13]) == -1  # truncated, but long enough to be tried
    assert emptiness_code(blob[:12]) == -1
    assert emptiness_code(gpkg(linestring([]))) == 1


def test_non_blob_values():
    assert extreme_or_none("GP" * 20, Ordinate.X, Statistic.MIN) is None
    assert extreme_or_none(None, Ordinate.X, Statistic.MIN) is None
    assert emptiness_code(12345) == -1


def test_bytes_like_inputs():
    assert extreme_or_none(bytearray(SQUARE_BLOB), Ordinate.Y, Statistic.MAX) == 10.0
    assert extreme_or_none(memoryview(SQUARE_BLOB), Ordinate.Y, Statistic.MAX) == 10.0


def test_sql_functions(conn):
    empty_line = gpkg(linestring([]))
    row = conn.execute(
        "SELECT ST_MinX(?), ST_MaxX(?), ST_MinY(?), ST_MaxY(?), ST_IsEmpty(?), ST_IsEmpty(?)",
        (SQUARE_BLOB, SQUARE_BLOB, SQUARE_BLOB, SQUARE_BLOB, SQUARE_BLOB, empty_line),
    ).fetchone()
    assert row == (0.0, 10.0, 0.0, 10.0, 0, 1)


def test_sql_functions_z_and_m(conn):
    blob = gpkg(linestring([(0.0, 0.0, 5.0, -1.0), (1.0, 1.0, 2.0, 3.0)], z=True, m=True))
    row = conn.execute("SELECT ST_MinZ(?), ST_MaxZ(?), ST_MinM(?), ST_MaxM(?)",
                       (blob, blob, blob, blob)).fetchone()
    assert row == (2.0, 5.0, -1.0, 3.0)


def test_sql_null_and_garbage(conn):
    row = conn.execute("SELECT ST_MinX(NULL), ST_MinX('text'), ST_IsEmpty(NULL), ST_IsEmpty(x'00')").fetchone()
    assert row == (None, None, -1, -1)


def test_sql_empty_point(conn):
    blob = gpkg(point(NAN, NAN))
    assert conn.execute("SELECT ST_IsEmpty(?)", (blob,)).fetchone() == (1,)


def test_registered_config():
    c = sqlite3.connect(":memory:")
    register_functions(c, DecodeConfig(trust_header_envelope=True))
    blob = gpkg(polygon([SQUARE]), envelope=[-1.0, -1.0, 11.0, 11.0], env_type=1)
    assert c.execute("SELECT ST_MinX(?)", (blob,)).fetchone()[0] == -1.0
    c.close()


def test_version_functions(conn):
    assert conn.execute("SELECT GPKG_ExtVersion()").fetchone()[0] == __version__
    assert conn.execute("SELECT GPKG_Version()").fetchone()[0] == 0
    initialize(conn, 10300)
    assert conn.execute("SELECT GPKG_Version()").fetchone()[0] == 10300


@pytest.mark.parametrize("name", ["ST_MinX", "ST_MaxM", "ST_IsEmpty"])
def test_functions_take_one_argument(conn, name):
    with pytest.raises(sqlite3.OperationalError):
        conn.execute(f"SELECT {name}()")


def test_sql_initialize(conn):
    conn.execute("SELECT GPKG_Initialize()")
    assert conn.execute("SELECT GPKG_Version()").fetchone()[0] == 10400
    assert conn.execute("SELECT COUNT(*) FROM gpkg_spatial_ref_sys").fetchone()[0] == 3


def test_sql_initialize_with_version(conn):
    conn.execute("SELECT GPKG_Initialize(10200)")
    assert conn.execute("SELECT GPKG_Version()").fetchone()[0] == 10200


def test_sql_initialize_rejects_version(conn):
    with pytest.raises(sqlite3.OperationalError):
        conn.execute("SELECT GPKG_Initialize(10100)")
    assert conn.execute("SELECT GPKG_Version()").fetchone()[0] == 0


def test_sql_add_geometry_column(conn):
    conn.execute("SELECT GPKG_Initialize()")
    conn.execute("CREATE TABLE roads(fid INTEGER PRIMARY KEY, geom BLOB)")
    conn.execute("SELECT GPKG_AddGeometryColumn('roads', 'roads', 'geom', 'LineString', 4326, 1, 0)")
    row = conn.execute("SELECT table_name, column_name, geometry_type_name, z, m FROM gpkg_geometry_columns").fetchone()
    assert row == ("roads", "geom", "LINESTRING", 1, 0)
    with pytest.raises(sqlite3.OperationalError):
        conn.execute("SELECT GPKG_AddGeometryColumn('roads', 'roads', 'geom2', 'LINESTRING', 4326, 5, 0)")
