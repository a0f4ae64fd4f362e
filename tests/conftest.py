import sqlite3

import pytest

from gpkg_envelope import register_functions
from gpkg_envelope.schema import add_geometry_column, initialize

from gpkgblob import has_rtree


@pytest.fixture
def conn():
    c = sqlite3.connect(":memory:")
    register_functions(c)
    yield c
    c.close()


@pytest.fixture
def gpkg_conn(conn):
    """Initialized GeoPackage with an empty ``pts`` feature table."""
    initialize(conn)
    conn.execute("CREATE TABLE pts(fid INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT, geom BLOB)")
    add_geometry_column(conn, "pts", "pts", "geom", "POINT", 4326, 0, 0)
    return conn


@pytest.fixture
def rtree_conn(gpkg_conn):
    if not has_rtree(gpkg_conn):
        pytest.skip("SQLite built without the R*Tree module")
    return gpkg_conn
