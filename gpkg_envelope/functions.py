from __future__ import annotations

import logging
import sqlite3
from typing import Callable, Optional

from .errors import GeometryDecodeError
from .orchestrator import DEFAULT_CONFIG, DecodeConfig, get_extreme, is_empty
from .schema import EXTENSION_VERSION, add_geometry_column, geopackage_version, initialize
from .spatial_index import add_spatial_index, drop_spatial_index
from .wkb import (
    MIN_EMPTY_BLOB_SIZE,
    MIN_EXTREME_BLOB_SIZE,
    Emptiness,
    GeometryKind,
    Ordinate,
    Statistic,
)

logger = logging.getLogger(__name__)

_BLOB_TYPES = (bytes, bytearray, memoryview)


# ------------------------- ST_* value functions -------------------------

def extreme_or_none(blob, ordinate: Ordinate, statistic: Statistic,
                    config: DecodeConfig = DEFAULT_CONFIG) -> Optional[float]:
    """SQL-style extreme: None for non-BLOBs, short BLOBs and undecodable geometries."""
    if not isinstance(blob, _BLOB_TYPES) or len(blob) < MIN_EXTREME_BLOB_SIZE:
        return None
    try:
        return get_extreme(blob, ordinate, statistic, GeometryKind.GEOMETRY, config)
    except GeometryDecodeError:
        return None


def emptiness_code(blob, config: DecodeConfig = DEFAULT_CONFIG) -> int:
    """1 empty, 0 not empty, -1 when the value cannot be decoded."""
    if not isinstance(blob, _BLOB_TYPES) or len(blob) < MIN_EMPTY_BLOB_SIZE:
        return Emptiness.ERROR.value
    return is_empty(blob, config).value


def _extreme_function(ordinate: Ordinate, statistic: Statistic,
                      config: DecodeConfig = DEFAULT_CONFIG) -> Callable:
    def fn(blob):
        return extreme_or_none(blob, ordinate, statistic, config)
    fn.__name__ = f"st_{statistic.name.lower()}{ordinate.name.lower()}"
    fn.__doc__ = f"{statistic.name.title()}imum {ordinate.name} of a GeoPackage geometry, or None."
    return fn


st_minx = _extreme_function(Ordinate.X, Statistic.MIN)
st_miny = _extreme_function(Ordinate.Y, Statistic.MIN)
st_minz = _extreme_function(Ordinate.Z, Statistic.MIN)
st_minm = _extreme_function(Ordinate.M, Statistic.MIN)
st_maxx = _extreme_function(Ordinate.X, Statistic.MAX)
st_maxy = _extreme_function(Ordinate.Y, Statistic.MAX)
st_maxz = _extreme_function(Ordinate.Z, Statistic.MAX)
st_maxm = _extreme_function(Ordinate.M, Statistic.MAX)


def st_isempty(blob) -> int:
    return emptiness_code(blob)


# ------------------------- sqlite3 registration -------------------------

def register_functions(conn: sqlite3.Connection, config: DecodeConfig = DEFAULT_CONFIG) -> None:
    """
    Register the ST_* geometry functions and the GPKG_* info functions on ``conn``.

    Spatial index triggers call these functions, so every connection that
    writes to an indexed table needs them.
    """
    for statistic in Statistic:
        for ordinate in Ordinate:
            name = f"ST_{statistic.name.title()}{ordinate.name}"
            conn.create_function(name, 1, _extreme_function(ordinate, statistic, config),
                                 deterministic=True)
    conn.create_function("ST_IsEmpty", 1, lambda blob: emptiness_code(blob, config), deterministic=True)
    conn.create_function("GPKG_ExtVersion", 0, lambda: EXTENSION_VERSION, deterministic=True)
    conn.create_function("GPKG_Version", 0, lambda: geopackage_version(conn))
    register_admin_functions(conn)
    logger.debug("Registered GeoPackage geometry functions (config=%s)", config)


def register_admin_functions(conn: sqlite3.Connection) -> None:
    """
    GPKG_Initialize([version]), GPKG_AddGeometryColumn(...), GPKG_AddSpatialIndex(table, geom, id)
    and GPKG_DropSpatialIndex(table, geom). They return NULL; failures surface as SQL errors.
    """
    conn.create_function("GPKG_Initialize", 0, lambda: initialize(conn))
    conn.create_function("GPKG_Initialize", 1, lambda version: initialize(conn, version))
    conn.create_function(
        "GPKG_AddGeometryColumn", 7,
        lambda identifier, table, column, gtype, srs_id, z, m:
            add_geometry_column(conn, identifier, table, column, gtype, srs_id, z, m),
    )
    conn.create_function("GPKG_AddSpatialIndex", 3,
                         lambda table, column, id_col: add_spatial_index(conn, table, column, id_col))
    conn.create_function("GPKG_DropSpatialIndex", 2,
                         lambda table, column: drop_spatial_index(conn, table, column))
