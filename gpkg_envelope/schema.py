from __future__ import annotations

import logging
import sqlite3

from .utils_sql import quote_ident, savepoint
from .version import __version__

logger = logging.getLogger(__name__)

GPKG_APPLICATION_ID = 1196444487  # "GPKG"
GPKG_VERSIONS = (10200, 10300, 10400)
EXTENSION_VERSION = __version__

# index = geometry type code; GEOMETRYCOLLECTION is accepted as a synonym of GEOMCOLLECTION
GEOMETRY_TYPE_NAMES = (
    "GEOMETRY", "POINT", "LINESTRING", "POLYGON",
    "MULTIPOINT", "MULTILINESTRING", "MULTIPOLYGON", "GEOMCOLLECTION",
)

_WGS84_WKT = (
    'GEOGCS["WGS 84",DATUM["WGS_1984",SPHEROID["WGS 84",6378137,298.257223563,'
    'AUTHORITY["EPSG","7030"]],AUTHORITY["EPSG","6326"]],PRIMEM["Greenwich",0,'
    'AUTHORITY["EPSG","8901"]],UNIT["degree",0.0174532925199433,AUTHORITY["EPSG","9122"]],'
    'AUTHORITY["EPSG","4326"]]'
)

DEFAULT_SRS = [
    ("Undefined cartesian SRS", -1, "NONE", -1, "undefined",
     "undefined cartesian coordinate reference system"),
    ("Undefined geographic SRS ", 0, "NONE", 0, "undefined",
     "undefined geographic coordinate reference system"),
    ("WGS84", 4326, "epsg", 4326, _WGS84_WKT,
     "longitude/latitude coordinates in decimal degrees on the WGS 84 spheroid"),
]

_CORE_TABLES = [
    """CREATE TABLE gpkg_spatial_ref_sys(
   srs_name TEXT NOT NULL,
   srs_id INTEGER NOT NULL PRIMARY KEY,
   organization TEXT NOT NULL,
   organization_coordsys_id INTEGER NOT NULL,
   definition TEXT NOT NULL,
   description TEXT
)""",
    """CREATE TABLE gpkg_contents(
   table_name TEXT NOT NULL PRIMARY KEY,
   data_type TEXT NOT NULL,
   identifier TEXT UNIQUE,
   description TEXT DEFAULT '',
   last_change DATETIME NOT NULL DEFAULT(strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
   min_x DOUBLE,
   min_y DOUBLE,
   max_x DOUBLE,
   max_y DOUBLE,
   srs_id INTEGER,
   CONSTRAINT fk_gc_r_srs_id FOREIGN KEY(srs_id) REFERENCES gpkg_spatial_ref_sys(srs_id)
)""",
    """CREATE TABLE gpkg_geometry_columns(
   table_name TEXT NOT NULL,
   column_name TEXT NOT NULL,
   geometry_type_name TEXT NOT NULL,
   srs_id INTEGER NOT NULL,
   z TINYINT NOT NULL,
   m TINYINT NOT NULL,
   CONSTRAINT pk_geom_cols PRIMARY KEY(table_name, column_name),
   CONSTRAINT fk_gc_tn FOREIGN KEY(table_name) REFERENCES gpkg_contents(table_name),
   CONSTRAINT fk_gc_srs FOREIGN KEY(srs_id) REFERENCES gpkg_spatial_ref_sys(srs_id)
)""",
    """CREATE TABLE gpkg_tile_matrix_set(
   table_name TEXT NOT NULL PRIMARY KEY,
   srs_id INTEGER NOT NULL,
   min_x DOUBLE NOT NULL,
   min_y DOUBLE NOT NULL,
   max_x DOUBLE NOT NULL,
   max_y DOUBLE NOT NULL,
   CONSTRAINT fk_gtms_table_name FOREIGN KEY(table_name) REFERENCES gpkg_contents(table_name),
   CONSTRAINT fk_gtms_srs FOREIGN KEY(srs_id) REFERENCES gpkg_spatial_ref_sys(srs_id)
)""",
    """CREATE TABLE gpkg_tile_matrix(
   table_name TEXT NOT NULL,
   zoom_level INTEGER NOT NULL,
   matrix_width INTEGER NOT NULL,
   matrix_height INTEGER NOT NULL,
   tile_width INTEGER NOT NULL,
   tile_height INTEGER NOT NULL,
   pixel_x_size DOUBLE NOT NULL,
   pixel_y_size DOUBLE NOT NULL,
   CONSTRAINT pk_ttm PRIMARY KEY(table_name, zoom_level),
   CONSTRAINT fk_tmm_table_name FOREIGN KEY(table_name) REFERENCES gpkg_contents(table_name)
)""",
]

_EXTENSIONS_TABLE = """CREATE TABLE gpkg_extensions(
   table_name TEXT, column_name TEXT,
   extension_name TEXT NOT NULL,
   definition TEXT NOT NULL,
   scope TEXT NOT NULL,
   CONSTRAINT ge_tce UNIQUE(table_name, column_name, extension_name)
)"""

# (column, violating condition, message)
_TILE_MATRIX_CHECKS = [
    ("zoom_level", "(NEW.zoom_level < 0)", "zoom_level cannot be less than 0"),
    ("matrix_width", "(NEW.matrix_width < 1)", "matrix_width cannot be less than 1"),
    ("matrix_height", "(NEW.matrix_height < 1)", "matrix_height cannot be less than 1"),
    ("pixel_x_size", "NOT (NEW.pixel_x_size > 0)", "pixel_x_size must be greater than 0"),
    ("pixel_y_size", "NOT (NEW.pixel_y_size > 0)", "pixel_y_size must be greater than 0"),
]


def tile_matrix_triggers():
    """Yield the insert/update validation triggers of gpkg_tile_matrix."""
    for column, condition, message in _TILE_MATRIX_CHECKS:
        for op, event in (("insert", "INSERT"), ("update", f"UPDATE OF {column}")):
            yield (
                f"CREATE TRIGGER 'gpkg_tile_matrix_{column}_{op}' BEFORE {event} ON 'gpkg_tile_matrix' "
                f"FOR EACH ROW BEGIN\n"
                f"   SELECT RAISE(ABORT, '{op} on table ''gpkg_tile_matrix'' violates constraint: {message}') "
                f"WHERE {condition};\nEND;"
            )


def initialize(conn: sqlite3.Connection, version: int = 10400) -> None:
    """Create the base tables of an empty GeoPackage (requirement tables C.1-C.6, C.8)."""
    if version not in GPKG_VERSIONS:
        raise ValueError(f"Unsupported GeoPackage version {version}. Must be one of {GPKG_VERSIONS}.")

    # PRAGMAs cannot be rolled back with the tables, set them once the tables exist
    with savepoint(conn, "gpkg_initialize"):
        for ddl in _CORE_TABLES:
            conn.execute(ddl)
        conn.executemany(
            "INSERT INTO gpkg_spatial_ref_sys(srs_name, srs_id, organization, organization_coordsys_id, "
            "definition, description) VALUES(?, ?, ?, ?, ?, ?)",
            DEFAULT_SRS,
        )
        for ddl in tile_matrix_triggers():
            conn.execute(ddl)
        conn.execute(_EXTENSIONS_TABLE)
    conn.execute(f"PRAGMA application_id = {GPKG_APPLICATION_ID}")
    conn.execute(f"PRAGMA user_version = {int(version)}")
    logger.info("Initialized GeoPackage %d schema", version)


def _geometry_type_name(geometry_type: str) -> str:
    name = str(geometry_type).upper()
    if name == "GEOMETRYCOLLECTION":
        return "GEOMCOLLECTION"
    if name not in GEOMETRY_TYPE_NAMES:
        raise ValueError(f"Unrecognised geometry type: {geometry_type!r}")
    return name


def add_geometry_column(conn: sqlite3.Connection, identifier: str, table: str, column: str,
                        geometry_type: str, srs_id: int, z: int, m: int) -> None:
    """
    Register ``table.column`` as a feature geometry column.

    z/m: 0 prohibited, 1 mandatory, 2 optional.
    """
    type_name = _geometry_type_name(geometry_type)
    for flag, label in ((z, "z"), (m, "m")):
        if flag not in (0, 1, 2):
            raise ValueError(f"{label} flag must be 0, 1 or 2, got {flag!r}")

    with savepoint(conn, "gpkg_add_geometry_column"):
        conn.execute(
            "INSERT OR IGNORE INTO gpkg_contents(table_name, data_type, identifier, srs_id) "
            "VALUES(?, 'features', ?, ?)",
            (table, identifier, int(srs_id)),
        )
        conn.execute(
            "INSERT INTO gpkg_geometry_columns(table_name, column_name, geometry_type_name, srs_id, z, m) "
            "VALUES(?, ?, ?, ?, ?, ?)",
            (table, column, type_name, int(srs_id), int(z), int(m)),
        )
    logger.info("Registered geometry column %s.%s (%s, srs_id=%s)",
                quote_ident(table), quote_ident(column), type_name, srs_id)


def geopackage_version(conn: sqlite3.Connection) -> int:
    row = conn.execute("PRAGMA user_version").fetchone()
    return int(row[0]) if row else 0
