from __future__ import annotations

import logging
import sqlite3
from typing import List, Tuple

from .utils_sql import quote_ident, savepoint

logger = logging.getLogger(__name__)

RTREE_EXTENSION = "gpkg_rtree_index"
RTREE_DEFINITION = "http://www.geopackage.org"

# creation order; dropped in reverse
TRIGGER_SUFFIXES = ("insert", "update2", "update4", "update5", "update6", "update7", "delete")


def rtree_name(table: str, geom_col: str) -> str:
    return f"rtree_{table}_{geom_col}"


def spatial_index_ddl(table: str, geom_col: str, id_col: str) -> List[Tuple[str, str]]:
    """
    (name, statement) pairs creating the rtree and its maintenance triggers.

    Trigger set follows GeoPackage 1.4: update1/update3 are superseded by
    update6/update7 and update5.
    """
    rt = rtree_name(table, geom_col)
    R, T, G, I = quote_ident(rt), quote_ident(table), quote_ident(geom_col), quote_ident(id_col)

    def trig(suffix: str) -> str:
        return quote_ident(f"{rt}_{suffix}")

    def bounds(ref: str) -> str:
        return (f"ST_MinX({ref}.{G}), ST_MaxX({ref}.{G}), "
                f"ST_MinY({ref}.{G}), ST_MaxY({ref}.{G})")

    def non_empty(ref: str) -> str:
        return f"{ref}.{G} NOT NULL AND NOT ST_IsEmpty({ref}.{G})"

    def null_or_empty(ref: str) -> str:
        return f"{ref}.{G} IS NULL OR ST_IsEmpty({ref}.{G})"

    return [
        (rt, f"CREATE VIRTUAL TABLE {R} USING rtree(id, minx, maxx, miny, maxy)"),
        # insert of a non-empty geometry
        (f"{rt}_insert",
         f"CREATE TRIGGER {trig('insert')} AFTER INSERT ON {T} WHEN ({non_empty('NEW')})\n"
         f"BEGIN\n   INSERT OR REPLACE INTO {R} VALUES (NEW.{I}, {bounds('NEW')});\nEND;"),
        # geometry set to null/empty, same id
        (f"{rt}_update2",
         f"CREATE TRIGGER {trig('update2')} AFTER UPDATE OF {G} ON {T} "
         f"WHEN OLD.{I} = NEW.{I} AND ({null_or_empty('NEW')})\n"
         f"BEGIN\n   DELETE FROM {R} WHERE id = OLD.{I};\nEND;"),
        # id changed, geometry null/empty
        (f"{rt}_update4",
         f"CREATE TRIGGER {trig('update4')} AFTER UPDATE ON {T} "
         f"WHEN OLD.{I} != NEW.{I} AND ({null_or_empty('NEW')})\n"
         f"BEGIN\n   DELETE FROM {R} WHERE id IN (OLD.{I}, NEW.{I});\nEND;"),
        # id changed, geometry non-empty
        (f"{rt}_update5",
         f"CREATE TRIGGER {trig('update5')} AFTER UPDATE ON {T} "
         f"WHEN OLD.{I} != NEW.{I} AND ({non_empty('NEW')})\n"
         f"BEGIN\n   DELETE FROM {R} WHERE id = OLD.{I};\n"
         f"   INSERT OR REPLACE INTO {R} VALUES (NEW.{I}, {bounds('NEW')});\nEND;"),
        # non-empty geometry replaced by another non-empty geometry
        (f"{rt}_update6",
         f"CREATE TRIGGER {trig('update6')} AFTER UPDATE OF {G} ON {T} "
         f"WHEN OLD.{I} = NEW.{I} AND ({non_empty('NEW')}) AND ({non_empty('OLD')})\n"
         f"BEGIN\n   UPDATE {R} SET minx = ST_MinX(NEW.{G}), maxx = ST_MaxX(NEW.{G}), "
         f"miny = ST_MinY(NEW.{G}), maxy = ST_MaxY(NEW.{G}) WHERE id = NEW.{I};\nEND;"),
        # null/empty geometry replaced by a non-empty one
        (f"{rt}_update7",
         f"CREATE TRIGGER {trig('update7')} AFTER UPDATE OF {G} ON {T} "
         f"WHEN OLD.{I} = NEW.{I} AND ({non_empty('NEW')}) AND ({null_or_empty('OLD')})\n"
         f"BEGIN\n   INSERT INTO {R} VALUES (NEW.{I}, {bounds('NEW')});\nEND;"),
        (f"{rt}_delete",
         f"CREATE TRIGGER {trig('delete')} AFTER DELETE ON {T} WHEN OLD.{G} NOT NULL\n"
         f"BEGIN\n   DELETE FROM {R} WHERE id = OLD.{I};\nEND;"),
    ]


def add_spatial_index(conn: sqlite3.Connection, table: str, geom_col: str, id_col: str) -> None:
    """
    Create and populate ``rtree_<table>_<geom_col>`` plus the triggers that keep it in sync.

    The ST_* functions must already be registered on ``conn``
    (see ``functions.register_functions``). Either every object is created and
    the extension registered, or nothing is.
    """
    rt = rtree_name(table, geom_col)
    T, G, I = quote_ident(table), quote_ident(geom_col), quote_ident(id_col)

    with savepoint(conn, "gpkg_add_spatial_index"):
        for name, ddl in spatial_index_ddl(table, geom_col, id_col):
            logger.debug("Creating %s", name)
            conn.execute(ddl)
        conn.execute(
            "INSERT INTO gpkg_extensions(table_name, column_name, extension_name, definition, scope) "
            "VALUES(?, ?, ?, ?, 'write-only')",
            (table, geom_col, RTREE_EXTENSION, RTREE_DEFINITION),
        )
        cur = conn.execute(
            f"INSERT OR REPLACE INTO {quote_ident(rt)} "
            f"SELECT {I}, ST_MinX({G}), ST_MaxX({G}), ST_MinY({G}), ST_MaxY({G}) FROM {T} "
            f"WHERE {G} NOT NULL AND NOT ST_IsEmpty({G})"
        )
        logger.info("Spatial index %s created (%d rows indexed)", rt, cur.rowcount)


def drop_spatial_index(conn: sqlite3.Connection, table: str, geom_col: str) -> None:
    rt = rtree_name(table, geom_col)
    with savepoint(conn, "gpkg_drop_spatial_index"):
        for suffix in reversed(TRIGGER_SUFFIXES):
            conn.execute(f"DROP TRIGGER {quote_ident(f'{rt}_{suffix}')}")
        conn.execute(f"DROP TABLE {quote_ident(rt)}")
        conn.execute(
            "DELETE FROM gpkg_extensions WHERE LOWER(table_name) = LOWER(?) "
            "AND LOWER(column_name) = LOWER(?) AND extension_name = ?",
            (table, geom_col, RTREE_EXTENSION),
        )
    logger.info("Spatial index %s dropped", rt)
