# datasource.py
#
# GeoPackage feature tables streamed as Arrow Tables: rows are read in chunks
# through pandas.read_sql_query and the geometry column is kept as raw
# GeoPackageBinary BLOBs (pa.binary()).

from __future__ import annotations

import logging
import sqlite3
from typing import Iterable, List, Optional

import pandas as pd
import pyarrow as pa

from .utils_sql import quote_ident

logger = logging.getLogger(__name__)


class DataSource:
    def schema(self) -> pa.Schema:
        raise NotImplementedError

    def iter_tables(self) -> Iterable[pa.Table]:
        raise NotImplementedError


# ------------------------- Helpers ------------------------- #
def is_geopackage_path(path: str) -> bool:
    return str(path).lower().endswith(".gpkg")


def geometry_columns(conn: sqlite3.Connection, table: str) -> List[str]:
    """Geometry columns registered for ``table`` in gpkg_geometry_columns (case-insensitive)."""
    try:
        rows = conn.execute(
            "SELECT column_name FROM gpkg_geometry_columns WHERE LOWER(table_name) = LOWER(?)",
            (table,),
        ).fetchall()
    except sqlite3.OperationalError as e:
        logger.warning("gpkg_geometry_columns not readable: %s", e)
        return []
    return [r[0] for r in rows]


def primary_key(conn: sqlite3.Connection, table: str) -> Optional[str]:
    for _cid, name, _type, _notnull, _default, pk in conn.execute(f"PRAGMA table_info({quote_ident(table)})"):
        if pk == 1:
            return name
    return None


# ------------------------- GeoPackage source ------------------------- #
class GeoPackageSource(DataSource):
    """
    Streams one GeoPackage feature table as Arrow Tables.

    - The geometry column is discovered from gpkg_geometry_columns unless given.
    - Each batch holds up to `batch_rows` rows; the geometry column is always binary,
      also for all-NULL batches.
    """

    def __init__(
        self,
        path: str,
        table: str,
        geom_col: Optional[str] = None,
        batch_rows: int = 50_000,
        conn: Optional[sqlite3.Connection] = None,
    ):
        self.path = path
        self.table = table
        self.batch_rows = int(batch_rows)
        self._owns_conn = conn is None
        self.conn = conn if conn is not None else sqlite3.connect(path)

        if geom_col is None:
            cols = geometry_columns(self.conn, table)
            if not cols:
                if self._owns_conn:
                    self.conn.close()
                raise ValueError(f"No geometry column registered for table '{table}' in {path}")
            if len(cols) > 1:
                logger.warning("Table %s has %d geometry columns, using '%s'", table, len(cols), cols[0])
            geom_col = cols[0]
        self.geom_col = geom_col
        self._schema: Optional[pa.Schema] = None

        logger.info("GeoPackageSource opened %s table=%s geom_col=%s (batch_rows=%d)",
                    path, table, geom_col, self.batch_rows)

    def primary_key(self) -> Optional[str]:
        return primary_key(self.conn, self.table)

    # ---------------- schema ---------------- #
    def schema(self) -> pa.Schema:
        if self._schema is None:
            first = next(iter(self.iter_tables(limit=1)), None)
            if first is None:
                self._schema = pa.schema([(self.geom_col, pa.binary())])
            else:
                self._schema = first.schema
        return self._schema

    # ---------------- iterator ---------------- #
    def iter_tables(self, limit: Optional[int] = None) -> Iterable[pa.Table]:
        sql = f"SELECT * FROM {quote_ident(self.table)}"
        if limit is not None:
            sql += f" LIMIT {int(limit)}"
        for i, df in enumerate(pd.read_sql_query(sql, self.conn, chunksize=self.batch_rows)):
            logger.debug("Read batch %d of %s (%d rows)", i, self.table, len(df))
            yield self._to_arrow(df)

    def _to_arrow(self, df: pd.DataFrame) -> pa.Table:
        if self.geom_col not in df.columns:
            raise ValueError(f"Missing geometry column '{self.geom_col}' in table '{self.table}'")
        geoms = [bytes(g) if isinstance(g, (bytes, bytearray, memoryview)) else None
                 for g in df[self.geom_col].tolist()]
        t = pa.Table.from_pandas(df, preserve_index=False)
        idx = t.column_names.index(self.geom_col)
        return t.set_column(idx, self.geom_col, pa.array(geoms, type=pa.binary()))

    def close(self) -> None:
        if self._owns_conn:
            self.conn.close()
