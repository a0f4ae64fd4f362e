from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np
import pyarrow as pa

from .functions import emptiness_code, extreme_or_none
from .orchestrator import DEFAULT_CONFIG, DecodeConfig
from .wkb import Emptiness, Ordinate, Statistic

logger = logging.getLogger(__name__)

Extent = Tuple[float, float, float, float]


def _parse_ordinates(ordinates: Sequence[str]) -> Tuple[Ordinate, ...]:
    out = []
    for o in ordinates:
        try:
            out.append(Ordinate[str(o).upper()])
        except KeyError:
            raise ValueError(f"Unknown ordinate '{o}' (expected x, y, z or m)") from None
    return tuple(out)


def envelope_table(
    tbl: pa.Table,
    geom_col: str = "geom",
    ordinates: Sequence[str] = "xy",
    config: DecodeConfig = DEFAULT_CONFIG,
) -> pa.Table:
    """
    Per-row emptiness and envelope of a GeoPackage geometry column.

    Output columns:
      - is_empty: int8, 1 empty / 0 not empty / -1 undecodable, null for null geometries
      - min<o>, max<o>: float64 per requested ordinate, null when empty or undecodable
    """
    if geom_col not in tbl.column_names:
        raise ValueError(f"envelope_table: missing geometry column '{geom_col}'")
    ords = _parse_ordinates(ordinates)

    blobs = tbl[geom_col].to_pylist()
    n = len(blobs)
    empty = np.zeros(n, dtype=np.int8)
    is_null = np.zeros(n, dtype=bool)
    values = {(o, s): np.full(n, np.nan, dtype=np.float64) for o in ords for s in Statistic}

    for i, blob in enumerate(blobs):
        if blob is None:
            is_null[i] = True
            continue
        code = emptiness_code(blob, config)
        empty[i] = code
        if code != Emptiness.NON_EMPTY.value:
            continue
        for (o, s), arr in values.items():
            v = extreme_or_none(blob, o, s, config)
            if v is not None:
                arr[i] = v

    cols = [pa.array(empty, type=pa.int8(), mask=is_null)]
    names = ["is_empty"]
    for o in ords:
        for s in Statistic:
            arr = values[(o, s)]
            cols.append(pa.array(arr, type=pa.float64(), mask=np.isnan(arr)))
            names.append(f"{s.name.lower()}{o.name.lower()}")

    failed = int(np.count_nonzero(empty == Emptiness.ERROR.value))
    if failed:
        logger.warning("envelope_table: %d of %d geometries could not be decoded", failed, n)
    return pa.table(cols, names=names)


def table_extent(
    tables: Iterable[pa.Table],
    geom_col: str = "geom",
    config: DecodeConfig = DEFAULT_CONFIG,
) -> Optional[Extent]:
    """(minx, miny, maxx, maxy) over every non-empty, decodable geometry; None if there is none."""
    minx = miny = np.inf
    maxx = maxy = -np.inf
    has_geom = False

    for tbl in tables:
        env = envelope_table(tbl, geom_col, "xy", config)
        if env.num_rows == 0:
            continue
        cols = {name: env[name].to_numpy().astype(np.float64)
                for name in ("minx", "miny", "maxx", "maxy")}
        # nulls come back as NaN; a row counts only with all four values
        ok = ~np.isnan(np.vstack(list(cols.values()))).any(axis=0)
        if not ok.any():
            continue
        has_geom = True
        minx = min(minx, float(np.min(cols["minx"][ok])))
        miny = min(miny, float(np.min(cols["miny"][ok])))
        maxx = max(maxx, float(np.max(cols["maxx"][ok])))
        maxy = max(maxy, float(np.max(cols["maxy"][ok])))

    if not has_geom:
        return None
    return float(minx), float(miny), float(maxx), float(maxy)
