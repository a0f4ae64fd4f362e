#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Compare envelopes from the header-aware decoder with Shapely bounds of the WKB bodies.

Usage:
  python verify_gpkg_bounds.py path/to/file.gpkg table [geom_col]
"""
import sys
from typing import Iterator, Optional, Tuple

import numpy as np
from shapely import from_wkb

from gpkg_envelope import ByteCursor, GeoPackageSource, GeometryDecodeError, parse_header
from gpkg_envelope.bounds import envelope_table

GeomBBox = Tuple[float, float, float, float]


# ---------- helpers ----------
def wkb_body(blob: bytes) -> Optional[bytes]:
    """Strip the GP header; None if the header itself is unreadable."""
    try:
        header = parse_header(ByteCursor(blob))
    except GeometryDecodeError:
        return None
    return bytes(blob[header.body_offset:])


def iter_rows(src: GeoPackageSource) -> Iterator[Tuple[Optional[bytes], dict]]:
    """Yield (blob, decoder envelope row) pairs for the whole table."""
    for tbl in src.iter_tables():
        env = envelope_table(tbl, src.geom_col, "xy").to_pylist()
        for blob, row in zip(tbl[src.geom_col].to_pylist(), env):
            yield blob, row


def shapely_bounds(blob: bytes) -> Tuple[Optional[bool], Optional[GeomBBox]]:
    body = wkb_body(blob)
    if body is None:
        return None, None
    try:
        g = from_wkb(body)
    except Exception as e:
        print(f"  shapely could not parse body: {e}")
        return None, None
    if g is None or g.is_empty:
        return True, None
    return False, tuple(float(v) for v in g.bounds)


# ---------- main ----------
def main():
    if len(sys.argv) < 3:
        print("Usage: python verify_gpkg_bounds.py <file.gpkg> <table> [geom_col]")
        sys.exit(1)

    src = GeoPackageSource(sys.argv[1], sys.argv[2], geom_col=sys.argv[3] if len(sys.argv) > 3 else None)
    total = mismatched = skipped = 0
    try:
        for i, (blob, row) in enumerate(iter_rows(src)):
            if blob is None:
                continue
            total += 1
            empty, bounds = shapely_bounds(blob)
            if empty is None:
                skipped += 1
                continue

            ours_empty = row["is_empty"] == 1
            if empty != ours_empty:
                mismatched += 1
                print(f"row {i}: emptiness differs (shapely={empty}, decoder code={row['is_empty']})")
                continue
            if bounds is None:
                continue

            ours = (row["minx"], row["miny"], row["maxx"], row["maxy"])
            if any(v is None for v in ours) or not np.allclose(ours, bounds, rtol=0, atol=0):
                mismatched += 1
                print(f"row {i}: bounds differ\n  decoder: {ours}\n  shapely: {bounds}")
    finally:
        src.close()

    print(f"{total} geometries checked, {mismatched} mismatches, {skipped} unreadable by shapely")
    sys.exit(1 if mismatched else 0)


if __name__ == "__main__":
    main()
