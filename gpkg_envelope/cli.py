from __future__ import annotations
import argparse
import logging

import pyarrow as pa
import pyarrow.compute as pc
import pyarrow.parquet as pq

from .bounds import envelope_table
from .datasource import GeoPackageSource, is_geopackage_path
from .functions import register_functions
from .orchestrator import DecodeConfig
from .spatial_index import add_spatial_index, drop_spatial_index

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


def _parse_ordinates(s: str) -> str:
    s = (s or "").strip().lower()
    if not s or any(c not in "xyzm" for c in s):
        raise argparse.ArgumentTypeError(f"Unsupported --ordinates: {s!r} (use letters from xyzm)")
    return s


def build_config(args) -> DecodeConfig:
    return DecodeConfig(
        trust_header_envelope=args.trust_header_envelope,
        trust_header_empty=not args.walk_empty_bodies,
    )


def run_extent(source: GeoPackageSource, args, config: DecodeConfig):
    envs = []
    pk = source.primary_key()
    for batch in source.iter_tables():
        env = envelope_table(batch, source.geom_col, args.ordinates, config)
        if pk and pk in batch.column_names:
            env = env.add_column(0, pk, batch[pk])
        envs.append(env)

    if not envs:
        logger.info("Table %s is empty", source.table)
        return None

    full = pa.concat_tables(envs)
    counts = full["is_empty"].value_counts().to_pylist()
    logger.info("Geometries by emptiness code (1 empty, 0 not empty, -1 error): %s",
                {c["values"]: c["counts"] for c in counts})

    for o in args.ordinates:
        lo = pc.min(full[f"min{o}"]).as_py()
        hi = pc.max(full[f"max{o}"]).as_py()
        logger.info("Extent %s: [%s, %s]", o.upper(), lo, hi)

    if args.out:
        pq.write_table(full, args.out, compression=args.compression)
        logger.info("Wrote %d envelopes to %s", full.num_rows, args.out)
    return full


def main(argv=None):
    ap = argparse.ArgumentParser(
        description="GeoPackage geometry envelopes and emptiness (header-aware WKB decoding)."
    )
    # Source
    ap.add_argument("--gpkg", required=True, help="Path to the GeoPackage file.")
    ap.add_argument("--table", required=True, help="Feature table name.")
    ap.add_argument("--geom-col", default=None,
                    help="Geometry column (default: from gpkg_geometry_columns).")
    ap.add_argument("--batch-rows", type=int, default=50_000, help="Rows per Arrow batch.")

    # Output
    ap.add_argument("--ordinates", type=_parse_ordinates, default="xy",
                    help="Ordinates to compute, any of xyzm (default: xy).")
    ap.add_argument("--out", default=None, help="Write per-row envelopes to this Parquet file.")
    ap.add_argument("--compression", default="zstd", help="Parquet compression codec (default: zstd).")

    # Decoding policy
    ap.add_argument("--trust-header-envelope", action="store_true",
                    help="Answer extremes from the GP header envelope when present.")
    ap.add_argument("--walk-empty-bodies", action="store_true",
                    help="Check the body even when the GP header says the geometry is empty.")

    # Spatial index maintenance
    ap.add_argument("--spatial-index", choices=("add", "drop"), default=None,
                    help="Create or drop the gpkg_rtree_index for the geometry column.")
    ap.add_argument("--id-col", default=None, help="Primary key column (default: from table_info).")

    args = ap.parse_args(argv)

    if not is_geopackage_path(args.gpkg):
        logger.warning("%s does not have a .gpkg extension", args.gpkg)

    config = build_config(args)
    source = GeoPackageSource(args.gpkg, args.table, geom_col=args.geom_col, batch_rows=args.batch_rows)
    try:
        register_functions(source.conn, config)
        if args.spatial_index == "add":
            id_col = args.id_col or source.primary_key()
            if not id_col:
                ap.error(f"Table {args.table} has no primary key; pass --id-col.")
            add_spatial_index(source.conn, args.table, source.geom_col, id_col)
            source.conn.commit()
        elif args.spatial_index == "drop":
            drop_spatial_index(source.conn, args.table, source.geom_col)
            source.conn.commit()
        else:
            run_extent(source, args, config)
    finally:
        source.close()


if __name__ == "__main__":
    main()
