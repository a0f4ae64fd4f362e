from .version import __version__
from .cursor import ByteCursor, ByteOrder
from .errors import (
    GeometryDecodeError, TruncatedInput, MalformedHeader, UnsupportedVariant,
    OrdinateNotApplicable, VariantMismatch, InvalidCount, EmptyGeometryNoExtreme, NestingTooDeep,
)
from .wkb import GeometryKind, Ordinate, Statistic, Emptiness
from .header import EnvelopeType, OuterHeader, parse_header
from .orchestrator import DecodeConfig, DEFAULT_CONFIG, get_extreme, is_empty
from .functions import register_functions
from .spatial_index import add_spatial_index, drop_spatial_index
from .datasource import DataSource, GeoPackageSource
from .bounds import envelope_table, table_extent

__all__ = [
    "__version__",
    "ByteCursor", "ByteOrder",
    "GeometryDecodeError", "TruncatedInput", "MalformedHeader", "UnsupportedVariant",
    "OrdinateNotApplicable", "VariantMismatch", "InvalidCount", "EmptyGeometryNoExtreme", "NestingTooDeep",
    "GeometryKind", "Ordinate", "Statistic", "Emptiness",
    "EnvelopeType", "OuterHeader", "parse_header",
    "DecodeConfig", "DEFAULT_CONFIG", "get_extreme", "is_empty",
    "register_functions",
    "add_spatial_index", "drop_spatial_index",
    "DataSource", "GeoPackageSource",
    "envelope_table", "table_extent",
]
