from __future__ import annotations


class GeometryDecodeError(ValueError):
    """Base class for every failure raised while decoding a geometry BLOB."""


class TruncatedInput(GeometryDecodeError):
    pass


class MalformedHeader(GeometryDecodeError):
    """Bad GP magic, unsupported version byte or unknown envelope type."""


class UnsupportedVariant(GeometryDecodeError):
    pass


class OrdinateNotApplicable(GeometryDecodeError):
    pass


class VariantMismatch(GeometryDecodeError):
    pass


class InvalidCount(GeometryDecodeError):
    """A point/ring/member count that the container cannot hold (negative, or zero where required)."""


class EmptyGeometryNoExtreme(GeometryDecodeError):
    pass


class NestingTooDeep(GeometryDecodeError):
    """Collections nested deeper than MAX_NESTING_DEPTH."""
