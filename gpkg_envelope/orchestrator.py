from __future__ import annotations

import logging
from dataclasses import dataclass

from .cursor import ByteCursor, ByteOrder, BytesLike
from .emptiness import read_geometry_emptiness
from .envelope import read_geometry_extreme
from .errors import EmptyGeometryNoExtreme, GeometryDecodeError
from .header import parse_header, read_header_extreme
from .wkb import Emptiness, GeometryKind, Ordinate, Statistic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodeConfig:
    """
    How far the GP header is trusted.

    The two knobs are independent: some writers emit headers whose envelope and
    empty flag disagree with the body.
      - trust_header_envelope: answer extreme queries from the header envelope
        when it decodes, instead of walking the body (off by default).
      - trust_header_empty: a header flagged empty answers EMPTY without reading
        the body (on by default). A header that is not flagged empty is always
        confirmed against the body.
    """
    trust_header_envelope: bool = False
    trust_header_empty: bool = True


DEFAULT_CONFIG = DecodeConfig()


def get_extreme(blob: BytesLike, ordinate: Ordinate, statistic: Statistic,
                expected: GeometryKind = GeometryKind.GEOMETRY,
                config: DecodeConfig = DEFAULT_CONFIG) -> float:
    """
    MIN or MAX of one ordinate over a GeoPackage geometry BLOB.

    Raises a GeometryDecodeError subclass when no value can be produced.
    """
    cur = ByteCursor(blob)
    header = parse_header(cur)
    ordinate, statistic, expected = Ordinate(ordinate), Statistic(statistic), GeometryKind(expected)

    if header.is_empty:
        if config.trust_header_envelope:
            value = read_header_extreme(blob, header, ordinate, statistic)
            if value is not None:
                return value
        raise EmptyGeometryNoExtreme("geometry header is flagged empty")

    if config.trust_header_envelope:
        value = read_header_extreme(blob, header, ordinate, statistic)
        if value is not None:
            return value
        logger.debug("header envelope unusable for %s %s, reading geometry body",
                     statistic.name, ordinate.name)

    # body byte order comes from its own marker; the header flag only covers the envelope
    return read_geometry_extreme(cur, ByteOrder.native(), ordinate, statistic, expected)


def is_empty(blob: BytesLike, config: DecodeConfig = DEFAULT_CONFIG) -> Emptiness:
    """Tri-state emptiness of a GeoPackage geometry BLOB; never raises for bad input."""
    try:
        cur = ByteCursor(blob)
        header = parse_header(cur)
        if header.is_empty and config.trust_header_empty:
            return Emptiness.EMPTY
        return read_geometry_emptiness(cur, ByteOrder.native())
    except GeometryDecodeError as e:
        logger.debug("is_empty: undecodable geometry (%s)", e)
        return Emptiness.ERROR
