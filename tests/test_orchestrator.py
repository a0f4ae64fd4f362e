import pytest

from gpkg_envelope import (
    DEFAULT_CONFIG,
    DecodeConfig,
    EmptyGeometryNoExtreme,
    MalformedHeader,
    Ordinate,
    OrdinateNotApplicable,
    Statistic,
    VariantMismatch,
    get_extreme,
)

from gpkgblob import BE, NAN, SQUARE, gpkg, point, polygon

TRUST_ENVELOPE = DecodeConfig(trust_header_envelope=True)

X, Y, Z, M = Ordinate.X, Ordinate.Y, Ordinate.Z, Ordinate.M
MIN, MAX = Statistic.MIN, Statistic.MAX


def test_defaults():
    assert DEFAULT_CONFIG.trust_header_envelope is False
    assert DEFAULT_CONFIG.trust_header_empty is True


def test_config_is_frozen():
    with pytest.raises(AttributeError):
        DEFAULT_CONFIG.trust_header_envelope = True


def test_header_envelope_used_only_when_trusted():
    # envelope disagrees with the body on purpose
    blob = gpkg(polygon([SQUARE]), envelope=[-50.0, -60.0, 70.0, 80.0], env_type=1)
    assert get_extreme(blob, X, MIN) == 0.0
    assert get_extreme(blob, X, MIN, config=TRUST_ENVELOPE) == -50.0
    assert get_extreme(blob, Y, MAX, config=TRUST_ENVELOPE) == 80.0


def test_big_endian_envelope():
    blob = gpkg(polygon([SQUARE]), envelope=[1.0, 2.0, 3.0, 4.0], env_type=1, order=BE)
    assert get_extreme(blob, Y, MIN, config=TRUST_ENVELOPE) == 2.0


def test_nan_envelope_slot_falls_back_to_body():
    blob = gpkg(polygon([SQUARE]), envelope=[NAN, NAN, NAN, NAN], env_type=1)
    assert get_extreme(blob, X, MAX, config=TRUST_ENVELOPE) == 10.0


def test_envelope_without_ordinate_falls_back_to_body():
    blob = gpkg(point(1.0, 2.0, 3.0, z=True), envelope=[1.0, 2.0, 1.0, 2.0], env_type=1)
    assert get_extreme(blob, Z, MIN, config=TRUST_ENVELOPE) == 3.0


def test_fallback_still_reports_body_errors():
    blob = gpkg(point(1.0, 2.0), envelope=[1.0, 2.0, 1.0, 2.0], env_type=1)
    with pytest.raises(OrdinateNotApplicable):
        get_extreme(blob, M, MIN, config=TRUST_ENVELOPE)


def test_empty_header_with_trusted_envelope():
    blob = gpkg(point(NAN, NAN), envelope=[5.0, 6.0, 7.0, 8.0], env_type=1, empty=True)
    assert get_extreme(blob, X, MAX, config=TRUST_ENVELOPE) == 7.0
    with pytest.raises(EmptyGeometryNoExtreme):
        get_extreme(blob, X, MAX)


def test_empty_header_without_envelope():
    blob = gpkg(point(NAN, NAN), empty=True)
    with pytest.raises(EmptyGeometryNoExtreme):
        get_extreme(blob, X, MIN, config=TRUST_ENVELOPE)


def test_plain_int_arguments():
    blob = gpkg(polygon([SQUARE]))
    assert get_extreme(blob, 0, 1) == 10.0


def test_header_errors_propagate():
    with pytest.raises(MalformedHeader):
        get_extreme(b"XX" + bytes(40), X, MIN)


def test_plain_int_expected_kind():
    blob = gpkg(point(0.0, 0.0))
    assert get_extreme(blob, 0, 0, 1) == 0.0
    with pytest.raises(VariantMismatch):
        get_extreme(blob, 0, 0, 3)
