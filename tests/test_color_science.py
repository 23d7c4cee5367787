import numpy as np
import pytest

from ccmkit.core.color_science import (
    lab_to_xyz, linsrgb_to_xyz, responses_to_lab, whitepoint, xyz_to_lab, xyz_to_linsrgb, xyz_to_srgb,
)
from ccmkit.core.errors import InvalidShapeError, UnsupportedEnumError, UnsupportedWhitePointError
from ccmkit.core.spectral_data import WHITE_POINTS


@pytest.mark.parametrize("illuminant, observer", sorted(WHITE_POINTS))
def test_lab_round_trip_for_every_white_point(rng, illuminant, observer):
    white = whitepoint(illuminant, observer)
    # dark samples exercise the linear branch below the 0.008856 breakpoint
    xyz = np.vstack([
        rng.uniform(0.0, 1.0, (40, 3)) * white,
        rng.uniform(0.0, 0.008, (10, 3)) * white,
    ])
    lab = xyz_to_lab(xyz, illuminant, observer)
    np.testing.assert_allclose(lab_to_xyz(lab, illuminant, observer), xyz, atol=1e-9)


def test_white_maps_to_l100():
    lab = xyz_to_lab(whitepoint('D65'), 'D65')
    np.testing.assert_allclose(lab, [100.0, 0.0, 0.0], atol=1e-9)


def test_black_maps_to_zero():
    np.testing.assert_allclose(xyz_to_lab([0.0, 0.0, 0.0]), [0.0, 0.0, 0.0], atol=1e-12)


def test_explicit_white_overrides_table():
    white = [90.0, 100.0, 110.0]
    np.testing.assert_allclose(xyz_to_lab(white, white=white), [100.0, 0.0, 0.0], atol=1e-9)


def test_whitepoint_lookup():
    np.testing.assert_allclose(whitepoint('D65', '1931'), [95.047, 100.0, 108.883])
    np.testing.assert_allclose(whitepoint('f7', '1964'), [95.792, 100.0, 107.686])
    assert whitepoint('A', '1931')[1] == 100.0


def test_whitepoint_returns_a_copy():
    wp = whitepoint('D50')
    wp[0] = 0.0
    assert whitepoint('D50')[0] == pytest.approx(96.422)


def test_unsupported_white_point():
    with pytest.raises(UnsupportedWhitePointError):
        whitepoint('F8')
    with pytest.raises(UnsupportedEnumError):
        whitepoint('D65', '2006')


def test_linsrgb_round_trip(rng):
    rgb = rng.uniform(0.0, 1.0, (20, 3))
    np.testing.assert_allclose(xyz_to_linsrgb(linsrgb_to_xyz(rgb), clip=False), rgb, atol=1e-12)


def test_xyz_to_linsrgb_clips_out_of_gamut():
    # saturated spectral green is outside the sRGB gamut
    rgb = xyz_to_linsrgb([[0.2, 0.7, 0.05]])
    assert rgb.min() >= 0.0 and rgb.max() <= 1.0
    unclipped = xyz_to_linsrgb([[0.2, 0.7, 0.05]], clip=False)
    assert unclipped.min() < 0.0


def test_d65_white_is_srgb_white():
    rgb = xyz_to_linsrgb(whitepoint('D65') / 100.0, clip=False)
    np.testing.assert_allclose(rgb, [1.0, 1.0, 1.0], atol=2e-3)


def test_xyz_to_srgb_is_encoded_and_bounded():
    encoded = xyz_to_srgb([[0.18 * 0.95047, 0.18, 0.18 * 1.08883]])
    # 18% grey encodes to roughly 0.46 with the sRGB transfer function
    np.testing.assert_allclose(encoded, 0.461, atol=5e-3)


def test_responses_to_lab_srgb_white():
    lab = responses_to_lab([[1.0, 1.0, 1.0]], 'sRGB')
    np.testing.assert_allclose(lab[0], [100.0, 0.0, 0.0], atol=0.1)


def test_responses_to_lab_xyz_scales_by_100():
    xyz = np.array([[0.3, 0.4, 0.2]])
    np.testing.assert_allclose(responses_to_lab(xyz, 'XYZ'), xyz_to_lab(100.0 * xyz))


def test_triplet_shape_is_checked():
    with pytest.raises(InvalidShapeError):
        xyz_to_lab([[1.0, 2.0]])
