import numpy as np
import pytest
from colour.difference import delta_E_CIE2000

from ccmkit.core.data_types import Metric
from ccmkit.core.errors import InvalidShapeError, ShapeMismatchError, UnknownMetricError
from ccmkit.utils.ccm_optimizer.color_difference import (
    METRIC_FUNCTIONS, ciede00, ciede94, ciedelab, cmcde, compute_metric, mse,
)

# Sharma, Wu & Dalal (2005) CIEDE2000 test data
SHARMA_PAIRS = [
    ((50.0000, 2.6772, -79.7751), (50.0000, 0.0000, -82.7485), 2.0425),
    ((50.0000, 3.1571, -77.2803), (50.0000, 0.0000, -82.7485), 2.8615),
    ((50.0000, 2.8361, -74.0200), (50.0000, 0.0000, -82.7485), 3.4412),
    ((50.0000, -1.3802, -84.2814), (50.0000, 0.0000, -82.7485), 1.0000),
    ((50.0000, 0.0000, 0.0000), (50.0000, -1.0000, 2.0000), 2.3669),
    ((50.0000, -1.0000, 2.0000), (50.0000, 0.0000, 0.0000), 2.3669),
    ((50.0000, 2.4900, -0.0010), (50.0000, -2.4900, 0.0009), 7.1792),
    ((50.0000, 2.4900, -0.0010), (50.0000, -2.4900, 0.0011), 7.2195),
    ((50.0000, -0.0010, 2.4900), (50.0000, 0.0009, -2.4900), 4.8045),
    ((50.0000, 2.5000, 0.0000), (50.0000, 0.0000, -2.5000), 4.3065),
    ((50.0000, 2.5000, 0.0000), (73.0000, 25.0000, -18.0000), 27.1492),
    ((50.0000, 2.5000, 0.0000), (61.0000, -5.0000, 29.0000), 22.8977),
    ((50.0000, 2.5000, 0.0000), (50.0000, 3.1736, 0.5854), 1.0000),
    ((2.0776, 0.0795, -1.1350), (0.9033, -0.0636, -0.5514), 0.9082),
]

LAB_FUNCTIONS = [ciede00, ciede94, ciedelab, cmcde]


def _random_lab(rng, n):
    return np.column_stack([
        rng.uniform(0.0, 100.0, n),
        rng.uniform(-90.0, 90.0, n),
        rng.uniform(-90.0, 90.0, n),
    ])


def test_ciede2000_reference_pairs():
    lab1 = np.array([p[0] for p in SHARMA_PAIRS])
    lab2 = np.array([p[1] for p in SHARMA_PAIRS])
    expected = np.array([p[2] for p in SHARMA_PAIRS])
    np.testing.assert_allclose(ciede00(lab1, lab2), expected, atol=1e-4)


def test_ciede2000_textiles_halves_lightness():
    lab1, lab2 = [[50.0, 0.0, 0.0]], [[60.0, 0.0, 0.0]]
    np.testing.assert_allclose(ciede00(lab1, lab2, textiles=True), 0.5 * ciede00(lab1, lab2))


def test_cie94_weights_by_first_chroma():
    # ΔC = 10, ΔH = 0: SC = 1 + 0.045 · C1
    lab1, lab2 = [[50.0, 30.0, 0.0]], [[50.0, 20.0, 0.0]]
    assert ciede94(lab1, lab2)[0] == pytest.approx(10.0 / 2.35)
    assert ciede94(lab2, lab1)[0] == pytest.approx(10.0 / 1.9)


def test_cie94_textiles_weights_lightness_less():
    lab1, lab2 = [[50.0, 10.0, 10.0]], [[60.0, 10.0, 10.0]]
    assert ciede94(lab1, lab2)[0] == pytest.approx(10.0)
    assert ciede94(lab1, lab2, textiles=True)[0] == pytest.approx(5.0)


def test_cmc_weights_by_first_colour():
    lab1, lab2 = [[50.0, 30.0, 0.0]], [[50.0, 20.0, 0.0]]
    assert cmcde(lab1, lab2)[0] == pytest.approx(4.97015, rel=1e-5)
    assert cmcde(lab1, lab2)[0] != pytest.approx(cmcde(lab2, lab1)[0])


def test_cmc_lightness_weight():
    lab1, lab2 = [[50.0, 0.0, 0.0]], [[60.0, 0.0, 0.0]]
    assert cmcde(lab1, lab2)[0] == pytest.approx(9.18851, rel=1e-5)
    np.testing.assert_allclose(cmcde(lab1, lab2, l=2.0), 0.5 * cmcde(lab1, lab2))


def test_cie76_is_euclidean():
    assert ciedelab([[50.0, 0.0, 0.0]], [[53.0, 4.0, 0.0]])[0] == pytest.approx(5.0)
    assert ciedelab([[50.0, 0.0, 0.0]], [[53.0, 4.0, 0.0]], omit_lightness=True)[0] == pytest.approx(4.0)


@pytest.mark.parametrize("fn", LAB_FUNCTIONS)
def test_identical_inputs_give_zero(rng, fn):
    lab = _random_lab(rng, 50)
    np.testing.assert_allclose(fn(lab, lab.copy()), 0.0, atol=1e-12)


@pytest.mark.parametrize("fn", [ciede00, ciedelab])
def test_symmetric_metrics(rng, fn):
    lab1, lab2 = _random_lab(rng, 100), _random_lab(rng, 100)
    np.testing.assert_allclose(fn(lab1, lab2), fn(lab2, lab1), rtol=1e-12, atol=1e-12)


@pytest.mark.parametrize("fn", LAB_FUNCTIONS)
def test_omit_lightness_ignores_exposure(fn):
    lab1 = np.array([[30.0, 12.0, -40.0], [70.0, -5.0, 8.0]])
    lab2 = lab1 + np.array([15.0, 0.0, 0.0])
    assert np.all(fn(lab1, lab2) > 1.0)
    np.testing.assert_allclose(fn(lab1, lab2, omit_lightness=True), 0.0, atol=1e-12)


@pytest.mark.parametrize("fn", LAB_FUNCTIONS)
def test_neutral_colors_are_stable(fn):
    # zero chroma leaves the hue undefined
    values = fn([[50.0, 0.0, 0.0], [20.0, 0.0, 0.0]], [[60.0, 0.0, 0.0], [20.0, 1e-9, 0.0]])
    assert np.all(np.isfinite(values))
    assert values[0] > 0.0
    assert values[1] < 1e-6


def test_ciede2000_hue_wraps_around():
    # hues of 350° and 10° are 20° apart, not 340°
    c = 30.0
    lab1 = [[50.0, c * np.cos(np.radians(350.0)), c * np.sin(np.radians(350.0))]]
    lab2 = [[50.0, c * np.cos(np.radians(10.0)), c * np.sin(np.radians(10.0))]]
    lab3 = [[50.0, c * np.cos(np.radians(30.0)), c * np.sin(np.radians(30.0))]]
    near = ciede00(lab1, lab2)[0]
    assert near < ciede00(lab1, lab3)[0]
    assert near == pytest.approx(delta_E_CIE2000(np.array(lab1), np.array(lab2))[0])


def test_mse_is_rowwise_mean():
    np.testing.assert_allclose(mse([[0.0, 0.0, 0.0], [0.5, 0.5, 0.5]], [[0.3, 0.0, 0.0], [0.5, 0.5, 0.5]]),
                               [0.03, 0.0])


def test_mse_of_identical_arrays_is_zero(rng):
    rgb = rng.uniform(0.0, 1.0, (10, 3))
    np.testing.assert_array_equal(mse(rgb, rgb), np.zeros(10))


def test_single_triplets_are_accepted():
    assert ciede00([50.0, 2.6772, -79.7751], [50.0, 0.0, -82.7485]).shape == (1,)


def test_row_count_mismatch():
    with pytest.raises(ShapeMismatchError):
        ciede00(np.zeros((3, 3)), np.zeros((2, 3)))


def test_non_triplet_input():
    with pytest.raises(InvalidShapeError):
        ciedelab(np.zeros((3, 2)), np.zeros((3, 2)))


def test_dispatch_table_covers_every_metric():
    assert set(METRIC_FUNCTIONS) == set(Metric)


def test_compute_metric_by_name():
    lab1, lab2 = [[50.0, 0.0, 0.0]], [[50.0, -1.0, 2.0]]
    np.testing.assert_allclose(compute_metric('CIEDE00', lab1, lab2), ciede00(lab1, lab2))
    np.testing.assert_allclose(compute_metric(Metric.CMCDE, lab1, lab2), cmcde(lab1, lab2))


def test_unknown_metric():
    with pytest.raises(UnknownMetricError):
        compute_metric('ciede76', [[0.0, 0.0, 0.0]], [[0.0, 0.0, 0.0]])
