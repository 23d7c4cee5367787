import numpy as np
import pytest

from ccmkit.core.color_science import responses_to_lab, whitepoint, xyz_to_linsrgb
from ccmkit.core.data_types import CCMFitResult, FitMethod, Model, TrainOptions, ValidateOptions
from ccmkit.core.errors import (
    InvalidShapeError, OutOfRangeError, RankDeficientError, ShapeMismatchError, UnknownMetricError,
)
from ccmkit.utils.ccm_optimizer.color_difference import cmcde
from ccmkit.utils.ccm_optimizer.expander import expand
from ccmkit.utils.ccm_optimizer.optimizer import CCMOptimizer, ccmtrain
from ccmkit.utils.ccm_optimizer.pipeline import ccmvalidate


@pytest.fixture
def training_set(rng, mixing_matrix):
    camera = rng.uniform(0.05, 0.9, (24, 3))
    target = camera @ mixing_matrix
    return camera, target


def _white_response(result: CCMFitResult) -> np.ndarray:
    return expand(np.full((1, 3), result.scale), result.model, result.bias)[0] @ result.matrix


def test_identity_fit(rng):
    camera = rng.uniform(0.05, 0.95, (24, 3))
    matrix, scale, predicted, errors = ccmtrain(camera, camera, model='linear3x3', max_iter=20)
    np.testing.assert_allclose(matrix, np.eye(3), atol=1e-6)
    assert scale == pytest.approx(1.0, abs=1e-6)
    np.testing.assert_allclose(predicted, camera, atol=1e-6)
    for name in errors:
        assert errors[name].max < 1e-4


def test_train_then_validate_is_deterministic(rng):
    camera = rng.uniform(0.1, 0.9, (4, 3))
    target = np.clip(camera @ np.array([[0.41, 0.21, 0.02], [0.36, 0.72, 0.12], [0.18, 0.07, 0.95]]), 0.0, 1.0)
    matrix, scale, predicted, errors = ccmtrain(camera, target, model='linear3x3',
                                                target_colorspace='XYZ', max_iter=30)
    validated, report = ccmvalidate(camera, target, 'linear3x3', matrix, scale, target_colorspace='XYZ')
    np.testing.assert_array_equal(predicted, validated)
    for name in errors:
        np.testing.assert_array_equal(errors[name].values, report[name].values)

    again = ccmtrain(camera, target, model='linear3x3', target_colorspace='XYZ', max_iter=30)
    np.testing.assert_array_equal(again[0], matrix)
    assert again[1] == scale


@pytest.mark.parametrize("model", ['linear3x3', 'root6x3', 'poly7x3'])
def test_refinement_is_never_worse_than_closed_form(training_set, model):
    camera, target = training_set
    result = CCMOptimizer(model=model, max_iter=40).optimize(camera, target)
    assert isinstance(result, CCMFitResult)
    assert result.loss <= result.baseline_loss
    assert np.all(np.isfinite(result.matrix))
    assert result.matrix.shape == (expand(camera, model).shape[1], 3)
    assert result.scale > 0.0
    assert result.method == 'CMA-ES'


def test_lbfgsb_solver(training_set):
    camera, target = training_set
    noisy = np.clip(target + 0.01 * np.sin(np.arange(target.size)).reshape(target.shape), 0.0, 1.0)
    result = CCMOptimizer(model='root6x3', method='L-BFGS-B', max_iter=15).optimize(camera, noisy)
    assert result.method == FitMethod.LBFGSB.value
    assert result.loss <= result.baseline_loss
    assert np.all(np.isfinite(result.matrix))


def test_mse_loss(training_set):
    camera, target = training_set
    result = CCMOptimizer(model='linear3x3', loss='mse', max_iter=10).optimize(camera, target)
    assert result.loss <= result.baseline_loss
    assert result.baseline_loss < 1e-20


def test_cmc_loss_weights_by_predicted_colour(training_set):
    camera, target = training_set
    target = target ** 1.4
    result = CCMOptimizer(model='linear3x3', loss='cmcde', metric='cmcde', target_colorspace='XYZ',
                          max_iter=0).optimize(camera, target)
    values = result.errors['cmcde'].values
    predicted_lab = responses_to_lab(result.predicted, 'XYZ')
    target_lab = responses_to_lab(target, 'XYZ')
    np.testing.assert_allclose(values, cmcde(predicted_lab, target_lab))
    assert result.baseline_loss == pytest.approx(values.mean())


def test_no_iterations_keeps_closed_form(training_set, mixing_matrix):
    camera, target = training_set
    result = CCMOptimizer(model='linear3x3', max_iter=0).optimize(camera, target)
    assert result.iterations == 0
    assert result.scale == 1.0
    assert result.loss == result.baseline_loss
    np.testing.assert_allclose(result.matrix, mixing_matrix, atol=1e-9)


def test_result_is_immutable(training_set):
    camera, target = training_set
    result = CCMOptimizer(max_iter=0).optimize(camera, target)
    with pytest.raises(ValueError):
        result.matrix[0, 0] = 1.0
    with pytest.raises(ValueError):
        result.predicted[0, 0] = 1.0


def test_preserve_white_xyz(training_set):
    camera, target = training_set
    result = CCMOptimizer(model='linear3x3', target_colorspace='XYZ', preserve_white=True,
                          max_iter=30).optimize(camera, target)
    np.testing.assert_allclose(_white_response(result), whitepoint('D65') / 100.0, atol=1e-9)


def test_preserve_white_srgb_with_scale(training_set):
    camera, target = training_set
    result = CCMOptimizer(model='root6x3', preserve_white=True, ref_illuminant='D50',
                          max_iter=30).optimize(camera, target)
    expected = xyz_to_linsrgb(whitepoint('D50') / 100.0, clip=False).ravel()
    np.testing.assert_allclose(_white_response(result), expected, atol=1e-9)


def test_explicit_white_point(training_set):
    camera, target = training_set
    options = TrainOptions(model='poly7x3', target_colorspace='XYZ', white_point=(0.9, 1.0, 1.1), max_iter=20)
    assert options.preserve_white
    result = CCMOptimizer(options).optimize(camera, target)
    np.testing.assert_allclose(_white_response(result), [0.9, 1.0, 1.1], atol=1e-9)


def test_bias_adds_a_matrix_row(training_set):
    camera, target = training_set
    result = CCMOptimizer(model='linear3x3', bias=True, max_iter=5).optimize(camera, target)
    assert result.bias
    assert result.matrix.shape == (4, 3)


def test_bias_is_ignored_for_poly4(training_set, ccmkit_log):
    camera, target = training_set
    result = CCMOptimizer(model='poly4x3', bias=True, max_iter=5).optimize(camera, target)
    assert not result.bias
    assert result.matrix.shape == (4, 3)
    assert any("'bias' is ignored" in r.getMessage() for r in ccmkit_log.records)


def test_fixed_scale(training_set):
    camera, target = training_set
    result = CCMOptimizer(model='root6x3', allow_scale=False, max_iter=20).optimize(camera, target)
    assert result.scale == 1.0


def test_sample_weights(training_set):
    camera, target = training_set
    weights = np.ones(len(camera))
    weights[0] = 10.0
    result = CCMOptimizer(model='linear3x3', weights=weights, max_iter=5).optimize(camera, target)
    assert result.loss <= result.baseline_loss
    with pytest.raises(ShapeMismatchError):
        CCMOptimizer(weights=weights[:-1], max_iter=5).optimize(camera, target)


def test_rank_deficient_samples(ccmkit_log):
    camera = np.tile([0.2, 0.4, 0.6], (5, 1))
    target = np.tile([0.3, 0.4, 0.5], (5, 1))
    with pytest.raises(RankDeficientError):
        CCMOptimizer(model='linear3x3', regularize=False, max_iter=5).optimize(camera, target)

    result = CCMOptimizer(model='linear3x3', max_iter=5).optimize(camera, target)
    assert np.all(np.isfinite(result.matrix))
    assert any("rank deficient" in r.getMessage() for r in ccmkit_log.records if r.levelname == 'WARNING')


def test_zero_weights_count_towards_rank(rng, ccmkit_log):
    camera = rng.uniform(0.1, 0.9, (6, 3))
    weights = [1, 1, 0, 0, 0, 0]
    with pytest.raises(RankDeficientError):
        ccmtrain(camera, camera, model='linear3x3', target_colorspace='XYZ', preserve_white=True,
                 weights=weights, regularize=False, max_iter=0)

    result = CCMOptimizer(model='linear3x3', target_colorspace='XYZ', preserve_white=True,
                          weights=weights, max_iter=0).optimize(camera, camera)
    assert np.all(np.isfinite(result.matrix))
    np.testing.assert_allclose(_white_response(result), whitepoint('D65') / 100.0, atol=1e-9)
    assert any("rank deficient" in r.getMessage() for r in ccmkit_log.records if r.levelname == 'WARNING')

    with pytest.raises(RankDeficientError):
        ccmtrain(camera, camera, model='linear3x3', weights=weights, regularize=False, max_iter=0)


def test_fewer_samples_than_features_is_rank_deficient(rng):
    camera = rng.uniform(0.1, 0.9, (5, 3))
    with pytest.raises(RankDeficientError):
        ccmtrain(camera, camera, model='root13x3', regularize=False, max_iter=5)


def test_inputs_are_checked(training_set):
    camera, target = training_set
    with pytest.raises(OutOfRangeError):
        ccmtrain(camera * 2.0, target, max_iter=5)
    with pytest.raises(ShapeMismatchError):
        ccmtrain(camera, target[:-2], max_iter=5)
    with pytest.raises(InvalidShapeError):
        ccmtrain(camera[:, :2], target[:, :2], max_iter=5)
    with pytest.raises(InvalidShapeError):
        ccmtrain(np.zeros((0, 3)), np.zeros((0, 3)), max_iter=5)
    with pytest.raises(UnknownMetricError):
        ccmtrain(camera, target, loss='rmse', max_iter=5)


def test_train_options():
    options = TrainOptions(model='ROOT6X3', loss='cmcde', method='cma-es', weights=[1, 2, 3])
    assert options.model is Model.ROOT6X3
    assert options.method is FitMethod.CMA_ES
    assert not options.weights.flags.writeable
    with pytest.raises(InvalidShapeError):
        TrainOptions(weights=[1.0, -1.0])
    with pytest.raises(InvalidShapeError):
        TrainOptions(white_point=(0.95, 1.0))


def test_validate_options_are_reused_for_training(training_set):
    camera, target = training_set
    optimizer = CCMOptimizer(ValidateOptions(target_colorspace='XYZ', metric='mse'), max_iter=3)
    assert optimizer.options.target_colorspace.value == 'XYZ'
    result = optimizer.optimize(camera, target)
    assert list(result.errors) == ['mse']


def test_solver_defaults_come_from_config():
    optimizer = CCMOptimizer()
    assert optimizer.method is FitMethod.CMA_ES
    assert optimizer.max_iter == 1000
    assert optimizer.tolerance == 1e-8
    assert optimizer.seed == 1
