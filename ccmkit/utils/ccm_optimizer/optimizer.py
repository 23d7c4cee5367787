#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
颜色校正矩阵拟合器

联合优化校正矩阵 M (F×3) 与相机响应缩放系数 s：

    predicted = expand(s · camera_rgb, model, bias) · M

目标：最小化训练样本上（加权）平均色差，默认 CIEDE2000。

求解步骤:
1. 闭式加权最小二乘（s = 1）作为初值与基线；保持白点时为等式约束最小二乘
2. CMA-ES（默认）或 L-BFGS-B 迭代细化；参数为 M 的全部元素以及 log(s)
3. 仅当细化后的损失严格小于基线时采用细化结果
4. 保持白点时，每次评估前都把 M 投影到约束面 expand(s·[1,1,1]) · M = white 上

求解器参数（迭代上限、收敛容差、初始步长、随机种子）来自 config/defaults/optimizer.json，
调用级 TrainOptions 中的非 None 字段优先。
"""

from typing import Optional, Tuple

import cma
import numpy as np
from scipy.optimize import minimize

from ccmkit.core.color_science import responses_to_lab, whitepoint, xyz_to_linsrgb
from ccmkit.core.data_types import (
    CCMFitResult, ColorSpace, ErrorReport, FitMethod, TrainOptions, parse_enum,
)
from ccmkit.core.errors import RankDeficientError, ShapeMismatchError
from ccmkit.utils import debug_logger
from ccmkit.utils.defaults import load_optimizer_defaults
from .color_difference import LAB_METRICS, METRIC_FUNCTIONS
from .expander import expand, feature_count, supports_bias
from .pipeline import ccmapply, check_pair, evaluate_errors, log_report, resolve_options


_MODULE = "optimizer"

# 数值异常（溢出/NaN）时的目标函数值
_PENALTY = 1e10


class CCMOptimizer:
    """颜色校正矩阵优化器"""

    def __init__(self, options: Optional[TrainOptions] = None, **kwargs):
        """
        初始化优化器

        Args:
            options: 训练参数；关键字参数覆盖其中的同名字段
        """
        self.options = resolve_options(TrainOptions, options, kwargs)
        self.model = self.options.model

        if self.options.bias and not supports_bias(self.model):
            debug_logger.warning(
                f"model '{self.model.value}' already has a constant term; 'bias' is ignored.", _MODULE
            )
        self.bias = self.options.bias and supports_bias(self.model)
        self.n_features = feature_count(self.model, self.bias)

        defaults = load_optimizer_defaults()
        opts = self.options
        self.method = opts.method if opts.method is not None else parse_enum(
            FitMethod, defaults["method"], 'fitting method')
        self.max_iter = int(opts.max_iter if opts.max_iter is not None else defaults["max_iter"])
        self.tolerance = float(opts.tolerance if opts.tolerance is not None else defaults["tolerance"])
        self.sigma0 = float(opts.sigma0 if opts.sigma0 is not None else defaults["sigma0"])
        self.seed = opts.seed if opts.seed is not None else defaults["seed"]
        self.popsize = defaults.get("popsize")
        self.ridge = float(defaults["ridge"])

    # ===== 输入与约束 =====
    def _sample_weights(self, n_samples: int) -> np.ndarray:
        if self.options.weights is None:
            return np.full(n_samples, 1.0 / n_samples)
        w = np.asarray(self.options.weights, dtype=np.float64)
        if w.size != n_samples:
            raise ShapeMismatchError(
                f"the length of 'weights' ({w.size}) does not match the number of samples ({n_samples})."
            )
        return w / w.sum()

    def _white_target(self) -> Optional[np.ndarray]:
        """白点约束的目标响应（目标色彩空间下，0-1 量级）；不保持白点时返回 None"""
        if not self.options.preserve_white:
            return None
        if self.options.white_point is not None:
            white_xyz = np.asarray(self.options.white_point, dtype=np.float64)
        else:
            white_xyz = whitepoint(self.options.ref_illuminant, self.options.observer) / 100.0
        if self.options.target_colorspace is ColorSpace.SRGB:
            return xyz_to_linsrgb(white_xyz, clip=False).ravel()
        return white_xyz

    def _white_features(self, scale: float) -> np.ndarray:
        return expand(np.full((1, 3), scale), self.model, self.bias)[0]

    def _project_white(self, matrix: np.ndarray, scale: float, white: Optional[np.ndarray]) -> np.ndarray:
        """把矩阵投影到 expand(s·[1,1,1]) · M = white 的约束面上（最小范数修正）"""
        if white is None:
            return matrix
        e = self._white_features(scale)
        return matrix + np.outer(e, white - e @ matrix) / float(e @ e)

    # ===== 闭式初值 =====
    def _closed_form(self, camera: np.ndarray, target: np.ndarray, weights: np.ndarray,
                     white: Optional[np.ndarray]) -> np.ndarray:
        """加权最小二乘（s = 1）；秩亏时使用岭回归，regularize=False 时抛出 RankDeficientError"""
        X = expand(camera, self.model, self.bias)
        sw = np.sqrt(weights)[:, np.newaxis]
        A = X.T @ (weights[:, np.newaxis] * X)
        B = X.T @ (weights[:, np.newaxis] * target)

        # 零权重样本不参与拟合，秩按加权设计矩阵计算
        rank = int(np.linalg.matrix_rank(sw * X))
        deficient = rank < self.n_features
        if deficient:
            message = (f"the expanded feature matrix is rank deficient (rank {rank} < {self.n_features} features); "
                       f"duplicate, degenerate or zero-weighted samples?")
            if not self.options.regularize:
                raise RankDeficientError(message)
            trace = float(np.trace(A))
            lam = self.ridge * (trace / self.n_features if trace > 0.0 else 1.0)
            debug_logger.warning(f"{message} Falling back to ridge regression (lambda={lam:.3G}).", _MODULE)
            A = A + lam * np.eye(self.n_features)
            matrix = np.linalg.solve(A, B)
        else:
            matrix = np.linalg.lstsq(sw * X, sw * target, rcond=None)[0]

        if white is not None:
            # 等式约束最小二乘：M = M_ls + A⁻¹e (w − e·M_ls) / (eᵀA⁻¹e)
            e = self._white_features(1.0)
            Ainv_e = np.linalg.solve(A, e)
            matrix = matrix + np.outer(Ainv_e, white - e @ matrix) / float(e @ Ainv_e)

        if not np.all(np.isfinite(matrix)):
            raise RankDeficientError("closed-form solution is not finite; check the training samples.")
        return matrix

    # ===== 参数化与目标函数 =====
    def _pack(self, matrix: np.ndarray, scale: float) -> np.ndarray:
        params = matrix.ravel()
        if self.options.allow_scale:
            params = np.append(params, np.log(scale))
        return params

    def _unpack(self, params: np.ndarray, white: Optional[np.ndarray]) -> Tuple[np.ndarray, float]:
        n = self.n_features * 3
        matrix = np.asarray(params[:n], dtype=np.float64).reshape(self.n_features, 3)
        scale = float(np.exp(params[n])) if self.options.allow_scale else 1.0
        return self._project_white(matrix, scale, white), scale

    def _make_loss(self, camera: np.ndarray, target: np.ndarray, weights: np.ndarray):
        opts = self.options
        loss_fn = METRIC_FUNCTIONS[opts.loss]
        in_lab = opts.loss in LAB_METRICS
        if in_lab:
            reference = responses_to_lab(target, opts.target_colorspace, opts.ref_illuminant, opts.observer)
        else:
            reference = target

        def loss(matrix: np.ndarray, scale: float) -> float:
            predicted = expand(scale * camera, self.model, self.bias) @ matrix
            if in_lab:
                predicted = responses_to_lab(predicted, opts.target_colorspace, opts.ref_illuminant, opts.observer)
            per_sample = loss_fn(predicted, reference, opts.omit_lightness)
            value = float(np.sum(weights * per_sample))
            return value if np.isfinite(value) else _PENALTY

        return loss

    # ===== 迭代求解 =====
    def _optimize_cma(self, objective, x0: np.ndarray) -> Tuple[np.ndarray, float, int]:
        opts = {
            'maxiter': self.max_iter,
            'tolfun': self.tolerance,
            'seed': self.seed,
            'verbose': -9,
            'verb_disp': 0,
            'verb_log': 0,
        }
        if self.popsize:
            opts['popsize'] = int(self.popsize)

        es = cma.CMAEvolutionStrategy(x0, self.sigma0, opts)
        best = float('inf')
        while not es.stop():
            xs = es.ask()
            fs = [objective(np.asarray(x, dtype=np.float64)) for x in xs]
            es.tell(xs, fs)
            gen_best = float(np.min(fs))
            if gen_best < best:
                best = gen_best
            debug_logger.debug(f"iteration {es.countiter:4d}: loss={gen_best:.6G} (best={best:.6G})", _MODULE)

        res = es.result
        return np.asarray(res.xbest, dtype=np.float64), float(res.fbest), int(es.countiter)

    def _optimize_lbfgsb(self, objective, x0: np.ndarray) -> Tuple[np.ndarray, float, int]:
        res = minimize(objective, x0, method='L-BFGS-B',
                       options={'maxiter': self.max_iter, 'ftol': self.tolerance})
        if not res.success:
            debug_logger.debug(f"L-BFGS-B stopped: {res.message}", _MODULE)
        return np.asarray(res.x, dtype=np.float64), float(res.fun), int(res.nit)

    def optimize(self, camera_responses, target_responses) -> CCMFitResult:
        """
        执行拟合

        Args:
            camera_responses: N×3 相机响应，取值 [0,1]
            target_responses: N×3 目标响应（线性 sRGB 或 XYZ，由 target_colorspace 指定），取值 [0,1]

        Returns:
            CCMFitResult
        """
        camera, target = check_pair(camera_responses, target_responses)
        n_samples = camera.shape[0]
        weights = self._sample_weights(n_samples)
        white = self._white_target()

        debug_logger.info(
            f"fitting '{self.model.value}' (bias={self.bias}, F={self.n_features}) on {n_samples} samples, "
            f"loss={self.options.loss.value}, method={self.method.value}, max_iter={self.max_iter}, "
            f"tolerance={self.tolerance}", _MODULE
        )

        loss = self._make_loss(camera, target, weights)
        baseline_matrix = self._closed_form(camera, target, weights, white)
        baseline_loss = loss(baseline_matrix, 1.0)
        debug_logger.info(f"closed-form baseline loss: {baseline_loss:.6G}", _MODULE)

        def objective(params: np.ndarray) -> float:
            matrix, scale = self._unpack(params, white)
            return loss(matrix, scale)

        x0 = self._pack(baseline_matrix, 1.0)
        if self.max_iter > 0:
            if self.method is FitMethod.CMA_ES:
                x_best, _, iterations = self._optimize_cma(objective, x0)
            else:
                x_best, _, iterations = self._optimize_lbfgsb(objective, x0)
            matrix, scale = self._unpack(x_best, white)
            refined_loss = loss(matrix, scale)
        else:
            iterations, refined_loss = 0, float('inf')

        if refined_loss < baseline_loss:
            final_loss = refined_loss
        else:
            debug_logger.info("iterative refinement did not improve the closed-form solution; keeping it.", _MODULE)
            matrix, scale, final_loss = baseline_matrix, 1.0, baseline_loss

        matrix = np.array(matrix, dtype=np.float64)
        matrix.setflags(write=False)
        predicted = ccmapply(camera, self.model, matrix, scale)
        predicted.setflags(write=False)
        errors = evaluate_errors(predicted, target, self.options)
        log_report(errors, f"Color correction training ({self.model.value}, {n_samples} samples, "
                           f"scale={scale:.5G}, loss {baseline_loss:.5G} -> {final_loss:.5G}):")

        return CCMFitResult(
            matrix=matrix,
            scale=scale,
            predicted=predicted,
            errors=errors,
            model=self.model,
            bias=self.bias,
            loss=final_loss,
            baseline_loss=baseline_loss,
            iterations=iterations,
            method=self.method.value,
        )


def ccmtrain(camera_responses,
             target_responses,
             options: Optional[TrainOptions] = None,
             **kwargs) -> Tuple[np.ndarray, float, np.ndarray, ErrorReport]:
    """
    训练颜色校正矩阵的便捷函数

    Args:
        camera_responses: N×3 相机响应
        target_responses: N×3 目标响应
        options: TrainOptions；也可直接用关键字参数（model, bias, loss, metric,
                 target_colorspace, preserve_white, white_point, ...）

    Returns:
        (matrix, scale, predicted, errors)
    """
    return CCMOptimizer(options, **kwargs).optimize(camera_responses, target_responses).as_tuple()
