#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
校正应用与验证

将已拟合的 (matrix, scale) 应用到相机响应，并在目标色彩空间中按色差指标评估。

处理流程:
1. 输入检查（形状、[0,1] 取值范围），任何数值计算之前完成
2. predicted = expand(scale · camera_rgb, model, bias) · matrix
3. predicted / target → Lab（按 target_colorspace、参考照明体、观察者）
4. 逐指标计算逐样本误差并汇总（avg / med / max / argmax）

注意: bias 由矩阵行数推断（F 行 = 无 bias，F+1 行 = 有 bias），无需额外传参。
"""

import dataclasses
from types import MappingProxyType
from typing import Dict, Optional, Tuple, Type, TypeVar, Union

import numpy as np

from ccmkit.core.color_science import responses_to_lab
from ccmkit.core.data_types import ErrorReport, Metric, MetricErrors, Model, ValidateOptions, parse_model
from ccmkit.core.errors import InvalidShapeError, OutOfRangeError, ShapeMismatchError
from ccmkit.utils import debug_logger
from .color_difference import LAB_METRICS, METRIC_FUNCTIONS
from .expander import as_responses, expand, feature_count, supports_bias


_MODULE = "pipeline"

OptionsT = TypeVar('OptionsT', bound=ValidateOptions)


def resolve_options(options_cls: Type[OptionsT], options: Optional[OptionsT], overrides: Dict) -> OptionsT:
    """合并调用级参数：options 为基础，关键字参数覆盖同名字段。"""
    if options is None:
        return options_cls(**overrides)
    if not isinstance(options, options_cls):
        # ValidateOptions 传给训练接口时，保留其中的共同字段
        common = {f.name: getattr(options, f.name) for f in dataclasses.fields(options)}
        common.update(overrides)
        return options_cls(**common)
    if overrides:
        return dataclasses.replace(options, **overrides)
    return options


def check_unit_range(values: np.ndarray, name: str) -> None:
    if values.size == 0:
        return
    if not np.all(np.isfinite(values)) or values.min() < 0.0 or values.max() > 1.0:
        raise OutOfRangeError(
            f"values of '{name}' must be in the range [0, 1], got [{np.nanmin(values):.5G}, {np.nanmax(values):.5G}]."
        )


def check_pair(camera_responses, target_responses) -> Tuple[np.ndarray, np.ndarray]:
    """校验相机响应与目标响应：均为 N×3 (N ≥ 1)、样本数一致、取值在 [0,1] 内。"""
    camera = as_responses(camera_responses, 'camera_responses')
    target = as_responses(target_responses, 'target_responses')
    if camera.shape[0] != target.shape[0]:
        raise ShapeMismatchError(
            f"the numbers of samples in 'camera_responses' ({camera.shape[0]}) "
            f"and 'target_responses' ({target.shape[0]}) do not match."
        )
    if camera.shape[0] == 0:
        raise InvalidShapeError("at least one sample is required.")
    check_unit_range(camera, 'camera_responses')
    check_unit_range(target, 'target_responses')
    return camera, target


def infer_bias(model: Union[str, Model], n_rows: int) -> bool:
    """根据矩阵行数推断是否含 bias 项，行数与模型不符时抛出 ShapeMismatchError。"""
    model = parse_model(model)
    n_features = feature_count(model, bias=False)
    if n_rows == n_features:
        return False
    if n_rows == n_features + 1 and supports_bias(model):
        return True
    expected = f"{n_features}" + (f" or {n_features + 1} (with bias)" if supports_bias(model) else "")
    raise ShapeMismatchError(
        f"the matrix for model '{model.value}' must have {expected} rows, got {n_rows}."
    )


def ccmapply(camera_responses, model: Union[str, Model], matrix, scale: float = 1.0) -> np.ndarray:
    """
    应用颜色校正

    Args:
        camera_responses: N×3 相机响应
        model: 校正模型
        matrix: F×3（或含 bias 的 (F+1)×3）校正矩阵
        scale: 作用于相机响应的正缩放系数

    Returns:
        N×3 预测值
    """
    model = parse_model(model)
    camera = as_responses(camera_responses)
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[1] != 3:
        raise ShapeMismatchError(f"the matrix must have 3 columns, got shape {matrix.shape}.")
    bias = infer_bias(model, matrix.shape[0])
    scale = float(scale)
    if not np.isfinite(scale) or scale <= 0.0:
        raise OutOfRangeError(f"'scale' must be a positive number, got {scale}.")
    return expand(scale * camera, model, bias) @ matrix


def evaluate_errors(predicted: np.ndarray, target: np.ndarray, options: ValidateOptions) -> ErrorReport:
    """按 options.metric 计算逐样本误差；预测值在前、目标值在后（CMC 以第一个参数为标准色）。"""
    needs_lab = any(m in LAB_METRICS for m in options.metric)
    if needs_lab:
        target_lab = responses_to_lab(target, options.target_colorspace, options.ref_illuminant, options.observer)
        predicted_lab = responses_to_lab(predicted, options.target_colorspace, options.ref_illuminant,
                                         options.observer)

    metrics: Dict[str, MetricErrors] = {}
    for metric in options.metric:
        fn = METRIC_FUNCTIONS[metric]
        if metric is Metric.MSE:
            values = fn(predicted, target, options.omit_lightness)
        else:
            values = fn(predicted_lab, target_lab, options.omit_lightness)
        values.setflags(write=False)
        metrics[metric.value] = MetricErrors(metric.value, values)
    return ErrorReport(MappingProxyType(metrics), options.omit_lightness)


def log_report(report: ErrorReport, title: str) -> None:
    debug_logger.info(title, _MODULE)
    for line in report.summary_lines():
        debug_logger.info(line, _MODULE)


def ccmvalidate(camera_responses,
                target_responses,
                model: Union[str, Model],
                matrix,
                scale: float = 1.0,
                options: Optional[ValidateOptions] = None,
                **kwargs) -> Tuple[np.ndarray, ErrorReport]:
    """
    验证颜色校正矩阵

    Args:
        camera_responses: N×3 相机响应，取值 [0,1]
        target_responses: N×3 目标响应（线性 sRGB 或 XYZ），取值 [0,1]
        model / matrix / scale: ccmtrain 的输出
        options: ValidateOptions；也可直接用关键字参数（metric, target_colorspace,
                 observer, ref_illuminant, omit_lightness）覆盖

    Returns:
        (predicted, ErrorReport)
    """
    opts = resolve_options(ValidateOptions, options, kwargs)
    camera, target = check_pair(camera_responses, target_responses)

    predicted = ccmapply(camera, model, matrix, scale)
    report = evaluate_errors(predicted, target, opts)
    log_report(report, f"Color correction validation ({parse_model(model).value}, {camera.shape[0]} samples):")
    return predicted, report
