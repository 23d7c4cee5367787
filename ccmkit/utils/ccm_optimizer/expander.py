#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
校正模型特征扩展器

将 N×3 相机响应按校正模型扩展为 N×F 特征矩阵。

| 模型      | F  | 特征                                                   |
|-----------|----|--------------------------------------------------------|
| linear3x3 | 3  | R, G, B                                                |
| poly4x3   | 4  | R, G, B, 1                                             |
| poly6x3   | 6  | R, G, B, RG, GB, RB                                    |
| poly7x3   | 7  | poly6x3 + 1                                            |
| poly9x3   | 9  | poly6x3 + R², G², B²                                   |
| root6x3   | 6  | R, G, B, √RG, √GB, √RB                                 |
| root13x3  | 13 | root6x3 + ∛RG², ∛GB², ∛RB², ∛GR², ∛BG², ∛BR², ∛RGB     |

根式项的乘积先截断到 >= 0 再开方，负输入通道不会产生 NaN/复数。
"""

from typing import Callable, Dict, Union

import numpy as np

from ccmkit.core.data_types import Model, parse_model
from ccmkit.core.errors import InvalidShapeError
from ccmkit.utils import debug_logger


def _split(rgb: np.ndarray):
    return rgb[:, 0], rgb[:, 1], rgb[:, 2]


def _root(product: np.ndarray, degree: int) -> np.ndarray:
    clamped = np.maximum(product, 0.0)
    return np.sqrt(clamped) if degree == 2 else np.cbrt(clamped)


def _linear3x3(rgb):
    return rgb.copy()


def _poly4x3(rgb):
    return np.column_stack([rgb, np.ones(rgb.shape[0])])


def _poly6x3(rgb):
    r, g, b = _split(rgb)
    return np.column_stack([r, g, b, r * g, g * b, r * b])


def _poly7x3(rgb):
    return np.column_stack([_poly6x3(rgb), np.ones(rgb.shape[0])])


def _poly9x3(rgb):
    r, g, b = _split(rgb)
    return np.column_stack([_poly6x3(rgb), r * r, g * g, b * b])


def _root6x3(rgb):
    r, g, b = _split(rgb)
    return np.column_stack([r, g, b, _root(r * g, 2), _root(g * b, 2), _root(r * b, 2)])


def _root13x3(rgb):
    r, g, b = _split(rgb)
    return np.column_stack([
        _root6x3(rgb),
        _root(r * g * g, 3), _root(g * b * b, 3), _root(r * b * b, 3),
        _root(g * r * r, 3), _root(b * g * g, 3), _root(b * r * r, 3),
        _root(r * g * b, 3),
    ])


EXPANSIONS: Dict[Model, Callable[[np.ndarray], np.ndarray]] = {
    Model.LINEAR3X3: _linear3x3,
    Model.POLY4X3: _poly4x3,
    Model.POLY6X3: _poly6x3,
    Model.POLY7X3: _poly7x3,
    Model.POLY9X3: _poly9x3,
    Model.ROOT6X3: _root6x3,
    Model.ROOT13X3: _root13x3,
}

FEATURE_COUNTS: Dict[Model, int] = {
    Model.LINEAR3X3: 3,
    Model.POLY4X3: 4,
    Model.POLY6X3: 6,
    Model.POLY7X3: 7,
    Model.POLY9X3: 9,
    Model.ROOT6X3: 6,
    Model.ROOT13X3: 13,
}

# 自带常数项的模型，bias 选项对它们无效
MODELS_WITH_CONSTANT = frozenset({Model.POLY4X3, Model.POLY7X3})


def supports_bias(model: Union[str, Model]) -> bool:
    return parse_model(model) not in MODELS_WITH_CONSTANT


def feature_count(model: Union[str, Model], bias: bool = False) -> int:
    """模型对应的特征数 F（即校正矩阵的行数）"""
    model = parse_model(model)
    return FEATURE_COUNTS[model] + (1 if bias and supports_bias(model) else 0)


def as_responses(values, name: str = 'camera_responses') -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim == 1 and arr.size == 3:
        arr = arr[np.newaxis, :]
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise InvalidShapeError(f"'{name}' must be an Nx3 matrix, got shape {arr.shape}")
    return arr


def expand(rgb, model: Union[str, Model] = 'linear3x3', bias: bool = False) -> np.ndarray:
    """
    按校正模型扩展相机响应

    Args:
        rgb: N×3 相机响应（已乘以 scale）
        model: 校正模型名称
        bias: 是否追加常数 1 特征（对 poly4x3/poly7x3 无效，会记录 WARNING）

    Returns:
        N×F 特征矩阵
    """
    model = parse_model(model)
    rgb = as_responses(rgb)
    features = EXPANSIONS[model](rgb)
    if bias:
        if model in MODELS_WITH_CONSTANT:
            debug_logger.warning(f"model '{model.value}' already has a constant term; 'bias' is ignored.", "expander")
        else:
            features = np.column_stack([features, np.ones(rgb.shape[0])])
    return features
