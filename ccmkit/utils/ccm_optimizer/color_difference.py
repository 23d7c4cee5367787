"""
色差计算模块
提供 CIEDE2000 / CIE94 / CMC(l:c) / CIE76 (ΔE*ab) 色差及响应空间 MSE，全部按行批量计算。
感知色差公式由 colour-science 提供，这里只负责形状检查与 omit_lightness。

约定:
- 除 mse 外，输入均为 N×3 Lab；mse 的输入为原始响应（RGB/XYZ）
- omit_lightness=True 时把第二组的 L* 替换为第一组的 L*，明度项贡献即为零，
  其余几何量不受影响（这些公式中 L* 只出现在明度项里），用于忽略曝光差异
- CIE94 与 CMC 以第一个参数为参考色（彩度加权按第一个参数计算）
"""

from typing import Callable, Dict, Tuple, Union

import numpy as np
from colour.difference import delta_E_CIE1976, delta_E_CIE1994, delta_E_CIE2000, delta_E_CMC

from ccmkit.core.data_types import Metric, parse_metric
from ccmkit.core.errors import InvalidShapeError, ShapeMismatchError


def _paired(values1, values2) -> Tuple[np.ndarray, np.ndarray]:
    arr1 = np.asarray(values1, dtype=np.float64)
    arr2 = np.asarray(values2, dtype=np.float64)
    if arr1.ndim == 1:
        arr1 = arr1[np.newaxis, :]
    if arr2.ndim == 1:
        arr2 = arr2[np.newaxis, :]
    if arr1.ndim != 2 or arr1.shape[1] != 3 or arr2.ndim != 2 or arr2.shape[1] != 3:
        raise InvalidShapeError(f"inputs must be Nx3 matrices, got {arr1.shape} and {arr2.shape}")
    if arr1.shape[0] != arr2.shape[0]:
        raise ShapeMismatchError(
            f"the numbers of samples do not match: {arr1.shape[0]} vs {arr2.shape[0]}"
        )
    return arr1, arr2


def _paired_lab(lab1, lab2, omit_lightness: bool) -> Tuple[np.ndarray, np.ndarray]:
    lab1, lab2 = _paired(lab1, lab2)
    if omit_lightness:
        lab2 = lab2.copy()
        lab2[:, 0] = lab1[:, 0]
    return lab1, lab2


def _per_sample(values, n: int) -> np.ndarray:
    # colour 对单行输入可能返回标量
    return np.array(values, dtype=np.float64).reshape(n)


def mse(responses1, responses2, omit_lightness: bool = False) -> np.ndarray:
    """逐样本三通道均方误差（原始响应空间，omit_lightness 不起作用）"""
    r1, r2 = _paired(responses1, responses2)
    return np.mean((r1 - r2) ** 2, axis=1)


def ciedelab(lab1, lab2, omit_lightness: bool = False) -> np.ndarray:
    """CIE 1976 ΔE*ab：Lab 空间欧氏距离；omit_lightness 时仅计算 (a*, b*)"""
    lab1, lab2 = _paired_lab(lab1, lab2, omit_lightness)
    return _per_sample(delta_E_CIE1976(lab1, lab2), lab1.shape[0])


def ciede94(lab1, lab2, omit_lightness: bool = False, textiles: bool = False) -> np.ndarray:
    """
    CIE 1994 色差

    默认使用印刷行业参数 (kL=1, K1=0.045, K2=0.015)，textiles=True 时使用纺织参数
    (kL=2, K1=0.048, K2=0.014)。SC/SH 按 lab1 的彩度计算，因此结果不对称。
    """
    lab1, lab2 = _paired_lab(lab1, lab2, omit_lightness)
    return _per_sample(delta_E_CIE1994(lab1, lab2, textiles=textiles), lab1.shape[0])


def cmcde(lab1, lab2, omit_lightness: bool = False, l: float = 1.0, c: float = 1.0) -> np.ndarray:
    """CMC(l:c) 色差，lab1 为参考色"""
    lab1, lab2 = _paired_lab(lab1, lab2, omit_lightness)
    return _per_sample(delta_E_CMC(lab1, lab2, l=l, c=c), lab1.shape[0])


def ciede00(lab1, lab2, omit_lightness: bool = False, textiles: bool = False) -> np.ndarray:
    """
    CIEDE2000 色差（Sharma, Wu & Dalal 2005 的实现细则）

    色相差在 ±180° 处回绕；任一颜色彩度为 0 时色相差取 0、平均色相取两色相之和。
    textiles=True 时 kL=2。
    """
    lab1, lab2 = _paired_lab(lab1, lab2, omit_lightness)
    return _per_sample(delta_E_CIE2000(lab1, lab2, textiles=textiles), lab1.shape[0])


METRIC_FUNCTIONS: Dict[Metric, Callable[..., np.ndarray]] = {
    Metric.MSE: mse,
    Metric.CIEDE00: ciede00,
    Metric.CIEDE94: ciede94,
    Metric.CIEDELAB: ciedelab,
    Metric.CMCDE: cmcde,
}

# 在 Lab 空间计算的指标；其余（mse）在原始响应空间计算
LAB_METRICS = frozenset({Metric.CIEDE00, Metric.CIEDE94, Metric.CIEDELAB, Metric.CMCDE})


def compute_metric(metric: Union[str, Metric], values1, values2, omit_lightness: bool = False) -> np.ndarray:
    """按名称分派色差指标；未知名称抛出 UnknownMetricError"""
    return METRIC_FUNCTIONS[parse_metric(metric)](values1, values2, omit_lightness)
