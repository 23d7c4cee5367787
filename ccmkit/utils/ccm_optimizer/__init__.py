#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CCM (Color Correction Matrix) 拟合与验证工具包

将相机响应映射到目标色彩空间（线性 sRGB 或 XYZ），并以感知色差评估校正精度。

主要功能:
- 按校正模型扩展相机响应（线性 / 多项式 / 根多项式）
- 以 CIEDE2000 等色差为目标联合拟合校正矩阵与缩放系数
- 应用校正矩阵并输出逐样本误差报告

模块:
- expander: 特征扩展器
- color_difference: 色差指标
- pipeline: 校正应用与验证
- optimizer: 核心优化器
"""

from .color_difference import METRIC_FUNCTIONS, ciede00, ciede94, ciedelab, cmcde, compute_metric, mse
from .expander import expand, feature_count
from .optimizer import CCMOptimizer, ccmtrain
from .pipeline import ccmapply, ccmvalidate

__all__ = [
    'CCMOptimizer', 'ccmtrain', 'ccmapply', 'ccmvalidate',
    'expand', 'feature_count',
    'METRIC_FUNCTIONS', 'compute_metric', 'mse', 'ciede00', 'ciede94', 'ciedelab', 'cmcde',
]
