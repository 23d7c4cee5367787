"""
ccmkit: 相机颜色特性化与颜色校正矩阵工具

光谱 → 三刺激值积分、XYZ/Lab/线性 sRGB 转换、色差指标，
以及颜色校正矩阵的拟合 (ccmtrain)、应用 (ccmapply) 与验证 (ccmvalidate)。
"""

from ccmkit.core.color_science import (
    lab_to_xyz, linsrgb_to_xyz, whitepoint, xyz_to_lab, xyz_to_linsrgb, xyz_to_srgb,
)
from ccmkit.core.data_types import (
    CCMFitResult, ColorSpace, ErrorReport, FitMethod, Metric, MetricErrors, Model, Observer,
    SpectralContext, TrainOptions, ValidateOptions,
)
from ccmkit.core.errors import (
    CCMError, InvalidShapeError, MissingIlluminantError, OutOfRangeError, RankDeficientError,
    ShapeMismatchError, UnknownIlluminantError, UnknownMetricError, UnknownModelError,
    UnsupportedEnumError, UnsupportedWhitePointError,
)
from ccmkit.core.spectra import normalize_spd, spectra_to_colors
from ccmkit.utils.ccm_optimizer import (
    CCMOptimizer, ccmapply, ccmtrain, ccmvalidate, ciede00, ciede94, ciedelab, cmcde,
    compute_metric, expand, feature_count, mse,
)

__version__ = "0.1.0"

__all__ = [
    # 光谱与色彩转换
    'spectra_to_colors', 'normalize_spd', 'whitepoint',
    'xyz_to_lab', 'lab_to_xyz', 'xyz_to_linsrgb', 'linsrgb_to_xyz', 'xyz_to_srgb',
    # 色差
    'mse', 'ciede00', 'ciede94', 'ciedelab', 'cmcde', 'compute_metric',
    # 校正
    'expand', 'feature_count', 'CCMOptimizer', 'ccmtrain', 'ccmapply', 'ccmvalidate',
    # 类型
    'Observer', 'ColorSpace', 'Model', 'Metric', 'FitMethod', 'SpectralContext',
    'ValidateOptions', 'TrainOptions', 'MetricErrors', 'ErrorReport', 'CCMFitResult',
    # 异常
    'CCMError', 'InvalidShapeError', 'ShapeMismatchError', 'OutOfRangeError', 'UnsupportedEnumError',
    'UnknownMetricError', 'UnknownModelError', 'UnsupportedWhitePointError', 'MissingIlluminantError',
    'UnknownIlluminantError', 'RankDeficientError',
]
