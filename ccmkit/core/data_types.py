"""
核心数据类型定义

- 封闭枚举：观察者、校正模型、色差指标、目标色彩空间、拟合方法
- 调用级配置（frozen dataclass，构造时校验并规范化枚举字段）
- 拟合结果与误差报告（不可变值对象）
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Type, Union

import numpy as np

from .errors import InvalidShapeError, UnknownMetricError, UnknownModelError, UnsupportedEnumError


class Observer(str, Enum):
    CIE1931 = '1931'
    CIE1964 = '1964'


class ColorSpace(str, Enum):
    SRGB = 'sRGB'
    XYZ = 'XYZ'


class Model(str, Enum):
    LINEAR3X3 = 'linear3x3'
    ROOT6X3 = 'root6x3'
    ROOT13X3 = 'root13x3'
    POLY4X3 = 'poly4x3'
    POLY6X3 = 'poly6x3'
    POLY7X3 = 'poly7x3'
    POLY9X3 = 'poly9x3'


class Metric(str, Enum):
    MSE = 'mse'
    CIEDE00 = 'ciede00'
    CIEDE94 = 'ciede94'
    CIEDELAB = 'ciedelab'
    CMCDE = 'cmcde'


class FitMethod(str, Enum):
    CMA_ES = 'CMA-ES'
    LBFGSB = 'L-BFGS-B'


# 校正/验证时允许的参考照明体（白点表另含 F7，仅供 color_science 直接查询）
REFERENCE_ILLUMINANTS: Tuple[str, ...] = ('A', 'C', 'D50', 'D55', 'D65', 'D75', 'F2', 'F11')

DEFAULT_METRICS: Tuple[Metric, ...] = (Metric.CIEDE00, Metric.CIEDELAB)

EnumLike = Union[str, Enum]


def parse_enum(enum_cls: Type[Enum], value: EnumLike, kind: str,
               error_cls: Type[UnsupportedEnumError] = UnsupportedEnumError):
    """按名称（大小写不敏感）解析封闭枚举，未知取值抛出 error_cls。"""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        key = value.strip().lower()
        for member in enum_cls:
            if member.value.lower() == key:
                return member
    raise error_cls(kind, value, [m.value for m in enum_cls])


def parse_model(value: EnumLike) -> Model:
    return parse_enum(Model, value, 'color correction model', UnknownModelError)


def parse_metric(value: EnumLike) -> Metric:
    return parse_enum(Metric, value, 'metric', UnknownMetricError)


def parse_metrics(value: Union[None, EnumLike, Iterable[EnumLike]]) -> Tuple[Metric, ...]:
    """单个名称或名称序列 → 去重后的 Metric 元组；空值回退到默认指标。"""
    if value is None:
        return DEFAULT_METRICS
    if isinstance(value, (str, Enum)):
        value = [value]
    parsed: List[Metric] = []
    for item in value:
        metric = parse_metric(item)
        if metric not in parsed:
            parsed.append(metric)
    return tuple(parsed) if parsed else DEFAULT_METRICS


def parse_illuminant(value: str, allowed: Iterable[str] = REFERENCE_ILLUMINANTS) -> str:
    allowed = tuple(allowed)
    if isinstance(value, str) and value.strip().upper() in allowed:
        return value.strip().upper()
    raise UnsupportedEnumError('reference illuminant', value, allowed)


@dataclass(frozen=True)
class SpectralContext:
    """光谱积分的波长配置（替代全局波长常量）。"""
    wavelength_range: Tuple[float, float] = (380.0, 780.0)
    interval: float = 5.0
    # 超过该样本数时不对 spectra 做插值（性能/精度折衷）
    max_samples: int = 1000

    def __post_init__(self):
        lo, hi = (float(v) for v in self.wavelength_range)
        if not hi > lo:
            raise InvalidShapeError(f"wavelength_range must be increasing, got {self.wavelength_range}")
        if not self.interval > 0:
            raise InvalidShapeError(f"interval must be positive, got {self.interval}")
        object.__setattr__(self, 'wavelength_range', (lo, hi))
        object.__setattr__(self, 'interval', float(self.interval))
        object.__setattr__(self, 'max_samples', int(self.max_samples))


@dataclass(frozen=True)
class ValidateOptions:
    """验证参数：色差指标、目标色彩空间与 Lab 转换条件。"""
    metric: Any = DEFAULT_METRICS
    target_colorspace: EnumLike = ColorSpace.SRGB
    observer: EnumLike = Observer.CIE1931
    ref_illuminant: str = 'D65'
    omit_lightness: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'metric', parse_metrics(self.metric))
        object.__setattr__(self, 'target_colorspace',
                           parse_enum(ColorSpace, self.target_colorspace, 'target color space'))
        object.__setattr__(self, 'observer', parse_enum(Observer, self.observer, 'standard observer'))
        object.__setattr__(self, 'ref_illuminant', parse_illuminant(self.ref_illuminant))
        object.__setattr__(self, 'omit_lightness', bool(self.omit_lightness))


@dataclass(frozen=True)
class TrainOptions(ValidateOptions):
    """
    训练参数

    求解器相关字段（method/max_iter/tolerance/sigma0/seed）为 None 时，
    由 config/defaults/optimizer.json 提供默认值。
    """
    model: EnumLike = Model.LINEAR3X3
    loss: EnumLike = Metric.CIEDE00
    bias: bool = False
    allow_scale: bool = True
    preserve_white: bool = False
    white_point: Optional[Tuple[float, float, float]] = None
    weights: Optional[np.ndarray] = field(default=None, repr=False)
    method: Optional[EnumLike] = None
    max_iter: Optional[int] = None
    tolerance: Optional[float] = None
    sigma0: Optional[float] = None
    seed: Optional[int] = None
    regularize: bool = True

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, 'model', parse_model(self.model))
        object.__setattr__(self, 'loss', parse_metric(self.loss))
        object.__setattr__(self, 'bias', bool(self.bias))
        object.__setattr__(self, 'allow_scale', bool(self.allow_scale))
        if self.method is not None:
            object.__setattr__(self, 'method', parse_enum(FitMethod, self.method, 'fitting method'))
        if self.white_point is not None:
            wp = np.asarray(self.white_point, dtype=np.float64).ravel()
            if wp.size != 3:
                raise InvalidShapeError(f"white_point must have 3 components, got {wp.size}")
            object.__setattr__(self, 'white_point', tuple(float(v) for v in wp))
            # 给出白点即意味着保持白点
            object.__setattr__(self, 'preserve_white', True)
        else:
            object.__setattr__(self, 'preserve_white', bool(self.preserve_white))
        if self.weights is not None:
            w = np.array(self.weights, dtype=np.float64).ravel()
            if not np.all(np.isfinite(w)) or np.any(w < 0) or float(w.sum()) <= 0.0:
                raise InvalidShapeError("weights must be finite, non-negative and not all zero")
            w.setflags(write=False)
            object.__setattr__(self, 'weights', w)


@dataclass(frozen=True)
class MetricErrors:
    """单个指标的逐样本误差及其统计量"""
    name: str
    values: np.ndarray = field(repr=False)

    @property
    def mean(self) -> float:
        return float(np.mean(self.values))

    @property
    def median(self) -> float:
        return float(np.median(self.values))

    @property
    def max(self) -> float:
        return float(np.max(self.values))

    @property
    def argmax(self) -> int:
        # 并列最大值取第一个（0 起始索引）
        return int(np.argmax(self.values))

    def summary(self) -> str:
        return (f"{self.name} errors: {self.mean:.4G} (avg), {self.median:.4G} (med), "
                f"{self.max:.4G} (max, #{self.argmax})")


@dataclass(frozen=True)
class ErrorReport:
    """指标名 → MetricErrors 的只读映射"""
    metrics: Mapping[str, MetricErrors]
    omit_lightness: bool = False

    def __getitem__(self, name: EnumLike) -> MetricErrors:
        key = name.value if isinstance(name, Enum) else str(name).lower()
        return self.metrics[key]

    def __contains__(self, name) -> bool:
        key = name.value if isinstance(name, Enum) else str(name).lower()
        return key in self.metrics

    def __iter__(self) -> Iterator[str]:
        return iter(self.metrics)

    def __len__(self) -> int:
        return len(self.metrics)

    def keys(self):
        return self.metrics.keys()

    def items(self):
        return self.metrics.items()

    def summary_lines(self) -> List[str]:
        lines = [m.summary() for m in self.metrics.values()]
        if self.omit_lightness:
            lines.append("(lightness component has been omitted)")
        return lines

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """转换为可序列化的字典（逐样本误差转为 list）"""
        return {
            name: {
                'values': m.values.tolist(),
                'mean': m.mean,
                'median': m.median,
                'max': m.max,
                'argmax': m.argmax,
            }
            for name, m in self.metrics.items()
        }


@dataclass(frozen=True)
class CCMFitResult:
    """一次训练的输出：(matrix, scale) 以及训练集上的预测与误差"""
    matrix: np.ndarray = field(repr=False)
    scale: float
    predicted: np.ndarray = field(repr=False)
    errors: ErrorReport = field(repr=False)
    model: Model
    bias: bool
    loss: float
    baseline_loss: float
    iterations: int
    method: str

    def as_tuple(self) -> Tuple[np.ndarray, float, np.ndarray, ErrorReport]:
        return self.matrix, self.scale, self.predicted, self.errors
