"""
ccmkit 异常定义

所有前置条件检查失败都在数值计算开始之前抛出（fail fast）。
"""

from typing import Iterable


class CCMError(Exception):
    """ccmkit 所有异常的基类"""
    pass


class InvalidShapeError(CCMError, ValueError):
    """数组维度或长度不符合要求"""
    pass


class ShapeMismatchError(InvalidShapeError):
    """两组数据（或矩阵与模型）的形状互不匹配"""
    pass


class OutOfRangeError(CCMError, ValueError):
    """数值超出 [0, 1] 定义域"""
    pass


class UnsupportedEnumError(CCMError, ValueError):
    """不在封闭取值集合内的名称（模型/指标/观察者/照明体/色彩空间）"""

    def __init__(self, kind: str, value, supported: Iterable[str]):
        self.kind = kind
        self.value = value
        self.supported = tuple(supported)
        super().__init__(
            f"{value!r} is not a valid {kind}. Only following values are supported: "
            f"{' | '.join(self.supported)}"
        )


class UnknownMetricError(UnsupportedEnumError):
    pass


class UnknownModelError(UnsupportedEnumError):
    pass


class UnsupportedWhitePointError(UnsupportedEnumError):
    pass


class MissingIlluminantError(CCMError, ValueError):
    """反射率数据缺少照明体信息"""
    pass


class RankDeficientError(CCMError, ArithmeticError):
    """扩展特征矩阵秩亏，无法得到确定解"""
    pass


class UnknownIlluminantError(MissingIlluminantError, UnsupportedEnumError):
    """照明体名称不在内置 SPD 表中（等同于未提供可用的照明体）"""
    pass
