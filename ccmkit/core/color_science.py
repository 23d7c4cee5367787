"""
色彩科学转换工具
- XYZ ⇄ L*a*b*（CIE 1976，白点按 照明体 × 观察者 查表，或显式给出）
- XYZ ⇄ 线性 sRGB（固定 3x3 矩阵）
- XYZ → 显示 sRGB（带 OETF，用于可视化）

XYZ 的取值约定与 Lab 转换保持一致：Lab 相关函数使用 [0, 100] 量级，
sRGB 相关函数使用 [0, 1] 量级。
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

import numpy as np
from colour.models import eotf_inverse_sRGB

from .data_types import ColorSpace, Observer, parse_enum
from .errors import InvalidShapeError, UnsupportedWhitePointError
from .spectral_data import LINSRGB_TO_XYZ, WHITE_POINTS, XYZ_TO_LINSRGB


# f(t) 分段点及线性段系数（正反变换必须使用同一组常数）
_EPSILON = 0.008856
_KAPPA = 903.3
_SLOPE = 7.787
_OFFSET = 16.0 / 116.0
_L_BREAK = 7.9996

ArrayLike = Union[np.ndarray, Sequence[float], Sequence[Sequence[float]]]


def _as_triplets(values: ArrayLike, name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim == 0 or arr.shape[-1] != 3:
        raise InvalidShapeError(f"'{name}' must be an Nx3 array (or a single triplet), got shape {arr.shape}")
    return arr


def whitepoint(illuminant: str = 'D65', observer: Union[str, Observer] = '1931') -> np.ndarray:
    """返回参考白点 XYZ（Y = 100）。"""
    obs = parse_enum(Observer, observer, 'standard observer')
    key = (str(illuminant).strip().upper(), obs.value)
    if key not in WHITE_POINTS:
        supported = sorted({f"{i}/{o}" for i, o in WHITE_POINTS})
        raise UnsupportedWhitePointError('white point', f"{illuminant}/{obs.value}", supported)
    return WHITE_POINTS[key].copy()


def _resolve_white(illuminant: str, observer, white: Optional[ArrayLike]) -> np.ndarray:
    if white is None:
        return whitepoint(illuminant, observer)
    white = np.asarray(white, dtype=np.float64).ravel()
    if white.size != 3 or np.any(white <= 0):
        raise InvalidShapeError(f"'white' must be a positive XYZ triplet, got {white}")
    return white


def _f(t: np.ndarray) -> np.ndarray:
    return np.where(t > _EPSILON, np.cbrt(t), _SLOPE * t + _OFFSET)


def xyz_to_lab(xyz: ArrayLike,
               illuminant: str = 'D65',
               observer: Union[str, Observer] = '1931',
               white: Optional[ArrayLike] = None) -> np.ndarray:
    """
    XYZ (0-100) → L*a*b*

    Args:
        xyz: (..., 3) XYZ 值，量级与白点一致（Y_white = 100）
        illuminant: 参考照明体名称（A, C, D50, D55, D65, D75, F2, F7, F11）
        observer: '1931' | '1964'
        white: 显式白点 XYZ，给出时忽略 illuminant/observer

    Returns:
        (..., 3) Lab 值
    """
    xyz = _as_triplets(xyz, 'xyz')
    wp = _resolve_white(illuminant, observer, white)
    t = xyz / wp
    fx, fy, fz = _f(t[..., 0]), _f(t[..., 1]), _f(t[..., 2])
    ty = t[..., 1]
    L = np.where(ty > _EPSILON, 116.0 * np.cbrt(ty) - 16.0, _KAPPA * ty)
    a = 500.0 * (fx - fy)
    b = 200.0 * (fy - fz)
    return np.stack([L, a, b], axis=-1)


def lab_to_xyz(lab: ArrayLike,
               illuminant: str = 'D65',
               observer: Union[str, Observer] = '1931',
               white: Optional[ArrayLike] = None) -> np.ndarray:
    """L*a*b* → XYZ (0-100)，xyz_to_lab 的精确逆变换。"""
    lab = _as_triplets(lab, 'lab')
    wp = _resolve_white(illuminant, observer, white)
    L, a, b = lab[..., 0], lab[..., 1], lab[..., 2]

    Y = np.where(L > _L_BREAK, wp[1] * ((L + 16.0) / 116.0) ** 3, wp[1] * L / _KAPPA)
    fy = _f(Y / wp[1])

    fx = a / 500.0 + fy
    X = np.where(fx ** 3 > _EPSILON, wp[0] * fx ** 3, wp[0] * (fx - _OFFSET) / _SLOPE)

    fz = fy - b / 200.0
    Z = np.where(fz ** 3 > _EPSILON, wp[2] * fz ** 3, wp[2] * (fz - _OFFSET) / _SLOPE)
    return np.stack([X, Y, Z], axis=-1)


def xyz_to_linsrgb(xyz: ArrayLike, clip: bool = True) -> np.ndarray:
    """
    XYZ (0-1) → 线性 sRGB (0-1)

    默认将色域外的值截断到 [0, 1]（有损，不报错）；clip=False 时保留原值，
    供白点换算等需要可逆结果的场合使用。
    """
    xyz = _as_triplets(xyz, 'xyz')
    rgb = xyz @ XYZ_TO_LINSRGB.T
    if clip:
        rgb = np.clip(rgb, 0.0, 1.0)
    return rgb


def linsrgb_to_xyz(rgb: ArrayLike) -> np.ndarray:
    """线性 sRGB (0-1) → XYZ (0-1)，不截断。"""
    rgb = _as_triplets(rgb, 'rgb')
    return rgb @ LINSRGB_TO_XYZ.T


def xyz_to_srgb(xyz: ArrayLike) -> np.ndarray:
    """XYZ (0-1) → 显示 sRGB（sRGB OETF 编码），返回 [0,1]，仅用于可视化。"""
    rgb_linear = xyz_to_linsrgb(xyz, clip=True)
    encoded = eotf_inverse_sRGB(rgb_linear)
    return np.clip(np.asarray(encoded, dtype=np.float64), 0.0, 1.0)


def responses_to_lab(responses: ArrayLike,
                     colorspace: Union[str, ColorSpace],
                     illuminant: str = 'D65',
                     observer: Union[str, Observer] = '1931') -> np.ndarray:
    """
    将 0-1 量级的响应（线性 sRGB 或 XYZ）转换为 Lab。

    sRGB 响应先经未截断的矩阵转换到 XYZ，两者都放大到 0-100 后再转 Lab。
    """
    space = parse_enum(ColorSpace, colorspace, 'target color space')
    responses = _as_triplets(responses, 'responses')
    if space is ColorSpace.SRGB:
        xyz = linsrgb_to_xyz(responses)
    else:
        xyz = responses
    return xyz_to_lab(100.0 * xyz, illuminant, observer)
