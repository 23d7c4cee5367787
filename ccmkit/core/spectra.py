"""
光谱 → 三刺激值积分

将反射率/辐亮度光谱按所选照明体与标准观察者积分为 XYZ（或线性 sRGB）。

处理流程:
1. 确定照明体 SPD（内置名称 / 数值向量 / 已包含在 spectra 中）
2. 取 spectra、SPD、配色函数三者波长范围的交集，按固定间隔重采样（PCHIP，避免外推）
3. 归一化 SPD，使完全反射漫射体的 Y = 1
4. XYZ = Δλ · (spectra · SPD) · cmfsᵀ

注意: 样本数超过 context.max_samples 时（如由高光谱图像展开而来）不对 spectra 插值，
直接在其原始波长网格（裁剪到交集）上积分。这是精度换速度的折衷，会记录 WARNING。
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple, Union

import numpy as np
from scipy.interpolate import PchipInterpolator

from .color_science import xyz_to_linsrgb
from .data_types import ColorSpace, Observer, SpectralContext, parse_enum
from .errors import InvalidShapeError, MissingIlluminantError, UnknownIlluminantError
from .spectral_data import CMFS, ILLUMINANT_ALIASES, ILLUMINANT_SPDS, TABLE_WAVELENGTHS
from ccmkit.utils import debug_logger


_MODULE = "spectra"

SpdLike = Union[str, np.ndarray, Sequence[float], None]


def _default_grid(n: int, context: SpectralContext, what: str) -> np.ndarray:
    grid = np.linspace(context.wavelength_range[0], context.wavelength_range[1], n)
    debug_logger.warning(
        f"'{what}' is not given. Use default values [{grid[0]:.5G}, {grid[1]:.5G}, ... ,{grid[-1]:.5G}].",
        _MODULE,
    )
    return grid


def _check_grid(grid: np.ndarray, n: int, what: str, values_name: str) -> np.ndarray:
    grid = np.asarray(grid, dtype=np.float64).ravel()
    if grid.size != n:
        raise InvalidShapeError(f"the lengths of '{values_name}' ({n}) and '{what}' ({grid.size}) do not match.")
    if grid.size < 2 or np.any(np.diff(grid) <= 0):
        raise InvalidShapeError(f"'{what}' must contain at least 2 strictly increasing values.")
    return grid


def builtin_illuminant_spd(name: str) -> Tuple[np.ndarray, np.ndarray]:
    """返回内置照明体 (wavelengths, spd)，名称大小写不敏感，支持 CWF/TL84 别名。"""
    key = str(name).strip().upper()
    key = ILLUMINANT_ALIASES.get(key, key)
    if key not in ILLUMINANT_SPDS:
        supported = list(ILLUMINANT_SPDS) + [f"{k} (= {v})" for k, v in ILLUMINANT_ALIASES.items()]
        raise UnknownIlluminantError('illuminant', name, supported)
    return TABLE_WAVELENGTHS.copy(), ILLUMINANT_SPDS[key].copy()


def _resolve_illuminant(spd: SpdLike,
                        spd_wavelengths,
                        include_illuminant: bool,
                        context: SpectralContext) -> Tuple[bool, Optional[np.ndarray], Optional[np.ndarray]]:
    """返回 (include_illuminant, spd_wavelengths, spd)。"""
    if spd is None:
        if spd_wavelengths is not None:
            raise MissingIlluminantError("'spd' must be given if 'spd_wavelengths' is not empty.")
        if not include_illuminant:
            raise MissingIlluminantError("'spd' must be given if 'include_illuminant' is False.")
        return True, None, None

    # 只要给出 spd，就认为 spectra 是反射率数据
    if isinstance(spd, str):
        if spd_wavelengths is not None:
            debug_logger.warning(
                f"illuminant '{spd}' is specified. User input 'spd_wavelengths' will be ignored.", _MODULE
            )
        wl, values = builtin_illuminant_spd(spd)
        return False, wl, values

    values = np.asarray(spd, dtype=np.float64)
    if values.ndim != 1 and not (values.ndim == 2 and 1 in values.shape):
        raise InvalidShapeError("'spd' must be a vector.")
    values = values.ravel()
    if spd_wavelengths is None:
        wl = _default_grid(values.size, context, 'spd_wavelengths')
    else:
        wl = _check_grid(spd_wavelengths, values.size, 'spd_wavelengths', 'spd')
    return False, wl, values


def _interval_weights(grid: np.ndarray, context: SpectralContext) -> np.ndarray:
    """每个采样点对应的波长间隔 Δλ（均匀网格上处处等于步长）。"""
    if grid.size < 2:
        return np.full(grid.shape, context.interval)
    return np.gradient(grid)


def _pchip(x: np.ndarray, y: np.ndarray, x_new: np.ndarray, axis: int = -1) -> np.ndarray:
    return PchipInterpolator(x, y, axis=axis, extrapolate=False)(x_new)


def normalize_spd(wavelengths: np.ndarray,
                  spd: np.ndarray,
                  observer: Union[str, Observer] = '1931',
                  context: Optional[SpectralContext] = None) -> np.ndarray:
    """归一化照明体 SPD，使观察完全反射漫射体时 Y = 1。"""
    context = context or SpectralContext()
    obs = parse_enum(Observer, observer, 'standard observer')
    wavelengths = np.asarray(wavelengths, dtype=np.float64).ravel()
    spd = np.asarray(spd, dtype=np.float64).ravel()
    ybar = _pchip(TABLE_WAVELENGTHS, CMFS[obs.value][1], wavelengths)
    ybar = np.nan_to_num(ybar, nan=0.0)
    luminance = float(np.sum(_interval_weights(wavelengths, context) * spd * ybar))
    if luminance <= 0.0:
        raise InvalidShapeError("illuminant spd has no luminance within the observer's wavelength range.")
    return spd / luminance


def spectra_to_colors(spectra,
                      wavelengths=None,
                      *,
                      include_illuminant: bool = True,
                      spd: SpdLike = None,
                      spd_wavelengths=None,
                      observer: Union[str, Observer] = '1931',
                      output: Union[str, ColorSpace] = 'XYZ',
                      context: Optional[SpectralContext] = None) -> np.ndarray:
    """
    计算光谱数据对应的 XYZ 或线性 sRGB 值

    Args:
        spectra: N×W 光谱矩阵（每行一个样本）。可以是已包含照明体的辐亮度数据，
                 也可以是反射率数据（此时需通过 spd 指定照明体）。一维输入视为单个样本。
        wavelengths: 长度为 W 的采样波长；为 None 时使用 context 范围内的均匀网格（WARNING）。
        include_illuminant: spectra 是否已包含照明体。给出 spd 时自动视为 False。
        spd: 照明体 SPD 向量，或内置名称 'D65' | 'A' | 'E' | 'D50' | 'D55' | 'D75' |
             'F2'('CWF') | 'F8' | 'F11'('TL84')。会自动归一化。
        spd_wavelengths: spd 的采样波长（spd 为名称时被忽略）。
        observer: '1931' | '1964'。output 为 sRGB 时强制使用 '1931'。
        output: 'XYZ' | 'sRGB'（线性，截断到 [0,1]）。
        context: 波长配置。

    Returns:
        N×3 颜色值。辐亮度数据乘以 683 即得到 cd/m² 下的绝对 XYZ。

    Raises:
        InvalidShapeError: 维度/长度不匹配，或波长范围无交集
        MissingIlluminantError: 反射率数据未给出可用的照明体
    """
    context = context or SpectralContext()
    out_space = parse_enum(ColorSpace, output, 'output color space')
    obs = parse_enum(Observer, observer, 'standard observer')
    if out_space is ColorSpace.SRGB:
        obs = Observer.CIE1931

    spectra = np.asarray(spectra, dtype=np.float64)
    if spectra.ndim == 1:
        spectra = spectra[np.newaxis, :]
    if spectra.ndim != 2:
        raise InvalidShapeError(
            "'spectra' must be a NxW matrix where N is the number of samples and W is the number of wavelengths."
        )
    n_samples, n_wl = spectra.shape

    include_illuminant, spd_wl, spd_values = _resolve_illuminant(spd, spd_wavelengths, include_illuminant, context)

    if wavelengths is None:
        wavelengths = _default_grid(n_wl, context, 'wavelengths')
    else:
        wavelengths = _check_grid(wavelengths, n_wl, 'wavelengths', 'spectra')

    if include_illuminant:
        spd_wl = wavelengths

    # 取交集（而非并集）以避免外推
    start = max(wavelengths[0], spd_wl[0], TABLE_WAVELENGTHS[0])
    end = min(wavelengths[-1], spd_wl[-1], TABLE_WAVELENGTHS[-1])
    if start > end:
        raise InvalidShapeError(
            f"wavelength ranges of spectra [{wavelengths[0]:.5G}, {wavelengths[-1]:.5G}], "
            f"spd [{spd_wl[0]:.5G}, {spd_wl[-1]:.5G}] and observer do not overlap."
        )
    grid = np.arange(start, end + 1e-9 * context.interval, context.interval)
    grid[-1] = min(grid[-1], end)

    if grid[0] > wavelengths[0] or grid[-1] < wavelengths[-1]:
        debug_logger.warning(
            f"values in spectra outside [{grid[0]:.5G}, {grid[-1]:.5G}] wavelength range will be removed.",
            _MODULE,
        )

    if not (grid.shape == wavelengths.shape and np.allclose(grid, wavelengths)):
        if n_samples > context.max_samples:
            mask = (wavelengths >= start) & (wavelengths <= end)
            grid = wavelengths[mask]
            spectra = spectra[:, mask]
            debug_logger.warning(
                f"{n_samples} samples exceed {context.max_samples}: spectra are integrated on their native "
                f"wavelength grid without interpolation (faster, less accurate).",
                _MODULE,
            )
        else:
            spectra = _pchip(wavelengths, spectra, grid, axis=1)
    else:
        grid = wavelengths

    weights = _interval_weights(grid, context)

    if not include_illuminant:
        spd_grid = _pchip(spd_wl, spd_values, grid)
        spd_grid = normalize_spd(grid, spd_grid, obs, context)
        spectra = spectra * spd_grid[np.newaxis, :]

    cmfs = _pchip(TABLE_WAVELENGTHS, CMFS[obs.value], grid, axis=1)

    xyz = (spectra * weights[np.newaxis, :]) @ cmfs.T
    debug_logger.debug(
        f"integrated {n_samples} spectra over {grid.size} wavelengths [{grid[0]:.5G}, {grid[-1]:.5G}]", _MODULE
    )

    if out_space is ColorSpace.SRGB:
        return xyz_to_linsrgb(xyz)
    return xyz
