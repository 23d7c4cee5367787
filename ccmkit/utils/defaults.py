"""
默认求解器配置加载器
集中式默认值入口：优先从 config/defaults/optimizer.json 读取；若不存在或格式错误，回退到内置默认值。
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from ccmkit.utils.app_paths import resolve_data_path
from ccmkit.utils import debug_logger


_BUILTIN_OPTIMIZER_DEFAULTS: Dict[str, Any] = {
    "method": "CMA-ES",
    "max_iter": 1000,
    "tolerance": 1e-8,
    "sigma0": 0.1,
    "seed": 1,
    "popsize": None,
    "ridge": 1e-6,
}

_OPTIMIZER_DEFAULTS_CACHE: Optional[Dict[str, Any]] = None


def builtin_optimizer_defaults() -> Dict[str, Any]:
    return dict(_BUILTIN_OPTIMIZER_DEFAULTS)


def load_optimizer_defaults(reload: bool = False) -> Dict[str, Any]:
    """返回求解器默认配置（字典副本）。文件中缺失的键使用内置值补齐。"""
    global _OPTIMIZER_DEFAULTS_CACHE
    if _OPTIMIZER_DEFAULTS_CACHE is not None and not reload:
        return dict(_OPTIMIZER_DEFAULTS_CACHE)

    merged = builtin_optimizer_defaults()
    try:
        path = resolve_data_path("config", "defaults", "optimizer.json")
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        section = data.get("optimizer", {}) or {}
        for key in merged:
            if key in section:
                merged[key] = section[key]
        debug_logger.debug(f"已加载求解器默认配置: {path}", "defaults")
    except FileNotFoundError:
        debug_logger.warning("未找到 optimizer.json，使用内置默认配置", "defaults")
    except (json.JSONDecodeError, OSError, AttributeError) as e:
        debug_logger.warning(f"求解器默认配置格式错误，使用内置默认配置: {e}", "defaults")
        merged = builtin_optimizer_defaults()

    _OPTIMIZER_DEFAULTS_CACHE = merged
    return dict(merged)
