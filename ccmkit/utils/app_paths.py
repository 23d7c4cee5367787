from __future__ import annotations

import os
from pathlib import Path
from typing import List


CONFIG_DIR_ENV = "CCMKIT_CONFIG_DIR"


def _pkg_root() -> Path:
    """Return the package directory: <...>/ccmkit"""
    return Path(__file__).resolve().parent.parent


def candidate_paths(*parts: str) -> List[Path]:
    """Candidate locations for a data file, highest priority first.

      1) User override directory ($CCMKIT_CONFIG_DIR/<parts[1:]>) for config files
      2) Package data: ccmkit/<parts>
    """
    candidates: List[Path] = []
    user_dir = os.environ.get(CONFIG_DIR_ENV)
    if user_dir and parts and parts[0] == "config":
        candidates.append(Path(user_dir).expanduser().joinpath(*parts[1:]))
    candidates.append(_pkg_root().joinpath(*parts))
    return candidates


def resolve_data_path(*parts: str) -> Path:
    """Resolve a data file path with unified search order.

    Raises FileNotFoundError if none exists.
    """
    for p in candidate_paths(*parts):
        if p.exists():
            return p
    raise FileNotFoundError("Data path not found: " + "/".join(parts))
