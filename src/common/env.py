"""
どこで: `common.env`
何を: `FRAMECHECK_*` 環境変数を型付きで読むヘルパ。
なぜ: 設定スナップショット（`common.settings`）の読み込みで、未設定・不正値・下限の扱いを
      一か所に揃えるため。
"""

from __future__ import annotations

import math
import os
from typing import Callable, Optional, TypeVar

_N = TypeVar("_N", int, float)


def _read_number(
    name: str, parse: Callable[[str], _N], default: Optional[_N], min_value: Optional[_N]
) -> Optional[_N]:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        val = parse(raw.strip())
    except ValueError:
        return default
    if isinstance(val, float) and not math.isfinite(val):
        return default
    if min_value is not None and val < min_value:
        return min_value
    return val


def env_int(name: str, default: Optional[int] = None, *, min_value: Optional[int] = None) -> Optional[int]:
    """整数として読む。未設定・不正値は `default`、`min_value` 未満は `min_value` に丸める。"""
    return _read_number(name, int, default, min_value)


def env_float(
    name: str, default: Optional[float] = None, *, min_value: Optional[float] = None
) -> Optional[float]:
    """浮動小数として読む（`env_int` と同じ規則。`nan`/`inf` は不正値扱い）。"""
    return _read_number(name, float, default, min_value)


def env_str(name: str, default: str = "") -> str:
    """文字列として読む（空白のみは未設定扱い）。"""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


__all__ = ["env_int", "env_float", "env_str"]
