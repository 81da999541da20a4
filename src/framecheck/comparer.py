"""
どこで: `framecheck.comparer`
何を: 許容誤差付きの構造比較（frame/frameless の混在を含む）。
なぜ: 差分検査で frame 版と frameless 版の引数・戻り値・レシーバを同じ規則で比べるため。
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Mapping
from typing import Any, Callable, Protocol

import numpy as np

from .frames import is_frame_holder


class StructuralComparer(Protocol):
    def epsilon_equals(self, a: Any, b: Any, epsilon: float) -> bool: ...


def _scalar_equals(a: float, b: float, epsilon: float) -> bool:
    if math.isnan(a) or math.isnan(b):
        return math.isnan(a) and math.isnan(b)
    if math.isinf(a) or math.isinf(b):
        return a == b
    return abs(a - b) <= epsilon


class ReflectionBasedComparer:
    """既定の `StructuralComparer` 実装。

    比較順:
    1. None / bool / 実数（NaN 同士は等しい）/ str・bytes
    2. `numpy.ndarray`（`rtol=0`, `atol=epsilon`）
    3. Mapping / list・tuple（要素ごと）
    4. 登録済みの葉比較関数（MRO 上で最も近い型）
    5. `epsilon_equals(other, epsilon)` を持つオブジェクト

    frame holder 同士は参照フレームの同一性も要求する。片方だけが holder の場合は
    frameless 側を受け手にして値だけを比べる。
    """

    def __init__(self) -> None:
        self._leaf_comparators: dict[type, Callable[[Any, Any, float], bool]] = {}

    def register_comparator(self, t: type, fn: Callable[[Any, Any, float], bool]) -> None:
        self._leaf_comparators[t] = fn

    def epsilon_equals(self, a: Any, b: Any, epsilon: float) -> bool:
        if a is None or b is None:
            return a is b
        if isinstance(a, (bool, np.bool_)) or isinstance(b, (bool, np.bool_)):
            both = isinstance(a, (bool, np.bool_)) and isinstance(b, (bool, np.bool_))
            return both and bool(a) == bool(b)
        if isinstance(a, numbers.Real) and isinstance(b, numbers.Real):
            return _scalar_equals(float(a), float(b), epsilon)
        if isinstance(a, (str, bytes)) or isinstance(b, (str, bytes)):
            return a == b
        if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
            arr_a, arr_b = np.asarray(a), np.asarray(b)
            if arr_a.shape != arr_b.shape:
                return False
            return bool(np.allclose(arr_a, arr_b, rtol=0.0, atol=epsilon, equal_nan=True))
        if isinstance(a, Mapping) and isinstance(b, Mapping):
            if a.keys() != b.keys():
                return False
            return all(self.epsilon_equals(a[k], b[k], epsilon) for k in a)
        if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
            if len(a) != len(b):
                return False
            return all(self.epsilon_equals(x, y, epsilon) for x, y in zip(a, b))
        return self._objects_equal(a, b, epsilon)

    def _objects_equal(self, a: Any, b: Any, epsilon: float) -> bool:
        a_holder, b_holder = is_frame_holder(a), is_frame_holder(b)
        if a_holder and b_holder and a.reference_frame is not b.reference_frame:
            return False
        if a_holder and not b_holder:
            # frameless 側を受け手にする
            a, b = b, a
        leaf = self._find_leaf_comparator(type(a))
        if leaf is not None:
            return bool(leaf(a, b, epsilon))
        method = getattr(a, "epsilon_equals", None)
        if callable(method):
            return bool(method(b, epsilon))
        return bool(a == b)

    def _find_leaf_comparator(self, t: type) -> Callable[[Any, Any, float], bool] | None:
        for cls in t.__mro__:
            fn = self._leaf_comparators.get(cls)
            if fn is not None:
                return fn
        return None


__all__ = ["StructuralComparer", "ReflectionBasedComparer"]
