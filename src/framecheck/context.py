"""
どこで: `framecheck.context`
何を: チェッカ群が共有する依存（レジストリ/生成器/比較器/乱数/カタログ/設定値）の束。
なぜ: 乱数生成器をグローバルに持たず、明示的に引き回して再現性を保つため。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from .builders import RandomObjectService
from .catalog import MethodCatalog
from .comparer import StructuralComparer
from .registry import TypeRegistry


@dataclass
class CheckContext:
    registry: TypeRegistry
    builder: RandomObjectService
    comparer: StructuralComparer
    rng: np.random.Generator
    catalog: MethodCatalog
    mismatch_error: type[BaseException] | None
    epsilon: float
    max_clone_retries: int

    def require_mismatch_error(self) -> type[BaseException]:
        if self.mismatch_error is None:
            raise RuntimeError("the reference frame mismatch exception type is not configured")
        return self.mismatch_error

    def next_frames(self) -> tuple[Any, Any]:
        """新しい乱数フレーム A と B（どちらもワールド直下）。"""
        frame_a = self.builder.next_reference_frame(self.rng, "frameA")
        frame_b = self.builder.next_reference_frame(self.rng, "frameB")
        return frame_a, frame_b


__all__ = ["CheckContext"]
