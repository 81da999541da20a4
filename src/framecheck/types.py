"""
どこで: `framecheck.types`
何を: 検査 API の引数に現れる関数型の軽量エイリアス。
なぜ: 依存の少ない場所に配置して循環と分散定義を避けるため。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

import numpy as np

if TYPE_CHECKING:  # pragma: no cover
    from .signature import MethodSignature

MethodFilter = Callable[["MethodSignature"], bool]
# (rng, reference_frame) -> frame holder
HolderFactory = Callable[[np.random.Generator, Any], Any]
# (reference_frame, frameless object) -> frame object
FrameCopier = Callable[[Any, Any], Any]
# rng -> frameless object
FramelessBuilder = Callable[[np.random.Generator], Any]


def accept_all(_signature: "MethodSignature") -> bool:
    return True


__all__ = ["MethodFilter", "HolderFactory", "FrameCopier", "FramelessBuilder", "accept_all"]
