"""
どこで: `framecheck.combinations`
何を: フレーム固定引数への「フレーム A / B」割り当てをビット列として列挙する。
なぜ: 参照フレームの不一致検査で、少なくとも 2 つの参加者が異なるフレームに
      置かれる割り当てだけを過不足なく試すため。

ビット i が立っていれば i 番目の引数はフレーム B、それ以外はフレーム A。
レシーバ（インスタンスメソッドの holder）がフレーム A に固定される場合は
全ビットが立った割り当ても不一致になるので含める。固定参加者が無い場合は
全 B の割り当ては一致状態なので除外する。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class FrameAssignment:
    """`size` 個のフレーム固定引数に対する A/B 割り当て。"""

    bits: int
    size: int

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError("size must be >= 0")
        if not 0 <= self.bits < (1 << self.size):
            raise ValueError(f"bits out of range for size {self.size}: {self.bits}")

    def in_frame_b(self, index: int) -> bool:
        if not 0 <= index < self.size:
            raise IndexError(index)
        return bool(self.bits >> index & 1)

    @property
    def count_in_frame_b(self) -> int:
        return bin(self.bits).count("1")

    @property
    def is_uniform(self) -> bool:
        """全引数が同じフレームに置かれるか（A のみ、または B のみ）。"""
        return self.bits == 0 or self.bits == (1 << self.size) - 1


def enumerate_mismatch_assignments(size: int, *, anchored_in_frame_a: bool) -> Iterator[FrameAssignment]:
    """不一致を含む割り当てを列挙する。

    Parameters
    ----------
    size : int
        フレーム固定引数の数。
    anchored_in_frame_a : bool
        引数以外にフレーム A 固定の参加者（レシーバ）がいるか。

    Returns
    -------
    Iterator[FrameAssignment]
        `anchored_in_frame_a` が False なら `2**size - 2` 通り、True なら `2**size - 1` 通り。
    """
    if size <= 0:
        return
    top = (1 << size) - 1
    last = top if anchored_in_frame_a else top - 1
    for bits in range(1, last + 1):
        yield FrameAssignment(bits, size)


__all__ = ["FrameAssignment", "enumerate_mismatch_assignments"]
