"""
どこで: `framecheck.configuration`
何を: 検査対象ライブラリごとの設定（型登録・乱数生成器・例外型）をまとめる抽象基底。
なぜ: テスト側が 1 クラスを渡すだけで `FrameAPITester` を組み立てられるようにするため。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .builders import ReflectionBasedBuilder
    from .tester import FrameAPITester


class FrameAPIConfiguration(ABC):
    """`FrameAPITester` の初期化時に 1 度だけ `configure` が呼ばれる。

    実装例::

        class MyConfiguration(FrameAPIConfiguration):
            def configure(self, tester, builder):
                tester.register_reference_frame_type(ReferenceFrame)
                tester.mismatch_error = ReferenceFrameMismatchError
                tester.register_frame_types_smart(FramePoint3DBasics)
                builder.configure_reference_frames(ReferenceFrame, WORLD, random_frame)
    """

    @abstractmethod
    def configure(self, tester: "FrameAPITester", builder: "ReflectionBasedBuilder") -> None: ...


__all__ = ["FrameAPIConfiguration"]
