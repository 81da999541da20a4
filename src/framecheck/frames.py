"""
どこで: `framecheck.frames`
何を: 検査対象ライブラリに期待する最小の構造的インターフェース（Protocol）。
なぜ: 検査エンジンを特定の幾何ライブラリに依存させず、`reference_frame` /
      `change_frame` / `set_reference_frame` / `apply_transform` を持つオブジェクトなら扱えるようにするため。
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ReferenceFrameHolder(Protocol):
    @property
    def reference_frame(self) -> Any: ...


@runtime_checkable
class FrameChangeable(Protocol):
    """参照フレームを付け替え/変換できるオブジェクト。"""

    @property
    def reference_frame(self) -> Any: ...

    def set_reference_frame(self, reference_frame: Any) -> None: ...

    def change_frame(self, desired_frame: Any) -> None: ...


@runtime_checkable
class Transformable(Protocol):
    """座標値に変換を適用できるオブジェクト（参照フレームは変えない）。

    2D 型は `apply_transform(transform, check_if_transform_in_xy_plane)` も受け付けること。
    """

    def apply_transform(self, transform: Any) -> None: ...


@runtime_checkable
class TransformProvider(Protocol):
    """自フレームから別フレームへの変換を返す参照フレーム。"""

    def transform_to_desired_frame(self, desired_frame: Any) -> Any: ...


def is_frame_holder(obj: Any) -> bool:
    return obj is not None and isinstance(obj, ReferenceFrameHolder)


def reference_frame_of(obj: Any) -> Any:
    """holder の参照フレーム（holder でなければ None）。"""
    if not is_frame_holder(obj):
        return None
    return obj.reference_frame


__all__ = [
    "ReferenceFrameHolder",
    "FrameChangeable",
    "Transformable",
    "TransformProvider",
    "is_frame_holder",
    "reference_frame_of",
]
