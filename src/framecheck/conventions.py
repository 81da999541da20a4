"""
どこで: `framecheck.conventions`
何を: 型名/メソッド名の命名規約（Frame/FixedFrame/ReadOnly/Basics, *_matching_frame 等）と、
      名前に基づく兄弟型探索・表示用の簡易名を提供する。
なぜ: 規約ベースの登録補助と診断メッセージの双方で同じ規則を使うため。
"""

from __future__ import annotations

import typing
from typing import Any

# 型名の規約
READ_ONLY = "ReadOnly"
BASICS = "Basics"
FRAME = "Frame"
FIXED_FRAME = "FixedFrame"

# メソッド名の規約
SET = "set"
MATCHING_FRAME = "_matching_frame"
INCLUDING_FRAME = "_including_frame"
SET_MATCHING_FRAME = SET + MATCHING_FRAME
SET_INCLUDING_FRAME = SET + INCLUDING_FRAME

# 次元判定に使う型名マーカ
DIM_2D = "2D"
DIM_3D = "3D"


def fixed_frame_name(frame_type_name: str) -> str:
    """`FramePoint3DBasics` -> `FixedFramePoint3DBasics`。"""
    return frame_type_name.replace(FRAME, FIXED_FRAME)


def read_only_name(type_name: str) -> str:
    """`FramePoint3DBasics` -> `FramePoint3DReadOnly`。"""
    return type_name.replace(BASICS, READ_ONLY)


def frameless_name(frame_type_name: str) -> str:
    """`FramePoint3DReadOnly` -> `Point3DReadOnly`。"""
    return frame_type_name.replace(FRAME, "")


def search_super_type_from_simple_name(name: str, start: type) -> type | None:
    """`start` の基底クラスを深さ優先で辿り、`__name__ == name` の型を返す。

    直接の基底を先に調べ、見つからなければ各基底を再帰的に調べる。
    見つからない場合は None。
    """
    bases = getattr(start, "__bases__", ())
    for base in bases:
        if base.__name__ == name:
            return base
    for base in bases:
        found = search_super_type_from_simple_name(name, base)
        if found is not None:
            return found
    return None


def is_matching_frame_method(name: str) -> bool:
    return name.endswith(MATCHING_FRAME)


def is_including_frame_method(name: str) -> bool:
    return name.endswith(INCLUDING_FRAME)


def simple_name(t: Any) -> str:
    """型/ジェネリックエイリアス/None を診断用の短い名前にする。"""
    if t is None or t is type(None):
        return "None"
    origin = typing.get_origin(t)
    if origin is not None:
        args = ", ".join("..." if a is Ellipsis else simple_name(a) for a in typing.get_args(t))
        return f"{simple_name(origin)}[{args}]"
    name = getattr(t, "__name__", None)
    if isinstance(name, str):
        return name
    return repr(t)


__all__ = [
    "READ_ONLY",
    "BASICS",
    "FRAME",
    "FIXED_FRAME",
    "SET",
    "MATCHING_FRAME",
    "INCLUDING_FRAME",
    "SET_MATCHING_FRAME",
    "SET_INCLUDING_FRAME",
    "DIM_2D",
    "DIM_3D",
    "fixed_frame_name",
    "read_only_name",
    "frameless_name",
    "search_super_type_from_simple_name",
    "is_matching_frame_method",
    "is_including_frame_method",
    "simple_name",
]
