"""
どこで: `framecheck.registry`
何を: frameless 型と frame 型の対応表、frame 型の可変性分類（FrameKind）、
      無視する例外の一覧を保持し、対応型の解決と各種判定を提供する。
なぜ: 全チェッカが「この引数型は frame 型か」「frame 版は何か」「この呼び出しで
      フレームが固定される型か」を同じ規則で判断するため。

解決規則:
- frameless -> frame は、キーが要求型の基底である全エントリのうち最も具体的な値を採用。
- frame -> frameless は、値が要求型の基底である全エントリのうち最も具体的なキーを採用。
- `list[T]` / `tuple[T, ...]` / `Sequence[T]` は要素型ごとに解決する。

登録は検査開始前に一度だけ行い、`freeze()` 以降は変更できない。
"""

from __future__ import annotations

import collections.abc
import logging
import typing
from enum import Enum
from typing import Any, Callable, Iterable

from . import conventions
from .conventions import simple_name
from .errors import TypeResolutionError

logger = logging.getLogger(__name__)

_CONTAINER_ORIGINS: tuple[Any, ...] = (
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Collection,
    collections.abc.Iterable,
)


class FrameKind(Enum):
    """frame 型の可変性分類（登録時に確定する閉じた列挙）。"""

    READ_ONLY = "read_only"
    FIXED_FRAME = "fixed_frame"
    MUTABLE_FRAME = "mutable_frame"

    @property
    def frame_fixed(self) -> bool:
        """呼び出し中に参照フレームが変わらない種別か。"""
        return self is not FrameKind.MUTABLE_FRAME


def _container_args(t: Any) -> tuple[Any, ...] | None:
    origin = typing.get_origin(t)
    if origin is None or origin not in _CONTAINER_ORIGINS:
        return None
    return typing.get_args(t)


def _component_type(t: Any) -> Any:
    """同種要素のコンテナなら要素型、それ以外は `t` 自身。"""
    args = _container_args(t)
    if not args:
        return t
    elements = {a for a in args if a is not Ellipsis}
    if len(elements) != 1:
        return t
    return _component_type(next(iter(elements)))


def _rebuild_container(t: Any, mapper: Callable[[Any], Any]) -> Any:
    origin = typing.get_origin(t)
    args = tuple(a if a is Ellipsis else mapper(a) for a in typing.get_args(t))
    return origin[args]


def _require_subclass(sub: type, sup: type) -> None:
    if not issubclass(sub, sup):
        raise TypeError(f"{sub.__name__} must be a subtype of {sup.__name__}")


class TypeRegistry:
    """frame/frameless 型の対応と分類を保持するレジストリ。

    Parameters
    ----------
    reference_frame_type : type | None
        参照フレームの型（`set_matching_frame(frame, ...)` の先頭引数判定に使用）。
    """

    def __init__(self, reference_frame_type: type | None = None) -> None:
        self.reference_frame_type = reference_frame_type
        # 挿入順を保持する（最も具体的な型が同順位のときの決定性）
        self._frameless_to_frame: dict[type, type] = {}
        self._frameless_without_equivalent: dict[type, None] = {}
        self._frame_read_only: dict[type, None] = {}
        self._fixed_frame_mutable: dict[type, None] = {}
        self._mutable_frame_mutable: dict[type, None] = {}
        self._kinds: dict[type, FrameKind] = {}
        self._exceptions_to_ignore: list[type[BaseException]] = []
        self._frozen = False

    # === ライフサイクル ===
    def freeze(self) -> None:
        """以降の登録を禁止する（複数回呼んでもよい）。"""
        if not self._frozen:
            logger.debug(
                "type registry frozen: %d frameless->frame entries, %d without equivalent",
                len(self._frameless_to_frame),
                len(self._frameless_without_equivalent),
            )
        self._frozen = True

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError("TypeRegistry is frozen; register types before running checks")

    # === 登録 ===
    def register_reference_frame_type(self, reference_frame_type: type) -> None:
        self._check_mutable()
        self.reference_frame_type = reference_frame_type

    def register_frame_type(
        self,
        mutable_frame_mutable: type | None,
        fixed_frame_mutable: type | None,
        frame_read_only: type,
        frameless_mutable: type,
        frameless_read_only: type,
    ) -> None:
        """frame 型 3 種と frameless 型 2 種を 1 組として登録する。

        Parameters
        ----------
        mutable_frame_mutable : type | None
            参照フレームを変更できる可変型（例: `FramePoint3DBasics`）。
        fixed_frame_mutable : type | None
            値は可変だが参照フレームは固定の型（例: `FixedFramePoint3DBasics`）。
        frame_read_only : type
            frame 付きの読み取り専用型。
        frameless_mutable : type
            frameless の可変型。`fixed_frame_mutable`（無ければ `mutable_frame_mutable`）へ対応付ける。
        frameless_read_only : type
            frameless の読み取り専用型。`frame_read_only` へ対応付ける。

        Raises
        ------
        ValueError
            必須の型が None の場合、または可変 frame 型が 2 つとも None の場合。
        TypeError
            宣言された継承関係が成り立たない場合。
        """
        self._check_mutable()
        if frame_read_only is None:
            raise ValueError("frame_read_only must not be None")
        if frameless_mutable is None or frameless_read_only is None:
            raise ValueError(f"frameless types must not be None (frame type: {frame_read_only.__name__})")
        if mutable_frame_mutable is None and fixed_frame_mutable is None:
            raise ValueError(
                f"no mutable frame type given for {frameless_mutable.__name__}"
            )

        _require_subclass(frame_read_only, frameless_read_only)
        _require_subclass(frameless_mutable, frameless_read_only)
        if fixed_frame_mutable is not None:
            _require_subclass(fixed_frame_mutable, frame_read_only)
            _require_subclass(fixed_frame_mutable, frameless_mutable)
        if mutable_frame_mutable is not None:
            _require_subclass(mutable_frame_mutable, fixed_frame_mutable or frame_read_only)
            _require_subclass(mutable_frame_mutable, frameless_mutable)

        self._frameless_to_frame[frameless_read_only] = frame_read_only
        if fixed_frame_mutable is not None:
            self._frameless_to_frame[frameless_mutable] = fixed_frame_mutable
        else:
            self._frameless_to_frame[frameless_mutable] = mutable_frame_mutable  # type: ignore[assignment]

        self._frame_read_only[frame_read_only] = None
        if fixed_frame_mutable is not None:
            self._fixed_frame_mutable[fixed_frame_mutable] = None
        if mutable_frame_mutable is not None:
            self._mutable_frame_mutable[mutable_frame_mutable] = None
        for t in (frame_read_only, fixed_frame_mutable, mutable_frame_mutable):
            if t is not None:
                self._kinds[t] = self._resolve_kind(t)

    def register_frame_type_smart(self, mutable_frame_mutable: type) -> None:
        """命名規約から兄弟型を探索して `register_frame_type` する。

        `FramePoint3DBasics` から `FixedFramePoint3DBasics`, `FramePoint3DReadOnly`,
        `Point3DBasics`, `Point3DReadOnly` を基底クラスの中から探す。
        """
        name = mutable_frame_mutable.__name__
        fixed = self._search(
            conventions.fixed_frame_name(name), mutable_frame_mutable, "fixed-frame mutable", name
        )
        read_only = self._search(conventions.read_only_name(name), fixed, "frame read-only", name)
        frameless_mutable = self._search(
            conventions.frameless_name(name), fixed, "frameless mutable", name
        )
        frameless_read_only = self._search(
            conventions.read_only_name(frameless_mutable.__name__),
            frameless_mutable,
            "frameless read-only",
            name,
        )
        self.register_frame_type(
            mutable_frame_mutable, fixed, read_only, frameless_mutable, frameless_read_only
        )

    def register_frame_types_smart(self, *mutable_frame_mutable_types: type) -> None:
        for t in mutable_frame_mutable_types:
            self.register_frame_type_smart(t)

    def register_read_only_frame_type_smart(self, *frame_read_only_types: type) -> None:
        """読み取り専用 frame 型のみを持つ系列を登録する（`FrameX` -> `X`）。"""
        for frame_read_only in frame_read_only_types:
            self._check_mutable()
            name = frame_read_only.__name__
            frameless_read_only = self._search(
                conventions.frameless_name(name), frame_read_only, "frameless read-only", name
            )
            self._frameless_to_frame[frameless_read_only] = frame_read_only
            self._frame_read_only[frame_read_only] = None
            self._kinds[frame_read_only] = self._resolve_kind(frame_read_only)

    def register_frameless_type(self, frameless_mutable: type, frameless_read_only: type) -> None:
        """frame 版を持たない frameless 型の組を登録する。"""
        self._check_mutable()
        _require_subclass(frameless_mutable, frameless_read_only)
        self._frameless_without_equivalent[frameless_mutable] = None
        self._frameless_without_equivalent[frameless_read_only] = None

    def register_frameless_type_smart(self, *frameless_mutable_types: type) -> None:
        """`XBasics` から `XReadOnly` を探して `register_frameless_type` する。"""
        for frameless_mutable in frameless_mutable_types:
            name = frameless_mutable.__name__
            read_only = self._search(
                conventions.read_only_name(name), frameless_mutable, "frameless read-only", name
            )
            self.register_frameless_type(frameless_mutable, read_only)

    def register_frameless_read_only_type(self, *frameless_read_only_types: type) -> None:
        self._check_mutable()
        for t in frameless_read_only_types:
            self._frameless_without_equivalent[t] = None

    def register_exceptions_to_ignore(self, *exception_types: type[BaseException]) -> None:
        """ライブラリ側の正当な失敗として許容する例外型を追加する。"""
        self._check_mutable()
        for exc_type in exception_types:
            if not (isinstance(exc_type, type) and issubclass(exc_type, BaseException)):
                raise TypeError(f"not an exception type: {exc_type!r}")
            self._exceptions_to_ignore.append(exc_type)

    def _search(self, target: str, start: type, role: str, requester: str) -> type:
        found = conventions.search_super_type_from_simple_name(target, start)
        if found is None:
            raise TypeResolutionError(f"Could not find {role} type for {requester} (looked for {target})")
        return found

    def _resolve_kind(self, t: type) -> FrameKind:
        if t in self._frame_read_only:
            return FrameKind.READ_ONLY
        if t in self._fixed_frame_mutable:
            return FrameKind.FIXED_FRAME
        return FrameKind.MUTABLE_FRAME

    # === 参照 ===
    @property
    def frame_read_only_types(self) -> frozenset[type]:
        return frozenset(self._frame_read_only)

    @property
    def fixed_frame_mutable_types(self) -> frozenset[type]:
        return frozenset(self._fixed_frame_mutable)

    @property
    def mutable_frame_mutable_types(self) -> frozenset[type]:
        return frozenset(self._mutable_frame_mutable)

    @property
    def frameless_types_without_frame_equivalent(self) -> frozenset[type]:
        return frozenset(self._frameless_without_equivalent)

    @property
    def exceptions_to_ignore(self) -> tuple[type[BaseException], ...]:
        return tuple(self._exceptions_to_ignore)

    def classify(self, t: Any) -> FrameKind | None:
        """登録済み frame 型の分類（未登録は None）。"""
        return self._kinds.get(t)

    def is_frame_fixed(self, t: Any) -> bool:
        """呼び出し中に参照フレームが変化しない（読み取り専用/固定フレーム）登録型か。"""
        kind = self.classify(t)
        return kind is not None and kind.frame_fixed

    def is_mutable_frame_mutable_type(self, t: Any) -> bool:
        return self.classify(t) is FrameKind.MUTABLE_FRAME

    def is_read_only_frame_type(self, t: Any) -> bool:
        return self.classify(t) is FrameKind.READ_ONLY

    def is_frame_type(self, t: Any) -> bool:
        """登録済み frame 型（またはその派生、要素型）か。"""
        elem = _component_type(t)
        if not isinstance(elem, type):
            return False
        return any(issubclass(elem, frame) for frame in self._frameless_to_frame.values())

    def is_frameless_type(self, t: Any) -> bool:
        """frame 型ではなく、登録済み frameless 型（またはその派生）か。"""
        elem = _component_type(t)
        if not isinstance(elem, type) or self.is_frame_type(elem):
            return False
        if any(issubclass(elem, k) for k in self._frameless_to_frame):
            return True
        return any(issubclass(elem, k) for k in self._frameless_without_equivalent)

    def is_frameless_type_with_frame_equivalent(self, t: Any) -> bool:
        elem = _component_type(t)
        if not self.is_frameless_type(elem) or elem in self._frameless_without_equivalent:
            return False
        return any(issubclass(elem, k) for k in self._frameless_to_frame)

    def find_corresponding_frame_type(self, frameless_type: Any) -> Any:
        """frameless 型に対応する最も具体的な frame 型を返す。

        Raises
        ------
        ValueError
            frame 版を持つ frameless 型ではない場合。
        TypeResolutionError
            候補が存在しない場合。
        """
        if _container_args(frameless_type):
            return _rebuild_container(frameless_type, self.find_corresponding_frame_type)
        if not self.is_frameless_type_with_frame_equivalent(frameless_type):
            raise ValueError(f"Cannot handle the following type: {simple_name(frameless_type)}")
        frame_type: type | None = None
        for frameless, frame in self._frameless_to_frame.items():
            if issubclass(frameless_type, frameless) and (
                frame_type is None or issubclass(frame, frame_type)
            ):
                frame_type = frame
        if frame_type is None:
            raise TypeResolutionError(
                f"Could not find the corresponding frame type for: {simple_name(frameless_type)}"
            )
        return frame_type

    def find_corresponding_frameless_type(self, frame_type: Any) -> Any:
        """frame 型に対応する最も具体的な frameless 型を返す（例外は frame 方向と対称）。"""
        if _container_args(frame_type):
            return _rebuild_container(frame_type, self.find_corresponding_frameless_type)
        if not self.is_frame_type(frame_type):
            raise ValueError(f"Cannot handle the following type: {simple_name(frame_type)}")
        frameless_type: type | None = None
        for frameless, frame in self._frameless_to_frame.items():
            if issubclass(frame_type, frame) and (
                frameless_type is None or issubclass(frameless, frameless_type)
            ):
                frameless_type = frameless
        if frameless_type is None:
            raise TypeResolutionError(
                f"Could not find the corresponding frameless type for: {simple_name(frame_type)}"
            )
        return frameless_type

    def to_frame_type_if_possible(self, t: Any) -> Any:
        if self.is_frameless_type_with_frame_equivalent(t):
            return self.find_corresponding_frame_type(t)
        return t

    def to_frameless_type_if_possible(self, t: Any) -> Any:
        if self.is_frame_type(t):
            return self.find_corresponding_frameless_type(t)
        return t

    def _dimension_marker_in(self, t: Any, marker: str) -> bool:
        try:
            frameless = self.find_corresponding_frameless_type(t)
        except (ValueError, TypeResolutionError):
            return False
        return marker in simple_name(frameless)

    def is_2d_type(self, t: Any) -> bool:
        """対応する frameless 型の名前に `2D` を含む frame 型か。"""
        return self._dimension_marker_in(t, conventions.DIM_2D)

    def is_3d_type(self, t: Any) -> bool:
        return self._dimension_marker_in(t, conventions.DIM_3D)

    def is_exception_to_be_ignored(self, exc: BaseException | type[BaseException]) -> bool:
        exc_type = exc if isinstance(exc, type) else type(exc)
        return any(issubclass(exc_type, ignored) for ignored in self._exceptions_to_ignore)

    def count_frame_types(self, types: Iterable[Any]) -> int:
        return sum(1 for t in types if self.is_frame_type(t))

    def count_frameless_types(self, types: Iterable[Any]) -> int:
        return sum(1 for t in types if self.is_frameless_type(t))


__all__ = ["FrameKind", "TypeRegistry"]
