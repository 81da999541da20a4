"""
どこで: `framecheck.builders`
何を: 引数型列から乱数オブジェクトを生成し、オブジェクトを複製するサービス。
なぜ: frame 版と frameless 版に「同じ値の別インスタンス」を渡して差分検査するため。

生成/複製できない型には例外ではなく `UNSUPPORTED` を返す。呼び出し側は
そのメソッドの検査を打ち切る（生成）か、反復をやり直す（複製）。
"""

from __future__ import annotations

import collections.abc
import logging
import typing
from dataclasses import dataclass
from typing import Any, Callable, Protocol

import numpy as np

logger = logging.getLogger(__name__)


class _Unsupported:
    """生成/複製できなかったことを表す番兵（偽値）。"""

    _instance: "_Unsupported | None" = None

    def __new__(cls) -> "_Unsupported":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSUPPORTED"


UNSUPPORTED = _Unsupported()

_SEQUENCE_ORIGINS: tuple[Any, ...] = (
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Collection,
    collections.abc.Iterable,
)
_IMMUTABLE_SCALARS = (bool, int, float, complex, str, bytes)


class RandomObjectService(Protocol):
    """チェッカが依存する乱数オブジェクト生成/複製の窓口。"""

    @property
    def world_frame(self) -> Any: ...

    def next_reference_frame(self, rng: np.random.Generator, name: str, parent: Any = None) -> Any: ...

    def next(self, rng: np.random.Generator, frame: Any, *types: Any) -> tuple[Any, ...] | _Unsupported: ...

    def clone(self, *objects: Any) -> tuple[Any, ...] | _Unsupported: ...


@dataclass(frozen=True)
class _GeneratorEntry:
    produced_type: type
    fn: Callable[..., Any]
    frame_aware: bool


class ReflectionBasedBuilder:
    """登録表に基づく `RandomObjectService` の既定実装。

    - 型 `T` の要求には、生成型が `T` の派生である最初の登録ジェネレータを使う
      （登録順が優先順位。frameless 型を先に登録しておくと frameless 要求に frame 型が混ざらない）。
    - `float`/`int`/`bool` は組込み。登録済み参照フレーム型の要求には与えられたフレームを返す。
    - `list[T]`/`Sequence[T]`/`tuple[T, ...]` は 1〜4 要素、`tuple[A, B]` は要素ごとに生成。
    - 複製は MRO 上で最も近い登録クローナを使う。スカラ/None/参照フレームは共有する。
    """

    def __init__(self) -> None:
        self._generators: list[_GeneratorEntry] = []
        self._cloners: dict[type, Callable[[Any], Any]] = {}
        self._primitives: dict[type, Callable[[np.random.Generator], Any]] = {
            bool: lambda rng: bool(rng.integers(0, 2)),
            int: lambda rng: int(rng.integers(-100, 101)),
            float: lambda rng: float(rng.uniform(-10.0, 10.0)),
        }
        self._reference_frame_type: type | None = None
        self._world_frame: Any = None
        self._frame_generator: Callable[[np.random.Generator, str, Any], Any] | None = None
        self.max_container_size = 4

    # === 設定 ===
    def configure_reference_frames(
        self,
        reference_frame_type: type,
        world_frame: Any,
        frame_generator: Callable[[np.random.Generator, str, Any], Any],
    ) -> None:
        """参照フレーム型、ワールドフレーム、乱数フレーム生成関数 `(rng, name, parent)` を設定する。"""
        self._reference_frame_type = reference_frame_type
        self._world_frame = world_frame
        self._frame_generator = frame_generator

    def register_primitive(self, t: type, fn: Callable[[np.random.Generator], Any]) -> None:
        self._primitives[t] = fn

    def register_frameless_generator(
        self, produced_type: type, fn: Callable[[np.random.Generator], Any]
    ) -> None:
        self._generators.append(_GeneratorEntry(produced_type, fn, frame_aware=False))

    def register_frame_generator(
        self, produced_type: type, fn: Callable[[np.random.Generator, Any], Any]
    ) -> None:
        self._generators.append(_GeneratorEntry(produced_type, fn, frame_aware=True))

    def register_cloner(self, t: type, fn: Callable[[Any], Any]) -> None:
        """`t`（と派生）の複製関数を登録する。`UNSUPPORTED` を返してもよい。"""
        self._cloners[t] = fn

    # === フレーム ===
    @property
    def reference_frame_type(self) -> type | None:
        return self._reference_frame_type

    @property
    def world_frame(self) -> Any:
        if self._world_frame is None:
            raise RuntimeError("reference frames are not configured; call configure_reference_frames()")
        return self._world_frame

    def next_reference_frame(self, rng: np.random.Generator, name: str, parent: Any = None) -> Any:
        if self._frame_generator is None:
            raise RuntimeError("reference frames are not configured; call configure_reference_frames()")
        return self._frame_generator(rng, name, self.world_frame if parent is None else parent)

    # === 生成 ===
    def next(self, rng: np.random.Generator, frame: Any, *types: Any) -> tuple[Any, ...] | _Unsupported:
        """`types` の各型について乱数オブジェクトを生成する（1 つでも不可なら `UNSUPPORTED`）。"""
        out: list[Any] = []
        for t in types:
            value = self.next_one(rng, frame, t)
            if value is UNSUPPORTED:
                logger.debug("cannot generate an instance of %r", t)
                return UNSUPPORTED
            out.append(value)
        return tuple(out)

    def next_one(self, rng: np.random.Generator, frame: Any, t: Any) -> Any:
        if t is object or t is Any:
            return UNSUPPORTED
        primitive = self._primitives.get(t)
        if primitive is not None:
            return primitive(rng)
        if (
            self._reference_frame_type is not None
            and isinstance(t, type)
            and issubclass(t, self._reference_frame_type)
        ):
            return frame
        origin = typing.get_origin(t)
        if origin is not None:
            return self._next_container(rng, frame, origin, typing.get_args(t))
        entry = self._find_generator(t)
        if entry is None:
            return UNSUPPORTED
        return entry.fn(rng, frame) if entry.frame_aware else entry.fn(rng)

    def _next_container(self, rng: np.random.Generator, frame: Any, origin: Any, args: tuple[Any, ...]) -> Any:
        if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            items = [self.next_one(rng, frame, a) for a in args]
            return UNSUPPORTED if any(item is UNSUPPORTED for item in items) else tuple(items)
        if len(args) not in (1, 2) or (origin not in _SEQUENCE_ORIGINS and origin is not tuple):
            return UNSUPPORTED
        size = int(rng.integers(1, self.max_container_size + 1))
        items = [self.next_one(rng, frame, args[0]) for _ in range(size)]
        if any(item is UNSUPPORTED for item in items):
            return UNSUPPORTED
        return tuple(items) if origin is tuple else items

    def _find_generator(self, t: Any) -> _GeneratorEntry | None:
        if not isinstance(t, type):
            return None
        for entry in self._generators:
            if issubclass(entry.produced_type, t):
                return entry
        return None

    # === 複製 ===
    def clone(self, *objects: Any) -> tuple[Any, ...] | _Unsupported:
        """各オブジェクトの複製（1 つでも不可なら `UNSUPPORTED`）。"""
        out: list[Any] = []
        for obj in objects:
            copied = self.clone_one(obj)
            if copied is UNSUPPORTED:
                logger.debug("cannot clone an instance of %s", type(obj).__name__)
                return UNSUPPORTED
            out.append(copied)
        return tuple(out)

    def clone_one(self, obj: Any) -> Any:
        if obj is None or isinstance(obj, _IMMUTABLE_SCALARS):
            return obj
        if self._reference_frame_type is not None and isinstance(obj, self._reference_frame_type):
            return obj
        if isinstance(obj, np.ndarray):
            return obj.copy()
        if isinstance(obj, (list, tuple)):
            items = [self.clone_one(item) for item in obj]
            if any(item is UNSUPPORTED for item in items):
                return UNSUPPORTED
            return type(obj)(items)
        for cls in type(obj).__mro__:
            cloner = self._cloners.get(cls)
            if cloner is not None:
                return cloner(obj)
        return UNSUPPORTED


__all__ = ["UNSUPPORTED", "RandomObjectService", "ReflectionBasedBuilder"]
