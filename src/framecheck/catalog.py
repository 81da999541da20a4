"""
どこで: `framecheck.catalog`
何を: クラス/モジュールの公開メソッドを `MethodSignature` として列挙し、
      シグネチャ完全一致での検索と呼び出しを提供する（イントロスペクション層）。
なぜ: チェッカ本体を `inspect`/`typing` の詳細から切り離し、オーバーロード
      （`typing.overload` のスタブ群）を 1 シグネチャずつ扱えるようにするため。

列挙規則:
- `_` で始まる名前、property、classmethod は対象外。
- `*args`/`**kwargs`、既定値の無いキーワード専用引数を持つ関数は対象外。
- `typing.get_overloads` が返すスタブごとに 1 シグネチャ。スタブが無ければ実装の注釈から 1 つ。
- 注釈が解決できない関数は DEBUG ログを出して除外する。
"""

from __future__ import annotations

import inspect
import logging
import types
import typing
from dataclasses import dataclass
from typing import Any, Sequence

from .signature import MethodSignature

logger = logging.getLogger(__name__)

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


@dataclass(frozen=True)
class MethodHandle:
    """列挙されたメソッド 1 件（シグネチャ + 宣言元 + 呼び出し情報）。"""

    signature: MethodSignature
    owner: Any
    attribute: str
    is_static: bool

    @property
    def name(self) -> str:
        return self.signature.name

    @property
    def parameter_types(self) -> tuple[Any, ...]:
        return self.signature.parameter_types

    @property
    def return_type(self) -> Any:
        return self.signature.return_type

    def describe(self) -> str:
        """`Owner.method(...)` 形式の表示文字列。"""
        owner_name = getattr(self.owner, "__name__", repr(self.owner))
        return f"{owner_name}: {self.signature.simple_name()}"


def _signature_of(fn: Any, *, drop_first: bool) -> MethodSignature | None:
    try:
        sig = inspect.signature(fn)
        hints = typing.get_type_hints(fn)
    except (NameError, TypeError, ValueError) as exc:
        logger.debug("skip %r: cannot resolve annotations (%s)", fn, exc)
        return None

    params = list(sig.parameters.values())
    if drop_first:
        if not params or params[0].kind not in _POSITIONAL:
            return None
        params = params[1:]

    parameter_types: list[Any] = []
    for p in params:
        if p.kind in _POSITIONAL:
            parameter_types.append(hints.get(p.name, object))
        elif p.kind is inspect.Parameter.KEYWORD_ONLY:
            if p.default is inspect.Parameter.empty:
                return None
        else:
            # *args / **kwargs
            return None

    if "return" in hints:
        return_type = hints["return"]
        if return_type is None:
            return_type = type(None)
    else:
        return_type = None
    return MethodSignature(fn.__name__, tuple(parameter_types), return_type)


def _overload_targets(fn: Any) -> list[Any]:
    stubs = [getattr(s, "__func__", s) for s in typing.get_overloads(fn)]
    return stubs if stubs else [fn]


class MethodCatalog:
    """メソッド一覧をキャッシュ付きで提供する。"""

    def __init__(self) -> None:
        self._cache: dict[Any, tuple[MethodHandle, ...]] = {}

    def methods(self, owner: Any, *, instance: bool | None = None) -> tuple[MethodHandle, ...]:
        """`owner` の公開メソッドを列挙する。

        Parameters
        ----------
        owner : type | module
            対象のクラスまたはモジュール。
        instance : bool | None
            True ならインスタンスメソッドのみ、False なら static（モジュール関数含む）のみ、
            None なら両方。
        """
        handles = self._all_methods(owner)
        if instance is None:
            return handles
        return tuple(h for h in handles if h.is_static is not instance)

    def _all_methods(self, owner: Any) -> tuple[MethodHandle, ...]:
        cached = self._cache.get(owner)
        if cached is not None:
            return cached
        if isinstance(owner, types.ModuleType):
            handles = self._module_functions(owner)
        elif isinstance(owner, type):
            handles = self._class_methods(owner)
        else:
            raise TypeError(f"cannot list methods of {owner!r}; expected a class or a module")
        self._cache[owner] = handles
        return handles

    def _module_functions(self, module: types.ModuleType) -> tuple[MethodHandle, ...]:
        out: list[MethodHandle] = []
        for name, fn in sorted(vars(module).items()):
            if name.startswith("_") or not inspect.isfunction(fn):
                continue
            if fn.__module__ != module.__name__:
                continue
            out.extend(self._handles(module, name, fn, is_static=True))
        return tuple(out)

    def _class_methods(self, cls: type) -> tuple[MethodHandle, ...]:
        out: list[MethodHandle] = []
        for name in dir(cls):
            if name.startswith("_"):
                continue
            attr = inspect.getattr_static(cls, name)
            if isinstance(attr, staticmethod):
                out.extend(self._handles(cls, name, attr.__func__, is_static=True))
            elif inspect.isfunction(attr):
                out.extend(self._handles(cls, name, attr, is_static=False))
        return tuple(out)

    def _handles(self, owner: Any, name: str, fn: Any, *, is_static: bool) -> list[MethodHandle]:
        out: list[MethodHandle] = []
        seen: set[MethodSignature] = set()
        for target in _overload_targets(fn):
            sig = _signature_of(target, drop_first=not is_static)
            if sig is None or sig in seen:
                continue
            seen.add(sig)
            out.append(MethodHandle(sig.with_name_replaced(name), owner, name, is_static))
        return out

    def find_method(self, owner: Any, signature: MethodSignature) -> MethodHandle | None:
        """名前と引数型が完全一致するメソッドを返す（無ければ None）。"""
        for handle in self._all_methods(owner):
            if handle.signature == signature:
                return handle
        return None

    def find_methods_named(self, owner: Any, name: str) -> list[MethodHandle]:
        return [h for h in self._all_methods(owner) if h.name == name]

    @staticmethod
    def invoke(handle: MethodHandle, receiver: Any, args: Sequence[Any]) -> Any:
        """メソッドを呼び出す。static の場合 `receiver` は無視して宣言元から取得する。"""
        target = handle.owner if handle.is_static else receiver
        return getattr(target, handle.attribute)(*args)


__all__ = ["MethodHandle", "MethodCatalog"]
