"""
どこで: `framecheck.signature`
何を: メソッドシグネチャ（名前・引数型列・戻り値型）の不変値と派生操作、
      シグネチャから作るメソッドフィルタ。
なぜ: 期待するオーバーロードの導出（引数型の置換/挿入/削除、名前の置換）を
      宣言元に依存しない構造値として扱うため。

等価性/ハッシュは名前と引数型のみで決まり、宣言元と戻り値型は含めない。
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable

from .conventions import simple_name
from .types import MethodFilter


@dataclass(frozen=True)
class MethodSignature:
    """メソッドの構造的シグネチャ。

    Parameters
    ----------
    name : str
        メソッド名。
    parameter_types : tuple[Any, ...]
        引数型（インスタンスメソッドの self は含めない）。
    return_type : Any
        戻り値型。`-> None` は `NoneType`、注釈なしは `None`。
    """

    name: str
    parameter_types: tuple[Any, ...] = ()
    return_type: Any = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.parameter_types, tuple):
            object.__setattr__(self, "parameter_types", tuple(self.parameter_types))

    @property
    def parameter_count(self) -> int:
        return len(self.parameter_types)

    def with_parameter_replaced(self, index: int, new_type: Any) -> MethodSignature:
        types = list(self.parameter_types)
        types[index] = new_type
        return replace(self, parameter_types=tuple(types))

    def with_parameter_inserted(self, index: int, new_type: Any) -> MethodSignature:
        types = list(self.parameter_types)
        types.insert(index, new_type)
        return replace(self, parameter_types=tuple(types))

    def with_parameter_removed(self, index: int) -> MethodSignature:
        types = list(self.parameter_types)
        del types[index]
        return replace(self, parameter_types=tuple(types))

    def with_name_replaced(self, name: str) -> MethodSignature:
        return replace(self, name=name)

    def with_return_type(self, return_type: Any) -> MethodSignature:
        return replace(self, return_type=return_type)

    def simple_name(self) -> str:
        """`float distance(Point3DReadOnly)` 形式の表示文字列。"""
        args = ", ".join(simple_name(t) for t in self.parameter_types)
        return f"{simple_name(self.return_type)} {self.name}({args})"

    def __str__(self) -> str:
        return self.simple_name()


def method_filter_from_signature(signature: MethodSignature) -> MethodFilter:
    """名前と引数型が `signature` と一致するメソッドだけを除外するフィルタ。"""

    def _filter(candidate: MethodSignature) -> bool:
        return candidate != signature

    return _filter


def method_filter_from_signatures(signatures: Iterable[MethodSignature]) -> MethodFilter:
    """`signatures` のいずれかと一致するメソッドを除外するフィルタ。"""
    excluded = frozenset(signatures)

    def _filter(candidate: MethodSignature) -> bool:
        return candidate not in excluded

    return _filter


__all__ = [
    "MethodSignature",
    "method_filter_from_signature",
    "method_filter_from_signatures",
]
