"""
どこで: `framecheck.frame_checks`
何を: frame 引数を取るメソッドが参照フレームの不一致を検出して専用例外を送出し、
      可変フレーム引数/戻り値のフレームを正しく設定することを検査する。
なぜ: 異なるフレームの値を黙って混ぜる実装を、乱数フレームの割り当てで炙り出すため。

各反復で新しいフレーム A, B を作り、次のパスを順に実行する。
1. 全引数 A: 無視リスト以外の例外は致命的。
2. 不一致: フレーム固定引数に A/B を割り当て、不一致になる全通りで専用例外を要求する。
3. 採用: 可変フレーム引数を B、他を A にして呼び、可変フレーム引数が A になることを要求する。
4. 戻り値: 戻り値型が frame 型なら、全引数 A で呼んだ結果が A にあることを要求する。

インスタンスメソッドではレシーバ（holder）が常にフレーム A の参加者になる。
`*_matching_frame` / `*_including_frame` は読み取り専用引数だけを受け取ることを要求し、
2 の代わりに frame 引数同士（2 つ以上のとき）の不一致だけを検査する。1, 3, 4 は共通。
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from . import conventions, reporting
from .builders import UNSUPPORTED
from .catalog import MethodHandle
from .combinations import enumerate_mismatch_assignments
from .context import CheckContext
from .frames import reference_frame_of
from .types import HolderFactory, MethodFilter, accept_all

logger = logging.getLogger(__name__)


class _Skip(Exception):
    """引数を生成できず、このメソッドの検査を打ち切る。"""


class FrameInvariantChecker:
    def __init__(self, context: CheckContext) -> None:
        self._ctx = context

    # === 公開 API ===
    def assert_static_methods_check_reference_frame(
        self,
        owner: Any,
        method_filter: MethodFilter = accept_all,
        iterations: int = 1,
    ) -> None:
        """`owner` の static メソッド（frame 引数 2 つ以上）を検査する。"""
        registry = self._ctx.registry
        handles = [
            h
            for h in self._ctx.catalog.methods(owner, instance=False)
            if method_filter(h.signature) and registry.count_frame_types(h.parameter_types) >= 2
        ]
        logger.debug("static frame check on %s: %d methods", reporting.owner_name(owner), len(handles))
        for handle in handles:
            try:
                for _ in range(iterations):
                    frame_a, frame_b = self._ctx.next_frames()
                    self._run_passes(owner, handle, None, frame_a, frame_b)
            except _Skip:
                logger.debug("skip %s: cannot instantiate its parameters", handle.describe())

    def assert_methods_of_reference_frame_holder_check_reference_frame(
        self,
        holder_factory: HolderFactory,
        method_filter: MethodFilter = accept_all,
        iterations: int = 1,
    ) -> None:
        """holder 型のインスタンスメソッド（frame 引数 1 つ以上）を検査する。

        Parameters
        ----------
        holder_factory : HolderFactory
            `(rng, frame) -> holder`。holder の型が検査対象の型になる。
        """
        ctx = self._ctx
        registry = ctx.registry
        frame_type = type(holder_factory(ctx.rng, ctx.builder.world_frame))
        handles = [
            h
            for h in ctx.catalog.methods(frame_type, instance=True)
            if method_filter(h.signature) and registry.count_frame_types(h.parameter_types) >= 1
        ]
        logger.debug("holder frame check on %s: %d methods", frame_type.__name__, len(handles))
        for handle in handles:
            set_frame = conventions.is_matching_frame_method(handle.name) or conventions.is_including_frame_method(
                handle.name
            )
            if set_frame:
                self._require_read_only_parameters(handle)
            try:
                for _ in range(iterations):
                    frame_a, frame_b = ctx.next_frames()
                    self._run_passes(frame_type, handle, holder_factory, frame_a, frame_b, set_frame=set_frame)
            except _Skip:
                logger.debug("skip %s: cannot instantiate its parameters", handle.describe())

    # === パス ===
    def _run_passes(
        self,
        tested: Any,
        handle: MethodHandle,
        holder_factory: HolderFactory | None,
        frame_a: Any,
        frame_b: Any,
        *,
        set_frame: bool = False,
    ) -> None:
        self._same_frame_pass(handle, holder_factory, frame_a)
        if set_frame:
            self._set_frame_mismatch_pass(tested, handle, holder_factory, frame_a, frame_b)
        else:
            self._mismatch_pass(tested, handle, holder_factory, frame_a, frame_b)
        self._adoption_pass(handle, holder_factory, frame_a, frame_b)
        self._result_pass(handle, holder_factory, frame_a)

    def _same_frame_pass(self, handle: MethodHandle, holder_factory: HolderFactory | None, frame_a: Any) -> None:
        types = handle.parameter_types
        holder = self._new_holder(holder_factory, frame_a)
        self._invoke_tolerant(handle, holder, self._instantiate(types, [frame_a] * len(types)))

    def _mismatch_pass(
        self, tested: Any, handle: MethodHandle, holder_factory: HolderFactory | None, frame_a: Any, frame_b: Any
    ) -> None:
        """フレーム固定引数の不一致。holder があればレシーバが A に固定される。"""
        types = handle.parameter_types
        fixed = [i for i, t in enumerate(types) if self._ctx.registry.is_frame_fixed(t)]
        anchored = holder_factory is not None
        self._expect_mismatch_for_each(tested, handle, holder_factory, fixed, frame_a, frame_b, anchored)

    def _set_frame_mismatch_pass(
        self, tested: Any, handle: MethodHandle, holder_factory: HolderFactory | None, frame_a: Any, frame_b: Any
    ) -> None:
        """`*_matching_frame` / `*_including_frame` はレシーバのフレームと異なってよい。

        frame 引数が 2 つ以上ある場合だけ、引数同士の不一致を要求する。
        """
        types = handle.parameter_types
        frame_params = [i for i, t in enumerate(types) if self._ctx.registry.is_frame_type(t)]
        if len(frame_params) < 2:
            return
        self._expect_mismatch_for_each(tested, handle, holder_factory, frame_params, frame_a, frame_b, False)

    def _expect_mismatch_for_each(
        self,
        tested: Any,
        handle: MethodHandle,
        holder_factory: HolderFactory | None,
        indices: Sequence[int],
        frame_a: Any,
        frame_b: Any,
        anchored: bool,
    ) -> None:
        types = handle.parameter_types
        for assignment in enumerate_mismatch_assignments(len(indices), anchored_in_frame_a=anchored):
            frames = [frame_a] * len(types)
            for j, i in enumerate(indices):
                if assignment.in_frame_b(j):
                    frames[i] = frame_b
            args = self._instantiate(types, frames)
            self._expect_mismatch(tested, handle, self._new_holder(holder_factory, frame_a), args)

    def _adoption_pass(
        self, handle: MethodHandle, holder_factory: HolderFactory | None, frame_a: Any, frame_b: Any
    ) -> None:
        types = handle.parameter_types
        mutable = [i for i, t in enumerate(types) if self._ctx.registry.is_mutable_frame_mutable_type(t)]
        if not mutable:
            return
        frames = [frame_b if i in mutable else frame_a for i in range(len(types))]
        args = self._instantiate(types, frames)
        completed, _ = self._invoke_tolerant(handle, self._new_holder(holder_factory, frame_a), args)
        if completed:
            for i in mutable:
                if reference_frame_of(args[i]) is not frame_a:
                    reporting.fail_to_change_parameter_frame(handle, i, args)

    def _result_pass(self, handle: MethodHandle, holder_factory: HolderFactory | None, frame_a: Any) -> None:
        if not self._ctx.registry.is_frame_type(handle.return_type):
            return
        types = handle.parameter_types
        args = self._instantiate(types, [frame_a] * len(types))
        completed, result = self._invoke_tolerant(handle, self._new_holder(holder_factory, frame_a), args)
        if completed and any(frame is not frame_a for frame in self._result_frames(result)):
            reporting.fail_to_set_result_frame(handle, args, result)

    def _require_read_only_parameters(self, handle: MethodHandle) -> None:
        registry = self._ctx.registry
        for i, t in enumerate(handle.parameter_types):
            if registry.is_frame_type(t) and not registry.is_read_only_frame_type(t):
                reporting.report_non_read_only_parameter(handle, i)

    # === 補助 ===
    def _new_holder(self, holder_factory: HolderFactory | None, frame: Any) -> Any:
        if holder_factory is None:
            return None
        return holder_factory(self._ctx.rng, frame)

    def _instantiate(self, types: Sequence[Any], frames: Sequence[Any]) -> tuple[Any, ...]:
        out: list[Any] = []
        for t, frame in zip(types, frames):
            value = self._ctx.builder.next(self._ctx.rng, frame, t)
            if value is UNSUPPORTED:
                raise _Skip()
            out.append(value[0])
        return tuple(out)

    def _invoke_tolerant(self, handle: MethodHandle, receiver: Any, args: Sequence[Any]) -> tuple[bool, Any]:
        """呼び出し、無視リストの例外なら (False, None) を返す。それ以外の例外は再送出。"""
        try:
            return True, self._ctx.catalog.invoke(handle, receiver, args)
        except Exception as exc:
            if self._ctx.registry.is_exception_to_be_ignored(exc):
                return False, None
            logger.error(
                "Problem when evaluating the method: %s (arguments: %s)",
                handle.describe(),
                reporting.argument_type_string(args),
            )
            raise

    def _expect_mismatch(self, tested: Any, handle: MethodHandle, receiver: Any, args: Sequence[Any]) -> None:
        mismatch_error = self._ctx.require_mismatch_error()
        try:
            self._ctx.catalog.invoke(handle, receiver, args)
        except mismatch_error:
            return
        except Exception as exc:
            if self._ctx.registry.is_exception_to_be_ignored(exc):
                return
            reporting.fail_to_throw_mismatch(tested, handle, args, mismatch_error, exc)
        reporting.fail_to_throw_mismatch(tested, handle, args, mismatch_error)

    @staticmethod
    def _result_frames(result: Any) -> Iterable[Any]:
        if result is None:
            return []
        if isinstance(result, (list, tuple)):
            return [reference_frame_of(item) for item in result if item is not None]
        return [reference_frame_of(result)]


__all__ = ["FrameInvariantChecker"]
