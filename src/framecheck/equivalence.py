"""
どこで: `framecheck.equivalence`
何を: frame 版メソッドと frameless 版（または `set` + フレーム変換の参照手順）を
      同じ乱数入力で実行し、例外・引数・戻り値・レシーバが一致することを検査する。
なぜ: frame 付き API が frameless の計算に余計な変換や符号誤りを混ぜていないことを、
      数値的な差分として検出するため。

1 反復の流れ:
1. 候補（frame 版）の引数をワールドフレーム（set 系はフレーム A）で生成する。
   生成できなければそのメソッドは検査しない。
2. 参照側の引数として複製する。複製できなければ反復をやり直し、
   連続失敗が上限を超えたら失敗を報告する。
3. 参照 -> 候補の順に実行し、例外の種類（両方向）、引数、戻り値、レシーバを比べる。
   同じ種類の例外を両方が送出した反復は一致とみなす。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from . import reporting
from .builders import UNSUPPORTED
from .catalog import MethodHandle
from .context import CheckContext
from .conventions import SET, SET_INCLUDING_FRAME, SET_MATCHING_FRAME
from .frames import FrameChangeable, TransformProvider, Transformable, is_frame_holder
from .signature import MethodSignature
from .types import FrameCopier, FramelessBuilder, HolderFactory, MethodFilter, accept_all

logger = logging.getLogger(__name__)

_NO_RECEIVER = object()


@dataclass
class _Outcome:
    returned: Any = None
    error: Exception | None = None


def _capture(action: Callable[[], Any]) -> _Outcome:
    try:
        return _Outcome(returned=action())
    except Exception as exc:
        return _Outcome(error=exc)


class _RecipeUnavailable(Exception):
    """参照側の手順を組み立てられない（そのメソッドは検査しない）。"""


def _transform_between(frame: Any, desired_frame: Any) -> Any:
    if not isinstance(frame, TransformProvider):
        raise _RecipeUnavailable(f"{type(frame).__name__} does not provide transforms between frames")
    return frame.transform_to_desired_frame(desired_frame)


class _RetryBudget:
    """引数複製の連続失敗回数を数え、上限を超えたら失敗を報告する。"""

    def __init__(self, limit: int, method: MethodHandle) -> None:
        self.limit = limit
        self.method = method
        self.failures = 0

    def record_failure(self) -> None:
        self.failures += 1
        logger.warning(
            "could not clone the arguments of %s (attempt %d, limit %d)",
            self.method.describe(),
            self.failures,
            self.limit,
        )
        if self.failures > self.limit:
            reporting.fail_retries_exhausted(self.method, self.failures)

    def reset(self) -> None:
        self.failures = 0


class EquivalenceChecker:
    def __init__(self, context: CheckContext) -> None:
        self._ctx = context

    # === static メソッド ===
    def assert_static_methods_preserve_functionality(
        self,
        frame_owner: Any,
        frameless_owner: Any,
        method_filter: MethodFilter = accept_all,
        iterations: int = 1,
    ) -> None:
        """frame 側 static メソッドを、引数型を frameless に戻した static メソッドと比べる。"""
        ctx = self._ctx
        for frame_method in ctx.catalog.methods(frame_owner, instance=False):
            if not method_filter(frame_method.signature):
                continue
            frameless_method = self._find_frameless_counterpart(frameless_owner, frame_method, static=True)
            if frameless_method is None:
                continue
            self._run_differential(frame_method, frameless_method, iterations, ctx.epsilon, None)

    # === holder のインスタンスメソッド ===
    def assert_frame_methods_of_frame_holder_preserve_functionality(
        self,
        frame_copier: FrameCopier,
        frameless_builder: FramelessBuilder,
        method_filter: MethodFilter = accept_all,
        iterations: int = 1,
        epsilon: float | None = None,
    ) -> None:
        """holder のメソッドを、frameless 値から作った同値の frameless オブジェクトのメソッドと比べる。

        Parameters
        ----------
        frame_copier : FrameCopier
            `(frame, frameless_obj) -> frame_obj`。値を共有しない複製を返すこと。
        frameless_builder : FramelessBuilder
            `rng -> frameless_obj`。
        epsilon : float | None
            比較の許容誤差（省略時は設定値）。
        """
        ctx = self._ctx
        world = ctx.builder.world_frame
        frameless_type = type(frameless_builder(ctx.rng))
        frame_type = type(frame_copier(world, frameless_builder(ctx.rng)))
        eps = ctx.epsilon if epsilon is None else epsilon

        def make_receivers() -> tuple[Any, Any]:
            frameless_obj = frameless_builder(ctx.rng)
            return frame_copier(world, frameless_obj), frameless_obj

        for frame_method in ctx.catalog.methods(frame_type, instance=True):
            if not method_filter(frame_method.signature):
                continue
            frameless_method = self._find_frameless_counterpart(frameless_type, frame_method, static=False)
            if frameless_method is None:
                continue
            self._run_differential(frame_method, frameless_method, iterations, eps, make_receivers)

    def _find_frameless_counterpart(
        self, frameless_owner: Any, frame_method: MethodHandle, *, static: bool
    ) -> MethodHandle | None:
        registry = self._ctx.registry
        frameless_signature = MethodSignature(
            frame_method.name,
            tuple(registry.to_frameless_type_if_possible(t) for t in frame_method.parameter_types),
        )
        frameless_method = self._ctx.catalog.find_method(frameless_owner, frameless_signature)
        if frameless_method is None or frameless_method.is_static is not static:
            logger.debug(
                "%s has no counterpart %s in %s; not tested",
                frame_method.describe(),
                frameless_signature.simple_name(),
                reporting.owner_name(frameless_owner),
            )
            return None
        return frameless_method

    def _run_differential(
        self,
        frame_method: MethodHandle,
        frameless_method: MethodHandle,
        iterations: int,
        epsilon: float,
        make_receivers: Callable[[], tuple[Any, Any]] | None,
    ) -> None:
        ctx = self._ctx
        world = ctx.builder.world_frame
        budget = _RetryBudget(ctx.max_clone_retries, frame_method)
        iteration = 0
        while iteration < iterations:
            frame_args = ctx.builder.next(ctx.rng, world, *frame_method.parameter_types)
            if frame_args is UNSUPPORTED:
                logger.debug("%s is not tested: cannot instantiate its parameters", frame_method.describe())
                return
            frameless_args = ctx.builder.clone(*frame_args)
            if frameless_args is UNSUPPORTED:
                budget.record_failure()
                continue
            budget.reset()

            if make_receivers is None:
                frame_obj: Any = _NO_RECEIVER
                frameless_obj: Any = _NO_RECEIVER
            else:
                frame_obj, frameless_obj = make_receivers()

            frameless_outcome = _capture(
                lambda: ctx.catalog.invoke(frameless_method, frameless_obj, frameless_args)
            )
            frame_outcome = _capture(lambda: ctx.catalog.invoke(frame_method, frame_obj, frame_args))
            self._assert_same_outcome(
                frame_method,
                frameless_method,
                frame_outcome,
                frameless_outcome,
                frame_args,
                frameless_args,
                frame_obj,
                frameless_obj,
                epsilon,
            )
            iteration += 1

    # === set_matching_frame / set_including_frame ===
    def assert_set_matching_frame_preserve_functionality(
        self,
        holder_factory: HolderFactory,
        method_filter: MethodFilter = accept_all,
        iterations: int = 1,
    ) -> None:
        """`set_matching_frame(...)` を「フレーム A で `set(...)` してから受け手のフレームへ変換」と比べる。"""
        self._assert_set_frame_preserve(holder_factory, method_filter, iterations, including=False)

    def assert_set_including_frame_preserve_functionality(
        self,
        holder_factory: HolderFactory,
        method_filter: MethodFilter = accept_all,
        iterations: int = 1,
    ) -> None:
        """`set_including_frame(...)` を「フレーム A のオブジェクトに `set(...)`」と比べる。"""
        self._assert_set_frame_preserve(holder_factory, method_filter, iterations, including=True)

    def _assert_set_frame_preserve(
        self,
        holder_factory: HolderFactory,
        method_filter: MethodFilter,
        iterations: int,
        *,
        including: bool,
    ) -> None:
        ctx = self._ctx
        frame_type = type(holder_factory(ctx.rng, ctx.builder.world_frame))
        name = SET_INCLUDING_FRAME if including else SET_MATCHING_FRAME
        for method in ctx.catalog.find_methods_named(frame_type, name):
            if method.is_static or not method_filter(method.signature):
                continue
            self._check_set_frame_method(frame_type, holder_factory, method, iterations, including)

    def _check_set_frame_method(
        self,
        frame_type: type,
        holder_factory: HolderFactory,
        method: MethodHandle,
        iterations: int,
        including: bool,
    ) -> None:
        ctx = self._ctx
        registry = ctx.registry
        types = method.parameter_types
        leading_frame = bool(types) and types[0] is registry.reference_frame_type
        # 2D の set_matching_frame(..., check_if_transform_in_xy_plane: bool)
        xy_plane_flag = not including and registry.is_2d_type(frame_type) and bool(types) and types[-1] is bool
        setter_signature = method.signature.with_name_replaced(SET)
        if xy_plane_flag:
            setter_signature = setter_signature.with_parameter_removed(len(types) - 1)
        if leading_frame:
            setter_signature = setter_signature.with_parameter_removed(0)
        setter = ctx.catalog.find_method(frame_type, setter_signature)
        if setter is None or setter.is_static:
            reporting.report_missing_frameless_setter(frame_type, method, setter_signature)

        budget = _RetryBudget(ctx.max_clone_retries, method)
        iteration = 0
        while iteration < iterations:
            frame_a, frame_b = ctx.next_frames()
            completed = True
            # 受け手がフレーム B（不一致）と A（一致）の両方
            for receiver_frame in (frame_b, frame_a):
                args = ctx.builder.next(ctx.rng, frame_a, *types)
                if args is UNSUPPORTED:
                    logger.debug("%s is not tested: cannot instantiate its parameters", method.describe())
                    return
                setter_args = ctx.builder.clone(*args)
                if setter_args is UNSUPPORTED:
                    completed = False
                    break
                args = list(args)
                setter_args = list(setter_args)
                if leading_frame:
                    args[0] = frame_a
                    setter_args = setter_args[1:]
                if xy_plane_flag:
                    setter_args = setter_args[:-1]

                try:
                    if including:
                        reference = holder_factory(ctx.rng, frame_a)
                        reference_outcome = _capture(lambda: ctx.catalog.invoke(setter, reference, setter_args))
                    else:
                        prepared = self._matching_frame_reference(
                            frame_type,
                            holder_factory,
                            setter,
                            setter_args,
                            frame_a,
                            receiver_frame,
                            args[-1] if xy_plane_flag else None,
                        )
                        if prepared is None:
                            completed = False
                            break
                        reference, reference_outcome = prepared
                except _RecipeUnavailable as exc:
                    logger.debug("%s is not tested: %s", method.describe(), exc)
                    return

                candidate = holder_factory(ctx.rng, receiver_frame)
                candidate_outcome = _capture(lambda: ctx.catalog.invoke(method, candidate, args))
                self._assert_same_outcome(
                    method,
                    setter,
                    candidate_outcome,
                    reference_outcome,
                    args[1:] if leading_frame else args,
                    setter_args,
                    candidate,
                    reference,
                    ctx.epsilon,
                )
            if not completed:
                budget.record_failure()
                continue
            budget.reset()
            iteration += 1

    def _matching_frame_reference(
        self,
        frame_type: type,
        holder_factory: HolderFactory,
        setter: MethodHandle,
        setter_args: Sequence[Any],
        frame_a: Any,
        receiver_frame: Any,
        check_if_transform_in_xy_plane: bool | None,
    ) -> tuple[Any, _Outcome] | None:
        """参照側の手順を実行し (参照オブジェクト, 結果) を返す。複製できなければ None。

        - xy 平面フラグ付き（2D）: フレーム A のオブジェクトに `set` し、A から受け手のフレームへの
          変換をフラグ付きで `apply_transform` してから、参照フレームを受け手のフレームに付け替える。
        - 2D の受け手に 3D の frame 引数だけを渡す場合、または受け手がフレームを変えられない場合:
          引数の複製を受け手のフレームで表し、受け手のフレームで作ったオブジェクトに `set` する。
        - それ以外: フレーム A のオブジェクトに `set` し、受け手のフレームへ `change_frame` する。

        Raises
        ------
        _RecipeUnavailable
            いずれの手順も組み立てられない場合。
        """
        ctx = self._ctx
        registry = ctx.registry
        reference = holder_factory(ctx.rng, frame_a)

        if check_if_transform_in_xy_plane is not None:
            if not (isinstance(reference, FrameChangeable) and isinstance(reference, Transformable)):
                raise _RecipeUnavailable(f"{frame_type.__name__} can neither be transformed nor change frame")
            transform = _transform_between(frame_a, receiver_frame)

            def set_then_transform() -> Any:
                returned = ctx.catalog.invoke(setter, reference, setter_args)
                reference.apply_transform(transform, check_if_transform_in_xy_plane)  # type: ignore[call-arg]
                reference.set_reference_frame(receiver_frame)
                return returned

            return reference, _capture(set_then_transform)

        arguments_only = (
            registry.is_2d_type(frame_type)
            and bool(setter_args)
            and all(registry.is_3d_type(type(arg)) for arg in setter_args)
        )
        if not arguments_only and isinstance(reference, FrameChangeable):

            def set_then_change_frame() -> Any:
                returned = ctx.catalog.invoke(setter, reference, setter_args)
                reference.change_frame(receiver_frame)
                return returned

            return reference, _capture(set_then_change_frame)

        local_args = self._express_in_frame(setter_args, frame_a, receiver_frame)
        if local_args is None:
            return None
        reference = holder_factory(ctx.rng, receiver_frame)
        return reference, _capture(lambda: ctx.catalog.invoke(setter, reference, local_args))

    def _express_in_frame(self, values: Sequence[Any], frame: Any, desired_frame: Any) -> list[Any] | None:
        """`frame` で表された値の複製を `desired_frame` で表し直す（複製できなければ None）。"""
        copies = self._ctx.builder.clone(*values)
        if copies is UNSUPPORTED:
            return None
        out = list(copies)
        for value in out:
            if isinstance(value, FrameChangeable):
                value.change_frame(desired_frame)
            elif not is_frame_holder(value) and isinstance(value, Transformable):
                value.apply_transform(_transform_between(frame, desired_frame))
            else:
                raise _RecipeUnavailable(f"cannot express {type(value).__name__} in another frame")
        return out

    # === 比較 ===
    def _assert_same_outcome(
        self,
        method: MethodHandle,
        original: MethodHandle,
        outcome: _Outcome,
        original_outcome: _Outcome,
        args: Sequence[Any],
        original_args: Sequence[Any],
        receiver: Any,
        original_receiver: Any,
        epsilon: float,
    ) -> None:
        if outcome.error is not None or original_outcome.error is not None:
            if (
                outcome.error is None
                or original_outcome.error is None
                or type(outcome.error) is not type(original_outcome.error)
            ):
                reporting.report_inconsistent_exception(method, original, original_outcome.error, outcome.error)
            return

        comparer = self._ctx.comparer
        for i, (expected, actual) in enumerate(zip(original_args, args)):
            if not comparer.epsilon_equals(expected, actual, epsilon):
                reporting.report_inconsistent_arguments(method, original, args, original_args, i)
        if not comparer.epsilon_equals(original_outcome.returned, outcome.returned, epsilon):
            reporting.report_inconsistent_return(method, original, outcome.returned, original_outcome.returned, args)
        if receiver is not _NO_RECEIVER and not comparer.epsilon_equals(original_receiver, receiver, epsilon):
            reporting.report_inconsistent_object(method, original, receiver, original_receiver, args)


__all__ = ["EquivalenceChecker"]
