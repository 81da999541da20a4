"""
どこで: `framecheck.overloading`
何を: frameless 型のメソッドごとに、frame 型が frame 引数版のオーバーロードと
      `set_matching_frame` 版のセッタを宣言しているかを検査する。
なぜ: frameless API を frame 付きで使えない「穴」を機械的に見つけるため。
"""

from __future__ import annotations

import logging
from typing import Any

from . import reporting
from .catalog import MethodHandle
from .context import CheckContext
from .conventions import SET, SET_MATCHING_FRAME
from .signature import MethodSignature
from .types import MethodFilter, accept_all

logger = logging.getLogger(__name__)

_NONE_TYPE = type(None)


class OverloadCompletenessChecker:
    def __init__(self, context: CheckContext) -> None:
        self._ctx = context

    def expected_signatures(self, original: MethodSignature, all_combinations: bool) -> list[MethodSignature]:
        """frame 版として期待されるシグネチャを導出する。

        Parameters
        ----------
        original : MethodSignature
            frameless 側のシグネチャ。
        all_combinations : bool
            False なら対応付け可能な引数をすべて frame 型に置換した 1 つ。
            True なら対応付け可能な k 個の引数について 2**k - 1 通り（元のシグネチャを除く）。
        """
        registry = self._ctx.registry
        mappable = [
            i
            for i, t in enumerate(original.parameter_types)
            if registry.is_frameless_type_with_frame_equivalent(t)
        ]
        frame_types = {i: registry.find_corresponding_frame_type(original.parameter_types[i]) for i in mappable}

        if not all_combinations:
            expected = original
            for i in mappable:
                expected = expected.with_parameter_replaced(i, frame_types[i])
            return [expected]

        out: list[MethodSignature] = []
        for mask in range(1, 1 << len(mappable)):
            expected = original
            for bit, i in enumerate(mappable):
                if mask >> bit & 1:
                    expected = expected.with_parameter_replaced(i, frame_types[i])
            out.append(expected)
        return out

    def assert_overloading_with_frame_objects(
        self,
        frame_owner: Any,
        frameless_owner: Any,
        assert_all_combinations: bool,
        min_frameless_parameters: int = 1,
        method_filter: MethodFilter = accept_all,
    ) -> None:
        """frameless 側の各メソッドに対応する frame 引数版が frame 側にあることを検査する。

        static とインスタンスメソッドの別も元のメソッドと一致すること。

        Raises
        ------
        FrameAPIAssertionError
            期待するオーバーロードが無い、または戻り値型が規約に反する場合。
        """
        catalog = self._ctx.catalog
        registry = self._ctx.registry
        logger.debug(
            "overloading check: %s -> %s (all combinations: %s)",
            reporting.owner_name(frameless_owner),
            reporting.owner_name(frame_owner),
            assert_all_combinations,
        )
        for original in catalog.methods(frameless_owner):
            signature = original.signature
            if not method_filter(signature):
                continue
            if registry.count_frameless_types(signature.parameter_types) < min_frameless_parameters:
                continue
            for expected in self.expected_signatures(signature, assert_all_combinations):
                overloading = catalog.find_method(frame_owner, expected)
                if overloading is None or overloading.is_static is not original.is_static:
                    reporting.report_missing_overload(frameless_owner, signature, frame_owner, expected)
                self.check_return_type(original, overloading)

    def assert_api_declare_matching_frame_setters(
        self,
        frame_owner: Any,
        frameless_owner: Any,
        min_frameless_parameters: int = 1,
        method_filter: MethodFilter = accept_all,
    ) -> None:
        """frameless 側の各 `set(...)` に対し、frame 側に 2 つの `set_matching_frame` があることを検査する。

        - `set_matching_frame(ReferenceFrame, <元の引数>...)`
        - `set_matching_frame(<frame 型に置換した引数>...)`
        """
        reference_frame_type = self._ctx.registry.reference_frame_type
        if reference_frame_type is None:
            raise RuntimeError("the reference frame type is not registered")
        catalog = self._ctx.catalog
        registry = self._ctx.registry
        for original in catalog.methods(frameless_owner):
            signature = original.signature
            if signature.name != SET or not method_filter(signature):
                continue
            if registry.count_frameless_types(signature.parameter_types) < min_frameless_parameters:
                continue
            with_frame = signature.with_name_replaced(SET_MATCHING_FRAME).with_parameter_inserted(
                0, reference_frame_type
            )
            frame_args = self.expected_signatures(signature, False)[0].with_name_replaced(SET_MATCHING_FRAME)
            for expected in (with_frame, frame_args):
                setter = catalog.find_method(frame_owner, expected)
                if setter is None or setter.is_static is not original.is_static:
                    reporting.report_missing_matching_frame_setter(
                        frameless_owner, signature, frame_owner, expected
                    )
                self.check_return_type(original, setter)

    def check_return_type(self, original: MethodHandle, overloading: MethodHandle) -> None:
        """戻り値型の規約: 同一か、frame 版か、frame 版より狭い型であること。"""
        original_type = original.return_type
        overloading_type = overloading.return_type
        if original_type is None or overloading_type is None:
            # 注釈なしは検査しない
            return
        if (original_type is _NONE_TYPE) != (overloading_type is _NONE_TYPE):
            reporting.report_return_type_inconsistency(original, overloading)
        expected_type = self._ctx.registry.to_frame_type_if_possible(original_type)
        if overloading_type == original_type or overloading_type == expected_type:
            return
        if (
            isinstance(overloading_type, type)
            and isinstance(expected_type, type)
            and issubclass(expected_type, overloading_type)
        ):
            reporting.report_unexpected_return_type(original, overloading, expected_type)


__all__ = ["OverloadCompletenessChecker"]
