"""
どこで: `framecheck.tester`
何を: 型登録と 8 つの検査エントリポイントをまとめた公開ファサード。
なぜ: テストコードからは 1 オブジェクトの設定と `assert_*` 呼び出しだけで
      オーバーロード網羅性・フレーム不変条件・等価性を検査できるようにするため。

乱数生成器はテスタごとに 1 つ（`numpy.random.default_rng(seed)`）。シードの既定値は
`common.settings` の `RANDOM_SEED`。最初の検査呼び出しでレジストリを凍結する。
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np

from common import settings

from .builders import ReflectionBasedBuilder
from .catalog import MethodCatalog
from .comparer import ReflectionBasedComparer, StructuralComparer
from .configuration import FrameAPIConfiguration
from .context import CheckContext
from .equivalence import EquivalenceChecker
from .frame_checks import FrameInvariantChecker
from .overloading import OverloadCompletenessChecker
from .registry import TypeRegistry
from .types import FrameCopier, FramelessBuilder, HolderFactory, MethodFilter, accept_all

logger = logging.getLogger(__name__)


class FrameAPITester:
    """frame/frameless API の適合性と差分を検査する。

    Parameters
    ----------
    configuration : FrameAPIConfiguration | None
        型登録・生成器の設定。`configure(self, builder)` が初期化時に呼ばれる。
    registry, builder, comparer :
        既定実装の差し替え。
    mismatch_error : type[BaseException] | None
        参照フレーム不一致を表す例外型（設定側で代入してもよい）。
    seed : int | None
        乱数シード（省略時は設定値）。
    """

    def __init__(
        self,
        configuration: FrameAPIConfiguration | None = None,
        *,
        registry: TypeRegistry | None = None,
        builder: ReflectionBasedBuilder | None = None,
        comparer: StructuralComparer | None = None,
        mismatch_error: type[BaseException] | None = None,
        seed: int | None = None,
    ) -> None:
        s = settings.get()
        self.registry = registry if registry is not None else TypeRegistry()
        self.builder = builder if builder is not None else ReflectionBasedBuilder()
        self.comparer = comparer if comparer is not None else ReflectionBasedComparer()
        self.mismatch_error = mismatch_error
        self.random = np.random.default_rng(s.RANDOM_SEED if seed is None else seed)
        self.epsilon = s.EPSILON
        self.max_clone_retries = s.MAX_CLONE_RETRIES
        self.default_iterations = s.DEFAULT_ITERATIONS
        self.catalog = MethodCatalog()
        self._context: CheckContext | None = None
        if configuration is not None:
            configuration.configure(self, self.builder)

    # === 登録（レジストリへの委譲） ===
    def register_reference_frame_type(self, reference_frame_type: type) -> None:
        self.registry.register_reference_frame_type(reference_frame_type)

    def register_frame_type(
        self,
        mutable_frame_mutable: type | None,
        fixed_frame_mutable: type | None,
        frame_read_only: type,
        frameless_mutable: type,
        frameless_read_only: type,
    ) -> None:
        self.registry.register_frame_type(
            mutable_frame_mutable, fixed_frame_mutable, frame_read_only, frameless_mutable, frameless_read_only
        )

    def register_frame_type_smart(self, mutable_frame_mutable: type) -> None:
        self.registry.register_frame_type_smart(mutable_frame_mutable)

    def register_frame_types_smart(self, *mutable_frame_mutable_types: type) -> None:
        self.registry.register_frame_types_smart(*mutable_frame_mutable_types)

    def register_read_only_frame_type_smart(self, *frame_read_only_types: type) -> None:
        self.registry.register_read_only_frame_type_smart(*frame_read_only_types)

    def register_frameless_type(self, frameless_mutable: type, frameless_read_only: type) -> None:
        self.registry.register_frameless_type(frameless_mutable, frameless_read_only)

    def register_frameless_type_smart(self, *frameless_mutable_types: type) -> None:
        self.registry.register_frameless_type_smart(*frameless_mutable_types)

    def register_frameless_read_only_type(self, *frameless_read_only_types: type) -> None:
        self.registry.register_frameless_read_only_type(*frameless_read_only_types)

    def register_exceptions_to_ignore(self, *exception_types: type[BaseException]) -> None:
        self.registry.register_exceptions_to_ignore(*exception_types)

    def get_reflection_based_builder(self) -> ReflectionBasedBuilder:
        return self.builder

    # === 内部 ===
    def _ctx(self) -> CheckContext:
        if self._context is None:
            self.registry.freeze()
            logger.debug(
                "frame API checks start: epsilon=%g, max clone retries=%d, iterations=%d",
                self.epsilon,
                self.max_clone_retries,
                self.default_iterations,
            )
            self._context = CheckContext(
                registry=self.registry,
                builder=self.builder,
                comparer=self.comparer,
                rng=self.random,
                catalog=self.catalog,
                mismatch_error=self.mismatch_error,
                epsilon=self.epsilon,
                max_clone_retries=self.max_clone_retries,
            )
        # 設定後に代入された例外型も反映する
        self._context.mismatch_error = self.mismatch_error
        return self._context

    def _iterations(self, iterations: int | None) -> int:
        n = self.default_iterations if iterations is None else iterations
        if n < 0:
            raise ValueError("iterations must be >= 0")
        return n

    # === オーバーロード網羅性 ===
    def assert_overloading_with_frame_objects(
        self,
        frame_type: Any,
        frameless_type: Any,
        assert_all_combinations: bool,
        min_frameless_parameters: int = 1,
        method_filter: MethodFilter = accept_all,
    ) -> None:
        OverloadCompletenessChecker(self._ctx()).assert_overloading_with_frame_objects(
            frame_type, frameless_type, assert_all_combinations, min_frameless_parameters, method_filter
        )

    def assert_api_declare_matching_frame_setters(
        self,
        frame_type: Any,
        frameless_type: Any,
        min_frameless_parameters: int = 1,
        method_filter: MethodFilter = accept_all,
    ) -> None:
        OverloadCompletenessChecker(self._ctx()).assert_api_declare_matching_frame_setters(
            frame_type, frameless_type, min_frameless_parameters, method_filter
        )

    # === フレーム不変条件 ===
    def assert_static_methods_check_reference_frame(
        self,
        type_declaring_static_methods: Any,
        method_filter: MethodFilter = accept_all,
        iterations: int | None = None,
    ) -> None:
        FrameInvariantChecker(self._ctx()).assert_static_methods_check_reference_frame(
            type_declaring_static_methods, method_filter, self._iterations(iterations)
        )

    def assert_methods_of_reference_frame_holder_check_reference_frame(
        self,
        holder_factory: HolderFactory,
        method_filter: MethodFilter = accept_all,
        iterations: int | None = None,
    ) -> None:
        FrameInvariantChecker(self._ctx()).assert_methods_of_reference_frame_holder_check_reference_frame(
            holder_factory, method_filter, self._iterations(iterations)
        )

    # === 等価性 ===
    def assert_static_methods_preserve_functionality(
        self,
        frame_owner: Any,
        frameless_owner: Any,
        method_filter: MethodFilter = accept_all,
        iterations: int | None = None,
    ) -> None:
        EquivalenceChecker(self._ctx()).assert_static_methods_preserve_functionality(
            frame_owner, frameless_owner, method_filter, self._iterations(iterations)
        )

    def assert_frame_methods_of_frame_holder_preserve_functionality(
        self,
        frame_copier: FrameCopier,
        frameless_builder: FramelessBuilder,
        method_filter: MethodFilter = accept_all,
        iterations: int | None = None,
        epsilon: float | None = None,
    ) -> None:
        EquivalenceChecker(self._ctx()).assert_frame_methods_of_frame_holder_preserve_functionality(
            frame_copier, frameless_builder, method_filter, self._iterations(iterations), epsilon
        )

    def assert_set_matching_frame_preserve_functionality(
        self,
        holder_factory: HolderFactory,
        method_filter: MethodFilter = accept_all,
        iterations: int | None = None,
    ) -> None:
        EquivalenceChecker(self._ctx()).assert_set_matching_frame_preserve_functionality(
            holder_factory, method_filter, self._iterations(iterations)
        )

    def assert_set_including_frame_preserve_functionality(
        self,
        holder_factory: HolderFactory,
        method_filter: MethodFilter = accept_all,
        iterations: int | None = None,
    ) -> None:
        EquivalenceChecker(self._ctx()).assert_set_including_frame_preserve_functionality(
            holder_factory, method_filter, self._iterations(iterations)
        )


__all__ = ["FrameAPITester"]
