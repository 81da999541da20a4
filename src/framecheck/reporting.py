"""
どこで: `framecheck.reporting`
何を: 失敗種別ごとの診断メッセージを組み立て、`FrameAPIAssertionError` を送出する。
なぜ: どのチェッカから失敗しても、両シグネチャ・宣言元・引数値・引数型が揃った
      同じ書式のメッセージで報告するため。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NoReturn, Sequence

from .conventions import SET_MATCHING_FRAME, simple_name
from .errors import FrameAPIAssertionError
from .signature import MethodSignature

if TYPE_CHECKING:  # pragma: no cover
    from .catalog import MethodHandle


def owner_name(owner: Any) -> str:
    return getattr(owner, "__name__", repr(owner))


def describe(method: "MethodHandle | MethodSignature | str") -> str:
    if isinstance(method, str):
        return method
    if isinstance(method, MethodSignature):
        return method.simple_name()
    return method.describe()


def argument_type_string(args: Sequence[Any]) -> str:
    """引数の実行時型名をカンマ区切りで返す。"""
    return ", ".join(type(arg).__name__ for arg in args)


def argument_string(args: Sequence[Any]) -> str:
    return ", ".join(repr(arg) for arg in args)


def ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def _exception_name(exc: BaseException | None) -> str:
    return "none" if exc is None else type(exc).__name__


# === オーバーロード網羅性 ===
def report_missing_overload(
    original_owner: Any,
    original: MethodSignature,
    overloading_owner: Any,
    expected: MethodSignature,
) -> NoReturn:
    raise FrameAPIAssertionError(
        f"The original method in {owner_name(original_owner)}:\n{original.simple_name()}\n"
        f"is not properly overloaded, expected to find in {owner_name(overloading_owner)}:\n"
        f"{expected.simple_name()}"
    )


def report_return_type_inconsistency(original: "MethodHandle", overloading: "MethodHandle") -> NoReturn:
    raise FrameAPIAssertionError(
        "Inconsistency found in the return type.\n"
        f"Original method: {original.describe()}\n"
        f"Overloading method: {overloading.describe()}\n"
        f"Original type: {simple_name(original.return_type)}\n"
        f"Overloading type: {simple_name(overloading.return_type)}"
    )


def report_unexpected_return_type(
    original: "MethodHandle", overloading: "MethodHandle", expected_type: Any
) -> NoReturn:
    raise FrameAPIAssertionError(
        f"Unexpected return type: expected: {simple_name(expected_type)}, "
        f"actual: {simple_name(overloading.return_type)}\n"
        f"Original method: {original.describe()}\n"
        f"Overloading method: {overloading.describe()}"
    )


def report_missing_matching_frame_setter(
    frameless_owner: Any, setter: MethodSignature, frame_owner: Any, expected: MethodSignature
) -> NoReturn:
    raise FrameAPIAssertionError(
        f"Could not find {SET_MATCHING_FRAME} corresponding to the original setter in "
        f"{owner_name(frameless_owner)}:\n{setter.simple_name()}\n"
        f"expected to find in {owner_name(frame_owner)}:\n{expected.simple_name()}"
    )


def report_missing_frameless_setter(frame_type: Any, method: "MethodHandle", expected: MethodSignature) -> NoReturn:
    raise FrameAPIAssertionError(
        f"Could not find the frameless setter that corresponds to {method.describe()}\n"
        f"expected to find in {owner_name(frame_type)}:\n{expected.simple_name()}"
    )


# === 参照フレーム不変条件 ===
def report_non_read_only_parameter(method: "MethodHandle", index: int) -> NoReturn:
    raise FrameAPIAssertionError(
        f"{method.describe()} is expected to only request read-only parameters.\n"
        f"In {owner_name(method.owner)} the {ordinal(index + 1)} parameter is not a read-only: "
        f"{simple_name(method.parameter_types[index])}"
    )


def fail_to_throw_mismatch(
    tested_type: Any,
    method: "MethodHandle",
    args: Sequence[Any],
    mismatch_error: type[BaseException],
    actual: BaseException | None = None,
) -> NoReturn:
    message = (
        f"Should have thrown a {mismatch_error.__name__}\n"
        f"Type being tested: {owner_name(tested_type)}\n"
        f"Method: {method.describe()}\n"
        f"Arguments used: {argument_string(args)}\n"
        f"Argument types: {argument_type_string(args)}"
    )
    if actual is not None:
        message += f"\nThrown instead: {type(actual).__name__}: {actual}"
    raise FrameAPIAssertionError(message) from actual


def fail_to_change_parameter_frame(method: "MethodHandle", index: int, args: Sequence[Any]) -> NoReturn:
    raise FrameAPIAssertionError(
        f"{method.describe()} did not change the frame of the {ordinal(index + 1)} parameter.\n"
        f"Arguments used: {argument_string(args)}\n"
        f"Argument types: {argument_type_string(args)}"
    )


def fail_to_set_result_frame(method: "MethodHandle", args: Sequence[Any], result: Any) -> NoReturn:
    raise FrameAPIAssertionError(
        f"{method.describe()} did not set the frame of the result.\n"
        f"Result: {result!r}\n"
        f"Arguments used: {argument_string(args)}\n"
        f"Argument types: {argument_type_string(args)}"
    )


# === 等価性 ===
def report_inconsistent_exception(
    method: "MethodHandle | str",
    original: "MethodHandle | str",
    expected: BaseException | None,
    actual: BaseException | None,
) -> NoReturn:
    raise FrameAPIAssertionError(
        f"The method: {describe(method)}\n"
        f"did not throw the same exception as the original method: {describe(original)}\n"
        f"Expected exception class: {_exception_name(expected)}\n"
        f"Actual exception class: {_exception_name(actual)}"
    ) from actual


def _inconsistency_header(method: "MethodHandle | str", original: "MethodHandle | str") -> str:
    return (
        "Detected a method inconsistent with its original method.\n"
        f"Inconsistent method: {describe(method)}\n"
        f"Original method: {describe(original)}\n"
    )


def report_inconsistent_arguments(
    method: "MethodHandle | str",
    original: "MethodHandle | str",
    actual_args: Sequence[Any],
    expected_args: Sequence[Any],
    index: int,
) -> NoReturn:
    raise FrameAPIAssertionError(
        _inconsistency_header(method, original)
        + f"The {ordinal(index + 1)} argument differs.\n"
        f"Actual arguments: {argument_string(actual_args)}\n"
        f"Expected arguments: {argument_string(expected_args)}\n"
        f"Argument types: {argument_type_string(actual_args)}"
    )


def report_inconsistent_return(
    method: "MethodHandle | str",
    original: "MethodHandle | str",
    actual: Any,
    expected: Any,
    args: Sequence[Any] = (),
) -> NoReturn:
    raise FrameAPIAssertionError(
        _inconsistency_header(method, original)
        + f"Actual method returned: {actual!r}\n"
        f"Expected method returned: {expected!r}\n"
        f"Arguments used: {argument_string(args)}\n"
        f"Argument types: {argument_type_string(args)}"
    )


def report_inconsistent_object(
    method: "MethodHandle | str",
    original: "MethodHandle | str",
    actual: Any,
    expected: Any,
    args: Sequence[Any] = (),
) -> NoReturn:
    raise FrameAPIAssertionError(
        _inconsistency_header(method, original)
        + f"Actual: {actual!r}\n"
        f"Expected: {expected!r}\n"
        f"Arguments used: {argument_string(args)}\n"
        f"Argument types: {argument_type_string(args)}"
    )


def fail_retries_exhausted(method: "MethodHandle | str", retries: int) -> NoReturn:
    raise FrameAPIAssertionError(
        f"Retried too many times, aborting. ({retries} failed attempts to clone the arguments of "
        f"{describe(method)})"
    )


__all__ = [
    "owner_name",
    "describe",
    "argument_type_string",
    "argument_string",
    "ordinal",
    "report_missing_overload",
    "report_return_type_inconsistency",
    "report_unexpected_return_type",
    "report_missing_matching_frame_setter",
    "report_missing_frameless_setter",
    "report_non_read_only_parameter",
    "fail_to_throw_mismatch",
    "fail_to_change_parameter_frame",
    "fail_to_set_result_frame",
    "report_inconsistent_exception",
    "report_inconsistent_arguments",
    "report_inconsistent_return",
    "report_inconsistent_object",
    "fail_retries_exhausted",
]
