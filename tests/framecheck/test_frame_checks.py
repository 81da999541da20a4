from __future__ import annotations

import logging

import numpy as np
import pytest

from framecheck import FrameAPIAssertionError, FrameAPITester
from tests._utils import sample_geometry as g


class UncheckedFrameTools:
    @staticmethod
    def distance(a: g.FramePoint3DReadOnly, b: g.FramePoint3DReadOnly) -> float:
        return g.GeometryTools.distance(a, b)

    @staticmethod
    def norm(a: g.FramePoint3DReadOnly) -> float:
        return float(np.linalg.norm([a.x, a.y, a.z]))


class NonAdoptingFrameTools:
    @staticmethod
    def midpoint_including_frame(
        a: g.FramePoint3DReadOnly, b: g.FramePoint3DReadOnly, result: g.FramePoint3DBasics
    ) -> None:
        a.check_reference_frame_match(b)
        g.GeometryTools.midpoint(a, b, result)


class WorldResultFrameTools:
    @staticmethod
    def triangle_normal(
        a: g.FramePoint3DReadOnly, b: g.FramePoint3DReadOnly, c: g.FramePoint3DReadOnly
    ) -> g.FrameVector3D:
        a.check_reference_frame_match(b)
        a.check_reference_frame_match(c)
        n = g.GeometryTools.triangle_normal(a, b, c)
        return g.FrameVector3D(g.WORLD_FRAME, n.x, n.y, n.z)


class UnimplementedFrameTools:
    @staticmethod
    def distance(a: g.FramePoint3DReadOnly, b: g.FramePoint3DReadOnly) -> float:
        a.check_reference_frame_match(b)
        raise NotImplementedError("distance")


class MutableArgumentFramePoint3D(g.FramePoint3D):
    def add_matching_frame(self, other: g.FixedFramePoint3DBasics) -> None:
        self.set_matching_frame(other)
        self._xyz = self._xyz * 2.0


def _mutable_argument_point(rng: np.random.Generator, frame: g.ReferenceFrame) -> MutableArgumentFramePoint3D:
    p = g.random_frame_point3d(rng, frame)
    return MutableArgumentFramePoint3D(frame, p.x, p.y, p.z)


class FailingIncludingFramePoint3D(g.FramePoint3D):
    def scale_including_frame(self, other: g.FrameTuple3DReadOnly) -> None:
        raise ValueError("scale_including_frame")


class WorldCopyFramePoint3D(g.FramePoint3D):
    def copy_including_frame(self, other: g.FrameTuple3DReadOnly) -> g.FramePoint3D:
        return g.FramePoint3D(g.WORLD_FRAME, other.x, other.y, other.z)


class MidpointFramePoint3D(g.FramePoint3D):
    def set_matching_frame(self, a: g.FramePoint3DReadOnly, b: g.FramePoint3DReadOnly) -> None:
        a.check_reference_frame_match(b)
        mid = g.FramePoint3D(a.reference_frame, *(0.5 * (a._xyz + b._xyz)))
        g.FixedFrameTuple3DBasics.set_matching_frame(self, mid)


class UncheckedMidpointFramePoint3D(g.FramePoint3D):
    def set_matching_frame(self, a: g.FramePoint3DReadOnly, b: g.FramePoint3DReadOnly) -> None:
        mid = g.FramePoint3D(a.reference_frame, *(0.5 * (a._xyz + b._xyz)))
        g.FixedFrameTuple3DBasics.set_matching_frame(self, mid)


class PositionFramePoint3D(g.FramePoint3D):
    def get_position(self, out: g.FramePoint3DBasics) -> None:
        out.set_including_frame(self)


class NonAdoptingPositionFramePoint3D(g.FramePoint3D):
    def get_position(self, out: g.FramePoint3DBasics) -> None:
        g.Tuple3DBasics.set(out, self)


class WorldMidpointFramePoint3D(g.FramePoint3D):
    def midpoint_with(self, other: g.FramePoint3DReadOnly) -> g.FramePoint3D:
        self.check_reference_frame_match(other)
        mid = 0.5 * (self._xyz + other._xyz)
        return g.FramePoint3D(g.WORLD_FRAME, *mid)


def _factory(cls: type):  # type: ignore[no-untyped-def]
    def make(rng: np.random.Generator, frame: g.ReferenceFrame) -> g.FramePoint3D:
        p = g.random_frame_point3d(rng, frame)
        return cls(frame, p.x, p.y, p.z)

    return make


def _only(name: str):  # type: ignore[no-untyped-def]
    return lambda signature: signature.name == name


def test_static_tools_check_reference_frames(tester: FrameAPITester) -> None:
    tester.assert_static_methods_check_reference_frame(g.FrameGeometryTools, iterations=20)


@pytest.mark.parametrize(
    "factory",
    [g.random_frame_point3d, g.random_frame_vector3d, g.random_frame_point2d],
)
def test_holder_methods_check_reference_frames(tester: FrameAPITester, factory) -> None:  # type: ignore[no-untyped-def]
    tester.assert_methods_of_reference_frame_holder_check_reference_frame(factory, iterations=10)


def test_missing_check_is_reported(tester: FrameAPITester) -> None:
    with pytest.raises(FrameAPIAssertionError, match="Should have thrown a ReferenceFrameMismatchError") as info:
        tester.assert_static_methods_check_reference_frame(UncheckedFrameTools, iterations=1)
    assert "UncheckedFrameTools: float distance(FramePoint3DReadOnly, FramePoint3DReadOnly)" in str(info.value)


def test_single_frame_parameter_static_is_not_checked(tester: FrameAPITester) -> None:
    tester.assert_static_methods_check_reference_frame(
        UncheckedFrameTools, method_filter=lambda signature: signature.name == "norm", iterations=5
    )


def test_mutable_frame_argument_must_adopt_frame(tester: FrameAPITester) -> None:
    with pytest.raises(FrameAPIAssertionError, match="did not change the frame of the 3rd parameter"):
        tester.assert_static_methods_check_reference_frame(NonAdoptingFrameTools, iterations=1)


def test_result_must_be_in_the_arguments_frame(tester: FrameAPITester) -> None:
    with pytest.raises(FrameAPIAssertionError, match="did not set the frame of the result"):
        tester.assert_static_methods_check_reference_frame(WorldResultFrameTools, iterations=1)


def test_unexpected_exception_propagates_after_logging(
    tester: FrameAPITester, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.ERROR, logger="framecheck"):
        with pytest.raises(NotImplementedError):
            tester.assert_static_methods_check_reference_frame(UnimplementedFrameTools, iterations=1)
    assert "Problem when evaluating the method" in caplog.text


def test_ignored_exceptions_are_tolerated(tester: FrameAPITester) -> None:
    tester.register_exceptions_to_ignore(NotImplementedError)
    tester.assert_static_methods_check_reference_frame(UnimplementedFrameTools, iterations=3)


def test_matching_frame_methods_take_read_only_parameters(tester: FrameAPITester) -> None:
    with pytest.raises(FrameAPIAssertionError, match="is expected to only request read-only parameters"):
        tester.assert_methods_of_reference_frame_holder_check_reference_frame(
            _mutable_argument_point,
            method_filter=lambda signature: signature.name == "add_matching_frame",
            iterations=1,
        )


def test_mismatch_error_must_be_configured() -> None:
    tester = FrameAPITester()
    tester.register_reference_frame_type(g.ReferenceFrame)
    tester.register_frame_types_smart(g.FrameTuple3DBasics, g.FramePoint3DBasics)
    builder = tester.get_reflection_based_builder()
    builder.configure_reference_frames(g.ReferenceFrame, g.WORLD_FRAME, g.random_reference_frame)
    builder.register_frame_generator(g.FramePoint3D, g.random_frame_point3d)
    with pytest.raises(RuntimeError, match="mismatch exception type"):
        tester.assert_static_methods_check_reference_frame(g.FrameGeometryTools, iterations=1)


def test_including_frame_methods_run_the_same_frame_pass(tester: FrameAPITester) -> None:
    with pytest.raises(ValueError, match="scale_including_frame"):
        tester.assert_methods_of_reference_frame_holder_check_reference_frame(
            _factory(FailingIncludingFramePoint3D), method_filter=_only("scale_including_frame"), iterations=1
        )


def test_including_frame_methods_run_the_result_pass(tester: FrameAPITester) -> None:
    with pytest.raises(FrameAPIAssertionError, match="did not set the frame of the result"):
        tester.assert_methods_of_reference_frame_holder_check_reference_frame(
            _factory(WorldCopyFramePoint3D), method_filter=_only("copy_including_frame"), iterations=1
        )


def test_matching_frame_with_two_frame_arguments(tester: FrameAPITester) -> None:
    tester.assert_methods_of_reference_frame_holder_check_reference_frame(
        _factory(MidpointFramePoint3D), method_filter=_only("set_matching_frame"), iterations=5
    )
    with pytest.raises(FrameAPIAssertionError, match="Should have thrown a ReferenceFrameMismatchError") as info:
        tester.assert_methods_of_reference_frame_holder_check_reference_frame(
            _factory(UncheckedMidpointFramePoint3D), method_filter=_only("set_matching_frame"), iterations=1
        )
    assert "UncheckedMidpointFramePoint3D" in str(info.value)


def test_holder_mutable_frame_argument_must_adopt_frame(tester: FrameAPITester) -> None:
    tester.assert_methods_of_reference_frame_holder_check_reference_frame(
        _factory(PositionFramePoint3D), method_filter=_only("get_position"), iterations=5
    )
    with pytest.raises(FrameAPIAssertionError, match="did not change the frame of the 1st parameter"):
        tester.assert_methods_of_reference_frame_holder_check_reference_frame(
            _factory(NonAdoptingPositionFramePoint3D), method_filter=_only("get_position"), iterations=1
        )


def test_holder_result_must_be_in_the_receiver_frame(tester: FrameAPITester) -> None:
    with pytest.raises(FrameAPIAssertionError, match="did not set the frame of the result"):
        tester.assert_methods_of_reference_frame_holder_check_reference_frame(
            _factory(WorldMidpointFramePoint3D), method_filter=_only("midpoint_with"), iterations=1
        )
