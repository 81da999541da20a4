from __future__ import annotations

from typing import Any

import numpy as np
import pytest

from framecheck import FrameAPIAssertionError, FrameAPITester, MethodSignature
from tests._utils import sample_geometry as g


class LazyMatchingFramePoint3D(g.FramePoint3D):
    """値をコピーするだけでフレーム変換を忘れた `set_matching_frame`。"""

    def set_matching_frame(self, other: g.FrameTuple3DReadOnly) -> None:
        g.Tuple3DBasics.set(self, other)


class StickyFramePoint3D(g.FramePoint3D):
    """引数のフレームを採用しない `set_including_frame`。"""

    def set_including_frame(self, other: g.FrameTuple3DReadOnly) -> None:
        g.Tuple3DBasics.set(self, other)


class SetterlessFramePoint3D(g.FramePoint3D):
    def set_including_frame(self, reference_frame: g.ReferenceFrame, values: list[float]) -> None:
        self._frame = reference_frame
        self._xyz = np.array(values, dtype=float)


class FixedOnlyFramePoint3D(g.FixedFramePoint3DBasics):
    """参照フレームを付け替えられない holder。"""

    def __init__(self, reference_frame: g.ReferenceFrame, x: float = 0.0, y: float = 0.0, z: float = 0.0) -> None:
        self._frame = reference_frame
        self._xyz = np.array([x, y, z], dtype=float)


class LazyFixedOnlyFramePoint3D(FixedOnlyFramePoint3D):
    def set_matching_frame(self, other: g.FrameTuple3DReadOnly) -> None:
        g.Tuple3DBasics.set(self, other)


class UncheckedXYPlaneFramePoint2D(g.FramePoint2D):
    """xy 平面の検査を常に省略する。"""

    def set_matching_frame(self, other: g.FramePoint2DReadOnly, check_if_transform_in_xy_plane: bool) -> None:
        g.FixedFramePoint2DBasics.set_matching_frame(self, other, False)


def _factory(cls: type) -> Any:
    def make(rng: np.random.Generator, frame: g.ReferenceFrame) -> Any:
        p = g.random_frame_point3d(rng, frame)
        return cls(frame, p.x, p.y, p.z)

    return make


def _factory_2d(cls: type) -> Any:
    def make(rng: np.random.Generator, frame: g.ReferenceFrame) -> Any:
        p = g.random_frame_point2d(rng, frame)
        return cls(frame, p.x, p.y)

    return make


def _xy_plane_variants(signature: MethodSignature) -> bool:
    return signature.parameter_types[-1:] == (bool,)


@pytest.mark.integration
@pytest.mark.parametrize(
    "factory",
    [g.random_frame_point3d, g.random_frame_vector3d, g.random_frame_point2d],
)
def test_set_matching_frame_preserves_functionality(tester: FrameAPITester, factory) -> None:  # type: ignore[no-untyped-def]
    tester.assert_set_matching_frame_preserve_functionality(factory, iterations=50)


@pytest.mark.integration
@pytest.mark.parametrize(
    "factory",
    [g.random_frame_point3d, g.random_frame_vector3d, g.random_frame_point2d],
)
def test_set_including_frame_preserves_functionality(tester: FrameAPITester, factory) -> None:  # type: ignore[no-untyped-def]
    tester.assert_set_including_frame_preserve_functionality(factory, iterations=50)


def test_2d_receiver_with_3d_argument(tester: FrameAPITester) -> None:
    tester.assert_set_matching_frame_preserve_functionality(
        g.random_frame_point2d,
        method_filter=lambda signature: signature.parameter_types == (g.FrameTuple3DReadOnly,),
        iterations=100,
    )


def test_missing_frame_change_is_detected(tester: FrameAPITester) -> None:
    with pytest.raises(FrameAPIAssertionError, match="Detected a method inconsistent"):
        tester.assert_set_matching_frame_preserve_functionality(
            _factory(LazyMatchingFramePoint3D), iterations=5
        )


def test_frame_not_adopted_is_detected(tester: FrameAPITester) -> None:
    with pytest.raises(FrameAPIAssertionError, match="Detected a method inconsistent"):
        tester.assert_set_including_frame_preserve_functionality(_factory(StickyFramePoint3D), iterations=5)


def test_missing_frameless_setter_is_reported(tester: FrameAPITester) -> None:
    with pytest.raises(FrameAPIAssertionError, match="Could not find the frameless setter"):
        tester.assert_set_including_frame_preserve_functionality(_factory(SetterlessFramePoint3D), iterations=1)


def test_sample_frame_change_round_trip(rng: np.random.Generator) -> None:
    frame_a = g.random_reference_frame(rng, "frameA")
    frame_b = g.random_reference_frame(rng, "frameB", frame_a)
    p = g.FramePoint3D(frame_a, 1.0, -2.0, 0.5)
    q = g.copy_frame_point3d(p)
    q.change_frame(frame_b)
    assert q.reference_frame is frame_b
    q.change_frame(frame_a)
    assert q.epsilon_equals(p, 1e-9)

    v = g.FrameVector3D(frame_a, 0.0, 0.0, 2.0)
    v.change_frame(frame_b)
    assert v.length() == pytest.approx(2.0)


def test_fixed_frame_holder_uses_arguments_in_receiver_frame(tester: FrameAPITester) -> None:
    tester.assert_set_matching_frame_preserve_functionality(_factory(FixedOnlyFramePoint3D), iterations=20)


def test_fixed_frame_holder_missing_frame_change_is_detected(tester: FrameAPITester) -> None:
    with pytest.raises(FrameAPIAssertionError, match="Detected a method inconsistent"):
        tester.assert_set_matching_frame_preserve_functionality(_factory(LazyFixedOnlyFramePoint3D), iterations=5)


def test_xy_plane_flag_variants_preserve_functionality(tester: FrameAPITester) -> None:
    tester.assert_set_matching_frame_preserve_functionality(
        g.random_frame_point2d, method_filter=_xy_plane_variants, iterations=30
    )


def test_ignored_xy_plane_flag_is_detected(tester: FrameAPITester) -> None:
    with pytest.raises(FrameAPIAssertionError, match="did not throw the same exception") as info:
        tester.assert_set_matching_frame_preserve_functionality(
            _factory_2d(UncheckedXYPlaneFramePoint2D), method_filter=_xy_plane_variants, iterations=30
        )
    assert "Expected exception class: NotInXYPlaneError" in str(info.value)


def test_sample_xy_plane_transform_check() -> None:
    rotation_about_z = np.eye(4)
    rotation_about_z[:2, :2] = [[0.0, -1.0], [1.0, 0.0]]
    rotation_about_z[:3, 3] = [1.0, 2.0, 3.0]
    assert g.is_transform_in_xy_plane(rotation_about_z)
    p = g.Point2D(1.0, 0.0)
    p.apply_transform(rotation_about_z)
    assert p.epsilon_equals(g.Point2D(1.0, 3.0), 1e-12)

    tilted = np.eye(4)
    tilted[1:3, 1:3] = [[0.0, -1.0], [1.0, 0.0]]
    with pytest.raises(g.NotInXYPlaneError):
        p.apply_transform(tilted)
    p.apply_transform(tilted, False)
    assert p.epsilon_equals(g.Point2D(1.0, 0.0), 1e-12)
