from __future__ import annotations

import math

import numpy as np

from framecheck import ReflectionBasedComparer
from tests._utils import sample_geometry as g

EPS = 1e-9


def test_scalars() -> None:
    c = ReflectionBasedComparer()
    assert c.epsilon_equals(1.0, 1.0 + 1e-12, EPS)
    assert not c.epsilon_equals(1.0, 1.1, EPS)
    assert c.epsilon_equals(math.nan, math.nan, EPS)
    assert not c.epsilon_equals(math.nan, 0.0, EPS)
    assert c.epsilon_equals(math.inf, math.inf, EPS)
    assert not c.epsilon_equals(math.inf, -math.inf, EPS)
    assert c.epsilon_equals(3, 3.0, EPS)
    assert c.epsilon_equals(None, None, EPS)
    assert not c.epsilon_equals(None, 0.0, EPS)


def test_bool_is_not_a_number() -> None:
    c = ReflectionBasedComparer()
    assert c.epsilon_equals(True, np.bool_(True), EPS)
    assert not c.epsilon_equals(True, 1, EPS)
    assert not c.epsilon_equals(False, True, EPS)


def test_arrays_and_containers() -> None:
    c = ReflectionBasedComparer()
    assert c.epsilon_equals(np.array([1.0, 2.0]), np.array([1.0, 2.0 + 1e-12]), EPS)
    assert not c.epsilon_equals(np.zeros(2), np.zeros(3), EPS)
    assert c.epsilon_equals([1.0, (2.0, "a")], (1.0, [2.0, "a"]), EPS)
    assert not c.epsilon_equals([1.0], [1.0, 2.0], EPS)
    assert c.epsilon_equals({"a": 1.0}, {"a": 1.0 + 1e-12}, EPS)
    assert not c.epsilon_equals({"a": 1.0}, {"b": 1.0}, EPS)


def test_frame_holders_require_the_same_frame() -> None:
    c = ReflectionBasedComparer()
    frame = g.ReferenceFrame("f", g.WORLD_FRAME)
    a = g.FramePoint3D(frame, 1, 2, 3)
    assert c.epsilon_equals(a, g.FramePoint3D(frame, 1, 2, 3), EPS)
    assert not c.epsilon_equals(a, g.FramePoint3D(g.WORLD_FRAME, 1, 2, 3), EPS)


def test_mixed_frame_and_frameless_compare_values() -> None:
    c = ReflectionBasedComparer()
    frame_vector = g.FrameVector3D(g.WORLD_FRAME, 1, 0, 0)
    assert c.epsilon_equals(frame_vector, g.Vector3D(1, 0, 0), EPS)
    assert c.epsilon_equals(g.Vector3D(1, 0, 0), frame_vector, EPS)
    assert not c.epsilon_equals(g.Vector3D(0, 1, 0), frame_vector, EPS)


def test_registered_leaf_comparator_takes_precedence() -> None:
    c = ReflectionBasedComparer()
    c.register_comparator(g.Tuple3DReadOnly, lambda a, b, eps: abs(a.x - b.x) <= eps)
    assert c.epsilon_equals(g.Point3D(1, 2, 3), g.Point3D(1, 5, 6), EPS)


def test_falls_back_to_equality() -> None:
    c = ReflectionBasedComparer()
    assert c.epsilon_equals("abc", "abc", EPS)
    assert c.epsilon_equals(g.WORLD_FRAME, g.WORLD_FRAME, EPS)
    assert not c.epsilon_equals(g.WORLD_FRAME, g.ReferenceFrame("other"), EPS)
