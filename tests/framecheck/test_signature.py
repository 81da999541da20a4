from __future__ import annotations

from framecheck import MethodSignature, method_filter_from_signature, method_filter_from_signatures
from tests._utils.sample_geometry import FramePoint3DReadOnly, Point3DReadOnly, Tuple3DReadOnly


def test_equality_ignores_return_type() -> None:
    a = MethodSignature("distance", (Point3DReadOnly,), float)
    b = MethodSignature("distance", (Point3DReadOnly,), None)
    assert a == b
    assert hash(a) == hash(b)
    assert a != MethodSignature("distance", (FramePoint3DReadOnly,), float)
    assert a != MethodSignature("dot", (Point3DReadOnly,), float)


def test_derivations_return_new_values() -> None:
    base = MethodSignature("cross", (Tuple3DReadOnly, Tuple3DReadOnly), type(None))
    replaced = base.with_parameter_replaced(1, FramePoint3DReadOnly)
    assert replaced.parameter_types == (Tuple3DReadOnly, FramePoint3DReadOnly)
    assert base.parameter_types == (Tuple3DReadOnly, Tuple3DReadOnly)

    inserted = base.with_parameter_inserted(0, int)
    assert inserted.parameter_types == (int, Tuple3DReadOnly, Tuple3DReadOnly)
    assert inserted.with_parameter_removed(0) == base

    renamed = base.with_name_replaced("set_matching_frame")
    assert renamed.name == "set_matching_frame"
    assert renamed.return_type is type(None)
    assert base.with_return_type(float).return_type is float


def test_parameter_types_are_normalised_to_tuple() -> None:
    sig = MethodSignature("set", [float, float])  # type: ignore[arg-type]
    assert sig.parameter_types == (float, float)
    assert sig.parameter_count == 2


def test_simple_name_rendering() -> None:
    sig = MethodSignature("distance", (Point3DReadOnly, list[Point3DReadOnly]), float)
    assert sig.simple_name() == "float distance(Point3DReadOnly, list[Point3DReadOnly])"
    assert str(MethodSignature("set_to_zero", (), type(None))) == "None set_to_zero()"


def test_filters_exclude_matching_signatures() -> None:
    dot = MethodSignature("dot", (Tuple3DReadOnly,))
    add = MethodSignature("add", (Tuple3DReadOnly,))
    only_dot = method_filter_from_signature(dot)
    assert not only_dot(MethodSignature("dot", (Tuple3DReadOnly,), float))
    assert only_dot(add)

    both = method_filter_from_signatures([dot, add])
    assert not both(dot)
    assert not both(add)
    assert both(MethodSignature("sub", (Tuple3DReadOnly,)))
