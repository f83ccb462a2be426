from __future__ import annotations

import math

from gridmap_sim.geometry import Line, Point, Vector, body_to_world, wrap_angle, world_to_body


def test_vector_arithmetic() -> None:
    a = Vector(1.0, 2.0)
    b = Vector(3.0, -1.0)
    assert a + b == Vector(4.0, 1.0)
    assert b - a == Vector(2.0, -3.0)
    assert a * 2.0 == Vector(2.0, 4.0)
    assert 2.0 * a == Vector(2.0, 4.0)
    assert -a == Vector(-1.0, -2.0)


def test_vector_length_and_angle() -> None:
    assert Vector(3.0, 4.0).length() == 5.0
    assert Vector(0.0, 0.0).length() == 0.0

    v = Vector.from_angle(math.pi / 2.0)
    assert math.isclose(v.x, 0.0, abs_tol=1e-12)
    assert math.isclose(v.y, 1.0)
    assert math.isclose(Vector.from_angle(1.234).length(), 1.0)


def test_point_delegates_to_vector() -> None:
    p = Point(3, 4)
    assert p == Point(3.0, 4.0)
    assert p == Point.from_vector(Vector(3.0, 4.0))
    assert p != Point(4.0, 3.0)
    assert p.distance() == 5.0
    assert str(p) == "Point(3.0, 4.0)"

    # Distance between points goes through the vectors
    q = Point(6.0, 8.0)
    assert (q.pos - p.pos).length() == 5.0


def test_line_length() -> None:
    line = Line(Point(1.0, 1.0), Point(4.0, 5.0))
    assert line.direction() == Vector(3.0, 4.0)
    assert line.length() == 5.0


def test_angle_and_frame_helpers() -> None:
    assert math.isclose(wrap_angle(3.0 * math.pi), -math.pi)
    assert math.isclose(wrap_angle(0.5), 0.5)

    world = body_to_world(Vector(1.0, 0.0), Vector(1.0, 1.0), math.pi / 2.0)
    assert math.isclose(world.x, 1.0, abs_tol=1e-12)
    assert math.isclose(world.y, 2.0)

    back = world_to_body(world, Vector(1.0, 1.0), math.pi / 2.0)
    assert math.isclose(back.x, 1.0)
    assert math.isclose(back.y, 0.0, abs_tol=1e-12)
