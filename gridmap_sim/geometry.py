"""
Geometry kernel for the grid mapping simulation.

Provides the immutable Vector, Point and Line value types plus the angle and
frame helpers used by the robot kinematics and the LiDAR model.
"""

from __future__ import annotations

from dataclasses import dataclass
import math


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Vector:
    """2D vector with component-wise equality."""

    x: float
    y: float

    @classmethod
    def from_angle(cls, theta: float) -> "Vector":
        """Unit vector (cos theta, sin theta). Scale it for magnitude."""
        return cls(math.cos(theta), math.sin(theta))

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def rotate(self, theta: float) -> "Vector":
        """Rotate CCW by theta radians."""
        c = math.cos(theta)
        s = math.sin(theta)
        return Vector(c * self.x - s * self.y, s * self.x + c * self.y)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def __add__(self, other: "Vector") -> "Vector":
        return Vector(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector") -> "Vector":
        return Vector(self.x - other.x, self.y - other.y)

    def __neg__(self) -> "Vector":
        return Vector(-self.x, -self.y)

    def __mul__(self, k: float) -> "Vector":
        return Vector(self.x * k, self.y * k)

    __rmul__ = __mul__

    def __truediv__(self, k: float) -> "Vector":
        return Vector(self.x / k, self.y / k)


@dataclass(frozen=True)
class Point:
    """A location in the plane, stored as the vector from the origin."""

    pos: Vector

    def __init__(self, x: float, y: float) -> None:
        object.__setattr__(self, "pos", Vector(float(x), float(y)))

    @classmethod
    def from_vector(cls, pos: Vector) -> "Point":
        return cls(pos.x, pos.y)

    @property
    def x(self) -> float:
        return self.pos.x

    @property
    def y(self) -> float:
        return self.pos.y

    def distance(self) -> float:
        """Distance from the coordinate origin.

        For the distance between two points subtract their vectors first:
        ``(a.pos - b.pos).length()``.
        """
        return self.pos.length()

    def __str__(self) -> str:
        return f"Point({self.pos.x}, {self.pos.y})"


@dataclass(frozen=True)
class Line:
    """Finite segment from start to end in world space."""

    start: Point
    end: Point

    def direction(self) -> Vector:
        return self.end.pos - self.start.pos

    def length(self) -> float:
        return self.direction().length()


# ---------------------------------------------------------------------------
# Angle and frame helpers
# ---------------------------------------------------------------------------


def wrap_angle(theta: float) -> float:
    """Wrap angle to [-pi, pi) radians."""
    return (theta + math.pi) % (2.0 * math.pi) - math.pi


def clamp(value: float, vmin: float, vmax: float) -> float:
    """Clamp value to [vmin, vmax]."""
    return max(vmin, min(vmax, value))


def body_to_world(local: Vector, origin: Vector, heading: float) -> Vector:
    """Transform a body-frame vector to world frame.

    Body +x is forward (cos(heading), sin(heading)).
    """
    return origin + local.rotate(heading)


def world_to_body(world: Vector, origin: Vector, heading: float) -> Vector:
    """Inverse of body_to_world."""
    return (world - origin).rotate(-heading)
