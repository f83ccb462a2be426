from __future__ import annotations

from typing import Iterable, Iterator, List, Sequence, Tuple

from .geometry import Point, body_to_world
from .robot import Pose


class PointCloud:
    """Ordered, finite collection of sensed points from one sensing cycle.

    Iteration order is the insertion order and is repeatable. Duplicates are
    kept; each one is rasterized on its own.
    """

    __slots__ = ("_points",)

    def __init__(self, points: Iterable[Point] = ()) -> None:
        self._points: Tuple[Point, ...] = tuple(points)

    @classmethod
    def from_xy(cls, pairs: Iterable[Sequence[float]]) -> "PointCloud":
        """Build a cloud from (x, y) pairs."""
        return cls(Point(float(p[0]), float(p[1])) for p in pairs)

    def iter(self) -> Iterator[Point]:
        return iter(self._points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __getitem__(self, index: int) -> Point:
        return self._points[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PointCloud):
            return NotImplemented
        return self._points == other._points

    def __repr__(self) -> str:
        return f"PointCloud({len(self._points)} points)"

    def transformed(self, pose: Pose) -> "PointCloud":
        """Map a robot-frame cloud into the world frame of the given pose."""
        return PointCloud(
            Point.from_vector(body_to_world(p.pos, pose.position, pose.heading))
            for p in self._points
        )

    def is_finite(self) -> bool:
        return all(p.pos.is_finite() for p in self._points)

    def to_list(self) -> List[List[float]]:
        """Serialize to [[x, y], ...] for telemetry."""
        return [[p.x, p.y] for p in self._points]
