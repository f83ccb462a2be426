from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple, Dict, Any, Optional
import json

from .geometry import Line, Point


@dataclass
class Obstacle:
    """Axis-aligned rectangular obstacle in world coordinates.

    Coordinates are defined with origin at bottom-left of the world:
    - x increases to the right
    - y increases upward

    Attributes
    ----------
    x : float
        X coordinate of the rectangle center (meters).
    y : float
        Y coordinate of the rectangle center (meters).
    w : float
        Width of the rectangle (meters).
    h : float
        Height of the rectangle (meters).
    """

    x: float
    y: float
    w: float
    h: float

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """Return (xmin, ymin, xmax, ymax)."""
        half_w = self.w / 2.0
        half_h = self.h / 2.0
        return (self.x - half_w, self.y - half_h, self.x + half_w, self.y + half_h)

    def edges(self) -> List[Line]:
        """The four sides of the rectangle, counter-clockwise."""
        xmin, ymin, xmax, ymax = self.bounds
        corners = [Point(xmin, ymin), Point(xmax, ymin), Point(xmax, ymax), Point(xmin, ymax)]
        return [Line(corners[i], corners[(i + 1) % 4]) for i in range(4)]


class World:
    """2D world containing static rectangular obstacles.

    Parameters
    ----------
    width : float
        World width in meters.
    height : float
        World height in meters.
    obstacles : list[Obstacle]
        Initial obstacle list.
    start : tuple[float, float, float]
        Suggested robot start pose (x, y, heading).
    """

    def __init__(
        self,
        width: float,
        height: float,
        obstacles: Optional[List[Obstacle]] = None,
        start: Tuple[float, float, float] = (1.0, 1.0, 0.0),
    ) -> None:
        self.width = float(width)
        self.height = float(height)
        self.obstacles: List[Obstacle] = list(obstacles) if obstacles is not None else []
        self.start = start

    # ------------------------------------------------------------------
    # Map loading
    # ------------------------------------------------------------------
    @classmethod
    def from_map_dict(cls, width: float, height: float, data: Dict[str, Any]) -> "World":
        """Create world from a dict describing obstacles and start pose."""
        obstacles = [
            Obstacle(
                float(o["x"]),
                float(o["y"]),
                float(o["w"]),
                float(o["h"]),
            )
            for o in data.get("obstacles", [])
        ]
        start_data = data.get("start", {"x": 1.0, "y": 1.0, "heading": 0.0})
        start = (
            float(start_data["x"]),
            float(start_data["y"]),
            float(start_data.get("heading", 0.0)),
        )
        return cls(width=width, height=height, obstacles=obstacles, start=start)

    @classmethod
    def from_map_file(cls, width: float, height: float, path: str) -> "World":
        """Create world from a JSON map file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_map_dict(width=width, height=height, data=data)

    def add_obstacle(self, obstacle: Obstacle) -> None:
        """Add a single obstacle."""
        self.obstacles.append(obstacle)

    # ------------------------------------------------------------------
    # Collision detection
    # ------------------------------------------------------------------
    def is_out_of_bounds(self, x: float, y: float, radius: float) -> bool:
        """Check if a circular robot is out of the world bounds."""
        if x - radius < 0.0 or x + radius > self.width:
            return True
        if y - radius < 0.0 or y + radius > self.height:
            return True
        return False

    def check_collision(self, x: float, y: float, radius: float) -> bool:
        """Return True if a circular robot collides with any obstacle or boundary."""
        if self.is_out_of_bounds(x, y, radius):
            return True
        for obs in self.obstacles:
            xmin, ymin, xmax, ymax = obs.bounds
            closest_x = min(max(x, xmin), xmax)
            closest_y = min(max(y, ymin), ymax)
            dx = x - closest_x
            dy = y - closest_y
            if dx * dx + dy * dy <= radius * radius:
                return True
        return False
