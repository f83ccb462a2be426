"""
Occupancy grid built from LiDAR point clouds.

The grid is a fixed square array of cells addressed by (row, column). Row 0 is
the top edge of the mapped area: rows grow as world y decreases, columns grow
with world x. Each cell is Unknown, Freespace or Occupied; Occupied cells
carry the number of hits they have received.

Every point of a cloud is treated as an obstacle return. The segment from the
robot to the point is rasterized with a supercover traversal; the cells it
crosses are free evidence and the final cell is hit evidence. How evidence is
merged into the existing grid is decided by an OccupancyPolicy.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Dict, List, Optional, Tuple
import math

import numpy as np

from .geometry import Point, Vector
from .pointcloud import PointCloud
from .robot import Pose


class CellState(IntEnum):
    UNKNOWN = 0
    FREESPACE = 1
    OCCUPIED = 2


@dataclass(frozen=True)
class Cell:
    """Classification of one cell; hits is the Occupied payload."""

    state: CellState
    hits: int = 0


@dataclass(frozen=True)
class GridConfig:
    """Grid geometry, fixed for the lifetime of the map.

    Attributes
    ----------
    size : int
        Number of rows and columns.
    cell_size : float
        Edge length of one cell (meters).
    anchor : Vector
        World position of the top-left corner of cell (0, 0).
    policy : str
        Registered name of the occupancy policy.
    """

    size: int
    cell_size: float
    anchor: Vector = Vector(0.0, 0.0)
    policy: str = "sticky"

    def __post_init__(self) -> None:
        if self.size <= 0:
            raise ValueError(f"Grid size must be positive, got {self.size}")
        if not self.cell_size > 0.0:
            raise ValueError(f"Cell size must be positive, got {self.cell_size}")
        if not self.anchor.is_finite():
            raise ValueError(f"Grid anchor must be finite, got {self.anchor}")

    @property
    def extent(self) -> float:
        """Edge length of the mapped square (meters)."""
        return self.size * self.cell_size


@dataclass(frozen=True)
class UpdateStats:
    """What a single update did with the incoming cloud."""

    rays: int
    dropped: int
    free_cells: int
    hit_cells: int


# ---------------------------------------------------------------------------
# Line rasterization
# ---------------------------------------------------------------------------


def trace_cells(
    start: Tuple[float, float],
    end: Tuple[float, float],
) -> List[Tuple[int, int]]:
    """Cells crossed by a segment, in order from start to end.

    Coordinates are continuous grid coordinates (row, column), where cell
    (r, c) covers [r, r + 1) x [c, c + 1). Consecutive cells are 4- or
    8-connected: a segment passing exactly through a cell corner also visits
    both cells sharing that corner, and those two are diagonal neighbours. The first element is the start cell and the last is the end cell.
    """
    r0, c0 = start
    r1, c1 = end
    row, col = math.floor(r0), math.floor(c0)
    end_row, end_col = math.floor(r1), math.floor(c1)

    cells = [(row, col)]
    remaining_r = abs(end_row - row)
    remaining_c = abs(end_col - col)
    if remaining_r == 0 and remaining_c == 0:
        return cells

    dr = r1 - r0
    dc = c1 - c0
    step_r = (end_row > row) - (end_row < row)
    step_c = (end_col > col) - (end_col < col)

    # Ray parameter t in [0, 1] at which the next row / column boundary is hit
    if step_r:
        t_delta_r = abs(1.0 / dr)
        t_max_r = ((row + 1 if step_r > 0 else row) - r0) / dr
    else:
        t_delta_r = t_max_r = math.inf
    if step_c:
        t_delta_c = abs(1.0 / dc)
        t_max_c = ((col + 1 if step_c > 0 else col) - c0) / dc
    else:
        t_delta_c = t_max_c = math.inf

    # Step counts are fixed up front, so the walk always ends on the end cell
    while remaining_r or remaining_c:
        if remaining_r and remaining_c and math.isclose(t_max_r, t_max_c, rel_tol=1e-9, abs_tol=1e-12):
            cells.append((row + step_r, col))
            cells.append((row, col + step_c))
            row += step_r
            col += step_c
            t_max_r += t_delta_r
            t_max_c += t_delta_c
            remaining_r -= 1
            remaining_c -= 1
        elif remaining_c and (not remaining_r or t_max_c < t_max_r):
            col += step_c
            t_max_c += t_delta_c
            remaining_c -= 1
        else:
            row += step_r
            t_max_r += t_delta_r
            remaining_r -= 1
        cells.append((row, col))
    return cells


def clip_to_grid(
    start: Tuple[float, float],
    end: Tuple[float, float],
    size: int,
) -> Tuple[float, float]:
    """Move start along the segment to where it enters the [0, size] box.

    end must lie inside the box. A start already inside is returned as is,
    so tracing from the result visits at most about 2 * size cells.
    """
    t_enter = 0.0
    for s, e in zip(start, end):
        if s < 0.0:
            t_enter = max(t_enter, -s / (e - s))
        elif s > size:
            t_enter = max(t_enter, (size - s) / (e - s))
    if t_enter == 0.0:
        return start
    return (
        start[0] + t_enter * (end[0] - start[0]),
        start[1] + t_enter * (end[1] - start[1]),
    )


# ---------------------------------------------------------------------------
# Occupancy policies
# ---------------------------------------------------------------------------


class OccupancyPolicy(ABC):
    """Merges one update's evidence into the grid arrays.

    ``free_mask`` marks cells crossed by at least one ray and not hit in this
    update; ``hit_counts`` holds the number of hits per cell. Implementations
    return new arrays and leave the inputs untouched.
    """

    name = ""

    @abstractmethod
    def merge(
        self,
        states: np.ndarray,
        hits: np.ndarray,
        free_mask: np.ndarray,
        hit_counts: np.ndarray,
    ) -> Tuple[np.ndarray, np.ndarray]:
        ...


class StickyOccupancy(OccupancyPolicy):
    """Occupied cells are never downgraded."""

    name = "sticky"

    def merge(self, states, hits, free_mask, hit_counts):
        states = states.copy()
        hits = hits + hit_counts
        states[free_mask & (states != CellState.OCCUPIED)] = CellState.FREESPACE
        states[hit_counts > 0] = CellState.OCCUPIED
        return states, hits


class ClearingOccupancy(OccupancyPolicy):
    """Free evidence wears down Occupied cells one hit at a time.

    A cell crossed by free rays in an update loses one hit; when it has none
    left it becomes Freespace.
    """

    name = "clearing"

    def merge(self, states, hits, free_mask, hit_counts):
        states = states.copy()
        hits = hits.copy()
        occupied = states == CellState.OCCUPIED
        worn = free_mask & occupied
        hits[worn] -= 1
        cleared = worn & (hits <= 0)
        hits[cleared] = 0
        states[(free_mask & ~occupied) | cleared] = CellState.FREESPACE
        hits += hit_counts
        states[hit_counts > 0] = CellState.OCCUPIED
        return states, hits


_POLICY_REGISTRY: Dict[str, Callable[[], OccupancyPolicy]] = {
    "sticky": StickyOccupancy,
    "clearing": ClearingOccupancy,
}


def get_policy(name: str) -> OccupancyPolicy:
    """Return a new instance of the policy registered under name."""
    if name not in _POLICY_REGISTRY:
        raise KeyError(f"Unknown occupancy policy: {name}. Available: {list(_POLICY_REGISTRY.keys())}")
    return _POLICY_REGISTRY[name]()


def list_policies() -> List[str]:
    return list(_POLICY_REGISTRY.keys())


def register_policy(name: str, factory: Callable[[], OccupancyPolicy]) -> None:
    """Register a custom occupancy policy."""
    _POLICY_REGISTRY[name] = factory


# ---------------------------------------------------------------------------
# Read-only views
# ---------------------------------------------------------------------------


def _cell_at(states: np.ndarray, hits: np.ndarray, row: int, column: int) -> Optional[Cell]:
    size = states.shape[0]
    if not (0 <= row < size and 0 <= column < size):
        return None
    return Cell(CellState(int(states[row, column])), int(hits[row, column]))


def _count_states(states: np.ndarray) -> Dict[str, int]:
    return {
        "unknown": int(np.count_nonzero(states == CellState.UNKNOWN)),
        "freespace": int(np.count_nonzero(states == CellState.FREESPACE)),
        "occupied": int(np.count_nonzero(states == CellState.OCCUPIED)),
    }


@dataclass(frozen=True, eq=False)
class GridSnapshot:
    """Immutable copy of the grid taken between updates."""

    config: GridConfig
    states: np.ndarray
    hits: np.ndarray
    update_count: int

    def cell_state(self, row: int, column: int) -> Optional[Cell]:
        return _cell_at(self.states, self.hits, row, column)

    def counts(self) -> Dict[str, int]:
        return _count_states(self.states)


def _cell_center(config: GridConfig, row: int, column: int) -> Point:
    return Point(
        config.anchor.x + (column + 0.5) * config.cell_size,
        config.anchor.y - (row + 0.5) * config.cell_size,
    )


# ---------------------------------------------------------------------------
# Grid map
# ---------------------------------------------------------------------------


class GridMap:
    """Fixed-size occupancy grid updated from (pose, point cloud) samples."""

    def __init__(self, config: GridConfig) -> None:
        self.config = config
        self.size = config.size
        self.cell_size = config.cell_size
        self.anchor = config.anchor
        self.policy = get_policy(config.policy)

        self._states = np.full((self.size, self.size), CellState.UNKNOWN, dtype=np.int8)
        self._hits = np.zeros((self.size, self.size), dtype=np.int32)
        self.update_count = 0

    # ------------------------------------------------------------------
    # Coordinate transforms
    # ------------------------------------------------------------------
    def world_to_grid(self, pos: Vector) -> Tuple[float, float]:
        """Continuous (row, column) coordinates of a world position."""
        return (
            (self.anchor.y - pos.y) / self.cell_size,
            (pos.x - self.anchor.x) / self.cell_size,
        )

    def world_to_cell(self, point: Point) -> Optional[Tuple[int, int]]:
        """(row, column) of the cell containing point, or None outside the grid."""
        r, c = self.world_to_grid(point.pos)
        row, column = math.floor(r), math.floor(c)
        if not self.in_bounds(row, column):
            return None
        return row, column

    def cell_center(self, row: int, column: int) -> Point:
        return _cell_center(self.config, row, column)

    def in_bounds(self, row: int, column: int) -> bool:
        return 0 <= row < self.size and 0 <= column < self.size

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def cell_state(self, row: int, column: int) -> Optional[Cell]:
        """Current classification of a cell, or None when out of range."""
        return _cell_at(self._states, self._hits, row, column)

    def counts(self) -> Dict[str, int]:
        return _count_states(self._states)

    def coverage(self) -> float:
        """Fraction of cells that are no longer Unknown."""
        known = np.count_nonzero(self._states != CellState.UNKNOWN)
        return float(known) / float(self.size * self.size)

    def snapshot(self) -> GridSnapshot:
        states = self._states.copy()
        hits = self._hits.copy()
        states.flags.writeable = False
        hits.flags.writeable = False
        return GridSnapshot(
            config=self.config,
            states=states,
            hits=hits,
            update_count=self.update_count,
        )

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------
    def update(self, pose: Pose, cloud: PointCloud) -> UpdateStats:
        """Fold one point cloud, sensed from pose, into the grid.

        Raises ValueError for non-finite input; the grid is left unchanged.
        """
        if not pose.is_finite():
            raise ValueError(f"Pose has non-finite components: {pose}")
        if not cloud.is_finite():
            raise ValueError("Point cloud has non-finite coordinates")

        start = self.world_to_grid(pose.position)
        hit_counts = np.zeros_like(self._hits)
        free_mask = np.zeros(self._states.shape, dtype=bool)
        rays = 0
        dropped = 0

        for point in cloud.iter():
            end = self.world_to_grid(point.pos)
            end_row, end_col = math.floor(end[0]), math.floor(end[1])
            if not self.in_bounds(end_row, end_col):
                dropped += 1
                continue
            rays += 1
            hit_counts[end_row, end_col] += 1
            for row, column in trace_cells(clip_to_grid(start, end, self.size), end)[:-1]:
                if self.in_bounds(row, column):
                    free_mask[row, column] = True

        # Hit evidence wins over free evidence from the same update
        free_mask &= hit_counts == 0

        self._states, self._hits = self.policy.merge(self._states, self._hits, free_mask, hit_counts)
        self.update_count += 1
        return UpdateStats(
            rays=rays,
            dropped=dropped,
            free_cells=int(np.count_nonzero(free_mask)),
            hit_cells=int(np.count_nonzero(hit_counts)),
        )
