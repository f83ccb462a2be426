"""
Top-level package for the 2D occupancy grid mapping simulator.

Components:
- geometry: Vector, Point, Line value types and angle helpers
- pointcloud: ordered point cloud produced once per sensing cycle
- gridmap: occupancy grid, ray rasterization and occupancy policies
- robot: pose and unicycle kinematics
- world: map, obstacles, collision checking
- sensors: LiDAR model producing ranges and point clouds
- controller: per-tick advance / sense / update cycle
- config: YAML config loading and wiring
- render: pygame-based visualization
"""

from .geometry import Vector, Point, Line
from .pointcloud import PointCloud
from .gridmap import Cell, CellState, GridConfig, GridMap, GridSnapshot
from .robot import Pose, Robot
from .world import World, Obstacle
from .sensors import LidarConfig, LidarSensor
from .controller import Controller, ControllerSnapshot

__all__ = [
    "Vector",
    "Point",
    "Line",
    "PointCloud",
    "Cell",
    "CellState",
    "GridConfig",
    "GridMap",
    "GridSnapshot",
    "Pose",
    "Robot",
    "World",
    "Obstacle",
    "LidarConfig",
    "LidarSensor",
    "Controller",
    "ControllerSnapshot",
]
