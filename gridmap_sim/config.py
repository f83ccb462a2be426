"""
YAML configuration for the mapping simulator.

Sections of ``configs/sim.yaml`` are turned into the dataclass configs used by
the simulator, with explicit casts so YAML ints and floats can be mixed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional
import os
import random

import yaml

from .controller import Controller
from .geometry import Vector
from .gridmap import GridConfig, GridMap
from .robot import Robot
from .sensors import LidarConfig, LidarSensor
from .world import World
from telemetry.logger import TelemetryLogger


MAPS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "maps")

REQUIRED_SECTIONS = ("sim", "robot", "lidar", "gridmap")


@dataclass(frozen=True)
class SimConfig:
    dt: float
    fps: int
    max_steps: int
    world_width: float
    world_height: float


def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def check_sections(cfg: Dict[str, Any]) -> None:
    missing = [name for name in REQUIRED_SECTIONS if name not in cfg]
    if missing:
        raise KeyError(f"Config is missing sections: {missing}")


def sim_config(cfg: Dict[str, Any]) -> SimConfig:
    sim_cfg = cfg["sim"]
    return SimConfig(
        dt=float(sim_cfg["dt"]),
        fps=int(sim_cfg.get("fps", 30)),
        max_steps=int(sim_cfg.get("max_steps", 0)),
        world_width=float(sim_cfg["world_width"]),
        world_height=float(sim_cfg["world_height"]),
    )


def grid_config(cfg: Dict[str, Any]) -> GridConfig:
    grid_cfg = cfg["gridmap"]
    return GridConfig(
        size=int(grid_cfg["size"]),
        cell_size=float(grid_cfg["cell_size"]),
        anchor=Vector(float(grid_cfg.get("anchor_x", 0.0)), float(grid_cfg.get("anchor_y", 0.0))),
        policy=str(grid_cfg.get("policy", "sticky")),
    )


def lidar_config(cfg: Dict[str, Any]) -> LidarConfig:
    lidar_cfg = cfg["lidar"]
    return LidarConfig(
        num_rays=int(lidar_cfg["num_rays"]),
        fov_deg=float(lidar_cfg["fov_deg"]),
        max_range=float(lidar_cfg["max_range"]),
        noise_std=float(lidar_cfg.get("noise_std", 0.0)),
        include_max_range=bool(lidar_cfg.get("include_max_range", False)),
    )


def build_robot(cfg: Dict[str, Any], rng: random.Random) -> Robot:
    robot_cfg = cfg["robot"]
    return Robot(
        radius=float(robot_cfg["radius"]),
        max_linear_speed=float(robot_cfg["max_linear_speed"]),
        max_angular_speed=float(robot_cfg["max_angular_speed"]),
        linear_accel_limit=float(robot_cfg["linear_accel_limit"]),
        angular_accel_limit=float(robot_cfg["angular_accel_limit"]),
        rng=rng,
    )


def build_world(cfg: Dict[str, Any], map_name: Optional[str] = None) -> World:
    """World from the configured map, or an empty world when none is named."""
    sim = sim_config(cfg)
    map_name = map_name or cfg.get("maps", {}).get("default_map")
    if not map_name:
        return World(width=sim.world_width, height=sim.world_height)
    path = os.path.join(MAPS_DIR, f"{map_name}.json")
    return World.from_map_file(width=sim.world_width, height=sim.world_height, path=path)


def build_controller(
    cfg: Dict[str, Any],
    world: Optional[World] = None,
    telemetry_logger: Optional[TelemetryLogger] = None,
) -> Controller:
    """Wire robot, sensor and grid map from a loaded config dict."""
    check_sections(cfg)
    rng = random.Random(int(cfg.get("seed", 0)))
    world = world if world is not None else build_world(cfg)

    robot = build_robot(cfg, rng)
    robot_cfg = cfg["robot"]
    start_x, start_y, start_heading = world.start
    robot.reset(
        x=float(robot_cfg.get("start_x", start_x)),
        y=float(robot_cfg.get("start_y", start_y)),
        heading=float(robot_cfg.get("start_heading", start_heading)),
        slip_std_linear=float(robot_cfg.get("slip_std_linear", 0.0)),
        slip_std_angular=float(robot_cfg.get("slip_std_angular", 0.0)),
    )

    return Controller(
        robot=robot,
        gridmap=GridMap(grid_config(cfg)),
        sensor=LidarSensor(lidar_config(cfg), rng=rng),
        world=world,
        telemetry_logger=telemetry_logger,
    )
