from __future__ import annotations

import math
import random

from gridmap_sim.robot import Pose
from gridmap_sim.sensors import LidarConfig, LidarSensor
from gridmap_sim.world import World, Obstacle


def test_lidar_hits_simple_wall() -> None:
    world = World(width=10.0, height=10.0, obstacles=[])
    # Vertical wall in front of the robot at x=5
    world.add_obstacle(Obstacle(x=5.0, y=5.0, w=0.1, h=10.0))

    cfg = LidarConfig(num_rays=1, fov_deg=0.0, max_range=10.0, noise_std=0.0)
    lidar = LidarSensor(cfg, random.Random(0))

    pose = Pose.from_xyh(1.0, 5.0, 0.0)
    ranges = lidar.scan(world, pose)
    assert len(ranges) == 1
    assert math.isclose(ranges[0], 3.95, rel_tol=1e-6)

    cloud = lidar.sense(world, pose)
    assert len(cloud) == 1
    assert math.isclose(cloud[0].x, 4.95, rel_tol=1e-6)
    assert math.isclose(cloud[0].y, 5.0, rel_tol=1e-6)


def test_max_range_returns_are_not_hits() -> None:
    world = World(width=10.0, height=10.0)
    pose = Pose.from_xyh(5.0, 5.0, 0.0)

    cfg = LidarConfig(num_rays=8, fov_deg=360.0, max_range=2.0, noise_std=0.0)
    lidar = LidarSensor(cfg, random.Random(0))
    assert len(lidar.sense(world, pose)) == 0

    cfg = LidarConfig(num_rays=8, fov_deg=360.0, max_range=2.0, noise_std=0.0, include_max_range=True)
    lidar = LidarSensor(cfg, random.Random(0))
    cloud = lidar.sense(world, pose)
    assert len(cloud) == 8
    for p in cloud:
        assert math.isclose((p.pos - pose.position).length(), 2.0)


def test_ray_angles_centred_on_heading() -> None:
    cfg = LidarConfig(num_rays=3, fov_deg=90.0, max_range=5.0, noise_std=0.0)
    lidar = LidarSensor(cfg, random.Random(0))
    angles = lidar.ray_angles(1.0)
    assert math.isclose(angles[0], 1.0 - math.pi / 4.0)
    assert math.isclose(angles[1], 1.0)
    assert math.isclose(angles[2], 1.0 + math.pi / 4.0)
