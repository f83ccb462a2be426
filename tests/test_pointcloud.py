from __future__ import annotations

import math

from gridmap_sim.geometry import Point
from gridmap_sim.pointcloud import PointCloud
from gridmap_sim.robot import Pose


def test_iteration_order_is_stable() -> None:
    cloud = PointCloud.from_xy([(1.0, 2.0), (3.0, 4.0), (1.0, 2.0)])
    first = list(cloud.iter())
    second = list(cloud)
    assert first == second
    assert first == [Point(1.0, 2.0), Point(3.0, 4.0), Point(1.0, 2.0)]
    # Duplicates are kept
    assert len(cloud) == 3
    assert cloud[2] == cloud[0]


def test_transformed_to_world_frame() -> None:
    cloud = PointCloud([Point(1.0, 0.0), Point(0.0, 2.0)])
    world = cloud.transformed(Pose.from_xyh(1.0, 1.0, math.pi / 2.0))
    assert math.isclose(world[0].x, 1.0, abs_tol=1e-12)
    assert math.isclose(world[0].y, 2.0)
    assert math.isclose(world[1].x, -1.0)
    assert math.isclose(world[1].y, 1.0, abs_tol=1e-12)


def test_finite_check_and_serialization() -> None:
    cloud = PointCloud.from_xy([(0.5, -1.0)])
    assert cloud.is_finite()
    assert cloud.to_list() == [[0.5, -1.0]]
    assert not PointCloud.from_xy([(float("nan"), 0.0)]).is_finite()
    assert len(PointCloud()) == 0
